"""Randomized pacing between automated browser actions.

Every delay the crawler takes goes through a :class:`Pacer` so tests can
swap in a seeded RNG and a fake ``sleep`` that records durations instead
of waiting on the wall clock.
"""

from __future__ import annotations

import asyncio
import random
from typing import TYPE_CHECKING

from jobcrawler.logging import logger

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable


class Pacer:
    """Sleeps for uniformly distributed durations within a (min, max) range."""

    def __init__(
        self,
        rng: random.Random | None = None,
        sleep: Callable[[float], Awaitable[object]] | None = None,
    ) -> None:
        self._rng = rng or random.Random()
        self._sleep = sleep or asyncio.sleep

    async def pause(self, bounds: tuple[float, float], reason: str = "") -> float:
        """Sleep for a random duration within *bounds* seconds.

        Returns the duration slept (useful for assertions).
        """
        lo, hi = bounds
        duration = self._rng.uniform(lo, hi)
        logger.debug("Pacing: sleeping %.2fs %s", duration, reason)
        await self._sleep(duration)
        return duration
