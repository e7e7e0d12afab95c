"""Crawl orchestrator — sequences adapters across locations in one session.

For each requested location, in order, every configured adapter searches
the same title; results are appended as they arrive, so the output is
grouped by location, then by source, then by discovery order.

The loop is sequential.  Parallel requests to one board from
one apparent client are easy to fingerprint, and a Playwright context is
not meant to be driven from several tasks at once.

Session lifecycle::

    idle -> session_open -> session_closed -> done

The session is opened once before the loop and closed exactly once in a
``finally`` block, so adapter failures, cancellation and timeouts all
release the browser.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING

from jobcrawler.adapters.pacing import Pacer
from jobcrawler.config import PacingConfig
from jobcrawler.errors import ActionableError

if TYPE_CHECKING:
    from collections.abc import Sequence

    from jobcrawler.adapters.base import JobBoardAdapter, ScrapedListing
    from jobcrawler.adapters.session import SessionFactory

logger = logging.getLogger(__name__)


class CrawlState(StrEnum):
    IDLE = "idle"
    SESSION_OPEN = "session_open"
    SESSION_CLOSED = "session_closed"
    DONE = "done"


@dataclass(frozen=True)
class CrawlRequest:
    """What to crawl: one title across an ordered list of locations."""

    title: str
    locations: tuple[str, ...]
    min_salary: float = 0

    def __post_init__(self) -> None:
        if not self.title or not self.title.strip():
            raise ActionableError.validation("title", "job title is required")
        if not self.locations:
            raise ActionableError.validation("locations", "at least one location is required")
        if any(not loc or not loc.strip() for loc in self.locations):
            raise ActionableError.validation("locations", "locations must be non-empty strings")
        if self.min_salary < 0:
            raise ActionableError.validation("min_salary", f"is {self.min_salary} — must be >= 0")

    @classmethod
    def create(
        cls,
        title: str,
        locations: Sequence[str],
        min_salary: float | None = None,
    ) -> CrawlRequest:
        """Build a request from caller input, trimming whitespace."""
        return cls(
            title=title.strip(),
            locations=tuple(loc.strip() for loc in locations),
            min_salary=min_salary or 0,
        )


class CrawlOrchestrator:
    """Runs every adapter over every location of one :class:`CrawlRequest`.

    An instance serves a single request; concurrent crawls each build
    their own orchestrator and therefore their own session.
    """

    def __init__(
        self,
        adapters: Sequence[JobBoardAdapter],
        session_factory: SessionFactory,
        *,
        pacer: Pacer | None = None,
        pacing: PacingConfig | None = None,
    ) -> None:
        self._adapters = list(adapters)
        self._sessions = session_factory
        self._pacer = pacer or Pacer()
        self._pacing = pacing or PacingConfig()
        self.state = CrawlState.IDLE

    async def run(self, request: CrawlRequest) -> list[ScrapedListing]:
        """Crawl all (location, source) pairs and return the aggregated listings.

        Raises :class:`~jobcrawler.errors.SessionInitError` if the browser
        cannot start.  Any other adapter failure, including a raw browser
        error, is classified with
        :meth:`~jobcrawler.errors.ActionableError.from_exception` and counts
        as zero results unless it is a SESSION or CONFIG error, which
        propagates after the session has been closed.
        """
        listings: list[ScrapedListing] = []
        session = await self._sessions.open_session()
        self.state = CrawlState.SESSION_OPEN
        try:
            for loc_index, location in enumerate(request.locations):
                if loc_index:
                    await self._pacer.pause(self._pacing.between_locations, "between locations")

                for src_index, adapter in enumerate(self._adapters):
                    if src_index:
                        await self._pacer.pause(self._pacing.between_sources, "between sources")

                    try:
                        results = await adapter.search(session, request.title, location)
                    except ActionableError as exc:
                        if not exc.is_recoverable:
                            raise
                        self._log_failure(adapter, request, location, exc)
                        results = []
                    except Exception as exc:
                        err = ActionableError.from_exception(exc, adapter.board_name, "search")
                        if not err.is_recoverable:
                            raise err from exc
                        self._log_failure(adapter, request, location, err)
                        results = []
                    listings.extend(results)
        finally:
            await self._sessions.close_session(session)
            self.state = CrawlState.SESSION_CLOSED

        self.state = CrawlState.DONE
        logger.info(
            "Crawl complete: %d listings from %d source(s) across %d location(s)",
            len(listings),
            len(self._adapters),
            len(request.locations),
        )
        return listings

    @staticmethod
    def _log_failure(
        adapter: JobBoardAdapter,
        request: CrawlRequest,
        location: str,
        exc: ActionableError,
    ) -> None:
        logger.warning(
            "%s failed for '%s' in '%s': %s",
            adapter.board_name,
            request.title,
            location,
            exc.error,
        )
