"""Browser identity rotation.

Each stealth session gets a user agent, viewport and locale drawn
uniformly at random from fixed pools.  Selection carries no state
between calls; pass a seeded :class:`random.Random` to make it
reproducible.
"""

from __future__ import annotations

import random
from dataclasses import dataclass

USER_AGENTS: tuple[str, ...] = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/123.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/605.1.15 (KHTML, like Gecko) Version/17.4 Safari/605.1.15",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64; rv:125.0) Gecko/20100101 Firefox/125.0",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10.15; rv:125.0) Gecko/20100101 Firefox/125.0",
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36 Edg/124.0.2478.51",
)

VIEWPORTS: tuple[tuple[int, int], ...] = (
    (1920, 1080),
    (1680, 1050),
    (1536, 864),
    (1440, 900),
    (1366, 768),
)

LOCALES: tuple[str, ...] = ("en-US", "en-GB", "en-CA")


@dataclass(frozen=True)
class BrowserIdentity:
    """Fingerprint presented by one browser context."""

    user_agent: str
    viewport: tuple[int, int]
    locale: str

    @property
    def languages(self) -> list[str]:
        """``navigator.languages`` consistent with the locale."""
        primary = self.locale.split("-")[0]
        return [self.locale, primary] if primary != self.locale else [self.locale]

    def viewport_size(self) -> dict[str, int]:
        width, height = self.viewport
        return {"width": width, "height": height}


def next_identity(rng: random.Random | None = None) -> BrowserIdentity:
    """Pick a random identity from the pools."""
    choose = (rng or random).choice
    return BrowserIdentity(
        user_agent=choose(USER_AGENTS),
        viewport=choose(VIEWPORTS),
        locale=choose(LOCALES),
    )
