"""Global test configuration — shared fixtures and fakes at the browser boundary.

This conftest provides:

1. **Fake Playwright elements** — ``make_element`` / ``make_card`` /
   ``make_page`` build ``MagicMock``/``AsyncMock`` stand-ins for
   ``ElementHandle`` and ``Page`` that answer ``query_selector`` from a
   selector → text map.  Only browser I/O is mocked; adapters, the
   orchestrator and the store run for real.

2. **Recording pacer** — a :class:`~jobcrawler.adapters.pacing.Pacer`
   whose ``sleep`` records durations instead of waiting, so pacing can
   be asserted without slowing the suite.

3. **Data factories** — ``make_listing`` and a real SQLite
   ``listing_store`` under ``tmp_path``.
"""

from __future__ import annotations

import random
from typing import TYPE_CHECKING, Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from jobcrawler.adapters.base import ScrapedListing
from jobcrawler.adapters.pacing import Pacer
from jobcrawler.storage.store import ListingStore

if TYPE_CHECKING:
    from pathlib import Path


# ---------------------------------------------------------------------------
# Fake Playwright elements
# ---------------------------------------------------------------------------


def make_element(text: str = "", *, href: str | None = None) -> MagicMock:
    """An ElementHandle stand-in with ``inner_text`` / ``get_attribute`` / ``click``."""
    element = MagicMock()
    element.inner_text = AsyncMock(return_value=text)
    element.get_attribute = AsyncMock(return_value=href)
    element.click = AsyncMock()
    return element


def make_card(fields: dict[str, Any]) -> MagicMock:
    """A result card whose ``query_selector`` looks up *fields* by selector.

    Values are either strings (wrapped in :func:`make_element`) or ready
    elements; a selector absent from *fields* returns ``None``.
    """
    elements = {
        selector: value if isinstance(value, MagicMock) else make_element(value)
        for selector, value in fields.items()
    }
    card = MagicMock()
    card.query_selector = AsyncMock(side_effect=lambda selector: elements.get(selector))
    return card


def make_page(
    *,
    cards: list[MagicMock] | None = None,
    url: str = "https://example.org/jobs",
    title: str = "Jobs",
    selectors: dict[str, Any] | None = None,
) -> MagicMock:
    """A Page stand-in: ``goto`` succeeds, cards come from ``query_selector_all``.

    *selectors* answers both ``query_selector`` and ``wait_for_selector``.
    """
    found = {
        selector: value if isinstance(value, MagicMock) else make_element(value)
        for selector, value in (selectors or {}).items()
    }
    page = MagicMock()
    page.url = url
    page.goto = AsyncMock()
    page.title = AsyncMock(return_value=title)
    page.close = AsyncMock()
    page.query_selector_all = AsyncMock(return_value=cards or [])
    page.query_selector = AsyncMock(side_effect=lambda selector: found.get(selector))
    page.wait_for_selector = AsyncMock(
        side_effect=lambda selector, **_: found.get(selector),
    )
    page.wait_for_function = AsyncMock()
    return page


def make_session(*pages: MagicMock) -> MagicMock:
    """A StealthSession stand-in handing out *pages* in order."""
    session = MagicMock()
    session.new_page = AsyncMock(side_effect=list(pages))
    return session


# ---------------------------------------------------------------------------
# Pacing
# ---------------------------------------------------------------------------


class RecordingSleep:
    """Async ``sleep`` replacement that records each requested duration."""

    def __init__(self) -> None:
        self.durations: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.durations.append(seconds)


@pytest.fixture
def recorded_sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def pacer(recorded_sleep: RecordingSleep) -> Pacer:
    """A seeded pacer that never actually waits."""
    return Pacer(rng=random.Random(7), sleep=recorded_sleep)


# ---------------------------------------------------------------------------
# Data factories
# ---------------------------------------------------------------------------


def make_listing(
    url: str = "https://example.org/job/1",
    *,
    title: str = "Senior Software Engineer",
    company: str = "Acme Corp",
    location: str = "Austin, TX",
    description: str = "Build things.",
    source: str = "indeed",
    salary_text: str | None = None,
    posted_date: str | None = None,
) -> ScrapedListing:
    return ScrapedListing(
        title=title,
        company=company,
        location=location,
        description=description,
        url=url,
        source=source,
        salary_text=salary_text,
        posted_date=posted_date,
    )


@pytest.fixture
def listing_store(tmp_path: Path) -> ListingStore:
    """A real SQLite store backed by ``tmp_path``."""
    return ListingStore(tmp_path / "listings.db")
