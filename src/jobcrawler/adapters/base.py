"""Shared data contract and abstract base class for job board adapters."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from jobcrawler.adapters.pacing import Pacer
from jobcrawler.errors import ActionableError, ExtractionFieldMissingError
from jobcrawler.logging import logger
from jobcrawler.text import (
    clean_description,
    extract_domain,
    extract_salary_value,
    normalize_location,
)

if TYPE_CHECKING:
    from playwright.async_api import ElementHandle, Page

    from jobcrawler.adapters.session import StealthSession

NO_DESCRIPTION = "No description available"

_INTERSTITIAL_PATHS = ("/authwall", "/checkpoint", "/login")

# Challenge widgets and login forms that replace the result list
_INTERSTITIAL_MARKERS = (
    "iframe[src*='captcha']",
    "iframe[src*='challenges.cloudflare.com']",
    "#challenge-form",
    "form[action*='authwall']",
    "form.login__form",
)

# Result-page titles echo the search query, so these only count on a page without cards
_INTERSTITIAL_TITLES = ("captcha", "security check", "just a moment", "sign in", "sign up", "challenge")


@dataclass(frozen=True)
class ScrapedListing:
    """One job posting as extracted from a board.

    ``title``, ``company``, ``url`` and ``source`` are required; building a
    listing without them raises :class:`ExtractionFieldMissingError` so the
    card is dropped rather than stored half-empty.  ``salary_text`` stays
    raw — use :attr:`annual_salary` for the derived number.
    """

    title: str
    company: str
    location: str
    description: str
    url: str
    source: str
    salary_text: str | None = None
    posted_date: str | None = None

    def __post_init__(self) -> None:
        for name in ("title", "company", "url", "source"):
            if not getattr(self, name):
                raise ActionableError.field_missing(self.source or "unknown", name)

    @property
    def annual_salary(self) -> float | None:
        return extract_salary_value(self.salary_text)

    @property
    def domain(self) -> str:
        return extract_domain(self.url)


@dataclass(frozen=True)
class SelectorContract:
    """CSS selectors one board's result page and detail view must satisfy."""

    card: str
    title: str
    company: str
    location: str
    link: str
    description: str
    salary: str | None = None
    posted_date: str | None = None


@dataclass(frozen=True)
class Timeouts:
    """Bounded waits, in milliseconds."""

    navigation_ms: int = 10_000
    detail_ms: int = 5_000


@dataclass
class CardFields:
    """Raw text read from one result card before detail extraction."""

    title: str
    company: str
    location: str
    link: str
    salary_text: str | None
    title_element: ElementHandle


async def detect_interstitial(page: Page) -> str | None:
    """Return a reason string if *page* is a CAPTCHA or login wall.

    Only the redirect path and challenge markup are checked here; see
    :func:`interstitial_title` for the weaker title heuristic.
    """
    url = page.url.lower()
    for path in _INTERSTITIAL_PATHS:
        if path in url:
            return f"redirected to {path}"
    for marker in _INTERSTITIAL_MARKERS:
        if await page.query_selector(marker) is not None:
            return f"page shows {marker}"
    return None


async def interstitial_title(page: Page) -> str | None:
    """Return a reason string if the title of a card-less *page* reads like a challenge."""
    title = (await page.title()).lower()
    for phrase in _INTERSTITIAL_TITLES:
        if phrase in title:
            return f"interstitial page '{title}'"
    return None


async def _element_text(card: ElementHandle, selector: str | None) -> str | None:
    if selector is None:
        return None
    element = await card.query_selector(selector)
    if element is None:
        return None
    text = (await element.inner_text()).strip()
    return text or None


class JobBoardAdapter(ABC):
    """Strategy interface for job board integration.

    Each adapter owns: the search URL scheme, the selector contract for
    result cards, and detail-page extraction.  The crawl algorithm itself
    lives in :meth:`search` and is shared by every board.

    Adapters borrow the orchestrator's :class:`StealthSession`; they open
    and close their own pages inside it but never the session itself.
    """

    selectors: SelectorContract

    def __init__(
        self,
        *,
        pacer: Pacer | None = None,
        timeouts: Timeouts | None = None,
        max_results: int = 15,
        settle_delay: tuple[float, float] | None = None,
        card_delay: tuple[float, float] | None = None,
    ) -> None:
        self.pacer = pacer or Pacer()
        self.timeouts = timeouts or Timeouts()
        self.max_results = max_results
        self._settle_delay = settle_delay
        self._card_delay = card_delay

    @property
    @abstractmethod
    def board_name(self) -> str:
        """Unique identifier string for this board."""
        ...

    @abstractmethod
    def build_search_url(self, title: str, location: str) -> str:
        """Board-specific search URL for a (title, location) pair."""
        ...

    @abstractmethod
    async def extract_detail(
        self,
        session: StealthSession,
        page: Page,
        card: CardFields,
    ) -> tuple[str, str | None]:
        """Return ``(description, posted_date)`` for one card.

        Implementations return an empty description when the detail view
        does not render in time; they do not raise for that case.
        """
        ...

    @property
    def settle_delay_seconds(self) -> tuple[float, float]:
        """(min, max) seconds to wait after the results page settles."""
        return self._settle_delay or (1.0, 2.0)

    @property
    def card_delay_seconds(self) -> tuple[float, float]:
        """(min, max) seconds to wait between cards."""
        return self._card_delay or (0.5, 1.0)

    # -- crawl algorithm -----------------------------------------------------

    async def search(
        self,
        session: StealthSession,
        title: str,
        location: str,
    ) -> list[ScrapedListing]:
        """Return the listings on the first results page for *title* in *location*.

        Navigation timeouts, browser errors and interstitial pages yield an
        empty list.  Malformed cards are skipped one at a time.
        """
        url = self.build_search_url(title, location)
        logger.info("Searching %s: %s", self.board_name, url)

        page: Page | None = None
        try:
            page = await session.new_page()
            await self.navigate(page, url)
            await self.pacer.pause(self.settle_delay_seconds, f"settle {self.board_name}")

            reason = await detect_interstitial(page)
            if reason:
                logger.warning("%s returned no results: %s", self.board_name, reason)
                return []

            cards = await page.query_selector_all(self.selectors.card)
            if not cards:
                reason = await interstitial_title(page)
                if reason:
                    logger.warning("%s returned no results: %s", self.board_name, reason)
                else:
                    logger.info("No result cards on %s for '%s' in '%s'", self.board_name, title, location)
                return []

            listings: list[ScrapedListing] = []
            for index, card in enumerate(cards[: self.max_results], start=1):
                if index > 1:
                    await self.pacer.pause(self.card_delay_seconds, f"card {index} {self.board_name}")
                listing = await self._extract_card(session, page, card, index)
                if listing is not None:
                    listings.append(listing)

            logger.info(
                "%s: %d listings for '%s' in '%s'",
                self.board_name,
                len(listings),
                title,
                location,
            )
            return listings
        except ActionableError as exc:
            if not exc.is_recoverable:
                raise
            logger.warning("Search failed for %s @ %s: %s", self.board_name, location, exc.error)
            return []
        except PlaywrightError as exc:
            logger.warning("Browser error on %s @ %s: %s", self.board_name, location, exc)
            return []
        finally:
            if page is not None:
                await close_page(page)

    async def navigate(self, page: Page, url: str) -> None:
        """Go to *url* and wait for the network to settle, within the bound."""
        try:
            await page.goto(url, wait_until="networkidle", timeout=self.timeouts.navigation_ms)
        except PlaywrightTimeoutError as exc:
            raise ActionableError.navigation_timeout(
                self.board_name, url, self.timeouts.navigation_ms
            ) from exc

    async def read_card(self, card: ElementHandle) -> CardFields:
        """Read the summary fields of one card.

        Raises :class:`ExtractionFieldMissingError` if title, company,
        location or link is absent.
        """
        sel = self.selectors
        title_element = await card.query_selector(sel.title)
        if title_element is None:
            raise ActionableError.field_missing(self.board_name, "title", selector=sel.title)
        title = (await title_element.inner_text()).strip()
        company = await _element_text(card, sel.company)
        location = await _element_text(card, sel.location)
        link_element = await card.query_selector(sel.link)
        link = await link_element.get_attribute("href") if link_element else None

        for name, value, selector in (
            ("title", title, sel.title),
            ("company", company, sel.company),
            ("location", location, sel.location),
            ("link", link, sel.link),
        ):
            if not value:
                raise ActionableError.field_missing(self.board_name, name, selector=selector)

        return CardFields(
            title=title,
            company=company,  # type: ignore[arg-type]
            location=location,  # type: ignore[arg-type]
            link=self.absolute_url(link),  # type: ignore[arg-type]
            salary_text=await _element_text(card, sel.salary),
            title_element=title_element,
        )

    def absolute_url(self, href: str) -> str:
        """Resolve a card link; boards with relative links override this."""
        return href

    async def _extract_card(
        self,
        session: StealthSession,
        page: Page,
        card: ElementHandle,
        index: int,
    ) -> ScrapedListing | None:
        try:
            fields = await self.read_card(card)
            description, posted_date = await self.extract_detail(session, page, fields)
            return ScrapedListing(
                title=fields.title,
                company=fields.company,
                location=normalize_location(fields.location),
                description=clean_description(description) or NO_DESCRIPTION,
                url=fields.link,
                source=self.board_name,
                salary_text=fields.salary_text,
                posted_date=posted_date,
            )
        except ExtractionFieldMissingError as exc:
            logger.debug("Skipping card %d on %s: %s", index, self.board_name, exc.error)
        except Exception as exc:
            logger.warning("Failed to extract card %d on %s: %s", index, self.board_name, exc)
        return None


async def close_page(page: Page) -> None:
    """Close *page*, tolerating a browser that already went away."""
    try:
        await page.close()
    except PlaywrightError as exc:
        logger.debug("Page already gone: %s", exc)


__all__ = [
    "NO_DESCRIPTION",
    "CardFields",
    "JobBoardAdapter",
    "ScrapedListing",
    "SelectorContract",
    "Timeouts",
    "close_page",
    "detect_interstitial",
    "interstitial_title",
]
