"""LinkedIn adapter — guest job search, detail pages opened in a second tab.

The public (logged-out) job search lists cards with absolute links to
each posting.  The description and the "posted N days ago" text live on
the posting page, which is opened in its own page of the same session
and closed again before the next card.

When LinkedIn decides the visitor is a bot it redirects to ``/authwall``;
:func:`~jobcrawler.adapters.base.detect_interstitial` turns that into an
empty result set for the location.
"""

from __future__ import annotations

from typing import TYPE_CHECKING
from urllib.parse import quote

from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from jobcrawler.adapters.base import CardFields, JobBoardAdapter, SelectorContract, close_page
from jobcrawler.adapters.registry import AdapterRegistry
from jobcrawler.errors import NavigationTimeoutError
from jobcrawler.logging import logger

if TYPE_CHECKING:
    from playwright.async_api import Page

    from jobcrawler.adapters.session import StealthSession


@AdapterRegistry.register
class LinkedInAdapter(JobBoardAdapter):
    """Browser automation adapter for LinkedIn's guest job search."""

    selectors = SelectorContract(
        card=".jobs-search__results-list > li",
        title=".base-search-card__title",
        company=".base-search-card__subtitle",
        location=".job-search-card__location",
        link=".base-card__full-link",
        description=".show-more-less-html__markup",
        salary=".job-search-card__salary-info",
        posted_date=".posted-time-ago__text",
    )

    @property
    def board_name(self) -> str:
        return "linkedin"

    def build_search_url(self, title: str, location: str) -> str:
        keywords = "%20".join(quote(word, safe="") for word in title.split())
        place = "%20".join(quote(word, safe="") for word in location.split())
        return f"https://www.linkedin.com/jobs/search/?keywords={keywords}&location={place}"

    async def extract_detail(
        self,
        session: StealthSession,
        page: Page,
        card: CardFields,
    ) -> tuple[str, str | None]:
        detail = await session.new_page()
        try:
            try:
                await self.navigate(detail, card.link)
            except NavigationTimeoutError as exc:
                logger.debug("%s", exc.error)
                return "", None
            try:
                markup = await detail.wait_for_selector(
                    self.selectors.description,
                    timeout=self.timeouts.detail_ms,
                )
            except PlaywrightTimeoutError:
                logger.debug("Description timed out for %s", card.link)
                markup = None
            description = (await markup.inner_text()).strip() if markup else ""

            posted_date = None
            if self.selectors.posted_date:
                posted = await detail.query_selector(self.selectors.posted_date)
                if posted is not None:
                    posted_date = (await posted.inner_text()).strip() or None
            return description, posted_date
        finally:
            await close_page(detail)
