"""Indeed adapter — search URL scheme, card selectors, side-panel JD extraction.

Indeed renders the selected job's description in a side panel next to
the result list.  Clicking a card title swaps the panel contents, so the
adapter stays on the results page instead of opening every posting.
"""

from __future__ import annotations

from typing import TYPE_CHECKING
from urllib.parse import urljoin

from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from jobcrawler.adapters.base import CardFields, JobBoardAdapter, SelectorContract
from jobcrawler.adapters.registry import AdapterRegistry
from jobcrawler.logging import logger

if TYPE_CHECKING:
    from playwright.async_api import Page

    from jobcrawler.adapters.session import StealthSession

_BASE_URL = "https://www.indeed.com"

# True once the description panel no longer shows the previous card's text
_PANEL_CHANGED = """([selector, previous]) => {
    const panel = document.querySelector(selector);
    return panel !== null && panel.innerText.trim() !== previous;
}"""


@AdapterRegistry.register
class IndeedAdapter(JobBoardAdapter):
    """Browser automation adapter for Indeed.

    Indeed is a high-volume board with aggressive bot detection;
    card markup varies between the legacy and "mosaic" layouts, so
    each selector lists both.
    """

    selectors = SelectorContract(
        card=".jobsearch-ResultsList > .result, #mosaic-provider-jobcards .job_seen_beacon",
        title=".jobTitle",
        company=".companyName, [data-testid='company-name']",
        location=".companyLocation, [data-testid='text-location']",
        link="a.jcs-JobTitle",
        description=".jobsearch-JobComponent-description, #jobDescriptionText",
        salary=".salary-snippet, .salary-snippet-container",
    )

    # Page and panel text of the last card read, to spot a panel not yet swapped
    _last_read: tuple[Page, str] | None = None

    @property
    def board_name(self) -> str:
        return "indeed"

    def build_search_url(self, title: str, location: str) -> str:
        q = "+".join(title.split())
        loc = "+".join(location.split())
        return f"{_BASE_URL}/jobs?q={q}&l={loc}"

    def absolute_url(self, href: str) -> str:
        return urljoin(_BASE_URL, href)

    async def extract_detail(
        self,
        session: StealthSession,
        page: Page,
        card: CardFields,
    ) -> tuple[str, str | None]:
        """Click the card and read the side panel; Indeed shows no posted date here.

        Right after the click the panel may still show the card read before
        it, so when the panel holds that text the adapter waits for it to
        change.
        """
        previous = await self._panel_text(page)
        last = self._last_read
        stale = bool(previous) and last is not None and last[0] is page and last[1] == previous
        try:
            await card.title_element.click(timeout=self.timeouts.detail_ms)
            if stale:
                await page.wait_for_function(
                    _PANEL_CHANGED,
                    arg=[self.selectors.description, previous],
                    timeout=self.timeouts.detail_ms,
                )
            panel = await page.wait_for_selector(
                self.selectors.description,
                timeout=self.timeouts.detail_ms,
            )
        except PlaywrightTimeoutError:
            logger.debug("Description panel timed out for %s", card.link)
            return "", None
        if panel is None:
            return "", None
        text = (await panel.inner_text()).strip()
        self._last_read = (page, text)
        return text, None

    async def _panel_text(self, page: Page) -> str:
        panel = await page.query_selector(self.selectors.description)
        if panel is None:
            return ""
        return (await panel.inner_text()).strip()
