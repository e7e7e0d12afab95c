"""Stealth Playwright sessions.

Owns browser lifecycle, identity assignment, and automation-signal
suppression.  Adapters receive a :class:`StealthSession` handle and ask
it for pages — they never launch browsers themselves.

A session is configured to look like an ordinary desktop browser:

- user agent, viewport and locale come from :mod:`jobcrawler.adapters.identity`
- Chromium is launched without the ``AutomationControlled`` blink feature
- an init script reports ``navigator.webdriver`` as false, supplies a
  plausible ``navigator.languages`` list, and answers notification
  permission queries with a fixed value
- ``playwright-stealth`` patches are layered on top when ``stealth`` is set
"""

from __future__ import annotations

import json
import random
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from playwright.async_api import Error as PlaywrightError

from jobcrawler.adapters.identity import BrowserIdentity, next_identity
from jobcrawler.errors import ActionableError
from jobcrawler.logging import logger

if TYPE_CHECKING:
    from playwright.async_api import Browser, BrowserContext, Page, Playwright


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

_LAUNCH_ARGS: tuple[str, ...] = (
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-accelerated-2d-canvas",
    "--disable-gpu",
    "--disable-blink-features=AutomationControlled",
    "--no-first-run",
    "--no-default-browser-check",
)

_INIT_SCRIPT_TEMPLATE = """
Object.defineProperty(navigator, 'webdriver', { get: () => false });
Object.defineProperty(navigator, 'languages', { get: () => %(languages)s });
const originalQuery = window.navigator.permissions.query;
window.navigator.permissions.query = (parameters) => (
    parameters.name === 'notifications'
        ? Promise.resolve({ state: Notification.permission })
        : originalQuery(parameters)
);
"""


def build_init_script(identity: BrowserIdentity) -> str:
    """Render the automation-suppression script for *identity*."""
    return _INIT_SCRIPT_TEMPLATE % {"languages": json.dumps(identity.languages)}


@dataclass
class SessionConfig:
    """Browser launch configuration shared by every session of a crawl."""

    headless: bool = True
    stealth: bool = True
    launch_args: list[str] = field(default_factory=lambda: list(_LAUNCH_ARGS))


# ---------------------------------------------------------------------------
# Session handle
# ---------------------------------------------------------------------------


class StealthSession:
    """A browser context configured to minimize automation signals.

    Usage::

        async with StealthSession(SessionConfig(), next_identity()) as session:
            page = await session.new_page()
            ...

    :meth:`close` is idempotent and safe after a partial :meth:`start`.
    """

    def __init__(self, config: SessionConfig, identity: BrowserIdentity) -> None:
        self.config = config
        self.identity = identity
        self._playwright: Playwright | None = None
        self._browser: Browser | None = None
        self._context: BrowserContext | None = None

    @property
    def is_open(self) -> bool:
        return self._context is not None

    async def start(self) -> None:
        """Launch Chromium and build the stealth context."""
        from playwright.async_api import async_playwright

        self._playwright = await async_playwright().start()
        self._browser = await self._playwright.chromium.launch(
            headless=self.config.headless,
            args=list(self.config.launch_args),
        )
        self._context = await self._browser.new_context(
            user_agent=self.identity.user_agent,
            viewport=self.identity.viewport_size(),  # type: ignore[arg-type]
            locale=self.identity.locale,
        )
        await self._context.add_init_script(script=build_init_script(self.identity))

        if self.config.stealth:
            from playwright_stealth import Stealth

            await Stealth().apply_stealth_async(self._context)
            logger.debug("Stealth patches applied")

        logger.info(
            "Stealth session open (%s, %dx%d)",
            self.identity.locale,
            *self.identity.viewport,
        )

    async def new_page(self) -> Page:
        """Create a new page in the session's browser context."""
        if self._context is None:
            msg = "StealthSession not started — use open_session() or 'async with'"
            raise RuntimeError(msg)
        return await self._context.new_page()

    async def close(self) -> None:
        """Release the context, browser and Playwright driver.

        Each handle is cleared before it is closed, so a second call is a
        no-op and a handle that never opened is skipped.
        """
        context, self._context = self._context, None
        browser, self._browser = self._browser, None
        playwright, self._playwright = self._playwright, None

        if context is not None:
            try:
                await context.close()
            except PlaywrightError as exc:
                logger.warning("Browser context did not close cleanly: %s", exc)
        if browser is not None:
            try:
                await browser.close()
            except PlaywrightError as exc:
                logger.warning("Browser did not close cleanly: %s", exc)
        if playwright is not None:
            await playwright.stop()
            logger.info("Stealth session closed")

    async def __aenter__(self) -> StealthSession:
        await _start_or_raise(self)
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        await self.close()


async def _start_or_raise(session: StealthSession) -> None:
    try:
        await session.start()
    except (PlaywrightError, OSError) as exc:
        await session.close()
        raise ActionableError.session_init(str(exc)) from exc


# ---------------------------------------------------------------------------
# Factory
# ---------------------------------------------------------------------------


async def open_session(
    config: SessionConfig,
    identity: BrowserIdentity | None = None,
) -> StealthSession:
    """Open a stealth session or raise :class:`~jobcrawler.errors.SessionInitError`."""
    session = StealthSession(config, identity or next_identity())
    await _start_or_raise(session)
    return session


async def close_session(session: StealthSession) -> None:
    """Tear down *session*; safe to call more than once."""
    await session.close()


class SessionFactory:
    """Opens and closes sessions for the crawl orchestrator.

    Holds the launch config and the RNG used for identity rotation so the
    orchestrator depends on one small, replaceable object.
    """

    def __init__(self, config: SessionConfig | None = None, rng: random.Random | None = None) -> None:
        self.config = config or SessionConfig()
        self._rng = rng

    async def open_session(self) -> StealthSession:
        return await open_session(self.config, next_identity(self._rng))

    async def close_session(self, session: StealthSession) -> None:
        await close_session(session)
