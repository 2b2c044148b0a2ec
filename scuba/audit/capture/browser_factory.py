"""Playwright browser launch for an audit run.

An audit drives one page from URL to URL, so a run opens exactly one
browser, one context and one page, and tears them down together when the
session ends.
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Dict, Optional

from playwright.async_api import BrowserType, Page, Playwright, async_playwright

logger = logging.getLogger(__name__)


class BrowserEngineType:
    """Supported browser engine types."""
    CHROMIUM = "chromium"
    FIREFOX = "firefox"
    WEBKIT = "webkit"

    ALL = (CHROMIUM, FIREFOX, WEBKIT)


DEFAULT_VIEWPORT = {'width': 1366, 'height': 768}


class BrowserConfig:
    """Launch and context options of the audit browser."""

    def __init__(
        self,
        engine: str = BrowserEngineType.CHROMIUM,
        headless: bool = True,
        user_agent: Optional[str] = None,
        ignore_https_errors: bool = False,
    ):
        if engine not in BrowserEngineType.ALL:
            raise ValueError(f"Unsupported browser engine: {engine}")

        self.engine = engine
        self.headless = headless
        self.user_agent = user_agent
        self.ignore_https_errors = ignore_https_errors

    def to_launch_options(self) -> Dict[str, Any]:
        return {'headless': self.headless}

    def to_context_options(self) -> Dict[str, Any]:
        """Options for the single browser context of a run."""
        options: Dict[str, Any] = {'viewport': dict(DEFAULT_VIEWPORT)}

        if self.user_agent:
            options['user_agent'] = self.user_agent

        if self.ignore_https_errors:
            options['ignore_https_errors'] = True

        return options


class BrowserFactory:
    """Opens the page an audit run navigates."""

    def __init__(self, config: Optional[BrowserConfig] = None):
        self.config = config or BrowserConfig()

    def _browser_type(self, playwright: Playwright) -> BrowserType:
        return getattr(playwright, self.config.engine)

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[Page, None]:
        """Launch the browser and yield a fresh page.

        Yields:
            Page in a new context; browser, context and page are closed on exit
        """
        logger.info(f"Launching {self.config.engine} browser (headless={self.config.headless})")

        async with async_playwright() as playwright:
            browser = await self._browser_type(playwright).launch(**self.config.to_launch_options())
            try:
                context = await browser.new_context(**self.config.to_context_options())
                yield await context.new_page()
            finally:
                await browser.close()
                logger.info("Browser closed")


def create_browser_factory(
    engine: str = BrowserEngineType.CHROMIUM,
    headless: bool = True,
    **kwargs
) -> BrowserFactory:
    """Create a browser factory with simple configuration.

    Args:
        engine: Browser engine to use
        headless: Run in headless mode
        **kwargs: Additional BrowserConfig options

    Returns:
        Configured BrowserFactory instance
    """
    config = BrowserConfig(engine=engine, headless=headless, **kwargs)
    return BrowserFactory(config)
