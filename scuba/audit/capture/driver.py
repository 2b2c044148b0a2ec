"""Page driver interface and its Playwright implementation.

The audit engine never talks to the browser directly. It consumes the small
PageDriver interface defined here: navigation, load-state waits, element
queries and attribute/text/visibility reads. PlaywrightPageDriver adapts a
Playwright Page to that interface and maps Playwright errors onto
DriverTimeoutError and DriverError.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Any, List, Optional, Sequence, Tuple

from pydantic import BaseModel, Field
from playwright.async_api import (
    Error as PlaywrightError,
    Page,
    TimeoutError as PlaywrightTimeoutError,
)

logger = logging.getLogger(__name__)


class DriverError(Exception):
    """Raised when the browser driver fails an operation."""
    pass


class DriverTimeoutError(DriverError):
    """Raised when a bounded driver operation times out."""
    pass


class WaitCondition:
    """Navigation wait conditions understood by drivers."""
    DOMCONTENTLOADED = "domcontentloaded"
    NETWORKIDLE = "networkidle"


class NavigationResult(BaseModel):
    """Outcome of a navigation request."""

    status: Optional[int] = Field(
        default=None,
        description="HTTP status of the main document response (None if no response)"
    )
    url: Optional[str] = Field(
        default=None,
        description="Final URL after redirects"
    )


class PageDriver(ABC):
    """Browser operations consumed by the link collector and page auditor."""

    @abstractmethod
    async def navigate(self, url: str, wait_until: str, timeout_ms: int) -> NavigationResult:
        """Navigate to url and wait for the given condition."""

    @abstractmethod
    async def wait_for_idle(self, timeout_ms: int) -> None:
        """Wait for network-idle quiescence; raises DriverTimeoutError on timeout."""

    @abstractmethod
    async def settle(self, delay_ms: int) -> None:
        """Pause for a fixed delay."""

    @abstractmethod
    async def query_all(self, selector: str) -> List[Any]:
        """Return all elements matching selector, in document order."""

    @abstractmethod
    async def get_attribute(self, element: Any, name: str) -> Optional[str]:
        """Read an attribute from an element (None when absent)."""

    @abstractmethod
    async def get_text(self, element: Any) -> str:
        """Read the rendered text of an element."""

    @abstractmethod
    async def is_visible(self, element: Any) -> bool:
        """Check whether an element is visible."""

    @abstractmethod
    async def count(self, selector: str) -> int:
        """Count elements matching selector."""

    @abstractmethod
    async def title(self) -> str:
        """Return the document title."""

    @abstractmethod
    def current_url(self) -> str:
        """Return the URL currently loaded."""


class PlaywrightPageDriver(PageDriver):
    """PageDriver backed by a Playwright async Page."""

    def __init__(self, page: Page):
        """Initialize the driver.

        Args:
            page: Playwright page reused for every navigation of the run
        """
        self.page = page

    async def navigate(self, url: str, wait_until: str, timeout_ms: int) -> NavigationResult:
        try:
            response = await self.page.goto(url, wait_until=wait_until, timeout=timeout_ms)
        except PlaywrightTimeoutError as e:
            raise DriverTimeoutError(f"Navigation to {url} timed out after {timeout_ms}ms") from e
        except PlaywrightError as e:
            raise DriverError(f"Navigation to {url} failed: {e.message}") from e

        if response is None:
            logger.debug(f"No response for navigation to {url}")
            return NavigationResult(status=None, url=self.page.url)

        return NavigationResult(status=response.status, url=response.url)

    async def wait_for_idle(self, timeout_ms: int) -> None:
        try:
            await self.page.wait_for_load_state(WaitCondition.NETWORKIDLE, timeout=timeout_ms)
        except PlaywrightTimeoutError as e:
            raise DriverTimeoutError(f"Network idle not reached within {timeout_ms}ms") from e
        except PlaywrightError as e:
            raise DriverError(str(e)) from e

    async def settle(self, delay_ms: int) -> None:
        if delay_ms > 0:
            await asyncio.sleep(delay_ms / 1000)

    async def query_all(self, selector: str) -> List[Any]:
        try:
            return await self.page.locator(selector).all()
        except PlaywrightError as e:
            raise DriverError(f"Query '{selector}' failed: {e.message}") from e

    async def get_attribute(self, element: Any, name: str) -> Optional[str]:
        try:
            return await element.get_attribute(name, timeout=1000)
        except PlaywrightTimeoutError as e:
            raise DriverTimeoutError(f"Reading attribute '{name}' timed out") from e
        except PlaywrightError as e:
            raise DriverError(f"Reading attribute '{name}' failed: {e.message}") from e

    async def get_text(self, element: Any) -> str:
        try:
            return await element.inner_text(timeout=5000)
        except PlaywrightTimeoutError as e:
            raise DriverTimeoutError("Reading element text timed out") from e
        except PlaywrightError as e:
            raise DriverError(f"Reading element text failed: {e.message}") from e

    async def is_visible(self, element: Any) -> bool:
        try:
            return await element.is_visible()
        except PlaywrightError as e:
            raise DriverError(f"Visibility check failed: {e.message}") from e

    async def count(self, selector: str) -> int:
        try:
            return await self.page.locator(selector).count()
        except PlaywrightError as e:
            raise DriverError(f"Count '{selector}' failed: {e.message}") from e

    async def title(self) -> str:
        try:
            return await self.page.title()
        except PlaywrightError as e:
            raise DriverError(f"Reading title failed: {e.message}") from e

    def current_url(self) -> str:
        return self.page.url


async def query_first_match(
    driver: PageDriver,
    selectors: Sequence[str]
) -> Tuple[Optional[str], List[Any]]:
    """Try candidate selectors in order and return the first non-empty match.

    A selector the driver rejects is logged and skipped.

    Returns:
        Tuple of (matching selector, elements); (None, []) if nothing matched
    """
    for selector in selectors:
        try:
            elements = await driver.query_all(selector)
        except DriverError as e:
            logger.warning(f"Selector '{selector}' could not be queried: {e}")
            continue
        if elements:
            return selector, elements
    return None, []
