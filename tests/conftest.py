"""Shared test fixtures and configuration for Site Scuba tests."""

import sys
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Union

import pytest

# Add project root to Python path
sys.path.insert(0, str(Path(__file__).parent.parent))

from scuba.audit.capture.driver import (
    DriverError,
    DriverTimeoutError,
    NavigationResult,
    PageDriver,
)
from scuba.audit.models.crawl import CrawlConfig
from scuba.audit.utils.scope_matcher import OriginScope


SEED_URL = "https://www.example.com/"


class FakeElement:
    """In-memory element with attributes, text and visibility."""

    def __init__(
        self,
        attrs: Optional[Dict[str, str]] = None,
        text: str = "",
        visible: bool = True,
        stale: bool = False
    ):
        self.attrs = attrs or {}
        self.text = text
        self.visible = visible
        self.stale = stale

    def __repr__(self) -> str:
        return f"FakeElement({self.attrs!r}, text={self.text!r})"


class FakePage:
    """Scripted page: navigation outcome plus selector -> elements map."""

    def __init__(
        self,
        status: Optional[int] = 200,
        title: str = "",
        elements: Optional[Dict[str, List[FakeElement]]] = None,
        idle_timeout: bool = False,
        navigate_error: Optional[Exception] = None,
        final_url: Optional[str] = None
    ):
        self.status = status
        self.title = title
        self.elements = elements or {}
        self.idle_timeout = idle_timeout
        self.navigate_error = navigate_error
        self.final_url = final_url


class FakeDriver(PageDriver):
    """PageDriver over a dict of scripted pages; unknown URLs return 404."""

    def __init__(self, pages: Dict[str, FakePage]):
        self.pages = pages
        self.current: FakePage = FakePage(status=None)
        self._current_url = "about:blank"
        self.navigations: List[Dict[str, Any]] = []
        self.settle_calls: List[int] = []
        self.idle_calls: List[int] = []

    async def navigate(self, url: str, wait_until: str, timeout_ms: int) -> NavigationResult:
        self.navigations.append({"url": url, "wait_until": wait_until, "timeout_ms": timeout_ms})
        page = self.pages.get(url, FakePage(status=404, title="Not Found"))
        if page.navigate_error is not None:
            raise page.navigate_error
        self.current = page
        self._current_url = page.final_url or url
        return NavigationResult(status=page.status, url=self._current_url)

    async def wait_for_idle(self, timeout_ms: int) -> None:
        self.idle_calls.append(timeout_ms)
        if self.current.idle_timeout:
            raise DriverTimeoutError(f"Timeout {timeout_ms}ms exceeded waiting for networkidle")

    async def settle(self, delay_ms: int) -> None:
        self.settle_calls.append(delay_ms)

    async def query_all(self, selector: str) -> List[Any]:
        return list(self.current.elements.get(selector, []))

    async def get_attribute(self, element: Any, name: str) -> Optional[str]:
        if element.stale:
            raise DriverError("Element is not attached to the DOM")
        return element.attrs.get(name)

    async def get_text(self, element: Any) -> str:
        if element.stale:
            raise DriverError("Element is not attached to the DOM")
        return element.text

    async def is_visible(self, element: Any) -> bool:
        return element.visible

    async def count(self, selector: str) -> int:
        return len(self.current.elements.get(selector, []))

    async def title(self) -> str:
        return self.current.title

    def current_url(self) -> str:
        return self._current_url

    @property
    def visited(self) -> List[str]:
        return [n["url"] for n in self.navigations]


AnchorLike = Union[str, FakeElement]


def _anchors(items: Iterable[AnchorLike]) -> List[FakeElement]:
    return [s if isinstance(s, FakeElement) else FakeElement({"href": s}) for s in items]


def make_page(
    status: Optional[int] = 200,
    title: str = "Example Page",
    h1: Optional[str] = "Welcome",
    description: Optional[str] = "An example page",
    nav: bool = True,
    footer: bool = True,
    body: bool = True,
    nav_links: Iterable[AnchorLike] = (),
    footer_links: Iterable[AnchorLike] = (),
    brand: bool = False,
    **kwargs
) -> FakePage:
    """Build a page using the default landmark selectors."""
    elements: Dict[str, List[FakeElement]] = {}

    if body:
        elements["body > *"] = [FakeElement(text="content")]
    elements["body"] = [FakeElement(text="content" if body else "")]

    if nav:
        elements[".navbar.navbar-expand-lg"] = [FakeElement()]
        elements[".navbar.navbar-expand-lg .nav-link"] = _anchors(nav_links)
    if footer:
        elements["footer.main-footer"] = [FakeElement()]
        elements["footer.main-footer a"] = _anchors(footer_links)
    if brand:
        elements[".navbar-brand img"] = [FakeElement({"alt": "Logo"})]
    if h1 is not None:
        elements["h1"] = [FakeElement(text=h1)]
    if description is not None:
        elements["meta[name='description']"] = [FakeElement({"content": description})]

    return FakePage(status=status, title=title, elements=elements, **kwargs)


@pytest.fixture
def page_factory():
    """Factory building scripted pages with the default markup."""
    return make_page


@pytest.fixture
def element_factory():
    """Factory building single fake elements."""
    return FakeElement


@pytest.fixture
def driver_factory():
    """Factory building a FakeDriver from a URL -> FakePage mapping."""
    return FakeDriver


@pytest.fixture
def crawl_config():
    """Crawl configuration without the settle delay."""
    return CrawlConfig(settle_delay_ms=0)


@pytest.fixture
def scope():
    """Scope for the example.com seed with a special-layout path."""
    return OriginScope([SEED_URL], special_layout_paths=["/landing/"])


@pytest.fixture
def seed_url():
    return SEED_URL


@pytest.fixture
def example_site(page_factory):
    """Seed with /about twice (nav and footer), a mailto link and an external link."""
    return {
        SEED_URL: page_factory(
            title="Home",
            nav_links=["/", "/about", "https://other.example.org/partner"],
            footer_links=["/about", "mailto:info@example.com", "#top"],
        ),
        "https://www.example.com/about": page_factory(title="About"),
    }
