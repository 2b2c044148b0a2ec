"""Navigation and footer link collection from the seed page.

This module loads the seed page (the one hard gate of a run), enumerates the
anchors of the primary navigation and footer regions, and turns their hrefs
into the ordered, de-duplicated crawl set that the orchestrator visits.
"""

import logging
from typing import Any, Dict, Optional

from ..capture.driver import (
    DriverError,
    DriverTimeoutError,
    PageDriver,
    WaitCondition,
    query_first_match,
)
from ..models.crawl import CrawlConfig
from ..queue.crawl_set import CrawlSet
from ..utils.scope_matcher import OriginScope, create_scope_from_config
from ..utils.url_normalizer import normalize, URLNormalizationError

logger = logging.getLogger(__name__)


class SeedLoadError(Exception):
    """Raised when the seed page cannot be loaded; aborts the whole run."""

    def __init__(self, url: str, reason: str, status: Optional[int] = None):
        self.url = url
        self.reason = reason
        self.status = status
        super().__init__(f"Seed page {url} failed to load: {reason}")


class LinkCollector:
    """Collects same-origin links from the seed page's navigation and footer.

    Collection order is: seed URL, navigation anchors in DOM order, footer
    anchors in DOM order. Later duplicates are dropped.
    """

    def __init__(
        self,
        driver: PageDriver,
        config: CrawlConfig,
        scope: Optional[OriginScope] = None
    ):
        """Initialize the collector.

        Args:
            driver: Page driver shared with the page auditor
            config: Crawl configuration (selectors and timeouts)
            scope: Origin allowlist used to keep internal links only; built from
                config and the loaded seed page when omitted
        """
        self.driver = driver
        self.config = config
        self.scope = scope
        self._configured_scope = scope

        self._stats = {
            "anchors_seen": 0,
            "anchors_failed": 0,
            "links_excluded": 0,
            "links_deduplicated": 0,
            "urls_collected": 0,
        }

    async def collect(self, seed_url: str) -> CrawlSet:
        """Load the seed page and build the frozen crawl set.

        Args:
            seed_url: URL to start from

        Returns:
            Frozen CrawlSet starting with the seed URL

        Raises:
            SeedLoadError: If the seed page fails to load, returns non-200 or
                lands outside the allowed origins
        """
        await self._load_seed(seed_url)

        try:
            await self.driver.wait_for_idle(self.config.collect_idle_timeout_ms)
        except DriverTimeoutError:
            logger.info("Network idle timeout on seed page, continuing...")

        base_url = self._current_page_url(seed_url)
        self.scope = self._resolve_scope(seed_url, base_url)
        crawl_set = CrawlSet(base_url)

        _, nav_anchors = await query_first_match(self.driver, self.config.nav_link_selectors)
        _, footer_anchors = await query_first_match(self.driver, self.config.footer_link_selectors)

        logger.debug(
            f"Found {len(nav_anchors)} navigation anchors and "
            f"{len(footer_anchors)} footer anchors on {base_url}"
        )

        for anchor in list(nav_anchors) + list(footer_anchors):
            url = await self._extract_link(anchor, base_url)
            if url is not None and not crawl_set.add(url):
                self._stats["links_deduplicated"] += 1

        crawl_set.freeze()
        self._stats["urls_collected"] = len(crawl_set)

        logger.info(f"Found {len(crawl_set)} unique internal links to test.")
        return crawl_set

    async def _load_seed(self, seed_url: str) -> None:
        """Navigate to the seed page; every failure here is fatal."""
        logger.info(f"Loading seed page: {seed_url}")

        try:
            result = await self.driver.navigate(
                seed_url,
                WaitCondition.DOMCONTENTLOADED,
                self.config.seed_timeout_ms
            )
        except DriverError as e:
            raise SeedLoadError(seed_url, str(e)) from e

        if result.status is None:
            raise SeedLoadError(seed_url, "no response received")
        if result.status != 200:
            raise SeedLoadError(seed_url, f"returned {result.status}", status=result.status)

    def _current_page_url(self, seed_url: str) -> str:
        """Normalized URL of the loaded seed page (follows redirects)."""
        for candidate in (self.driver.current_url(), seed_url):
            try:
                return normalize(candidate)
            except URLNormalizationError:
                continue
        raise SeedLoadError(seed_url, "seed URL is not a valid http(s) URL")

    def _resolve_scope(self, seed_url: str, base_url: str) -> OriginScope:
        """Scope of the run, anchored on the seed page as loaded."""
        scope = self._configured_scope or create_scope_from_config(self.config, base_url)
        if not scope.is_in_scope(base_url):
            raise SeedLoadError(
                seed_url,
                f"landed on {base_url}, outside the allowed origins ({', '.join(scope.origins)})"
            )
        return scope

    async def _extract_link(self, anchor: Any, base_url: str) -> Optional[str]:
        """Read and normalize one anchor's href; never raises."""
        self._stats["anchors_seen"] += 1

        try:
            href = await self.driver.get_attribute(anchor, "href")
        except DriverError as e:
            # Stale or detached element
            self._stats["anchors_failed"] += 1
            logger.debug(f"Skipping anchor with unreadable href: {e}")
            return None

        url = self.scope.normalize_link(href, base_url)
        if url is None:
            self._stats["links_excluded"] += 1
            logger.debug(f"Excluded link: {href!r}")
        return url

    def get_stats(self) -> Dict[str, int]:
        """Get collection statistics."""
        return self._stats.copy()
