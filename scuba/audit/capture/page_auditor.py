"""Per-page audit: navigation, stabilization wait and the fixed check sequence.

The PageAuditor drives one navigation of the shared page and evaluates the
rendering and SEO checks against the result. Checks are soft: each one
appends an issue tag to the AuditRecord and never raises. Only navigation
failures and unexpected driver errors leave audit(), to be caught at the
orchestrator's step boundary.
"""

import logging
import time
from typing import Any, Optional, Sequence

from .driver import (
    DriverTimeoutError,
    NavigationResult,
    PageDriver,
    WaitCondition,
    query_first_match,
)
from ..models.audit import AuditRecord, IssueTag
from ..models.crawl import CrawlConfig
from ..utils.scope_matcher import OriginScope

logger = logging.getLogger(__name__)


class AuditStep:
    """States of the per-page audit sequence, in execution order."""
    NAVIGATE = "navigate"
    WAIT_STABLE = "wait_stable"
    CHECK_STATUS = "check_status"
    CHECK_BODY = "check_body"
    CHECK_LAYOUT = "check_layout"
    CHECK_BRAND = "check_brand"
    CHECK_SEO = "check_seo"
    RECORD = "record"


class PageAuditor:
    """Audits a single URL using the shared page driver."""

    H1_SELECTOR = "h1"
    META_DESCRIPTION_SELECTOR = "meta[name='description']"
    BODY_CHILDREN_SELECTOR = "body > *"

    def __init__(self, driver: PageDriver, config: CrawlConfig, scope: OriginScope):
        """Initialize the auditor.

        Args:
            driver: Page driver reused for every URL of the run
            config: Crawl configuration (selectors and timeouts)
            scope: Scope used to recognise special-layout pages
        """
        self.driver = driver
        self.config = config
        self.scope = scope
        self.current_step: Optional[str] = None

    async def audit(self, url: str, is_seed: bool = False) -> AuditRecord:
        """Run the full check sequence against url.

        Args:
            url: Absolute URL to audit
            is_seed: Whether url is the seed page (enables the brand check)

        Returns:
            AuditRecord with the status and issues found

        Raises:
            DriverError: If navigation fails or the driver errors during a check
        """
        started = time.monotonic()
        record = AuditRecord(url=url)

        self.current_step = AuditStep.NAVIGATE
        result = await self._navigate(url)
        record.http_status = result.status

        self.current_step = AuditStep.WAIT_STABLE
        await self._wait_stable(url)

        self.current_step = AuditStep.CHECK_STATUS
        self._check_status(record, result)

        self.current_step = AuditStep.CHECK_BODY
        await self._check_body(record)

        if self.scope.is_special_layout(url):
            logger.debug(f"Special layout page, skipping layout checks: {url}")
        else:
            self.current_step = AuditStep.CHECK_LAYOUT
            await self._check_layout(record)

            if is_seed and self.config.brand_selectors:
                self.current_step = AuditStep.CHECK_BRAND
                await self._check_brand(record)

        self.current_step = AuditStep.CHECK_SEO
        await self._check_seo(record)

        self.current_step = AuditStep.RECORD
        record.duration_ms = (time.monotonic() - started) * 1000

        if record.passed:
            logger.info(f"Audited {url}: PASS")
        else:
            logger.error(f"Audited {url}: FAIL ({', '.join(record.failing_issues)})")

        return record

    async def _navigate(self, url: str) -> NavigationResult:
        """Navigate and wait for the DOM to be parsed."""
        logger.debug(f"Navigating to {url}")
        return await self.driver.navigate(
            url,
            WaitCondition.DOMCONTENTLOADED,
            self.config.navigation_timeout_ms
        )

    async def _wait_stable(self, url: str) -> None:
        """Best-effort network-idle wait followed by a fixed settle delay."""
        try:
            await self.driver.wait_for_idle(self.config.idle_timeout_ms)
        except DriverTimeoutError:
            logger.warning(f"Network idle timeout on {url}, continuing...")

        if self.config.settle_delay_ms > 0:
            try:
                await self.driver.settle(self.config.settle_delay_ms)
            except DriverTimeoutError:
                logger.debug(f"Settle delay interrupted on {url}")

    def _check_status(self, record: AuditRecord, result: NavigationResult) -> None:
        if result.status != 200:
            logger.error(f"Error: {record.url} returned {result.status}")
            record.add_issue(IssueTag.status(result.status))

    async def _check_body(self, record: AuditRecord) -> None:
        """White screen detection: the body needs a child element or text."""
        if await self.driver.count(self.BODY_CHILDREN_SELECTOR) > 0:
            return

        bodies = await self.driver.query_all("body")
        text = await self.driver.get_text(bodies[0]) if bodies else ""
        if not (text or "").strip():
            logger.error(f"White screen detected on {record.url}")
            record.add_issue(IssueTag.EMPTY_BODY)

    async def _check_layout(self, record: AuditRecord) -> None:
        """Navbar and footer landmarks are checked independently."""
        if not await self._landmark_visible(self.config.nav_selectors):
            logger.error(f"Navbar not visible on {record.url}")
            record.add_issue(IssueTag.MISSING_NAVBAR)

        if not await self._landmark_visible(self.config.footer_selectors):
            logger.error(f"Footer not visible on {record.url}")
            record.add_issue(IssueTag.MISSING_FOOTER)

    async def _check_brand(self, record: AuditRecord) -> None:
        if not await self._landmark_visible(self.config.brand_selectors):
            logger.error(f"Brand logo not visible on {record.url}")
            record.add_issue(IssueTag.MISSING_BRAND)

    async def _landmark_visible(self, selectors: Sequence[str]) -> bool:
        """The first element of the first matching candidate must be visible."""
        selector, elements = await query_first_match(self.driver, selectors)
        if not elements:
            return False
        visible = await self.driver.is_visible(elements[0])
        if not visible:
            logger.debug(f"Landmark '{selector}' matched but is not visible")
        return visible

    async def _check_seo(self, record: AuditRecord) -> None:
        """Title (hard), first H1 and meta description (advisory)."""
        title = ((await self.driver.title()) or "").strip()
        record.title = title
        if title:
            logger.info(f"Page Title: {title}")
        else:
            record.add_issue(IssueTag.MISSING_TITLE)

        headings = await self.driver.query_all(self.H1_SELECTOR)
        h1_text = await self._first_text(headings)
        record.h1 = h1_text
        if h1_text:
            logger.info(f"Main H1: {h1_text}")
        else:
            logger.warning(f"Warning: No H1 found on {record.url}")
            record.add_issue(IssueTag.MISSING_H1)

        metas = await self.driver.query_all(self.META_DESCRIPTION_SELECTOR)
        description = None
        if metas:
            description = await self.driver.get_attribute(metas[0], "content")
        description = (description or "").strip()
        record.meta_description = description or None
        if description:
            logger.info(f"Meta Description: {description}")
        else:
            logger.warning(f"Warning: Meta Description not found on {record.url}")
            record.add_issue(IssueTag.MISSING_META_DESC)

    async def _first_text(self, elements: Sequence[Any]) -> Optional[str]:
        if not elements:
            return None
        text = ((await self.driver.get_text(elements[0])) or "").strip()
        return text or None
