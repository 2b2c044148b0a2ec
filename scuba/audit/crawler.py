"""Crawl orchestration: link collection followed by sequential page audits.

This module coordinates the link collector and the page auditor. Collection
runs once against the seed page; the resulting crawl set is then visited
strictly in order, each URL inside an isolated step so that one failing page
is recorded and the run continues with the next.
"""

import logging
from datetime import datetime
from typing import Callable, List, Optional, Tuple

from .capture.driver import PageDriver
from .capture.page_auditor import PageAuditor
from .input.link_collector import LinkCollector, SeedLoadError
from .models.audit import AuditRecord, Report
from .models.crawl import CrawlConfig, CrawlStats
from .queue.crawl_set import CrawlSet
from .utils.scope_matcher import OriginScope
from .utils.url_normalizer import normalize, URLNormalizationError


logger = logging.getLogger(__name__)


class CrawlerError(Exception):
    """Raised when the crawler cannot start a run."""
    pass


RecordCallback = Callable[[AuditRecord], None]


class CrawlOrchestrator:
    """Runs one audit: collect links from the seed, then audit each link.

    Components:
    - LinkCollector for the seed load (hard gate) and link discovery
    - PageAuditor for the per-URL check sequence
    - Report accumulating one record per visited URL
    """

    def __init__(
        self,
        driver: PageDriver,
        config: Optional[CrawlConfig] = None,
        scope: Optional[OriginScope] = None
    ):
        """Initialize the orchestrator.

        Args:
            driver: Page driver reused for the whole run
            config: Crawl configuration (defaults apply when omitted)
            scope: Fixed origin scope; built per run from config and the loaded
                seed page when omitted
        """
        self.driver = driver
        self.config = config or CrawlConfig()
        self.scope = scope

        self._stats = CrawlStats()
        self._callbacks: List[RecordCallback] = []
        self._running = False

    def add_callback(self, callback: RecordCallback) -> None:
        """Add callback to be called for each completed record."""
        self._callbacks.append(callback)

    async def run(self, seed_url: str) -> Report:
        """Collect links from seed_url and audit each of them in order.

        Args:
            seed_url: URL of the seed page

        Returns:
            Closed Report with one record per crawl set URL, in visit order

        Raises:
            SeedLoadError: If the seed page fails to load (the run aborts)
            CrawlerError: If the run cannot be configured or is already running
        """
        if self._running:
            raise CrawlerError("Crawl already in progress")

        try:
            seed_url = normalize(seed_url)
        except URLNormalizationError as e:
            raise CrawlerError(f"Invalid seed URL: {e}") from e

        self._running = True
        self._stats = CrawlStats(start_time=datetime.utcnow())
        report = Report(seed_url=seed_url, started_at=self._stats.start_time)

        logger.info(f"Starting audit run from {seed_url}")

        try:
            crawl_set, scope = await self._collect(seed_url)

            total = len(crawl_set)
            for index, url in enumerate(crawl_set, 1):
                logger.info(f"Auditing [{index}/{total}]: {url}")
                record = await self._audit_step(url, scope, is_seed=(index == 1))
                report.add_record(record)
                self._update_stats(record)
                self._call_callbacks(record)

        finally:
            self._running = False
            self._stats.end_time = datetime.utcnow()

        report.finished_at = self._stats.end_time
        report.close()

        logger.info(
            f"Audit run completed: {report.pass_count} passed, "
            f"{report.fail_count} failed of {len(report)} pages"
        )
        return report

    async def _collect(self, seed_url: str) -> Tuple[CrawlSet, OriginScope]:
        """Run link collection and apply the page limit.

        Returns the crawl set together with the scope the collector settled on.
        """
        collector = LinkCollector(self.driver, self.config, self.scope)
        try:
            crawl_set = await collector.collect(seed_url)
        except SeedLoadError as e:
            logger.error(f"Seed page failed, aborting run: {e}")
            raise

        logger.info(f"Audit scope: {', '.join(collector.scope.origins)}")

        for key, value in collector.get_stats().items():
            setattr(self._stats, key, value)

        if self.config.max_pages and len(crawl_set) > self.config.max_pages:
            logger.warning(
                f"Limiting audit to {self.config.max_pages} of {len(crawl_set)} collected URLs"
            )
            crawl_set = crawl_set.limited(self.config.max_pages)
            self._stats.urls_collected = len(crawl_set)

        return crawl_set, collector.scope

    async def _audit_step(self, url: str, scope: OriginScope, is_seed: bool = False) -> AuditRecord:
        """Audit one URL; any error becomes a FAIL record instead of propagating."""
        auditor = PageAuditor(self.driver, self.config, scope)
        try:
            return await auditor.audit(url, is_seed=is_seed)
        except Exception as e:
            self._stats.urls_errored += 1
            logger.error(f"Failed during visit to {url} ({auditor.current_step}): {e}")
            return AuditRecord.from_exception(url, e)

    def _update_stats(self, record: AuditRecord) -> None:
        self._stats.urls_visited += 1
        if record.passed:
            self._stats.urls_passed += 1
        else:
            self._stats.urls_failed += 1

    def _call_callbacks(self, record: AuditRecord) -> None:
        for callback in self._callbacks:
            try:
                callback(record)
            except Exception as e:
                logger.error(f"Error in crawl record callback: {e}")

    def get_stats(self) -> CrawlStats:
        """Get a copy of the current run statistics."""
        return self._stats.model_copy()

    @property
    def is_running(self) -> bool:
        return self._running

