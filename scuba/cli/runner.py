"""CLI runner for Site Scuba with exit code mapping.

This module runs one audit end to end (browser startup, link collection,
page audits, report output) and maps the outcome to CI/CD-friendly exit
codes.
"""

import logging
import sys
from datetime import datetime
from enum import IntEnum
from typing import Optional

from ..audit.capture.browser_factory import create_browser_factory
from ..audit.capture.driver import PlaywrightPageDriver
from ..audit.crawler import CrawlOrchestrator, CrawlerError
from ..audit.input.link_collector import SeedLoadError
from ..audit.models.audit import Report
from ..audit.models.crawl import CrawlStats
from .config import CLIConfiguration
from .summary import SummaryReporter


class ExitCode(IntEnum):
    """CLI exit codes for CI/CD integration."""
    SUCCESS = 0           # Every audited page passed
    PAGE_FAILURES = 1     # At least one page failed
    SEED_UNREACHABLE = 2  # Seed page did not load, nothing was audited
    CONFIG_ERROR = 3      # Configuration or setup error
    RUNTIME_ERROR = 4     # Runtime error during execution


def configure_logging(verbose: bool = False, quiet: bool = False) -> None:
    """Configure root logging for CLI runs."""
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.WARNING
    else:
        level = logging.INFO

    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        force=True
    )


class CLIRunner:
    """Main CLI runner for Site Scuba audits."""

    def __init__(self, seed_url: str, config: CLIConfiguration):
        self.seed_url = seed_url
        self.config = config
        self.start_time: Optional[datetime] = None
        self.report: Optional[Report] = None
        self.stats: Optional[CrawlStats] = None

        self.summary_reporter = SummaryReporter(
            output_format=config.output.format,
            verbose=config.output.verbose,
            quiet=config.output.quiet
        )

    async def run(self) -> ExitCode:
        """Run the complete audit.

        Returns:
            Exit code based on the audit report
        """
        self.start_time = datetime.utcnow()

        try:
            if not self.config.output.quiet and self.config.output.format == "text":
                self._print_header()

            self.report = await self._run_audit()

        except SeedLoadError as e:
            self._print_error(f"Seed page unreachable: {e}")
            return ExitCode.SEED_UNREACHABLE
        except CrawlerError as e:
            self._print_error(f"Cannot start audit: {e}")
            return ExitCode.CONFIG_ERROR
        except KeyboardInterrupt:
            self._print_error("Operation interrupted by user")
            return ExitCode.RUNTIME_ERROR
        except Exception as e:
            self._print_error(f"Runtime error: {e}")
            if self.config.output.verbose:
                import traceback
                traceback.print_exc()
            return ExitCode.RUNTIME_ERROR

        self._output_results(self.report)
        return self._determine_exit_code(self.report)

    async def _run_audit(self) -> Report:
        """Launch the browser and run the crawl on a single page."""
        factory = create_browser_factory(
            engine=self.config.browser.engine,
            headless=not self.config.browser.headful,
            user_agent=self.config.browser.user_agent,
            ignore_https_errors=self.config.browser.ignore_https_errors,
        )

        async with factory.session() as page:
            orchestrator = CrawlOrchestrator(PlaywrightPageDriver(page), self.config.crawl)

            # Table goes to the file, so show rows as they complete
            if self.config.output.output_file and self.config.output.format == "text":
                orchestrator.add_callback(self.summary_reporter.print_record)

            try:
                return await orchestrator.run(self.seed_url)
            finally:
                self.stats = orchestrator.get_stats()

    def _output_results(self, report: Report) -> None:
        output_file = self.config.output.output_file
        if output_file:
            self.summary_reporter.write_summary_file(report, output_file)
            if not self.config.output.quiet:
                print(f"📄 Report written to {output_file}")
                print(f"{report.pass_count} passed, {report.fail_count} failed")
        else:
            self.summary_reporter.print_summary(report)

        if self.config.output.verbose and self.config.output.format == "text" and self.stats:
            self.summary_reporter.print_stats(self.stats)

    def _determine_exit_code(self, report: Report) -> ExitCode:
        if report.passed:
            return ExitCode.SUCCESS
        return ExitCode.PAGE_FAILURES

    def _print_header(self):
        """Print CLI header."""
        print("🤿 Site Scuba - Website Health & SEO Smoke Audit")
        print("=" * 50)
        print(f"🔍 Seed: {self.seed_url}")

    def _print_error(self, message: str):
        """Print error message to stderr."""
        print(f"❌ ERROR: {message}", file=sys.stderr)
