"""Report rendering and summary output for CLI operations.

This module turns a finished Report into a human-readable table (one row
per audited URL, in visit order) or a machine-readable JSON/YAML document.
Rendering is pure: records are read, never modified.
"""

import json
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, TextIO

import yaml

from ..audit.models.audit import AuditRecord, AuditStatus, Report
from ..audit.models.crawl import CrawlStats
from ..audit.utils.url_normalizer import strip_origin


STATUS_GLYPHS = {
    AuditStatus.PASS: "✅",
    AuditStatus.FAIL: "❌",
}

NO_ISSUES = "none"


class ReportAggregator:
    """Formats a Report into text, JSON or YAML."""

    def __init__(self, format_type: str = "text", verbose: bool = False):
        self.format_type = format_type.lower()
        self.verbose = verbose

    def render(self, report: Report) -> str:
        """Render report in the configured format."""
        if self.format_type == "json":
            return json.dumps(self.to_dict(report), indent=2, default=str)
        elif self.format_type == "yaml":
            return yaml.safe_dump(self.to_dict(report), default_flow_style=False, sort_keys=False)
        else:
            return self._format_text(report)

    def format_row(self, record: AuditRecord, origins: Optional[List[str]] = None) -> List[str]:
        """Columns of one table row: glyph, display URL, issues."""
        glyph = STATUS_GLYPHS[record.overall_status]
        display_url = strip_origin(record.url, origins or ())
        issues = ", ".join(record.issues) if record.issues else NO_ISSUES
        return [glyph, display_url, issues]

    def to_dict(self, report: Report) -> Dict[str, Any]:
        """Structured representation used by the JSON and YAML formats."""
        return {
            "summary": {
                "seed_url": report.seed_url,
                "started_at": report.started_at.isoformat() if report.started_at else None,
                "finished_at": report.finished_at.isoformat() if report.finished_at else None,
                "duration_seconds": report.duration_seconds,
                "total_pages": len(report),
                "passed": report.pass_count,
                "failed": report.fail_count,
                "overall_status": AuditStatus.PASS.value if report.passed else AuditStatus.FAIL.value,
            },
            "pages": [record.to_dict() for record in report.records],
        }

    def _format_text(self, report: Report) -> str:
        """Format report as a human-readable table."""
        lines = []

        lines.append("🤿 SITE SCUBA AUDIT REPORT")
        lines.append("=" * 50)
        lines.append(f"Seed: {report.seed_url}")
        lines.append(f"Duration: {report.duration_seconds:.1f} seconds")
        lines.append("")

        rows = [self.format_row(record) for record in report.records]
        url_width = max([len("URL")] + [len(row[1]) for row in rows])

        lines.append(f"{'':2}  {'URL'.ljust(url_width)}  ISSUES")
        lines.append("-" * (url_width + 12))
        for glyph, display_url, issues in rows:
            lines.append(f"{glyph}  {display_url.ljust(url_width)}  {issues}")

        if not rows:
            lines.append("(no pages audited)")

        lines.append("")

        if self.verbose:
            lines.extend(self._format_details(report))

        lines.append(f"{len(report)} pages: {report.pass_count} passed, {report.fail_count} failed")

        if report.passed:
            lines.append("✅ ALL PAGES PASSED")
        else:
            lines.append("❌ FAILURES DETECTED")

        return "\n".join(lines)

    def _format_details(self, report: Report) -> List[str]:
        """Per-page captured signals, shown in verbose mode."""
        lines = ["📋 PAGE DETAILS", "-" * 20]
        for record in report.records:
            lines.append(f"• {record.url}")
            lines.append(f"   Status: {record.http_status if record.http_status is not None else 'n/a'}")
            if record.title:
                lines.append(f"   Title: {record.title}")
            if record.h1:
                lines.append(f"   H1: {record.h1}")
            if record.meta_description:
                lines.append(f"   Meta Description: {record.meta_description}")
            if record.duration_ms is not None:
                lines.append(f"   Duration: {record.duration_ms / 1000:.1f}s")
        lines.append("")
        return lines


class SummaryReporter:
    """Prints and writes the rendered report."""

    def __init__(self, output_format: str = "text", verbose: bool = False, quiet: bool = False):
        self.aggregator = ReportAggregator(output_format, verbose)
        self.quiet = quiet
        self.output_files: List[Path] = []

    def generate_summary(self, report: Report) -> str:
        return self.aggregator.render(report)

    def print_summary(self, report: Report, output_stream: Optional[TextIO] = None):
        """Print summary to output stream (stdout by default)."""
        if self.quiet:
            return
        print(self.generate_summary(report), file=output_stream or sys.stdout)

    def print_record(self, record: AuditRecord, output_stream: Optional[TextIO] = None):
        """Print a single row as soon as a page is audited."""
        if self.quiet:
            return
        glyph, display_url, issues = self.aggregator.format_row(record)
        print(f"{glyph}  {display_url}  {issues}", file=output_stream or sys.stdout)

    def print_stats(self, stats: CrawlStats, output_stream: Optional[TextIO] = None):
        """Print collection and visit counters of the finished run."""
        if self.quiet:
            return
        stream = output_stream or sys.stdout
        print("📊 CRAWL STATISTICS", file=stream)
        for key, value in stats.export_summary().items():
            if value is None:
                value = "n/a"
            elif isinstance(value, float):
                value = f"{value:.1f}"
            print(f"   {key.replace('_', ' ').capitalize()}: {value}", file=stream)

    def write_summary_file(self, report: Report, file_path: Path):
        """Write summary to file."""
        file_path.parent.mkdir(parents=True, exist_ok=True)
        file_path.write_text(self.generate_summary(report), encoding='utf-8')
        self.output_files.append(file_path)
