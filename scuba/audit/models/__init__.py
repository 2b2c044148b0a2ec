"""Data models for the audit engine."""

from .audit import (
    ADVISORY_ISSUES,
    ISSUE_POLICY,
    AuditRecord,
    AuditStatus,
    IssueTag,
    Report,
    ReportClosedError,
    is_advisory,
)
from .crawl import CrawlConfig, CrawlStats

__all__ = [
    'ADVISORY_ISSUES',
    'ISSUE_POLICY',
    'AuditRecord',
    'AuditStatus',
    'IssueTag',
    'Report',
    'ReportClosedError',
    'is_advisory',
    'CrawlConfig',
    'CrawlStats',
]
