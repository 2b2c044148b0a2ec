"""Audit engine package for Site Scuba.

This package provides link collection from a seed page's navigation and
footer, the per-page audit sequence and the orchestration that turns them
into a report.
"""

from .crawler import CrawlOrchestrator, CrawlerError
from .input.link_collector import LinkCollector, SeedLoadError
from .capture.page_auditor import PageAuditor
from .models.audit import AuditRecord, AuditStatus, IssueTag, Report
from .models.crawl import CrawlConfig, CrawlStats
from .queue.crawl_set import CrawlSet, CrawlSetFrozenError
from .utils.url_normalizer import normalize, normalize_link, get_origin, strip_origin
from .utils.scope_matcher import OriginScope

__all__ = [
    # Orchestration
    'CrawlOrchestrator',
    'CrawlerError',
    'LinkCollector',
    'SeedLoadError',
    'PageAuditor',

    # Models
    'AuditRecord',
    'AuditStatus',
    'IssueTag',
    'Report',
    'CrawlConfig',
    'CrawlStats',
    'CrawlSet',
    'CrawlSetFrozenError',

    # Utilities
    'normalize',
    'normalize_link',
    'get_origin',
    'strip_origin',
    'OriginScope',
]

__version__ = "0.1.0"
