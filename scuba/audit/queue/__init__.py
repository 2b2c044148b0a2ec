"""URL set management for audit runs."""

from .crawl_set import CrawlSet, CrawlSetFrozenError

__all__ = ['CrawlSet', 'CrawlSetFrozenError']
