"""Browser capture layer: driver interface, browser lifecycle and page audits."""

from .browser_factory import BrowserConfig, BrowserEngineType, BrowserFactory, create_browser_factory
from .driver import (
    DriverError,
    DriverTimeoutError,
    NavigationResult,
    PageDriver,
    PlaywrightPageDriver,
    WaitCondition,
    query_first_match,
)
from .page_auditor import AuditStep, PageAuditor

__all__ = [
    # Browser lifecycle
    'BrowserConfig',
    'BrowserEngineType',
    'BrowserFactory',
    'create_browser_factory',

    # Driver
    'DriverError',
    'DriverTimeoutError',
    'NavigationResult',
    'PageDriver',
    'PlaywrightPageDriver',
    'WaitCondition',
    'query_first_match',

    # Auditing
    'AuditStep',
    'PageAuditor',
]
