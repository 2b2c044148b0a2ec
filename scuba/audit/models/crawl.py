"""Pydantic models for crawl configuration and run statistics.

This module defines the configuration surface of the auditor (origin
allowlist, landmark selectors, special-layout paths and timeouts) and the
statistics tracked while a run is in progress.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

from ..utils.url_normalizer import get_origin, URLNormalizationError


# Markup conventions of the original target first, generic landmarks after
DEFAULT_NAV_SELECTORS = [
    ".navbar.navbar-expand-lg",
    "header nav",
    "nav",
    "[role='navigation']",
]

DEFAULT_FOOTER_SELECTORS = [
    "footer.main-footer",
    "footer",
    "[role='contentinfo']",
]

DEFAULT_NAV_LINK_SELECTORS = [
    ".navbar.navbar-expand-lg .nav-link",
    "header nav a[href]",
    "nav a[href]",
]

DEFAULT_FOOTER_LINK_SELECTORS = [
    "footer.main-footer a",
    "footer a[href]",
    "[role='contentinfo'] a[href]",
]


class CrawlConfig(BaseModel):
    """Configuration for one audit run.

    Selector lists are ordered candidates: the first selector that matches
    at least one element wins, so several markup revisions of the same site
    can be supported at once.
    """

    # Scope
    allowed_origins: List[str] = Field(
        default_factory=list,
        description="Origins treated as internal (empty = origin of the seed URL)"
    )

    special_layout_paths: List[str] = Field(
        default_factory=list,
        description="URL path substrings of pages rendered without shared navbar/footer"
    )

    max_pages: Optional[int] = Field(
        default=None,
        ge=1,
        le=10000,
        description="Maximum number of pages to audit (None = all collected links)"
    )

    # Landmarks
    nav_selectors: List[str] = Field(
        default_factory=lambda: list(DEFAULT_NAV_SELECTORS),
        description="Candidate selectors for the primary navigation landmark"
    )

    footer_selectors: List[str] = Field(
        default_factory=lambda: list(DEFAULT_FOOTER_SELECTORS),
        description="Candidate selectors for the footer landmark"
    )

    nav_link_selectors: List[str] = Field(
        default_factory=lambda: list(DEFAULT_NAV_LINK_SELECTORS),
        description="Candidate selectors for anchors inside the navigation"
    )

    footer_link_selectors: List[str] = Field(
        default_factory=lambda: list(DEFAULT_FOOTER_LINK_SELECTORS),
        description="Candidate selectors for anchors inside the footer"
    )

    brand_selectors: List[str] = Field(
        default_factory=list,
        description="Candidate selectors for a brand logo checked on the seed page (empty = disabled)"
    )

    # Timeouts
    seed_timeout_ms: int = Field(
        default=60000,
        ge=1000,
        le=300000,
        description="Navigation timeout for the seed page load"
    )

    navigation_timeout_ms: int = Field(
        default=20000,
        ge=1000,
        le=300000,
        description="Navigation timeout for each audited page"
    )

    idle_timeout_ms: int = Field(
        default=10000,
        ge=0,
        le=120000,
        description="Maximum wait for network idle before checks run"
    )

    collect_idle_timeout_ms: int = Field(
        default=5000,
        ge=0,
        le=120000,
        description="Maximum wait for network idle before links are collected"
    )

    settle_delay_ms: int = Field(
        default=2000,
        ge=0,
        le=60000,
        description="Fixed delay after the idle wait for late client-side rendering"
    )

    @field_validator('allowed_origins')
    @classmethod
    def normalize_origins(cls, v):
        """Reduce every configured origin to scheme://host[:port]."""
        origins = []
        for origin in v:
            try:
                normalized = get_origin(origin)
            except URLNormalizationError as e:
                raise ValueError(f"Invalid origin '{origin}': {e}")
            if normalized not in origins:
                origins.append(normalized)
        return origins

    @field_validator(
        'nav_selectors', 'footer_selectors',
        'nav_link_selectors', 'footer_link_selectors', 'brand_selectors'
    )
    @classmethod
    def validate_selectors(cls, v):
        cleaned = [s.strip() for s in v if s and s.strip()]
        if len(cleaned) != len(v):
            raise ValueError("selectors must be non-empty strings")
        return cleaned

    @field_validator('special_layout_paths')
    @classmethod
    def validate_special_paths(cls, v):
        return [p.strip() for p in v if p and p.strip()]

    def origins_for(self, seed_url: str) -> List[str]:
        """Effective origin allowlist for a run starting at seed_url."""
        if self.allowed_origins:
            return list(self.allowed_origins)
        return [get_origin(seed_url)]


class CrawlStats(BaseModel):
    """Statistics tracking for collection and visit progress."""

    # Collection
    anchors_seen: int = Field(default=0, description="Anchors enumerated in nav and footer")
    anchors_failed: int = Field(default=0, description="Anchors whose href could not be read")
    links_excluded: int = Field(default=0, description="Hrefs excluded by scheme or origin")
    links_deduplicated: int = Field(default=0, description="Duplicate URLs filtered out")
    urls_collected: int = Field(default=0, description="Size of the frozen crawl set")

    # Visits
    urls_visited: int = Field(default=0, description="URLs that produced a record")
    urls_passed: int = Field(default=0, description="Records with overall status PASS")
    urls_failed: int = Field(default=0, description="Records with overall status FAIL")
    urls_errored: int = Field(default=0, description="Visits that raised at the step boundary")

    start_time: Optional[datetime] = Field(default=None, description="Run start time")
    end_time: Optional[datetime] = Field(default=None, description="Run end time")

    @property
    def duration(self) -> Optional[float]:
        """Run duration in seconds."""
        if self.start_time and self.end_time:
            return (self.end_time - self.start_time).total_seconds()
        return None

    @property
    def success_rate(self) -> float:
        """Pass rate as percentage."""
        if self.urls_visited == 0:
            return 0.0
        return (self.urls_passed / self.urls_visited) * 100.0

    def export_summary(self) -> Dict[str, Any]:
        """Export a summary for reporting."""
        return {
            "urls_collected": self.urls_collected,
            "urls_visited": self.urls_visited,
            "urls_passed": self.urls_passed,
            "urls_failed": self.urls_failed,
            "urls_errored": self.urls_errored,
            "links_excluded": self.links_excluded,
            "anchors_failed": self.anchors_failed,
            "success_rate": self.success_rate,
            "duration_seconds": self.duration,
        }
