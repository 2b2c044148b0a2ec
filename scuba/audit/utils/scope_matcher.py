"""Scope matching for the origin allowlist and special-layout pages.

This module decides which resolved URLs count as internal to the audited
site and which pages are exempt from the shared navbar/footer checks.
"""

import threading
from typing import Iterable, List, Optional

from .url_normalizer import get_origin, get_path, normalize_link, URLNormalizationError


class ScopeMatcherError(Exception):
    """Raised when scope matcher encounters an error."""
    pass


class OriginScope:
    """Thread-safe origin allowlist with special-layout path matching.

    The matcher applies the following logic:
    1. A URL is in scope when its origin is one of the allowed origins
    2. A URL is a special-layout page when its path contains any of the
       configured path substrings
    """

    def __init__(
        self,
        allowed_origins: Iterable[str],
        special_layout_paths: Optional[Iterable[str]] = None
    ):
        """Initialize the scope.

        Args:
            allowed_origins: Origins (or any URLs on them) treated as internal
            special_layout_paths: Path substrings of pages without shared chrome

        Raises:
            ScopeMatcherError: If no valid origin is configured
        """
        self._lock = threading.RLock()

        self._origins: List[str] = []
        for origin in allowed_origins:
            try:
                normalized = get_origin(origin)
            except URLNormalizationError as e:
                raise ScopeMatcherError(f"Invalid origin '{origin}': {e}")
            if normalized not in self._origins:
                self._origins.append(normalized)

        if not self._origins:
            raise ScopeMatcherError("At least one allowed origin is required")

        self._special_paths = [p for p in (special_layout_paths or []) if p]

    @property
    def origins(self) -> List[str]:
        with self._lock:
            return list(self._origins)

    def is_in_scope(self, url: str) -> bool:
        """Check if a URL belongs to one of the allowed origins."""
        try:
            origin = get_origin(url)
        except URLNormalizationError:
            return False

        with self._lock:
            return origin in self._origins

    def is_special_layout(self, url: str) -> bool:
        """Check if a URL's path matches the special-layout allowlist."""
        path = get_path(url)
        with self._lock:
            return any(fragment in path for fragment in self._special_paths)

    def normalize_link(self, href: Optional[str], base_url: str) -> Optional[str]:
        """Resolve an href against base_url, keeping only internal URLs."""
        with self._lock:
            origins = list(self._origins)
        return normalize_link(href, base_url, origins)


def create_scope_from_config(config, seed_url: str) -> OriginScope:
    """Create an OriginScope from a CrawlConfig for a run starting at seed_url.

    Args:
        config: CrawlConfig instance
        seed_url: Seed URL, whose origin is used when no allowlist is configured

    Returns:
        Configured OriginScope instance
    """
    return OriginScope(
        allowed_origins=config.origins_for(seed_url),
        special_layout_paths=config.special_layout_paths,
    )
