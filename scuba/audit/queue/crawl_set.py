"""Ordered, de-duplicated set of URLs to audit.

The crawl set is filled once during link collection and frozen before the
visit phase, so links seen while auditing a page never extend the set being
iterated.
"""

import logging
from typing import Dict, Iterable, Iterator, List, Tuple

logger = logging.getLogger(__name__)


class CrawlSetFrozenError(Exception):
    """Raised when adding to a crawl set after collection finished."""
    pass


class CrawlSet:
    """Insertion-ordered URL set with first-occurrence deduplication.

    URLs are compared by string identity; callers are expected to pass
    normalized URLs.
    """

    def __init__(self, seed_url: str):
        """Initialize the set with the seed URL as its first member.

        Args:
            seed_url: Normalized seed URL, always audited first
        """
        # dict preserves insertion order
        self._urls: Dict[str, None] = {seed_url: None}
        self._seed_url = seed_url
        self._frozen = False
        self.duplicates = 0

    def add(self, url: str) -> bool:
        """Add a URL.

        Returns:
            True if the URL was new, False if it was already present

        Raises:
            CrawlSetFrozenError: If the set has been frozen
        """
        if self._frozen:
            raise CrawlSetFrozenError(f"Cannot add {url}: crawl set is frozen")

        if url in self._urls:
            self.duplicates += 1
            logger.debug(f"Duplicate URL ignored: {url}")
            return False

        self._urls[url] = None
        return True

    def update(self, urls: Iterable[str]) -> int:
        """Add several URLs in order; returns how many were new."""
        return sum(1 for url in urls if self.add(url))

    def freeze(self) -> 'CrawlSet':
        """Stop accepting URLs; returns self for chaining."""
        self._frozen = True
        return self

    def limited(self, max_pages: int) -> 'CrawlSet':
        """Return a frozen copy holding at most max_pages URLs (seed always kept)."""
        urls = self.urls[:max(1, max_pages)]
        limited = CrawlSet(urls[0])
        limited.update(urls[1:])
        limited.duplicates = self.duplicates
        return limited.freeze()

    @property
    def seed_url(self) -> str:
        return self._seed_url

    @property
    def is_frozen(self) -> bool:
        return self._frozen

    @property
    def urls(self) -> Tuple[str, ...]:
        """Snapshot of the URLs in iteration order."""
        return tuple(self._urls)

    def __contains__(self, url: object) -> bool:
        return url in self._urls

    def __iter__(self) -> Iterator[str]:
        # Iterate a snapshot so iteration is stable even if the set is unfrozen
        return iter(list(self._urls))

    def __len__(self) -> int:
        return len(self._urls)

    def __repr__(self) -> str:
        return f"CrawlSet(size={len(self)}, frozen={self._frozen})"

    def to_list(self) -> List[str]:
        return list(self._urls)
