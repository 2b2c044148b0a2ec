"""Unit tests for the crawl set."""

import pytest

from scuba.audit.queue.crawl_set import CrawlSet, CrawlSetFrozenError


SEED = "https://www.example.com/"


class TestCrawlSet:
    """Tests for CrawlSet ordering and deduplication."""

    def test_seed_is_first(self):
        crawl_set = CrawlSet(SEED)

        assert len(crawl_set) == 1
        assert crawl_set.seed_url == SEED
        assert crawl_set.urls == (SEED,)
        assert SEED in crawl_set

    def test_insertion_order_preserved(self):
        crawl_set = CrawlSet(SEED)
        crawl_set.add("https://www.example.com/b")
        crawl_set.add("https://www.example.com/a")
        crawl_set.add("https://www.example.com/c")

        assert list(crawl_set) == [
            SEED,
            "https://www.example.com/b",
            "https://www.example.com/a",
            "https://www.example.com/c",
        ]

    def test_first_occurrence_wins(self):
        """Duplicates are ignored and counted."""
        crawl_set = CrawlSet(SEED)

        assert crawl_set.add("https://www.example.com/about") is True
        assert crawl_set.add("https://www.example.com/contact") is True
        assert crawl_set.add("https://www.example.com/about") is False
        assert crawl_set.add(SEED) is False

        assert crawl_set.to_list() == [
            SEED,
            "https://www.example.com/about",
            "https://www.example.com/contact",
        ]
        assert crawl_set.duplicates == 2

    def test_update_returns_new_count(self):
        crawl_set = CrawlSet(SEED)
        added = crawl_set.update([
            "https://www.example.com/a",
            "https://www.example.com/a",
            "https://www.example.com/b",
        ])

        assert added == 2
        assert len(crawl_set) == 3

    def test_frozen_set_rejects_adds(self):
        crawl_set = CrawlSet(SEED).freeze()

        assert crawl_set.is_frozen
        with pytest.raises(CrawlSetFrozenError):
            crawl_set.add("https://www.example.com/late")
        assert len(crawl_set) == 1

    def test_limited_keeps_seed_and_order(self):
        crawl_set = CrawlSet(SEED)
        crawl_set.update([f"https://www.example.com/p{i}" for i in range(5)])
        crawl_set.freeze()

        limited = crawl_set.limited(3)

        assert limited.urls == (SEED, "https://www.example.com/p0", "https://www.example.com/p1")
        assert limited.is_frozen
        # Original untouched
        assert len(crawl_set) == 6

    def test_limited_never_drops_seed(self):
        crawl_set = CrawlSet(SEED)
        crawl_set.add("https://www.example.com/x")

        assert crawl_set.limited(0).urls == (SEED,)

    def test_repr(self):
        assert repr(CrawlSet(SEED)) == "CrawlSet(size=1, frozen=False)"
