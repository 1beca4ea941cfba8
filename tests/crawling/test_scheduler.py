"""Tests for the BFS/DFS frontier schedulers."""

from __future__ import annotations

import threading

import pytest

from crawlgraph.crawling.scheduler import (
    BfsScheduler,
    CrawlMode,
    DfsScheduler,
    FrontierScheduler,
    PageRequest,
    create_scheduler,
)


def _drain(scheduler) -> list[str]:
    urls = []
    while (request := scheduler.dequeue()) is not None:
        urls.append(request.url)
    return urls


class TestCrawlMode:
    """Tests for crawl mode parsing."""

    def test_parse_is_case_insensitive(self) -> None:
        """Test mode parsing ignores case and whitespace."""
        assert CrawlMode.parse("dfs") is CrawlMode.DFS
        assert CrawlMode.parse(" Bfs ") is CrawlMode.BFS

    def test_unknown_value_falls_back_to_bfs(self) -> None:
        """Test unknown modes fall back to BFS."""
        assert CrawlMode.parse("random") is CrawlMode.BFS

    def test_empty_value_is_bfs(self) -> None:
        """Test an empty mode is BFS."""
        assert CrawlMode.parse(None) is CrawlMode.BFS
        assert CrawlMode.parse("") is CrawlMode.BFS

    def test_descriptions(self) -> None:
        """Test mode descriptions."""
        assert "FIFO" in CrawlMode.BFS.description
        assert "LIFO" in CrawlMode.DFS.description

    def test_create_scheduler_matches_mode(self) -> None:
        """Test the scheduler variant matches the mode."""
        assert isinstance(create_scheduler(CrawlMode.BFS), BfsScheduler)
        assert isinstance(create_scheduler(CrawlMode.DFS), DfsScheduler)
        assert create_scheduler(CrawlMode.DFS).mode is CrawlMode.DFS

    def test_base_scheduler_needs_an_ordering(self) -> None:
        """Test the base scheduler cannot be instantiated."""
        with pytest.raises(TypeError):
            FrontierScheduler()


class TestOrdering:
    """Tests for FIFO and LIFO ordering."""

    def test_bfs_returns_requests_in_insertion_order(self) -> None:
        """Test BFS dequeues in insertion order."""
        scheduler = BfsScheduler()
        for name in ("a", "b", "c"):
            scheduler.enqueue(PageRequest(url=f"https://example.com/{name}"))

        assert _drain(scheduler) == [
            "https://example.com/a",
            "https://example.com/b",
            "https://example.com/c",
        ]

    def test_dfs_returns_requests_in_reverse_order(self) -> None:
        """Test DFS dequeues newest first."""
        scheduler = DfsScheduler()
        for name in ("a", "b", "c"):
            scheduler.enqueue(PageRequest(url=f"https://example.com/{name}"))

        assert _drain(scheduler) == [
            "https://example.com/c",
            "https://example.com/b",
            "https://example.com/a",
        ]

    def test_dfs_follows_newest_branch_first(self) -> None:
        """Children queued after a dequeue come out before older siblings."""
        scheduler = DfsScheduler()
        scheduler.enqueue(PageRequest(url="https://example.com/a", depth=1))
        scheduler.enqueue(PageRequest(url="https://example.com/b", depth=1))

        first = scheduler.dequeue()
        scheduler.enqueue(PageRequest(url="https://example.com/b/child", parent_url=first.url, depth=2))

        assert first.url == "https://example.com/b"
        assert scheduler.dequeue().url == "https://example.com/b/child"
        assert scheduler.dequeue().url == "https://example.com/a"

    def test_dequeue_on_empty_returns_none(self) -> None:
        """Test dequeue on an empty scheduler returns None."""
        assert BfsScheduler().dequeue() is None
        assert DfsScheduler().dequeue() is None


class TestDeduplication:
    """Tests for the at-most-once enqueue guarantee."""

    @pytest.mark.parametrize("scheduler_cls", [BfsScheduler, DfsScheduler])
    def test_duplicate_url_is_skipped(self, scheduler_cls) -> None:
        """Test a URL is queued only once."""
        scheduler = scheduler_cls()

        assert scheduler.enqueue(PageRequest(url="https://example.com/x")) is True
        assert scheduler.enqueue(PageRequest(url="https://example.com/x", depth=2)) is False
        assert scheduler.count == 1

    def test_url_stays_known_after_dequeue(self) -> None:
        """Test a dequeued URL cannot be queued again."""
        scheduler = BfsScheduler()
        scheduler.enqueue(PageRequest(url="https://example.com/x"))
        scheduler.dequeue()

        assert scheduler.enqueue(PageRequest(url="https://example.com/x")) is False
        assert scheduler.dequeue() is None

    def test_urls_are_compared_exactly(self) -> None:
        """Trailing slashes are not normalized away."""
        scheduler = BfsScheduler()

        assert scheduler.enqueue(PageRequest(url="https://example.com/docs"))
        assert scheduler.enqueue(PageRequest(url="https://example.com/docs/"))
        assert scheduler.count == 2

    def test_none_request_is_ignored(self) -> None:
        """Test None requests are ignored."""
        scheduler = BfsScheduler()

        assert scheduler.enqueue(None) is False
        assert len(scheduler) == 0

    def test_enqueue_many_counts_accepted(self) -> None:
        """Test enqueue_many counts accepted requests."""
        scheduler = BfsScheduler()
        requests = [PageRequest(url=f"https://example.com/{i % 3}") for i in range(6)]

        assert scheduler.enqueue_many(requests) == 3
        assert scheduler.count == 3

    def test_mark_known_blocks_enqueue(self) -> None:
        """Test mark_known blocks a later enqueue."""
        scheduler = BfsScheduler()
        scheduler.mark_known("https://example.com/seen")

        assert scheduler.is_known("https://example.com/seen")
        assert not scheduler.enqueue(PageRequest(url="https://example.com/seen"))
        assert not scheduler.is_known("")

    def test_concurrent_enqueues_accept_each_url_once(self) -> None:
        """Test concurrent enqueues accept each URL once."""
        scheduler = BfsScheduler()
        accepted = []
        lock = threading.Lock()

        def worker() -> None:
            for i in range(200):
                if scheduler.enqueue(PageRequest(url=f"https://example.com/{i}")):
                    with lock:
                        accepted.append(i)

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert sorted(accepted) == list(range(200))
        assert scheduler.count == 200


class TestClear:
    """Tests for resetting a scheduler between seeds."""

    def test_clear_empties_queue_and_known_set(self) -> None:
        """Test clear drops pending work and known URLs."""
        scheduler = DfsScheduler()
        scheduler.enqueue(PageRequest(url="https://example.com/a"))
        scheduler.enqueue(PageRequest(url="https://example.com/b"))

        scheduler.clear()

        assert scheduler.count == 0
        assert scheduler.dequeue() is None
        assert scheduler.enqueue(PageRequest(url="https://example.com/a")) is True

    def test_count_tracks_pending_requests(self) -> None:
        """Test the pending count."""
        scheduler = BfsScheduler()
        scheduler.enqueue(PageRequest(url="https://example.com/a"))
        scheduler.enqueue(PageRequest(url="https://example.com/b"))
        scheduler.dequeue()

        assert scheduler.count == 1
