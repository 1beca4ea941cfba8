"""Frontier scheduling for a single crawl session.

A scheduler is the work list handed to the fetch engine. It holds the pending
page requests and the set of URLs already seen, so a URL is queued at most
once per session no matter how many pages link to it.

Two orderings are provided:

- :class:`BfsScheduler` - FIFO queue, explores the site level by level.
- :class:`DfsScheduler` - LIFO stack, follows one branch as deep as the depth
  limit allows before backtracking.

Fetch workers call into the same scheduler from several threads; each public
method takes the scheduler's single lock.
"""

from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod
from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Deque, Iterable, Set

logger = logging.getLogger(__name__)


class CrawlMode(str, Enum):
    """Traversal strategy for the crawl frontier."""

    BFS = "BFS"
    DFS = "DFS"

    @classmethod
    def parse(cls, value: str | None) -> "CrawlMode":
        """Parse a mode name case-insensitively, defaulting to BFS."""
        if not value:
            return cls.BFS
        try:
            return cls(value.strip().upper())
        except ValueError:
            logger.warning("Unknown crawl mode %r, falling back to BFS", value)
            return cls.BFS

    @property
    def description(self) -> str:
        if self is CrawlMode.BFS:
            return "Breadth-First Search - FIFO queue"
        return "Depth-First Search - LIFO stack"


@dataclass(frozen=True)
class PageRequest:
    """A page waiting to be fetched.

    Attributes:
        url: Absolute URL of the page.
        parent_url: URL of the page that linked here, None for a seed.
        depth: Link distance from the seed (seed = 0).
    """

    url: str
    parent_url: str | None = None
    depth: int = 0


class FrontierScheduler(ABC):
    """Deduplicating, thread-safe work list.

    Subclasses decide which end of the pending deque :meth:`dequeue` pops.
    """

    mode: CrawlMode

    def __init__(self) -> None:
        self._pending: Deque[PageRequest] = deque()
        self._known: Set[str] = set()
        self._lock = threading.Lock()

    @property
    def count(self) -> int:
        """Number of requests enqueued and not yet dequeued."""
        with self._lock:
            return len(self._pending)

    def __len__(self) -> int:
        return self.count

    def enqueue(self, request: PageRequest | None) -> bool:
        """Queue a request unless its URL has been seen before.

        Returns:
            True if the request was queued, False if it was skipped.
        """
        if request is None:
            return False

        with self._lock:
            if request.url in self._known:
                logger.debug("[%s] Skipping already visited URL: %s", self.mode.value, request.url)
                return False
            self._known.add(request.url)
            self._pending.append(request)

        logger.debug("[%s] Queued (depth %d): %s", self.mode.value, request.depth, request.url)
        return True

    def enqueue_many(self, requests: Iterable[PageRequest]) -> int:
        """Queue several requests, returning how many were accepted."""
        return sum(1 for request in requests if self.enqueue(request))

    def dequeue(self) -> PageRequest | None:
        """Return the next request, or None when no work is pending."""
        with self._lock:
            if not self._pending:
                return None
            request = self._take()

        logger.debug("[%s] Dequeued (depth %d): %s", self.mode.value, request.depth, request.url)
        return request

    @abstractmethod
    def _take(self) -> PageRequest:
        """Pop the next pending request; called with the lock held."""

    def mark_known(self, url: str) -> None:
        """Record ``url`` as seen without queueing it."""
        if not url:
            return
        with self._lock:
            self._known.add(url)

    def is_known(self, url: str) -> bool:
        if not url:
            return False
        with self._lock:
            return url in self._known

    def clear(self) -> None:
        """Drop pending work and forget every seen URL."""
        with self._lock:
            self._pending.clear()
            self._known.clear()
        logger.debug("[%s] Scheduler cleared", self.mode.value)


class BfsScheduler(FrontierScheduler):
    """First in, first out."""

    mode = CrawlMode.BFS

    def _take(self) -> PageRequest:
        return self._pending.popleft()


class DfsScheduler(FrontierScheduler):
    """Last in, first out."""

    mode = CrawlMode.DFS

    def _take(self) -> PageRequest:
        return self._pending.pop()


def create_scheduler(mode: CrawlMode) -> FrontierScheduler:
    """Instantiate the scheduler variant for ``mode``."""
    if mode is CrawlMode.DFS:
        return DfsScheduler()
    return BfsScheduler()
