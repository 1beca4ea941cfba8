"""Fetch engines.

The orchestrator only depends on the :class:`FetchEngine` protocol: given a
seed, a frontier scheduler and crawl limits, an engine fetches pages and hands
each completed page to ``emit``. :class:`RequestsFetchEngine` is the bundled
implementation built on ``requests`` and BeautifulSoup.

Within one session the engine runs up to ``max_concurrency`` worker threads.
They all share the scheduler handed in by the orchestrator; discovered links
go back into it, so the scheduler's ordering decides whether the crawl runs
breadth-first or depth-first.
"""

from __future__ import annotations

import logging
import threading
import time
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Dict, Protocol, Set

import requests

from crawlgraph.parsing.html import extract_page
from crawlgraph.parsing.robots import RobotsCache
from crawlgraph.parsing.urls import host_of, is_valid_http_url

from .scheduler import FrontierScheduler, PageRequest

if TYPE_CHECKING:
    from crawlgraph.config import CrawlSettings

logger = logging.getLogger(__name__)

HTML_MEDIA_TYPES = ("text/html", "application/xhtml+xml")


class SeedFetchError(RuntimeError):
    """Raised when the seed page itself cannot be fetched."""


@dataclass(frozen=True)
class CrawlLimits:
    """Ceilings for one seed session."""

    max_depth: int
    max_pages: int
    timeout_seconds: float


@dataclass(frozen=True)
class CompletedPage:
    """Message emitted by a fetch engine for every fetched page.

    Attributes:
        url: URL the page was requested under.
        parent_url: Page that linked here, None for the seed.
        depth: Link distance from the seed.
        status_code: HTTP status (0 if unknown).
        content_type: Media type without parameters, "unknown" if absent.
        title: Page title, None if the page has none.
        text: Cleaned body text.
        description: Meta description.
        elapsed_seconds: Time spent fetching.
    """

    url: str
    parent_url: str | None
    depth: int
    status_code: int = 0
    content_type: str = "unknown"
    title: str | None = None
    text: str = ""
    description: str = ""
    elapsed_seconds: float = 0.0

    @property
    def word_count(self) -> int:
        return len(self.text.split()) if self.text else 0


PageSink = Callable[[CompletedPage], None]


class FetchEngine(Protocol):
    def crawl(
        self,
        seed_url: str,
        scheduler: FrontierScheduler,
        limits: CrawlLimits,
        emit: PageSink,
    ) -> int:
        """Crawl from ``seed_url`` and return the number of pages fetched."""
        ...


class DomainThrottle:
    """Spaces out requests to the same host.

    Each call to :meth:`wait` reserves the next free slot for the host, so
    concurrent workers hitting one host queue up instead of firing together.
    """

    def __init__(
        self,
        min_interval: float,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.min_interval = max(min_interval, 0.0)
        self._clock = clock
        self._sleep = sleep
        self._next_slot: Dict[str, float] = {}
        self._lock = threading.Lock()

    def wait(self, host: str | None, interval: float | None = None) -> float:
        """Block until ``host`` may be contacted; return the seconds waited.

        ``interval`` replaces the default gap for this host, e.g. with a
        robots.txt Crawl-delay.
        """
        gap = self.min_interval if interval is None else max(interval, 0.0)
        if not host or gap <= 0:
            return 0.0
        with self._lock:
            now = self._clock()
            start = max(now, self._next_slot.get(host, now))
            self._next_slot[host] = start + gap
        delay = start - now
        if delay > 0:
            logger.debug("Waiting %.2fs for host %s", delay, host)
            self._sleep(delay)
        return delay


def _media_type(header: str | None) -> str:
    if not header:
        return "unknown"
    return header.split(";", 1)[0].strip().lower() or "unknown"


class RequestsFetchEngine:
    """Threaded same-host crawler built on a shared ``requests.Session``."""

    def __init__(
        self,
        settings: "CrawlSettings",
        session: requests.Session | None = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.settings = settings
        self.session = session or requests.Session()
        self.session.headers["User-Agent"] = settings.user_agent
        self._clock = clock
        self.throttle = DomainThrottle(settings.min_domain_delay_seconds, clock=clock, sleep=sleep)
        self.robots = (
            RobotsCache(self.session, settings.user_agent, settings.request_timeout_seconds)
            if settings.respect_robots
            else None
        )

    def crawl(
        self,
        seed_url: str,
        scheduler: FrontierScheduler,
        limits: CrawlLimits,
        emit: PageSink,
    ) -> int:
        if not is_valid_http_url(seed_url):
            raise ValueError(f"Invalid seed URL: {seed_url!r}")

        scheduler.enqueue(PageRequest(url=seed_url, parent_url=None, depth=0))
        # Hosts whose links are followed; the seed's redirect target joins on fetch.
        scope: Set[str] = {host_of(seed_url)}
        deadline = self._clock() + limits.timeout_seconds
        workers = self.settings.max_concurrency
        dispatched = 0
        fetched = 0
        in_flight: Set[Future[bool]] = set()

        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="fetch") as pool:
            while dispatched < limits.max_pages:
                remaining = deadline - self._clock()
                if remaining <= 0:
                    logger.warning("Crawl of %s timed out after %.0fs", seed_url, limits.timeout_seconds)
                    break

                request = scheduler.dequeue() if len(in_flight) < workers else None
                if request is not None:
                    in_flight.add(pool.submit(self._fetch, request, scope, scheduler, limits, emit))
                    dispatched += 1
                    continue

                if not in_flight:
                    break
                done, in_flight = wait(in_flight, timeout=remaining, return_when=FIRST_COMPLETED)
                fetched += self._collect(done)

            if in_flight:
                done, _ = wait(in_flight)
                fetched += self._collect(done)

        logger.debug("Session for %s finished: %d dispatched, %d fetched", seed_url, dispatched, fetched)
        return fetched

    def _host_interval(self, url: str) -> float:
        """Per-host gap: the configured delay or robots.txt Crawl-delay, whichever is larger."""
        interval = self.settings.min_domain_delay_seconds
        if self.robots is None:
            return interval
        robots_delay = self.robots.crawl_delay(url)
        if robots_delay is None:
            return interval
        return max(interval, min(robots_delay, self.settings.max_robots_delay_seconds))

    @staticmethod
    def _collect(done: Set[Future[bool]]) -> int:
        fetched = 0
        for future in done:
            exc = future.exception()
            if isinstance(exc, SeedFetchError):
                raise exc
            if exc is not None:
                logger.warning("Fetch worker failed: %s", exc)
            elif future.result():
                fetched += 1
        return fetched

    def _fetch(
        self,
        request: PageRequest,
        scope: Set[str],
        scheduler: FrontierScheduler,
        limits: CrawlLimits,
        emit: PageSink,
    ) -> bool:
        url = request.url
        if self.robots is not None and not self.robots.is_allowed(url):
            logger.warning("Disallowed by robots.txt: %s", url)
            return False

        self.throttle.wait(host_of(url), self._host_interval(url))
        started = time.perf_counter()
        try:
            response = self.session.get(
                url,
                timeout=self.settings.request_timeout_seconds,
                allow_redirects=True,
            )
        except requests.RequestException as exc:
            if request.depth == 0:
                raise SeedFetchError(f"Failed to fetch seed {url}: {exc}") from exc
            logger.warning("Failed to fetch %s: %s", url, exc)
            return False
        elapsed = max(time.perf_counter() - started, 0.0)
        final_url = response.url or url
        if request.depth == 0:
            final_host = host_of(final_url)
            if final_host and final_host not in scope:
                logger.info("Seed %s redirected to host %s", url, final_host)
                scope.add(final_host)

        content_type = _media_type(response.headers.get("Content-Type"))
        page = None
        if content_type in HTML_MEDIA_TYPES:
            page = extract_page(response.text, final_url)

        if page is not None and request.depth < limits.max_depth:
            for link in page.links:
                if host_of(link) not in scope or scheduler.is_known(link):
                    continue
                scheduler.enqueue(PageRequest(url=link, parent_url=url, depth=request.depth + 1))

        emit(CompletedPage(
            url=url,
            parent_url=request.parent_url,
            depth=request.depth,
            status_code=response.status_code,
            content_type=content_type,
            title=page.title if page else None,
            text=page.text if page else "",
            description=page.description if page else "",
            elapsed_seconds=elapsed,
        ))
        return True
