"""Crawl orchestration for one source.

For each seed URL the orchestrator runs one fetch-engine session with a fresh
frontier scheduler. The engine runs in a session thread and pushes
:class:`CompletedPage` messages onto a queue; the orchestrator thread drains
the queue, turns messages into edge records and feeds the edge store, which
appends to disk in batches. When every seed is done the remaining records are
flushed and the graph is exported from the CSV.

A failing seed is logged and skipped; it never stops the rest of the batch.
"""

from __future__ import annotations

import logging
import queue
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Callable, List, Sequence

from crawlgraph.paths import DataPaths

from .edge_store import EdgeStore
from .edges import NO_TITLE, CrawledEdge
from .fetcher import CompletedPage, CrawlLimits, FetchEngine
from .scheduler import CrawlMode, FrontierScheduler, create_scheduler

if TYPE_CHECKING:
    from crawlgraph.config import CrawlSettings
    from crawlgraph.graphs.exporter import ExportResult, GraphExporter

logger = logging.getLogger(__name__)

# Marks the end of a session on the page queue.
_SESSION_DONE = object()


@dataclass
class SeedFailure:
    seed_url: str
    error: str


@dataclass
class CrawlRunResult:
    """Outcome of crawling every seed of one source.

    Attributes:
        source_label: Source the seeds came from.
        mode: Frontier ordering used.
        seeds_processed: Seeds whose session completed.
        failed: Seeds whose session raised, with the error message.
        edges_recorded: Edge records appended to the CSV during this run.
        csv_path: The source's CSV file.
        export: Graph export outcome, None when nothing was exported.
    """

    source_label: str
    mode: CrawlMode
    seeds_processed: int = 0
    failed: List[SeedFailure] = field(default_factory=list)
    edges_recorded: int = 0
    csv_path: Path | None = None
    export: "ExportResult | None" = None

    @property
    def seeds_failed(self) -> int:
        return len(self.failed)

    @property
    def dot_path(self) -> Path | None:
        return self.export.dot_path if self.export else None

    @property
    def png_path(self) -> Path | None:
        """Rendered PNG, None when rendering failed or nothing was exported."""
        if self.export is None or not self.export.rendered:
            return None
        return self.export.png_path

    def to_dict(self) -> dict:
        """Serialize to dictionary for logging/reporting."""
        return {
            "source": self.source_label,
            "mode": self.mode.value,
            "seeds_processed": self.seeds_processed,
            "seeds_failed": self.seeds_failed,
            "failed": [{"seed": f.seed_url, "error": f.error} for f in self.failed],
            "edges_recorded": self.edges_recorded,
            "csv_path": str(self.csv_path) if self.csv_path else None,
            "dot_path": str(self.dot_path) if self.dot_path else None,
            "png_path": str(self.png_path) if self.png_path else None,
            "export": self.export.to_dict() if self.export else None,
        }


def edge_from_page(page: CompletedPage, source_label: str) -> CrawledEdge:
    """Build the edge record for a completed page."""
    return CrawledEdge(
        source=source_label,
        parent_url=page.parent_url,
        url=page.url,
        depth=page.depth,
        title=page.title or NO_TITLE,
        status_code=page.status_code,
        content_type=page.content_type or "unknown",
        content=page.text,
        description=page.description,
        load_time_seconds=max(page.elapsed_seconds, 0.0),
        word_count=page.word_count,
    )


class CrawlOrchestrator:
    """Runs seed sessions for a source and persists their edges.

    Args:
        settings: Crawl limits, mode and politeness.
        paths: Output locations.
        engine: Fetch engine used for every seed session.
        exporter: Graph exporter run after the last seed; skipped when None.
        sleep: Used for the inter-seed delay.
    """

    def __init__(
        self,
        settings: "CrawlSettings",
        paths: DataPaths,
        engine: FetchEngine,
        exporter: "GraphExporter | None" = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.settings = settings
        self.paths = paths
        self.engine = engine
        self.exporter = exporter
        self._sleep = sleep

    @property
    def mode(self) -> CrawlMode:
        return self.settings.mode

    def crawl_seeds(self, urls: Sequence[str], source_label: str) -> CrawlRunResult:
        """Crawl up to ``max_width`` seeds for ``source_label``.

        Args:
            urls: Absolute seed URLs, in priority order.
            source_label: Namespace for the output files (e.g. "Google").

        Returns:
            CrawlRunResult describing the run.
        """
        mode = self.mode
        csv_path = self.paths.graph_csv(source_label, mode.value)
        result = CrawlRunResult(source_label=source_label, mode=mode, csv_path=csv_path)

        if not urls:
            logger.warning("[%s] No seed URLs to crawl", source_label)
            return result

        store = EdgeStore(csv_path, source=source_label, batch_size=self.settings.batch_size)
        logger.info("[%s] Using %s crawling strategy (%s)", source_label, mode.value, mode.description)

        for seed_url in list(urls)[: self.settings.max_width]:
            scheduler = create_scheduler(mode)
            try:
                logger.info("[%s] Crawling root: %s (mode: %s)", source_label, seed_url, mode.value)
                pages = self._run_session(seed_url, scheduler, store, source_label)
                result.seeds_processed += 1
                logger.info("[%s] Finished: %s (%d pages)", source_label, seed_url, pages)
            except Exception as exc:
                result.failed.append(SeedFailure(seed_url=seed_url, error=str(exc)))
                logger.warning("[%s] Error crawling %s: %s", source_label, seed_url, exc)
            finally:
                scheduler.clear()

            if self.settings.seed_delay_seconds > 0:
                self._sleep(self.settings.seed_delay_seconds)

        store.flush()
        result.edges_recorded = store.written
        logger.info(
            "[%s] Crawling complete (%s). Seeds processed: %d, failed: %d, edges: %d",
            source_label,
            mode.value,
            result.seeds_processed,
            result.seeds_failed,
            result.edges_recorded,
        )

        if self.exporter is not None:
            result.export = self.exporter.export(source_label)
        return result

    def _run_session(
        self,
        seed_url: str,
        scheduler: FrontierScheduler,
        store: EdgeStore,
        source_label: str,
    ) -> int:
        """Run one engine session, consuming its pages on this thread."""
        limits = CrawlLimits(
            max_depth=self.settings.max_depth,
            max_pages=self.settings.max_width,
            timeout_seconds=self.settings.timeout_seconds,
        )
        pages: "queue.Queue[object]" = queue.Queue()

        def session() -> int:
            try:
                return self.engine.crawl(seed_url, scheduler, limits, pages.put)
            finally:
                pages.put(_SESSION_DONE)

        recorded = 0
        with ThreadPoolExecutor(max_workers=1, thread_name_prefix="crawl-session") as pool:
            future = pool.submit(session)
            while True:
                message = pages.get()
                if message is _SESSION_DONE:
                    break
                if self._record(message, store, source_label):
                    recorded += 1
            future.result()
        return recorded

    def _record(self, page: object, store: EdgeStore, source_label: str) -> bool:
        if not isinstance(page, CompletedPage):
            logger.debug("[%s] Ignoring unexpected message %r", source_label, page)
            return False
        if not 0 <= page.depth <= self.settings.max_depth:
            logger.debug("[%s] Dropping page at depth %d: %s", source_label, page.depth, page.url)
            return False

        store.append(edge_from_page(page, source_label))
        parent_info = f"from {page.parent_url}" if page.parent_url else "ROOT"
        logger.info("[%s] Crawled depth=%d | %s | %s", self.mode.value, page.depth, page.url, parent_info)
        return True
