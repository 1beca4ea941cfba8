"""Append-only CSV persistence for crawled edges.

Records are buffered in memory and appended to the source's CSV file every
``batch_size`` records, so an interrupted crawl loses at most one batch. The
file is never rewritten: the header goes in once, when the file is created,
and every later flush only appends rows.
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import List

from .edges import CSV_HEADER, CrawledEdge, parse_csv_text

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 50

# Files written by older tooling may start with a UTF-8 BOM.
READ_ENCODING = "utf-8-sig"


class EdgeStore:
    """Buffered writer for one (source, mode) CSV file.

    Usage:
        store = EdgeStore(paths.graph_csv("Google", "BFS"), source="Google")
        store.append(edge)      # flushes automatically every 50 records
        store.flush()           # write whatever is left
    """

    def __init__(self, csv_path: Path, source: str, batch_size: int = DEFAULT_BATCH_SIZE) -> None:
        if batch_size < 1:
            raise ValueError(f"batch_size must be >= 1, got {batch_size}")
        self.csv_path = csv_path
        self.source = source
        self.batch_size = batch_size
        self._buffer: List[CrawledEdge] = []
        self._lock = threading.Lock()
        self._written = 0

    @property
    def pending(self) -> int:
        """Records buffered but not yet on disk."""
        with self._lock:
            return len(self._buffer)

    @property
    def written(self) -> int:
        """Records appended to disk by this store."""
        with self._lock:
            return self._written

    def append(self, edge: CrawledEdge) -> bool:
        """Buffer a record, flushing when the batch is full.

        Returns:
            True if this call triggered a flush.
        """
        with self._lock:
            self._buffer.append(edge)
            if len(self._buffer) < self.batch_size:
                return False
            self._flush_locked()
            return True

    def flush(self) -> int:
        """Append all buffered records to disk.

        Returns:
            Number of rows written (0 leaves the file untouched).
        """
        with self._lock:
            return self._flush_locked()

    def _flush_locked(self) -> int:
        rows = [edge for edge in self._buffer if edge.source == self.source]
        dropped = len(self._buffer) - len(rows)
        self._buffer.clear()
        if dropped:
            logger.warning(
                "[%s] Dropped %d buffered records belonging to another source",
                self.source,
                dropped,
            )
        if not rows:
            return 0

        self.csv_path.parent.mkdir(parents=True, exist_ok=True)
        is_new = not self.csv_path.exists()
        with open(self.csv_path, "a", encoding="utf-8", newline="") as handle:
            if is_new:
                handle.write(CSV_HEADER + "\n")
            for edge in rows:
                handle.write(edge.to_csv_line() + "\n")

        self._written += len(rows)
        logger.info("[%s] Partial results appended: %d entries", self.source, len(rows))
        return len(rows)


def read_edges(csv_path: Path) -> List[CrawledEdge]:
    """Load every well-formed record from a graph CSV.

    Returns an empty list when the file does not exist.
    """
    if not csv_path.exists():
        return []
    with open(csv_path, "r", encoding=READ_ENCODING, newline="") as handle:
        return parse_csv_text(handle.read())
