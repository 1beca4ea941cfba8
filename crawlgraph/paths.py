"""Filesystem layout for crawl artifacts.

All components receive a :class:`DataPaths` instance explicitly instead of
computing locations from the running process. The layout mirrors the output
folders produced by earlier versions of the tool::

    <base>/
      1_Crawling/   graph CSV, DOT and PNG files, comparison artifacts
      cache/        cached search results
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

DATA_DIR_ENV = "CRAWLGRAPH_DATA_DIR"
CRAWLING_DIRNAME = "1_Crawling"
CACHE_DIRNAME = "cache"


def ensure_directory(path: Path) -> Path:
    """Create ``path`` (and parents) if needed and return it."""
    path.mkdir(parents=True, exist_ok=True)
    return path


@dataclass(frozen=True)
class DataPaths:
    """Resolved output locations rooted at ``base``."""

    base: Path

    @classmethod
    def from_env(cls, override: Path | str | None = None) -> "DataPaths":
        """Build paths from an explicit override, the environment, or ``./data``."""
        if override is not None:
            base = Path(override)
        else:
            base = Path(os.environ.get(DATA_DIR_ENV) or "data")
        return cls(base=base if base.is_absolute() else base.resolve())

    @property
    def crawling(self) -> Path:
        return self.base / CRAWLING_DIRNAME

    @property
    def cache(self) -> Path:
        return self.base / CACHE_DIRNAME

    def graph_csv(self, source: str, mode: str) -> Path:
        return self.crawling / f"{source}_{mode}_graph.csv"

    def graph_dot(self, source: str, mode: str) -> Path:
        return self.crawling / f"{source}_{mode}_graph.dot"

    def graph_png(self, source: str, mode: str) -> Path:
        return self.crawling / f"{source}_{mode}_graph.png"

    def legacy_graph_csv(self, source: str) -> Path:
        """CSV name used before crawl modes were encoded in file names."""
        return self.crawling / f"{source}_graph.csv"

    def comparison_stem(self, source_a: str, source_b: str) -> Path:
        return self.crawling / f"Compare_{source_a}_{source_b}"
