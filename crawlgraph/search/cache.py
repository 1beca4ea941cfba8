"""File cache for search results, one URL per line."""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Iterable

from crawlgraph.paths import DataPaths, ensure_directory

logger = logging.getLogger(__name__)

_INVALID_FILENAME_CHARS = re.compile(r'[<>:"/\\|?*\x00-\x1f]+')


def cache_filename(provider: str, query: str) -> str:
    """``<provider>_<query>.txt`` with unsafe characters folded to ``_``."""
    parts = [part for part in _INVALID_FILENAME_CHARS.split(query) if part]
    safe_query = "_".join(parts).replace(" ", "_").lower()
    return f"{provider.lower()}_{safe_query}.txt"


class SearchCache:
    """Reads and writes cached result lists under ``<data>/cache``."""

    def __init__(self, paths: DataPaths) -> None:
        self.paths = paths

    def path_for(self, provider: str, query: str) -> Path:
        return self.paths.cache / cache_filename(provider, query)

    def read(self, provider: str, query: str) -> list[str] | None:
        """Return de-duplicated non-empty lines, or None when nothing is cached."""
        path = self.path_for(provider, query)
        if not path.exists():
            return None
        links: list[str] = []
        seen: set[str] = set()
        for line in path.read_text(encoding="utf-8").splitlines():
            link = line.strip()
            if link and link not in seen:
                seen.add(link)
                links.append(link)
        return links or None

    def write(self, provider: str, query: str, links: Iterable[str]) -> Path:
        path = self.path_for(provider, query)
        lines = list(links)
        ensure_directory(path.parent)
        path.write_text("".join(f"{link}\n" for link in lines), encoding="utf-8")
        logger.debug("[Cache] Saved %d results to %s", len(lines), path)
        return path
