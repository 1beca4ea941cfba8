"""Per-source graph export: CSV on disk -> DOT description -> PNG."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from crawlgraph.crawling.edge_store import read_edges
from crawlgraph.crawling.edges import ROOT_SENTINEL
from crawlgraph.crawling.scheduler import CrawlMode
from crawlgraph.paths import DataPaths

from .dot import COLOR_ROOT, GRAPH_DEFAULTS, quoted, render_digraph, shorten, source_color
from .render import GraphRenderer

logger = logging.getLogger(__name__)

LABEL_MAX_LENGTH = 70


@dataclass
class ExportResult:
    source: str
    mode: CrawlMode
    csv_path: Path
    dot_path: Path
    png_path: Path
    edge_count: int
    rendered: bool

    def to_dict(self) -> dict:
        return {
            "source": self.source,
            "mode": self.mode.value,
            "csv_path": str(self.csv_path),
            "dot_path": str(self.dot_path),
            "png_path": str(self.png_path) if self.rendered else None,
            "edge_count": self.edge_count,
            "rendered": self.rendered,
        }


def build_source_dot(csv_path: Path, source: str, mode: CrawlMode) -> tuple[str, int]:
    """Build the DOT text for one source's CSV.

    Returns:
        Tuple of (dot_text, edge_count)
    """
    statements = [
        f'label="{source} - {mode.value} Mode";',
        "labelloc=t;",
        "fontsize=16;",
        *GRAPH_DEFAULTS,
    ]

    edge_lines = []
    has_root = False
    for edge in read_edges(csv_path):
        parent = edge.parent_or_root
        has_root = has_root or parent == ROOT_SENTINEL
        edge_lines.append(
            f"{quoted(shorten(parent, LABEL_MAX_LENGTH))} -> "
            f"{quoted(shorten(edge.url, LABEL_MAX_LENGTH))} "
            f"[color={source_color(edge.source)}];"
        )

    if has_root:
        statements.append(f"{quoted(ROOT_SENTINEL)} [color={COLOR_ROOT}, fontcolor={COLOR_ROOT}];")
    statements.extend(edge_lines)
    return render_digraph("CrawlGraph", statements), len(edge_lines)


class GraphExporter:
    """Exports a source's crawl graph from its CSV file."""

    def __init__(self, paths: DataPaths, mode: CrawlMode, renderer: GraphRenderer | None = None) -> None:
        self.paths = paths
        self.mode = mode
        self.renderer = renderer or GraphRenderer()

    def export(self, source: str) -> ExportResult | None:
        """Write ``<source>_<MODE>_graph.dot`` and try to render the PNG.

        Returns:
            ExportResult, or None when the source has no CSV yet.
        """
        mode = self.mode.value
        csv_path = self.paths.graph_csv(source, mode)
        if not csv_path.exists():
            logger.warning("[%s] CSV not found: %s", source, csv_path)
            return None

        dot_text, edge_count = build_source_dot(csv_path, source, self.mode)
        dot_path = self.paths.graph_dot(source, mode)
        dot_path.write_text(dot_text, encoding="utf-8")
        logger.info("[%s] Graph exported from CSV: %s (%d edges)", source, dot_path, edge_count)

        png_path = self.paths.graph_png(source, mode)
        rendered = self.renderer.render(dot_path, png_path, context=source)
        return ExportResult(
            source=source,
            mode=self.mode,
            csv_path=csv_path,
            dot_path=dot_path,
            png_path=png_path,
            edge_count=edge_count,
            rendered=rendered,
        )
