"""Cross-source comparison of crawl graphs.

Two sources' CSV files are loaded into node and edge sets and compared three
ways: by URL (nodes), by (parent, child) link (edges) and by host (domains).
Each comparison reports the set sizes, their intersection and union, and the
Jaccard similarity ``|A ∩ B| / |A ∪ B|`` (0 for two empty sets).

Artifacts, written next to the per-source graphs:

- ``Compare_<A>_<B>_graph.dot`` / ``.png``: merged graph, colored by membership
- ``Compare_<A>_<B>_metrics.txt``: plain-text metrics report
"""

from __future__ import annotations

import glob
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import AbstractSet, Hashable, List, Set, Tuple

from crawlgraph.crawling.edge_store import read_edges
from crawlgraph.crawling.edges import ROOT_SENTINEL
from crawlgraph.crawling.scheduler import CrawlMode
from crawlgraph.parsing.urls import host_of, pretty_url_label
from crawlgraph.paths import DataPaths

from .dot import (
    COLOR_BOTH,
    COLOR_GOOGLE,
    COLOR_OTHER,
    COLOR_ROOT,
    GRAPH_DEFAULTS,
    escape_dot,
    render_digraph,
    shorten,
)
from .render import GraphRenderer

logger = logging.getLogger(__name__)

LABEL_MAX_LENGTH = 60

Edge = Tuple[str, str]


@dataclass(frozen=True)
class SetOverlap:
    """Sizes and Jaccard similarity of two sets."""

    count_a: int
    count_b: int
    common: int
    union: int

    @property
    def jaccard(self) -> float:
        return self.common / self.union if self.union else 0.0

    @classmethod
    def of(cls, a: AbstractSet[Hashable], b: AbstractSet[Hashable]) -> "SetOverlap":
        return cls(count_a=len(a), count_b=len(b), common=len(a & b), union=len(a | b))

    def to_dict(self) -> dict:
        return {
            "a": self.count_a,
            "b": self.count_b,
            "common": self.common,
            "union": self.union,
            "jaccard": round(self.jaccard, 3),
        }


@dataclass
class SourceGraph:
    """Node and edge sets loaded from one source's CSV."""

    edges: Set[Edge] = field(default_factory=set)
    nodes: Set[str] = field(default_factory=set)

    @classmethod
    def from_csv(cls, csv_path: Path) -> "SourceGraph":
        graph = cls()
        for record in read_edges(csv_path):
            graph.add(record.parent_or_root, record.url)
        return graph

    def add(self, parent: str, child: str) -> None:
        self.edges.add((parent, child))
        self.nodes.add(parent)
        self.nodes.add(child)

    @property
    def domains(self) -> Set[str]:
        return {host for host in map(host_of, self.nodes) if host}


@dataclass
class ComparisonResult:
    source_a: str
    source_b: str
    csv_a: Path
    csv_b: Path
    nodes: SetOverlap
    edges: SetOverlap
    domains: SetOverlap
    dot_path: Path | None = None
    png_path: Path | None = None
    metrics_path: Path | None = None

    def to_dict(self) -> dict:
        return {
            "source_a": self.source_a,
            "source_b": self.source_b,
            "csv_a": str(self.csv_a),
            "csv_b": str(self.csv_b),
            "nodes": self.nodes.to_dict(),
            "edges": self.edges.to_dict(),
            "domains": self.domains.to_dict(),
            "dot_path": str(self.dot_path) if self.dot_path else None,
            "png_path": str(self.png_path) if self.png_path else None,
            "metrics_path": str(self.metrics_path) if self.metrics_path else None,
        }


def compare_graphs(
    graph_a: SourceGraph,
    graph_b: SourceGraph,
) -> tuple[SetOverlap, SetOverlap, SetOverlap]:
    """Return (nodes, edges, domains) overlaps."""
    return (
        SetOverlap.of(graph_a.nodes, graph_b.nodes),
        SetOverlap.of(graph_a.edges, graph_b.edges),
        SetOverlap.of(graph_a.domains, graph_b.domains),
    )


def build_comparison_dot(
    graph_a: SourceGraph,
    graph_b: SourceGraph,
    source_a: str,
    source_b: str,
) -> str:
    """Merged DOT graph of both sources, colored by membership."""
    all_nodes = sorted(graph_a.nodes | graph_b.nodes)
    node_ids = {url: f"n{index}" for index, url in enumerate(all_nodes, start=1)}

    statements: List[str] = list(GRAPH_DEFAULTS)

    for url in all_nodes:
        in_a = url in graph_a.nodes
        in_b = url in graph_b.nodes
        if url == ROOT_SENTINEL:
            color = COLOR_ROOT
        elif in_a and in_b:
            color = COLOR_BOTH
        elif in_a:
            color = COLOR_GOOGLE
        else:
            color = COLOR_OTHER
        penwidth = 2 if in_a and in_b else 1
        label = escape_dot(shorten(pretty_url_label(url), LABEL_MAX_LENGTH))
        statements.append(f'{node_ids[url]} [label="{label}", color={color}, penwidth={penwidth}];')

    for parent, child in sorted(graph_a.edges | graph_b.edges):
        in_a = (parent, child) in graph_a.edges
        in_b = (parent, child) in graph_b.edges
        if in_a and in_b:
            color, penwidth, style = COLOR_BOTH, 2, "solid"
        else:
            color, penwidth, style = (COLOR_GOOGLE if in_a else COLOR_OTHER), 1, "dashed"
        statements.append(
            f"{node_ids[parent]} -> {node_ids[child]} "
            f"[color={color}, penwidth={penwidth}, style={style}];"
        )

    statements.extend([
        "subgraph cluster_legend {",
        '  label="Legend";',
        "  fontsize=10;",
        "  color=gray80;",
        f'  la [label="{escape_dot(source_a)} only", color={COLOR_GOOGLE}];',
        f'  lb [label="{escape_dot(source_b)} only", color={COLOR_OTHER}];',
        f'  lab [label="both", color={COLOR_BOTH}, penwidth=2];',
        "}",
    ])
    return render_digraph("CompareGraph", statements)


def format_metrics_report(result: ComparisonResult) -> str:
    """Plain-text report with counts and Jaccard values (3 decimals)."""
    lines = [
        f"Comparison: {result.source_a} vs {result.source_b}",
        f"CSV A: {result.csv_a.name}",
        f"CSV B: {result.csv_b.name}",
        "",
    ]
    for heading, key, overlap in (
        ("Nodes (URLs)", "nodes", result.nodes),
        ("Edges (links)", "edges", result.edges),
        ("Domains", "domains", result.domains),
    ):
        lines.extend([
            f"=== {heading} ===",
            f"{result.source_a}: {overlap.count_a}",
            f"{result.source_b}: {overlap.count_b}",
            f"Common: {overlap.common}",
            f"Union: {overlap.union}",
            f"Jaccard({key}): {overlap.jaccard:.3f}",
            "",
        ])
    return "\n".join(lines) + "\n"


class ComparisonEngine:
    """Builds comparison artifacts for two crawled sources."""

    def __init__(self, paths: DataPaths, mode: CrawlMode, renderer: GraphRenderer | None = None) -> None:
        self.paths = paths
        self.mode = mode
        self.renderer = renderer or GraphRenderer()

    def find_csv(self, source: str) -> Path | None:
        """Locate a source's CSV.

        Tries ``<source>_<MODE>_graph.csv``, then the legacy
        ``<source>_graph.csv``, then the lexicographically first
        ``<source>_*_graph.csv``.
        """
        exact = self.paths.graph_csv(source, self.mode.value)
        if exact.exists():
            return exact
        legacy = self.paths.legacy_graph_csv(source)
        if legacy.exists():
            return legacy
        matches = sorted(self.paths.crawling.glob(f"{glob.escape(source)}_*_graph.csv"))
        if len(matches) > 1:
            logger.info("[COMPARE] Several CSV files match %s, using %s", source, matches[0].name)
        return matches[0] if matches else None

    def compare(self, source_a: str, source_b: str) -> ComparisonResult | None:
        """Write the merged graph and metrics for ``source_a`` vs ``source_b``.

        Returns:
            ComparisonResult, or None when either CSV is missing.
        """
        csv_a = self.find_csv(source_a)
        csv_b = self.find_csv(source_b)
        if csv_a is None or csv_b is None:
            logger.warning(
                "[COMPARE] Missing CSV files for comparison. A=%s, B=%s",
                csv_a or "not found",
                csv_b or "not found",
            )
            return None

        graph_a = SourceGraph.from_csv(csv_a)
        graph_b = SourceGraph.from_csv(csv_b)
        nodes, edges, domains = compare_graphs(graph_a, graph_b)

        stem = self.paths.comparison_stem(source_a, source_b)
        result = ComparisonResult(
            source_a=source_a,
            source_b=source_b,
            csv_a=csv_a,
            csv_b=csv_b,
            nodes=nodes,
            edges=edges,
            domains=domains,
            dot_path=stem.with_name(stem.name + "_graph.dot"),
            metrics_path=stem.with_name(stem.name + "_metrics.txt"),
        )

        result.dot_path.write_text(
            build_comparison_dot(graph_a, graph_b, source_a, source_b),
            encoding="utf-8",
        )
        logger.info("[COMPARE] DOT exported: %s", result.dot_path)

        png_path = stem.with_name(stem.name + "_graph.png")
        if self.renderer.render(result.dot_path, png_path, context=stem.name):
            result.png_path = png_path

        result.metrics_path.write_text(format_metrics_report(result), encoding="utf-8")
        logger.info(
            "[COMPARE] Metrics written: %s (Jaccard nodes=%.3f, edges=%.3f, domains=%.3f)",
            result.metrics_path,
            nodes.jaccard,
            edges.jaccard,
            domains.jaccard,
        )
        return result
