"""CLI commands that work from CSV files already on disk.

Commands:
- export: Rebuild a source's DOT/PNG graph from its CSV
- compare: Build comparison artifacts for two sources
"""

from __future__ import annotations

import argparse
import sys

from crawlgraph.cli.common import (
    EXIT_ERROR,
    EXIT_SUCCESS,
    add_common_args,
    configure_logging,
    emit_json,
    load_app_config,
    resolve_paths,
)
from crawlgraph.config import ConfigError


def register_commands(subparsers: argparse._SubParsersAction[argparse.ArgumentParser]) -> None:
    """Add export and compare commands to the main CLI parser."""

    export_parser = subparsers.add_parser(
        "export",
        description="Export a source's crawl graph (DOT, PNG) from its CSV file.",
        help="Re-export DOT/PNG from a source's CSV.",
    )
    add_common_args(export_parser)
    export_parser.add_argument(
        "--source",
        required=True,
        help="Source label whose CSV should be exported.",
    )
    export_parser.set_defaults(func=export_cli)

    compare_parser = subparsers.add_parser(
        "compare",
        description="Compare the crawl graphs of two sources (Jaccard overlap, merged graph).",
        help="Build comparison artifacts for two sources.",
    )
    add_common_args(compare_parser)
    compare_parser.add_argument("source_a", help="First source label (e.g. Google).")
    compare_parser.add_argument("source_b", help="Second source label (e.g. Brave).")
    compare_parser.set_defaults(func=compare_cli)


def export_cli(args: argparse.Namespace) -> int:
    """Execute the export command."""
    from crawlgraph.graphs.exporter import GraphExporter

    configure_logging(args)
    try:
        config = load_app_config(args)
    except (ConfigError, ValueError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return EXIT_ERROR

    result = GraphExporter(resolve_paths(args), config.crawl.mode).export(args.source)
    if result is None:
        print(f"Error: no CSV found for source '{args.source}'.", file=sys.stderr)
        return EXIT_ERROR

    if args.output_json:
        emit_json(result.to_dict())
    else:
        print(f"Exported {result.edge_count} edges for {result.source} ({result.mode.value})")
        print(f"  DOT: {result.dot_path}")
        print(f"  PNG: {result.png_path if result.rendered else 'not rendered'}")
    return EXIT_SUCCESS


def compare_cli(args: argparse.Namespace) -> int:
    """Execute the compare command."""
    from crawlgraph.graphs.compare import ComparisonEngine

    configure_logging(args)
    try:
        config = load_app_config(args)
    except (ConfigError, ValueError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return EXIT_ERROR

    engine = ComparisonEngine(resolve_paths(args), config.crawl.mode)
    result = engine.compare(args.source_a, args.source_b)
    if result is None:
        print(
            f"Error: missing CSV for '{args.source_a}' or '{args.source_b}'.",
            file=sys.stderr,
        )
        return EXIT_ERROR

    if args.output_json:
        emit_json(result.to_dict())
    else:
        print(f"Comparison: {result.source_a} vs {result.source_b}")
        for label, overlap in (
            ("Nodes", result.nodes),
            ("Edges", result.edges),
            ("Domains", result.domains),
        ):
            print(
                f"  {label}: {overlap.count_a} / {overlap.count_b}, "
                f"common {overlap.common}, Jaccard {overlap.jaccard:.3f}"
            )
        print(f"  Metrics: {result.metrics_path}")
    return EXIT_SUCCESS
