"""CLI commands that crawl seed URLs.

Commands:
- crawl: Crawl explicit seed URLs for one source label
- search: Query search providers, crawl each provider's results and compare
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List

from crawlgraph.cli.common import (
    EXIT_ERROR,
    EXIT_SUCCESS,
    add_common_args,
    configure_logging,
    emit_json,
    load_app_config,
    resolve_paths,
)
from crawlgraph.config import AppConfig, ConfigError
from crawlgraph.paths import DataPaths

logger = logging.getLogger(__name__)

PROVIDER_CHOICES = ("google", "brave")


def register_commands(subparsers: argparse._SubParsersAction[argparse.ArgumentParser]) -> None:
    """Add crawl and search commands to the main CLI parser."""

    crawl_parser = subparsers.add_parser(
        "crawl",
        description="Crawl seed URLs and export the resulting link graph.",
        help="Crawl seed URLs for a source label.",
    )
    add_common_args(crawl_parser)
    crawl_parser.add_argument(
        "--source",
        required=True,
        help="Source label used in output file names (e.g. Google).",
    )
    seeds_group = crawl_parser.add_mutually_exclusive_group(required=True)
    seeds_group.add_argument(
        "--seed",
        action="append",
        dest="seeds",
        metavar="URL",
        help="Seed URL (repeatable).",
    )
    seeds_group.add_argument(
        "--seeds-file",
        type=Path,
        help="File with one seed URL per line ('#' starts a comment).",
    )
    crawl_parser.add_argument(
        "--max-depth",
        type=int,
        help="Maximum link depth from a seed (default: 3).",
    )
    crawl_parser.add_argument(
        "--max-width",
        type=int,
        help="Maximum seeds per source and pages per seed (default: 30).",
    )
    crawl_parser.set_defaults(func=crawl_cli)

    search_parser = subparsers.add_parser(
        "search",
        description=(
            "Fetch search results from each provider, crawl them, and compare "
            "Google against Brave when both succeed."
        ),
        help="Search, crawl the results and compare providers.",
    )
    add_common_args(search_parser)
    search_parser.add_argument(
        "--query",
        help="Search query (default: from config).",
    )
    search_parser.add_argument(
        "--providers",
        nargs="+",
        choices=PROVIDER_CHOICES,
        default=list(PROVIDER_CHOICES),
        help="Providers to query (default: google brave).",
    )
    search_parser.add_argument(
        "--max-results",
        type=int,
        help="Maximum results per provider (default: 20).",
    )
    search_parser.add_argument(
        "--no-cache",
        action="store_true",
        help="Ignore cached search results.",
    )
    search_parser.add_argument(
        "--max-depth",
        type=int,
        help="Maximum link depth from a seed (default: 3).",
    )
    search_parser.add_argument(
        "--max-width",
        type=int,
        help="Maximum seeds per source and pages per seed (default: 30).",
    )
    search_parser.set_defaults(func=search_cli)


def read_seeds_file(path: Path) -> List[str]:
    """Return seed URLs from ``path``, skipping blanks and comments."""
    seeds: List[str] = []
    for line in path.read_text(encoding="utf-8").splitlines():
        line = line.strip()
        if line and not line.startswith("#"):
            seeds.append(line)
    return seeds


def build_orchestrator(config: AppConfig, paths: DataPaths):
    """Wire the requests-based engine and graph exporter into an orchestrator."""
    from crawlgraph.crawling.fetcher import RequestsFetchEngine
    from crawlgraph.crawling.orchestrator import CrawlOrchestrator
    from crawlgraph.graphs.exporter import GraphExporter

    settings = config.crawl
    return CrawlOrchestrator(
        settings,
        paths,
        RequestsFetchEngine(settings),
        exporter=GraphExporter(paths, settings.mode),
    )


def crawl_cli(args: argparse.Namespace) -> int:
    """Execute the crawl command."""
    configure_logging(args)

    try:
        config = load_app_config(args)
        seeds = read_seeds_file(args.seeds_file) if args.seeds_file else list(args.seeds)
    except (ConfigError, ValueError, OSError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return EXIT_ERROR

    if not seeds:
        print("Error: no seed URLs given.", file=sys.stderr)
        return EXIT_ERROR

    paths = resolve_paths(args)
    result = build_orchestrator(config, paths).crawl_seeds(seeds, args.source)

    if args.output_json:
        emit_json(result.to_dict())
    else:
        print(f"Source: {result.source_label} ({result.mode.value})")
        print(f"  Seeds processed: {result.seeds_processed}")
        print(f"  Seeds failed: {result.seeds_failed}")
        print(f"  Edges recorded: {result.edges_recorded}")
        print(f"  CSV: {result.csv_path}")
        if result.dot_path:
            print(f"  DOT: {result.dot_path}")
        if result.png_path:
            print(f"  PNG: {result.png_path}")
        for failure in result.failed:
            print(f"  - {failure.seed_url}: {failure.error}")

    return EXIT_SUCCESS if result.seeds_processed else EXIT_ERROR


def build_providers(config: AppConfig, paths: DataPaths, names: List[str]) -> list:
    """Create the requested providers that have credentials configured."""
    from crawlgraph.search import BraveSearchProvider, GoogleSearchProvider, SearchCache

    cache = SearchCache(paths)
    search = config.search
    providers = []
    for name in names:
        if name == "google":
            if not (search.google_api_key and search.google_cx):
                logger.error("Missing required environment variables: GOOGLE_API_KEY/GOOGLE_CX")
                continue
            providers.append(GoogleSearchProvider(search.google_api_key, search.google_cx, cache))
        elif name == "brave":
            if not search.brave_api_key:
                logger.warning("Brave API token not configured - skipping Brave provider")
                continue
            providers.append(BraveSearchProvider(search.brave_api_key, cache))
    return providers


def search_cli(args: argparse.Namespace) -> int:
    """Execute the search command."""
    from crawlgraph.graphs.compare import ComparisonEngine
    from crawlgraph.search import SearchError

    configure_logging(args)

    try:
        config = load_app_config(args)
    except (ConfigError, ValueError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return EXIT_ERROR

    paths = resolve_paths(args)
    query = args.query or config.search.query
    max_results = args.max_results or config.search.max_results
    use_cache = config.search.use_cache and not args.no_cache

    providers = build_providers(config, paths, args.providers)
    if not providers:
        print("Error: no search provider is configured.", file=sys.stderr)
        return EXIT_ERROR

    orchestrator = build_orchestrator(config, paths)
    runs = {}
    for provider in providers:
        logger.info("Fetching results from %s for query: '%s'...", provider.name, query)
        try:
            results = provider.get_results(query, max_results, use_cache)
        except SearchError as exc:
            logger.error("[%s] Search failed: %s", provider.name, exc)
            continue
        logger.info("[%s] Retrieved %d links.", provider.name, len(results))
        if not results:
            continue
        logger.info("[%s] Starting crawling...", provider.name)
        runs[provider.name] = orchestrator.crawl_seeds(results, provider.name)

    comparison = None
    if "Google" in runs and "Brave" in runs:
        logger.info("Generating comparison artifacts...")
        comparison = ComparisonEngine(paths, config.crawl.mode).compare("Google", "Brave")
    else:
        logger.warning(
            "Skipping comparison - not all sources were crawled (Google: %s, Brave: %s)",
            "Google" in runs,
            "Brave" in runs,
        )

    if args.output_json:
        emit_json({
            "query": query,
            "runs": {name: run.to_dict() for name, run in runs.items()},
            "comparison": comparison.to_dict() if comparison else None,
        })
    else:
        print(f"Query: {query}")
        for name, run in runs.items():
            print(
                f"  {name}: {run.seeds_processed} seeds crawled, "
                f"{run.seeds_failed} failed, {run.edges_recorded} edges"
            )
        if comparison is not None:
            print(f"  Comparison metrics: {comparison.metrics_path}")

    return EXIT_SUCCESS if runs else EXIT_ERROR
