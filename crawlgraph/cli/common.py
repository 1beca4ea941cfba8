"""Shared argument handling for crawlgraph CLI commands."""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from typing import Any

from crawlgraph.config import AppConfig, load_config, with_overrides
from crawlgraph.crawling.scheduler import CrawlMode
from crawlgraph.paths import DataPaths

EXIT_SUCCESS = 0
EXIT_ERROR = 1

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def add_common_args(parser: argparse.ArgumentParser) -> None:
    """Flags accepted by every command."""
    parser.add_argument(
        "--mode",
        choices=[mode.value for mode in CrawlMode],
        type=str.upper,
        help="Frontier ordering (default: from config or CRAWL_MODE, else BFS).",
    )
    parser.add_argument(
        "--data-dir",
        type=Path,
        help="Root directory for crawl artifacts (default: $CRAWLGRAPH_DATA_DIR or ./data).",
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="YAML configuration file (default: config/crawlgraph.yaml if present).",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable debug logging.",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        dest="output_json",
        help="Output results in JSON format.",
    )


def configure_logging(args: argparse.Namespace) -> None:
    logging.basicConfig(
        level=logging.DEBUG if getattr(args, "verbose", False) else logging.INFO,
        format=LOG_FORMAT,
    )


def load_app_config(args: argparse.Namespace) -> AppConfig:
    """Load configuration and apply command-line overrides.

    Raises:
        ConfigError: If the configuration file cannot be used.
    """
    config = load_config(getattr(args, "config", None))
    mode = CrawlMode.parse(args.mode) if getattr(args, "mode", None) else None
    crawl = with_overrides(
        config.crawl,
        mode=mode,
        max_depth=getattr(args, "max_depth", None),
        max_width=getattr(args, "max_width", None),
    )
    return AppConfig(crawl=crawl, search=config.search)


def resolve_paths(args: argparse.Namespace) -> DataPaths:
    return DataPaths.from_env(getattr(args, "data_dir", None))


def emit_json(payload: Any) -> None:
    print(json.dumps(payload, indent=2, default=str))
