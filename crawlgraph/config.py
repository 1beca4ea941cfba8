"""Configuration for crawl runs.

Settings come from three layers, later layers winning:

1. Dataclass defaults below.
2. An optional YAML file (``config/crawlgraph.yaml`` unless a path is given)
   with ``crawl:`` and ``search:`` sections.
3. Environment variables (API keys, ``CRAWL_MODE``). ``main.py`` loads a
   ``.env`` file into the environment before commands run.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Mapping

import yaml

from crawlgraph.crawling.scheduler import CrawlMode

DEFAULT_CONFIG_PATH = Path("config") / "crawlgraph.yaml"
DEFAULT_QUERY = "czy szczepionki powodują autyzm"
DEFAULT_USER_AGENT = "crawlgraph/1.0 (+https://github.com/crawlgraph)"


class ConfigError(ValueError):
    """Raised when a configuration file cannot be used."""


@dataclass(frozen=True)
class CrawlSettings:
    """Crawl limits and politeness settings.

    Attributes:
        mode: Frontier ordering used for every seed session.
        max_depth: Maximum link depth from a seed (seed is depth 0).
        max_width: Maximum seeds processed per source, also the page ceiling
            of a single seed session.
        max_concurrency: Worker threads fetching pages within one session.
        timeout_seconds: Wall-clock limit for one seed session.
        request_timeout_seconds: Timeout for a single HTTP request.
        min_domain_delay_seconds: Minimum gap between requests to one host.
        max_robots_delay_seconds: Cap applied to a robots.txt Crawl-delay.
        seed_delay_seconds: Pause after each seed before the next one starts.
        respect_robots: Honour robots.txt Disallow rules.
        batch_size: Edge records buffered before an append to disk.
        user_agent: User-Agent header sent with every request.
    """

    mode: CrawlMode = CrawlMode.BFS
    max_depth: int = 3
    max_width: int = 30
    max_concurrency: int = 10
    timeout_seconds: float = 300.0
    request_timeout_seconds: float = 15.0
    min_domain_delay_seconds: float = 1.0
    max_robots_delay_seconds: float = 10.0
    seed_delay_seconds: float = 0.5
    respect_robots: bool = True
    batch_size: int = 50
    user_agent: str = DEFAULT_USER_AGENT

    def __post_init__(self) -> None:
        if self.max_depth < 0:
            raise ValueError(f"max_depth must be >= 0, got {self.max_depth}")
        if self.max_width < 1:
            raise ValueError(f"max_width must be >= 1, got {self.max_width}")
        if self.max_concurrency < 1:
            raise ValueError(f"max_concurrency must be >= 1, got {self.max_concurrency}")
        if self.batch_size < 1:
            raise ValueError(f"batch_size must be >= 1, got {self.batch_size}")


@dataclass(frozen=True)
class SearchSettings:
    """Search query and provider credentials."""

    query: str = DEFAULT_QUERY
    max_results: int = 20
    use_cache: bool = True
    google_api_key: str | None = None
    google_cx: str | None = None
    brave_api_key: str | None = None


@dataclass(frozen=True)
class AppConfig:
    crawl: CrawlSettings = field(default_factory=CrawlSettings)
    search: SearchSettings = field(default_factory=SearchSettings)


def _known_fields(cls: type, data: Mapping[str, Any]) -> dict[str, Any]:
    names = {f.name for f in fields(cls)}
    return {key: value for key, value in data.items() if key in names}


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        with open(path, "r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle) or {}
    except (OSError, yaml.YAMLError) as exc:
        raise ConfigError(f"Cannot read config file {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a mapping")
    return data


def _section(data: Mapping[str, Any], name: str) -> dict[str, Any]:
    section = data.get(name) or {}
    if not isinstance(section, dict):
        raise ConfigError(f"Config section '{name}' must be a mapping")
    return section


def load_config(path: Path | None = None, environ: Mapping[str, str] | None = None) -> AppConfig:
    """Load configuration from YAML and the environment.

    Args:
        path: Explicit YAML file. When None, ``config/crawlgraph.yaml`` is
            used if it exists; an explicit path that does not exist is an error.
        environ: Environment mapping (defaults to ``os.environ``).

    Returns:
        The merged AppConfig.
    """
    env = os.environ if environ is None else environ

    data: dict[str, Any] = {}
    if path is not None:
        if not path.exists():
            raise ConfigError(f"Config file not found: {path}")
        data = _read_yaml(path)
    elif DEFAULT_CONFIG_PATH.exists():
        data = _read_yaml(DEFAULT_CONFIG_PATH)

    crawl_data = _known_fields(CrawlSettings, _section(data, "crawl"))
    if "CRAWL_MODE" in env:
        crawl_data["mode"] = env["CRAWL_MODE"]
    if "mode" in crawl_data:
        crawl_data["mode"] = CrawlMode.parse(str(crawl_data["mode"]))

    search_data = _known_fields(SearchSettings, _section(data, "search"))
    for key, env_name in (
        ("google_api_key", "GOOGLE_API_KEY"),
        ("google_cx", "GOOGLE_CX"),
        ("brave_api_key", "BRAVE_API_KEY"),
    ):
        if env.get(env_name):
            search_data[key] = env[env_name]

    try:
        crawl = CrawlSettings(**crawl_data)
        search = SearchSettings(**search_data)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"Invalid configuration: {exc}") from exc
    return AppConfig(crawl=crawl, search=search)


def with_overrides(settings: CrawlSettings, **overrides: Any) -> CrawlSettings:
    """Return a copy of ``settings`` with non-None overrides applied."""
    changes = {key: value for key, value in overrides.items() if value is not None}
    if not changes:
        return settings
    return replace(settings, **changes)
