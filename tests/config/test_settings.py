"""Tests for configuration loading and data paths."""

from __future__ import annotations

from pathlib import Path

import pytest

from crawlgraph.config import (
    ConfigError,
    CrawlSettings,
    load_config,
    with_overrides,
)
from crawlgraph.crawling.scheduler import CrawlMode
from crawlgraph.paths import DATA_DIR_ENV, DataPaths


class TestCrawlSettings:
    """Tests for crawl setting defaults and validation."""

    def test_defaults(self) -> None:
        """Test default crawl settings."""
        settings = CrawlSettings()

        assert settings.mode is CrawlMode.BFS
        assert settings.max_depth == 3
        assert settings.max_width == 30
        assert settings.max_concurrency == 10
        assert settings.timeout_seconds == 300.0
        assert settings.min_domain_delay_seconds == 1.0
        assert settings.max_robots_delay_seconds == 10.0
        assert settings.respect_robots is True
        assert settings.batch_size == 50

    @pytest.mark.parametrize("field,value", [("max_depth", -1), ("max_width", 0), ("batch_size", 0)])
    def test_invalid_values(self, field: str, value: int) -> None:
        """Test out-of-range values are rejected."""
        with pytest.raises(ValueError):
            CrawlSettings(**{field: value})

    def test_with_overrides_ignores_none(self) -> None:
        """Test None overrides leave settings unchanged."""
        settings = CrawlSettings()

        assert with_overrides(settings, mode=None) is settings
        assert with_overrides(settings, mode=CrawlMode.DFS, max_depth=None).mode is CrawlMode.DFS


class TestLoadConfig:
    """Tests for YAML and environment layering."""

    def test_no_file_uses_defaults(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test defaults are used when no config file exists."""
        monkeypatch.chdir(tmp_path)

        config = load_config(environ={})

        assert config.crawl == CrawlSettings()
        assert config.search.max_results == 20
        assert config.search.google_api_key is None

    def test_yaml_sections(self, tmp_path: Path) -> None:
        """Test crawl and search sections are read from YAML."""
        path = tmp_path / "crawlgraph.yaml"
        path.write_text(
            "crawl:\n  mode: dfs\n  max_depth: 2\n  unknown_key: 1\n"
            "search:\n  query: test query\n  use_cache: false\n",
            encoding="utf-8",
        )

        config = load_config(path, environ={})

        assert config.crawl.mode is CrawlMode.DFS
        assert config.crawl.max_depth == 2
        assert config.search.query == "test query"
        assert config.search.use_cache is False

    def test_environment_overrides(self, tmp_path: Path) -> None:
        """Test environment variables override the YAML file."""
        path = tmp_path / "crawlgraph.yaml"
        path.write_text("crawl:\n  mode: BFS\n", encoding="utf-8")
        environ = {
            "CRAWL_MODE": "DFS",
            "GOOGLE_API_KEY": "gkey",
            "GOOGLE_CX": "gcx",
            "BRAVE_API_KEY": "bkey",
        }

        config = load_config(path, environ=environ)

        assert config.crawl.mode is CrawlMode.DFS
        assert config.search.google_api_key == "gkey"
        assert config.search.google_cx == "gcx"
        assert config.search.brave_api_key == "bkey"

    def test_unknown_mode_falls_back_to_bfs(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test an unknown CRAWL_MODE falls back to BFS."""
        monkeypatch.chdir(tmp_path)

        config = load_config(environ={"CRAWL_MODE": "sideways"})

        assert config.crawl.mode is CrawlMode.BFS

    def test_missing_explicit_file(self, tmp_path: Path) -> None:
        """Test an explicit missing file raises ConfigError."""
        with pytest.raises(ConfigError, match="not found"):
            load_config(tmp_path / "missing.yaml", environ={})

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        """Test malformed YAML raises ConfigError."""
        path = tmp_path / "bad.yaml"
        path.write_text("crawl: [unclosed\n", encoding="utf-8")

        with pytest.raises(ConfigError):
            load_config(path, environ={})

    def test_non_mapping_section(self, tmp_path: Path) -> None:
        """Test a section that is not a mapping raises ConfigError."""
        path = tmp_path / "bad.yaml"
        path.write_text("crawl:\n  - 1\n  - 2\n", encoding="utf-8")

        with pytest.raises(ConfigError, match="crawl"):
            load_config(path, environ={})

    def test_invalid_value(self, tmp_path: Path) -> None:
        """Test invalid setting values raise ConfigError."""
        path = tmp_path / "bad.yaml"
        path.write_text("crawl:\n  max_width: 0\n", encoding="utf-8")

        with pytest.raises(ConfigError, match="max_width"):
            load_config(path, environ={})


class TestDataPaths:
    """Tests for artifact locations."""

    def test_file_names(self, tmp_path: Path) -> None:
        """Test artifact file names."""
        paths = DataPaths(base=tmp_path)

        assert paths.graph_csv("Google", "BFS") == tmp_path / "1_Crawling" / "Google_BFS_graph.csv"
        assert paths.graph_dot("Brave", "DFS").name == "Brave_DFS_graph.dot"
        assert paths.graph_png("Brave", "DFS").name == "Brave_DFS_graph.png"
        assert paths.legacy_graph_csv("Google").name == "Google_graph.csv"
        assert paths.comparison_stem("Google", "Brave").name == "Compare_Google_Brave"

    def test_lookups_do_not_create_directories(self, tmp_path: Path) -> None:
        """Test path lookups leave the filesystem untouched."""
        paths = DataPaths(base=tmp_path / "data")

        assert paths.crawling == tmp_path / "data" / "1_Crawling"
        assert paths.cache == tmp_path / "data" / "cache"
        paths.graph_csv("Google", "BFS")
        assert not (tmp_path / "data").exists()

    def test_from_env_precedence(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test an explicit override beats the environment."""
        monkeypatch.setenv(DATA_DIR_ENV, str(tmp_path / "env"))

        assert DataPaths.from_env().base == tmp_path / "env"
        assert DataPaths.from_env(tmp_path / "flag").base == tmp_path / "flag"

    def test_from_env_default(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test the data directory defaults to ./data."""
        monkeypatch.delenv(DATA_DIR_ENV, raising=False)
        monkeypatch.chdir(tmp_path)

        assert DataPaths.from_env().base == tmp_path.resolve() / "data"
