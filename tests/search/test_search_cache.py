"""Tests for the search result cache."""

from __future__ import annotations

from pathlib import Path

from crawlgraph.paths import DataPaths
from crawlgraph.search.cache import SearchCache, cache_filename


class TestCacheFilename:
    """Tests for cache file naming."""

    def test_lowercased_and_spaces_replaced(self) -> None:
        """Test names are lowercased with spaces replaced."""
        assert cache_filename("Google", "Czy Szczepionki powodują autyzm") == (
            "google_czy_szczepionki_powodują_autyzm.txt"
        )

    def test_unsafe_characters_folded(self) -> None:
        """Test unsafe characters are folded to underscores."""
        assert cache_filename("Brave", 'a/b:c?"d"') == "brave_a_b_c_d.txt"


class TestSearchCache:
    """Tests for reading and writing cached results."""

    def test_round_trip(self, tmp_path: Path) -> None:
        """Test written results are read back."""
        cache = SearchCache(DataPaths(base=tmp_path))

        path = cache.write("Google", "query", ["https://a.com/", "https://b.com/"])

        assert path == tmp_path / "cache" / "google_query.txt"
        assert cache.read("Google", "query") == ["https://a.com/", "https://b.com/"]

    def test_missing_file_returns_none(self, tmp_path: Path) -> None:
        """Test a missing cache file is a miss."""
        assert SearchCache(DataPaths(base=tmp_path)).read("Google", "nothing") is None
        assert not (tmp_path / "cache").exists()

    def test_blank_and_duplicate_lines_dropped(self, tmp_path: Path) -> None:
        """Test blank and duplicate lines are dropped."""
        cache = SearchCache(DataPaths(base=tmp_path))
        cache.path_for("Brave", "q").parent.mkdir(parents=True)
        cache.path_for("Brave", "q").write_text(
            "https://a.com/\n\nhttps://b.com/\nhttps://a.com/\n   \n", encoding="utf-8"
        )

        assert cache.read("Brave", "q") == ["https://a.com/", "https://b.com/"]

    def test_empty_file_is_a_miss(self, tmp_path: Path) -> None:
        """Test an empty cache file is a miss."""
        cache = SearchCache(DataPaths(base=tmp_path))
        cache.write("Brave", "q", [])

        assert cache.read("Brave", "q") is None
