"""Tests for URL helpers."""

from __future__ import annotations

import pytest

from crawlgraph.parsing.urls import (
    host_of,
    is_valid_http_url,
    pretty_url_label,
    resolve_link,
    should_skip_href,
)


class TestResolveLink:
    """Tests for link resolution."""

    def test_relative_link_resolved(self) -> None:
        """Test relative links are resolved."""
        assert resolve_link("https://a.com/docs/page", "other") == "https://a.com/docs/other"
        assert resolve_link("https://a.com/docs/page", "/root") == "https://a.com/root"

    def test_fragment_dropped(self) -> None:
        """Test fragments are dropped."""
        assert resolve_link("https://a.com/", "/page#section") == "https://a.com/page"

    def test_trailing_slash_preserved(self) -> None:
        """Test trailing slashes are kept."""
        assert resolve_link("https://a.com/", "/docs/") == "https://a.com/docs/"

    @pytest.mark.parametrize("href", ["#top", "mailto:me@a.com", "javascript:void(0)", "", "   ", "/logo.png"])
    def test_skipped_hrefs(self, href: str) -> None:
        """Test skipped hrefs resolve to None."""
        assert resolve_link("https://a.com/", href) is None

    def test_skip_reason(self) -> None:
        """Test the reason given for skipped hrefs."""
        skip, reason = should_skip_href("/files/report.pdf")

        assert skip is True
        assert ".pdf" in reason


class TestHosts:
    """Tests for host extraction."""

    def test_host_lowercased(self) -> None:
        """Test hosts are lowercased without port."""
        assert host_of("https://WWW.Example.COM:8080/path") == "www.example.com"

    def test_root_sentinel_has_no_host(self) -> None:
        """Test the root sentinel has no host."""
        assert host_of("(root)") is None
        assert host_of("") is None

    def test_valid_http_url(self) -> None:
        """Test HTTP URL validation."""
        assert is_valid_http_url("https://a.com")
        assert not is_valid_http_url("ftp://a.com/file")
        assert not is_valid_http_url("/relative")


class TestPrettyUrlLabel:
    """Tests for compact node labels."""

    def test_host_and_path(self) -> None:
        """Test labels combine host and path."""
        assert pretty_url_label("https://example.com/docs/") == "example.com/docs"
        assert pretty_url_label("https://example.com/a/b?q=1") == "example.com/a/b"

    def test_root_path_kept(self) -> None:
        """Test the root path keeps its slash."""
        assert pretty_url_label("https://example.com/") == "example.com/"

    def test_special_values(self) -> None:
        """Test labels for the root sentinel and junk."""
        assert pretty_url_label("(root)") == "(root)"
        assert pretty_url_label("  ") == "(null)"
        assert pretty_url_label("not a url") == "not a url"
