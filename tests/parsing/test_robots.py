"""Tests for robots.txt parsing and caching."""

from __future__ import annotations

from unittest.mock import MagicMock

import requests

from crawlgraph.parsing.robots import RobotsCache, parse_robots_txt

ROBOTS = """
# comment
User-agent: BadBot
Disallow: /

User-agent: crawlgraph
User-agent: other
Disallow: /private
Allow: /private/open
Crawl-delay: 2.5

User-agent: *
Disallow: /tmp/
Disallow: /*.json$
Disallow:
"""


class TestParseRobotsTxt:
    """Tests for rule parsing and matching."""

    def test_specific_agent_group(self) -> None:
        """Test the group naming our agent is used."""
        robots = parse_robots_txt(ROBOTS)

        assert not robots.is_allowed("https://a.com/private/x", "crawlgraph/1.0")
        assert robots.is_allowed("https://a.com/private/open/page", "crawlgraph/1.0")
        assert robots.is_allowed("https://a.com/tmp/x", "crawlgraph/1.0")

    def test_grouped_user_agents_share_rules(self) -> None:
        """Test consecutive User-agent lines share rules."""
        robots = parse_robots_txt(ROBOTS)

        assert not robots.is_allowed("https://a.com/private/x", "other")
        assert robots.crawl_delay("other") == 2.5

    def test_wildcard_fallback(self) -> None:
        """Test the wildcard group applies to other agents."""
        robots = parse_robots_txt(ROBOTS)

        assert not robots.is_allowed("https://a.com/tmp/file", "SomeBot")
        assert not robots.is_allowed("https://a.com/data.json", "SomeBot")
        assert robots.is_allowed("https://a.com/data.json?x=1", "SomeBot")
        assert robots.is_allowed("https://a.com/page", "SomeBot")
        assert robots.crawl_delay("SomeBot") is None

    def test_disallow_all(self) -> None:
        """Test Disallow: / blocks everything."""
        robots = parse_robots_txt(ROBOTS)

        assert not robots.is_allowed("https://a.com/", "BadBot")

    def test_empty_file_allows_everything(self) -> None:
        """Test an empty file allows everything."""
        assert parse_robots_txt("").is_allowed("https://a.com/anything", "crawlgraph")


class TestRobotsCache:
    """Tests for per-host robots.txt fetching."""

    def test_fetches_once_per_host(self) -> None:
        """Test robots.txt is fetched once per host."""
        response = MagicMock(status_code=200, text="User-agent: *\nDisallow: /no")
        session = MagicMock()
        session.get.return_value = response
        cache = RobotsCache(session, "crawlgraph")

        assert not cache.is_allowed("https://a.com/no/1")
        assert cache.is_allowed("https://a.com/yes")

        session.get.assert_called_once_with("https://a.com/robots.txt", timeout=10.0)

    def test_missing_robots_allows_all(self) -> None:
        """Test a missing robots.txt allows everything."""
        session = MagicMock()
        session.get.return_value = MagicMock(status_code=404, text="")

        assert RobotsCache(session, "crawlgraph").is_allowed("https://a.com/private")

    def test_network_error_allows_all(self) -> None:
        """Test a network error allows everything."""
        session = MagicMock()
        session.get.side_effect = requests.ConnectionError("down")

        assert RobotsCache(session, "crawlgraph").is_allowed("https://a.com/private")

    def test_crawl_delay_shares_cached_file(self) -> None:
        """Test Crawl-delay comes from the cached robots.txt."""
        session = MagicMock()
        session.get.return_value = MagicMock(status_code=200, text="User-agent: *\nCrawl-delay: 3\nDisallow: /no")
        cache = RobotsCache(session, "crawlgraph")

        assert cache.crawl_delay("https://a.com/page") == 3.0
        assert not cache.is_allowed("https://a.com/no")
        assert session.get.call_count == 1
