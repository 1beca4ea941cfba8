"""robots.txt parsing and per-host compliance checks.

Only the parts a polite crawler needs are supported: ``User-agent`` groups,
``Allow``/``Disallow`` with ``*`` and ``$`` wildcards (longest match wins,
Allow wins ties) and ``Crawl-delay``.

Reference: https://www.rfc-editor.org/rfc/rfc9309
"""

from __future__ import annotations

import logging
import re
import threading
from dataclasses import dataclass, field
from typing import Dict, List
from urllib.parse import urlparse

import requests

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RobotRule:
    path: str
    allowed: bool

    def matches(self, url_path: str) -> bool:
        if not self.path:
            # "Disallow:" with no value blocks nothing.
            return False
        anchored = self.path.endswith("$")
        body = self.path[:-1] if anchored else self.path
        pattern = "^" + ".*".join(re.escape(part) for part in body.split("*"))
        if anchored:
            pattern += "$"
        return re.match(pattern, url_path) is not None


@dataclass
class RobotGroup:
    """Rules that apply to one or more user agents."""

    agents: List[str] = field(default_factory=list)
    rules: List[RobotRule] = field(default_factory=list)
    crawl_delay: float | None = None

    def is_allowed(self, url_path: str) -> bool:
        matching = [rule for rule in self.rules if rule.matches(url_path)]
        if not matching:
            return True
        best = max(matching, key=lambda rule: (len(rule.path), rule.allowed))
        return best.allowed


@dataclass
class RobotsTxt:
    groups: List[RobotGroup] = field(default_factory=list)

    def group_for(self, user_agent: str) -> RobotGroup | None:
        """Most specific group for ``user_agent``, falling back to ``*``."""
        agent = user_agent.lower()
        wildcard = None
        for group in self.groups:
            for name in group.agents:
                name = name.lower()
                if not name:
                    continue
                if name == "*":
                    wildcard = wildcard or group
                elif name in agent:
                    return group
        return wildcard

    def is_allowed(self, url: str, user_agent: str = "*") -> bool:
        parsed = urlparse(url)
        path = parsed.path or "/"
        if parsed.query:
            path = f"{path}?{parsed.query}"
        group = self.group_for(user_agent)
        return True if group is None else group.is_allowed(path)

    def crawl_delay(self, user_agent: str = "*") -> float | None:
        group = self.group_for(user_agent)
        return group.crawl_delay if group else None


def parse_robots_txt(content: str) -> RobotsTxt:
    """Parse robots.txt text into rule groups."""
    robots = RobotsTxt()
    current: RobotGroup | None = None
    in_agent_block = False

    for raw_line in content.splitlines():
        line = raw_line.split("#", 1)[0].strip()
        if not line or ":" not in line:
            continue
        directive, _, value = line.partition(":")
        directive = directive.strip().lower()
        value = value.strip()

        if directive == "user-agent":
            # Consecutive User-agent lines share one group.
            if current is None or not in_agent_block:
                current = RobotGroup()
                robots.groups.append(current)
            current.agents.append(value)
            in_agent_block = True
            continue

        in_agent_block = False
        if current is None:
            continue
        if directive in ("allow", "disallow"):
            current.rules.append(RobotRule(path=value, allowed=directive == "allow"))
        elif directive == "crawl-delay":
            try:
                current.crawl_delay = float(value)
            except ValueError:
                logger.debug("Ignoring invalid Crawl-delay %r", value)

    return robots


class RobotsCache:
    """Fetches and caches robots.txt once per scheme+host.

    A missing or unreachable robots.txt allows everything, matching common
    crawler behaviour.
    """

    def __init__(
        self,
        session: requests.Session,
        user_agent: str = "*",
        timeout: float = 10.0,
    ) -> None:
        self.session = session
        self.user_agent = user_agent
        self.timeout = timeout
        self._cache: Dict[str, RobotsTxt] = {}
        self._lock = threading.Lock()

    @staticmethod
    def _key(url: str) -> str:
        parsed = urlparse(url)
        return f"{parsed.scheme}://{parsed.netloc}"

    def _load(self, key: str) -> RobotsTxt:
        robots_url = f"{key}/robots.txt"
        try:
            response = self.session.get(robots_url, timeout=self.timeout)
        except requests.RequestException as exc:
            logger.debug("robots.txt unavailable at %s: %s", robots_url, exc)
            return RobotsTxt()
        if response.status_code != 200:
            return RobotsTxt()
        return parse_robots_txt(response.text)

    def get(self, url: str) -> RobotsTxt:
        key = self._key(url)
        with self._lock:
            cached = self._cache.get(key)
        if cached is not None:
            return cached
        robots = self._load(key)
        with self._lock:
            return self._cache.setdefault(key, robots)

    def is_allowed(self, url: str) -> bool:
        return self.get(url).is_allowed(url, self.user_agent)

    def crawl_delay(self, url: str) -> float | None:
        return self.get(url).crawl_delay(self.user_agent)
