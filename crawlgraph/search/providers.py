"""Search engine clients that turn a query into seed URLs."""

from __future__ import annotations

import logging
import time
from typing import Callable, Protocol

import requests

from .cache import SearchCache

logger = logging.getLogger(__name__)

GOOGLE_ENDPOINT = "https://www.googleapis.com/customsearch/v1"
BRAVE_ENDPOINT = "https://api.search.brave.com/res/v1/web/search"
GOOGLE_PAGE_SIZE = 10
DEFAULT_TIMEOUT = 30.0


class SearchError(RuntimeError):
    """Raised when a search API reports an error."""


class SearchProvider(Protocol):
    name: str

    def get_results(self, query: str, max_results: int, use_cache: bool = False) -> list[str]:
        ...


def _dedupe(links: list[str]) -> list[str]:
    return list(dict.fromkeys(links))


class GoogleSearchProvider:
    """Google Custom Search JSON API client.

    Results are requested in pages of up to 10 until ``max_results`` links are
    collected or the API returns a short page.
    """

    name = "Google"

    def __init__(
        self,
        api_key: str,
        cx: str,
        cache: SearchCache,
        session: requests.Session | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        page_delay: float = 0.1,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.api_key = api_key
        self.cx = cx
        self.cache = cache
        self.session = session or requests.Session()
        self.timeout = timeout
        self.page_delay = page_delay
        self._sleep = sleep

    def get_results(self, query: str, max_results: int, use_cache: bool = False) -> list[str]:
        if use_cache:
            cached = self.cache.read(self.name, query)
            if cached:
                logger.info("[Cache] (%s) Loaded %d results from cache file.", self.name, len(cached))
                return cached[:max_results]

        results: list[str] = []
        start = 1
        while len(results) < max_results:
            num = min(GOOGLE_PAGE_SIZE, max_results - len(results))
            payload = self._fetch_page(query, start, num)
            items = payload.get("items")
            if not items:
                break
            for item in items:
                link = item.get("link") if isinstance(item, dict) else None
                if link and link.strip():
                    results.append(link)
            start += num
            if len(items) < num:
                break
            self._sleep(self.page_delay)

        if results:
            self.cache.write(self.name, query, results)
            logger.info("[Cache] (%s) Saved %d results to cache file.", self.name, len(results))
        return results

    def _fetch_page(self, query: str, start: int, num: int) -> dict:
        params = {"key": self.api_key, "cx": self.cx, "q": query, "start": start, "num": num}
        try:
            response = self.session.get(GOOGLE_ENDPOINT, params=params, timeout=self.timeout)
        except requests.RequestException as exc:
            raise SearchError(f"Google API request failed: {exc}") from exc

        try:
            payload = response.json()
        except ValueError:
            payload = {}

        if not response.ok:
            message = None
            if isinstance(payload, dict):
                message = (payload.get("error") or {}).get("message")
            raise SearchError(f"Google API error: {message or f'HTTP {response.status_code}'}")
        return payload if isinstance(payload, dict) else {}


class BraveSearchProvider:
    """Brave Web Search API client.

    HTTP 429 (monthly quota exhausted) falls back to cached results. Other
    failures are logged and produce an empty list.
    """

    name = "Brave"

    def __init__(
        self,
        token: str,
        cache: SearchCache,
        session: requests.Session | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        country: str = "pl",
    ) -> None:
        self.token = token
        self.cache = cache
        self.session = session or requests.Session()
        self.timeout = timeout
        self.country = country

    def get_results(self, query: str, max_results: int, use_cache: bool = False) -> list[str]:
        if use_cache:
            cached = self.cache.read(self.name, query)
            if cached:
                logger.info("[Cache] (%s) Loaded %d links from cache.", self.name, len(cached))
                return cached[:max_results]

        headers = {"X-Subscription-Token": self.token, "Accept": "application/json"}
        params = {"q": query, "count": max_results, "country": self.country}
        try:
            response = self.session.get(BRAVE_ENDPOINT, params=params, headers=headers, timeout=self.timeout)
        except requests.RequestException as exc:
            logger.warning("[Brave] Request failed: %s", exc)
            return []

        if response.status_code == 429:
            logger.warning("[Brave] Query limit exceeded (HTTP 429).")
            cached = self.cache.read(self.name, query)
            if cached:
                logger.info("[Brave] Using cached data.")
                return cached[:max_results]
            return []

        if not response.ok:
            logger.warning("[Brave] API error (%d)", response.status_code)
            return []

        try:
            payload = response.json()
        except ValueError as exc:
            logger.warning("[Brave] Invalid JSON response: %s", exc)
            return []

        links: list[str] = []
        web = payload.get("web") if isinstance(payload, dict) else None
        for item in (web or {}).get("results") or []:
            url = item.get("url") if isinstance(item, dict) else None
            if url and url.strip():
                links.append(url)
        logger.info("[Brave] API returned %d results.", len(links))

        results = _dedupe(links)[:max_results]
        if results:
            self.cache.write(self.name, query, results)
        logger.info("[Brave] Collected %d results in total.", len(results))
        return results
