"""URL helpers shared by the fetch engine and the graph tools.

Crawl scope is the seed's host: links to other hosts are recorded nowhere and
never fetched. Comparison works on the lower-cased host of each URL.
"""

from __future__ import annotations

from urllib.parse import urldefrag, urljoin, urlparse

from crawlgraph.crawling.edges import ROOT_SENTINEL

# Extensions that never lead to an HTML page.
SKIP_EXTENSIONS: frozenset[str] = frozenset((
    ".jpg", ".jpeg", ".png", ".gif", ".webp", ".svg", ".ico",
    ".mp4", ".webm", ".avi", ".mov", ".wmv",
    ".mp3", ".wav", ".ogg", ".flac",
    ".zip", ".tar", ".gz", ".rar", ".7z",
    ".exe", ".dmg", ".msi", ".deb", ".rpm",
    ".css", ".js", ".woff", ".woff2", ".ttf", ".eot",
    ".pdf",
))

_NON_HTTP_SCHEMES = ("javascript", "mailto", "tel", "data", "file", "ftp")


def is_valid_http_url(url: str) -> bool:
    """True for absolute http(s) URLs with a host."""
    try:
        parsed = urlparse(url)
    except ValueError:
        return False
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def should_skip_href(href: str) -> tuple[bool, str]:
    """Check whether a raw href can be ignored before resolving it.

    Returns:
        Tuple of (should_skip, reason)
    """
    if not href or not href.strip():
        return True, "Empty URL"
    href = href.strip()
    if href.startswith("#"):
        return True, "Fragment-only URL"

    parsed = urlparse(href)
    if parsed.scheme in _NON_HTTP_SCHEMES:
        return True, f"Non-HTTP scheme: {parsed.scheme}"

    path_lower = parsed.path.lower()
    for ext in SKIP_EXTENSIONS:
        if path_lower.endswith(ext):
            return True, f"Skipped extension: {ext}"
    return False, ""


def resolve_link(base_url: str, href: str) -> str | None:
    """Resolve ``href`` against ``base_url`` and drop the fragment.

    The result is otherwise left exactly as resolved; two URLs that differ only
    by a trailing slash or query order stay distinct.
    """
    skip, _ = should_skip_href(href)
    if skip:
        return None
    try:
        absolute, _fragment = urldefrag(urljoin(base_url, href.strip()))
    except ValueError:
        return None
    if not is_valid_http_url(absolute):
        return None
    return absolute


def host_of(url: str) -> str | None:
    """Lower-cased host of an absolute URL, None for the root sentinel or junk."""
    if not url or url == ROOT_SENTINEL:
        return None
    try:
        host = urlparse(url).hostname
    except ValueError:
        return None
    return host.lower() if host else None


def pretty_url_label(url: str) -> str:
    """Compact label: host plus path without a trailing slash.

    Examples:
        >>> pretty_url_label("https://example.com/docs/")
        'example.com/docs'
    """
    if not url or not url.strip():
        return "(null)"
    if url == ROOT_SENTINEL:
        return ROOT_SENTINEL
    try:
        parsed = urlparse(url)
    except ValueError:
        return url
    if not parsed.scheme or not parsed.hostname:
        return url
    path = parsed.path
    if len(path) > 1 and path.endswith("/"):
        path = path.rstrip("/")
    label = parsed.hostname + path
    return label or url
