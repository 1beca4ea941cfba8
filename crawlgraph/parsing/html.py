"""HTML page extraction for crawled pages.

Pulls out what an edge record stores (title, meta description, cleaned body
text, word count) and the outgoing links the fetch engine follows.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import List

from bs4 import BeautifulSoup

from .urls import resolve_link

# Page chrome removed before the body text is collected.
BOILERPLATE_TAGS = ("nav", "header", "footer", "script", "style", "noscript")

_WHITESPACE = re.compile(r"\s+")


@dataclass
class ExtractedPage:
    """Content extracted from one HTML document.

    Attributes:
        title: Contents of <title>, None when missing or blank.
        description: ``<meta name="description">`` content, "" when missing.
        text: Body text with boilerplate removed and whitespace collapsed.
        links: Absolute outgoing link URLs in document order, de-duplicated.
    """

    title: str | None = None
    description: str = ""
    text: str = ""
    links: List[str] = field(default_factory=list)

    @property
    def word_count(self) -> int:
        return len(self.text.split()) if self.text else 0


def collapse_whitespace(value: str) -> str:
    return _WHITESPACE.sub(" ", value).strip()


def extract_page(html: str, base_url: str) -> ExtractedPage:
    """Parse ``html`` fetched from ``base_url``.

    Example:
        >>> page = extract_page('<title>T</title><a href="/a">A</a>', "https://example.com/")
        >>> page.links
        ['https://example.com/a']
    """
    soup = BeautifulSoup(html, "html.parser")

    base_tag = soup.find("base", href=True)
    link_base = resolve_link(base_url, base_tag["href"]) if base_tag else None
    link_base = link_base or base_url

    links: List[str] = []
    seen: set[str] = set()
    for anchor in soup.find_all(["a", "area"], href=True):
        url = resolve_link(link_base, anchor["href"])
        if url and url not in seen:
            seen.add(url)
            links.append(url)

    title = None
    if soup.title and soup.title.string:
        title = collapse_whitespace(soup.title.string) or None

    description = ""
    meta = soup.find("meta", attrs={"name": re.compile(r"^description$", re.I)})
    if meta is not None:
        description = collapse_whitespace(meta.get("content") or "")

    for tag in soup.find_all(BOILERPLATE_TAGS):
        tag.decompose()
    body = soup.body or soup
    text = collapse_whitespace(body.get_text(" "))

    return ExtractedPage(title=title, description=description, text=text, links=links)
