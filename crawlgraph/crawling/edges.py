"""Edge records and their CSV representation.

Every fetched page becomes one :class:`CrawledEdge`: the link from the page
that discovered it (or the ``(root)`` sentinel for a seed) to the page itself,
plus the page metadata collected while fetching.

Rows are written with every text field quoted and embedded quotes doubled;
numbers are written bare. Quoted fields may span lines, so files must be read
with :func:`iter_csv_records` (or any RFC 4180 reader) rather than line by
line.
"""

from __future__ import annotations

import csv
import io
from dataclasses import dataclass
from typing import Iterable, Iterator, List, Sequence

ROOT_SENTINEL = "(root)"
NO_TITLE = "(no title)"
UNKNOWN_CONTENT_TYPE = "unknown"

CSV_COLUMNS: tuple[str, ...] = (
    "Source",
    "ParentUrl",
    "Url",
    "Depth",
    "Title",
    "StatusCode",
    "ContentType",
    "Content",
    "Description",
    "LoadTimeSeconds",
    "WordCount",
)
CSV_HEADER = ",".join(CSV_COLUMNS)

# Source, ParentUrl and Url are all a graph needs.
MIN_GRAPH_FIELDS = 3


@dataclass(frozen=True)
class CrawledEdge:
    """One successfully fetched page and the link that led to it."""

    source: str
    parent_url: str | None
    url: str
    depth: int
    title: str = NO_TITLE
    status_code: int = 0
    content_type: str = UNKNOWN_CONTENT_TYPE
    content: str = ""
    description: str = ""
    load_time_seconds: float = 0.0
    word_count: int = 0

    def __post_init__(self) -> None:
        if self.depth < 0:
            raise ValueError(f"depth must be >= 0, got {self.depth}")
        if self.load_time_seconds < 0:
            raise ValueError(f"load_time_seconds must be >= 0, got {self.load_time_seconds}")
        if self.word_count < 0:
            raise ValueError(f"word_count must be >= 0, got {self.word_count}")

    @property
    def parent_or_root(self) -> str:
        return self.parent_url or ROOT_SENTINEL

    def to_csv_line(self) -> str:
        """Render the record as one CSV row (without line terminator)."""
        return ",".join((
            escape_field(self.source),
            escape_field(self.parent_or_root),
            escape_field(self.url),
            str(self.depth),
            escape_field(self.title),
            str(self.status_code),
            escape_field(self.content_type),
            escape_field(self.content),
            escape_field(self.description),
            f"{self.load_time_seconds:.2f}",
            str(self.word_count),
        ))

    @classmethod
    def from_fields(cls, fields: Sequence[str]) -> "CrawledEdge | None":
        """Build a record from parsed CSV fields.

        Rows with fewer than three fields are rejected (None). Missing or
        unparsable trailing fields fall back to their defaults.
        """
        if len(fields) < MIN_GRAPH_FIELDS:
            return None

        def text(index: int, default: str = "") -> str:
            return fields[index] if index < len(fields) else default

        parent = text(1)
        return cls(
            source=text(0),
            parent_url=None if parent in ("", ROOT_SENTINEL) else parent,
            url=text(2),
            depth=max(_to_int(text(3)), 0),
            title=text(4, NO_TITLE),
            status_code=_to_int(text(5)),
            content_type=text(6, UNKNOWN_CONTENT_TYPE),
            content=text(7),
            description=text(8),
            load_time_seconds=max(_to_float(text(9)), 0.0),
            word_count=max(_to_int(text(10)), 0),
        )


def _to_int(value: str) -> int:
    try:
        return int(value)
    except ValueError:
        return 0


def _to_float(value: str) -> float:
    try:
        return float(value)
    except ValueError:
        return 0.0


def escape_field(value: str | None) -> str:
    """Quote a text field, doubling embedded quotes."""
    if not value:
        return '""'
    return '"' + value.replace('"', '""') + '"'


def unescape_field(value: str) -> str:
    """Inverse of :func:`escape_field` for a single field."""
    if len(value) >= 2 and value.startswith('"') and value.endswith('"'):
        return value[1:-1].replace('""', '"')
    return value


def iter_csv_records(lines: Iterable[str], skip_header: bool = True) -> Iterator[List[str]]:
    """Yield field lists from CSV text, honouring quoted newlines.

    Blank records are skipped.
    """
    reader = csv.reader(lines)
    for index, row in enumerate(reader):
        if skip_header and index == 0:
            continue
        if not row or all(not cell.strip() for cell in row):
            continue
        yield row


def parse_csv_text(text: str, skip_header: bool = True) -> List[CrawledEdge]:
    """Parse CSV text into edge records, skipping malformed rows."""
    edges: List[CrawledEdge] = []
    for row in iter_csv_records(io.StringIO(text, newline=""), skip_header=skip_header):
        edge = CrawledEdge.from_fields(row)
        if edge is not None:
            edges.append(edge)
    return edges
