"""Helpers for writing Graphviz DOT descriptions."""

from __future__ import annotations

from typing import Iterable

COLOR_GOOGLE = "deepskyblue3"
COLOR_OTHER = "darkorange3"
COLOR_BOTH = "mediumpurple3"
COLOR_ROOT = "gray50"

GRAPH_DEFAULTS: tuple[str, ...] = (
    "rankdir=LR;",
    "overlap=false;",
    "splines=true;",
    'node [shape=box, style="rounded", fontsize=10, color=gray50];',
    "edge [color=gray70, arrowsize=0.6];",
)


def source_color(source: str) -> str:
    """Palette color for a source label."""
    return COLOR_GOOGLE if source.strip().lower() == "google" else COLOR_OTHER


def escape_dot(text: str | None) -> str:
    """Make ``text`` safe inside a double-quoted DOT string."""
    if not text or not text.strip():
        return "(null)"
    return text.replace("\\", "\\\\").replace('"', "'")


def shorten(text: str | None, max_len: int) -> str:
    """Truncate to ``max_len`` characters, ending with ``...`` when cut."""
    if not text:
        return ""
    if len(text) <= max_len:
        return text
    return text[: max(max_len - 3, 0)] + "..."


def quoted(text: str) -> str:
    return f'"{escape_dot(text)}"'


def render_digraph(name: str, statements: Iterable[str]) -> str:
    """Wrap indented statements in a ``digraph`` block."""
    lines = [f"digraph {name} {{"]
    lines.extend(f"  {statement}" for statement in statements)
    lines.append("}")
    return "\n".join(lines) + "\n"
