"""Graph export and cross-source comparison."""

from __future__ import annotations


from .compare import ComparisonEngine, ComparisonResult, SetOverlap
from .exporter import ExportResult, GraphExporter
from .render import GraphRenderer


__all__ = [
    "ComparisonEngine",
    "ComparisonResult",
    "ExportResult",
    "GraphExporter",
    "GraphRenderer",
    "SetOverlap",
]
