"""Graph construction, import resolution and repository statistics."""

from __future__ import annotations

from .builder import GraphBuildResult, GraphBuilder
from .resolver import PathResolver, resolve_module, resolve_specifier
from .stats import aggregate

__all__ = [
    "GraphBuildResult",
    "GraphBuilder",
    "PathResolver",
    "aggregate",
    "resolve_module",
    "resolve_specifier",
]
