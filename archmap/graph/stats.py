"""Repository-wide statistics over finished file nodes."""

from __future__ import annotations

from collections import Counter
from typing import Iterable, List

from ..config import DEFAULT_TOP_N
from ..models import UNKNOWN_ROLE, FileNode, HotspotEntry, RepositoryStats


def aggregate(file_nodes: Iterable[FileNode], *, top_n: int = DEFAULT_TOP_N) -> RepositoryStats:
    """Reduce file nodes to totals, mean complexity, hotspots and layer counts.

    Total over any input, including no files at all.
    """
    nodes: List[FileNode] = list(file_nodes)
    if not nodes:
        return RepositoryStats()

    total_loc = sum(node.analysis.line_count for node in nodes)
    total_complexity = sum(node.analysis.complexity for node in nodes)

    # sorted() is stable, so ties keep discovery order.
    ranked = sorted(nodes, key=lambda node: node.analysis.complexity, reverse=True)
    hotspots = [
        HotspotEntry(node_id=node.id, name=node.label, score=node.analysis.complexity)
        for node in ranked[: max(top_n, 0)]
    ]

    layers: Counter[str] = Counter(
        node.analysis.architecture_role or UNKNOWN_ROLE for node in nodes
    )

    return RepositoryStats(
        total_loc=total_loc,
        total_files=len(nodes),
        average_complexity=total_complexity / len(nodes),
        top_complex_files=hotspots,
        layer_breakdown=dict(layers),
    )


__all__ = ["aggregate"]
