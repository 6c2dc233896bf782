"""Core data models shared across archmap components."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, ClassVar, Dict, List, Optional, Union

FILE_KIND = "file"
FOLDER_KIND = "folder"
FOLDER_HASH = "folder"

DEFAULT_ROLE = "Logic"
UNKNOWN_ROLE = "Unknown"

# Presentation hints only; nothing downstream keys behaviour off these.
_ROLE_COLORS = {
    "Verification": "#2e7d32",
    "Edge/API": "#c62828",
    "Presentation": "#00838f",
    "Service/Logic": "#6a1b9a",
    "Orchestration": "#ef6c00",
    "Logic": "#0066cc",
}
_FOLDER_COLOR = "#242426"
_FALLBACK_COLOR = "#141416"


@dataclass(frozen=True)
class FileAnalysis:
    """Structural facts and heuristics computed for one source file."""

    functions: List[str] = field(default_factory=list)
    classes: List[str] = field(default_factory=list)
    variables: List[str] = field(default_factory=list)
    export_count: int = 0
    line_count: int = 0
    complexity: int = 0
    architecture_role: str = DEFAULT_ROLE
    design_patterns: List[str] = field(default_factory=list)
    dependency_count: int = 0
    degraded: bool = False
    error: Optional[str] = None


@dataclass(frozen=True)
class FileNode:
    """Graph node for an analysed source file."""

    kind: ClassVar[str] = FILE_KIND

    id: str
    label: str
    byte_size: int
    content_hash: str
    analysis: FileAnalysis
    parent_id: Optional[str] = None


@dataclass(frozen=True)
class FolderNode:
    """Graph node for a directory that holds at least one analysed file."""

    kind: ClassVar[str] = FOLDER_KIND

    id: str
    label: str
    byte_size: int = 0
    content_hash: str = FOLDER_HASH
    parent_id: Optional[str] = None


GraphNode = Union[FileNode, FolderNode]


@dataclass(frozen=True)
class GraphEdge:
    """Directed dependency from one file node to another."""

    id: str
    source: str
    target: str


@dataclass(frozen=True)
class HotspotEntry:
    node_id: str
    name: str
    score: int


@dataclass(frozen=True)
class RepositoryStats:
    """Repository-wide snapshot derived from the finished file nodes."""

    total_loc: int = 0
    total_files: int = 0
    average_complexity: float = 0.0
    top_complex_files: List[HotspotEntry] = field(default_factory=list)
    layer_breakdown: Dict[str, int] = field(default_factory=dict)


@dataclass(frozen=True)
class ScanResult:
    """Complete, self-contained output of one scan."""

    root: str
    nodes: List[GraphNode]
    edges: List[GraphEdge]
    stats: RepositoryStats

    @property
    def file_nodes(self) -> List[FileNode]:
        return [node for node in self.nodes if isinstance(node, FileNode)]

    @property
    def folder_nodes(self) -> List[FolderNode]:
        return [node for node in self.nodes if isinstance(node, FolderNode)]

    def to_payload(self) -> Dict[str, Any]:
        """Return the JSON-ready structure consumed by the presentation layer."""
        return {
            "nodes": [node_to_payload(node) for node in self.nodes],
            "edges": [
                {"id": edge.id, "source": edge.source, "target": edge.target}
                for edge in self.edges
            ],
            "stats": stats_to_payload(self.stats),
        }


def role_color(role: Optional[str]) -> str:
    if role is None:
        return _FALLBACK_COLOR
    return _ROLE_COLORS.get(role, _FALLBACK_COLOR)


def node_to_payload(node: GraphNode) -> Dict[str, Any]:
    payload: Dict[str, Any] = {
        "id": node.id,
        "label": node.label,
        "type": node.kind,
        "fileSize": node.byte_size,
        "hash": node.content_hash,
    }
    if node.parent_id is not None:
        payload["parentId"] = node.parent_id

    if isinstance(node, FolderNode):
        payload["color"] = _FOLDER_COLOR
        return payload

    analysis = node.analysis
    payload["color"] = role_color(analysis.architecture_role)
    payload["data"] = {
        "functions": list(analysis.functions),
        "classes": list(analysis.classes),
        "variables": list(analysis.variables),
        "exportCount": analysis.export_count,
        "loc": analysis.line_count,
        "complexity": analysis.complexity,
        "architectureRole": analysis.architecture_role,
        "designPatterns": list(analysis.design_patterns),
        "dependencyCount": analysis.dependency_count,
    }
    return payload


def stats_to_payload(stats: RepositoryStats) -> Dict[str, Any]:
    return {
        "totalLoc": stats.total_loc,
        "totalFiles": stats.total_files,
        "averageComplexity": stats.average_complexity,
        "topComplexFiles": [
            {"id": entry.node_id, "name": entry.name, "score": entry.score}
            for entry in stats.top_complex_files
        ],
        "layerBreakdown": dict(stats.layer_breakdown),
    }
