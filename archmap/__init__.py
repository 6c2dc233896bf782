"""File-level dependency graphs and architecture statistics for source trees."""

from .errors import FileReadFailure, InvalidPath, ParseFailure, ScanCancelled, ScanError
from .models import FileAnalysis, FileNode, FolderNode, GraphEdge, RepositoryStats, ScanResult
from .orchestrator import Orchestrator, scan

__version__ = "0.1.0"

__all__ = [
    "FileAnalysis",
    "FileNode",
    "FileReadFailure",
    "FolderNode",
    "GraphEdge",
    "InvalidPath",
    "Orchestrator",
    "ParseFailure",
    "RepositoryStats",
    "ScanCancelled",
    "ScanError",
    "ScanResult",
    "scan",
]
