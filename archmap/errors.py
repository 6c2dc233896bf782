"""Error taxonomy for repository scans."""

from __future__ import annotations


class ScanError(RuntimeError):
    """Base class for failures that abort a whole scan."""


class InvalidPath(ScanError):
    """Raised when the scan root is missing, unreadable, or not a directory."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"Invalid path: {path} ({reason})")
        self.path = path
        self.reason = reason


class ScanCancelled(ScanError):
    """Raised when a caller-provided cancel token is set mid-scan."""


class AnalysisError(Exception):
    """Per-file failure; degrades that file's analysis and never aborts a scan."""

    def __init__(self, path: str, message: str) -> None:
        super().__init__(f"{path}: {message}")
        self.path = path
        self.message = message


class FileReadFailure(AnalysisError):
    """The file could not be read or decoded."""


class ParseFailure(AnalysisError):
    """The file content could not be parsed into structural facts."""


__all__ = [
    "AnalysisError",
    "FileReadFailure",
    "InvalidPath",
    "ParseFailure",
    "ScanCancelled",
    "ScanError",
]
