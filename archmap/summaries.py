"""Offline per-file summaries for the file a user selects.

Summaries are never produced during graph construction; callers request them
one file at a time and reuse a :class:`SummaryCache` keyed by content hash and path.
"""

from __future__ import annotations

import os
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from .analysis.file_analyzer import FileAnalyzer
from .errors import FileReadFailure, ParseFailure
from .logging import get_logger
from .parsing.base import FactsProvider
from .parsing.tree_sitter import TreeSitterFactsProvider
from .scanner import hash_content
from .stores.summary_cache import SummaryCache

_CONTENT_SIGNALS = (
    ("useEffect", "Orchestrates side-effects and lifecycle events"),
    ("useState", "Manages reactive local state"),
    ("fetch(", "Handles external data synchronization"),
    ("require(", "Consumes legacy dependencies"),
)
_DEFAULT_RESPONSIBILITIES = (
    "Processes internal data transformations",
    "Exports shared logic units",
)
_DIAGRAM_LIMIT = 8


@dataclass(frozen=True)
class FileSummary:
    purpose: str
    responsibilities: List[str]
    relationships: str
    architecture_role: Optional[str] = None
    design_patterns: List[str] = field(default_factory=list)
    diagram: Optional[str] = None

    def to_payload(self) -> Dict[str, Any]:
        data = asdict(self)
        return {
            "purpose": data["purpose"],
            "responsibilities": data["responsibilities"],
            "relationships": data["relationships"],
            "architectureRole": data["architecture_role"],
            "designPatterns": data["design_patterns"],
            "diagram": data["diagram"],
        }


DIRECTORY_SUMMARY = FileSummary(
    purpose="This is a directory container that organizes related modules.",
    responsibilities=["Namespace management", "FileSystem grouping"],
    relationships="Contains sub-modules and related assets.",
    diagram="graph LR\n  Folder --> Files",
)


def kind_label(path: str) -> str:
    lower = path.lower()
    if lower.endswith((".tsx", ".jsx")):
        return "UI Component"
    if lower.endswith((".ts", ".js", ".py")):
        return "Logic Service"
    return "System File"


class HeuristicSummarizer:
    """Builds a purpose/role summary from content signals and file analysis."""

    def __init__(
        self,
        cache: SummaryCache[FileSummary] | None = None,
        *,
        provider: FactsProvider | None = None,
        analyzer: FileAnalyzer | None = None,
    ) -> None:
        self.cache = cache if cache is not None else SummaryCache()
        self.provider = provider or TreeSitterFactsProvider()
        self.analyzer = analyzer or FileAnalyzer()
        self.logger = get_logger("summaries")

    def summarize(
        self, path: str, content: str, content_hash: str | None = None
    ) -> FileSummary:
        # Name, kind and role depend on the path, so identical content elsewhere is a miss.
        key = (content_hash or hash_content(content.encode("utf-8")), path)
        cached = self.cache.get(key)
        if cached is not None:
            self.logger.debug("Summary cache hit for %s", path)
            return cached

        summary = self._build(path, content)
        self.cache.store(key, summary)
        return summary

    def summarize_path(self, path: str | Path) -> tuple[FileSummary, str, str]:
        """Summarize a file on disk, returning ``(summary, content, hash)``.

        Directories get a fixed container description and an empty content.
        """
        target = Path(path)
        if target.is_dir():
            return DIRECTORY_SUMMARY, "", ""
        try:
            raw = target.read_bytes()
        except OSError as exc:
            raise FileReadFailure(str(path), exc.strerror or str(exc)) from exc
        content = raw.decode("utf-8", errors="replace")
        content_hash = hash_content(raw)
        return self.summarize(str(target), content, content_hash), content, content_hash

    def _build(self, path: str, content: str) -> FileSummary:
        facts = None
        failure = None
        if self.provider.supports(path):
            try:
                facts = self.provider.parse(path, content)
            except ParseFailure as exc:
                failure = exc
        analysis = self.analyzer.analyze(path, content, facts, failure=failure)

        roles = [text for marker, text in _CONTENT_SIGNALS if marker in content]
        focus = roles[0].lower() if roles else "core system logic"
        base_name = os.path.basename(path) or path
        responsibilities = roles or list(_DEFAULT_RESPONSIBILITIES)

        return FileSummary(
            purpose=f"This {kind_label(path)} module ({base_name}) specializes in {focus}.",
            responsibilities=responsibilities,
            relationships="Actively consumed by higher-level orchestrators.",
            architecture_role=analysis.architecture_role,
            design_patterns=list(analysis.design_patterns),
            diagram=_diagram(base_name, analysis.classes + analysis.functions),
        )


def _diagram(base_name: str, symbols: List[str]) -> str:
    lines = ["graph TD", f'  F["{base_name}"]']
    for index, name in enumerate(symbols[:_DIAGRAM_LIMIT]):
        lines.append(f'  F --> S{index}["{name}"]')
    return "\n".join(lines)


__all__ = ["DIRECTORY_SUMMARY", "FileSummary", "HeuristicSummarizer", "kind_label"]
