"""Dependency graph construction over a directory tree."""

from __future__ import annotations

import os
import re
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence, Set, Tuple

from ..analysis.file_analyzer import FileAnalyzer
from ..errors import AnalysisError, FileReadFailure, InvalidPath, ParseFailure, ScanCancelled
from ..logging import get_logger
from ..models import FileAnalysis, FileNode, FolderNode, GraphEdge, GraphNode
from ..parsing.base import FactsProvider, ImportSpecifier, ParseFacts
from ..parsing.tree_sitter import TreeSitterFactsProvider
from ..scanner import SourceFile, SourceScanner, hash_content, normalize_path
from ..stores.digest_cache import DigestCache
from .resolver import PathResolver

_PY_IMPORT = re.compile(r"^[ \t]*import[ \t]+([^\n#;]+)", re.MULTILINE)
_PY_FROM_IMPORT = re.compile(
    r"^[ \t]*from[ \t]+(\.*[\w.]*)[ \t]+import[ \t]*(\([^)]*\)|[^\n#;]+)", re.MULTILINE
)
_PY_COMMENT = re.compile(r"#[^\n]*")


@dataclass
class _AnalysedFile:
    source: SourceFile
    analysis: FileAnalysis
    byte_size: int
    content_hash: str
    specifiers: List[ImportSpecifier] = field(default_factory=list)
    python_imports: List[Tuple[str, Tuple[str, ...]]] = field(default_factory=list)


@dataclass(frozen=True)
class GraphBuildResult:
    """Nodes in discovery order (folders precede their first file) and edges."""

    nodes: List[GraphNode]
    edges: List[GraphEdge]

    @property
    def file_nodes(self) -> List[FileNode]:
        return [node for node in self.nodes if isinstance(node, FileNode)]


def python_imports(content: str) -> List[Tuple[str, Tuple[str, ...]]]:
    """Return ``(module, imported_names)`` pairs from ``import``/``from`` statements."""
    found: List[Tuple[int, str, Tuple[str, ...]]] = []
    for match in _PY_IMPORT.finditer(content):
        for part in match.group(1).split(","):
            module = part.strip().split(" ")[0].strip()
            if module:
                found.append((match.start(), module, ()))
    for match in _PY_FROM_IMPORT.finditer(content):
        module = match.group(1)
        # A parenthesised list may span lines and carry trailing comments.
        body = _PY_COMMENT.sub("", match.group(2)).strip("() \t\n")
        names = []
        for part in body.split(","):
            tokens = part.split()
            if tokens and tokens[0] not in ("*", "\\"):
                names.append(tokens[0])
        found.append((match.start(), module, tuple(names)))
    found.sort(key=lambda item: item[0])
    return [(module, names) for _, module, names in found]


class GraphBuilder:
    """Walks a tree, analyses every source file and resolves file-to-file edges.

    With ``workers > 1`` per-file analysis runs on a thread pool; results are
    merged back in discovery order so the output matches a sequential run.
    Edge resolution only starts once every file has been analysed.
    """

    def __init__(
        self,
        *,
        scanner: SourceScanner | None = None,
        provider: FactsProvider | None = None,
        analyzer: FileAnalyzer | None = None,
        digest_cache: DigestCache | None = None,
        workers: int = 1,
    ) -> None:
        if workers < 1:
            raise ValueError("workers must be a positive integer")
        self.scanner = scanner or SourceScanner()
        self.provider = provider or TreeSitterFactsProvider()
        self.analyzer = analyzer or FileAnalyzer()
        self.digest_cache = digest_cache
        self.workers = workers
        self.logger = get_logger("builder")

    def build(
        self, root: str | Path, *, cancel_event: threading.Event | None = None
    ) -> GraphBuildResult:
        root_text = normalize_path(root)
        if not os.path.isdir(root_text):
            raise InvalidPath(str(root), "not a directory")
        if not os.access(root_text, os.R_OK | os.X_OK):
            raise InvalidPath(str(root), "directory is not readable")

        sources = self.scanner.discover(root_text)
        self.logger.debug("Discovered %d source files under %s", len(sources), root_text)

        analysed = self._analyse_all(sources, cancel_event)

        # Barrier: resolution needs the complete known-file set.
        resolver = PathResolver((item.source.path for item in analysed), root_text)
        edges = self._resolve_edges(analysed, resolver)

        out_degree: Dict[str, int] = {}
        for edge in edges:
            out_degree[edge.source] = out_degree.get(edge.source, 0) + 1

        nodes = self._build_nodes(root_text, analysed, out_degree)
        self.logger.info(
            "Built graph for %s: %d nodes, %d edges", root_text, len(nodes), len(edges)
        )
        return GraphBuildResult(nodes=nodes, edges=edges)

    # ------------------------------------------------------------------
    # Per-file analysis

    def _analyse_all(
        self, sources: Sequence[SourceFile], cancel_event: threading.Event | None
    ) -> List[_AnalysedFile]:
        def _task(source: SourceFile) -> _AnalysedFile:
            if cancel_event is not None and cancel_event.is_set():
                raise ScanCancelled("scan cancelled")
            return self._analyse_file(source)

        if self.workers == 1 or len(sources) < 2:
            return [_task(source) for source in sources]

        with ThreadPoolExecutor(max_workers=self.workers) as executor:
            return list(executor.map(_task, sources))

    def _analyse_file(self, source: SourceFile) -> _AnalysedFile:
        content = ""
        byte_size = 0
        content_hash = ""
        failure: Optional[AnalysisError] = None
        facts: Optional[ParseFacts] = None

        try:
            raw, content_hash = self._read(source)
            byte_size = len(raw)
            try:
                content = raw.decode("utf-8")
            except UnicodeDecodeError as exc:
                content = raw.decode("utf-8", errors="replace")
                raise FileReadFailure(source.path, f"not valid UTF-8: {exc.reason}") from exc
            facts = self.provider.parse(source.path, content)
        except (FileReadFailure, ParseFailure) as exc:
            failure = exc
            self.logger.debug("Degrading analysis of %s: %s", source.path, exc.message)

        analysis = self.analyzer.analyze(
            source.relative_path, content, facts, failure=failure
        )

        specifiers: List[ImportSpecifier] = []
        py_imports: List[Tuple[str, Tuple[str, ...]]] = []
        if source.is_primary:
            if facts is not None:
                specifiers = list(facts.imports)
        elif not isinstance(failure, FileReadFailure):
            # Matched textually, so a failed parse still yields import edges.
            py_imports = python_imports(content)

        return _AnalysedFile(
            source=source,
            analysis=analysis,
            byte_size=byte_size,
            content_hash=content_hash,
            specifiers=specifiers,
            python_imports=py_imports,
        )

    def _read(self, source: SourceFile) -> Tuple[bytes, str]:
        try:
            stat_result = os.stat(source.path)
            with open(source.path, "rb") as handle:
                raw = handle.read()
        except OSError as exc:
            raise FileReadFailure(source.path, exc.strerror or str(exc)) from exc

        if self.digest_cache is None:
            return raw, hash_content(raw)

        size = stat_result.st_size
        mtime_ns = stat_result.st_mtime_ns
        digest = self.digest_cache.get(source.path, size=size, mtime_ns=mtime_ns)
        if digest is None:
            digest = hash_content(raw)
            self.digest_cache.store(source.path, size=size, mtime_ns=mtime_ns, digest=digest)
        return raw, digest

    # ------------------------------------------------------------------
    # Edges

    def _resolve_edges(
        self, analysed: Iterable[_AnalysedFile], resolver: PathResolver
    ) -> List[GraphEdge]:
        edges: List[GraphEdge] = []
        seen: Set[Tuple[str, str]] = set()

        def _add(source_path: str, target: Optional[str]) -> None:
            if target is None or target == source_path:
                return
            key = (source_path, target)
            if key in seen:
                return
            seen.add(key)
            edges.append(
                GraphEdge(id=f"e-{source_path}-{target}", source=source_path, target=target)
            )

        for item in analysed:
            source_path = item.source.path
            from_dir = item.source.directory
            for specifier in item.specifiers:
                _add(source_path, resolver.resolve(specifier.value, from_dir))
            for module, names in item.python_imports:
                for target in self._resolve_python_import(resolver, module, names, from_dir):
                    _add(source_path, target)
        return edges

    @staticmethod
    def _resolve_python_import(
        resolver: PathResolver, module: str, names: Tuple[str, ...], from_dir: str
    ) -> List[str]:
        # ``from . import a, b`` names submodules; fall back to the package itself.
        if module and not module.strip("."):
            targets = []
            for name in names:
                target = resolver.resolve_module(f"{module}{name}", from_dir)
                if target is not None:
                    targets.append(target)
            if targets:
                return targets
        target = resolver.resolve_module(module, from_dir)
        return [target] if target is not None else []

    # ------------------------------------------------------------------
    # Nodes

    @staticmethod
    def _build_nodes(
        root_text: str, analysed: Iterable[_AnalysedFile], out_degree: Dict[str, int]
    ) -> List[GraphNode]:
        nodes: List[GraphNode] = []
        folders: Set[str] = set()
        for item in analysed:
            directory = item.source.directory
            parent_id: Optional[str] = None
            if directory != root_text:
                parent_id = directory
                if directory not in folders:
                    folders.add(directory)
                    nodes.append(
                        FolderNode(id=directory, label=directory[len(root_text) :].lstrip("/"))
                    )
            analysis = replace(
                item.analysis, dependency_count=out_degree.get(item.source.path, 0)
            )
            nodes.append(
                FileNode(
                    id=item.source.path,
                    label=os.path.basename(item.source.path),
                    byte_size=item.byte_size,
                    content_hash=item.content_hash,
                    analysis=analysis,
                    parent_id=parent_id,
                )
            )
        return nodes


__all__ = ["GraphBuildResult", "GraphBuilder", "python_imports"]
