"""Scan orchestration: validate the root, build the graph, aggregate stats."""

from __future__ import annotations

import threading
from pathlib import Path
from typing import Optional

from .config import ArchmapConfig
from .errors import InvalidPath
from .graph.builder import GraphBuilder
from .graph.stats import aggregate
from .logging import get_logger
from .models import ScanResult
from .parsing.base import FactsProvider
from .parsing.tree_sitter import TreeSitterFactsProvider
from .scanner import SourceScanner, load_scan_config, normalize_path
from .stores.digest_cache import DigestCache


class Orchestrator:
    """Public entry point producing a complete graph-plus-stats snapshot per call."""

    def __init__(
        self,
        *,
        provider: FactsProvider | None = None,
        digest_cache: DigestCache | None = None,
        workers: Optional[int] = None,
        top_n: Optional[int] = None,
    ) -> None:
        self._provider = provider or TreeSitterFactsProvider()
        self._digest_cache = digest_cache if digest_cache is not None else DigestCache()
        self._workers = workers
        self._top_n = top_n
        self.logger = get_logger("orchestrator")

    def scan(
        self, root: str | Path, *, cancel_event: threading.Event | None = None
    ) -> ScanResult:
        """Scan ``root`` and return nodes, edges and stats.

        Raises :class:`InvalidPath` before doing any work when ``root`` is not
        an existing directory; per-file failures never surface here.
        """
        root_path = self._validate(root)
        self.logger.info("Scanning %s", root_path)

        config = load_scan_config(root_path)
        builder = self._builder_for(config)
        graph = builder.build(root_path, cancel_event=cancel_event)

        top_n = self._top_n if self._top_n is not None else config.scan.top_n
        stats = aggregate(graph.file_nodes, top_n=top_n)
        self.logger.info(
            "Scan finished: %d files, %d lines, average complexity %.2f",
            stats.total_files,
            stats.total_loc,
            stats.average_complexity,
        )
        return ScanResult(
            root=normalize_path(root_path),
            nodes=graph.nodes,
            edges=graph.edges,
            stats=stats,
        )

    @staticmethod
    def _validate(root: str | Path) -> Path:
        if root is None or not str(root).strip():
            raise InvalidPath(str(root), "no path provided")
        candidate = Path(root).expanduser()
        if not candidate.exists():
            raise InvalidPath(str(root), "path does not exist")
        if not candidate.is_dir():
            raise InvalidPath(str(root), "not a directory")
        return candidate.resolve()

    def _builder_for(self, config: ArchmapConfig) -> GraphBuilder:
        workers = self._workers if self._workers is not None else config.scan.workers
        return GraphBuilder(
            scanner=SourceScanner.from_config(config),
            provider=self._provider,
            digest_cache=self._digest_cache,
            workers=workers,
        )


def scan(
    root: str | Path, *, cancel_event: threading.Event | None = None
) -> ScanResult:
    """Convenience wrapper around :meth:`Orchestrator.scan` with default settings."""
    return Orchestrator().scan(root, cancel_event=cancel_event)


__all__ = ["Orchestrator", "scan"]
