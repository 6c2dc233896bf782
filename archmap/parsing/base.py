"""Capability interface for per-file parse facts."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Iterable, Iterator, List, Set

IMPORT = "import"
REEXPORT = "reexport"
DYNAMIC_IMPORT = "dynamic"
REQUIRE = "require"


@dataclass(frozen=True)
class ImportSpecifier:
    """A raw module specifier found in a file, prior to resolution."""

    value: str
    kind: str = IMPORT


@dataclass
class ParseFacts:
    """Declarations and syntax facts extracted from one file.

    ``control_flow`` is a lazily evaluated stream of node kinds relevant to
    complexity counting; it is consumed at most once.
    """

    functions: List[str] = field(default_factory=list)
    classes: List[str] = field(default_factory=list)
    variables: List[str] = field(default_factory=list)
    exports: Set[str] = field(default_factory=set)
    imports: List[ImportSpecifier] = field(default_factory=list)
    control_flow: Iterable[str] = field(default_factory=tuple)

    def iter_control_flow(self) -> Iterator[str]:
        return iter(self.control_flow)


class FactsProvider(ABC):
    """Contract for engines that turn file content into :class:`ParseFacts`."""

    @abstractmethod
    def supports(self, path: str) -> bool:
        """Return True when this provider has a grammar for ``path``."""

    @abstractmethod
    def parse(self, path: str, content: str) -> ParseFacts:
        """Return parse facts, raising ``ParseFailure`` on unparsable content."""
