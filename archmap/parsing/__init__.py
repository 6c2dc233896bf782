"""Parse-facts providers."""

from __future__ import annotations

from .base import (
    DYNAMIC_IMPORT,
    IMPORT,
    REEXPORT,
    REQUIRE,
    FactsProvider,
    ImportSpecifier,
    ParseFacts,
)
from .tree_sitter import TreeSitterFactsProvider

__all__ = [
    "DYNAMIC_IMPORT",
    "IMPORT",
    "REEXPORT",
    "REQUIRE",
    "FactsProvider",
    "ImportSpecifier",
    "ParseFacts",
    "TreeSitterFactsProvider",
]
