"""Fuzzy resolution of import specifiers against the scanned file set.

The resolver never touches the filesystem: a candidate matches only when it is
a member of the known-file set collected by the scanner.
"""

from __future__ import annotations

import posixpath
import re
from typing import AbstractSet, Iterable, List, Optional

from ..scanner import PRIMARY_SUFFIXES, SECONDARY_SUFFIXES

PRIMARY_INDEX = "index"
SECONDARY_INDEX = "__init__"

_DOTTED_MODULE = re.compile(r"^(\.*)((?:[A-Za-z_]\w*)(?:\.[A-Za-z_]\w*)*)?$")


def _join(base_dir: str, relative: str) -> str:
    return posixpath.normpath(posixpath.join(base_dir, relative))


def candidate_paths(base: str, suffixes: Iterable[str], index_name: str) -> List[str]:
    """Return lookup candidates for ``base`` in resolution order."""
    suffixes = tuple(suffixes)
    candidates = [base]
    candidates.extend(f"{base}{suffix}" for suffix in suffixes)
    candidates.extend(f"{base}/{index_name}{suffix}" for suffix in suffixes)
    return candidates


def _first_known(candidates: Iterable[str], known_files: AbstractSet[str]) -> Optional[str]:
    for candidate in candidates:
        if candidate in known_files:
            return candidate
    return None


def is_relative_specifier(specifier: str) -> bool:
    return specifier.startswith(".")


def resolve_specifier(
    specifier: str, from_dir: str, known_files: AbstractSet[str]
) -> Optional[str]:
    """Resolve a TypeScript/JavaScript specifier relative to ``from_dir``.

    Bare package names (``react``, ``@scope/pkg``) denote external
    dependencies and never resolve.
    """
    if not specifier or not is_relative_specifier(specifier):
        return None
    base = _join(from_dir, specifier)
    return _first_known(
        candidate_paths(base, PRIMARY_SUFFIXES, PRIMARY_INDEX), known_files
    )


def module_to_relative_path(module: str) -> Optional[tuple[int, str]]:
    """Split a dotted module into (leading dot count, slash path).

    Returns ``None`` when ``module`` is not valid dotted notation.
    """
    match = _DOTTED_MODULE.match(module)
    if match is None:
        return None
    dots, dotted = match.groups()
    if not dots and not dotted:
        return None
    return len(dots), (dotted or "").replace(".", "/")


def resolve_module(
    module: str,
    from_dir: str,
    root: str,
    known_files: AbstractSet[str],
) -> Optional[str]:
    """Resolve a Python module name.

    Absolute modules are tried against the importing directory first and the
    scan root second. Package-relative modules (leading dots) climb from the
    importing directory and are never retried against the root.
    """
    parsed = module_to_relative_path(module)
    if parsed is None:
        return None
    level, relative = parsed

    if level:
        base_dir = from_dir
        for _ in range(level - 1):
            base_dir = posixpath.dirname(base_dir)
        bases = [_join(base_dir, relative) if relative else base_dir]
    else:
        bases = [_join(from_dir, relative), _join(root, relative)]

    for base in bases:
        found = _first_known(
            candidate_paths(base, SECONDARY_SUFFIXES, SECONDARY_INDEX), known_files
        )
        if found is not None:
            return found
    return None


class PathResolver:
    """Binds the known-file set and scan root for repeated lookups."""

    def __init__(self, known_files: Iterable[str], root: str) -> None:
        self._known = frozenset(known_files)
        self._root = root

    @property
    def known_files(self) -> frozenset[str]:
        return self._known

    def resolve(self, specifier: str, from_dir: str) -> Optional[str]:
        return resolve_specifier(specifier, from_dir, self._known)

    def resolve_module(self, module: str, from_dir: str) -> Optional[str]:
        return resolve_module(module, from_dir, self._root, self._known)


__all__ = [
    "PathResolver",
    "candidate_paths",
    "is_relative_specifier",
    "module_to_relative_path",
    "resolve_module",
    "resolve_specifier",
]
