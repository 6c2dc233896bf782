"""Source file discovery for graph construction."""

from __future__ import annotations

import hashlib
import os
import posixpath
from dataclasses import dataclass, field
from fnmatch import fnmatchcase
from pathlib import Path
from typing import Iterable, Iterator, List, Optional, Sequence

from .config import ArchmapConfig, ConfigError, load_config
from .errors import InvalidPath
from .logging import get_logger

# Pruned wherever they appear in the tree, before any ignore rule is consulted.
EXCLUDED_DIR_NAMES = frozenset(
    {
        "node_modules",
        "bower_components",
        "vendor",
        "dist",
        "build",
        "out",
        ".next",
        ".nuxt",
        "coverage",
        ".git",
        ".hg",
        ".svn",
        "__pycache__",
        ".pytest_cache",
        ".mypy_cache",
        ".ruff_cache",
        ".cache",
        ".venv",
        "venv",
        ".tox",
        ".idea",
        ".turbo",
        ".archmap",
    }
)

# Order matters: it is also the extension order used by the path resolver.
PRIMARY_SUFFIXES: tuple[str, ...] = (".ts", ".tsx", ".js", ".jsx")
SECONDARY_SUFFIXES: tuple[str, ...] = (".py",)

_LANGUAGES = {
    **dict.fromkeys((".ts", ".tsx"), "TypeScript"),
    **dict.fromkeys((".js", ".jsx"), "JavaScript"),
    ".py": "Python",
}

logger = get_logger("scanner")


@dataclass(frozen=True)
class SourceFile:
    """A discovered file eligible for analysis."""

    path: str
    relative_path: str
    language: str

    @property
    def suffix(self) -> str:
        return os.path.splitext(self.path)[1].lower()

    @property
    def is_primary(self) -> bool:
        return self.suffix in PRIMARY_SUFFIXES

    @property
    def directory(self) -> str:
        return posixpath.dirname(self.path)


@dataclass(frozen=True)
class ExclusionPattern:
    """One gitignore-style line: ``dir/`` matches directories only, ``/x`` is root-anchored."""

    glob: str
    dirs_only: bool = False
    rooted: bool = False
    inverted: bool = False

    @classmethod
    def parse(cls, line: str) -> Optional["ExclusionPattern"]:
        text = line.strip()
        if not text or text.startswith("#"):
            return None
        inverted = text.startswith("!")
        text = text[1:] if inverted else text
        dirs_only = text.endswith("/")
        text = text.rstrip("/")
        rooted = text.startswith("/")
        text = text.lstrip("/")
        if not text:
            return None
        return cls(glob=text, dirs_only=dirs_only, rooted=rooted, inverted=inverted)

    def hits(self, rel_path: str, is_dir: bool) -> bool:
        if self.dirs_only and not is_dir:
            return False
        if self.rooted or "/" in self.glob:
            return fnmatchcase(rel_path, self.glob)
        # Unanchored patterns apply to any single path component.
        return any(fnmatchcase(part, self.glob) for part in rel_path.split("/"))


@dataclass
class ExclusionRules:
    """Ordered exclusion patterns; the last matching pattern decides."""

    patterns: List[ExclusionPattern] = field(default_factory=list)

    @classmethod
    def from_lines(cls, lines: Iterable[str]) -> "ExclusionRules":
        parsed = (ExclusionPattern.parse(line) for line in lines)
        return cls([pattern for pattern in parsed if pattern is not None])

    @classmethod
    def from_gitignore(cls, path: Path) -> "ExclusionRules":
        if not path.is_file():
            return cls()
        try:
            return cls.from_lines(path.read_text(encoding="utf-8").splitlines())
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("Ignoring unreadable %s: %s", path, exc)
            return cls()

    def extend(self, other: "ExclusionRules") -> None:
        self.patterns.extend(other.patterns)

    def excludes(self, rel_path: str, is_dir: bool) -> bool:
        verdict = False
        for pattern in self.patterns:
            if pattern.hits(rel_path, is_dir):
                verdict = not pattern.inverted
        return verdict


def normalize_path(path: str | Path) -> str:
    """Return an absolute, slash-separated path without a trailing slash."""
    text = os.path.abspath(str(path)).replace("\\", "/")
    if len(text) > 1:
        text = text.rstrip("/")
    return text


def detect_language(path: str) -> str | None:
    return _LANGUAGES.get(os.path.splitext(path)[1].lower())


def hash_content(content: bytes) -> str:
    return hashlib.sha256(content).hexdigest()


def load_scan_config(root: Path) -> ArchmapConfig:
    """Return the root's configuration, falling back to defaults when it is malformed."""
    try:
        return load_config(root)
    except ConfigError as exc:
        logger.warning("Ignoring malformed configuration in %s: %s", root, exc)
        return ArchmapConfig(root=root)


class SourceScanner:
    """Walks a directory tree and yields analysable source files in a stable order."""

    def __init__(
        self,
        *,
        extra_excludes: Sequence[str] = (),
        respect_gitignore: bool = True,
    ) -> None:
        self._extra_excludes = list(extra_excludes)
        self._respect_gitignore = respect_gitignore

    @classmethod
    def from_config(cls, config: ArchmapConfig) -> "SourceScanner":
        return cls(
            extra_excludes=config.exclude_paths,
            respect_gitignore=config.scan.respect_gitignore,
        )

    def discover(self, root: str | Path) -> List[SourceFile]:
        """Return every primary/secondary-language file under ``root``."""
        root_path = Path(root)
        if not root_path.is_dir():
            raise InvalidPath(str(root), "not a directory")
        return list(self._walk(root_path, self._rules_for(root_path)))

    def _rules_for(self, root: Path) -> ExclusionRules:
        rules = (
            ExclusionRules.from_gitignore(root / ".gitignore")
            if self._respect_gitignore
            else ExclusionRules()
        )
        rules.extend(ExclusionRules.from_lines(self._extra_excludes))
        return rules

    def _walk(self, root: Path, rules: ExclusionRules) -> Iterator[SourceFile]:
        root_text = normalize_path(root)

        def _skip_unreadable(exc: OSError) -> None:
            logger.warning("Skipping unreadable directory %s: %s", exc.filename, exc.strerror)

        for dirpath, dirnames, filenames in os.walk(root, onerror=_skip_unreadable):
            current = normalize_path(dirpath)
            prefix = current[len(root_text) :].strip("/")
            prefix = f"{prefix}/" if prefix else ""

            # Pruning in place keeps os.walk out of excluded subtrees.
            dirnames[:] = [
                name
                for name in sorted(dirnames)
                if name not in EXCLUDED_DIR_NAMES and not rules.excludes(prefix + name, True)
            ]

            for filename in sorted(filenames):
                language = detect_language(filename)
                if language is None or rules.excludes(prefix + filename, False):
                    continue
                yield SourceFile(
                    path=posixpath.join(current, filename),
                    relative_path=prefix + filename,
                    language=language,
                )


__all__ = [
    "EXCLUDED_DIR_NAMES",
    "PRIMARY_SUFFIXES",
    "SECONDARY_SUFFIXES",
    "ExclusionPattern",
    "ExclusionRules",
    "SourceFile",
    "SourceScanner",
    "detect_language",
    "hash_content",
    "load_scan_config",
    "normalize_path",
]
