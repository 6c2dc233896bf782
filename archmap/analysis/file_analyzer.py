"""Per-file structural analysis: complexity, role and pattern heuristics."""

from __future__ import annotations

import os
import re
from typing import Optional

from ..errors import AnalysisError
from ..logging import get_logger
from ..models import DEFAULT_ROLE, FileAnalysis
from ..parsing.base import ParseFacts
from ..scanner import SECONDARY_SUFFIXES
from .rules import RuleSubject, detect_patterns, infer_role

# Whole-word keywords at the start of a trimmed line.
_BRANCH_LINE = re.compile(r"^(?:if|elif|for|while|except|case|async\s+for)\b")

logger = get_logger("analysis")


def count_lines(content: str) -> int:
    """Naive line count: newline-separated segments, zero for empty content."""
    if not content:
        return 0
    return content.count("\n") + 1


def line_keyword_complexity(content: str) -> int:
    return sum(1 for line in content.splitlines() if _BRANCH_LINE.match(line.strip()))


def degraded_analysis(content: str, reason: str | None = None) -> FileAnalysis:
    """Safe defaults used when a file cannot be read or parsed."""
    return FileAnalysis(
        line_count=count_lines(content),
        complexity=0,
        architecture_role=DEFAULT_ROLE,
        degraded=True,
        error=reason,
    )


class FileAnalyzer:
    """Computes a :class:`FileAnalysis` from content and parse facts.

    ``analyze`` never raises: a missing ``facts`` argument (the parse failed)
    or any error while consuming the facts yields a degraded analysis.
    """

    def analyze(
        self,
        path: str,
        content: str,
        facts: Optional[ParseFacts],
        *,
        failure: Optional[AnalysisError] = None,
    ) -> FileAnalysis:
        if facts is None:
            reason = failure.message if failure is not None else "no parse facts"
            return degraded_analysis(content, reason)
        try:
            return self._analyze(path, content, facts)
        except Exception as exc:
            logger.debug("Analysis of %s degraded: %s", path, exc)
            return degraded_analysis(content, str(exc))

    def _analyze(self, path: str, content: str, facts: ParseFacts) -> FileAnalysis:
        functions = list(facts.functions)
        classes = list(facts.classes)
        is_secondary = os.path.splitext(path)[1].lower() in SECONDARY_SUFFIXES

        if is_secondary:
            # No formal export list: every top-level declaration is public.
            export_count = len(functions) + len(classes)
        else:
            export_count = len(facts.exports)

        complexity = len(functions) + len(classes)
        if is_secondary:
            complexity += line_keyword_complexity(content)
        else:
            complexity += sum(1 for _ in facts.iter_control_flow())

        subject = RuleSubject(
            path=path,
            content=content,
            functions=functions,
            classes=classes,
            export_count=export_count,
        )
        return FileAnalysis(
            functions=functions,
            classes=classes,
            variables=list(facts.variables),
            export_count=export_count,
            line_count=count_lines(content),
            complexity=complexity,
            architecture_role=infer_role(subject),
            design_patterns=detect_patterns(subject),
        )


__all__ = [
    "FileAnalyzer",
    "count_lines",
    "degraded_analysis",
    "line_keyword_complexity",
]
