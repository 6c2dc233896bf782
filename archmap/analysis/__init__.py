"""Per-file analysis and heuristic rule tables."""

from __future__ import annotations

from .file_analyzer import FileAnalyzer, count_lines, degraded_analysis
from .rules import PATTERN_RULES, ROLE_RULES, Rule, RuleSubject, detect_patterns, infer_role

__all__ = [
    "FileAnalyzer",
    "PATTERN_RULES",
    "ROLE_RULES",
    "Rule",
    "RuleSubject",
    "count_lines",
    "degraded_analysis",
    "detect_patterns",
    "infer_role",
]
