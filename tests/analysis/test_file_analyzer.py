"""Tests for archmap.analysis.file_analyzer."""

from __future__ import annotations

from archmap.analysis.file_analyzer import (
    FileAnalyzer,
    count_lines,
    degraded_analysis,
    line_keyword_complexity,
)
from archmap.errors import ParseFailure
from archmap.parsing.base import ParseFacts


def test_count_lines_uses_naive_splitting() -> None:
    assert count_lines("") == 0
    assert count_lines("one") == 1
    assert count_lines("one\ntwo\n") == 3


def test_primary_complexity_counts_functions_classes_and_control_flow() -> None:
    facts = ParseFacts(
        functions=["a", "b"],
        classes=["C"],
        exports={"a", "C"},
        control_flow=["if_statement", "for_statement", "binary_expression"],
    )
    analysis = FileAnalyzer().analyze("src/mod.ts", "const x = 1;\n", facts)

    assert analysis.complexity == 3 + 3
    assert analysis.export_count == 2
    assert analysis.functions == ["a", "b"]
    assert analysis.classes == ["C"]
    assert analysis.degraded is False


def test_control_flow_stream_is_consumed_lazily() -> None:
    def _kinds():
        yield "if_statement"
        yield "ternary_expression"

    facts = ParseFacts(control_flow=_kinds())
    assert FileAnalyzer().analyze("a.js", "", facts).complexity == 2


def test_secondary_complexity_counts_keyword_lines() -> None:
    content = (
        "def run(items):\n"
        "    for item in items:\n"
        "        if item:\n"
        "            continue\n"
        "        elif item is None:\n"
        "            pass\n"
        "    while False:\n"
        "        pass\n"
        "    try:\n"
        "        pass\n"
        "    except ValueError:\n"
        "        pass\n"
        "    iffy = 1\n"
        "    # if commented\n"
    )
    facts = ParseFacts(functions=["run"], classes=[], variables=[])
    analysis = FileAnalyzer().analyze("pkg/run.py", content, facts)

    assert line_keyword_complexity(content) == 5
    assert analysis.complexity == 1 + 5
    assert analysis.export_count == 1


def test_secondary_export_count_is_top_level_declarations() -> None:
    facts = ParseFacts(functions=["a", "b"], classes=["C"], exports=set())
    assert FileAnalyzer().analyze("m.py", "", facts).export_count == 3


def test_missing_facts_degrades_to_defaults() -> None:
    failure = ParseFailure("broken.ts", "syntax error")
    analysis = FileAnalyzer().analyze(
        "tests/broken.ts", "line\nline\n", None, failure=failure
    )

    assert analysis.degraded is True
    assert analysis.error == "syntax error"
    assert analysis.complexity == 0
    assert analysis.functions == []
    assert analysis.classes == []
    assert analysis.architecture_role == "Logic"
    assert analysis.line_count == 3


def test_error_while_consuming_facts_degrades() -> None:
    def _explode():
        yield "if_statement"
        raise RuntimeError("tree went away")

    facts = ParseFacts(functions=["f"], control_flow=_explode())
    analysis = FileAnalyzer().analyze("a.ts", "x\n", facts)

    assert analysis.degraded is True
    assert analysis.complexity == 0
    assert analysis.functions == []


def test_role_and_patterns_flow_into_analysis() -> None:
    content = "import { useContext } from 'react';\nconst ctx = useContext(Theme);\n"
    facts = ParseFacts(functions=["Widget"], exports={"Widget"})
    analysis = FileAnalyzer().analyze("components/Widget.tsx", content, facts)

    assert analysis.architecture_role == "Presentation"
    assert analysis.design_patterns == ["Provider"]


def test_degraded_analysis_helper() -> None:
    analysis = degraded_analysis("a\nb", "boom")
    assert analysis.line_count == 2
    assert analysis.error == "boom"
    assert analysis.dependency_count == 0
