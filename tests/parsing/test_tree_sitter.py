"""Tests for the tree-sitter parse-facts provider."""

from __future__ import annotations

import textwrap

import pytest

from archmap.errors import ParseFailure
from archmap.parsing import DYNAMIC_IMPORT, IMPORT, REEXPORT, REQUIRE, TreeSitterFactsProvider


@pytest.fixture(scope="module")
def provider() -> TreeSitterFactsProvider:
    return TreeSitterFactsProvider()


def _src(text: str) -> str:
    return textwrap.dedent(text).lstrip("\n")


def test_supports_known_suffixes(provider: TreeSitterFactsProvider) -> None:
    assert provider.supports("a.ts")
    assert provider.supports("a.TSX")
    assert provider.supports("a.jsx")
    assert provider.supports("a.py")
    assert not provider.supports("a.css")


def test_typescript_declarations_and_exports(provider: TreeSitterFactsProvider) -> None:
    facts = provider.parse(
        "mod.ts",
        _src(
            """
            import { thing } from "./thing";
            const local = 1, other = 2;
            export const shared = 3;
            export function pick(a: number) {
                return a;
            }
            export class Box {}
            abstract class Base {}
            export interface Shape { size: number }
            function helper() {}
            export { helper as renamed };
            export default Box;
            """
        ),
    )

    assert facts.functions == ["pick", "helper"]
    assert facts.classes == ["Box", "Base"]
    assert facts.variables == ["local", "other", "shared"]
    assert facts.exports == {"shared", "pick", "Box", "Shape", "renamed", "default"}


def test_control_flow_kinds(provider: TreeSitterFactsProvider) -> None:
    facts = provider.parse(
        "flow.ts",
        _src(
            """
            export function pick(a: number, b?: number) {
                if (a > 0 && b) {
                    return a;
                }
                for (const x of [1, 2]) {
                    a += x;
                }
                while (a > 10 || a === 0) {
                    a = a / 2;
                }
                switch (a) {
                    case 1:
                        break;
                    case 2:
                        break;
                    default:
                        break;
                }
                try {
                    a = a + 1;
                } catch (e) {
                    a = 0;
                }
                return b ?? (a > 1 ? a : 0);
            }
            """
        ),
    )

    kinds = sorted(facts.iter_control_flow())
    assert kinds == sorted(
        [
            "if_statement",
            "binary_expression",
            "for_in_statement",
            "while_statement",
            "binary_expression",
            "switch_case",
            "switch_case",
            "try_statement",
            "ternary_expression",
        ]
    )


def test_import_specifiers_in_source_order(provider: TreeSitterFactsProvider) -> None:
    facts = provider.parse(
        "entry.js",
        _src(
            """
            import React from "react";
            import { a } from "./a";
            export * from "./b";
            export { c as d } from "./c";
            const e = require("./e");
            const f = () => import("./f");
            const g = require(name);
            """
        ),
    )

    assert [(spec.value, spec.kind) for spec in facts.imports] == [
        ("react", IMPORT),
        ("./a", IMPORT),
        ("./b", REEXPORT),
        ("./c", REEXPORT),
        ("./e", REQUIRE),
        ("./f", DYNAMIC_IMPORT),
    ]
    assert facts.exports == {"d"}


def test_tsx_components_parse(provider: TreeSitterFactsProvider) -> None:
    facts = provider.parse(
        "Panel.tsx",
        _src(
            """
            export default function Panel({ open }: { open: boolean }) {
                return open ? <div className="panel" /> : null;
            }
            """
        ),
    )

    assert facts.functions == ["Panel"]
    assert facts.exports == {"default"}
    assert list(facts.iter_control_flow()) == ["ternary_expression"]


def test_python_top_level_declarations(provider: TreeSitterFactsProvider) -> None:
    facts = provider.parse(
        "pkg/mod.py",
        _src(
            """
            import os

            VALUE = 1
            VALUE = 2

            @decorator
            def top():
                inner = 3
                return inner

            async def fetch():
                return None

            class Thing:
                def method(self):
                    pass
            """
        ),
    )

    assert facts.functions == ["top", "fetch"]
    assert facts.classes == ["Thing"]
    assert facts.variables == ["VALUE"]
    assert facts.imports == []


@pytest.mark.parametrize(
    "path, content",
    [
        ("broken.ts", "function (( {\n"),
        ("broken.js", "const = ;\n"),
        ("broken.py", "def broken(:\n    pass\n"),
    ],
)
def test_syntax_errors_raise_parse_failure(
    provider: TreeSitterFactsProvider, path: str, content: str
) -> None:
    with pytest.raises(ParseFailure):
        provider.parse(path, content)


def test_unsupported_suffix_raises_parse_failure(provider: TreeSitterFactsProvider) -> None:
    with pytest.raises(ParseFailure):
        provider.parse("style.css", "a { color: red; }")
