"""Tree-sitter powered parse-facts provider."""

from __future__ import annotations

import os
import threading
from typing import Dict, Iterator, List, Optional, Set

from tree_sitter import Node, Parser
from tree_sitter_language_pack import get_parser

from ..errors import ParseFailure
from .base import (
    DYNAMIC_IMPORT,
    IMPORT,
    REEXPORT,
    REQUIRE,
    FactsProvider,
    ImportSpecifier,
    ParseFacts,
)

_GRAMMAR_BY_SUFFIX = {
    ".ts": "typescript",
    ".tsx": "tsx",
    ".js": "javascript",
    ".jsx": "javascript",
    ".py": "python",
}

_CONTROL_FLOW_KINDS = {
    "if_statement",
    "for_statement",
    "for_in_statement",
    "while_statement",
    "do_statement",
    "switch_case",
    "ternary_expression",
    "try_statement",
}
_SHORT_CIRCUIT_OPERATORS = {"&&", "||"}

_FUNCTION_DECLARATIONS = {"function_declaration", "generator_function_declaration"}
_CLASS_DECLARATIONS = {"class_declaration", "abstract_class_declaration"}
_FUNCTION_EXPRESSIONS = {"function_expression", "function", "generator_function"}
_CLASS_EXPRESSIONS = {"class"}
_VARIABLE_DECLARATIONS = {"lexical_declaration", "variable_declaration"}
_TYPE_DECLARATIONS = {
    "interface_declaration",
    "type_alias_declaration",
    "enum_declaration",
}


def _node_text(node: Node, source_bytes: bytes) -> str:
    return source_bytes[node.start_byte : node.end_byte].decode("utf-8", errors="ignore")


def _string_value(node: Node, source_bytes: bytes) -> Optional[str]:
    if node.type != "string":
        return None
    text = _node_text(node, source_bytes)
    if len(text) < 2:
        return None
    return text[1:-1]


def _walk(node: Node) -> Iterator[Node]:
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(current.children))


class TreeSitterFactsProvider(FactsProvider):
    """Extracts declarations, imports and control-flow kinds with tree-sitter grammars."""

    def __init__(self) -> None:
        # Parsers are not safe to share between threads.
        self._local = threading.local()

    def supports(self, path: str) -> bool:
        return self._grammar_for(path) is not None

    def parse(self, path: str, content: str) -> ParseFacts:
        grammar = self._grammar_for(path)
        if grammar is None:
            raise ParseFailure(path, "no grammar available for this file type")

        source_bytes = content.encode("utf-8")
        try:
            tree = self._get_parser(grammar).parse(source_bytes)
        except Exception as exc:
            raise ParseFailure(path, f"parser error: {exc}") from exc

        root = tree.root_node
        if root.has_error:
            raise ParseFailure(path, "syntax error")

        if grammar == "python":
            return self._python_facts(root, source_bytes)
        return self._script_facts(root, source_bytes)

    @staticmethod
    def _grammar_for(path: str) -> Optional[str]:
        return _GRAMMAR_BY_SUFFIX.get(os.path.splitext(path)[1].lower())

    def _get_parser(self, grammar: str) -> Parser:
        parsers: Dict[str, Parser] | None = getattr(self._local, "parsers", None)
        if parsers is None:
            parsers = {}
            self._local.parsers = parsers
        parser = parsers.get(grammar)
        if parser is None:
            parser = get_parser(grammar)
            parsers[grammar] = parser
        return parser

    # ------------------------------------------------------------------
    # TypeScript / JavaScript

    def _script_facts(self, root: Node, source_bytes: bytes) -> ParseFacts:
        facts = ParseFacts()
        for child in root.children:
            if child.type == "export_statement":
                self._collect_export(child, source_bytes, facts)
            elif child.type == "import_statement":
                specifier = self._import_source(child, source_bytes)
                if specifier is not None:
                    facts.imports.append(ImportSpecifier(specifier, IMPORT))
            else:
                self._collect_declaration(child, source_bytes, facts, exported=False)

        facts.imports.extend(self._call_specifiers(root, source_bytes))
        facts.control_flow = self._control_flow_kinds(root)
        return facts

    def _collect_declaration(
        self,
        node: Node,
        source_bytes: bytes,
        facts: ParseFacts,
        *,
        exported: bool,
    ) -> List[str]:
        names: List[str] = []
        if node.type in _FUNCTION_DECLARATIONS:
            name = self._field_text(node, "name", source_bytes)
            if name:
                facts.functions.append(name)
                names.append(name)
        elif node.type in _CLASS_DECLARATIONS:
            name = self._field_text(node, "name", source_bytes)
            if name:
                facts.classes.append(name)
                names.append(name)
        elif node.type in _VARIABLE_DECLARATIONS:
            for declarator in node.named_children:
                if declarator.type != "variable_declarator":
                    continue
                name_node = declarator.child_by_field_name("name")
                if name_node is None or name_node.type != "identifier":
                    continue
                name = _node_text(name_node, source_bytes)
                facts.variables.append(name)
                names.append(name)
        elif node.type in _TYPE_DECLARATIONS and exported:
            name = self._field_text(node, "name", source_bytes)
            if name:
                names.append(name)
        return names

    def _collect_export(self, node: Node, source_bytes: bytes, facts: ParseFacts) -> None:
        is_default = any(child.type == "default" for child in node.children)

        source = node.child_by_field_name("source")
        if source is not None:
            specifier = _string_value(source, source_bytes)
            if specifier is not None:
                facts.imports.append(ImportSpecifier(specifier, REEXPORT))

        declaration = node.child_by_field_name("declaration")
        if declaration is not None:
            names = self._collect_declaration(declaration, source_bytes, facts, exported=True)
            if is_default:
                facts.exports.add("default")
            else:
                facts.exports.update(names)
            return

        if is_default:
            facts.exports.add("default")
            value = node.child_by_field_name("value")
            if value is not None:
                self._collect_named_expression(value, source_bytes, facts)
            return

        for child in node.children:
            if child.type != "export_clause":
                continue
            for spec in child.named_children:
                if spec.type != "export_specifier":
                    continue
                alias = spec.child_by_field_name("alias")
                name = spec.child_by_field_name("name")
                target = alias or name
                if target is not None:
                    facts.exports.add(_node_text(target, source_bytes))

    def _collect_named_expression(
        self, node: Node, source_bytes: bytes, facts: ParseFacts
    ) -> None:
        # export default function Name() {} may parse as a named expression.
        name = self._field_text(node, "name", source_bytes)
        if not name:
            return
        if node.type in _FUNCTION_EXPRESSIONS:
            facts.functions.append(name)
        elif node.type in _CLASS_EXPRESSIONS:
            facts.classes.append(name)

    def _import_source(self, node: Node, source_bytes: bytes) -> Optional[str]:
        source = node.child_by_field_name("source")
        if source is None:
            # import x = require("y")
            for child in node.children:
                if child.type == "import_require_clause":
                    source = child.child_by_field_name("source")
                    break
        if source is None:
            return None
        return _string_value(source, source_bytes)

    def _call_specifiers(self, root: Node, source_bytes: bytes) -> List[ImportSpecifier]:
        specifiers: List[ImportSpecifier] = []
        for node in _walk(root):
            if node.type != "call_expression":
                continue
            function = node.child_by_field_name("function")
            arguments = node.child_by_field_name("arguments")
            if function is None or arguments is None:
                continue
            if function.type == "import":
                kind = DYNAMIC_IMPORT
            elif function.type == "identifier" and _node_text(function, source_bytes) == "require":
                kind = REQUIRE
            else:
                continue
            if not arguments.named_children:
                continue
            value = _string_value(arguments.named_children[0], source_bytes)
            if value is not None:
                specifiers.append(ImportSpecifier(value, kind))
        return specifiers

    def _control_flow_kinds(self, root: Node) -> Iterator[str]:
        for node in _walk(root):
            if node.type in _CONTROL_FLOW_KINDS:
                yield node.type
            elif node.type == "binary_expression":
                operator = node.child_by_field_name("operator")
                if operator is not None and operator.type in _SHORT_CIRCUIT_OPERATORS:
                    yield node.type

    # ------------------------------------------------------------------
    # Python

    def _python_facts(self, root: Node, source_bytes: bytes) -> ParseFacts:
        facts = ParseFacts()
        seen_variables: Set[str] = set()
        for child in root.children:
            node = child
            if node.type == "decorated_definition":
                definition = node.child_by_field_name("definition")
                if definition is None:
                    continue
                node = definition
            if node.type == "function_definition":
                name = self._field_text(node, "name", source_bytes)
                if name:
                    facts.functions.append(name)
            elif node.type == "class_definition":
                name = self._field_text(node, "name", source_bytes)
                if name:
                    facts.classes.append(name)
            elif node.type == "expression_statement":
                for expression in node.named_children:
                    if expression.type != "assignment":
                        continue
                    left = expression.child_by_field_name("left")
                    if left is None or left.type != "identifier":
                        continue
                    name = _node_text(left, source_bytes)
                    if name not in seen_variables:
                        seen_variables.add(name)
                        facts.variables.append(name)
        return facts

    @staticmethod
    def _field_text(node: Node, field_name: str, source_bytes: bytes) -> str:
        child = node.child_by_field_name(field_name)
        return _node_text(child, source_bytes) if child is not None else ""


__all__ = ["TreeSitterFactsProvider"]
