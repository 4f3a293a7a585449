"""Tests for the tree-sitter JavaScript adapter and its syntax helpers."""

import pytest

from spreadlint.javascript_adapter import (
    JSX_ELEMENT_TYPES,
    JavaScriptAdapter,
    string_literal_value,
    unwrap_parentheses,
)
from spreadlint.types import ImportSpecifierInfo, NamedAttribute, SpreadAttribute

from conftest import dedent


class TestJavaScriptAdapter:

    def setup_method(self):
        self.adapter = JavaScriptAdapter()

    def test_identity(self):
        assert self.adapter.language_id == "javascript"
        assert self.adapter.file_extensions == (".js", ".jsx", ".mjs")

    def test_parse_jsx(self):
        tree = self.adapter.parse("<div {...css(foo)} />;\n")
        assert tree.root_node.type == "program"
        assert not tree.root_node.has_error
        elements = list(self.adapter.iter_nodes(tree, JSX_ELEMENT_TYPES))
        assert [e.type for e in elements] == ["jsx_self_closing_element"]

    def test_parse_accepts_bytes(self):
        tree = self.adapter.parse(b"const a = 1;\n")
        assert tree.root_node.type == "program"

    def test_iter_nodes_document_order(self):
        tree = self.adapter.parse("a(); b(); c();\n")
        calls = list(self.adapter.iter_nodes(tree, ("call_expression",)))
        assert [c.text for c in calls] == [b"a()", b"b()", b"c()"]

    def test_iter_nodes_without_tree(self):
        assert list(self.adapter.iter_nodes(None)) == []

    def test_import_specifiers(self):
        code = dedent("""
            import React, { css as bar, withStyles } from './withStyles';
            import * as ns from 'x';
            import d from 'y';
            import 'side-effect';
        """)
        specs = list(self.adapter.iter_import_specifiers(self.adapter.parse(code)))

        assert [(s.source, s.imported, s.local) for s in specs] == [
            ("./withStyles", "css", "bar"),
            ("./withStyles", "withStyles", "withStyles"),
        ]
        assert isinstance(specs[0], ImportSpecifierInfo)
        start, end = specs[0].range
        assert code.encode("utf-8")[start:end] == b"css as bar"

    def test_import_specifier_double_quotes(self):
        specs = list(self.adapter.iter_import_specifiers(
            self.adapter.parse('import { css } from "withStyles";\n')))
        assert [(s.source, s.local) for s in specs] == [("withStyles", "css")]

    def test_require_destructures(self):
        code = dedent("""
            const { css, a: b, c = 1 } = require('withStyles');
            const x = require('y');
            const { z } = notRequire('y');
            const { w } = require(name);
            require();
        """)
        found = list(self.adapter.iter_require_destructures(self.adapter.parse(code)))
        assert [(r.source, r.key, r.local) for r in found] == [
            ("withStyles", "css", "css"),
            ("withStyles", "a", "b"),
            ("withStyles", "c", "c"),
        ]

    def test_require_nested_pattern_is_skipped(self):
        code = "const { css: { inner } } = require('withStyles');\n"
        assert list(self.adapter.iter_require_destructures(self.adapter.parse(code))) == []

    def test_require_source(self):
        tree = self.adapter.parse("require('a'); require(); require(b); other('c');\n")
        sources = [self.adapter.require_source(n) for n in self.adapter.iter_nodes(tree, ("call_expression",))]
        assert sources == ["a", None, None, None]

    def test_jsx_attributes(self):
        tree = self.adapter.parse('<div a="1" {...b} c={d} {...(e())} disabled />;\n')
        (element,) = self.adapter.iter_nodes(tree, JSX_ELEMENT_TYPES)
        attributes = self.adapter.iter_jsx_attributes(element)

        kinds = [type(a).__name__ for a in attributes]
        assert kinds == ["NamedAttribute", "SpreadAttribute", "NamedAttribute", "SpreadAttribute", "NamedAttribute"]
        assert [a.name for a in attributes if isinstance(a, NamedAttribute)] == ["a", "c", "disabled"]
        spreads = [a for a in attributes if isinstance(a, SpreadAttribute)]
        assert spreads[0].argument.type == "identifier"
        assert spreads[1].argument.type == "call_expression"

    def test_jsx_opening_element_attributes(self):
        tree = self.adapter.parse('<div {...css(a)} style={s}>text</div>;\n')
        (element,) = self.adapter.iter_nodes(tree, JSX_ELEMENT_TYPES)
        assert element.type == "jsx_opening_element"
        assert len(self.adapter.iter_jsx_attributes(element)) == 2

    def test_string_literal_value(self):
        tree = self.adapter.parse("x = 'withStyles'; y = \"\"; z = `t`;\n")
        strings = list(self.adapter.iter_nodes(tree, ("string", "template_string")))
        assert [string_literal_value(s) for s in strings] == ["withStyles", "", None]
        assert string_literal_value(None) is None

    def test_unwrap_parentheses(self):
        tree = self.adapter.parse("((a));\n")
        outer = next(self.adapter.iter_nodes(tree, ("parenthesized_expression",)))
        assert outer.text == b"((a))"
        assert unwrap_parentheses(outer).type == "identifier"

    def test_list_files(self, tmp_path):
        (tmp_path / "a.js").write_text("")
        (tmp_path / "b.jsx").write_text("")
        (tmp_path / "c.ts").write_text("")
        (tmp_path / "node_modules").mkdir()
        (tmp_path / "node_modules" / "d.js").write_text("")

        files = self.adapter.list_files([str(tmp_path)])
        assert [f.rsplit("/", 1)[-1] for f in files] == ["a.js", "b.jsx"]

    def test_byte_to_linecol(self):
        text = "const a = 1;\nconst é = <div />;\n"
        byte = text.encode("utf-8").index(b"<div")
        assert self.adapter.byte_to_linecol(text, byte) == (2, 11)

    @pytest.mark.parametrize("ext", [".js", ".jsx", ".mjs"])
    def test_extensions_in_list_files(self, tmp_path, ext):
        path = tmp_path / f"mod{ext}"
        path.write_text("")
        assert self.adapter.list_files([str(path)]) == [str(path)]

