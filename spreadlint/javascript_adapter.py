"""
JavaScript language adapter for tree-sitter.

The tree-sitter-javascript grammar includes JSX, so the same parser handles
.js, .jsx and .mjs files.
"""
import logging
import os
import threading
from typing import Any, Iterator, List, Optional, Tuple

import tree_sitter
import tree_sitter_javascript

from .errors import AdapterUnavailableError
from .types import (
    ImportSpecifierInfo,
    LanguageAdapter,
    MarkupAttribute,
    NamedAttribute,
    RequireDestructureInfo,
    SpreadAttribute,
)

logger = logging.getLogger(__name__)

JSX_ELEMENT_TYPES = ("jsx_opening_element", "jsx_self_closing_element")


def _node_text_to_str(node_text: Any) -> str:
    """Helper to convert tree-sitter node.text to string, handling bytes/str."""
    if node_text is None:
        return ""
    if isinstance(node_text, bytes):
        return node_text.decode('utf-8', errors='ignore')
    return str(node_text)


def _named(node) -> List[Any]:
    """Named children of a node without comments."""
    return [child for child in node.named_children if child.type != "comment"]


def string_literal_value(node) -> Optional[str]:
    """Value of a plain string literal node, or None for anything else."""
    if node is None or node.type != "string":
        return None
    text = _node_text_to_str(node.text)
    if len(text) < 2:
        return None
    return text[1:-1]


def unwrap_parentheses(node):
    """Strip any parenthesized_expression wrappers around an expression."""
    while node is not None and node.type == "parenthesized_expression":
        inner = _named(node)
        if len(inner) != 1:
            return node
        node = inner[0]
    return node


def same_node(a, b) -> bool:
    """Whether two node handles point at the same syntax node."""
    if a is None or b is None:
        return False
    return a.type == b.type and a.start_byte == b.start_byte and a.end_byte == b.end_byte


def identifier_name(node) -> Optional[str]:
    """Name of a bare identifier node, or None."""
    if node is None or node.type != "identifier":
        return None
    return _node_text_to_str(node.text)


class JavaScriptAdapter(LanguageAdapter):
    """Tree-sitter adapter for JavaScript language."""

    def __init__(self):
        """Initialize JavaScript adapter; the parser is created on first use."""
        self._parser = None
        self._lock = threading.Lock()

    @property
    def language_id(self) -> str:
        """Return the language identifier."""
        return "javascript"

    @property
    def file_extensions(self) -> Tuple[str, ...]:
        """Return supported file extensions."""
        return (".js", ".jsx", ".mjs")

    def _get_parser(self):
        """Get or create the tree-sitter parser."""
        if self._parser is None:
            try:
                language = tree_sitter.Language(tree_sitter_javascript.language())
                parser = tree_sitter.Parser()
                parser.language = language
            except (TypeError, ValueError) as e:
                raise AdapterUnavailableError(self.language_id, str(e)) from e
            self._parser = parser
            logger.debug("JavaScript parser initialized")
        return self._parser

    def parse(self, text: str) -> Any:
        """Parse text and return a Tree-sitter tree."""
        if isinstance(text, bytes):
            text_bytes = text
        else:
            text_bytes = text.encode('utf-8')

        # A Parser instance is not safe to share between threads
        with self._lock:
            return self._get_parser().parse(text_bytes)

    def list_files(self, paths: List[str]) -> List[str]:
        """List all JavaScript files in the given paths."""
        js_files = []

        for path in paths:
            if os.path.isfile(path):
                if any(path.endswith(ext) for ext in self.file_extensions):
                    js_files.append(path)
            elif os.path.isdir(path):
                for root, dirs, files in os.walk(path):
                    # Skip hidden directories and installed packages
                    dirs[:] = [d for d in dirs if not d.startswith('.') and d != 'node_modules']

                    for file in files:
                        if any(file.endswith(ext) for ext in self.file_extensions):
                            js_files.append(os.path.join(root, file))

        return sorted(js_files)

    def byte_to_linecol(self, text: str, byte: int) -> Tuple[int, int]:
        """Convert byte offset to (line, column) 1-based."""
        text_bytes = text.encode('utf-8') if isinstance(text, str) else text
        byte = max(0, min(byte, len(text_bytes)))

        lines = text_bytes[:byte].decode('utf-8', errors='ignore').split('\n')
        return (len(lines), len(lines[-1]) + 1)

    # === Syntax helpers used by rules ===

    def iter_nodes(self, tree: Any, types: Optional[Tuple[str, ...]] = None) -> Iterator[Any]:
        """Walk the tree in document order, optionally keeping only the given node types."""
        if tree is None:
            return
        stack = [tree.root_node]
        while stack:
            node = stack.pop()
            if types is None or node.type in types:
                yield node
            stack.extend(reversed(node.children))

    def iter_import_specifiers(self, tree: Any) -> Iterator[ImportSpecifierInfo]:
        """Yield every named specifier of every static import statement.

        Default and namespace imports are skipped; they carry no export name.
        """
        for node in self.iter_nodes(tree, ("import_statement",)):
            source = string_literal_value(node.child_by_field_name('source'))
            if source is None:
                continue
            for clause in node.children:
                if clause.type != "import_clause":
                    continue
                for named_imports in clause.children:
                    if named_imports.type != "named_imports":
                        continue
                    for specifier in _named(named_imports):
                        info = self._import_specifier_info(source, specifier)
                        if info is not None:
                            yield info

    def _import_specifier_info(self, source: str, specifier) -> Optional[ImportSpecifierInfo]:
        if specifier.type != "import_specifier":
            return None
        name_node = specifier.child_by_field_name('name')
        alias_node = specifier.child_by_field_name('alias')
        if name_node is None:
            return None

        # import { "css" as bar } is legal for string export names
        imported = string_literal_value(name_node)
        if imported is None:
            imported = _node_text_to_str(name_node.text)
        if alias_node is not None:
            local = _node_text_to_str(alias_node.text)
        elif name_node.type == "identifier":
            local = imported
        else:
            return None
        return ImportSpecifierInfo(
            source=source,
            imported=imported,
            local=local,
            range=(specifier.start_byte, specifier.end_byte),
        )

    def iter_require_destructures(self, tree: Any) -> Iterator[RequireDestructureInfo]:
        """Yield each key of `const { key: local } = require('source')` declarations.

        Calls such as require() or require(foo) are not module requires and yield nothing.
        """
        for node in self.iter_nodes(tree, ("call_expression",)):
            source = self.require_source(node)
            if source is None:
                continue
            declarator = node.parent
            if declarator is None or declarator.type != "variable_declarator":
                continue
            if not same_node(declarator.child_by_field_name('value'), node):
                continue
            pattern = declarator.child_by_field_name('name')
            if pattern is None or pattern.type != "object_pattern":
                continue
            for prop in _named(pattern):
                binding = self._destructured_binding(prop)
                if binding is not None:
                    key, local = binding
                    yield RequireDestructureInfo(
                        source=source,
                        key=key,
                        local=local,
                        range=(prop.start_byte, prop.end_byte),
                    )

    def require_source(self, call) -> Optional[str]:
        """Module path of a require('path') call, or None when the call is anything else."""
        if identifier_name(call.child_by_field_name('function')) != "require":
            return None
        arguments = call.child_by_field_name('arguments')
        if arguments is None:
            return None
        args = _named(arguments)
        if not args:
            return None
        return string_literal_value(args[0])

    def _destructured_binding(self, prop) -> Optional[Tuple[str, str]]:
        """(key, local name) bound by one property of an object pattern."""
        if prop.type == "shorthand_property_identifier_pattern":
            name = _node_text_to_str(prop.text)
            return name, name
        if prop.type == "object_assignment_pattern":
            # { css = fallback }
            left = prop.child_by_field_name('left')
            if left is not None and left.type == "shorthand_property_identifier_pattern":
                name = _node_text_to_str(left.text)
                return name, name
            return None
        if prop.type == "pair_pattern":
            key_node = prop.child_by_field_name('key')
            value_node = prop.child_by_field_name('value')
            if key_node is None or value_node is None:
                return None
            key = string_literal_value(key_node)
            if key is None:
                if key_node.type != "property_identifier":
                    return None
                key = _node_text_to_str(key_node.text)
            if value_node.type == "assignment_pattern":
                # { css: bar = fallback }
                value_node = value_node.child_by_field_name('left')
            local = identifier_name(value_node)
            if local is None:
                return None
            return key, local
        return None

    def iter_jsx_attributes(self, element) -> List[MarkupAttribute]:
        """Attributes of a JSX opening or self-closing element, in source order."""
        attributes: List[MarkupAttribute] = []
        for child in element.children:
            if child.type == "jsx_attribute":
                named = _named(child)
                if named:
                    attributes.append(NamedAttribute(name=_node_text_to_str(named[0].text), node=child))
            elif child.type == "jsx_expression":
                inner = _named(child)
                if len(inner) == 1 and inner[0].type == "spread_element":
                    spread_args = _named(inner[0])
                    if spread_args:
                        attributes.append(SpreadAttribute(
                            argument=unwrap_parentheses(spread_args[0]),
                            node=child,
                        ))
        return attributes


# Default instance for registration
default_javascript_adapter = JavaScriptAdapter()
