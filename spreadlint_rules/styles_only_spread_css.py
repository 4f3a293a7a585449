"""Rule to enforce spreading `css()` from withStyles directly into JSX elements.

`css(...)` returns both `className` and `style` props, so it must be spread
into the element it styles:

    import { css } from 'withStyles';
    <div {...css(styles.foo)} />            // ok
    <div {...css(styles.foo)} className="x" />   // className is overwritten
    <div className={css(styles.foo)} />     // not a spread
    const { style } = css(styles.foo);      // result used elsewhere

Local aliases are followed for both static imports and destructured
require() calls:

    import { css as cx } from '../../themes/withStyles';
    const { css: cx } = require('withStyles');
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Iterator, List, Optional, Tuple

from spreadlint.javascript_adapter import JSX_ELEMENT_TYPES, identifier_name
from spreadlint.types import Finding, NamedAttribute, Requires, RuleContext, RuleMeta, SpreadAttribute

TRACKED_EXPORT = "css"
TRACKED_MODULE = "withStyles"
FORBIDDEN_ATTRIBUTES = ("className", "style")

# Names `css` even when an alias is in use; co-occurrence messages use the alias.
PLACEMENT_MESSAGE = "Only spread `css()` directly into an element, e.g. `<div {...css(foo)} />`."


def co_occurrence_message(attribute: str, callee: str) -> str:
    return f"Do not use `{attribute}` with `{{...{callee}()}}`."


def is_tracked_module(source_path: str) -> bool:
    """True for 'withStyles' itself or any path whose last segment is withStyles."""
    return source_path == TRACKED_MODULE or source_path.split("/")[-1] == TRACKED_MODULE


@dataclass(frozen=True)
class ImportBinding:
    """A local name bound by an import specifier or a destructured require."""
    local_name: str
    source_path: str
    imported_name: str

    @property
    def is_tracked(self) -> bool:
        return self.imported_name == TRACKED_EXPORT and is_tracked_module(self.source_path)


class AliasTracker:
    """Tracks which local names refer to the css export of a withStyles module.

    One tracker covers one file. Rebinding a name replaces its earlier binding.
    """

    def __init__(self):
        self._bindings: Dict[str, ImportBinding] = {}

    def observe_import_declaration(self, source_path: str, imported_name: str, local_name: str) -> None:
        self._bindings[local_name] = ImportBinding(local_name, source_path, imported_name)

    def observe_require_destructure(self, source_path: str, destructured_key: str, local_name: str) -> None:
        self._bindings[local_name] = ImportBinding(local_name, source_path, destructured_key)

    def is_tracked(self, local_name: Optional[str]) -> bool:
        binding = self._bindings.get(local_name) if local_name else None
        return binding is not None and binding.is_tracked

    @property
    def tracked_names(self) -> List[str]:
        return sorted(name for name, binding in self._bindings.items() if binding.is_tracked)


class CallContext(Enum):
    SPREAD_ATTRIBUTE_ARGUMENT = "spread_attribute_argument"
    OTHER = "other"


@dataclass(frozen=True)
class CallSite:
    """A call to a plain identifier, classified by where it sits in the tree."""
    callee_name: str
    arguments: Tuple[Any, ...]
    context: CallContext
    node: Any


def _outer_expression(node):
    """Climb out of any parentheses wrapping node."""
    while node.parent is not None and node.parent.type == "parenthesized_expression":
        node = node.parent
    return node


def classify_call_context(call) -> CallContext:
    """SPREAD_ATTRIBUTE_ARGUMENT only for the whole argument of {...call()} on a JSX element."""
    spread = _outer_expression(call).parent
    if spread is None or spread.type != "spread_element":
        return CallContext.OTHER
    container = spread.parent
    if container is None or container.type != "jsx_expression":
        return CallContext.OTHER
    element = container.parent
    if element is None or element.type not in JSX_ELEMENT_TYPES:
        return CallContext.OTHER
    return CallContext.SPREAD_ATTRIBUTE_ARGUMENT


def call_site(node) -> Optional[CallSite]:
    """Build a CallSite for `name(...)` calls.

    Member and computed callees give None, as do tagged templates (name`...`),
    which the grammar also parses as call_expression.
    """
    callee = identifier_name(node.child_by_field_name("function"))
    if callee is None:
        return None
    arguments = node.child_by_field_name("arguments")
    if arguments is None or arguments.type != "arguments":
        return None
    args = tuple(child for child in arguments.named_children if child.type != "comment")
    return CallSite(
        callee_name=callee,
        arguments=args,
        context=classify_call_context(node),
        node=node,
    )


@dataclass(frozen=True)
class Diagnostic:
    node: Any
    message: str


class SpreadUsageValidator:
    """Checks JSX elements and calls against the names an AliasTracker reports."""

    def __init__(self, tracker: AliasTracker, adapter):
        self.tracker = tracker
        self.adapter = adapter

    def handlers(self) -> Dict[str, Callable[[Any], Iterator[Diagnostic]]]:
        """Visitor table keyed by tree-sitter node type."""
        return {
            "call_expression": self.on_call_expression,
            "jsx_opening_element": self.on_jsx_element,
            "jsx_self_closing_element": self.on_jsx_element,
        }

    def tracked_spread_callee(self, attribute: SpreadAttribute) -> Optional[str]:
        """Alias used by a {...alias(...)} spread, when alias is tracked."""
        argument = attribute.argument
        if argument is None or argument.type != "call_expression":
            return None
        site = call_site(argument)
        if site is None or not self.tracker.is_tracked(site.callee_name):
            return None
        return site.callee_name

    def on_jsx_element(self, element) -> Iterator[Diagnostic]:
        attributes = self.adapter.iter_jsx_attributes(element)
        for attribute in attributes:
            if not isinstance(attribute, SpreadAttribute):
                continue
            callee = self.tracked_spread_callee(attribute)
            if callee is None:
                continue
            for sibling in attributes:
                if isinstance(sibling, NamedAttribute) and sibling.name in FORBIDDEN_ATTRIBUTES:
                    yield Diagnostic(sibling.node, co_occurrence_message(sibling.name, callee))

    def on_call_expression(self, node) -> Iterator[Diagnostic]:
        site = call_site(node)
        if site is None or not self.tracker.is_tracked(site.callee_name):
            return
        if site.context is not CallContext.SPREAD_ATTRIBUTE_ARGUMENT:
            yield Diagnostic(site.node, PLACEMENT_MESSAGE)


class StylesOnlySpreadCssRule:
    """Only spread withStyles' css() into elements, never beside className or style."""

    meta = RuleMeta(
        id="styles.only_spread_css",
        category="styles",
        tier=0,
        priority="P1",
        autofix_safety="suggest-only",
        description="Prevent usage of {...css()} with className or style props, and css() outside a spread",
        langs=["javascript"],
    )
    requires = Requires(syntax=True)

    def visit(self, ctx: RuleContext) -> Iterator[Finding]:
        if ctx.tree is None or ctx.adapter is None:
            return

        tracker = self.track_aliases(ctx)
        if not tracker.tracked_names:
            return

        validator = SpreadUsageValidator(tracker, ctx.adapter)
        handlers = validator.handlers()
        for node in ctx.adapter.iter_nodes(ctx.tree, tuple(handlers)):
            for diagnostic in handlers[node.type](node):
                yield self._finding(ctx, diagnostic)

    def track_aliases(self, ctx: RuleContext) -> AliasTracker:
        """Feed every import and require destructuring of the file to a fresh tracker."""
        tracker = AliasTracker()
        bindings = sorted(
            [(specifier.range, tracker.observe_import_declaration, specifier.source, specifier.imported, specifier.local)
             for specifier in ctx.adapter.iter_import_specifiers(ctx.tree)]
            + [(req.range, tracker.observe_require_destructure, req.source, req.key, req.local)
               for req in ctx.adapter.iter_require_destructures(ctx.tree)],
            key=lambda item: item[0],
        )
        for _, observe, source, name, local in bindings:
            observe(source, name, local)
        return tracker

    def _finding(self, ctx: RuleContext, diagnostic: Diagnostic) -> Finding:
        start_byte, end_byte = ctx.node_span(diagnostic.node)
        return Finding(
            rule=self.meta.id,
            message=diagnostic.message,
            file=ctx.file_path,
            start_byte=start_byte,
            end_byte=end_byte,
            severity="error",
            meta={"node_type": diagnostic.node.type},
        )


# Export rule for registration
RULES = [StylesOnlySpreadCssRule()]
