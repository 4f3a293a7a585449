"""
Core types for the spreadlint tree-sitter engine.

This module provides shared dataclasses and types used across the engine,
the JavaScript adapter, and rules.
"""

from dataclasses import dataclass, field, replace
from typing import Any, Dict, Iterable, List, Literal, Optional, Protocol, Tuple, Union
from abc import ABC, abstractmethod


# Type aliases for clarity
Severity = Literal["info", "warn", "error"]
Priority = Literal["P0", "P1", "P2"]
Tier = Literal[0, 1, 2]
NodeRange = Tuple[int, int]  # (start_byte, end_byte) 0-based


@dataclass(frozen=True)
class Finding:
    """A finding represents an issue detected by a rule."""
    rule: str
    message: str
    file: str
    start_byte: int
    end_byte: int
    severity: Severity
    meta: Optional[Dict[str, Any]] = None

    def _replace(self, **kwargs):
        """Provide NamedTuple-like _replace method for compatibility."""
        return replace(self, **kwargs)


@dataclass(frozen=True)
class RuleMeta:
    """Metadata about a rule.

    Attributes:
        id: Unique rule identifier (e.g., "styles.only_spread_css")
        category: Rule category for grouping
        tier: Analysis tier (0=syntax only)
        priority: P0/P1/P2 priority level
        autofix_safety: Whether autofix is safe/caution/suggest-only
        description: Human-readable description
        langs: List of supported languages
    """
    id: str
    category: str
    tier: Tier
    priority: Priority
    autofix_safety: Literal["safe", "caution", "suggest-only"]
    description: str = ""
    langs: List[str] = None  # ["javascript"]

    def __post_init__(self):
        if self.langs is None:
            object.__setattr__(self, 'langs', [])


@dataclass(frozen=True)
class Requires:
    """Represents requirements that a rule needs to run."""
    raw_text: bool = False
    syntax: bool = True


@dataclass
class RuleContext:
    """Context passed to rules during execution."""
    file_path: str
    text: str
    tree: Any
    adapter: 'LanguageAdapter'  # Forward reference
    config: Dict[str, Any] = field(default_factory=dict)

    def node_span(self, node) -> NodeRange:
        """Get byte span of a node (start_byte, end_byte)."""
        return (node.start_byte, node.end_byte)


class Rule(Protocol):
    """Protocol for all rules in the engine.

    Rules analyze code and return findings. They should be stateless and thread-safe.
    """
    meta: RuleMeta
    requires: Requires

    def visit(self, ctx: RuleContext) -> Iterable[Finding]:
        """Visit a file and return findings.

        Args:
            ctx: Rule context containing file path, text, tree, adapter, and config

        Returns:
            Iterable of findings for this file
        """
        ...


class LanguageAdapter(ABC):
    """Abstract base class for language adapters."""

    @property
    @abstractmethod
    def language_id(self) -> str:
        """Return the language identifier (e.g., 'javascript')."""
        pass

    @property
    @abstractmethod
    def file_extensions(self) -> Tuple[str, ...]:
        """Return supported file extensions (e.g., ('.js', '.jsx'))."""
        pass

    @abstractmethod
    def parse(self, text: str) -> Any:
        """Parse text and return a Tree-sitter tree."""
        pass

    @abstractmethod
    def list_files(self, paths: List[str]) -> List[str]:
        """List all files matching this adapter's extensions in the given paths."""
        pass

    @abstractmethod
    def byte_to_linecol(self, text: str, byte: int) -> Tuple[int, int]:
        """Convert byte offset to (line, column) 1-based."""
        pass


# Info dataclasses for adapter helper methods
@dataclass(frozen=True)
class ImportSpecifierInfo:
    """One named specifier of a static import: import { imported as local } from 'source'."""
    source: str
    imported: str
    local: str
    range: NodeRange


@dataclass(frozen=True)
class RequireDestructureInfo:
    """One key of a destructured require: const { key: local } = require('source')."""
    source: str
    key: str
    local: str
    range: NodeRange


@dataclass(frozen=True)
class NamedAttribute:
    """A JSX attribute with a name, e.g. className="foo" or style={...}."""
    name: str
    node: Any


@dataclass(frozen=True)
class SpreadAttribute:
    """A JSX spread attribute, e.g. {...css(foo)}; argument has parentheses removed."""
    argument: Any
    node: Any


MarkupAttribute = Union[NamedAttribute, SpreadAttribute]
