"""
spreadlint tree-sitter engine package.

This package runs lint rules over JavaScript/JSX sources parsed with
tree-sitter. Rules live in the separate `spreadlint_rules` package.
"""

from .types import (
    Finding, RuleMeta, Rule, RuleContext, Requires,
    LanguageAdapter, ImportSpecifierInfo, RequireDestructureInfo,
    NamedAttribute, SpreadAttribute, MarkupAttribute,
    Severity, NodeRange
)

from .errors import SpreadlintError, ConfigError, AdapterUnavailableError

from .registry import (
    register_rule, register_adapter, get_adapter, get_rule,
    get_all_rules, get_enabled_rules, list_supported_languages, clear
)

from .config import (
    EngineConfig, load_config, get_default_config, find_config_file, get_rule_severity
)

__all__ = [
    # Types
    "Finding", "RuleMeta", "Rule", "RuleContext", "Requires",
    "LanguageAdapter", "ImportSpecifierInfo", "RequireDestructureInfo",
    "NamedAttribute", "SpreadAttribute", "MarkupAttribute",
    "Severity", "NodeRange",

    # Errors
    "SpreadlintError", "ConfigError", "AdapterUnavailableError",

    # Registry
    "register_rule", "register_adapter", "get_adapter", "get_rule",
    "get_all_rules", "get_enabled_rules", "list_supported_languages", "clear",

    # Config
    "EngineConfig", "load_config", "get_default_config", "find_config_file", "get_rule_severity"
]
