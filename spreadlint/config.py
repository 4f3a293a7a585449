"""
Configuration management for the spreadlint engine.

This module provides configuration loading with sensible defaults for
finding limits, severities, and excluded directories.
"""

import copy
import logging
import os
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import yaml

from .errors import ConfigError

logger = logging.getLogger(__name__)

CONFIG_FILE_NAMES = [".spreadlint.yml", ".spreadlint.yaml", "spreadlint.yml", "spreadlint.yaml"]

DEFAULTS: Dict[str, Any] = {
    "enabled_rules": ["*"],
    "max_findings_per_file": 50,
    "max_total_findings": 1000,
    "rule_severities": {
        "styles.only_spread_css": "error",
    },
    "exclude_dirs": [],
}


@dataclass
class EngineConfig:
    """Configuration for the spreadlint engine."""

    # Rule id patterns to run ("*" for all)
    enabled_rules: List[str]
    max_findings_per_file: int = 50
    max_total_findings: int = 1000

    # Rule severity overrides (rule_id -> severity)
    rule_severities: Dict[str, str] = None

    # Extra directory names to skip besides the built-in vendor/build list
    exclude_dirs: List[str] = None

    def __post_init__(self):
        if self.rule_severities is None:
            self.rule_severities = {}
        if self.exclude_dirs is None:
            self.exclude_dirs = []


def load_config(config_path: Optional[str] = None) -> EngineConfig:
    """
    Load configuration from file or use defaults.

    Args:
        config_path: Path to config file (YAML). If None or missing, uses defaults.

    Returns:
        EngineConfig instance

    Raises:
        ConfigError: If the file exists but is not a valid configuration
    """
    merged = copy.deepcopy(DEFAULTS)

    if not config_path or not os.path.exists(config_path):
        return EngineConfig(**merged)

    try:
        with open(config_path, 'r', encoding='utf-8') as f:
            file_config = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(config_path, str(e)) from e

    if not isinstance(file_config, dict):
        raise ConfigError(config_path, "top level must be a mapping")

    unknown = set(file_config) - set(DEFAULTS)
    if unknown:
        raise ConfigError(config_path, f"unknown keys: {', '.join(sorted(unknown))}")

    # Deep merge rule severities, replace everything else
    severities = file_config.pop("rule_severities", None) or {}
    if not isinstance(severities, dict):
        raise ConfigError(config_path, "rule_severities must be a mapping")
    merged.update(file_config)
    merged["rule_severities"].update(severities)

    bad = {rule: sev for rule, sev in merged["rule_severities"].items() if sev not in ("info", "warn", "error")}
    if bad:
        raise ConfigError(config_path, f"invalid severities: {bad}")

    logger.debug("Loaded configuration from %s", config_path)
    return EngineConfig(**merged)


def get_default_config() -> EngineConfig:
    """Get default configuration without loading from file."""
    return load_config(None)


def find_config_file(start_path: str = ".") -> Optional[str]:
    """
    Find configuration file by walking up the directory tree.

    Looks for .spreadlint.yml, .spreadlint.yaml, spreadlint.yml and
    spreadlint.yaml, in that order, in each directory.

    Args:
        start_path: File or directory to start searching from

    Returns:
        Path to config file or None if not found
    """
    current_path = os.path.abspath(start_path)
    if os.path.isfile(current_path):
        current_path = os.path.dirname(current_path)

    while True:
        for config_name in CONFIG_FILE_NAMES:
            config_path = os.path.join(current_path, config_name)
            if os.path.exists(config_path):
                return config_path

        parent_path = os.path.dirname(current_path)
        if parent_path == current_path:
            break
        current_path = parent_path

    return None


def get_rule_severity(rule_id: str, config: EngineConfig, default_severity: str = "warn") -> str:
    """
    Get the configured severity for a rule, falling back to default.

    Args:
        rule_id: Rule identifier (e.g., "styles.only_spread_css")
        config: Engine configuration
        default_severity: Fallback severity if not configured

    Returns:
        Severity level ("info", "warn", or "error")
    """
    return config.rule_severities.get(rule_id, default_severity)
