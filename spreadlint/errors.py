"""
Exceptions raised by the spreadlint engine.

Rules never raise for unexpected source shapes; these cover host failures
such as broken configuration or a missing grammar.
"""


class SpreadlintError(Exception):
    """Base class for engine errors."""


class ConfigError(SpreadlintError):
    """A configuration file could not be read or parsed."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Invalid configuration in {path}: {reason}")


class AdapterUnavailableError(SpreadlintError):
    """A language adapter could not load its tree-sitter grammar."""

    def __init__(self, language: str, reason: str):
        self.language = language
        self.reason = reason
        super().__init__(f"{language} parser unavailable: {reason}")
