"""
Suppression system for spreadlint rules.

A comment on the same line as a finding silences it:

    <div {...css(foo)} className="x" /> // spreadlint: ignore[styles.only_spread_css]
    {/* spreadlint: ignore[styles.*] */}

Patterns are rule ids or fnmatch globs, comma separated.
"""

import fnmatch
import re
from typing import Dict, List, Set, Tuple

SUPPRESSION_RE = re.compile(r'(?://|/\*)\s*spreadlint:\s*ignore\s*\[\s*([^\]]*)\]', re.IGNORECASE)


class SuppressionParser:
    """Parser for spreadlint suppression comments."""

    def __init__(self, text: str):
        self.text = text
        self._encoded = text.encode('utf-8')
        self.lines = text.split('\n')
        self.line_suppressions: Dict[int, Set[str]] = {}  # line_number -> {rule_patterns}
        self._parse_suppressions()

    def _parse_suppressions(self):
        for line_num, line in enumerate(self.lines, 1):
            patterns = self._extract_suppression_patterns(line)
            if patterns:
                self.line_suppressions[line_num] = patterns

    def _extract_suppression_patterns(self, line: str) -> Set[str]:
        patterns = set()
        for match in SUPPRESSION_RE.finditer(line):
            for pattern in match.group(1).split(','):
                pattern = pattern.strip()
                if pattern:
                    patterns.add(pattern)
        return patterns

    def is_suppressed(self, rule_id: str, start_byte: int) -> bool:
        """Check if a rule finding should be suppressed."""
        line_num = self._byte_to_line(start_byte)
        return any(
            rule_id == pattern or fnmatch.fnmatch(rule_id, pattern)
            for pattern in self.line_suppressions.get(line_num, ())
        )

    def _byte_to_line(self, byte_offset: int) -> int:
        """Convert byte offset to 1-based line number."""
        if byte_offset <= 0:
            return 1
        return self._encoded[:byte_offset].count(b'\n') + 1


def filter_suppressed_findings(findings: List, text: str) -> List:
    """Filter out suppressed findings from a list."""
    if not findings:
        return findings

    parser = SuppressionParser(text)
    return [
        finding for finding in findings
        if not parser.is_suppressed(finding.rule, finding.start_byte)
    ]


def validate_suppression_patterns(text: str) -> List[Tuple[int, str]]:
    """
    Find suppression comments with an empty pattern list.

    Returns:
        List of (line_number, error_message) tuples
    """
    errors = []
    for line_num, line in enumerate(text.split('\n'), 1):
        for match in SUPPRESSION_RE.finditer(line):
            if not match.group(1).strip():
                errors.append((line_num, "Empty suppression pattern"))
    return errors
