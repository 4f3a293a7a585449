"""
CLI runner for the spreadlint tree-sitter engine.

This module provides the main CLI entry point for loading adapters,
parsing files, running rules, and outputting results.
"""

import argparse
import concurrent.futures
import json
import logging
import os
import sys
import time
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

from .config import EngineConfig, find_config_file, get_rule_severity, load_config
from .errors import SpreadlintError
from .file_filter import is_excluded_path
from .registry import discover_rules, get_adapter, get_adapter_for_file, get_enabled_rules, get_rule_ids, register_adapter
from .schema import ENGINE_VERSION, PROTOCOL_VERSION, findings_to_json, validate_runner_output
from .suppressions import filter_suppressed_findings, validate_suppression_patterns
from .types import Finding, RuleContext

logger = logging.getLogger(__name__)

DEFAULT_RULE_PACKAGES = ["spreadlint_rules"]
LANGUAGES = ["javascript"]

EXIT_CLEAN = 0
EXIT_FINDINGS = 1
EXIT_ERROR = 2


def setup_adapters() -> None:
    """Set up and register language adapters."""
    from .javascript_adapter import default_javascript_adapter
    register_adapter(default_javascript_adapter.language_id, default_javascript_adapter)


def collect_files(paths: List[str], language: str, config: Optional[EngineConfig] = None) -> List[str]:
    """Collect files to analyze for a language, skipping vendor and build directories."""
    adapter = get_adapter(language)
    if not adapter:
        logger.error("No adapter found for language '%s'", language)
        return []

    extra_dirs = config.exclude_dirs if config else []
    all_files = []
    for path in paths:
        path_obj = Path(path)
        if not path_obj.exists():
            logger.warning("Path '%s' does not exist", path)
            continue
        # Only components below the scanned path count towards exclusion
        root = path_obj if path_obj.is_dir() else path_obj.parent
        for file_path in adapter.list_files([str(path_obj)]):
            if is_excluded_path(os.path.relpath(file_path, root), extra_dirs):
                continue
            all_files.append(str(Path(file_path).absolute()))

    return sorted(set(all_files))


def analyze_file(file_path: str, rules: List, config: EngineConfig,
                 content: Optional[str] = None) -> Tuple[List[Finding], float]:
    """Analyze a single file and return findings and parse time in milliseconds.

    Args:
        file_path: Path to the file (used for context even if content is provided)
        rules: List of rules to run
        config: Engine configuration
        content: Optional file content (if None, reads from disk)
    """
    adapter = get_adapter_for_file(file_path)
    if not adapter:
        return [], 0.0

    if content is None:
        try:
            with open(file_path, 'r', encoding='utf-8', errors='ignore') as f:
                content = f.read()
        except OSError as e:
            logger.warning("Could not read %s: %s", file_path, e)
            return [], 0.0

    parse_start = time.time()
    tree = adapter.parse(content)
    parse_time = (time.time() - parse_start) * 1000

    context = RuleContext(
        file_path=file_path,
        text=content,
        tree=tree,
        adapter=adapter,
        config={},
    )

    findings: List[Finding] = []
    for rule in rules:
        if adapter.language_id not in rule.meta.langs:
            continue
        try:
            rule_findings = list(rule.visit(context))
        except Exception:
            logger.warning("Rule '%s' failed on %s", rule.meta.id, file_path, exc_info=True)
            continue

        for finding in rule_findings:
            severity = get_rule_severity(finding.rule, config, finding.severity)
            if severity != finding.severity:
                finding = finding._replace(severity=severity)
            findings.append(finding)

    for line, error in validate_suppression_patterns(content):
        logger.warning("%s:%d: %s", file_path, line, error)
    findings = filter_suppressed_findings(findings, content)
    if len(findings) > config.max_findings_per_file:
        logger.info("Truncating %d findings in %s to %d", len(findings), file_path, config.max_findings_per_file)
        findings = findings[:config.max_findings_per_file]

    return findings, parse_time


def run_analysis(files: List[str], rules: List, config: EngineConfig,
                 jobs: int = 1) -> Tuple[List[Finding], float]:
    """Run analysis on files, in parallel when jobs > 1; results keep file order."""
    if jobs <= 1:
        results = [analyze_file(file_path, rules, config) for file_path in files]
    else:
        with concurrent.futures.ThreadPoolExecutor(max_workers=jobs) as executor:
            results = list(executor.map(lambda fp: analyze_file(fp, rules, config), files))

    all_findings: List[Finding] = []
    total_parse_time = 0.0
    for findings, parse_time in results:
        total_parse_time += parse_time
        all_findings.extend(findings)

    if len(all_findings) > config.max_total_findings:
        all_findings = all_findings[:config.max_total_findings]

    return all_findings, total_parse_time


def read_text_cache(files: List[str]) -> Dict[str, str]:
    """Map resolved path -> content, for line/column conversion in output."""
    text_cache = {}
    for file_path in files:
        try:
            with open(file_path, 'r', encoding='utf-8', errors='ignore') as f:
                text_cache[str(Path(file_path).resolve())] = f.read()
        except OSError as e:
            logger.debug("Skipping %s in text cache: %s", file_path, e)
    return text_cache


def build_output(findings: List[Finding], files_count: int, rules_count: int,
                 metrics: Dict[str, float], text_cache: Optional[Dict[str, str]] = None) -> Dict[str, Any]:
    """Build the protocol v1 output document."""
    return {
        "spreadlint.protocol": PROTOCOL_VERSION,
        "engine_version": ENGINE_VERSION,
        "files_scanned": files_count,
        "rules_run": rules_count,
        "findings": findings_to_json(findings, text_cache),
        "metrics": metrics,
    }


def format_output(findings: List[Finding], files_count: int, rules_count: int, metrics: Dict[str, float],
                  format_type: str, text_cache: Optional[Dict[str, str]] = None) -> str:
    """Format output according to specified format."""
    if text_cache is None:
        text_cache = {}

    if format_type == "json":
        output = build_output(findings, files_count, rules_count, metrics, text_cache)
        return json.dumps(output, indent=2)

    if format_type == "pretty":
        lines = [
            f"Scanned {files_count} files with {rules_count} rules",
            f"Found {len(findings)} issues",
            "",
        ]

        by_file: Dict[str, List[Finding]] = {}
        for finding in findings:
            by_file.setdefault(finding.file, []).append(finding)

        for file_path, file_findings in sorted(by_file.items()):
            lines.append(file_path)
            text = text_cache.get(str(Path(file_path).resolve()))
            adapter = get_adapter_for_file(file_path)
            for finding in file_findings:
                if text is not None and adapter is not None:
                    line, col = adapter.byte_to_linecol(text, finding.start_byte)
                    location = f"{line}:{col}"
                else:
                    location = f"byte {finding.start_byte}"
                lines.append(f"  {location}  {finding.severity}  {finding.message}  ({finding.rule})")
            lines.append("")

        lines.append(f"Parse time: {metrics['parse_ms']:.1f}ms")
        lines.append(f"Rules time: {metrics['rules_ms']:.1f}ms")
        lines.append(f"Total time: {metrics['total_ms']:.1f}ms")
        return "\n".join(lines)

    raise ValueError(f"Unknown format: {format_type}")


def run_languages(paths: List[str], rule_patterns: List[str], config: EngineConfig,
                  jobs: int = 1) -> Tuple[List[Finding], List[str], int, float]:
    """Run enabled rules for every supported language.

    Returns:
        Tuple of (findings, files scanned, rules run, parse time in ms)
    """
    all_findings: List[Finding] = []
    all_files: List[str] = []
    rules_run = 0
    parse_ms = 0.0

    for language in LANGUAGES:
        rules = get_enabled_rules(rule_patterns, language)
        logger.debug("Running %d %s rules: %s", len(rules), language, [r.meta.id for r in rules])
        if not rules:
            continue

        files = collect_files(paths, language, config)
        if not files:
            continue
        if jobs == 0:
            jobs = min(4, len(files), os.cpu_count() or 1)

        findings, parse_time = run_analysis(files, rules, config, jobs)
        all_findings.extend(findings)
        all_files.extend(files)
        rules_run += len(rules)
        parse_ms += parse_time

    return all_findings[:config.max_total_findings], all_files, rules_run, parse_ms


def _metrics(total_start: float, rules_start: float, parse_ms: float) -> Dict[str, float]:
    now = time.time()
    return {
        "parse_ms": parse_ms,
        "rules_ms": max((now - rules_start) * 1000 - parse_ms, 0.0),
        "total_ms": (now - total_start) * 1000,
    }


def analyze_paths(paths: List[str], discovery_packages: Optional[List[str]] = None,
                  rule_patterns: Optional[List[str]] = None, config_path: Optional[str] = None,
                  jobs: int = 1) -> Dict[str, Any]:
    """
    Library function to analyze paths using the tree-sitter engine.

    Args:
        paths: List of file/directory paths to analyze
        discovery_packages: Packages to discover rules from (default: ["spreadlint_rules"])
        rule_patterns: Rule patterns to run (default: enabled_rules from config)
        config_path: Path to config file (default: auto-detect)
        jobs: Number of worker threads

    Returns:
        Dictionary in protocol v1 output format

    Raises:
        ConfigError: If the configuration file is invalid
    """
    total_start = time.time()

    if not config_path:
        config_path = find_config_file(paths[0] if paths else ".")
    config = load_config(config_path)

    setup_adapters()
    discover_rules(discovery_packages or DEFAULT_RULE_PACKAGES)

    rules_start = time.time()
    findings, files, rules_run, parse_ms = run_languages(
        paths, rule_patterns or config.enabled_rules, config, jobs)

    return build_output(findings, len(files), rules_run,
                        _metrics(total_start, rules_start, parse_ms), read_text_cache(files))


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="spreadlint",
        description="Check JSX for misuse of the withStyles css() spread helper",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  spreadlint src/
  spreadlint app.jsx --format pretty
  spreadlint src/ --rules "styles.*" --jobs 4 --validate
        """
    )

    parser.add_argument(
        "paths",
        nargs="+",
        help="Paths to files or directories to analyze"
    )

    parser.add_argument(
        "--discover",
        default=",".join(DEFAULT_RULE_PACKAGES),
        help="Comma-separated packages to discover rules from (default: spreadlint_rules)"
    )

    parser.add_argument(
        "--rules",
        help="Rule patterns to run: '*' for all, or comma-separated IDs/patterns (default: from config)"
    )

    parser.add_argument(
        "--jobs",
        type=int,
        default=1,
        help="Number of parallel jobs (0=auto, 1=sequential, N=parallel)"
    )

    parser.add_argument(
        "--validate",
        action="store_true",
        help="Validate JSON output against schema"
    )

    parser.add_argument(
        "--format",
        choices=["json", "pretty"],
        default="json",
        help="Output format: json (protocol v1) or pretty (human-readable)"
    )

    parser.add_argument(
        "--config",
        help="Path to configuration file"
    )

    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose output"
    )

    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main CLI entry point; returns the process exit status."""
    args = build_arg_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    total_start = time.time()

    config_path = args.config or find_config_file(args.paths[0])
    try:
        config = load_config(config_path)
        setup_adapters()
    except SpreadlintError as e:
        print(f"spreadlint: {e}", file=sys.stderr)
        return EXIT_ERROR

    logger.debug("Using config: %s", config_path or "defaults")

    discovery_packages = [pkg.strip() for pkg in args.discover.split(",") if pkg.strip()]
    rules_discovered = discover_rules(discovery_packages)
    logger.debug("Discovered %d rules from %s: %s", rules_discovered, discovery_packages, get_rule_ids())

    if args.rules:
        rule_patterns = [pattern.strip() for pattern in args.rules.split(",")]
    else:
        rule_patterns = config.enabled_rules

    if not any(get_enabled_rules(rule_patterns, language) for language in LANGUAGES):
        print(f"spreadlint: no rules match {', '.join(rule_patterns) or '(none)'}", file=sys.stderr)
        return EXIT_ERROR

    rules_start = time.time()
    try:
        findings, files, rules_run, parse_ms = run_languages(args.paths, rule_patterns, config, args.jobs)
    except SpreadlintError as e:
        print(f"spreadlint: {e}", file=sys.stderr)
        return EXIT_ERROR

    if not files:
        logger.warning("No files found to analyze in %s", ", ".join(args.paths))

    metrics = _metrics(total_start, rules_start, parse_ms)
    text_cache = read_text_cache(files)
    output = format_output(findings, len(files), rules_run, metrics, args.format, text_cache)

    if args.validate and args.format == "json":
        errors = validate_runner_output(json.loads(output))
        if errors:
            print("JSON validation errors:", file=sys.stderr)
            for error in errors:
                print(f"  {error}", file=sys.stderr)
            return EXIT_ERROR

    print(output)
    return EXIT_FINDINGS if findings else EXIT_CLEAN


if __name__ == "__main__":
    sys.exit(main())
