"""Tests for protocol output conversion and schema validation."""

from pathlib import Path

from spreadlint.schema import (
    byte_to_line_col,
    create_range_from_bytes,
    findings_to_json,
    validate_findings,
    validate_runner_output,
)
from spreadlint.types import Finding


def _output(findings):
    return {
        "spreadlint.protocol": "1",
        "engine_version": "0.1.0",
        "files_scanned": 1,
        "rules_run": 1,
        "findings": findings,
        "metrics": {"parse_ms": 1.0, "rules_ms": 2.0, "total_ms": 3.0},
    }


def test_byte_to_line_col():
    text = "ab\ncé<div />\n"
    assert byte_to_line_col(text, 0) == (1, 0)
    assert byte_to_line_col(text, 3) == (2, 0)
    assert byte_to_line_col(text, text.encode("utf-8").index(b"<div")) == (2, 2)


def test_create_range_from_bytes():
    text = "x;\n<div className=\"a\" />\n"
    start = text.index("className")
    assert create_range_from_bytes(text, start, start + len('className="a"')) == {
        "startLine": 2, "startCol": 5, "endLine": 2, "endCol": 18,
    }


def test_findings_to_json(tmp_path):
    path = tmp_path / "Button.jsx"
    text = "<div {...css(a)} style={s} />\n"
    path.write_text(text)
    start = text.index("style")
    finding = Finding(
        rule="styles.only_spread_css",
        message="Do not use `style` with `{...css()}`.",
        file=str(path),
        start_byte=start,
        end_byte=start + len("style={s}"),
        severity="error",
        meta={"node_type": "jsx_attribute"},
    )
    resolved = str(path.resolve())

    (data,) = findings_to_json([finding], {resolved: text})

    assert data["file_path"] == resolved
    assert data["uri"] == Path(resolved).as_uri()
    assert data["range"]["startCol"] == start
    assert data["meta"] == {"node_type": "jsx_attribute"}
    assert validate_findings([data]) == []
    assert validate_runner_output(_output([data])) == []


def test_findings_without_text_cache(tmp_path):
    finding = Finding(rule="r", message="m", file=str(tmp_path / "a.js"),
                      start_byte=4, end_byte=8, severity="warn")
    (data,) = findings_to_json([finding])
    assert data["range"] == {"startLine": 1, "startCol": 0, "endLine": 1, "endCol": 0}
    assert "meta" not in data


def test_validation_errors():
    bad_finding = {"rule_id": "r", "message": "m", "severity": "fatal"}
    assert validate_findings([bad_finding])[0].startswith("Finding 0:")

    output = _output([])
    del output["metrics"]
    output["extra"] = True
    errors = validate_runner_output(output)
    assert len(errors) == 2
    assert all(e.startswith("Output validation: <root>:") for e in errors)
