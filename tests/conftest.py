import textwrap

import pytest

from spreadlint.javascript_adapter import JavaScriptAdapter
from spreadlint.types import RuleContext


def dedent(code: str) -> str:
    return textwrap.dedent(code).strip() + "\n"


def make_context(code: str, adapter: JavaScriptAdapter, file_path: str = "component.jsx") -> RuleContext:
    return RuleContext(
        file_path=file_path,
        text=code,
        tree=adapter.parse(code),
        adapter=adapter,
        config={},
    )


@pytest.fixture(scope="session")
def adapter():
    return JavaScriptAdapter()


@pytest.fixture
def write_js(tmp_path):
    """Write a dedented source file under tmp_path and return its path."""
    def _write(name: str, code: str):
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(dedent(code), encoding="utf-8")
        return path
    return _write
