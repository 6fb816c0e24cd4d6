from __future__ import annotations

import sys
from pathlib import Path

import pytest

from resolver_sync.errors import FormatError
from resolver_sync.writeback import SubprocessFormatter


def _python(script: str, timeout: float = 10.0) -> SubprocessFormatter:
    return SubprocessFormatter(
        command=(sys.executable, "-c", script), timeout_seconds=timeout
    )


def test_formatter_pipes_source_through_command(tmp_path: Path) -> None:
    formatter = _python("import sys; sys.stdout.write(sys.stdin.read().replace('    ', '\\t'))")

    assert formatter.format("package p\n\nfunc f() {\n    return\n}\n", tmp_path) == (
        "package p\n\nfunc f() {\n\treturn\n}\n"
    )


def test_formatter_substitutes_srcdir(tmp_path: Path) -> None:
    formatter = SubprocessFormatter(command=("goimports", "-srcdir", "{srcdir}"), timeout_seconds=1)

    assert formatter.argv(tmp_path) == ["goimports", "-srcdir", str(tmp_path)]


def test_formatter_runs_in_srcdir(tmp_path: Path) -> None:
    formatter = _python("import os, sys; sys.stdin.read(); print(os.getcwd())")

    assert Path(formatter.format("package p\n", tmp_path).strip()).resolve() == tmp_path.resolve()


def test_formatter_nonzero_exit_raises_with_stderr(tmp_path: Path) -> None:
    formatter = _python("import sys; sys.stderr.write('1:1: expected package'); sys.exit(2)")

    with pytest.raises(FormatError, match="status 2: 1:1: expected package"):
        formatter.format("garbage", tmp_path)


def test_formatter_empty_output_raises(tmp_path: Path) -> None:
    formatter = _python("import sys; sys.stdin.read()")

    with pytest.raises(FormatError, match="no output"):
        formatter.format("package p\n", tmp_path)


def test_formatter_missing_executable_raises(tmp_path: Path) -> None:
    formatter = SubprocessFormatter(command=("resolver-sync-no-such-formatter",), timeout_seconds=1)

    with pytest.raises(FormatError, match="executable not found"):
        formatter.format("package p\n", tmp_path)


def test_formatter_timeout_raises(tmp_path: Path) -> None:
    formatter = _python("import time; time.sleep(5)", timeout=0.2)

    with pytest.raises(FormatError, match="timed out after 0.2s"):
        formatter.format("package p\n", tmp_path)
