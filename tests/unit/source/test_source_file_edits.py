from __future__ import annotations

from pathlib import Path

import pytest

from resolver_sync.golang import Span, parse_file
from resolver_sync.source import SourceFile

TEXT = "package p\n\nfunc (r *x) M(a int) string {\n\treturn \"\"\n}\n"


def _source() -> SourceFile:
    return SourceFile(path=Path("m.go"), text=TEXT, parsed=parse_file(TEXT))


def test_render_without_edits_is_identity() -> None:
    source = _source()

    assert not source.modified
    assert source.render() == TEXT


def test_render_applies_edits_by_offset_and_keeps_other_bytes() -> None:
    source = _source()
    decl = source.parsed.funcs[0]

    source.insert(decl.body_open + 1, "\n\tpanic(1)")
    source.replace(decl.params_span, "(a, b int)")

    assert source.modified
    assert source.render() == (
        "package p\n\nfunc (r *x) M(a, b int) string {\n\tpanic(1)\n\treturn \"\"\n}\n"
    )
    assert source.text == TEXT


def test_render_keeps_insertion_order_at_same_offset() -> None:
    source = _source()

    source.insert(0, "// one\n")
    source.insert(0, "// two\n")

    assert source.render().startswith("// one\n// two\npackage p")


def test_overlapping_edits_are_rejected() -> None:
    source = _source()
    source.replace(Span(0, 9), "package q")
    source.replace(Span(5, 12), "x")

    with pytest.raises(ValueError, match="Overlapping edits"):
        source.render()


def test_replace_rejects_out_of_range_span() -> None:
    source = _source()

    with pytest.raises(ValueError, match="outside m.go"):
        source.replace(Span(0, len(TEXT) + 1), "")
