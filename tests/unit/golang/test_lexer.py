from __future__ import annotations

import pytest

from resolver_sync.golang import GoSyntaxError, tokenize
from resolver_sync.golang.lexer import IDENT, NEWLINE, NUMBER, PUNCT, STRING


def test_tokenize_keeps_offsets_and_lines() -> None:
    source = "package gql\n\nfunc (r *x) M() {}\n"

    tokens = tokenize(source)

    assert [token.text for token in tokens if token.kind != NEWLINE] == [
        "package",
        "gql",
        "func",
        "(",
        "r",
        "*",
        "x",
        ")",
        "M",
        "(",
        ")",
        "{",
        "}",
    ]
    for token in tokens:
        assert source[token.start : token.end] == token.text
    func_token = next(token for token in tokens if token.text == "func")
    assert func_token.line == 3


def test_tokenize_drops_comments_but_keeps_line_breaks() -> None:
    source = "a // trailing\nb /* one\ntwo */ c /* inline */ d\n"

    tokens = tokenize(source)

    assert [(token.kind, token.text) for token in tokens] == [
        (IDENT, "a"),
        (NEWLINE, "\n"),
        (IDENT, "b"),
        (NEWLINE, "\n"),
        (IDENT, "c"),
        (IDENT, "d"),
        (NEWLINE, "\n"),
    ]
    assert tokens[-2].line == 3


def test_tokenize_reads_strings_and_multi_char_punctuation() -> None:
    source = 'x := "a\\"b" + `raw\nline` <- ch ...\n'

    tokens = tokenize(source)
    kinds = [(token.kind, token.text) for token in tokens]

    assert (PUNCT, ":=") in kinds
    assert (STRING, '"a\\"b"') in kinds
    assert (STRING, "`raw\nline`") in kinds
    assert (PUNCT, "<-") in kinds
    assert (PUNCT, "...") in kinds
    assert tokens[-1].line == 2


def test_tokenize_reads_numbers() -> None:
    tokens = tokenize("x = 0x1F + 3.5e+2")

    assert [token.text for token in tokens if token.kind == NUMBER] == ["0x1F", "3.5e+2"]


@pytest.mark.parametrize(
    ("source", "reason"),
    [
        ('x := "open', "string literal not terminated"),
        ("x := `open", "raw string literal not terminated"),
        ("x /* open", "comment not terminated"),
    ],
)
def test_tokenize_rejects_unterminated_literals(source: str, reason: str) -> None:
    with pytest.raises(GoSyntaxError, match=reason):
        tokenize(source)
