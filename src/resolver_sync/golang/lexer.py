"""Deterministic Go tokenizer with character offsets.

Comments are dropped. Newlines are kept as tokens because Go terminates
statements and interface entries with them. A block comment spanning lines
counts as a newline.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

IDENT = "ident"
NUMBER = "number"
STRING = "string"
PUNCT = "punct"
NEWLINE = "newline"

_IDENTIFIER_PATTERN = re.compile(r"[^\W\d]\w*")
_NUMBER_PATTERN = re.compile(r"\.?\d(?:[eEpP][+-]|[\w.])*")
_MULTI_CHAR_PUNCT = ("...", "<-", ":=", "&&", "||", "==", "!=", "<=", ">=", "++", "--")

KEYWORDS = frozenset(
    {
        "break",
        "case",
        "chan",
        "const",
        "continue",
        "default",
        "defer",
        "else",
        "fallthrough",
        "for",
        "func",
        "go",
        "goto",
        "if",
        "import",
        "interface",
        "map",
        "package",
        "range",
        "return",
        "select",
        "struct",
        "switch",
        "type",
        "var",
    }
)


class GoSyntaxError(ValueError):
    """Raised when Go text cannot be tokenized or parsed."""

    def __init__(self, reason: str, line: int) -> None:
        super().__init__(f"line {line}: {reason}")
        self.reason = reason
        self.line = line


@dataclass(slots=True, frozen=True)
class Token:
    """Single lexical token; ``start``/``end`` are offsets into the source text."""

    kind: str
    text: str
    start: int
    end: int
    line: int

    def is_punct(self, text: str) -> bool:
        return self.kind == PUNCT and self.text == text

    def is_ident(self, text: str | None = None) -> bool:
        if self.kind != IDENT:
            return False
        return text is None or self.text == text


def tokenize(text: str) -> list[Token]:
    """Split Go source into tokens, skipping whitespace and comments."""
    tokens: list[Token] = []
    length = len(text)
    index = 0
    line = 1

    while index < length:
        char = text[index]

        if char == "\n":
            tokens.append(Token(NEWLINE, "\n", index, index + 1, line))
            line += 1
            index += 1
            continue

        if char in " \t\r\f\v":
            index += 1
            continue

        if text.startswith("//", index):
            newline = text.find("\n", index)
            index = length if newline == -1 else newline
            continue

        if text.startswith("/*", index):
            close = text.find("*/", index + 2)
            if close == -1:
                raise GoSyntaxError("comment not terminated", line)
            comment = text[index : close + 2]
            newlines = comment.count("\n")
            if newlines:
                tokens.append(Token(NEWLINE, "\n", index, close + 2, line))
                line += newlines
            index = close + 2
            continue

        if char in "\"'":
            end = _scan_quoted(text, index, char, line)
            tokens.append(Token(STRING, text[index:end], index, end, line))
            index = end
            continue

        if char == "`":
            close = text.find("`", index + 1)
            if close == -1:
                raise GoSyntaxError("raw string literal not terminated", line)
            raw = text[index : close + 1]
            tokens.append(Token(STRING, raw, index, close + 1, line))
            line += raw.count("\n")
            index = close + 1
            continue

        identifier = _IDENTIFIER_PATTERN.match(text, index)
        if identifier is not None:
            tokens.append(Token(IDENT, identifier.group(0), index, identifier.end(), line))
            index = identifier.end()
            continue

        number = _NUMBER_PATTERN.match(text, index)
        if number is not None:
            tokens.append(Token(NUMBER, number.group(0), index, number.end(), line))
            index = number.end()
            continue

        punct = _match_punct(text, index)
        tokens.append(Token(PUNCT, punct, index, index + len(punct), line))
        index += len(punct)

    return tokens


def _scan_quoted(text: str, start: int, quote: str, line: int) -> int:
    index = start + 1
    while index < len(text):
        char = text[index]
        if char == "\\":
            index += 2
            continue
        if char == "\n":
            break
        if char == quote:
            return index + 1
        index += 1
    raise GoSyntaxError("string literal not terminated", line)


def _match_punct(text: str, index: int) -> str:
    for marker in _MULTI_CHAR_PUNCT:
        if text.startswith(marker, index):
            return marker
    return text[index]
