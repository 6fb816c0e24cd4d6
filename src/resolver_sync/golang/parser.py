"""Lexical Go declaration parser.

Produces top-level declarations with source spans. Function bodies are not
parsed beyond locating their braces and checking the first statement.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass
from typing import TypeVar

from resolver_sync.golang.lexer import (
    IDENT,
    KEYWORDS,
    NEWLINE,
    PUNCT,
    STRING,
    GoSyntaxError,
    Token,
    tokenize,
)
from resolver_sync.golang.types import (
    CHAN_BOTH,
    CHAN_RECV,
    CHAN_SEND,
    Basic,
    Channel,
    EmptyInterface,
    Field,
    Map,
    MethodSignature,
    Named,
    Pointer,
    Slice,
    TypeExpression,
    is_basic_type,
)

_OPENERS = {"(": ")", "[": "]", "{": "}"}
_CLOSERS = frozenset(_OPENERS.values())
_MAJOR_VERSION_RE = re.compile(r"^v\d+$")
_GOPKG_VERSION_RE = re.compile(r"\.v\d+$")
_TYPE_KEYWORDS = frozenset({"chan", "map", "func", "interface", "struct"})

_SpecT = TypeVar("_SpecT")


class UnsupportedTypeError(ValueError):
    """Raised when a type uses syntax outside the modeled expression set."""


@dataclass(slots=True, frozen=True)
class Span:
    """Half-open character range ``[start, end)`` in the source text."""

    start: int
    end: int


@dataclass(slots=True, frozen=True)
class ImportSpec:
    """One import; ``name`` is the identifier code uses to refer to the package."""

    name: str
    path: str
    explicit_alias: bool


@dataclass(slots=True, frozen=True)
class InterfaceMethod:
    """Method entry inside an interface body."""

    name: str
    signature: MethodSignature | None
    line: int
    unsupported: str | None = None


@dataclass(slots=True, frozen=True)
class TypeDecl:
    """Top-level type declaration."""

    name: str
    kind: str
    line: int
    methods: tuple[InterfaceMethod, ...] = ()
    embedded: tuple[str, ...] = ()


@dataclass(slots=True)
class FuncDecl:
    """Top-level function or method declaration.

    ``params_span`` covers the parenthesized parameter list. ``results_span``
    starts right after it and ends after the last result token; it is empty
    when the function declares no results. ``body_open`` is the offset of the
    opening brace, or None for declarations without a body.
    """

    name: str
    receiver: str | None
    line: int
    signature: MethodSignature | None
    params_span: Span
    results_span: Span
    body_open: int | None
    body_close: int | None
    starts_with_panic: bool
    unsupported: str | None = None

    @property
    def key(self) -> str:
        if self.receiver is None:
            return self.name
        return f"{self.receiver}.{self.name}"


@dataclass(slots=True, frozen=True)
class ParsedFile:
    """Declarations found in one Go source file."""

    package: str
    imports: tuple[ImportSpec, ...]
    types: tuple[TypeDecl, ...]
    funcs: tuple[FuncDecl, ...]

    def import_names(self) -> dict[str, str]:
        """Return import name -> import path for named, non-blank imports."""
        return {spec.name: spec.path for spec in self.imports if spec.name not in {"_", "."}}


def default_import_name(path: str) -> str:
    """Guess the package name Go code uses for an import path without an alias."""
    parts = [part for part in path.split("/") if part]
    if not parts:
        return path
    name = parts[-1]
    if _MAJOR_VERSION_RE.match(name) and len(parts) > 1:
        name = parts[-2]
    name = _GOPKG_VERSION_RE.sub("", name)
    if name.startswith("go-"):
        name = name[3:]
    return name.replace("-", "_").replace(".", "_")


def parse_file(text: str) -> ParsedFile:
    """Parse one Go source file into top-level declarations."""
    return _FileParser(text).parse()


def parse_type_expression(text: str, package: str) -> TypeExpression:
    """Parse a standalone type expression, resolving bare names against ``package``."""
    tokens = [token for token in tokenize(text) if token.kind != NEWLINE]
    return _parse_complete_type(tokens, package)


class _FileParser:
    def __init__(self, text: str) -> None:
        self._tokens = tokenize(text)
        self._pos = 0
        self._package: str | None = None

    def parse(self) -> ParsedFile:
        imports: list[ImportSpec] = []
        types: list[TypeDecl] = []
        funcs: list[FuncDecl] = []

        while True:
            self._skip_separators()
            token = self._peek()
            if token is None:
                break
            if token.is_ident("package"):
                self._advance()
                self._package = self._expect_ident().text
                continue
            if self._package is None:
                raise GoSyntaxError("expected package clause", token.line)
            if token.is_ident("import"):
                self._advance()
                imports.extend(self._parse_group(self._parse_import_spec))
            elif token.is_ident("type"):
                self._advance()
                types.extend(self._parse_group(self._parse_type_spec))
            elif token.is_ident("func"):
                self._advance()
                funcs.append(self._parse_func(token))
            elif token.is_ident("var") or token.is_ident("const"):
                self._advance()
                self._skip_value_decl()
            else:
                raise GoSyntaxError(f"unexpected {token.text!r} at top level", token.line)

        if self._package is None:
            raise GoSyntaxError("missing package clause", 1)
        return ParsedFile(
            package=self._package,
            imports=tuple(imports),
            types=tuple(types),
            funcs=tuple(funcs),
        )

    def _peek(self, offset: int = 0) -> Token | None:
        index = self._pos + offset
        if index < len(self._tokens):
            return self._tokens[index]
        return None

    def _advance(self) -> Token:
        token = self._peek()
        if token is None:
            raise GoSyntaxError("unexpected end of file", self._last_line())
        self._pos += 1
        return token

    def _last_line(self) -> int:
        return self._tokens[-1].line if self._tokens else 1

    def _expect_ident(self) -> Token:
        token = self._advance()
        if token.kind != IDENT:
            raise GoSyntaxError(f"expected identifier, found {token.text!r}", token.line)
        return token

    def _skip_separators(self) -> None:
        while True:
            token = self._peek()
            if token is None or not (token.kind == NEWLINE or token.is_punct(";")):
                return
            self._pos += 1

    def _parse_group(self, parse_spec: Callable[[], _SpecT]) -> list[_SpecT]:
        token = self._peek()
        if token is not None and token.is_punct("("):
            self._advance()
            specs: list[_SpecT] = []
            while True:
                self._skip_separators()
                token = self._peek()
                if token is None:
                    raise GoSyntaxError("unterminated declaration group", self._last_line())
                if token.is_punct(")"):
                    self._advance()
                    return specs
                specs.append(parse_spec())
        return [parse_spec()]

    def _parse_import_spec(self) -> ImportSpec:
        token = self._advance()
        alias: str | None = None
        if token.kind == IDENT or token.is_punct("."):
            alias = token.text
            token = self._advance()
        if token.kind != STRING:
            raise GoSyntaxError("expected import path", token.line)
        path = token.text[1:-1]
        name = alias if alias is not None else default_import_name(path)
        return ImportSpec(name=name, path=path, explicit_alias=alias is not None)

    def _parse_type_spec(self) -> TypeDecl:
        name_token = self._expect_ident()
        token = self._peek()
        if token is not None and token.is_punct("[") and self._is_type_params():
            self._skip_balanced()
        token = self._peek()
        if token is not None and token.is_punct("="):
            self._advance()
        token = self._peek()
        if token is None:
            raise GoSyntaxError("expected type", name_token.line)
        if token.is_ident("struct"):
            self._advance()
            self._skip_balanced()
            return TypeDecl(name=name_token.text, kind="struct", line=name_token.line)
        if token.is_ident("interface"):
            self._advance()
            methods, embedded = self._parse_interface_body()
            return TypeDecl(
                name=name_token.text,
                kind="interface",
                line=name_token.line,
                methods=methods,
                embedded=embedded,
            )
        self._skip_until_line_end()
        return TypeDecl(name=name_token.text, kind="other", line=name_token.line)

    def _is_type_params(self) -> bool:
        following = self._peek(1)
        after = self._peek(2)
        if following is None or after is None or following.kind != IDENT:
            return False
        return not after.is_punct("]")

    def _parse_interface_body(self) -> tuple[tuple[InterfaceMethod, ...], tuple[str, ...]]:
        open_index = self._pos
        self._skip_balanced()
        body = self._tokens[open_index + 1 : self._pos - 1]
        methods: list[InterfaceMethod] = []
        embedded: list[str] = []
        for entry in _split_entries(body):
            if len(entry) >= 2 and entry[0].kind == IDENT and entry[1].is_punct("("):
                methods.append(self._interface_method(entry))
            else:
                embedded.append(" ".join(token.text for token in entry))
        return tuple(methods), tuple(embedded)

    def _interface_method(self, entry: list[Token]) -> InterfaceMethod:
        name = entry[0]
        close = _matching_close(entry, 1)
        params_tokens = entry[2:close]
        results_tokens = entry[close + 1 :]
        try:
            signature = MethodSignature(
                params=_parse_field_list(params_tokens, self._package_name()),
                results=_parse_results(results_tokens, self._package_name()),
            )
        except UnsupportedTypeError as error:
            return InterfaceMethod(
                name=name.text, signature=None, line=name.line, unsupported=str(error)
            )
        return InterfaceMethod(name=name.text, signature=signature, line=name.line)

    def _parse_func(self, func_token: Token) -> FuncDecl:
        receiver: str | None = None
        token = self._peek()
        if token is not None and token.is_punct("("):
            open_index = self._pos
            self._skip_balanced()
            receiver = _receiver_type_name(self._tokens[open_index + 1 : self._pos - 1])
            if receiver is None:
                raise GoSyntaxError("cannot determine method receiver", func_token.line)

        name_token = self._expect_ident()
        token = self._peek()
        if token is not None and token.is_punct("["):
            self._skip_balanced()

        token = self._peek()
        if token is None or not token.is_punct("("):
            raise GoSyntaxError("expected parameter list", name_token.line)
        params_open = self._pos
        self._skip_balanced()
        params_close = self._pos - 1
        params_tokens = self._tokens[params_open + 1 : params_close]
        params_end = self._tokens[params_close].end

        results_start = self._pos
        token = self._peek()
        if token is not None and token.is_punct("("):
            self._skip_balanced()
        else:
            while True:
                token = self._peek()
                if token is None or token.kind == NEWLINE or token.is_punct(";"):
                    break
                if token.is_punct("{"):
                    break
                if token.kind == PUNCT and token.text in _OPENERS:
                    self._skip_balanced()
                    continue
                if token.is_ident("interface") or token.is_ident("struct"):
                    self._advance()
                    self._skip_balanced()
                    continue
                self._advance()
        results_tokens = self._tokens[results_start : self._pos]
        results_end = results_tokens[-1].end if results_tokens else params_end

        body_open: int | None = None
        body_close: int | None = None
        starts_with_panic = False
        token = self._peek()
        if token is not None and token.is_punct("{"):
            open_index = self._pos
            self._skip_balanced()
            body_open = self._tokens[open_index].start
            body_close = self._tokens[self._pos - 1].start
            starts_with_panic = _starts_with_panic(self._tokens[open_index + 1 : self._pos - 1])

        signature: MethodSignature | None = None
        unsupported: str | None = None
        try:
            signature = MethodSignature(
                params=_parse_field_list(params_tokens, self._package_name()),
                results=_parse_results(results_tokens, self._package_name()),
            )
        except UnsupportedTypeError as error:
            unsupported = str(error)

        return FuncDecl(
            name=name_token.text,
            receiver=receiver,
            line=func_token.line,
            signature=signature,
            params_span=Span(self._tokens[params_open].start, params_end),
            results_span=Span(params_end, results_end),
            body_open=body_open,
            body_close=body_close,
            starts_with_panic=starts_with_panic,
            unsupported=unsupported,
        )

    def _package_name(self) -> str:
        return self._package or ""

    def _skip_value_decl(self) -> None:
        token = self._peek()
        if token is not None and token.is_punct("("):
            self._skip_balanced()
            return
        self._skip_until_line_end()

    def _skip_until_line_end(self) -> None:
        while True:
            token = self._peek()
            if token is None or token.kind == NEWLINE or token.is_punct(";"):
                return
            if token.kind == PUNCT and token.text in _CLOSERS:
                return
            if token.kind == PUNCT and token.text in _OPENERS:
                self._skip_balanced()
                continue
            self._advance()

    def _skip_balanced(self) -> None:
        opener = self._advance()
        if opener.kind != PUNCT or opener.text not in _OPENERS:
            raise GoSyntaxError(f"expected bracket, found {opener.text!r}", opener.line)
        stack = [_OPENERS[opener.text]]
        while stack:
            token = self._advance()
            if token.kind != PUNCT:
                continue
            if token.text in _OPENERS:
                stack.append(_OPENERS[token.text])
            elif token.text in _CLOSERS:
                expected = stack.pop()
                if token.text != expected:
                    raise GoSyntaxError(
                        f"mismatched {token.text!r}, expected {expected!r}", token.line
                    )


def _matching_close(tokens: list[Token], open_index: int) -> int:
    depth = 0
    for index in range(open_index, len(tokens)):
        token = tokens[index]
        if token.kind != PUNCT:
            continue
        if token.text in _OPENERS:
            depth += 1
        elif token.text in _CLOSERS:
            depth -= 1
            if depth == 0:
                return index
    raise GoSyntaxError("unbalanced brackets", tokens[open_index].line)


def _split_entries(tokens: list[Token]) -> list[list[Token]]:
    """Split tokens at depth-0 newlines and semicolons."""
    entries: list[list[Token]] = []
    current: list[Token] = []
    depth = 0
    for token in tokens:
        if depth == 0 and (token.kind == NEWLINE or token.is_punct(";")):
            if current:
                entries.append(current)
            current = []
            continue
        if token.kind == PUNCT and token.text in _OPENERS:
            depth += 1
        elif token.kind == PUNCT and token.text in _CLOSERS:
            depth -= 1
        current.append(token)
    if current:
        entries.append(current)
    return entries


def _split_commas(tokens: list[Token]) -> list[list[Token]]:
    groups: list[list[Token]] = []
    current: list[Token] = []
    depth = 0
    for token in tokens:
        if token.kind == NEWLINE:
            continue
        if depth == 0 and token.is_punct(","):
            groups.append(current)
            current = []
            continue
        if token.kind == PUNCT and token.text in _OPENERS:
            depth += 1
        elif token.kind == PUNCT and token.text in _CLOSERS:
            depth -= 1
        current.append(token)
    if current:
        groups.append(current)
    return groups


def _receiver_type_name(tokens: list[Token]) -> str | None:
    idents = [token for token in tokens if token.kind != NEWLINE]
    if idents and idents[0].kind == IDENT and len(idents) > 1:
        second = idents[1]
        if second.kind == IDENT or second.is_punct("*") or second.is_punct("("):
            idents = idents[1:]
    for token in idents:
        if token.is_punct("*") or token.is_punct("("):
            continue
        if token.kind == IDENT:
            return token.text
        return None
    return None


def _starts_with_panic(body: list[Token]) -> bool:
    meaningful = [token for token in body if token.kind != NEWLINE and not token.is_punct(";")]
    if len(meaningful) < 2:
        return False
    return meaningful[0].is_ident("panic") and meaningful[1].is_punct("(")


def _is_named_group(group: list[Token]) -> bool:
    if len(group) < 2:
        return False
    first = group[0]
    if first.kind != IDENT or first.text in KEYWORDS:
        return False
    return not group[1].is_punct(".")


def _parse_field_list(tokens: list[Token], package: str) -> tuple[Field, ...]:
    groups = _split_commas(tokens)
    if not groups:
        return ()
    if not any(_is_named_group(group) for group in groups):
        return tuple(Field(name="", type=_parse_complete_type(group, package)) for group in groups)

    fields: list[Field] = []
    pending: list[str] = []
    for group in groups:
        if len(group) == 1 and group[0].kind == IDENT:
            pending.append(group[0].text)
            continue
        if not _is_named_group(group):
            raise UnsupportedTypeError("mixed named and unnamed parameters")
        expr = _parse_complete_type(group[1:], package)
        for name in (*pending, group[0].text):
            fields.append(Field(name=name, type=expr))
        pending = []
    if pending:
        raise UnsupportedTypeError(f"parameter {pending[-1]!r} has no type")
    return tuple(fields)


def _parse_results(tokens: list[Token], package: str) -> tuple[Field, ...] | None:
    meaningful = [token for token in tokens if token.kind != NEWLINE]
    if not meaningful:
        return None
    if meaningful[0].is_punct("(") and _matching_close(meaningful, 0) == len(meaningful) - 1:
        return _parse_field_list(meaningful[1:-1], package)
    return (Field(name="", type=_parse_complete_type(meaningful, package)),)


def _parse_complete_type(tokens: list[Token], package: str) -> TypeExpression:
    if not tokens:
        raise UnsupportedTypeError("missing type")
    expr, index = _parse_type(tokens, 0, package)
    if index != len(tokens):
        leftover = " ".join(token.text for token in tokens)
        raise UnsupportedTypeError(f"unsupported type syntax: {leftover}")
    return expr


def _parse_type(tokens: list[Token], index: int, package: str) -> tuple[TypeExpression, int]:
    if index >= len(tokens):
        raise UnsupportedTypeError("missing type")
    token = tokens[index]

    if token.is_punct("*"):
        inner, index = _parse_type(tokens, index + 1, package)
        return Pointer(inner), index

    if token.is_punct("("):
        close = _matching_close(tokens, index)
        inner = _parse_complete_type(tokens[index + 1 : close], package)
        return inner, close + 1

    if token.is_punct("["):
        if index + 1 < len(tokens) and tokens[index + 1].is_punct("]"):
            inner, index = _parse_type(tokens, index + 2, package)
            return Slice(inner), index
        raise UnsupportedTypeError("array types are not supported")

    if token.is_ident("map"):
        if index + 1 >= len(tokens) or not tokens[index + 1].is_punct("["):
            raise UnsupportedTypeError("malformed map type")
        close = _matching_close(tokens, index + 1)
        key = _parse_complete_type(tokens[index + 2 : close], package)
        value, index = _parse_type(tokens, close + 1, package)
        return Map(key=key, value=value), index

    if token.is_punct("<-"):
        if index + 1 >= len(tokens) or not tokens[index + 1].is_ident("chan"):
            raise UnsupportedTypeError("malformed channel type")
        inner, index = _parse_type(tokens, index + 2, package)
        return Channel(direction=CHAN_RECV, inner=inner), index

    if token.is_ident("chan"):
        if index + 1 < len(tokens) and tokens[index + 1].is_punct("<-"):
            inner, index = _parse_type(tokens, index + 2, package)
            return Channel(direction=CHAN_SEND, inner=inner), index
        inner, index = _parse_type(tokens, index + 1, package)
        return Channel(direction=CHAN_BOTH, inner=inner), index

    if token.is_ident("interface"):
        if (
            index + 2 < len(tokens)
            and tokens[index + 1].is_punct("{")
            and tokens[index + 2].is_punct("}")
        ):
            return EmptyInterface(), index + 3
        raise UnsupportedTypeError("non-empty inline interfaces are not supported")

    if token.kind == IDENT and token.text not in _TYPE_KEYWORDS:
        if (
            index + 2 < len(tokens)
            and tokens[index + 1].is_punct(".")
            and tokens[index + 2].kind == IDENT
        ):
            return Named(namespace=token.text, name=tokens[index + 2].text), index + 3
        if token.text == "any":
            return EmptyInterface(), index + 1
        if is_basic_type(token.text):
            return Basic(token.text), index + 1
        return Named(namespace=package, name=token.text), index + 1

    raise UnsupportedTypeError(f"unsupported type syntax near {token.text!r}")
