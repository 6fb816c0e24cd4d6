"""Closed type expression model for Go parameter and result types."""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from typing import Union

PREDECLARED_TYPES = frozenset(
    {
        "bool",
        "byte",
        "complex64",
        "complex128",
        "error",
        "float32",
        "float64",
        "int",
        "int8",
        "int16",
        "int32",
        "int64",
        "rune",
        "string",
        "uint",
        "uint8",
        "uint16",
        "uint32",
        "uint64",
        "uintptr",
    }
)

CHAN_BOTH = "both"
CHAN_RECV = "recv"
CHAN_SEND = "send"


@dataclass(slots=True, frozen=True)
class Basic:
    """Predeclared type such as ``string`` or ``error``."""

    name: str


@dataclass(slots=True, frozen=True)
class Pointer:
    inner: TypeExpression


@dataclass(slots=True, frozen=True)
class Slice:
    inner: TypeExpression


@dataclass(slots=True, frozen=True)
class Map:
    key: TypeExpression
    value: TypeExpression


@dataclass(slots=True, frozen=True)
class Channel:
    direction: str
    inner: TypeExpression


@dataclass(slots=True, frozen=True)
class Named:
    """Declared type; ``namespace`` is the package name or import alias."""

    namespace: str
    name: str


@dataclass(slots=True, frozen=True)
class EmptyInterface:
    """``interface{}`` or ``any``."""


TypeExpression = Union[Basic, Pointer, Slice, Map, Channel, Named, EmptyInterface]


def is_basic_type(name: str) -> bool:
    """Return True for predeclared Go type names."""
    return name in PREDECLARED_TYPES


def is_error_type(expr: TypeExpression) -> bool:
    """Return True when expression is the predeclared ``error`` type."""
    return isinstance(expr, Basic) and expr.name == "error"


def render_type(expr: TypeExpression, local_namespace: str | None = None) -> str:
    """Render an expression as Go source, omitting the qualifier for ``local_namespace``."""
    if isinstance(expr, Basic):
        return expr.name
    if isinstance(expr, Pointer):
        return "*" + render_type(expr.inner, local_namespace)
    if isinstance(expr, Slice):
        return "[]" + render_type(expr.inner, local_namespace)
    if isinstance(expr, Map):
        key = render_type(expr.key, local_namespace)
        value = render_type(expr.value, local_namespace)
        return f"map[{key}]{value}"
    if isinstance(expr, Channel):
        inner = render_type(expr.inner, local_namespace)
        if expr.direction == CHAN_RECV:
            return f"<-chan {inner}"
        if expr.direction == CHAN_SEND:
            return f"chan<- {inner}"
        return f"chan {inner}"
    if isinstance(expr, Named):
        if not expr.namespace or expr.namespace == local_namespace:
            return expr.name
        return f"{expr.namespace}.{expr.name}"
    if isinstance(expr, EmptyInterface):
        return "interface{}"
    raise TypeError(f"Unsupported type expression: {expr!r}")


def translate_namespace(expr: TypeExpression, mapping: Mapping[str, str]) -> TypeExpression:
    """Return a copy of ``expr`` with ``Named`` namespaces substituted through ``mapping``."""
    if isinstance(expr, Named):
        return Named(namespace=mapping.get(expr.namespace, expr.namespace), name=expr.name)
    if isinstance(expr, Pointer):
        return Pointer(translate_namespace(expr.inner, mapping))
    if isinstance(expr, Slice):
        return Slice(translate_namespace(expr.inner, mapping))
    if isinstance(expr, Map):
        return Map(
            key=translate_namespace(expr.key, mapping),
            value=translate_namespace(expr.value, mapping),
        )
    if isinstance(expr, Channel):
        return Channel(direction=expr.direction, inner=translate_namespace(expr.inner, mapping))
    return expr


def iter_named(expr: TypeExpression) -> Iterator[Named]:
    """Yield every ``Named`` node in depth-first order."""
    if isinstance(expr, Named):
        yield expr
    elif isinstance(expr, (Pointer, Slice)):
        yield from iter_named(expr.inner)
    elif isinstance(expr, Map):
        yield from iter_named(expr.key)
        yield from iter_named(expr.value)
    elif isinstance(expr, Channel):
        yield from iter_named(expr.inner)


def types_equal(left: TypeExpression, right: TypeExpression, projected: frozenset[str]) -> bool:
    """Compare two expressions, matching ``Named`` types by bare name inside ``projected``.

    Namespaces listed in ``projected`` are treated as one: ``gql.Widget`` equals
    ``resolver.Widget`` when both ``gql`` and ``resolver`` are projected.
    """
    if isinstance(left, Named) and isinstance(right, Named):
        if left.namespace in projected and right.namespace in projected:
            return left.name == right.name
        return left.namespace == right.namespace and left.name == right.name
    if type(left) is not type(right):
        return False
    if isinstance(left, Basic):
        return left.name == right.name
    if isinstance(left, (Pointer, Slice)):
        return types_equal(left.inner, right.inner, projected)
    if isinstance(left, Map):
        return types_equal(left.key, right.key, projected) and types_equal(
            left.value, right.value, projected
        )
    if isinstance(left, Channel):
        return left.direction == right.direction and types_equal(
            left.inner, right.inner, projected
        )
    return isinstance(left, EmptyInterface)


@dataclass(slots=True, frozen=True)
class Field:
    """One parameter or result; ``name`` is empty for positional entries."""

    name: str
    type: TypeExpression


@dataclass(slots=True, frozen=True)
class MethodSignature:
    """Ordered parameters and results. ``results`` is None when the method declares none."""

    params: tuple[Field, ...]
    results: tuple[Field, ...] | None = None

    def result_fields(self) -> tuple[Field, ...]:
        return self.results or ()
