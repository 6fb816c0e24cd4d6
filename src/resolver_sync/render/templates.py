"""Pure text templates for generated resolver code."""

from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass

from resolver_sync.errors import TemplateRenderError

GUARD_STATEMENT = 'panic("FIXME: method signature updated, please check")'
UNIMPLEMENTED_STATEMENT = 'panic("not implemented")'
ERROR_RESULT_NAME = "err"

_IDENTIFIER_RE = re.compile(r"^[^\W\d]\w*$")


@dataclass(slots=True, frozen=True)
class NameTypePair:
    """Parameter or result name with its already rendered Go type."""

    name: str
    type: str


@dataclass(slots=True, frozen=True)
class ImportLine:
    path: str
    alias: str | None = None


def render_method_stub(
    receiver: str,
    method: str,
    params: Sequence[NameTypePair],
    results: Sequence[NameTypePair],
    *,
    is_root: bool,
    child_receiver: str | None = None,
) -> str:
    """Render a method stub.

    Root methods return a new child receiver embedding the root; every other
    stub panics with an unimplemented marker.
    """
    _require_identifier(receiver, "receiver name")
    _require_identifier(method, "method name")
    named_params = default_param_names(params)
    named_results = default_result_names(results)

    if is_root:
        if child_receiver is None:
            raise TemplateRenderError(f"root method {method} needs a child receiver")
        _require_identifier(child_receiver, "child receiver name")
        if not named_results:
            raise TemplateRenderError(f"root method {method} must return its child resolver")
        body = f"return &{child_receiver}{{r}}"
    else:
        body = UNIMPLEMENTED_STATEMENT

    param_text = ", ".join(f"{pair.name} {pair.type}" for pair in named_params)
    header = f"func (r *{receiver}) {method}({param_text})"
    if named_results:
        result_text = ", ".join(f"{pair.name} {pair.type}" for pair in named_results)
        header = f"{header} ({result_text})"
    return f"\n{header} {{\n\t{body}\n}}\n"


def render_receiver_type(name: str, root_receiver: str) -> str:
    """Render a receiver struct; non-root receivers embed the root handle."""
    _require_identifier(name, "receiver name")
    _require_identifier(root_receiver, "root receiver name")
    if name == root_receiver:
        return f"\ntype {name} struct{{}}\n"
    return f"\ntype {name} struct{{ *{root_receiver} }}\n"


def render_file_header(package: str, imports: Sequence[ImportLine]) -> str:
    """Render a package clause and import block for a newly created file."""
    _require_identifier(package, "package name")
    lines = [f"package {package}", ""]
    ordered = sorted(imports, key=lambda item: (item.path, item.alias or ""))
    if len(ordered) == 1:
        lines.append(f"import {_import_spec(ordered[0])}")
    elif ordered:
        lines.append("import (")
        lines.extend(f"\t{_import_spec(item)}" for item in ordered)
        lines.append(")")
    return "\n".join(lines).rstrip() + "\n"


def default_param_names(params: Sequence[NameTypePair]) -> list[NameTypePair]:
    """Fill empty parameter names with ``param<index>``."""
    output: list[NameTypePair] = []
    for index, pair in enumerate(params):
        _require_type(pair)
        name = pair.name or f"param{index}"
        _require_identifier(name, "parameter name")
        output.append(NameTypePair(name=name, type=pair.type))
    return output


def default_result_names(results: Sequence[NameTypePair]) -> list[NameTypePair]:
    """Fill empty result names.

    ``error`` results become ``err``; the first other unnamed result becomes
    ``result`` and later ones ``result<index>``.
    """
    output: list[NameTypePair] = []
    used: set[str] = {pair.name for pair in results if pair.name}
    seen_plain = False
    for index, pair in enumerate(results):
        _require_type(pair)
        name = pair.name
        if not name:
            if pair.type == "error":
                name = ERROR_RESULT_NAME
            elif not seen_plain:
                name = "result"
                seen_plain = True
            else:
                name = f"result{index}"
            if name in used:
                name = f"{name}{index}"
            used.add(name)
        _require_identifier(name, "result name")
        output.append(NameTypePair(name=name, type=pair.type))
    return output


def _import_spec(item: ImportLine) -> str:
    if item.alias:
        return f'{item.alias} "{item.path}"'
    return f'"{item.path}"'


def _require_identifier(value: str, what: str) -> None:
    if not _IDENTIFIER_RE.match(value or ""):
        raise TemplateRenderError(f"invalid {what}: {value!r}")


def _require_type(pair: NameTypePair) -> None:
    if not pair.type or not pair.type.strip():
        raise TemplateRenderError(f"missing type for {pair.name or 'unnamed entry'}")
