"""Load a Go package directory into a SourceModel."""

from __future__ import annotations

import logging
import re
from pathlib import Path

from resolver_sync.errors import LoadError
from resolver_sync.golang import (
    GoSyntaxError,
    MethodSignature,
    ParsedFile,
    iter_named,
    parse_file,
)
from resolver_sync.source.models import SourceFile, SourceModel

logger = logging.getLogger(__name__)

_MODULE_RE = re.compile(r"^\s*module\s+(\S+)", re.MULTILINE)
_IGNORED_FUNC_NAMES = frozenset({"init", "_"})


def discover_go_files(directory: Path) -> list[Path]:
    """Return non-test Go files in ``directory`` sorted by name."""
    return sorted(
        path
        for path in directory.iterdir()
        if path.is_file() and path.suffix == ".go" and not path.name.endswith("_test.go")
    )


def load_source_model(directory: Path) -> SourceModel:
    """Parse every Go file of a package directory and build its lookup tables.

    Raises LoadError when the directory is missing or empty, a file does not
    parse, files disagree on the package name, a signature references an
    unimported package, or two declarations share a key.
    """
    root = directory.resolve()
    if not root.is_dir():
        raise LoadError("package directory does not exist", path=str(root))
    paths = discover_go_files(root)
    if not paths:
        raise LoadError(
            "no Go source files found",
            path=str(root),
            hint="Point the loader at a directory containing .go files.",
        )

    files: dict[Path, SourceFile] = {}
    package: str | None = None
    for path in paths:
        text, parsed = _read_and_parse(path)
        if package is None:
            package = parsed.package
        elif parsed.package != package:
            raise LoadError(
                f"package {parsed.package!r} does not match {package!r}", path=str(path)
            )
        files[path] = SourceFile(path=path, text=text, parsed=parsed)

    model = SourceModel(
        directory=root,
        package=package or "",
        import_path=module_import_path(root),
        files=files,
        func_decls={},
        type_decls={},
        interfaces={},
        file_map={},
    )
    for path, source in files.items():
        _index_file(model, path, source.parsed)
    logger.debug(
        "loaded package %s from %s: %d files, %d funcs, %d types",
        package,
        root,
        len(files),
        len(model.func_decls),
        len(model.type_decls),
    )
    return model


def module_import_path(directory: Path) -> str | None:
    """Derive a package import path from the nearest enclosing go.mod, if any."""
    for candidate in (directory, *directory.parents):
        go_mod = candidate / "go.mod"
        if not go_mod.is_file():
            continue
        matched = _MODULE_RE.search(go_mod.read_text(encoding="utf-8"))
        if matched is None:
            return None
        relative = directory.relative_to(candidate).as_posix()
        if relative == ".":
            return matched.group(1)
        return f"{matched.group(1)}/{relative}"
    return None


def _read_and_parse(path: Path) -> tuple[str, ParsedFile]:
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as error:
        raise LoadError(f"cannot read file: {error}", path=str(path)) from error
    try:
        return text, parse_file(text)
    except GoSyntaxError as error:
        raise LoadError(f"syntax error at {error}", path=str(path)) from error


def _index_file(model: SourceModel, path: Path, parsed: ParsedFile) -> None:
    imports = parsed.import_names()

    for decl in parsed.funcs:
        if decl.receiver is None and decl.name in _IGNORED_FUNC_NAMES:
            continue
        key = decl.key
        if key in model.func_decls:
            raise LoadError(
                f"{key} is already declared in {model.file_map[key].name}", path=str(path)
            )
        if decl.signature is not None:
            _check_imports(decl.signature, parsed.package, imports, path, key)
        model.func_decls[key] = decl
        model.file_map[key] = path

    for decl in parsed.types:
        if decl.name in model.type_decls:
            raise LoadError(
                f"type {decl.name} is already declared in {model.file_map[decl.name].name}",
                path=str(path),
            )
        model.type_decls[decl.name] = decl
        model.file_map[decl.name] = path
        if decl.kind != "interface":
            continue
        model.interfaces[decl.name] = decl
        for method in decl.methods:
            if method.signature is not None:
                _check_imports(
                    method.signature, parsed.package, imports, path, f"{decl.name}.{method.name}"
                )


def _check_imports(
    signature: MethodSignature,
    package: str,
    imports: dict[str, str],
    path: Path,
    key: str,
) -> None:
    for item in (*signature.params, *signature.result_fields()):
        for named in iter_named(item.type):
            if named.namespace == package or named.namespace in imports:
                continue
            raise LoadError(
                f"{key} references unresolved import {named.namespace!r}",
                path=str(path),
                hint=f"Add an import for package {named.namespace!r}.",
            )
