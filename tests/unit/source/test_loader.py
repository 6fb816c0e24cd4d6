from __future__ import annotations

from pathlib import Path

import pytest

from resolver_sync.errors import LoadError
from resolver_sync.source import discover_go_files, load_source_model, module_import_path


def _write_package(directory: Path, files: dict[str, str]) -> Path:
    directory.mkdir(parents=True, exist_ok=True)
    for name, text in files.items():
        (directory / name).write_text(text, encoding="utf-8")
    return directory


def test_load_source_model_indexes_methods_types_and_files(tmp_path: Path) -> None:
    package_dir = _write_package(
        tmp_path / "resolver",
        {
            "base.go": "package resolver\n\ntype Resolver struct{}\n\n"
            "type queryResolver struct{ *Resolver }\n",
            "query_widget.go": 'package resolver\n\nimport "context"\n\n'
            "func (r *queryResolver) Widget(ctx context.Context) error {\n\treturn nil\n}\n\n"
            "func helper() {}\n\nfunc init() {}\n",
            "query_widget_test.go": "package resolver\n\nfunc TestWidget() {}\n",
            "notes.txt": "not go",
        },
    )

    model = load_source_model(package_dir)

    assert model.package == "resolver"
    assert model.directory == package_dir.resolve()
    assert sorted(model.func_decls) == ["helper", "queryResolver.Widget"]
    assert sorted(model.type_decls) == ["Resolver", "queryResolver"]
    assert model.interfaces == {}
    assert model.file_map["queryResolver.Widget"].name == "query_widget.go"
    assert model.file_map["queryResolver"].name == "base.go"
    assert model.method("queryResolver", "Widget") is not None
    assert model.method("queryResolver", "Missing") is None
    assert model.has_type("Resolver")
    assert model.imports_for("queryResolver.Widget") == {"context": "context"}
    assert [path.name for path in model.files] == ["base.go", "query_widget.go"]


def test_discover_go_files_is_sorted_and_skips_tests(tmp_path: Path) -> None:
    _write_package(
        tmp_path,
        {"z.go": "package p\n", "a.go": "package p\n", "a_test.go": "package p\n"},
    )

    assert [path.name for path in discover_go_files(tmp_path)] == ["a.go", "z.go"]


def test_load_source_model_rejects_missing_directory(tmp_path: Path) -> None:
    with pytest.raises(LoadError, match="does not exist"):
        load_source_model(tmp_path / "absent")


def test_load_source_model_rejects_empty_directory(tmp_path: Path) -> None:
    with pytest.raises(LoadError, match="no Go source files") as error:
        load_source_model(tmp_path)
    assert error.value.hint is not None


def test_load_source_model_reports_syntax_errors_with_path(tmp_path: Path) -> None:
    _write_package(tmp_path, {"broken.go": "package p\n\nfunc f() {\n"})

    with pytest.raises(LoadError, match="syntax error") as error:
        load_source_model(tmp_path)
    assert error.value.path is not None
    assert error.value.path.endswith("broken.go")


def test_load_source_model_rejects_mixed_packages(tmp_path: Path) -> None:
    _write_package(tmp_path, {"a.go": "package one\n", "b.go": "package two\n"})

    with pytest.raises(LoadError, match="does not match"):
        load_source_model(tmp_path)


def test_load_source_model_rejects_duplicate_methods(tmp_path: Path) -> None:
    method = "package p\n\nfunc (r *x) M() {}\n"
    _write_package(tmp_path, {"a.go": method, "b.go": method})

    with pytest.raises(LoadError, match="already declared in a.go"):
        load_source_model(tmp_path)


def test_load_source_model_rejects_unresolved_qualifiers(tmp_path: Path) -> None:
    _write_package(
        tmp_path,
        {"a.go": "package p\n\ntype QueryResolver interface {\n\tUser() *model.User\n}\n"},
    )

    with pytest.raises(LoadError, match="unresolved import 'model'") as error:
        load_source_model(tmp_path)
    assert error.value.hint == "Add an import for package 'model'."


def test_module_import_path_walks_up_to_go_mod(tmp_path: Path) -> None:
    (tmp_path / "go.mod").write_text("module example.com/app\n\ngo 1.21\n", encoding="utf-8")
    nested = tmp_path / "graph" / "generated"
    nested.mkdir(parents=True)

    assert module_import_path(nested) == "example.com/app/graph/generated"
    assert module_import_path(tmp_path) == "example.com/app"


def test_module_import_path_without_go_mod(tmp_path: Path) -> None:
    nested = tmp_path / "pkg"
    nested.mkdir()

    assert module_import_path(nested) is None
