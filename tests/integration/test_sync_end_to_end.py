from __future__ import annotations

import json
import shutil
from pathlib import Path

from resolver_sync.config import CliOverrides, SyncConfig, load_effective_config
from resolver_sync.reconcile import MATCH, MISSING, RECEIVER_MISSING, SIGNATURE_DRIFT
from resolver_sync.render import GUARD_STATEMENT
from resolver_sync.runner import SyncReport, SyncRunner
from resolver_sync.writeback import WOULD_WRITE, WRITTEN

FIXTURE = Path(__file__).resolve().parents[1] / "fixtures" / "go" / "todo"


def _project(tmp_path: Path) -> Path:
    root = tmp_path / "todo"
    shutil.copytree(FIXTURE, root)
    return root


def _config(root: Path, **overrides: object) -> SyncConfig:
    return load_effective_config(
        root,
        overrides=CliOverrides(
            contract_dir=Path("graph/generated"),
            implementation_dir=Path("graph/resolver"),
            formatter_enabled=False,
            **overrides,  # type: ignore[arg-type]
        ),
    )


def _run(root: Path, *, dry_run: bool = False, **overrides: object) -> SyncReport:
    return SyncRunner(_config(root, **overrides), dry_run=dry_run).run()


def _states(report: SyncReport) -> dict[tuple[str, str | None], str]:
    return {(item.receiver, item.method): item.state for item in report.decisions}


def _read(root: Path, name: str) -> str:
    return (root / "graph" / "resolver" / name).read_text(encoding="utf-8")


def _snapshot(root: Path) -> dict[str, str]:
    return {
        path.relative_to(root).as_posix(): path.read_text(encoding="utf-8")
        for path in sorted(root.rglob("*"))
        if path.is_file()
    }


def test_first_run_generates_patches_and_declares_receivers(tmp_path: Path) -> None:
    root = _project(tmp_path)
    original_base = _read(root, "base.go")
    original_todos = _read(root, "query_todos.go")

    report = _run(root)

    assert _states(report) == {
        ("mutationResolver", "CreateTodo"): SIGNATURE_DRIFT,
        ("queryResolver", "Todos"): MATCH,
        ("queryResolver", "Todo"): MISSING,
        ("Resolver", "Mutation"): MATCH,
        ("Resolver", "Query"): MATCH,
        ("Resolver", "Todo"): MISSING,
        ("todoResolver", None): RECEIVER_MISSING,
    }
    assert [Path(path).name for path in report.dirty_paths] == [
        "base.go",
        "mutation_create_todo.go",
        "query_todo.go",
    ]
    assert all(outcome.status == WRITTEN for outcome in report.outcomes)
    assert not report.has_failures

    assert _read(root, "base.go") == (
        original_base
        + "\nfunc (r *Resolver) Todo() (result generated.TodoResolver) {\n"
        + "\treturn &todoResolver{r}\n"
        + "}\n"
        + "\ntype todoResolver struct{ *Resolver }\n"
    )
    assert _read(root, "mutation_create_todo.go") == (
        "package resolver\n"
        "\n"
        "import (\n"
        '\t"context"\n'
        '\t"strings"\n'
        "\n"
        '\t"example.com/todo/graph/model"\n'
        ")\n"
        "\n"
        "func (r *mutationResolver) CreateTodo(ctx context.Context, input model.NewTodo)"
        " (*model.Todo, error) {\n"
        f"\t{GUARD_STATEMENT}\n"
        "\ttodo := &model.Todo{Text: strings.TrimSpace(text)}\n"
        "\treturn todo, nil\n"
        "}\n"
    )
    assert _read(root, "query_todo.go") == (
        "package resolver\n"
        "\n"
        "import (\n"
        '\t"context"\n'
        '\t"example.com/todo/graph/model"\n'
        ")\n"
        "\n"
        "func (r *queryResolver) Todo(ctx context.Context, id string)"
        " (result *model.Todo, err error) {\n"
        '\tpanic("not implemented")\n'
        "}\n"
    )
    assert _read(root, "query_todos.go") == original_todos


def test_repeated_runs_converge_without_second_guard(tmp_path: Path) -> None:
    root = _project(tmp_path)

    _run(root)
    second = _run(root)

    assert _states(second)[("todoResolver", "User")] == MISSING
    assert _states(second)[("mutationResolver", "CreateTodo")] == MATCH
    assert [Path(path).name for path in second.dirty_paths] == ["todo_user.go"]
    assert _read(root, "todo_user.go") == (
        "package resolver\n"
        "\n"
        "import (\n"
        '\t"context"\n'
        '\t"example.com/todo/graph/model"\n'
        ")\n"
        "\n"
        "func (r *todoResolver) User(ctx context.Context, obj *model.Todo)"
        " (result *model.User, err error) {\n"
        '\tpanic("not implemented")\n'
        "}\n"
    )

    before = _snapshot(root)
    third = _run(root)

    assert third.dirty_paths == ()
    assert set(_states(third).values()) == {MATCH}
    assert _snapshot(root) == before
    assert _read(root, "mutation_create_todo.go").count(GUARD_STATEMENT) == 1


def test_dry_run_reports_without_writing(tmp_path: Path) -> None:
    root = _project(tmp_path)
    before = _snapshot(root)

    report = _run(root, dry_run=True)

    assert len(report.dirty_paths) == 3
    assert {outcome.status for outcome in report.outcomes} == {WOULD_WRITE}
    assert _snapshot(root) == before


def test_formatter_is_applied_to_dirty_files_only(tmp_path: Path) -> None:
    root = _project(tmp_path)
    original_todos = _read(root, "query_todos.go")

    class _MarkingFormatter:
        def format(self, source: str, srcdir: Path) -> str:
            return source + "// formatted\n"

    SyncRunner(_config(root), formatter=_MarkingFormatter()).run()

    assert _read(root, "query_todo.go").endswith("}\n// formatted\n")
    assert _read(root, "base.go").endswith("// formatted\n")
    assert _read(root, "query_todos.go") == original_todos


def test_event_log_records_run(tmp_path: Path) -> None:
    root = _project(tmp_path)
    event_log = tmp_path / "events.jsonl"

    report = _run(root, event_log=event_log)

    records = [json.loads(line) for line in event_log.read_text(encoding="utf-8").splitlines()]
    assert {record["run_id"] for record in records} == {report.run_id}
    events = [record["event"] for record in records]
    assert events[0] == "run_started"
    assert events[-1] == "run_finished"
    assert events.count(WRITTEN) == 3
    assert SIGNATURE_DRIFT in events
    assert RECEIVER_MISSING in events
    assert MATCH not in events
    assert records[-1]["metadata"] == {"dirty_files": 3, "failed_items": 0}
    assert records[0]["metadata"]["config"]["formatter"]["enabled"] is False


def test_report_serializes(tmp_path: Path) -> None:
    root = _project(tmp_path)

    report = _run(root, dry_run=True)
    payload = json.loads(json.dumps(report.to_dict()))

    assert payload["dry_run"] is True
    assert len(payload["outcomes"]) == 3
    assert {"contract", "receiver", "method", "state", "path", "detail"} == set(
        payload["decisions"][0]
    )
