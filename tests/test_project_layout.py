from __future__ import annotations

from pathlib import Path


def test_required_package_paths_exist() -> None:
    root = Path(__file__).resolve().parents[1]
    required = [
        "src/resolver_sync/cli.py",
        "src/resolver_sync/runner.py",
        "src/resolver_sync/config.py",
        "src/resolver_sync/golang/__init__.py",
        "src/resolver_sync/source/__init__.py",
        "src/resolver_sync/reconcile/__init__.py",
        "src/resolver_sync/render/__init__.py",
        "src/resolver_sync/writeback/__init__.py",
        "src/resolver_sync/logging/__init__.py",
        "tests/fixtures/go/todo/go.mod",
    ]
    for rel in required:
        assert (root / rel).exists(), rel
