"""Reconciliation decisions and write-back accumulators."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

MATCH = "match"
MISSING = "missing"
RECEIVER_MISSING = "receiver_missing"
SIGNATURE_DRIFT = "signature_drift"
UNSUPPORTED = "unsupported"
SKIPPED = "skipped"


@dataclass(slots=True, frozen=True)
class MethodDecision:
    """Outcome for one contract method, or for a whole contract when its receiver is missing."""

    contract: str
    receiver: str
    method: str | None
    state: str
    path: str | None = None
    detail: str | None = None


@dataclass(slots=True)
class PendingEdits:
    """Append-only text buffers keyed by destination file, in discovery order."""

    _buffers: dict[Path, list[str]] = field(default_factory=dict)

    def append(self, path: Path, text: str) -> None:
        self._buffers.setdefault(path, []).append(text)

    def __contains__(self, path: object) -> bool:
        return path in self._buffers

    def __len__(self) -> int:
        return len(self._buffers)

    def paths(self) -> tuple[Path, ...]:
        return tuple(self._buffers.keys())

    def text(self, path: Path) -> str:
        return "".join(self._buffers.get(path, ()))


@dataclass(slots=True)
class DirtySet:
    """File paths that must be written back."""

    _paths: set[Path] = field(default_factory=set)

    def add(self, path: Path) -> None:
        self._paths.add(path)

    def __contains__(self, path: object) -> bool:
        return path in self._paths

    def __len__(self) -> int:
        return len(self._paths)

    def sorted(self) -> list[Path]:
        return sorted(self._paths)


@dataclass(slots=True)
class ReconcileResult:
    """Everything reconciliation produced for the write-back phase."""

    decisions: list[MethodDecision] = field(default_factory=list)
    pending: PendingEdits = field(default_factory=PendingEdits)
    dirty: DirtySet = field(default_factory=DirtySet)

    def by_state(self, state: str) -> list[MethodDecision]:
        return [decision for decision in self.decisions if decision.state == state]

    @property
    def failed(self) -> list[MethodDecision]:
        return [
            decision for decision in self.decisions if decision.state in {SKIPPED, UNSUPPORTED}
        ]
