"""Contract-to-implementation reconciliation."""

from .compare import fields_equal, is_structurally_equal
from .engine import Reconciler, guard_insertion
from .models import (
    MATCH,
    MISSING,
    RECEIVER_MISSING,
    SIGNATURE_DRIFT,
    SKIPPED,
    UNSUPPORTED,
    DirtySet,
    MethodDecision,
    PendingEdits,
    ReconcileResult,
)

__all__ = [
    "MATCH",
    "MISSING",
    "RECEIVER_MISSING",
    "SIGNATURE_DRIFT",
    "SKIPPED",
    "UNSUPPORTED",
    "DirtySet",
    "MethodDecision",
    "PendingEdits",
    "ReconcileResult",
    "Reconciler",
    "fields_equal",
    "guard_insertion",
    "is_structurally_equal",
]
