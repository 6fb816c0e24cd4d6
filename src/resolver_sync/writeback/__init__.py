"""Serialization, formatting and persistence of changed files."""

from .formatter import Formatter, SubprocessFormatter
from .writer import FAILED, WOULD_WRITE, WRITTEN, WriteBackCoordinator, WriteOutcome, persist

__all__ = [
    "FAILED",
    "WOULD_WRITE",
    "WRITTEN",
    "Formatter",
    "SubprocessFormatter",
    "WriteBackCoordinator",
    "WriteOutcome",
    "persist",
]
