"""Error kinds raised while loading, rendering, formatting and writing."""

from __future__ import annotations


class SyncError(Exception):
    """Base class for resolver synchronization failures."""

    def __init__(self, reason: str, path: str | None = None, hint: str | None = None) -> None:
        message = reason if path is None else f"{path}: {reason}"
        super().__init__(message)
        self.reason = reason
        self.path = path
        self.hint = hint


class LoadError(SyncError):
    """Raised when a package cannot be read, parsed or resolved. Fatal for the run."""


class TemplateRenderError(SyncError):
    """Raised when stub template input is malformed. Only that stub is skipped."""


class FormatError(SyncError):
    """Raised when the external formatter fails for one file."""


class WriteError(SyncError):
    """Raised when persisting one file fails."""
