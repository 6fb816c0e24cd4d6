"""Structured logging utilities."""

from .console import configure_logging
from .events import JsonlEventLogger, SyncEvent, run_identifier, utc_timestamp

__all__ = ["JsonlEventLogger", "SyncEvent", "configure_logging", "run_identifier", "utc_timestamp"]
