"""Merge rewritten files with pending stubs, format, and persist dirty files."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from resolver_sync.errors import FormatError, WriteError
from resolver_sync.reconcile import ReconcileResult
from resolver_sync.source import SourceModel
from resolver_sync.writeback.formatter import Formatter

logger = logging.getLogger(__name__)

WRITTEN = "written"
WOULD_WRITE = "would_write"
FAILED = "failed"


@dataclass(slots=True, frozen=True)
class WriteOutcome:
    """Result of persisting one dirty file."""

    path: str
    status: str
    formatted: bool
    detail: str | None = None


class WriteBackCoordinator:
    """Serializes the implementation package and writes only dirty files."""

    def __init__(
        self,
        implementation: SourceModel,
        formatter: Formatter | None,
        *,
        dry_run: bool = False,
    ) -> None:
        self._impl = implementation
        self._formatter = formatter
        self._dry_run = dry_run

    def collect(self, result: ReconcileResult) -> dict[Path, str]:
        """Return full contents for every known file: serialized source plus pending text."""
        contents: dict[Path, str] = {
            path: source.render() for path, source in self._impl.files.items()
        }
        for path in result.pending.paths():
            contents[path] = contents.get(path, "") + result.pending.text(path)
        return contents

    def write(self, result: ReconcileResult) -> list[WriteOutcome]:
        """Format and persist each dirty file in path order; failures are per file."""
        contents = self.collect(result)
        outcomes: list[WriteOutcome] = []
        for path in result.dirty.sorted():
            content = contents.get(path)
            if content is None:
                logger.error("no content collected for dirty file %s", path)
                outcomes.append(
                    WriteOutcome(str(path), FAILED, formatted=False, detail="no content")
                )
                continue
            outcomes.append(self._write_one(path, content))
        return outcomes

    def _write_one(self, path: Path, content: str) -> WriteOutcome:
        output, formatted, detail = self._format(path, content)
        if self._dry_run:
            logger.info("would update %s", path)
            return WriteOutcome(str(path), WOULD_WRITE, formatted=formatted, detail=detail)
        try:
            persist(path, output)
        except WriteError as error:
            logger.error("failed to write %s: %s", path, error.reason)
            return WriteOutcome(str(path), FAILED, formatted=formatted, detail=error.reason)
        logger.info("updated %s", path)
        return WriteOutcome(str(path), WRITTEN, formatted=formatted, detail=detail)

    def _format(self, path: Path, content: str) -> tuple[str, bool, str | None]:
        if self._formatter is None:
            return content, False, None
        try:
            return self._formatter.format(content, self._impl.directory), True, None
        except FormatError as error:
            logger.warning(
                "formatting %s failed, writing unformatted: %s", path.name, error.reason
            )
            return content, False, error.reason


def persist(path: Path, content: str) -> None:
    """Overwrite ``path`` with ``content`` encoded as UTF-8."""
    try:
        path.write_bytes(content.encode("utf-8"))
    except OSError as error:
        raise WriteError(str(error), path=str(path)) from error
