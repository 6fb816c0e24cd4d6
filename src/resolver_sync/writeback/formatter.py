"""External source formatter invoked as a subprocess."""

from __future__ import annotations

import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from resolver_sync.errors import FormatError

SRCDIR_PLACEHOLDER = "{srcdir}"
_STDERR_EXCERPT_CHARS = 400


class Formatter(Protocol):
    """Protocol implemented by source formatters."""

    def format(self, source: str, srcdir: Path) -> str:
        """Return formatted source or raise FormatError."""


@dataclass(slots=True, frozen=True)
class SubprocessFormatter:
    """Pipes source through a command such as ``goimports -srcdir {srcdir}``."""

    command: tuple[str, ...]
    timeout_seconds: float

    def argv(self, srcdir: Path) -> list[str]:
        return [part.replace(SRCDIR_PLACEHOLDER, str(srcdir)) for part in self.command]

    def format(self, source: str, srcdir: Path) -> str:
        argv = self.argv(srcdir)
        if not argv:
            raise FormatError("formatter command is empty")
        try:
            completed = subprocess.run(
                argv,
                input=source.encode("utf-8"),
                capture_output=True,
                timeout=self.timeout_seconds,
                cwd=srcdir,
                check=False,
            )
        except FileNotFoundError as error:
            raise FormatError(f"formatter executable not found: {argv[0]}") from error
        except subprocess.TimeoutExpired as error:
            raise FormatError(
                f"formatter timed out after {self.timeout_seconds:g}s: {argv[0]}"
            ) from error
        except OSError as error:
            raise FormatError(f"formatter could not start: {error}") from error

        if completed.returncode != 0:
            stderr = completed.stderr.decode("utf-8", errors="replace").strip()
            raise FormatError(
                f"formatter exited with status {completed.returncode}: "
                f"{stderr[:_STDERR_EXCERPT_CHARS]}"
            )
        try:
            output = completed.stdout.decode("utf-8")
        except UnicodeDecodeError as error:
            raise FormatError("formatter produced non UTF-8 output") from error
        if not output.strip():
            raise FormatError("formatter produced no output")
        return output
