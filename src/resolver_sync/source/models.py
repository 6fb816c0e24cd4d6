"""Symbol tables and editable source files for one loaded Go package."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from resolver_sync.golang import FuncDecl, ParsedFile, Span, TypeDecl


@dataclass(slots=True, frozen=True)
class TextEdit:
    """Replace ``[start, end)`` of the original text with ``replacement``."""

    start: int
    end: int
    replacement: str


@dataclass(slots=True)
class SourceFile:
    """Original file text plus the span edits applied during reconciliation."""

    path: Path
    text: str
    parsed: ParsedFile
    edits: list[TextEdit] = field(default_factory=list)

    def replace(self, span: Span, replacement: str) -> None:
        """Queue a replacement of ``span`` in the original text."""
        if span.start < 0 or span.end > len(self.text) or span.end < span.start:
            raise ValueError(f"Span {span.start}:{span.end} is outside {self.path.name}.")
        self.edits.append(TextEdit(start=span.start, end=span.end, replacement=replacement))

    def insert(self, offset: int, text: str) -> None:
        """Queue an insertion at ``offset`` of the original text."""
        self.replace(Span(offset, offset), text)

    @property
    def modified(self) -> bool:
        return bool(self.edits)

    def render(self) -> str:
        """Return the file text with all queued edits applied.

        Text outside edited spans is reproduced unchanged.
        """
        ordered = sorted(
            enumerate(self.edits), key=lambda item: (item[1].start, item[1].end, item[0])
        )
        pieces: list[str] = []
        cursor = 0
        for _, edit in ordered:
            if edit.start < cursor:
                raise ValueError(f"Overlapping edits in {self.path.name} at offset {edit.start}.")
            pieces.append(self.text[cursor : edit.start])
            pieces.append(edit.replacement)
            cursor = edit.end
        pieces.append(self.text[cursor:])
        return "".join(pieces)


@dataclass(slots=True)
class SourceModel:
    """Lookup tables for one package.

    ``func_decls`` is keyed by ``receiver.method`` for methods (receiver pointer
    markers stripped) and by bare name for plain functions. ``file_map`` maps
    every function and type key to the file declaring it.
    """

    directory: Path
    package: str
    import_path: str | None
    files: dict[Path, SourceFile]
    func_decls: dict[str, FuncDecl]
    type_decls: dict[str, TypeDecl]
    interfaces: dict[str, TypeDecl]
    file_map: dict[str, Path]

    def file_for(self, key: str) -> SourceFile:
        """Return the source file that declares ``key``."""
        return self.files[self.file_map[key]]

    def method(self, receiver: str, name: str) -> FuncDecl | None:
        return self.func_decls.get(f"{receiver}.{name}")

    def has_type(self, name: str) -> bool:
        return name in self.type_decls

    def imports_for(self, key: str) -> dict[str, str]:
        """Return import name -> path for the file declaring ``key``."""
        return self.file_for(key).parsed.import_names()
