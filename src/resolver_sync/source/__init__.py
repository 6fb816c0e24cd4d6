"""Package loading and symbol tables."""

from .loader import discover_go_files, load_source_model, module_import_path
from .models import SourceFile, SourceModel, TextEdit

__all__ = [
    "SourceFile",
    "SourceModel",
    "TextEdit",
    "discover_go_files",
    "load_source_model",
    "module_import_path",
]
