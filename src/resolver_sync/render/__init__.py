"""Stub rendering and file naming."""

from .naming import NamingRules, lc_first, snake_case, trim_suffix
from .templates import (
    ERROR_RESULT_NAME,
    GUARD_STATEMENT,
    UNIMPLEMENTED_STATEMENT,
    ImportLine,
    NameTypePair,
    default_param_names,
    default_result_names,
    render_file_header,
    render_method_stub,
    render_receiver_type,
)

__all__ = [
    "ERROR_RESULT_NAME",
    "GUARD_STATEMENT",
    "UNIMPLEMENTED_STATEMENT",
    "ImportLine",
    "NameTypePair",
    "NamingRules",
    "default_param_names",
    "default_result_names",
    "lc_first",
    "render_file_header",
    "render_method_stub",
    "render_receiver_type",
    "snake_case",
    "trim_suffix",
]
