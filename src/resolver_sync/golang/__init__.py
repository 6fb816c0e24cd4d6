"""Go source modeling: tokens, type expressions and declarations."""

from .lexer import GoSyntaxError, Token, tokenize
from .parser import (
    FuncDecl,
    ImportSpec,
    InterfaceMethod,
    ParsedFile,
    Span,
    TypeDecl,
    UnsupportedTypeError,
    default_import_name,
    parse_file,
    parse_type_expression,
)
from .types import (
    Basic,
    Channel,
    EmptyInterface,
    Field,
    Map,
    MethodSignature,
    Named,
    Pointer,
    Slice,
    TypeExpression,
    is_basic_type,
    is_error_type,
    iter_named,
    render_type,
    translate_namespace,
    types_equal,
)

__all__ = [
    "Basic",
    "Channel",
    "EmptyInterface",
    "Field",
    "FuncDecl",
    "GoSyntaxError",
    "ImportSpec",
    "InterfaceMethod",
    "Map",
    "MethodSignature",
    "Named",
    "ParsedFile",
    "Pointer",
    "Slice",
    "Span",
    "Token",
    "TypeDecl",
    "TypeExpression",
    "UnsupportedTypeError",
    "default_import_name",
    "is_basic_type",
    "is_error_type",
    "iter_named",
    "parse_file",
    "parse_type_expression",
    "render_type",
    "tokenize",
    "translate_namespace",
    "types_equal",
]
