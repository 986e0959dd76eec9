"""Core formatting components.

This package provides:
- Argument classification and lazy placeholders
- Fallback text for unconsumed arguments
- Template functions and the function registry
- The Jinja2 template engine adapter
- The error taxonomy
"""

from argformat.core.arguments import (
    ArgumentKind,
    Named,
    Placeholder,
    ResolutionContext,
    classify_argument,
    resolve_arguments,
)
from argformat.core.errors import (
    ConfigError,
    ErrorCode,
    FatalFormatError,
    FormatError,
    FormatExecutionError,
    FormatSyntaxError,
    SinkWriteError,
)
from argformat.core.fallback import fallback_text
from argformat.core.functions import BUILTIN_FUNCTIONS, FunctionRegistry, Functions
from argformat.core.template_engine import CompiledTemplate, TemplateEngine

__all__ = [
    "BUILTIN_FUNCTIONS",
    "ArgumentKind",
    "CompiledTemplate",
    "ConfigError",
    "ErrorCode",
    "FatalFormatError",
    "FormatError",
    "FormatExecutionError",
    "FormatSyntaxError",
    "FunctionRegistry",
    "Functions",
    "Named",
    "Placeholder",
    "ResolutionContext",
    "SinkWriteError",
    "TemplateEngine",
    "classify_argument",
    "fallback_text",
    "resolve_arguments",
]
