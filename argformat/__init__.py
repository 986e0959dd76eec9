"""
argformat: string formatting with automatic, positional and named placeholders

Messages are Jinja2 templates with single-brace delimiters by default:

    >>> from argformat import format, Named
    >>> format("{p} is {p}", "sky", "blue")
    'sky is blue'
    >>> format("{p1} {p0}", "world", "hello")
    'hello world'
    >>> format("Hi {name}", Named(name="Ann"))
    'Hi Ann'
    >>> format("Unused:", 1, 2)
    'Unused: 1 2'

Public API:
- argformat.Formatter: configurable formatter
- argformat.format / format_writer / must_format: default-configured shortcuts
- argformat.Named: explicit named arguments
- argformat.core.errors: error taxonomy
- argformat.config: configuration schema and loader
"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("argformat")
except PackageNotFoundError:
    # Development checkout, not installed via pip
    __version__ = "0.1.0"

from argformat.config import (
    DEFAULT_LEFT_DELIMITER,
    DEFAULT_PLACEHOLDER,
    DEFAULT_RIGHT_DELIMITER,
    FormatterConfig,
    load_formatter_config,
)
from argformat.core.arguments import ArgumentKind, Named
from argformat.core.errors import (
    ConfigError,
    FatalFormatError,
    FormatError,
    FormatExecutionError,
    FormatSyntaxError,
    SinkWriteError,
)
from argformat.core.functions import BUILTIN_FUNCTIONS, Functions
from argformat.formatter import Formatter, format, format_writer, must_format  # noqa: A004

__all__ = [
    "BUILTIN_FUNCTIONS",
    "DEFAULT_LEFT_DELIMITER",
    "DEFAULT_PLACEHOLDER",
    "DEFAULT_RIGHT_DELIMITER",
    "ArgumentKind",
    "ConfigError",
    "FatalFormatError",
    "FormatError",
    "FormatExecutionError",
    "FormatSyntaxError",
    "Formatter",
    "FormatterConfig",
    "Functions",
    "Named",
    "SinkWriteError",
    "__version__",
    "format",
    "format_writer",
    "load_formatter_config",
    "must_format",
]
