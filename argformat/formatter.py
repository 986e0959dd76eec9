"""Formatter: renders messages with automatic, positional and named placeholders.

Example:
    from argformat import Formatter, Named

    formatter = Formatter()
    formatter.format("{p} + {p} = {p}", 1, 2, 3)       # "1 + 2 = 3"
    formatter.format("{p1} {p0}", "world", "hello")      # "hello world"
    formatter.format("Hi {name}", Named(name="Ann"))     # "Hi Ann"
    formatter.format("Total:", 42)                       # "Total: 42"

    formatter.set_delimiters("<<", ">>").format("<<p>>", "x")  # "x"

A Formatter holds mutable configuration and does no locking. Share one across
threads only if nothing mutates it, or give each thread its own.
"""

import io
import logging
from collections.abc import Callable, Iterable, Mapping
from typing import Any

from argformat.config.schema import (
    DEFAULT_LEFT_DELIMITER,
    DEFAULT_PLACEHOLDER,
    DEFAULT_RIGHT_DELIMITER,
    FormatterConfig,
)
from argformat.core.arguments import resolve_arguments
from argformat.core.errors import FatalFormatError, FormatError
from argformat.core.fallback import fallback_text
from argformat.core.functions import (
    BUILTIN_FUNCTIONS,
    FunctionRegistry,
    Functions,
    merge_function_tables,
)
from argformat.core.template_engine import TemplateEngine, TextSink, write_output

logger = logging.getLogger(__name__)

_default_engine = TemplateEngine()


class Formatter:
    """Formats strings using replacement fields surrounded by delimiters.

    Resolution rules for the arguments of one call:

    - ``{p}`` returns the next argument each time it is used
    - ``{p0}``, ``{p1}``, ... return the argument at that index
    - every key of a str-keyed mapping argument (``Named``) becomes a name
    - the last dataclass, pydantic model or named tuple argument becomes the
      current object: its fields are referenced by bare name (``{title}``)
    - arguments never read by the template are appended, space separated

    When names collide, user functions win over placeholders, placeholders win
    over current object fields, and fields win over built-in helpers.
    """

    def __init__(self, engine: TemplateEngine | None = None) -> None:
        self._engine = engine or _default_engine
        self._placeholder = DEFAULT_PLACEHOLDER
        self._left_delimiter = DEFAULT_LEFT_DELIMITER
        self._right_delimiter = DEFAULT_RIGHT_DELIMITER
        self._functions = FunctionRegistry()

    @classmethod
    def from_config(
        cls, config: FormatterConfig, engine: TemplateEngine | None = None
    ) -> "Formatter":
        """Create a formatter from a configuration object."""
        formatter = cls(engine)
        formatter.set_placeholder(config.placeholder)
        formatter.set_delimiters(config.left_delimiter, config.right_delimiter)
        return formatter

    def config(self) -> FormatterConfig:
        """Snapshot of the placeholder prefix and delimiters."""
        return FormatterConfig(
            placeholder=self._placeholder,
            left_delimiter=self._left_delimiter,
            right_delimiter=self._right_delimiter,
        )

    # =========================================================================
    # Formatting
    # =========================================================================

    def format(self, message: str, *arguments: Any) -> str:
        """Format a message.

        Args:
            message: Template text
            *arguments: Values for the placeholders

        Returns:
            Formatted string

        Raises:
            FormatSyntaxError: If the message cannot be parsed
            FormatExecutionError: If rendering fails
            SinkWriteError: If the engine fails to write the rendered text
        """
        buffer = io.StringIO()
        self.format_writer(buffer, message, *arguments)
        return buffer.getvalue()

    def must_format(self, message: str, *arguments: Any) -> str:
        """Like format, but a failure is a programming error.

        Intended for templates fixed at import or startup time, such as module
        level constants, whose well-formedness is an invariant of the code.

        Raises:
            FatalFormatError: If the message cannot be formatted
        """
        try:
            return self.format(message, *arguments)
        except FormatError as e:
            logger.critical("Cannot format %r: %s", message[:50], e.original_error or e)
            raise FatalFormatError(e) from e

    def format_writer(self, sink: TextSink, message: str, *arguments: Any) -> None:
        """Format a message directly into a text sink.

        Output is written as it is rendered. If rendering fails midway, the
        text already written stays in the sink.

        Args:
            sink: Object with a ``write(str)`` method
            message: Template text
            *arguments: Values for the placeholders

        Raises:
            FormatSyntaxError: If the message cannot be parsed
            FormatExecutionError: If rendering fails
            SinkWriteError: If the sink refuses a write
        """
        compiled = self._engine.parse(message, self._left_delimiter, self._right_delimiter)

        ctx = resolve_arguments(arguments, self._placeholder)
        functions = merge_function_tables(ctx.placeholders, self._functions.as_dict())

        self._engine.execute(
            compiled, functions, ctx.current_object, sink, helpers=BUILTIN_FUNCTIONS
        )

        suffix = fallback_text(ctx)
        if suffix:
            logger.debug("Appending unconsumed arguments: %s", suffix[:50])
        write_output(sink, suffix, message)

    def reset(self) -> "Formatter":
        """Reset placeholder, delimiters and functions to their defaults."""
        self._placeholder = DEFAULT_PLACEHOLDER
        self._left_delimiter = DEFAULT_LEFT_DELIMITER
        self._right_delimiter = DEFAULT_RIGHT_DELIMITER
        self._functions = FunctionRegistry()
        return self

    # =========================================================================
    # Functions
    # =========================================================================

    def set_functions(self, functions: Mapping[str, Callable[..., Any]]) -> "Formatter":
        """Replace all template functions."""
        self._functions.replace(functions)
        return self

    def get_function(self, name: str) -> Callable[..., Any] | None:
        """Get a template function, or None if not registered."""
        return self._functions.get(name)

    def get_functions(self) -> Functions:
        """Get a copy of the template functions."""
        return self._functions.as_dict()

    def add_function(self, name: str, function: Callable[..., Any]) -> "Formatter":
        """Add a template function, replacing one with the same name."""
        self._functions.add(name, function)
        return self

    def add_functions(self, functions: Mapping[str, Callable[..., Any]]) -> "Formatter":
        """Add template functions."""
        self._functions.add_many(functions)
        return self

    def remove_function(self, name: str) -> "Formatter":
        """Remove a template function. Unknown names are ignored."""
        self._functions.remove(name)
        return self

    def remove_functions(self, names: Iterable[str]) -> "Formatter":
        """Remove template functions. Unknown names are ignored."""
        self._functions.remove_many(names)
        return self

    def reset_functions(self) -> "Formatter":
        """Remove all template functions."""
        self._functions.reset()
        return self

    # =========================================================================
    # Placeholder
    # =========================================================================

    def set_placeholder(self, placeholder: str) -> "Formatter":
        """Set the prefix of automatic and positional placeholders. Default is p."""
        self._placeholder = placeholder
        return self

    def get_placeholder(self) -> str:
        return self._placeholder

    def reset_placeholder(self) -> "Formatter":
        self._placeholder = DEFAULT_PLACEHOLDER
        return self

    # =========================================================================
    # Delimiters
    # =========================================================================

    def set_delimiters(self, left: str, right: str) -> "Formatter":
        """Set both delimiters. Default is { and }."""
        return self.set_left_delimiter(left).set_right_delimiter(right)

    def set_left_delimiter(self, delimiter: str) -> "Formatter":
        self._left_delimiter = delimiter
        return self

    def set_right_delimiter(self, delimiter: str) -> "Formatter":
        self._right_delimiter = delimiter
        return self

    def get_delimiters(self) -> tuple[str, str]:
        """Get the (left, right) delimiters."""
        return self.get_left_delimiter(), self.get_right_delimiter()

    def get_left_delimiter(self) -> str:
        return self._left_delimiter

    def get_right_delimiter(self) -> str:
        return self._right_delimiter

    def reset_delimiters(self) -> "Formatter":
        return self.reset_left_delimiter().reset_right_delimiter()

    def reset_left_delimiter(self) -> "Formatter":
        self._left_delimiter = DEFAULT_LEFT_DELIMITER
        return self

    def reset_right_delimiter(self) -> "Formatter":
        self._right_delimiter = DEFAULT_RIGHT_DELIMITER
        return self


# =============================================================================
# Package-level conveniences: a fresh default Formatter per call
# =============================================================================


def format(message: str, *arguments: Any) -> str:  # noqa: A001
    """Format a message with a default formatter."""
    return Formatter().format(message, *arguments)


def must_format(message: str, *arguments: Any) -> str:
    """Like format, but raises FatalFormatError on failure."""
    return Formatter().must_format(message, *arguments)


def format_writer(sink: TextSink, message: str, *arguments: Any) -> None:
    """Format a message into a text sink with a default formatter."""
    Formatter().format_writer(sink, message, *arguments)
