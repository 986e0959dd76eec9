"""Error taxonomy for argformat.

Every failure surfaced by ``Formatter.format`` and ``Formatter.format_writer``
is a ``FormatError`` carrying a stable error code, the offending template, the
underlying exception and an actionable hint.

Example:
    from argformat import Formatter
    from argformat.core.errors import FormatError

    try:
        Formatter().format("{p", "value")
    except FormatError as e:
        print(e.code)  # ARGFORMAT_SYNTAX_ERROR
        print(e.hint)  # Check that every left delimiter has a matching ...
"""

from typing import Any


class ErrorCode:
    """Stable error codes for argformat errors."""

    # Template could not be compiled (unbalanced delimiters, unknown construct)
    ARGFORMAT_SYNTAX_ERROR = "ARGFORMAT_SYNTAX_ERROR"

    # Template failed while rendering (undefined name, function raised)
    ARGFORMAT_EXECUTION_ERROR = "ARGFORMAT_EXECUTION_ERROR"

    # Output sink refused a write
    ARGFORMAT_SINK_ERROR = "ARGFORMAT_SINK_ERROR"

    # Formatter configuration could not be loaded or validated
    ARGFORMAT_CONFIG_ERROR = "ARGFORMAT_CONFIG_ERROR"


ERROR_HINTS = {
    ErrorCode.ARGFORMAT_SYNTAX_ERROR: (
        "Check that every left delimiter has a matching right delimiter and that "
        "block tags are closed."
    ),
    ErrorCode.ARGFORMAT_EXECUTION_ERROR: (
        "Check that every referenced placeholder, function and field exists for the "
        "arguments passed, and that registered functions do not raise."
    ),
    ErrorCode.ARGFORMAT_SINK_ERROR: (
        "The output sink refused a write. Make sure the stream is open and writable."
    ),
    ErrorCode.ARGFORMAT_CONFIG_ERROR: (
        "Check the formatter configuration file and ARGFORMAT_FORMATTER_* environment "
        "variables."
    ),
}

# Templates longer than this are truncated in error messages
_TEMPLATE_DISPLAY_LIMIT = 100


def _display_template(template: str) -> str:
    template_display = template[:_TEMPLATE_DISPLAY_LIMIT]
    if len(template) > _TEMPLATE_DISPLAY_LIMIT:
        template_display += "..."
    return template_display


class FormatError(Exception):
    """Base class for all formatting failures.

    Attributes:
        code: Stable error code (ARGFORMAT_*)
        template: The template string that failed
        original_error: The underlying exception, if any
        hint: Actionable hint for resolving the error
    """

    code = ErrorCode.ARGFORMAT_EXECUTION_ERROR
    summary = "Failed to format template"

    def __init__(
        self,
        template: str,
        error: Exception | None = None,
        hint: str | None = None,
    ) -> None:
        """Initialize format error.

        Args:
            template: Template string that failed
            error: Original exception
            hint: Optional custom hint (overrides the default for the code)
        """
        self.template = template
        self.original_error = error
        self.hint = hint or ERROR_HINTS.get(
            self.code, "Check the error message for more information."
        )

        message = f"{self.summary}: {error}" if error is not None else self.summary
        super().__init__(f"{message}\nTemplate: {_display_template(template)}")

    def to_dict(self) -> dict[str, Any]:
        """Convert error to a dictionary.

        Returns:
            Dictionary with error information
        """
        result = {
            "error_code": self.code,
            "message": str(self.original_error) if self.original_error else self.summary,
            "hint": self.hint,
            "template": _display_template(self.template),
        }

        if self.original_error is not None:
            result["error_type"] = type(self.original_error).__name__

        return result


class FormatSyntaxError(FormatError):
    """Raised when a template cannot be compiled."""

    code = ErrorCode.ARGFORMAT_SYNTAX_ERROR
    summary = "Failed to parse template"


class FormatExecutionError(FormatError):
    """Raised when a compiled template fails while rendering."""

    code = ErrorCode.ARGFORMAT_EXECUTION_ERROR
    summary = "Failed to render template"


class SinkWriteError(FormatError):
    """Raised when the output sink refuses a write."""

    code = ErrorCode.ARGFORMAT_SINK_ERROR
    summary = "Failed to write formatted output"


class ConfigError(Exception):
    """Raised when formatter configuration cannot be loaded.

    Attributes:
        code: Always ARGFORMAT_CONFIG_ERROR
        source: Where the configuration came from (file path or "environment")
    """

    code = ErrorCode.ARGFORMAT_CONFIG_ERROR

    def __init__(self, message: str, source: str | None = None) -> None:
        self.source = source
        self.hint = ERROR_HINTS[self.code]
        if source:
            message = f"{message} (source: {source})"
        super().__init__(message)


class FatalFormatError(RuntimeError):
    """Raised by ``must_format`` when a template that must format does not.

    Not a ``FormatError``: handlers for one do not catch it.
    """

    def __init__(self, error: FormatError) -> None:
        self.error = error
        super().__init__(f"[{error.code}] {error}")
