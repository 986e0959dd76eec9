"""Tests for the error taxonomy."""

import pytest

from argformat import (
    FatalFormatError,
    FormatError,
    FormatExecutionError,
    FormatSyntaxError,
    SinkWriteError,
)
from argformat.core.errors import ERROR_HINTS, ErrorCode


class TestFormatError:
    """Test codes, hints and serialization."""

    @pytest.mark.parametrize(
        ("error_class", "code"),
        [
            (FormatSyntaxError, ErrorCode.ARGFORMAT_SYNTAX_ERROR),
            (FormatExecutionError, ErrorCode.ARGFORMAT_EXECUTION_ERROR),
            (SinkWriteError, ErrorCode.ARGFORMAT_SINK_ERROR),
        ],
    )
    def test_codes_and_default_hints(self, error_class: type[FormatError], code: str) -> None:
        error = error_class("{p", ValueError("bad"))

        assert isinstance(error, FormatError)
        assert error.code == code
        assert error.hint == ERROR_HINTS[code]

    def test_custom_hint(self) -> None:
        error = FormatExecutionError("{p}", hint="Pass more arguments")

        assert error.hint == "Pass more arguments"

    def test_message_contains_template_and_cause(self) -> None:
        error = FormatSyntaxError("{p", ValueError("unexpected end"))

        assert "unexpected end" in str(error)
        assert "Template: {p" in str(error)

    def test_long_template_truncated(self) -> None:
        template = "x" * 150
        error = FormatExecutionError(template, RuntimeError("boom"))

        assert "x" * 100 + "..." in str(error)
        assert "x" * 101 not in str(error)
        assert error.template == template

    def test_to_dict(self) -> None:
        error = FormatExecutionError("{missing}", KeyError("missing"))

        data = error.to_dict()

        assert data["error_code"] == ErrorCode.ARGFORMAT_EXECUTION_ERROR
        assert data["error_type"] == "KeyError"
        assert data["template"] == "{missing}"
        assert data["hint"] == error.hint
        assert "missing" in data["message"]

    def test_to_dict_without_cause(self) -> None:
        data = SinkWriteError("text").to_dict()

        assert data["message"] == SinkWriteError.summary
        assert "error_type" not in data


class TestFatalFormatError:
    """Test the must_format failure type."""

    def test_wraps_format_error(self) -> None:
        cause = FormatSyntaxError("{p", ValueError("bad"))
        error = FatalFormatError(cause)

        assert error.error is cause
        assert str(error).startswith("[ARGFORMAT_SYNTAX_ERROR]")

    def test_not_a_format_error(self) -> None:
        assert not issubclass(FatalFormatError, FormatError)
        assert issubclass(FatalFormatError, RuntimeError)
