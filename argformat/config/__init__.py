"""Formatter configuration: schema, defaults and loader."""

from argformat.config.loader import load_formatter_config
from argformat.config.schema import (
    DEFAULT_LEFT_DELIMITER,
    DEFAULT_PLACEHOLDER,
    DEFAULT_RIGHT_DELIMITER,
    FormatterConfig,
)

__all__ = [
    "DEFAULT_LEFT_DELIMITER",
    "DEFAULT_PLACEHOLDER",
    "DEFAULT_RIGHT_DELIMITER",
    "FormatterConfig",
    "load_formatter_config",
]
