"""Formatter configuration schema using Pydantic v2.

Example:
    from argformat.config.schema import FormatterConfig

    config = FormatterConfig(left_delimiter="<<", right_delimiter=">>")
    formatter = Formatter.from_config(config)
"""

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_PLACEHOLDER = "p"
DEFAULT_LEFT_DELIMITER = "{"
DEFAULT_RIGHT_DELIMITER = "}"


class FormatterConfig(BaseModel):
    """Placeholder prefix and delimiters of a formatter.

    Any string is accepted, including empty ones.

    Attributes:
        placeholder: Prefix of automatic and positional placeholders
        left_delimiter: Left expression delimiter
        right_delimiter: Right expression delimiter
    """

    model_config = ConfigDict(extra="forbid")

    placeholder: str = Field(DEFAULT_PLACEHOLDER, description="Placeholder prefix")
    left_delimiter: str = Field(DEFAULT_LEFT_DELIMITER, description="Left delimiter")
    right_delimiter: str = Field(DEFAULT_RIGHT_DELIMITER, description="Right delimiter")
