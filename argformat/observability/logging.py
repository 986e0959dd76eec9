"""Logging setup for the argformat command line.

The library itself only emits records through ``logging.getLogger(__name__)``
and never installs handlers. ``configure_logging`` is for applications such as
the ``argformat`` CLI.
"""

import json
import logging
from datetime import UTC, datetime
from typing import Any

TEXT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class JSONFormatter(logging.Formatter):
    """One JSON object per record, ELK/Datadog style."""

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": datetime.now(UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data)


def configure_logging(level: str = "WARNING", json_output: bool = False) -> None:
    """Configure root logging.

    Args:
        level: Level name (DEBUG, INFO, WARNING, ERROR)
        json_output: Emit JSON lines instead of plain text
    """
    handler = logging.StreamHandler()
    handler.setFormatter(JSONFormatter() if json_output else logging.Formatter(TEXT_FORMAT))

    logging.basicConfig(level=getattr(logging, level), handlers=[handler], force=True)
