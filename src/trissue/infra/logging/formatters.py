from __future__ import annotations

import json
import logging

from pythonjsonlogger.core import RESERVED_ATTRS
from pythonjsonlogger.json import JsonFormatter


def _extra_fields(record: logging.LogRecord) -> dict[str, object]:
    """Return the fields passed through logging ``extra``."""
    return {
        key: value
        for key, value in record.__dict__.items()
        if key not in RESERVED_ATTRS and not key.startswith("_")
    }


class JSONFormatter(JsonFormatter):
    """JSON formatter using python-json-logger.

    Formats log records as JSON with support for structured data via extra fields.
    """

    def add_fields(self, log_record: dict, record: logging.LogRecord, message_dict: dict) -> None:
        """Add custom fields to the log record.

        Args:
            log_record: Output dictionary
            record: Python logging record
            message_dict: Message dictionary from format()
        """
        super().add_fields(log_record, record, message_dict)

        # Always include these fields
        log_record["level"] = record.levelname
        log_record["logger"] = record.name
        log_record["message"] = record.getMessage()


class HumanReadableFormatter(logging.Formatter):
    """Human-readable formatter for console output.

    Extra fields are appended as ``key=value`` pairs.
    """

    def __init__(self) -> None:
        super().__init__(
            fmt="%(asctime)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        fields = _extra_fields(record)
        if not fields:
            return line
        pairs = " ".join(
            f"{key}={json.dumps(value, ensure_ascii=False, default=str)}"
            for key, value in fields.items()
        )
        return f"{line} {pairs}"
