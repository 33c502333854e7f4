"""JSON log output for the workflow engine.

Workflow modules log a short event name as the message and put the
structured context under ``extra={"extra_payload": {...}}``; the formatter
flattens that context into the emitted JSON object.
"""

from __future__ import annotations

import json
import logging
import logging.config
from datetime import datetime, timezone
from typing import Any

PACKAGE_LOGGER = "paperflow.workflow"

_RESERVED_KEYS = frozenset({"timestamp", "level", "logger", "event"})


class JsonFormatter(logging.Formatter):
    """Render each record as one JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "event": record.getMessage(),
        }
        context = getattr(record, "extra_payload", None)
        if isinstance(context, dict):
            for key, value in context.items():
                entry[f"ctx_{key}" if key in _RESERVED_KEYS else key] = value
        if record.exc_info:
            entry["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False, default=str)


def build_logging_config(level: str = "INFO") -> dict[str, Any]:
    """Return a ``dictConfig`` mapping that routes the package through JSON on stderr."""

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {"json": {"()": JsonFormatter}},
        "handlers": {"stderr": {"class": "logging.StreamHandler", "formatter": "json"}},
        "loggers": {
            PACKAGE_LOGGER: {"handlers": ["stderr"], "level": level.upper(), "propagate": False},
        },
        "root": {"handlers": ["stderr"], "level": "WARNING"},
    }


def configure_logging(level: str | None = None) -> None:
    logging.config.dictConfig(build_logging_config(level or "INFO"))


__all__ = ["JsonFormatter", "PACKAGE_LOGGER", "build_logging_config", "configure_logging"]
