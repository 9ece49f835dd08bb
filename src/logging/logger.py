# src/logging/logger.py — v3
"""Logger factory with JSON and text formatters."""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any

from fncache.logging.context import get_context

ROOT_LOGGER = "fncache"
EVENT_KEY = "event"


def event_data(record: logging.LogRecord) -> dict[str, Any]:
    """Return the structured event payload attached to a record, or {}."""
    data = getattr(record, "data", None)
    return data if isinstance(data, dict) else {}


class JsonFormatter(logging.Formatter):
    """One JSON object per record.

    Cache events are keyed by their ``event`` name at the top level so log
    consumers can filter on it; the full payload stays under ``data``.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        data = event_data(record)
        if EVENT_KEY in data:
            log_entry[EVENT_KEY] = data[EVENT_KEY]

        context_dict = get_context().as_dict()
        if context_dict:
            log_entry["context"] = context_dict
        if data:
            log_entry["data"] = data

        if record.exc_info and record.exc_info[1] is not None:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry, default=str)


class TextFormatter(logging.Formatter):
    """Single-line formatter for development; cache events show as <event>."""

    def format(self, record: logging.LogRecord) -> str:
        ctx = get_context()
        parts = [
            datetime.fromtimestamp(record.created, timezone.utc).strftime("%Y-%m-%d %H:%M:%S"),
            f"[{record.levelname:8s}]",
            record.name,
        ]
        if ctx.label:
            parts.append(f"[{ctx.label}]")
        if ctx.source:
            parts.append(f"({ctx.source})")
        event = event_data(record).get(EVENT_KEY)
        if event:
            parts.append(f"<{event}>")
        parts.append(f"- {record.getMessage()}")
        text = " ".join(parts)
        if record.exc_info and record.exc_info[1] is not None:
            text += "\n" + self.formatException(record.exc_info)
        return text


def get_logger(name: str) -> logging.Logger:
    """Get a named logger. Configuration is applied by setup_logging()."""
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")


FORMATTERS: dict[str, type[logging.Formatter]] = {
    "json": JsonFormatter,
    "text": TextFormatter,
}


def setup_logging(
    level: str = "INFO",
    log_format: str = "json",
    log_file: str | None = None,
    rotation: str = "10MB",
    retention: int = 5,
) -> None:
    """Configure the root fncache logger.

    Safe to call repeatedly: handlers from a previous call are closed and
    replaced.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR).
        log_format: "json" or "text".
        log_file: Optional rotating log file in addition to stderr.
        rotation: Max file size before rotation (e.g. "10MB").
        retention: Number of rotated files to keep.

    Raises:
        ValueError: Unknown level or format.
    """
    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        raise ValueError(f"Unknown log level: {level!r}")
    try:
        formatter = FORMATTERS[log_format]()
    except KeyError:
        raise ValueError(
            f"Unknown log format: {log_format!r}. Expected one of {sorted(FORMATTERS)}"
        ) from None

    root_logger = logging.getLogger(ROOT_LOGGER)
    root_logger.setLevel(numeric_level)
    for old in list(root_logger.handlers):
        root_logger.removeHandler(old)
        old.close()

    # stdout is left to command output.
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_file:
        from fncache.logging.handlers import create_rotating_handler

        file_handler = create_rotating_handler(
            log_file, rotation=rotation, retention=retention
        )
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)
