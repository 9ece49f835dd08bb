# src/logging/handlers.py — v2
"""Size-based rotating file handler for the fncache log file."""

from __future__ import annotations

import re
from logging.handlers import RotatingFileHandler
from pathlib import Path

_SIZE_UNITS = {"": 1, "B": 1, "KB": 1024, "MB": 1024**2, "GB": 1024**3}
_SIZE_RE = re.compile(r"^(\d+)\s*([KMG]?B)?$", re.IGNORECASE)


def parse_size(size: str | int) -> int:
    """Convert '10MB', '512kb', '2048B' or a bare byte count into bytes."""
    if isinstance(size, int):
        if size <= 0:
            raise ValueError(f"Log rotation size must be positive, got {size}")
        return size
    match = _SIZE_RE.match(size.strip())
    if match is None:
        raise ValueError(f"Invalid size format: {size!r}. Use e.g. '10MB'.")
    count = int(match.group(1))
    if count == 0:
        raise ValueError(f"Log rotation size must be positive, got {size!r}")
    return count * _SIZE_UNITS[(match.group(2) or "").upper()]


def create_rotating_handler(
    log_file: str | Path,
    rotation: str | int = "10MB",
    retention: int = 30,
) -> RotatingFileHandler:
    """Open a RotatingFileHandler, creating the log directory if needed.

    ``retention`` is the number of rotated backups kept next to the file.
    """
    path = Path(log_file).expanduser()
    path.parent.mkdir(parents=True, exist_ok=True)
    return RotatingFileHandler(
        filename=str(path),
        maxBytes=parse_size(rotation),
        backupCount=retention,
        encoding="utf-8",
    )
