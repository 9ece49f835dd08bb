# src/logging/events.py — v1
"""Cache event capability consumed by backends and decorators.

Four events exist: ``cache_hit`` and ``cache_miss`` (emitted by backends,
tagged with the source "memory" or "disk" and an identifier), and
``begin``/``end`` (emitted by the lifecycle-logging wrapper). Each is one
INFO record with a structured ``data`` payload that JsonFormatter renders.
"""

from __future__ import annotations

import logging

from fncache.logging.logger import get_logger


class CacheEventLogger:
    """Emits cache lifecycle events to a stdlib logger."""

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self._logger = logger or get_logger("events")

    @property
    def logger(self) -> logging.Logger:
        return self._logger

    def cache_hit(self, source: str, identifier: str) -> None:
        self._emit("cache_hit", "Cached access from %s %s", source, identifier)

    def cache_miss(self, source: str, identifier: str) -> None:
        self._emit("cache_miss", "Non-cached access, %s %s", source, identifier)

    def begin(self, label: str) -> None:
        self._logger.info(
            "BEGIN %s", label, extra={"data": {"event": "begin", "label": label}}
        )

    def end(self, label: str) -> None:
        self._logger.info(
            "END %s", label, extra={"data": {"event": "end", "label": label}}
        )

    def _emit(self, event: str, msg: str, source: str, identifier: str) -> None:
        self._logger.info(
            msg,
            source,
            identifier,
            extra={"data": {"event": event, "source": source, "identifier": identifier}},
        )
