# src/logging/context.py — v2
"""Contextual logging support: attach the active call label and cache source
to log records.
"""

from __future__ import annotations

import contextvars
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any

# Context variables for structured logging, set per memoized call.
_label: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "label", default=None
)
_source: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "source", default=None
)


@dataclass
class LogContext:
    """Immutable snapshot of current logging context."""

    label: str | None = None
    source: str | None = None

    def as_dict(self) -> dict[str, Any]:
        """Return non-None fields as dict for JSON log injection."""
        return {k: v for k, v in self.__dict__.items() if v is not None}


def get_context() -> LogContext:
    """Snapshot current context variables."""
    return LogContext(label=_label.get(), source=_source.get())


def set_call_context(label: str, source: str | None = None) -> None:
    """Set the label (and optionally the cache source) of the active call."""
    _label.set(label)
    _source.set(source)


@contextmanager
def call_context(label: str, source: str | None = None) -> Iterator[None]:
    """Scope the call context to a block, restoring the previous one after."""
    label_token = _label.set(label)
    source_token = _source.set(source)
    try:
        yield
    finally:
        _source.reset(source_token)
        _label.reset(label_token)


def clear_context() -> None:
    """Reset all context variables."""
    _label.set(None)
    _source.set(None)
