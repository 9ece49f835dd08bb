# src/cache/memory_backend.py — v1
"""In-process memoization backend.

Results live in a dict keyed by ``(label, fingerprint)`` for as long as the
backend instance does. Each value is boxed together with its concrete type;
on a hit the box is checked against the producer's expected return type and
a mismatch raises TypeMismatchError instead of handing back a value of the
wrong type. The table only grows.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any, TypeVar

from fncache.cache.base_backend import BaseCacheBackend, check_type, return_hint
from fncache.logging.context import call_context
from fncache.logging.events import CacheEventLogger

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class _Boxed:
    value: Any
    stored_type: type


class MemoryBackend(BaseCacheBackend):
    """Volatile key -> value store scoped to the backend instance."""

    source = "memory"

    def __init__(
        self,
        events: CacheEventLogger | None = None,
        default_label: str = "anonymous",
    ) -> None:
        super().__init__(events=events, default_label=default_label)
        self._data: dict[tuple[str, int], _Boxed] = {}

    def invoke(
        self,
        label: str,
        key: int,
        producer: Callable[..., T],
        args: Sequence[Any] = (),
        kwargs: Mapping[str, Any] | None = None,
        returns: Any = None,
    ) -> T:
        identifier = f"{label}-{key}"
        with call_context(label, self.source):
            boxed = self._data.get((label, key))
            if boxed is not None:
                check_type(boxed.stored_type, return_hint(producer, returns), identifier)
                self._record_hit(identifier)
                return boxed.value

            result = producer(*args, **(kwargs or {}))
            self._record_miss(identifier)
            self._data[(label, key)] = _Boxed(result, type(result))
            logger.debug("Stored %s (%s)", identifier, type(result).__qualname__)
            return result

    def __contains__(self, entry: object) -> bool:
        return entry in self._data

    def __len__(self) -> int:
        return len(self._data)
