# src/cache/base_backend.py — v1
"""Cache facade: the single ``invoke`` contract shared by all backends.

A backend implements ``invoke(label, key, producer, args, kwargs, returns)``:
return the value stored under ``(label, key)`` or call the producer, store its
result and return it. On top of that contract this class offers three entry
points mirroring the three call shapes:

    cache(producer, *args)              # label "anonymous"
    cache(label, producer, *args)       # key computed by the fingerprint engine
    cache(label, key, producer, *args)  # key asserted by the caller

The named forms ``call`` and ``call_with_key`` spell out the last two.

Backends hold unsynchronized state and must not be shared between threads.
There is no eviction, expiry or invalidation.
"""

from __future__ import annotations

import types
import typing
from abc import ABC, abstractmethod
from collections.abc import Callable, Mapping, Sequence
from typing import Any, TypeVar

from fncache.cache.errors import TypeMismatchError
from fncache.cache.fingerprint import fingerprint
from fncache.cache.models import CacheStats
from fncache.logging.events import CacheEventLogger

T = TypeVar("T")

ANONYMOUS_LABEL = "anonymous"


class BaseCacheBackend(ABC):
    """Unified interface for memoization backends."""

    source: str = ""

    def __init__(
        self,
        events: CacheEventLogger | None = None,
        default_label: str = ANONYMOUS_LABEL,
    ) -> None:
        self.events = events or CacheEventLogger()
        self.default_label = default_label
        self.stats = CacheStats()

    @abstractmethod
    def invoke(
        self,
        label: str,
        key: int,
        producer: Callable[..., T],
        args: Sequence[Any] = (),
        kwargs: Mapping[str, Any] | None = None,
        returns: Any = None,
    ) -> T:
        """Return the cached result for ``(label, key)`` or compute and store it.

        Args:
            label: Call label.
            key: Call fingerprint (engine-computed or caller-asserted).
            producer: Function called with ``args``/``kwargs`` on a miss.
            args: Positional arguments for the producer.
            kwargs: Keyword arguments for the producer.
            returns: Expected return type; defaults to the producer's
                return annotation.
        """

    def call(self, label: str, producer: Callable[..., T], *args: Any, **kwargs: Any) -> T:
        """Memoized call keyed by the fingerprint of label and arguments."""
        key = fingerprint(label, args, kwargs)
        return self.invoke(label, key, producer, args, kwargs)

    def call_with_key(
        self,
        label: str,
        key: int,
        producer: Callable[..., T],
        *args: Any,
        **kwargs: Any,
    ) -> T:
        """Memoized call under a caller-supplied key.

        Use this when arguments have no stable hash. The key is not checked
        for uniqueness: reusing it for a different call returns the wrong
        cached result.
        """
        if isinstance(key, bool) or not isinstance(key, int):
            raise TypeError(f"key must be an int, got {type(key).__name__}")
        return self.invoke(label, key, producer, args, kwargs)

    def __call__(self, *args: Any, **kwargs: Any) -> Any:
        if not args:
            raise TypeError("cache call requires at least a producer")
        first = args[0]
        if callable(first):
            return self.call(self.default_label, first, *args[1:], **kwargs)
        if not isinstance(first, str):
            raise TypeError(
                f"expected a producer or a str label, got {type(first).__name__}"
            )
        if len(args) >= 2 and callable(args[1]):
            return self.call(first, args[1], *args[2:], **kwargs)
        if len(args) >= 3 and callable(args[2]):
            return self.call_with_key(first, args[1], args[2], *args[3:], **kwargs)
        raise TypeError(
            "expected (producer, ...), (label, producer, ...) "
            "or (label, key, producer, ...)"
        )

    def fingerprint(self, label: str, *args: Any, **kwargs: Any) -> int:
        """Key that ``call(label, producer, *args, **kwargs)`` would use."""
        return fingerprint(label, args, kwargs)

    # --- Helpers for subclasses ---

    def _record_hit(self, identifier: str) -> None:
        self.stats.hits += 1
        self.events.cache_hit(self.source, identifier)

    def _record_miss(self, identifier: str) -> None:
        self.stats.misses += 1
        self.events.cache_miss(self.source, identifier)


def return_hint(producer: Callable[..., Any], returns: Any = None) -> Any:
    """Resolve the expected return type of a producer.

    An explicit ``returns`` wins; otherwise the producer's return annotation
    is used. Returns None when nothing can be resolved.
    """
    if returns is not None:
        return returns
    try:
        hints = typing.get_type_hints(producer)
    except (TypeError, NameError, AttributeError):
        # builtins, partials and annotations naming undefined types
        return None
    return hints.get("return")


# int is acceptable where float or complex is annotated.
_NUMERIC_TOWER: dict[type, tuple[type, ...]] = {
    float: (int, float),
    complex: (int, float, complex),
}


def runtime_types(hint: Any) -> tuple[type, ...] | None:
    """Classes usable with issubclass() for a type hint, if there are any."""
    if hint is None or hint is Any:
        return None
    origin = typing.get_origin(hint) or hint
    if origin is typing.Union or origin is types.UnionType:
        members = [runtime_types(arg) for arg in typing.get_args(hint)]
        if any(m is None for m in members):
            return None
        return tuple(cls for m in members for cls in m)  # type: ignore[union-attr]
    if not isinstance(origin, type):
        return None
    return _NUMERIC_TOWER.get(origin, (origin,))


def check_type(value_type: type, hint: Any, identifier: str) -> None:
    """Raise TypeMismatchError if ``value_type`` does not satisfy ``hint``."""
    expected = runtime_types(hint)
    if expected is None or issubclass(value_type, expected):
        return
    raise TypeMismatchError(
        f"Cached value for {identifier} is {value_type.__qualname__}, "
        f"expected {typing.get_origin(hint) or hint!r}"
    )
