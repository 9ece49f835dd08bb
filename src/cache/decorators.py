# src/cache/decorators.py — v2
"""Call wrappers: memoization and begin/end lifecycle logging.

Both wrappers keep the wrapped function's call signature and metadata, and
compose by wrapping a wrapper::

    fib2 = make_memoized(cache, "fib2", lambda i: fib(i + 2))
    fib3 = log_start_stop(fib2)

``make_memoized`` and the ``memoize`` decorator also register the function in
the recursion registry, so its body may recurse through ``memoized(...)``.
"""

from __future__ import annotations

import functools
from collections.abc import Callable
from typing import Any, Generic, TypeVar

from fncache.cache.base_backend import BaseCacheBackend
from fncache.cache.fingerprint import fingerprint
from fncache.cache.registry import RecursionRegistry, default_registry
from fncache.logging.context import call_context
from fncache.logging.events import CacheEventLogger

T = TypeVar("T")


class Memoized(Generic[T]):
    """Callable that routes every call through a backend."""

    def __init__(
        self,
        backend: BaseCacheBackend,
        label: str,
        func: Callable[..., T],
        returns: Any = None,
    ) -> None:
        # Copies the wrapped callable's __dict__; set our attributes after it.
        functools.update_wrapper(self, func)
        self.backend = backend
        self.label = label
        self.func = func
        self.returns = returns

    def __call__(self, *args: Any, **kwargs: Any) -> T:
        key = fingerprint(self.label, args, kwargs)
        return self.backend.invoke(
            self.label, key, self.func, args, kwargs, returns=self.returns
        )

    def __repr__(self) -> str:
        return (
            f"<Memoized {self.label!r} of {self.func!r} "
            f"via {type(self.backend).__name__}>"
        )


class LoggedCall(Generic[T]):
    """Callable that logs BEGIN/END around each call of ``func``."""

    def __init__(
        self,
        label: str,
        func: Callable[..., T],
        events: CacheEventLogger | None = None,
    ) -> None:
        functools.update_wrapper(self, func)
        self.label = label
        self.func = func
        self.events = events or CacheEventLogger()

    def __call__(self, *args: Any, **kwargs: Any) -> T:
        with call_context(self.label):
            self.events.begin(self.label)
            try:
                return self.func(*args, **kwargs)
            finally:
                self.events.end(self.label)

    def __repr__(self) -> str:
        return f"<LoggedCall {self.label!r} of {self.func!r}>"


def make_memoized(
    backend: BaseCacheBackend,
    label: str,
    func: Callable[..., T],
    registry: RecursionRegistry | None = None,
    returns: Any = None,
) -> Memoized[T]:
    """Wrap ``func`` in a Memoized and register it for recursive calls.

    Registration follows the registry's first-wins rule: wrapping the same
    function again with another backend leaves the registry untouched.
    """
    if registry is None:
        registry = default_registry
    registry.register(func, label, backend)
    return Memoized(backend, label, func, returns=returns)


def memoize(
    backend: BaseCacheBackend,
    label: str | None = None,
    *,
    registry: RecursionRegistry | None = None,
    returns: Any = None,
) -> Callable[[Callable[..., T]], Memoized[T]]:
    """Decorator form of make_memoized; the label defaults to ``__name__``."""

    def decorator(func: Callable[..., T]) -> Memoized[T]:
        name = label or getattr(func, "__name__", None) or backend.default_label
        return make_memoized(backend, name, func, registry=registry, returns=returns)

    return decorator


def log_start_stop(
    func: Callable[..., T],
    label: str | None = None,
    events: CacheEventLogger | None = None,
) -> LoggedCall[T]:
    """Wrap ``func`` so each call is logged as BEGIN/END under ``label``."""
    name = label or getattr(func, "__name__", None) or repr(func)
    return LoggedCall(name, func, events=events)
