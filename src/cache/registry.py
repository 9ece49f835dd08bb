# src/cache/registry.py — v1
"""Recursion registry: memoized self-calls without passing the cache around.

A recursive function cannot capture "its" cache in its own signature. Once
registered, its body can recurse through ``memoized(func, *args)`` and each
step goes through the backend the function was registered with.

Rules:
- The first registration of a function wins; later registrations of the same
  function (even with another label or backend) are ignored.
- Entries are never removed. The process-wide ``default_registry`` therefore
  keeps every registered backend alive for the life of the process; build a
  separate RecursionRegistry where that is not wanted (tests do).
- Calling an unregistered function raises NotRegisteredError; there is no
  uncached fallback.
- The table is not synchronized; do not register or call from several
  threads at once.
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, TypeVar

from fncache.cache.base_backend import BaseCacheBackend
from fncache.cache.errors import NotRegisteredError
from fncache.cache.fingerprint import fingerprint

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class RegisteredFunction:
    """Label and backend a function was first registered with."""

    label: str
    backend: BaseCacheBackend


class RecursionRegistry:
    """Table of function -> (label, backend) registrations."""

    def __init__(self) -> None:
        self._entries: dict[Callable[..., Any], RegisteredFunction] = {}

    def register(
        self, function: Callable[..., Any], label: str, backend: BaseCacheBackend
    ) -> bool:
        """Register ``function``; return False if it was already registered."""
        if function in self._entries:
            return False
        logger.info("registering %s in registry", label)
        self._entries[function] = RegisteredFunction(label=label, backend=backend)
        return True

    def get(self, function: Callable[..., Any]) -> RegisteredFunction | None:
        """Return the registration of ``function``, or None."""
        target = self._resolve(function)
        return None if target is None else self._entries[target]

    def lookup(self, function: Callable[..., Any]) -> RegisteredFunction:
        """Return the registration of ``function``, raise if missing."""
        entry = self.get(function)
        if entry is None:
            raise NotRegisteredError(
                f"{_describe(function)} is not registered with a cache"
            )
        return entry

    def call_memoized(self, function: Callable[..., T], *args: Any, **kwargs: Any) -> T:
        """Call ``function`` through the backend it was registered with.

        Decorator layers (anything exposing ``__wrapped__``) are peeled off
        until a registered function is found; that function is the producer
        on a miss.
        """
        target = self._resolve(function)
        if target is None:
            raise NotRegisteredError(
                f"{_describe(function)} is not registered with a cache"
            )
        entry = self._entries[target]
        key = fingerprint(entry.label, args, kwargs)
        return entry.backend.invoke(entry.label, key, target, args, kwargs)

    def _resolve(self, function: Callable[..., Any]) -> Callable[..., Any] | None:
        target = inspect.unwrap(function, stop=lambda f: f in self._entries)
        return target if target in self._entries else None

    def __contains__(self, function: object) -> bool:
        return callable(function) and self._resolve(function) is not None

    def __len__(self) -> int:
        return len(self._entries)


def _describe(function: Callable[..., Any]) -> str:
    return getattr(function, "__qualname__", None) or repr(function)


default_registry = RecursionRegistry()


def register(function: Callable[..., Any], label: str, backend: BaseCacheBackend) -> bool:
    """Register ``function`` in the process-wide registry."""
    return default_registry.register(function, label, backend)


def memoized(function: Callable[..., T], *args: Any, **kwargs: Any) -> T:
    """Memoized call of ``function`` through the process-wide registry."""
    return default_registry.call_memoized(function, *args, **kwargs)
