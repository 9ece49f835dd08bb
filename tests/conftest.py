# tests/conftest.py — v2
"""Shared test fixtures for all unit and integration tests.

Provides fresh backends, an isolated recursion registry, call-counting
producers and a clean logging state per test.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Callable

import pytest

from fncache.cache.disk_backend import DiskBackend
from fncache.cache.memory_backend import MemoryBackend
from fncache.cache.registry import RecursionRegistry
from fncache.logging.context import clear_context


def _fib(n: int) -> int:
    if n < 2:
        return n
    return _fib(n - 1) + _fib(n - 2)


class CountingProducer:
    """Wraps a function and counts how often it actually runs."""

    def __init__(self, func: Callable[..., Any]) -> None:
        self.func = func
        self.calls = 0
        self.seen: list[tuple[Any, ...]] = []

    def __call__(self, *args: Any, **kwargs: Any) -> Any:
        self.calls += 1
        self.seen.append(args)
        return self.func(*args, **kwargs)


# === FIXTURES: Backends ===


@pytest.fixture
def memory_backend() -> MemoryBackend:
    """Empty in-memory backend."""
    return MemoryBackend()


@pytest.fixture
def disk_backend(tmp_path: Path) -> DiskBackend:
    """Disk backend rooted in a per-test temp directory."""
    return DiskBackend(root=tmp_path)


@pytest.fixture(params=["memory", "disk"])
def any_backend(request: pytest.FixtureRequest, tmp_path: Path):
    """Each test using this runs once per backend."""
    if request.param == "memory":
        return MemoryBackend()
    return DiskBackend(root=tmp_path)


@pytest.fixture
def registry() -> RecursionRegistry:
    """Isolated recursion registry (the process-wide one is never cleared)."""
    return RecursionRegistry()


# === FIXTURES: Producers ===


@pytest.fixture
def fib() -> Callable[[int], int]:
    """Plain recursive Fibonacci."""
    return _fib


@pytest.fixture
def counted() -> Callable[[Callable[..., Any]], CountingProducer]:
    """Factory wrapping a function in a CountingProducer."""
    return CountingProducer


# === Logging hygiene ===


@pytest.fixture(autouse=True)
def _reset_logging():
    """Undo setup_logging() and context changes made by a test."""
    clear_context()
    yield
    clear_context()
    root = logging.getLogger("fncache")
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()
    root.setLevel(logging.NOTSET)
