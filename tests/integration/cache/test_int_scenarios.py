# tests/integration/cache/test_int_scenarios.py — v1
"""Integration tests: end-to-end memoization scenarios on both backends.

No external services required. The cross-process tests start fresh Python
interpreters with different hash seeds and need the package installed.
"""

from __future__ import annotations

import os
import subprocess
import sys
import textwrap
from pathlib import Path

import pytest

from fncache.cache.decorators import make_memoized
from fncache.cache.disk_backend import DiskBackend
from fncache.cache.errors import NotRegisteredError
from fncache.cache.fingerprint import fingerprint
from fncache.cache.memory_backend import MemoryBackend


def greet(name: str, punctuation: str = "!") -> str:
    return f"hello {name}{punctuation}"


class TestScenarios:
    def test_repeat_call_runs_producer_once(self, any_backend, fib, counted):
        producer = counted(fib)
        assert any_backend("fib", producer, 10) == 55
        assert any_backend("fib", producer, 10) == 55
        assert producer.calls == 1

    def test_distinct_args_are_distinct_entries(self, any_backend, fib, counted):
        producer = counted(fib)
        assert any_backend("fib", producer, 10) == 55
        assert any_backend("fib", producer, 11) == 89
        assert producer.calls == 2
        assert producer.seen == [(10,), (11,)]

    def test_explicit_key(self, any_backend, fib, counted):
        producer = counted(fib)
        assert any_backend("fib", 28725, producer, 12) == 144
        assert any_backend("fib", 28725, producer, 12) == 144
        assert producer.calls == 1

    def test_backends_agree_but_are_isolated(self, tmp_path: Path, fib, counted):
        memory, disk = MemoryBackend(), DiskBackend(root=tmp_path)
        producer = counted(fib)
        assert memory("fib", producer, 15) == disk("fib", producer, 15) == 610
        assert producer.calls == 2
        assert memory("fib", producer, 15) == disk("fib", producer, 15) == 610
        assert producer.calls == 2

        memory("fib", producer, 16)
        assert not disk.entry_path("fib", fingerprint("fib", (16,))).exists()
        disk("fib", producer, 17)
        assert ("fib", fingerprint("fib", (17,))) not in memory

    def test_recursion_after_registration(self, any_backend, registry):
        computed: list[int] = []

        def fib(n: int) -> int:
            computed.append(n)
            if n < 2:
                return n
            return registry.call_memoized(fib, n - 1) + registry.call_memoized(fib, n - 2)

        with pytest.raises(NotRegisteredError):
            registry.call_memoized(fib, 12)
        assert computed == []

        mfib = make_memoized(any_backend, "fib", fib, registry=registry)
        assert mfib(12) == 144
        assert sorted(computed) == list(range(13))
        assert registry.call_memoized(fib, 12) == 144
        assert len(computed) == 13


class TestLabelCollisionHazard:
    """Two producers sharing a label and arguments share a cache entry."""

    def test_second_producer_gets_first_result(self, any_backend):
        def double(x: int) -> int:
            return 2 * x

        def triple(x: int) -> int:
            return 3 * x

        assert any_backend("shared", double, 5) == 10
        assert any_backend("shared", triple, 5) == 10

    def test_distinct_labels_avoid_it(self, any_backend):
        def double(x: int) -> int:
            return 2 * x

        def triple(x: int) -> int:
            return 3 * x

        assert any_backend("double", double, 5) == 10
        assert any_backend("triple", triple, 5) == 15


_WRITER = textwrap.dedent(
    """
    import sys

    from fncache.cache.disk_backend import DiskBackend

    def greet(name, punctuation="!"):
        return f"hello {name}{punctuation}"

    backend = DiskBackend(root=sys.argv[1])
    backend.call("greet", greet, "world", punctuation="?")
    backend.call("pair", lambda *a: a, "x", 1.5, ("nested", b"bytes"), frozenset({"a", "b"}))
    print(backend.fingerprint("greet", "world", punctuation="?"))
    """
)


def _write_in_subprocess(root: Path, hash_seed: str) -> int:
    env = {**os.environ, "PYTHONHASHSEED": hash_seed}
    out = subprocess.run(
        [sys.executable, "-c", _WRITER, str(root)],
        env=env, capture_output=True, text=True, check=True, timeout=60,
    )
    return int(out.stdout.strip())


class TestCrossProcessKeys:
    def test_keys_independent_of_hash_seed(self, tmp_path: Path):
        first = _write_in_subprocess(tmp_path / "a", "1")
        second = _write_in_subprocess(tmp_path / "b", "2")
        assert first == second == fingerprint("greet", ("world",), {"punctuation": "?"})
        names_a = sorted(p.name for p in (tmp_path / "a" / "cache").iterdir())
        names_b = sorted(p.name for p in (tmp_path / "b" / "cache").iterdir())
        assert names_a == names_b
        assert len(names_a) == 2

    def test_entries_reused_by_this_process(self, tmp_path: Path, counted):
        _write_in_subprocess(tmp_path, "3")
        producer = counted(greet)
        backend = DiskBackend(root=tmp_path)
        assert backend.call("greet", producer, "world", punctuation="?") == "hello world?"
        assert producer.calls == 0
        assert backend.stats.hits == 1
