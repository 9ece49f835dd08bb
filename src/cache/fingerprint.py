# src/cache/fingerprint.py — v2
"""Call fingerprinting: label + ordered arguments -> 64-bit key.

The key is folded from a zero seed: first the label, then each positional
argument left to right, then (after a fixed marker) the keyword arguments
sorted by name. The combine step is the classic ``hash_combine`` mix, so
argument order is part of the identity.

Per-type hashes are built on BLAKE2b digests of a canonical byte rendering,
never on the builtin ``hash()``, whose value for ``str`` and ``bytes`` changes
between interpreter runs. Keys are therefore stable across processes.

Keys are NOT collision-free. Two distinct calls that map to the same key
silently share one cached result; nothing detects this. Choose labels that
tell functions apart, and take care when supplying keys by hand.
"""

from __future__ import annotations

import dataclasses
import hashlib
from collections.abc import Mapping, Sequence
from datetime import date, datetime, time
from decimal import Decimal
from enum import Enum
from pathlib import PurePath
from typing import Any, Callable

from pydantic import BaseModel

from fncache.cache.errors import UnhashableArgumentError

_MASK = (1 << 64) - 1
_GOLDEN = 0x9E3779B9

_HASHERS: dict[type, Callable[[Any], int]] = {}


def hash_combine(seed: int, value_hash: int) -> int:
    """Fold ``value_hash`` into ``seed`` (order-sensitive, 64-bit)."""
    seed ^= (value_hash + _GOLDEN + (seed << 6) + (seed >> 2)) & _MASK
    return seed & _MASK


def register_hasher(cls: type, func: Callable[[Any], int]) -> None:
    """Register a stable hash function for instances of ``cls``.

    Registered hashers take precedence over the built-in ones and apply to
    subclasses of ``cls`` as well.
    """
    _HASHERS[cls] = func


def fingerprint(
    label: str,
    args: Sequence[Any],
    kwargs: Mapping[str, Any] | None = None,
) -> int:
    """Compute the cache key of a call.

    Args:
        label: Human-readable call label (usually the function name).
        args: Positional arguments, in call order.
        kwargs: Keyword arguments (order-independent).

    Returns:
        Non-negative integer below 2**64.

    Raises:
        UnhashableArgumentError: If an argument type has no stable hash.
    """
    if not isinstance(label, str):
        raise TypeError(f"label must be a str, got {type(label).__name__}")
    seed = hash_combine(0, stable_hash(label))
    for arg in args:
        seed = hash_combine(seed, stable_hash(arg))
    if kwargs:
        seed = hash_combine(seed, _KWARGS_MARKER)
        for name in sorted(kwargs):
            seed = hash_combine(seed, stable_hash(name))
            seed = hash_combine(seed, stable_hash(kwargs[name]))
    return seed


def stable_hash(value: Any) -> int:
    """Return a process-independent 64-bit hash of ``value``."""
    for cls in type(value).__mro__:
        hasher = _HASHERS.get(cls)
        if hasher is not None:
            return hasher(value) & _MASK

    custom = getattr(value, "__fingerprint__", None)
    if callable(custom) and not isinstance(value, type):
        return hash_combine(_digest(b"custom", _type_name(value)), stable_hash(custom()))

    if value is None:
        return _digest(b"none", b"")
    # Enum before int/str: IntEnum and StrEnum members are also ints/strs.
    if isinstance(value, Enum):
        return hash_combine(_digest(b"enum", _type_name(value)), stable_hash(value.value))
    if isinstance(value, bool):
        return _digest(b"bool", b"1" if value else b"0")
    if isinstance(value, int):
        return _digest(b"int", str(value).encode("ascii"))
    if isinstance(value, float):
        return _digest(b"float", _float_bytes(value))
    if isinstance(value, complex):
        return _digest(b"complex", _float_bytes(value.real) + b"," + _float_bytes(value.imag))
    if isinstance(value, str):
        return _digest(b"str", value.encode("utf-8", "surrogatepass"))
    if isinstance(value, (bytes, bytearray)):
        return _digest(b"bytes", bytes(value))
    if isinstance(value, tuple):
        return _hash_ordered(b"tuple", value)
    if isinstance(value, list):
        return _hash_ordered(b"list", value)
    if isinstance(value, (set, frozenset)):
        return _hash_unordered(b"set", (stable_hash(item) for item in value))
    if isinstance(value, Mapping):
        return _hash_unordered(
            b"mapping",
            (hash_combine(stable_hash(k), stable_hash(v)) for k, v in value.items()),
        )
    # datetime before date: datetime is a date subclass.
    if isinstance(value, datetime):
        return _digest(b"datetime", value.isoformat().encode("ascii"))
    if isinstance(value, date):
        return _digest(b"date", value.isoformat().encode("ascii"))
    if isinstance(value, time):
        return _digest(b"time", value.isoformat().encode("ascii"))
    if isinstance(value, Decimal):
        return _digest(b"decimal", str(value.normalize()).encode("ascii"))
    if isinstance(value, PurePath):
        return _digest(b"path", str(value).encode("utf-8", "surrogateescape"))
    if isinstance(value, BaseModel):
        return hash_combine(
            _digest(b"model", _type_name(value)), stable_hash(value.model_dump())
        )
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        fields = tuple(getattr(value, f.name) for f in dataclasses.fields(value))
        return hash_combine(_digest(b"dataclass", _type_name(value)), stable_hash(fields))

    raise UnhashableArgumentError(
        f"No stable hash for argument of type {type(value).__qualname__!r}; "
        "register one with register_hasher() or supply the key explicitly"
    )


def _digest(tag: bytes, payload: bytes) -> int:
    """BLAKE2b-64 of a type tag and its canonical payload."""
    h = hashlib.blake2b(tag + b"\x00" + payload, digest_size=8)
    return int.from_bytes(h.digest(), "big")


def _float_bytes(value: float) -> bytes:
    if value == 0.0:
        value = 0.0  # -0.0 == 0.0
    return repr(value).encode("ascii")


def _type_name(value: Any) -> bytes:
    cls = type(value)
    return f"{cls.__module__}.{cls.__qualname__}".encode("utf-8")


def _hash_ordered(tag: bytes, items: Sequence[Any]) -> int:
    seed = _digest(tag, str(len(items)).encode("ascii"))
    for item in items:
        seed = hash_combine(seed, stable_hash(item))
    return seed


def _hash_unordered(tag: bytes, hashes: Any) -> int:
    ordered = sorted(hashes)
    seed = _digest(tag, str(len(ordered)).encode("ascii"))
    for h in ordered:
        seed = hash_combine(seed, h)
    return seed


_KWARGS_MARKER = _digest(b"kwargs", b"")
