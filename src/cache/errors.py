# src/cache/errors.py — v1
"""Exception hierarchy for the memoization engine.

Every failure propagates to the immediate caller of ``invoke`` or
``call_memoized``; nothing is retried and no fallback backend is tried.
Filesystem failures surface as plain ``OSError``.
"""

from __future__ import annotations


class CacheError(Exception):
    """Base class for all cache errors."""


class UnhashableArgumentError(CacheError, TypeError):
    """Raised when an argument has no stable per-type hash."""


class TypeMismatchError(CacheError, TypeError):
    """Raised when a cached value does not match the expected return type."""


class SerializationError(CacheError):
    """Raised when a value cannot be encoded or a cache file cannot be decoded."""


class NotRegisteredError(CacheError, LookupError):
    """Raised when a recursive memoized call targets an unregistered function."""
