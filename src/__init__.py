# src/__init__.py — v1
"""fncache: transparent memoization for pure functions.

In-memory and on-disk backends share one call contract; decorators wrap
functions so memoized call sites look like plain calls.
"""

from fncache.cache.backend_factory import create_backend
from fncache.cache.base_backend import BaseCacheBackend
from fncache.cache.decorators import (
    LoggedCall,
    Memoized,
    log_start_stop,
    make_memoized,
    memoize,
)
from fncache.cache.disk_backend import DiskBackend
from fncache.cache.errors import (
    CacheError,
    NotRegisteredError,
    SerializationError,
    TypeMismatchError,
    UnhashableArgumentError,
)
from fncache.cache.fingerprint import fingerprint, register_hasher
from fncache.cache.memory_backend import MemoryBackend
from fncache.cache.registry import RecursionRegistry, memoized, register
from fncache.version import __version__

__all__ = [
    "BaseCacheBackend",
    "CacheError",
    "DiskBackend",
    "LoggedCall",
    "Memoized",
    "MemoryBackend",
    "NotRegisteredError",
    "RecursionRegistry",
    "SerializationError",
    "TypeMismatchError",
    "UnhashableArgumentError",
    "__version__",
    "create_backend",
    "fingerprint",
    "log_start_stop",
    "make_memoized",
    "memoize",
    "memoized",
    "register",
    "register_hasher",
]
