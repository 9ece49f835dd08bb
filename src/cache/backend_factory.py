# src/cache/backend_factory.py — v1
"""Factory for cache backend instantiation."""

from __future__ import annotations

from fncache.cache.base_backend import BaseCacheBackend
from fncache.cache.disk_backend import DiskBackend
from fncache.cache.memory_backend import MemoryBackend
from fncache.cache.serializers import create_serializer
from fncache.config.settings import Settings
from fncache.logging.events import CacheEventLogger


def create_backend(
    settings: Settings | None = None,
    events: CacheEventLogger | None = None,
) -> BaseCacheBackend:
    """Instantiate the configured cache backend.

    Args:
        settings: Application settings. Defaults to an in-memory backend.
        events: Event logger shared by the backend.

    Returns:
        Configured BaseCacheBackend implementation.
    """
    if settings is None:
        return MemoryBackend(events=events)

    if settings.cache_backend == "memory":
        return MemoryBackend(events=events, default_label=settings.default_label)

    if settings.cache_backend == "disk":
        return DiskBackend(
            root=settings.cache_root,
            serializer=create_serializer(settings.serializer),
            events=events,
            default_label=settings.default_label,
        )

    raise ValueError(f"Unsupported cache backend: {settings.cache_backend!r}")
