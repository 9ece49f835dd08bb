# src/cache/models.py — v1
"""Cache domain models: CacheRecord, CacheStats."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel


class CacheRecord(BaseModel):
    """Header line written in front of every on-disk payload."""

    label: str
    key: int
    serializer: str
    type_name: str
    created_at: datetime


class CacheStats(BaseModel):
    """Hit/miss counters kept by each backend instance."""

    hits: int = 0
    misses: int = 0

    @property
    def lookups(self) -> int:
        """Total number of lookups served."""
        return self.hits + self.misses
