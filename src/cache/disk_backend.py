# src/cache/disk_backend.py — v2
"""Filesystem memoization backend.

Each entry is one file ``<root>/cache/<label>-<fingerprint>``: a JSON header
line (CacheRecord) followed by the serializer's payload. Entries survive
process restarts. Labels are percent-encoded in file names (``-`` included),
so distinct labels never share a file.

On a hit the type recorded in the header is checked against the expected
return type before decoding, and the decoded value is checked again after.
Without an expected type the recorded type drives decoding, and a value that
does not come back as that type raises TypeMismatchError.

Writes are plain overwrites with no locking and no atomic rename: two
processes racing on the same key end with whichever write landed last.
Filesystem errors propagate as OSError; a failed read is never turned into
a miss.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Callable, Mapping, Sequence
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, TypeVar
from urllib.parse import quote

from pydantic import ValidationError

from fncache.cache.base_backend import BaseCacheBackend, check_type, return_hint
from fncache.cache.errors import SerializationError, TypeMismatchError
from fncache.cache.models import CacheRecord
from fncache.cache.serializers import BaseSerializer, PickleSerializer
from fncache.logging.context import call_context
from fncache.logging.events import CacheEventLogger

logger = logging.getLogger(__name__)

T = TypeVar("T")

CACHE_DIRNAME = "cache"


class DiskBackend(BaseCacheBackend):
    """Durable key -> blob store under a dedicated cache directory."""

    source = "disk"

    def __init__(
        self,
        root: Path | str | None = None,
        serializer: BaseSerializer | None = None,
        events: CacheEventLogger | None = None,
        default_label: str = "anonymous",
    ) -> None:
        super().__init__(events=events, default_label=default_label)
        base = Path.cwd() if root is None else Path(root).expanduser()
        self._root = base / CACHE_DIRNAME
        self._root.mkdir(parents=True, exist_ok=True)
        self._serializer = serializer or PickleSerializer()

    @property
    def root(self) -> Path:
        """Directory holding the cache files."""
        return self._root

    @property
    def serializer(self) -> BaseSerializer:
        return self._serializer

    def entry_path(self, label: str, key: int) -> Path:
        """Return file path for a cache entry."""
        return self._root / f"{encode_label(label)}-{key}"

    def invoke(
        self,
        label: str,
        key: int,
        producer: Callable[..., T],
        args: Sequence[Any] = (),
        kwargs: Mapping[str, Any] | None = None,
        returns: Any = None,
    ) -> T:
        path = self.entry_path(label, key)
        with call_context(label, self.source):
            if path.exists():
                value = self._read(path, label, return_hint(producer, returns))
                self._record_hit(str(path))
                return value

            result = producer(*args, **(kwargs or {}))
            self._record_miss(str(path))
            self._write(path, label, key, result)
            return result

    def _read(self, path: Path, label: str, hint: Any) -> Any:
        data = path.read_bytes()
        header, sep, payload = data.partition(b"\n")
        if not sep:
            raise SerializationError(f"Cache file {path} has no header line")
        try:
            record = CacheRecord.model_validate_json(header)
        except ValidationError as e:
            raise SerializationError(f"Corrupt cache header in {path}: {e}") from e
        if record.serializer != self._serializer.name:
            raise SerializationError(
                f"Cache file {path} was written by the {record.serializer!r} "
                f"serializer, not {self._serializer.name!r}"
            )
        if record.label != label:
            raise SerializationError(
                f"Cache file {path} belongs to label {record.label!r}, not {label!r}"
            )

        stored_type = locate_type(record.type_name)
        if stored_type is not None:
            check_type(stored_type, hint, str(path))
        value = self._serializer.loads(payload, stored_type if hint is None else hint)
        check_type(type(value), hint, str(path))
        if hint is None and qualified_name(type(value)) != record.type_name:
            raise TypeMismatchError(
                f"Cached value for {path} decodes as {qualified_name(type(value))}, "
                f"but {record.type_name} was stored; annotate the producer's return "
                "type or use the pickle serializer"
            )
        return value

    def _write(self, path: Path, label: str, key: int, value: Any) -> None:
        # Encode first so a failing serializer leaves no partial file behind.
        payload = self._serializer.dumps(value)
        record = CacheRecord(
            label=label,
            key=key,
            serializer=self._serializer.name,
            type_name=qualified_name(type(value)),
            created_at=datetime.now(timezone.utc),
        )
        path.write_bytes(record.model_dump_json().encode("utf-8") + b"\n" + payload)
        logger.debug("Wrote %d bytes to %s", len(payload), path)


def encode_label(label: str) -> str:
    """File-name form of a label; injective, and free of ``-`` and separators."""
    return quote(label, safe="").replace("-", "%2D")


def qualified_name(cls: type) -> str:
    return f"{cls.__module__}.{cls.__qualname__}"


def locate_type(name: str) -> type | None:
    """Resolve a recorded ``module.qualname`` among already imported modules.

    Returns None for names that cannot be resolved (local classes, modules
    not imported in this process, ``NoneType``).
    """
    parts = name.split(".")
    for split in range(len(parts) - 1, 0, -1):
        module = sys.modules.get(".".join(parts[:split]))
        if module is None:
            continue
        obj: Any = module
        for attr in parts[split:]:
            obj = getattr(obj, attr, None)
            if obj is None:
                return None
        return obj if isinstance(obj, type) else None
    return None
