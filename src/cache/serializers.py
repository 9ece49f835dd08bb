# src/cache/serializers.py — v2
"""Value serializers used by the disk backend.

A serializer turns a return value into bytes and back. Decoding receives the
expected return type (when known) so typed formats can rebuild it.
Both directions must round-trip: ``loads(dumps(v), type(v)) == v``.
"""

from __future__ import annotations

import json
import pickle
from abc import ABC, abstractmethod
from typing import Any

from pydantic import PydanticSchemaGenerationError, TypeAdapter, ValidationError

from fncache.cache.errors import SerializationError, TypeMismatchError

_ANY_ADAPTER: TypeAdapter[Any] = TypeAdapter(Any)


class BaseSerializer(ABC):
    """Encoder/decoder pair for cached values."""

    name: str = ""

    @abstractmethod
    def dumps(self, value: Any) -> bytes:
        """Encode a value."""

    @abstractmethod
    def loads(self, data: bytes, expected: Any = None) -> Any:
        """Decode bytes, optionally into the ``expected`` type."""


class PickleSerializer(BaseSerializer):
    """Pickle-based serializer; handles any picklable value."""

    name = "pickle"

    def __init__(self, protocol: int = pickle.HIGHEST_PROTOCOL) -> None:
        self._protocol = protocol

    def dumps(self, value: Any) -> bytes:
        try:
            return pickle.dumps(value, protocol=self._protocol)
        except (pickle.PicklingError, TypeError, AttributeError) as e:
            raise SerializationError(
                f"Cannot pickle value of type {type(value).__qualname__}: {e}"
            ) from e

    def loads(self, data: bytes, expected: Any = None) -> Any:
        try:
            return pickle.loads(data)  # noqa: S301
        except (pickle.UnpicklingError, EOFError, AttributeError, ImportError) as e:
            raise SerializationError(f"Cannot unpickle cached value: {e}") from e


class JsonSerializer(BaseSerializer):
    """JSON serializer built on pydantic.

    Without an expected type, values decode to plain JSON types. With one,
    the payload is validated strictly into it, so tuples, dataclasses and
    pydantic models come back as themselves and nothing is coerced.
    """

    name = "json"

    def dumps(self, value: Any) -> bytes:
        try:
            return _ANY_ADAPTER.dump_json(value)
        except ValueError as e:  # PydanticSerializationError
            raise SerializationError(
                f"Cannot encode value of type {type(value).__qualname__} as JSON: {e}"
            ) from e

    def loads(self, data: bytes, expected: Any = None) -> Any:
        if expected is None:
            try:
                return json.loads(data)
            except json.JSONDecodeError as e:
                raise SerializationError(f"Invalid JSON payload: {e}") from e
        try:
            adapter = TypeAdapter(expected)
        except PydanticSchemaGenerationError as e:
            raise SerializationError(f"Cannot decode JSON into {expected!r}: {e}") from e
        try:
            # Strict: a payload written as one type must not coerce into another.
            return adapter.validate_json(data, strict=True)
        except ValidationError as e:
            if any(err["type"] == "json_invalid" for err in e.errors()):
                raise SerializationError(f"Invalid JSON payload: {e}") from e
            raise TypeMismatchError(
                f"Cached JSON payload does not decode as {expected!r}: {e}"
            ) from e


_SERIALIZERS: dict[str, type[BaseSerializer]] = {
    PickleSerializer.name: PickleSerializer,
    JsonSerializer.name: JsonSerializer,
}


def create_serializer(name: str = "pickle") -> BaseSerializer:
    """Instantiate a serializer by name ("pickle" or "json")."""
    try:
        return _SERIALIZERS[name]()
    except KeyError:
        raise ValueError(f"Unsupported serializer: {name!r}") from None
