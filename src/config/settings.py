# src/config/settings.py — v2
"""Typed configuration loaded from the environment / .env via pydantic-settings.

Every field can be set as an ``FNCACHE_``-prefixed environment variable,
e.g. ``FNCACHE_CACHE_BACKEND=disk``.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from fncache.logging.handlers import parse_size


class ConfigurationError(Exception):
    """Raised when configuration is internally inconsistent."""


class Settings(BaseSettings):
    """Application settings loaded from environment and .env file."""

    model_config = SettingsConfigDict(
        env_prefix="FNCACHE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # === Cache ===
    cache_backend: Literal["memory", "disk"] = "memory"
    # Parent of the "cache" directory; None means the working directory.
    cache_root: Path | None = None
    serializer: Literal["pickle", "json"] = "pickle"
    default_label: str = "anonymous"

    # === Logging ===
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["json", "text"] = "text"
    log_file: Path | None = None
    log_rotation: str = "10MB"
    log_retention: int = 5

    # --- Validators ---

    @field_validator("default_label")
    @classmethod
    def validate_default_label(cls, v: str) -> str:  # noqa: N805
        """The label becomes part of a file name."""
        if not v.strip():
            raise ValueError("default_label must not be empty")
        if "/" in v or "\\" in v:
            raise ValueError("default_label must not contain path separators")
        return v

    @field_validator("log_rotation")
    @classmethod
    def validate_log_rotation(cls, v: str) -> str:  # noqa: N805
        parse_size(v)
        return v

    @field_validator("log_retention")
    @classmethod
    def validate_log_retention(cls, v: int) -> int:  # noqa: N805
        if v < 0:
            raise ValueError("log_retention must be >= 0")
        return v

    @model_validator(mode="after")
    def validate_config_consistency(self) -> Settings:
        """Validate cross-field consistency rules."""
        errors: list[str] = []

        if self.cache_backend == "memory" and self.cache_root is not None:
            errors.append("CACHE_ROOT is only used when CACHE_BACKEND=disk")

        if self.cache_root is not None and self.cache_root.expanduser().is_file():
            errors.append(f"CACHE_ROOT {self.cache_root} is a file, not a directory")

        if errors:
            raise ConfigurationError("; ".join(errors))

        return self


def load_settings(**overrides: object) -> Settings:
    """Load settings from the environment with optional overrides.

    Raises:
        ConfigurationError: If configuration is internally inconsistent.
    """
    return Settings(**overrides)  # type: ignore[arg-type]
