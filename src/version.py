# src/version.py — v1
"""Installed package version."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("fncache")
except PackageNotFoundError:
    __version__ = "unknown"
