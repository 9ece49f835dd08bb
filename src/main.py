# src/main.py — v1
"""CLI entry point: fib, config commands.

Usage:
    fncache fib <n> [--backend memory|disk] [--cache-root DIR] [--serializer pickle|json]
    fncache config
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from fncache.config.settings import ConfigurationError, Settings, load_settings
from fncache.version import __version__

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if not hasattr(args, "func"):
        parser.print_help()
        return 1

    try:
        settings = _load_settings(args)
    except (ConfigurationError, ValueError) as exc:
        # pydantic ValidationError is a ValueError
        print(f"Invalid configuration: {exc}", file=sys.stderr)
        return 2

    from fncache.logging.logger import setup_logging

    setup_logging(
        level="DEBUG" if args.verbose else settings.log_level,
        log_format=settings.log_format,
        log_file=str(settings.log_file) if settings.log_file else None,
        rotation=settings.log_rotation,
        retention=settings.log_retention,
    )

    try:
        return args.func(args, settings)
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130
    except Exception as exc:
        logger.error("Fatal error: %s", exc, exc_info=args.verbose)
        return 1


def _build_parser() -> argparse.ArgumentParser:
    """Build CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="fncache",
        description=f"fncache v{__version__} - memoization for pure functions",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command")

    # --- fib ---
    p_fib = subparsers.add_parser(
        "fib", help="Compute a Fibonacci number twice through the cache",
    )
    p_fib.add_argument("n", type=_non_negative_int, help="Index of the Fibonacci number")
    p_fib.add_argument(
        "--backend", choices=["memory", "disk"], default=None,
        help="Cache backend (default: from settings)",
    )
    p_fib.add_argument(
        "--cache-root", type=Path, default=None,
        help="Parent directory of the disk cache (default: working directory)",
    )
    p_fib.add_argument(
        "--serializer", choices=["pickle", "json"], default=None,
        help="Disk payload encoding (default: from settings)",
    )
    p_fib.set_defaults(func=_cmd_fib)

    # --- config ---
    p_config = subparsers.add_parser(
        "config", help="Print the effective settings as JSON",
    )
    p_config.set_defaults(func=_cmd_config)

    return parser


def _non_negative_int(value: str) -> int:
    n = int(value)
    if n < 0:
        raise argparse.ArgumentTypeError(f"expected a non-negative integer, got {n}")
    return n


def _load_settings(args: argparse.Namespace) -> Settings:
    overrides: dict[str, object] = {}
    for field in ("backend", "cache_root", "serializer"):
        value = getattr(args, field, None)
        if value is not None:
            overrides["cache_backend" if field == "backend" else field] = value
    return load_settings(**overrides)


def _cmd_fib(args: argparse.Namespace, settings: Settings) -> int:
    """Compute fib(n) twice; the second call is served from the cache."""
    from fncache.cache.backend_factory import create_backend
    from fncache.cache.decorators import make_memoized
    from fncache.cache.registry import RecursionRegistry

    backend = create_backend(settings)
    registry = RecursionRegistry()

    def fib(n: int) -> int:
        if n < 2:
            return n
        return registry.call_memoized(fib, n - 1) + registry.call_memoized(fib, n - 2)

    mfib = make_memoized(backend, "fib", fib, registry=registry)
    print(mfib(args.n))
    print(mfib(args.n))
    logger.debug(
        "fib(%d): hits=%d misses=%d", args.n, backend.stats.hits, backend.stats.misses
    )
    return 0


def _cmd_config(args: argparse.Namespace, settings: Settings) -> int:
    """Display the effective settings."""
    print(settings.model_dump_json(indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
