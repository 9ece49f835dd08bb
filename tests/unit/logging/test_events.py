# tests/unit/logging/test_events.py — v1
"""Tests for logging/events.py — cache hit/miss and lifecycle events."""

from __future__ import annotations

import logging

from fncache.logging.events import CacheEventLogger


def _only(caplog) -> logging.LogRecord:
    assert len(caplog.records) == 1
    return caplog.records[0]


class TestCacheEventLogger:
    def test_default_logger(self):
        assert CacheEventLogger().logger.name == "fncache.events"

    def test_custom_logger(self):
        logger = logging.getLogger("fncache.custom")
        assert CacheEventLogger(logger).logger is logger

    def test_cache_hit(self, caplog):
        with caplog.at_level(logging.INFO, logger="fncache"):
            CacheEventLogger().cache_hit("disk", "/tmp/cache/fib-1")
        record = _only(caplog)
        assert record.getMessage() == "Cached access from disk /tmp/cache/fib-1"
        assert record.data == {
            "event": "cache_hit", "source": "disk", "identifier": "/tmp/cache/fib-1",
        }

    def test_cache_miss(self, caplog):
        with caplog.at_level(logging.INFO, logger="fncache"):
            CacheEventLogger().cache_miss("memory", "fib-1")
        record = _only(caplog)
        assert record.getMessage() == "Non-cached access, memory fib-1"
        assert record.data["event"] == "cache_miss"

    def test_begin_end(self, caplog):
        events = CacheEventLogger()
        with caplog.at_level(logging.INFO, logger="fncache"):
            events.begin("job")
            events.end("job")
        assert caplog.messages == ["BEGIN job", "END job"]
        assert [r.data["event"] for r in caplog.records] == ["begin", "end"]

    def test_silent_above_info(self, caplog):
        with caplog.at_level(logging.WARNING, logger="fncache"):
            CacheEventLogger().cache_hit("memory", "fib-1")
        assert caplog.records == []
