"""Tests for bytechunk.types module."""

from __future__ import annotations

from bytechunk.types import RechunkStats


class TestRechunkStats:
    def test_defaults(self):
        stats = RechunkStats()
        assert stats.units == 0
        assert stats.empty_units == 0
        assert stats.bytes_in == 0
        assert stats.chunks == 0
        assert stats.zero_copy_chunks == 0
        assert stats.copied_chunks == 0
        assert stats.bytes_copied == 0

    def test_mutable_counters(self):
        stats = RechunkStats()
        stats.chunks += 2
        assert stats.chunks == 2
