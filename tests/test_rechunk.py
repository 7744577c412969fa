"""Tests for the synchronous re-chunker."""

from __future__ import annotations

import array
import io
import time

import pytest

from bytechunk.chunk import Rechunker, rechunk
from bytechunk.exceptions import InvalidArgumentError

_SIZE_MESSAGE = "Expected chunk_size to be a positive integer"


def _pattern(size: int, start: int = 0) -> bytes:
    """Deterministic byte pattern so reordering or loss is detectable."""
    return bytes((start + i) % 256 for i in range(size))


def _lengths(chunks) -> list[int]:
    return [len(c) for c in chunks]


class TestRechunkScenarios:
    def test_splits_larger_units(self):
        chunks = list(rechunk([bytes(1000), bytes(2000)], 500))
        assert _lengths(chunks) == [500] * 6

    def test_accumulates_small_units(self):
        chunks = list(rechunk([bytes(300), bytes(300), bytes(300)], 500))
        assert _lengths(chunks) == [500, 400]

    def test_mixed_small_and_large_units(self):
        chunks = list(rechunk([bytes(100), bytes(800), bytes(150)], 500))
        assert _lengths(chunks) == [500, 500, 50]

    def test_empty_source(self):
        assert list(rechunk([], 100)) == []

    def test_only_empty_units(self):
        assert list(rechunk([b"", bytearray(0), b""], 100)) == []

    def test_empty_units_between_data(self):
        chunks = list(rechunk([b"ab", b"", b"cd", b"", b"e"], 2))
        assert [bytes(c) for c in chunks] == [b"ab", b"cd", b"e"]

    def test_chunk_size_larger_than_total(self):
        chunks = list(rechunk([bytes(100), bytes(200), bytes(300)], 1_000_000))
        assert _lengths(chunks) == [600]

    def test_exact_chunk_size_unit(self):
        assert _lengths(rechunk([bytes(1000)], 1000)) == [1000]

    def test_typed_units(self):
        units = [array.array("H", [0] * 250), array.array("i", [0] * 125)]
        assert _lengths(rechunk(units, 300)) == [300, 300, 300, 100]

    def test_generator_source(self):
        def buffers():
            yield bytes(100)
            yield bytes(200)
            yield bytes(300)

        assert sum(_lengths(rechunk(buffers(), 250))) == 600


class TestRechunkContent:
    def test_preserves_data(self):
        first = _pattern(500)
        second = _pattern(500, 128)
        joined = b"".join(rechunk([first, second], 300))
        assert joined[:500] == first
        assert joined[500:] == second

    @pytest.mark.parametrize("chunk_size", [1, 3, 7, 64, 999, 5000])
    def test_round_trip_arbitrary_units(self, chunk_size):
        sizes = [0, 1, 5, 64, 3, 0, 250, 17, 1024, 2]
        units = []
        offset = 0
        for size in sizes:
            units.append(_pattern(size, offset))
            offset += size
        chunks = list(rechunk(units, chunk_size))

        assert b"".join(chunks) == b"".join(units)
        assert all(len(c) == chunk_size for c in chunks[:-1])
        assert 1 <= len(chunks[-1]) <= chunk_size

    def test_rechunking_is_idempotent(self):
        units = [_pattern(n, n) for n in (13, 2, 40, 7, 99)]
        first = [bytes(c) for c in rechunk(units, 16)]
        second = [bytes(c) for c in rechunk(first, 16)]
        assert second == first


class TestRechunkZeroCopy:
    def test_contained_chunk_aliases_source(self):
        source = bytearray(1000)
        chunks = list(rechunk([source], 500))
        source[0] = 7
        source[999] = 9
        assert chunks[0][0] == 7
        assert chunks[1][499] == 9

    def test_merged_chunk_is_independent(self):
        first = bytearray(300)
        second = bytearray(300)
        chunks = list(rechunk([first, second], 500))
        first[0] = 1
        second[199] = 1
        assert chunks[0][0] == 0
        assert chunks[0][499] == 0

    def test_does_not_mutate_inputs(self):
        units = [bytearray(_pattern(30)), bytearray(_pattern(45, 30))]
        list(rechunk(units, 20))
        assert units[0] == _pattern(30)
        assert units[1] == _pattern(45, 30)


class TestRechunkValidation:
    @pytest.mark.parametrize("source", ["not iterable", 123, None, b"raw bytes"])
    def test_rejects_non_iterable_source(self, source):
        with pytest.raises(InvalidArgumentError, match="Expected source to be an iterable"):
            rechunk(source, 100)

    @pytest.mark.parametrize("size", [0, -1, 1.5, float("nan"), float("inf"), 2**53])
    def test_rejects_invalid_chunk_size(self, size):
        with pytest.raises(InvalidArgumentError, match=_SIZE_MESSAGE):
            rechunk([bytes(10)], size)

    def test_validates_source_before_chunk_size(self):
        with pytest.raises(InvalidArgumentError, match="Expected source"):
            rechunk(None, -1)

    def test_rejects_non_buffer_item_lazily(self):
        chunks = rechunk([bytes(10), "not a buffer"], 5)
        assert len(next(chunks)) == 5
        assert len(next(chunks)) == 5
        with pytest.raises(InvalidArgumentError, match="Expected source items to be binary views"):
            next(chunks)

    def test_rejects_released_view_item(self):
        released = memoryview(bytes(10))
        released.release()
        with pytest.raises(InvalidArgumentError, match="Expected source items to be binary views"):
            list(rechunk([bytes(10), released], 5))

    def test_emitted_chunks_survive_failure(self):
        emitted = []
        with pytest.raises(InvalidArgumentError):
            for chunk in rechunk([_pattern(8), None], 4):
                emitted.append(chunk)
        assert [bytes(c) for c in emitted] == [_pattern(4), _pattern(4, 4)]


class TestRechunkCancellation:
    def test_close_stops_pulling_and_closes_source(self):
        pulled = []
        closed = []

        def source():
            try:
                for index in range(100):
                    pulled.append(index)
                    yield bytes(10)
            finally:
                closed.append(True)

        chunks = rechunk(source(), 10)
        next(chunks)
        chunks.close()

        assert pulled == [0]
        assert closed == [True]

    def test_exhausted_source_is_left_open(self):
        f = io.BytesIO(b"ab\ncd\nef\n")
        chunks = list(rechunk(f, 4))

        assert not f.closed
        assert b"".join(chunks) == b"ab\ncd\nef\n"
        f.seek(0)
        assert f.read() == b"ab\ncd\nef\n"

    def test_source_closed_when_item_is_invalid(self):
        closed = []

        def source():
            try:
                yield bytes(4)
                yield None
            finally:
                closed.append(True)

        chunks = rechunk(source(), 4)
        next(chunks)
        with pytest.raises(InvalidArgumentError):
            next(chunks)
        assert closed == [True]


class TestRechunkPerformance:
    def test_many_tiny_units_linear(self):
        def tiny_units():
            for _ in range(10_000):
                yield bytes(1024)

        rechunker = Rechunker(1024 * 1024)
        start = time.perf_counter()
        chunks = list(rechunker.run(tiny_units()))
        duration = time.perf_counter() - start

        assert duration < 2.0, f"took {duration:.2f}s"
        assert len(chunks) == 10
        assert len(chunks[0]) == 1024 * 1024
        assert sum(_lengths(chunks)) == 10_000 * 1024
        assert rechunker.stats is not None
        assert rechunker.stats.bytes_copied <= 2 * rechunker.stats.bytes_in


class TestRechunker:
    def test_stats_none_before_run(self):
        assert Rechunker(10).stats is None

    def test_runs_are_independent(self):
        rechunker = Rechunker(4)
        first = [bytes(c) for c in rechunker.run([b"abcdef"])]
        second = [bytes(c) for c in rechunker.run([b"xy", b"z"])]
        assert first == [b"abcd", b"ef"]
        assert second == [b"xyz"]
        assert rechunker.stats.units == 2

    def test_rejects_invalid_chunk_size(self):
        with pytest.raises(InvalidArgumentError):
            Rechunker(0)
