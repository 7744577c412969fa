"""Synchronous and asynchronous re-chunkers over sequences of buffers.

Both variants run the same ``CarryBuffer`` state machine; the asynchronous
one differs only in awaiting its source between units.
"""

from __future__ import annotations

import logging
from contextlib import aclosing
from typing import TYPE_CHECKING

from bytechunk.chunk.carry import CarryBuffer
from bytechunk.chunk.views import as_byte_view, is_binary_view, validate_chunk_size
from bytechunk.exceptions import InvalidArgumentError

if TYPE_CHECKING:
    from collections.abc import AsyncIterable, AsyncIterator, Iterable, Iterator

    from bytechunk.types import RechunkStats

__all__ = ["Rechunker", "rechunk", "rechunk_async"]

logger = logging.getLogger(__name__)

_ITEM_MESSAGE = "Expected source items to be binary views"


def _is_sync_iterable(source: object) -> bool:
    # str and buffers iterate as characters or ints, never as byte units.
    if isinstance(source, str) or is_binary_view(source):
        return False
    return callable(getattr(source, "__iter__", None))


def _is_async_iterable(source: object) -> bool:
    return callable(getattr(source, "__aiter__", None))


def _check_sync_source(source: object) -> None:
    if not _is_sync_iterable(source):
        raise InvalidArgumentError("Expected source to be an iterable of binary views")


def _check_async_source(source: object) -> None:
    if not (_is_async_iterable(source) or _is_sync_iterable(source)):
        raise InvalidArgumentError("Expected source to be an async iterable or iterable")


def _drive(source: Iterable[object], carry: CarryBuffer) -> Iterator[memoryview]:
    iterator = iter(source)
    try:
        for part in iterator:
            yield from carry.feed(as_byte_view(part, _ITEM_MESSAGE))
    except BaseException:
        # Early exit only; an exhausted source is left to its owner.
        close = getattr(iterator, "close", None)
        if close is not None:
            close()
        raise

    tail = carry.flush()
    if tail is not None:
        yield tail
    logger.debug("Re-chunked %d units into %d chunks", carry.stats.units, carry.stats.chunks)


async def _drive_async(
    source: AsyncIterable[object] | Iterable[object],
    carry: CarryBuffer,
) -> AsyncIterator[memoryview]:
    if _is_async_iterable(source):
        iterator = aiter(source)  # type: ignore[arg-type]
        try:
            async for part in iterator:
                for chunk in carry.feed(as_byte_view(part, _ITEM_MESSAGE)):
                    yield chunk
        except BaseException:
            aclose = getattr(iterator, "aclose", None)
            if aclose is not None:
                await aclose()
            raise
    else:
        sync_iterator = iter(source)  # type: ignore[arg-type]
        try:
            for part in sync_iterator:
                for chunk in carry.feed(as_byte_view(part, _ITEM_MESSAGE)):
                    yield chunk
        except BaseException:
            close = getattr(sync_iterator, "close", None)
            if close is not None:
                close()
            raise

    tail = carry.flush()
    if tail is not None:
        yield tail
    logger.debug("Re-chunked %d units into %d chunks", carry.stats.units, carry.stats.chunks)


def rechunk(source: Iterable[object], chunk_size: int) -> Iterator[memoryview]:
    """Re-chunk an iterable of buffers into ``chunk_size``-byte views.

    Chunks lying entirely inside one input buffer alias it; chunks spanning
    several inputs are fresh copies. All chunks but the last have exactly
    ``chunk_size`` bytes.

    ``source`` and ``chunk_size`` are checked at call time; each item is
    checked when it is pulled.

    Raises:
        InvalidArgumentError: On an invalid source, chunk size or item.
    """
    _check_sync_source(source)
    return _drive(source, CarryBuffer(chunk_size))


async def rechunk_async(
    source: AsyncIterable[object] | Iterable[object],
    chunk_size: int,
) -> AsyncIterator[memoryview]:
    """Re-chunk an async (or plain) iterable of buffers.

    Behaves like :func:`rechunk` but awaits the source between items. Every
    validation failure, including a bad ``source`` or ``chunk_size``, is
    raised from the first ``__anext__`` rather than at call time.
    """
    _check_async_source(source)
    carry = CarryBuffer(chunk_size)
    async with aclosing(_drive_async(source, carry)) as chunks:
        async for chunk in chunks:
            yield chunk


class Rechunker:
    """Reusable re-chunking front end that keeps copy statistics.

    Each call to :meth:`run` or :meth:`run_async` starts an independent
    operation with its own carry buffer; :attr:`stats` reports on the most
    recent one.

    Usage::

        rechunker = Rechunker(65536)
        for chunk in rechunker.run(iter_file(path, 1 << 20)):
            sink.write(chunk)
        print(rechunker.stats.copied_chunks)
    """

    def __init__(self, chunk_size: int) -> None:
        self.chunk_size = validate_chunk_size(chunk_size)
        self._carry: CarryBuffer | None = None

    @property
    def stats(self) -> RechunkStats | None:
        """Counters of the latest operation, or None before the first run."""
        return None if self._carry is None else self._carry.stats

    def run(self, source: Iterable[object]) -> Iterator[memoryview]:
        """Start a synchronous operation; see :func:`rechunk`."""
        _check_sync_source(source)
        self._carry = CarryBuffer(self.chunk_size)
        return _drive(source, self._carry)

    async def run_async(
        self,
        source: AsyncIterable[object] | Iterable[object],
    ) -> AsyncIterator[memoryview]:
        """Start an asynchronous operation; see :func:`rechunk_async`."""
        _check_async_source(source)
        self._carry = CarryBuffer(self.chunk_size)
        async with aclosing(_drive_async(source, self._carry)) as chunks:
            async for chunk in chunks:
                yield chunk
