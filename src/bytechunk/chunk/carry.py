"""Carry-buffer re-chunking state machine.

Turns an ordered series of input units of arbitrary byte length into chunks
of exactly ``chunk_size`` bytes (the last one may be shorter):

- Whenever a whole chunk lies inside a single input unit it is emitted as a
  zero-copy slice of that unit.
- A trailing remainder shorter than a chunk is copied once into a carry
  buffer of fixed capacity ``chunk_size``, allocated lazily and written in
  place for the rest of the operation.
- The next unit either tops the carry up to a full chunk (one fresh
  allocation holding carry bytes followed by the unit's head) or, when it is
  still too short, is appended to the carry.

Each input byte is copied at most once into the carry and at most once into
a merged chunk, so total work is linear in the input size however many
small units arrive.

The synchronous and asynchronous re-chunkers both drive one ``CarryBuffer``
per operation, so they share this state machine exactly.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from bytechunk.chunk.views import validate_chunk_size
from bytechunk.exceptions import BytechunkError
from bytechunk.types import RechunkStats

if TYPE_CHECKING:
    from collections.abc import Iterator

__all__ = ["CarryBuffer"]

logger = logging.getLogger(__name__)


class CarryBuffer:
    """Per-operation accumulator for the re-chunking algorithm.

    Usage::

        carry = CarryBuffer(500)
        for unit in units:
            yield from carry.feed(as_byte_view(unit))
        tail = carry.flush()
        if tail is not None:
            yield tail
    """

    def __init__(self, chunk_size: int) -> None:
        self.chunk_size = validate_chunk_size(chunk_size)
        self.stats = RechunkStats()
        self._buffer: bytearray | None = None
        self._view: memoryview | None = None
        self._length = 0
        self._flushed = False

    @property
    def pending(self) -> int:
        """Number of carried bytes not yet emitted."""
        return self._length

    def _storage(self) -> memoryview:
        if self._view is None:
            self._buffer = bytearray(self.chunk_size)
            self._view = memoryview(self._buffer)
            logger.debug("Allocated carry buffer of %d bytes", self.chunk_size)
        return self._view

    def feed(self, unit: memoryview) -> Iterator[memoryview]:
        """Consume one input unit and yield every chunk it completes.

        Args:
            unit: Flat unsigned-byte view (see ``as_byte_view``).

        Yields:
            Full-size chunks, either slices of ``unit`` or merged copies.
        """
        if self._flushed:
            raise BytechunkError("Carry buffer already flushed")

        size = len(unit)
        stats = self.stats
        stats.units += 1
        if size == 0:
            stats.empty_units += 1
            return
        stats.bytes_in += size

        chunk_size = self.chunk_size
        offset = 0

        if self._length > 0:
            carry = self._storage()
            needed = chunk_size - self._length
            if size < needed:
                # Fits without bounds checks: size < needed keeps the carry below chunk_size.
                carry[self._length : self._length + size] = unit
                self._length += size
                stats.bytes_copied += size
                return

            out = bytearray(chunk_size)
            out[: self._length] = carry[: self._length]
            out[self._length :] = unit[:needed]
            stats.bytes_copied += chunk_size
            stats.chunks += 1
            stats.copied_chunks += 1
            self._length = 0
            offset = needed
            yield memoryview(out)

        while offset + chunk_size <= size:
            stats.chunks += 1
            stats.zero_copy_chunks += 1
            yield unit[offset : offset + chunk_size]
            offset += chunk_size

        if offset < size:
            remainder = size - offset
            self._storage()[:remainder] = unit[offset:]
            self._length = remainder
            stats.bytes_copied += remainder

    def flush(self) -> memoryview | None:
        """Finish the operation and return the short final chunk, if any.

        The returned view aliases the carry storage, which is retired here
        and never written again.
        """
        if self._flushed:
            raise BytechunkError("Carry buffer already flushed")
        self._flushed = True

        if self._length == 0:
            return None

        tail = self._storage()[: self._length]
        logger.debug("Flushing %d carried bytes", self._length)
        self.stats.chunks += 1
        self.stats.copied_chunks += 1
        self._length = 0
        return tail
