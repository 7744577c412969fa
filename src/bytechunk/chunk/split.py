"""Single-buffer splitter: fixed-size zero-copy slices of one buffer."""

from __future__ import annotations

from typing import TYPE_CHECKING

from bytechunk.chunk.views import as_byte_view, validate_chunk_size

if TYPE_CHECKING:
    from collections.abc import Iterator

__all__ = ["split_buffer"]


def split_buffer(data: object, chunk_size: int) -> Iterator[memoryview]:
    """Split one buffer into views of ``chunk_size`` bytes.

    Every view aliases ``data``; the last one may be shorter. An empty
    buffer yields nothing. Arguments are checked at call time, ``data``
    before ``chunk_size``.

    Args:
        data: Any C-contiguous buffer. Multi-byte element types are split
            by byte length, not element count.
        chunk_size: Positive integer chunk length in bytes.

    Raises:
        InvalidArgumentError: If ``data`` or ``chunk_size`` is invalid.
    """
    view = as_byte_view(data)
    return _split(view, validate_chunk_size(chunk_size))


def _split(view: memoryview, chunk_size: int) -> Iterator[memoryview]:
    for offset in range(0, len(view), chunk_size):
        yield view[offset : offset + chunk_size]
