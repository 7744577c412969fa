"""Input unit producers for files and asynchronous streams."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Protocol

from bytechunk.chunk.views import validate_chunk_size
from bytechunk.exceptions import SourceError

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Iterator
    from pathlib import Path

__all__ = ["AsyncReader", "iter_file", "iter_stream"]

logger = logging.getLogger(__name__)


class AsyncReader(Protocol):
    """Anything with an awaitable ``read(n)``, e.g. ``asyncio.StreamReader``."""

    async def read(self, n: int = -1) -> bytes: ...


def iter_file(path: Path, read_size: int) -> Iterator[bytes]:
    """Yield successive blocks of at most ``read_size`` bytes from ``path``.

    Raises:
        InvalidArgumentError: If ``read_size`` is not a positive integer.
        SourceError: If the file cannot be opened or read.
    """
    read_size = validate_chunk_size(read_size, "read_size")
    return _read_blocks(path, read_size)


def _read_blocks(path: Path, read_size: int) -> Iterator[bytes]:
    try:
        with path.open("rb") as f:
            while True:
                block = f.read(read_size)
                if not block:
                    break
                yield block
    except OSError as e:
        raise SourceError(f"Failed to read {path}: {e}") from e
    logger.debug("Finished reading %s", path)


async def iter_stream(reader: AsyncReader, read_size: int) -> AsyncIterator[bytes]:
    """Yield blocks from an asynchronous reader until it reports EOF.

    Raises:
        InvalidArgumentError: If ``read_size`` is not a positive integer.
        SourceError: If the reader fails with ``OSError``.
    """
    read_size = validate_chunk_size(read_size, "read_size")
    while True:
        try:
            block = await reader.read(read_size)
        except OSError as e:
            raise SourceError(f"Failed to read stream: {e}") from e
        if not block:
            return
        yield block
