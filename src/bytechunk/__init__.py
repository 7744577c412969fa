"""bytechunk: re-chunk binary data into fixed-size pieces with minimal copying."""

from bytechunk.chunk import Rechunker, rechunk, rechunk_async, split_buffer
from bytechunk.exceptions import BytechunkError, InvalidArgumentError

__version__ = "0.1.0"

__all__ = [
    "BytechunkError",
    "InvalidArgumentError",
    "Rechunker",
    "__version__",
    "rechunk",
    "rechunk_async",
    "split_buffer",
]
