"""Fixed-size binary chunking with minimal copying.

``split_buffer`` slices one buffer; ``rechunk`` and ``rechunk_async`` merge
and split a stream of buffers through a shared carry-buffer state machine.
"""

from bytechunk.chunk.carry import CarryBuffer
from bytechunk.chunk.rechunk import Rechunker, rechunk, rechunk_async
from bytechunk.chunk.split import split_buffer
from bytechunk.chunk.views import (
    MAX_SAFE_INTEGER,
    as_byte_view,
    is_binary_view,
    validate_chunk_size,
)

__all__ = [
    "MAX_SAFE_INTEGER",
    "CarryBuffer",
    "Rechunker",
    "as_byte_view",
    "is_binary_view",
    "rechunk",
    "rechunk_async",
    "split_buffer",
    "validate_chunk_size",
]
