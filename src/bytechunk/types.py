"""Data records shared between the chunking core and its callers."""

from __future__ import annotations

from dataclasses import dataclass

__all__ = ["RechunkStats"]


@dataclass
class RechunkStats:
    """Running counters for one re-chunking operation.

    ``bytes_copied`` counts every byte written into the carry buffer or into
    a merged chunk. It never exceeds ``2 * bytes_in``.
    """

    units: int = 0
    empty_units: int = 0
    bytes_in: int = 0
    chunks: int = 0
    zero_copy_chunks: int = 0
    copied_chunks: int = 0
    bytes_copied: int = 0
