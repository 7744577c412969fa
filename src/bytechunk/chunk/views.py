"""Binary view boundary: buffer-protocol checks and byte reinterpretation.

Every input the chunkers accept is an object exporting the buffer protocol.
Whatever its element width or shape, it is handled as a flat run of bytes
through a ``memoryview`` cast to format ``"B"``, which never copies.
"""

from __future__ import annotations

from bytechunk.exceptions import InvalidArgumentError

__all__ = [
    "MAX_SAFE_INTEGER",
    "as_byte_view",
    "is_binary_view",
    "validate_chunk_size",
]

# Largest integer a double represents exactly; chunk sizes stay below it.
MAX_SAFE_INTEGER = 2**53 - 1


def _cast_bytes(data: object) -> memoryview | None:
    try:
        view = memoryview(data)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        # ValueError: a released memoryview.
        return None
    if view.format == "B" and view.ndim == 1 and view.c_contiguous:
        return view
    try:
        return view.cast("B")
    except TypeError:
        # Non-contiguous views cannot be reinterpreted without copying.
        view.release()
        return None


def is_binary_view(data: object) -> bool:
    """Return True if ``data`` exports contiguous memory via the buffer protocol."""
    view = _cast_bytes(data)
    if view is None:
        return False
    view.release()
    return True


def as_byte_view(data: object, message: str = "Expected data to be a binary view") -> memoryview:
    """Reinterpret ``data`` as a flat unsigned-byte ``memoryview``.

    The returned view aliases the backing storage of ``data``: its length is
    the byte length of the input, not its element count, and later writes to
    the storage are visible through it.

    Args:
        data: Any C-contiguous buffer (bytes, bytearray, array.array, ...).
        message: Error message used when ``data`` is rejected.

    Raises:
        InvalidArgumentError: If ``data`` is not a recognized binary view.
    """
    view = _cast_bytes(data)
    if view is None:
        raise InvalidArgumentError(message)
    return view


def validate_chunk_size(chunk_size: object, name: str = "chunk_size") -> int:
    """Check that ``chunk_size`` is a positive integer within the safe range.

    ``name`` is the argument name reported in the error message.

    ``bool`` and every ``float`` (including integral, NaN and infinite
    values) are rejected.

    Raises:
        InvalidArgumentError: If the value is not acceptable.
    """
    if (
        not isinstance(chunk_size, int)
        or isinstance(chunk_size, bool)
        or not 0 < chunk_size <= MAX_SAFE_INTEGER
    ):
        raise InvalidArgumentError(f"Expected {name} to be a positive integer")
    return chunk_size
