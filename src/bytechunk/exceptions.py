"""Custom exception hierarchy for bytechunk."""

__all__ = [
    "BytechunkError",
    "ConfigError",
    "InvalidArgumentError",
    "ManifestError",
    "SourceError",
]


class BytechunkError(Exception):
    """Base exception for all bytechunk errors."""


class InvalidArgumentError(BytechunkError, TypeError):
    """Raised when a buffer, source or chunk size is not acceptable.

    Validation failures are permanent: the operation that raised it emits
    no further chunks, while chunks already handed out stay valid.
    """


class ConfigError(BytechunkError):
    """Raised when configuration loading or validation fails."""


class ManifestError(BytechunkError):
    """Raised when manifest operations fail."""


class SourceError(BytechunkError):
    """Raised when reading an input source fails."""
