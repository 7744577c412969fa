"""Configuration system for bytechunk.

Reads and writes ``bytechunk.toml`` with typed dataclasses and sensible
defaults for all values.
"""

from __future__ import annotations

import logging
import tomllib
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, TypeVar

import tomli_w

from bytechunk.chunk.views import validate_chunk_size
from bytechunk.exceptions import ConfigError, InvalidArgumentError

if TYPE_CHECKING:
    from pathlib import Path

_T = TypeVar("_T")

__all__ = [
    "CONFIG_FILE",
    "MAX_PART_DIGITS",
    "BytechunkConfig",
    "ChunkConfig",
    "OutputConfig",
    "default_config",
    "load_config",
    "save_config",
]

logger = logging.getLogger(__name__)

CONFIG_FILE = "bytechunk.toml"

# Upper bound on the zero-padding width of part names.
MAX_PART_DIGITS = 20


@dataclass
class ChunkConfig:
    """[chunk] section."""

    size: int = 65536
    read_size: int = 1048576


@dataclass
class OutputConfig:
    """[output] section."""

    directory: str = "chunks"
    prefix: str = "part"
    digits: int = 5
    manifest: str = "manifest.json"


@dataclass
class BytechunkConfig:
    """Root configuration combining all sections."""

    chunk: ChunkConfig = field(default_factory=ChunkConfig)
    output: OutputConfig = field(default_factory=OutputConfig)


def default_config() -> BytechunkConfig:
    """Return a config with all default values."""
    return BytechunkConfig()


def _config_to_dict(config: BytechunkConfig) -> dict[str, object]:
    """Convert BytechunkConfig to a nested dict suitable for TOML serialization."""
    return {name: dict(vars(getattr(config, name))) for name in ("chunk", "output")}


def save_config(config: BytechunkConfig, path: Path) -> None:
    """Save configuration to a TOML file."""
    path.parent.mkdir(parents=True, exist_ok=True)
    data = _config_to_dict(config)
    try:
        with path.open("wb") as f:
            tomli_w.dump(data, f)
        logger.info("Saved config to %s", path)
    except OSError as e:
        logger.error("Failed to save config to %s: %s", path, e)
        raise ConfigError(f"Failed to save config to {path}: {e}") from e


def _load_section(cls: type[_T], data: dict[str, object]) -> _T:
    """Load a dataclass section from a dict, ignoring unknown keys."""
    known_fields = {f.name for f in cls.__dataclass_fields__.values()}  # type: ignore[attr-defined]
    filtered = {k: v for k, v in data.items() if k in known_fields}
    return cls(**filtered)


def _validate(config: BytechunkConfig) -> None:
    try:
        validate_chunk_size(config.chunk.size, "chunk.size")
        validate_chunk_size(config.chunk.read_size, "chunk.read_size")
    except InvalidArgumentError as e:
        raise ConfigError(f"Invalid configuration: {e}") from e
    digits = config.output.digits
    if (
        not isinstance(digits, int)
        or isinstance(digits, bool)
        or not 1 <= digits <= MAX_PART_DIGITS
    ):
        raise ConfigError(
            f"Invalid configuration: Expected output.digits to be an integer "
            f"between 1 and {MAX_PART_DIGITS}"
        )


def load_config(path: Path) -> BytechunkConfig:
    """Load configuration from a TOML file.

    Missing sections or keys get default values.
    """
    if not path.exists():
        raise ConfigError(f"Config file not found: {path}")

    try:
        raw = path.read_bytes()
        data = tomllib.loads(raw.decode("utf-8"))
    except (OSError, UnicodeDecodeError, tomllib.TOMLDecodeError) as e:
        logger.error("Failed to load config from %s: %s", path, e)
        raise ConfigError(f"Failed to load config from {path}: {e}") from e

    config = BytechunkConfig()
    section_map: dict[str, type] = {
        "chunk": ChunkConfig,
        "output": OutputConfig,
    }

    for name, cls in section_map.items():
        if name not in data:
            continue
        if not isinstance(data[name], dict):
            raise ConfigError(f"Config section [{name}] in {path} must be a table")
        setattr(config, name, _load_section(cls, data[name]))

    _validate(config)
    logger.info("Loaded config from %s", path)
    return config
