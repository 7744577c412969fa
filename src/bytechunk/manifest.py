"""Part manifest for split files.

Records which part files a source file was split into, their sizes, and the
SHA-256 of the source, so the parts can be joined back and verified.
"""

from __future__ import annotations

import hashlib
import json
import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import PurePath, PureWindowsPath
from typing import TYPE_CHECKING

from bytechunk.exceptions import ManifestError

if TYPE_CHECKING:
    from pathlib import Path

__all__ = [
    "Manifest",
    "PartEntry",
    "compute_hash",
    "load_manifest",
    "part_name",
    "save_manifest",
]

logger = logging.getLogger(__name__)

HASH_CHUNK_SIZE = 65536


@dataclass(frozen=True)
class PartEntry:
    """Immutable record of one written part file."""

    name: str
    size: int


@dataclass
class Manifest:
    """Describes one split operation.

    Part order in ``parts`` is the order in which they must be concatenated.
    """

    source: str
    source_size: int
    source_hash: str
    chunk_size: int
    schema_version: str = "1"
    created: str = field(default_factory=lambda: datetime.now(UTC).isoformat())
    parts: list[PartEntry] = field(default_factory=list)

    def add_part(self, entry: PartEntry) -> None:
        """Append a part entry."""
        self.parts.append(entry)

    @property
    def total_size(self) -> int:
        """Sum of all part sizes."""
        return sum(p.size for p in self.parts)


def compute_hash(path: Path) -> str:
    """Compute SHA-256 hash of a file's contents."""
    h = hashlib.sha256()
    try:
        with path.open("rb") as f:
            while True:
                chunk = f.read(HASH_CHUNK_SIZE)
                if not chunk:
                    break
                h.update(chunk)
    except OSError as e:
        raise ManifestError(f"Failed to hash file {path}: {e}") from e
    return f"sha256:{h.hexdigest()}"


def part_name(prefix: str, index: int, digits: int) -> str:
    """Build a zero-padded part file name, e.g. ``part-00003``."""
    return f"{prefix}-{index:0{digits}d}"


def _check_part_name(name: str) -> str:
    """Reject part names that would resolve outside the manifest directory."""
    if (
        name in ("", ".", "..")
        or "/" in name
        or "\\" in name
        or PurePath(name).is_absolute()
        or PureWindowsPath(name).is_absolute()
    ):
        raise ManifestError(f"Part entry has unsafe name: {name!r}")
    return name


def _part_from_dict(data: object) -> PartEntry:
    """Deserialize a PartEntry from a dict."""
    if not isinstance(data, dict):
        raise ManifestError(f"Part entry must be an object, got {type(data).__name__}")
    missing = [k for k in ("name", "size") if k not in data]
    if missing:
        raise ManifestError(f"Part entry missing required fields: {missing}")
    try:
        size = int(str(data["size"]))
    except (TypeError, ValueError) as e:
        raise ManifestError(f"Part entry has invalid size: {data['size']!r}") from e
    if size < 0:
        raise ManifestError(f"Part entry has invalid size: {size}")
    return PartEntry(name=_check_part_name(str(data["name"])), size=size)


def save_manifest(manifest: Manifest, path: Path) -> None:
    """Save manifest to a JSON file."""
    path.parent.mkdir(parents=True, exist_ok=True)
    data = {
        "schema_version": manifest.schema_version,
        "source": manifest.source,
        "source_size": manifest.source_size,
        "source_hash": manifest.source_hash,
        "chunk_size": manifest.chunk_size,
        "created": manifest.created,
        "parts": [{"name": p.name, "size": p.size} for p in manifest.parts],
    }
    try:
        path.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")
        logger.info("Saved manifest to %s", path)
    except OSError as e:
        logger.error("Failed to save manifest to %s: %s", path, e)
        raise ManifestError(f"Failed to save manifest to {path}: {e}") from e


def load_manifest(path: Path) -> Manifest:
    """Load manifest from a JSON file."""
    if not path.exists():
        raise ManifestError(f"Manifest file not found: {path}")

    try:
        raw = path.read_text(encoding="utf-8")
        data = json.loads(raw)
    except (OSError, json.JSONDecodeError) as e:
        logger.error("Failed to load manifest from %s: %s", path, e)
        raise ManifestError(f"Failed to load manifest from {path}: {e}") from e

    if not isinstance(data, dict):
        raise ManifestError(f"Manifest {path} must contain a JSON object")

    required = ("source", "source_size", "source_hash", "chunk_size")
    missing = [k for k in required if k not in data]
    if missing:
        raise ManifestError(f"Manifest {path} missing required fields: {missing}")

    try:
        manifest = Manifest(
            source=str(data["source"]),
            source_size=int(data["source_size"]),
            source_hash=str(data["source_hash"]),
            chunk_size=int(data["chunk_size"]),
            schema_version=str(data.get("schema_version", "1")),
            created=str(data.get("created", "")),
        )
    except (TypeError, ValueError) as e:
        raise ManifestError(f"Malformed manifest {path}: {e}") from e

    parts = data.get("parts", [])
    if not isinstance(parts, list):
        raise ManifestError(f"Manifest {path} field 'parts' must be a list")
    for part_data in parts:
        manifest.add_part(_part_from_dict(part_data))

    logger.info("Loaded manifest from %s (%d parts)", path, len(manifest.parts))
    return manifest
