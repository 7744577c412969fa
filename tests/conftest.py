"""Shared fixtures for bytechunk tests."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

if TYPE_CHECKING:
    from pathlib import Path


@pytest.fixture
def sample_file(tmp_path: Path) -> Path:
    """A 10,000-byte binary file with a sequential pattern."""
    f = tmp_path / "sample.bin"
    f.write_bytes(bytes(i % 256 for i in range(10_000)))
    return f
