"""
Shared fixtures for duplicate scanning tests.
Creates isolated temporary directories with controlled test files.
"""
import os
import pytest
import tempfile
from pathlib import Path
from typing import Dict

from rmdupes.core.models import FileRecord, ScanConfiguration


@pytest.fixture
def temp_dir():
    """Creates isolated temporary directory, auto-cleanup after test."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(os.path.realpath(tmpdir))


@pytest.fixture
def test_files(temp_dir) -> Dict[str, Path]:
    """
    Creates controlled test files for duplicate scenarios:
    - 2 identical files (duplicate pair #1, 1KB of 'A')
    - 2 identical files (duplicate pair #2, 2KB of 'B')
    - 1 unique file with the same size as pair #1 (forces a hash, never a duplicate)
    - 1 unique file with a size nobody else has (never hashed)
    - 1 hidden file identical to pair #1
    - 1 subdirectory file identical to pair #1
    """
    files = {}

    # Duplicate pair #1 (1KB of 'A')
    content_a = b"A" * 1024
    files["dup1_a"] = temp_dir / "dup1_a.txt"
    files["dup1_b"] = temp_dir / "dup1_b.txt"
    files["dup1_a"].write_bytes(content_a)
    files["dup1_b"].write_bytes(content_a)

    # Duplicate pair #2 (2KB of 'B')
    content_b = b"B" * 2048
    files["dup2_a"] = temp_dir / "dup2_a.txt"
    files["dup2_b"] = temp_dir / "dup2_b.txt"
    files["dup2_a"].write_bytes(content_b)
    files["dup2_b"].write_bytes(content_b)

    # Same size as pair #1, different content
    files["same_size"] = temp_dir / "same_size.txt"
    files["same_size"].write_bytes(b"C" * 1024)

    # Unique size
    files["unique"] = temp_dir / "unique.txt"
    files["unique"].write_bytes(b"D" * 2500)

    # Hidden duplicate of pair #1
    files["hidden"] = temp_dir / ".hidden.txt"
    files["hidden"].write_bytes(content_a)

    # Subdirectory with a duplicate of pair #1
    subdir = temp_dir / "subdir"
    subdir.mkdir()
    files["sub_dup"] = subdir / "dup_in_subdir.txt"
    files["sub_dup"].write_bytes(content_a)

    return files


@pytest.fixture
def make_record():
    """Factory for FileRecord objects that do not exist on disk."""
    def _make(path: str, size: int = 100, **kwargs) -> FileRecord:
        return FileRecord(path=path, size=size, **kwargs)
    return _make


@pytest.fixture
def recursive_config() -> ScanConfiguration:
    return ScanConfiguration(recurse=True)
