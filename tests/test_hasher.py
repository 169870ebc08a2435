"""
Unit tests for HasherImpl with SHA256AlgorithmImpl and BLAKE2bAlgorithmImpl.
Verifies chunked hashing returns full 256-bit digests.
"""
import hashlib

import pytest

from rmdupes.core.errors import FilesystemAccessError
from rmdupes.core.hasher import BLAKE2bAlgorithmImpl, HasherImpl, SHA256AlgorithmImpl


class TestHasherImpl:
    """Test SHA-256 computation with chunk-based reading."""

    def test_same_content_produces_same_hash(self, temp_dir):
        content = b"test content " * 1000
        (temp_dir / "a").write_bytes(content)
        (temp_dir / "b").write_bytes(content)

        hasher = HasherImpl()
        hash1 = hasher.content_hash(str(temp_dir / "a"))
        hash2 = hasher.content_hash(str(temp_dir / "b"))

        assert hash1 == hash2
        assert isinstance(hash1, bytes)
        assert len(hash1) == 32  # SHA-256 = 32 bytes

    def test_different_content_produces_different_hashes(self, temp_dir):
        (temp_dir / "a").write_bytes(b"A" * 1024)
        (temp_dir / "b").write_bytes(b"B" * 1024)

        hasher = HasherImpl()
        assert hasher.content_hash(str(temp_dir / "a")) != hasher.content_hash(str(temp_dir / "b"))

    def test_matches_hashlib_regardless_of_chunk_size(self, temp_dir):
        """Chunk boundaries must not change the digest."""
        content = bytes(range(256)) * 50
        path = temp_dir / "data"
        path.write_bytes(content)

        expected = hashlib.sha256(content).digest()
        assert HasherImpl(chunk_size=7).content_hash(str(path)) == expected
        assert HasherImpl().content_hash(str(path)) == expected

    def test_empty_file(self, temp_dir):
        path = temp_dir / "empty"
        path.write_bytes(b"")
        assert HasherImpl().content_hash(str(path)) == hashlib.sha256(b"").digest()

    def test_blake2b_algorithm(self, temp_dir):
        path = temp_dir / "data"
        path.write_bytes(b"payload")

        digest = HasherImpl(BLAKE2bAlgorithmImpl()).content_hash(str(path))

        assert digest == hashlib.blake2b(b"payload", digest_size=32).digest()
        assert SHA256AlgorithmImpl.name == "sha256"

    def test_size_key(self, temp_dir):
        path = temp_dir / "data"
        path.write_bytes(b"x" * 123)
        assert HasherImpl.size_key(str(path)) == 123

    def test_missing_file_raises_access_error(self, temp_dir):
        missing = str(temp_dir / "missing")
        with pytest.raises(FilesystemAccessError) as exc_info:
            HasherImpl().content_hash(missing)
        assert exc_info.value.path == missing

        with pytest.raises(FilesystemAccessError):
            HasherImpl.size_key(missing)

    def test_invalid_chunk_size(self):
        with pytest.raises(ValueError):
            HasherImpl(chunk_size=0)
