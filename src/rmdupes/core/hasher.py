"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

hasher.py
Implements the fingerprint engine using pluggable hash algorithms.

The size key is a plain stat() call. The content hash streams the file through the
configured algorithm in bounded chunks, so large files are never loaded whole.
"""

import hashlib
import logging
import os

from rmdupes.core.errors import FilesystemAccessError
from rmdupes.core.interfaces import HashAlgorithm, Hasher

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 64 * 1024


# Use the same way to implement and use any other hashing algorithm
class SHA256AlgorithmImpl(HashAlgorithm):
    name = "sha256"

    def new(self):
        return hashlib.sha256()


class BLAKE2bAlgorithmImpl(HashAlgorithm):
    """256-bit BLAKE2b; faster than SHA-256 on most 64-bit machines."""
    name = "blake2b-256"

    def new(self):
        return hashlib.blake2b(digest_size=32)


class HasherImpl(Hasher):
    """
    A hasher implementation that supports any algorithm via the HashAlgorithm interface.
    """

    def __init__(self, algorithm: HashAlgorithm = None, chunk_size: int = DEFAULT_CHUNK_SIZE):
        if chunk_size <= 0:
            raise ValueError("Chunk size must be positive")
        self.algorithm = algorithm or SHA256AlgorithmImpl()
        self.chunk_size = chunk_size

    @staticmethod
    def size_key(path: str) -> int:
        """Cheap pre-filter key: the file size in bytes."""
        try:
            return os.stat(path).st_size
        except OSError as e:
            raise FilesystemAccessError(path, e) from e

    def content_hash(self, path: str) -> bytes:
        """
        Digest of the whole file content, read in chunks of `chunk_size` bytes.
        Raises:
            FilesystemAccessError: the file could not be opened or became unreadable mid-read
        """
        digest = self.algorithm.new()
        try:
            with open(path, 'rb') as f:
                for block in iter(lambda: f.read(self.chunk_size), b''):
                    digest.update(block)
        except OSError as e:
            logger.debug(f"Error reading content of {path}: {e}")
            raise FilesystemAccessError(path, e) from e
        return digest.digest()
