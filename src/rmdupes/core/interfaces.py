"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

interfaces.py

Defines core interfaces (Protocols) used throughout the duplicate scanner.
These protocols enforce structural typing using Python's `typing.Protocol` to ensure
consistency across modules while maintaining flexibility and modularity.

Key Components:
---------------
- HashAlgorithm: Standardized interface for content hash functions (SHA-256 by default).
- Hasher: Interface for the fingerprint engine (size key + content hash).
- ScanEventSink: Lifecycle notifications emitted by the directory walker.
- KeeperChooser: Interactive keeper selection for the delete and link actions.
- FileScanner: Interface for the directory walker itself.
"""

from typing import Protocol, Optional, Callable, Sequence, Union, TYPE_CHECKING
import os

from rmdupes.core.models import DuplicateSet, ScanConfiguration

if TYPE_CHECKING:
    from rmdupes.core.registry import DuplicateSetRegistry


class HashAlgorithm(Protocol):
    """
    Interface for incremental hash algorithms.

    Allows plugging in a different cryptographic hash without affecting the rest of
    the scanning logic. Implementations return a fresh hashlib-style object
    exposing update() and digest().
    """

    name: str

    def new(self):
        ...


class Hasher(Protocol):
    """Interface for the two-stage fingerprint engine."""

    def size_key(self, path: str) -> int:
        ...

    def content_hash(self, path: str) -> bytes:
        ...


class ScanEventSink(Protocol):
    """
    Receives scan lifecycle notifications.

    Every method is optional: the scanner only calls the ones a sink defines,
    so a sink may implement any subset. Quiet mode is simply no sink at all.
    """

    def on_scan_started(self, root_path: str) -> None:
        ...

    def on_scan_progress(self, files_examined: int, sets_found: int) -> None:
        ...

    def on_scan_error(self, context_path: Optional[str], offending_path: str, error: BaseException) -> None:
        ...

    def on_scan_completed(
            self,
            files_examined: int,
            duplicate_file_count: int,
            sets_found: int,
            space_occupied: int
    ) -> None:
        ...


class NullEventSink:
    """No-op sink. Useful as a base class for sinks that only care about some events."""

    def on_scan_started(self, root_path: str) -> None:
        pass

    def on_scan_progress(self, files_examined: int, sets_found: int) -> None:
        pass

    def on_scan_error(self, context_path: Optional[str], offending_path: str, error: BaseException) -> None:
        pass

    def on_scan_completed(
            self,
            files_examined: int,
            duplicate_file_count: int,
            sets_found: int,
            space_occupied: int
    ) -> None:
        pass


class KeeperChooser(Protocol):
    """
    Given an ordered duplicate set, returns the index of the member to preserve,
    or None to leave the whole set untouched.
    """

    def __call__(self, dup_set: DuplicateSet) -> Optional[int]:
        ...


class FileScanner(Protocol):
    """
    Interface for walking one or more roots and building the duplicate registry.
    """

    def scan(
        self,
        roots: Union[str, os.PathLike, Sequence[Union[str, os.PathLike]]],
        config: ScanConfiguration,
        sink: Optional[ScanEventSink] = None,
        stopped_flag: Optional[Callable[[], bool]] = None
    ) -> "DuplicateSetRegistry":
        """
        Scan the given roots.

        Args:
            roots: One root directory or a sequence of them.
            config: Immutable scan configuration.
            sink: Optional lifecycle event receiver.
            stopped_flag: Function that returns True if the scan should be cancelled.

        Returns:
            The finished, read-only DuplicateSetRegistry.

        Raises:
            ScanCancelled: if stopped_flag fired before the scan completed.
        """
        ...
