"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/models.py
Data models and domain logic for duplicate scanning and duplicate-set management.
"""

import os
import sys
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterator, List, Optional, Sequence, Tuple, Union

from rmdupes.core.errors import ConfigurationError
from rmdupes.utils.convert_utils import ConvertUtils


# =============================
# Enums
# =============================

class SortStrategy(Enum):
    """
    Order of the members inside each duplicate set.
    The first member in this order is the default keeper.
    """
    NAME = "name"
    CREATION_TIME = "creation-time"
    LAST_READ_TIME = "last-read-time"
    LAST_WRITE_TIME = "last-write-time"
    SIZE = "size"

    @property
    def display_name(self) -> str:
        """Human-readable name for console output."""
        mapping = {
            SortStrategy.NAME: "File name",
            SortStrategy.CREATION_TIME: "Creation time",
            SortStrategy.LAST_READ_TIME: "Last read time",
            SortStrategy.LAST_WRITE_TIME: "Last write time",
            SortStrategy.SIZE: "File size",
        }
        return mapping.get(self, self.value)

    def __repr__(self) -> str:
        return self.value


class SetOrder(Enum):
    """Order of the duplicate sets themselves inside the registry."""
    DISCOVERY = "discovery"
    SIZE = "size"


class Action(Enum):
    SUMMARY = "summary"
    DELETE = "delete"
    LINK = "link"

    @property
    def is_destructive(self) -> bool:
        return self is not Action.SUMMARY


class FilterDecision(Enum):
    INCLUDE = "include"
    EXCLUDE = "exclude"
    ERROR = "error"


# ======================
#  Core Data Models
# ======================

@dataclass(frozen=True)
class FileRecord:
    """
    One scanned file. Immutable once created.
    Times are POSIX timestamps as reported by os.stat().
    """
    path: str
    size: int  # in bytes
    creation_time: float = 0.0
    last_read_time: float = 0.0
    last_write_time: float = 0.0
    device: int = 0
    inode: int = 0
    # Path is a followed symbolic link; device and inode describe its target
    is_link: bool = False

    @property
    def name(self) -> str:
        return os.path.basename(self.path)

    @property
    def identity(self) -> Tuple[int, int]:
        """(device, inode) pair identifying the underlying file, not the path."""
        return self.device, self.inode

    @classmethod
    def from_stat(cls, path: str, st: os.stat_result, is_link: bool = False) -> "FileRecord":
        """Builds a record from an already obtained (link-followed) stat result."""
        return cls(
            path=os.path.abspath(path),
            size=st.st_size,
            creation_time=creation_time_of(st),
            last_read_time=st.st_atime,
            last_write_time=st.st_mtime,
            device=st.st_dev,
            inode=st.st_ino,
            is_link=is_link,
        )

    def __repr__(self):
        return f"<FileRecord path={self.path}, size={self.size}>"


def creation_time_of(st: os.stat_result) -> float:
    """
    Birth time where the platform reports it.
    Windows exposes creation time as st_ctime; elsewhere st_ctime is the inode change time,
    which is the closest value available without st_birthtime.
    """
    birth = getattr(st, "st_birthtime", None)
    if birth is not None:
        return birth
    return st.st_ctime


@dataclass(frozen=True)
class Fingerprint:
    """(size, content_hash) pair. Two files are duplicates iff both parts match."""
    size: int
    content_hash: bytes

    def __post_init__(self):
        if not isinstance(self.content_hash, bytes):
            raise ValueError("content_hash must be bytes")

    @property
    def hex(self) -> str:
        return self.content_hash.hex()

    def __repr__(self):
        return f"<Fingerprint size={self.size}, hash={self.hex[:16]}>"


@dataclass
class DuplicateSet:
    """
    All scanned files sharing one Fingerprint. Never surfaced with fewer than two members.
    Grows while the scan runs; finalize() fixes the member order and freezes the set.
    """
    fingerprint: Fingerprint
    files: List[FileRecord] = field(default_factory=list)
    _finalized: bool = field(default=False, init=False, repr=False, compare=False)

    @property
    def size(self) -> int:
        """Size of every member in bytes."""
        return self.fingerprint.size

    @property
    def member_count(self) -> int:
        return len(self.files)

    @property
    def reclaimable_size(self) -> int:
        """Space freed by keeping a single member."""
        return self.size * max(0, self.member_count - 1)

    @property
    def keeper(self) -> FileRecord:
        """First member in the active sort order."""
        return self.files[0]

    @property
    def is_finalized(self) -> bool:
        return self._finalized

    def add_file(self, record: FileRecord) -> None:
        if self._finalized:
            raise RuntimeError("Cannot add files to a finalized duplicate set.")
        if record.size != self.size:
            raise ValueError("Cannot add file with different size to a duplicate set.")
        self.files.append(record)

    def finalize(self, ordered: Sequence[FileRecord]) -> None:
        """Replaces the members with their final order and freezes the set."""
        if sorted(f.path for f in ordered) != sorted(f.path for f in self.files):
            raise ValueError("Final order must contain exactly the current members.")
        self.files = list(ordered)
        self._finalized = True

    def is_duplicate(self) -> bool:
        """True if this set contains at least two files."""
        return self.member_count >= 2

    def __iter__(self) -> Iterator[FileRecord]:
        return iter(tuple(self.files))

    def __len__(self) -> int:
        return self.member_count

    def __getitem__(self, index: int) -> FileRecord:
        return self.files[index]

    def __repr__(self):
        return f"<DuplicateSet size={self.size}, count={self.member_count}>"


@dataclass
class ScanError:
    """One per-entry error recorded during a scan."""
    path: str
    error: BaseException
    context_path: Optional[str] = None


@dataclass
class ScanStatistics:
    """
    Running counters owned by the scanner.
    Only the scanner writes them, under its own lock when hashing runs on worker threads.
    """
    files_examined: int = 0
    duplicate_file_count: int = 0
    duplicate_set_count: int = 0
    space_occupied: int = 0
    files_hashed: int = 0
    errors: List[ScanError] = field(default_factory=list)

    @property
    def error_count(self) -> int:
        return len(self.errors)

    def as_dict(self) -> Dict[str, int]:
        return {
            "files_examined": self.files_examined,
            "duplicate_file_count": self.duplicate_file_count,
            "duplicate_set_count": self.duplicate_set_count,
            "space_occupied": self.space_occupied,
            "files_hashed": self.files_hashed,
            "errors": self.error_count,
        }


# ======================
#  Configuration
# ======================

@dataclass(frozen=True)
class ScanConfiguration:
    """
    Immutable scan parameters with built-in validation.
    Interface-agnostic: built once by the CLI (or any caller) and passed into the core.
    """
    recurse: bool = False
    follow_symlinks: bool = False
    min_size: int = 0
    max_size: int = sys.maxsize
    skip_hidden: bool = False
    sort_strategy: SortStrategy = SortStrategy.NAME
    descending: bool = False
    set_order: SetOrder = SetOrder.DISCOVERY
    max_workers: int = 1
    progress_interval: int = 1000

    def __post_init__(self):
        """Validate parameters immediately after creation."""
        if self.min_size < 0:
            raise ConfigurationError("Minimum size cannot be negative")

        if self.max_size < self.min_size:
            raise ConfigurationError("Maximum size cannot be less than minimum size")

        if not isinstance(self.sort_strategy, SortStrategy):
            raise ConfigurationError(f"Unknown sort strategy: {self.sort_strategy!r}")

        if not isinstance(self.set_order, SetOrder):
            raise ConfigurationError(f"Unknown set order: {self.set_order!r}")

        if self.max_workers < 1:
            raise ConfigurationError("At least one worker is required")

        if self.progress_interval < 1:
            raise ConfigurationError("Progress interval must be positive")

    def size_passes(self, size: int) -> bool:
        """Inclusive bounds: min_size <= size <= max_size."""
        return self.min_size <= size <= self.max_size

    @staticmethod
    def from_human_readable(
            min_size_str: str = "0",
            max_size_str: Optional[str] = None,
            **kwargs
    ) -> "ScanConfiguration":
        """
        Factory method to create a configuration from human-readable sizes ("500K", "1.5GB").
        Remaining keyword arguments are passed through unchanged.
        """
        try:
            min_size = ConvertUtils.human_to_bytes(min_size_str)
            max_size = ConvertUtils.human_to_bytes(max_size_str) if max_size_str else sys.maxsize
        except ValueError as e:
            raise ConfigurationError(f"Invalid size format: {e}") from e

        return ScanConfiguration(min_size=min_size, max_size=max_size, **kwargs)


@dataclass(frozen=True)
class ActionParams:
    """What to do with the finished registry."""
    action: Action
    no_prompt: bool = False
    use_trash: bool = False

    def __post_init__(self):
        if not isinstance(self.action, Action):
            raise ConfigurationError(f"Unknown action: {self.action!r}")


def select_action(summary: bool = False, delete: bool = False, link: bool = False) -> Action:
    """
    Maps the three mutually exclusive action switches to an Action.
    Exactly one must be set.
    """
    requested = [a for a, on in ((Action.SUMMARY, summary), (Action.DELETE, delete), (Action.LINK, link)) if on]
    if not requested:
        raise ConfigurationError(
            "No operation requested - use the summary, delete or link switch to specify what should be done."
        )
    if len(requested) > 1:
        names = ", ".join(a.value for a in requested)
        raise ConfigurationError(f"The summary, delete and link operations are mutually exclusive (got: {names}).")
    return requested[0]


def select_sort_strategy(
        name: bool = False,
        creation_time: bool = False,
        last_read_time: bool = False,
        last_write_time: bool = False,
        size: bool = False
) -> SortStrategy:
    """
    Maps the sort switches to a SortStrategy. None set means NAME; more than one is an error.
    """
    flags = [
        (SortStrategy.NAME, name),
        (SortStrategy.CREATION_TIME, creation_time),
        (SortStrategy.LAST_READ_TIME, last_read_time),
        (SortStrategy.LAST_WRITE_TIME, last_write_time),
        (SortStrategy.SIZE, size),
    ]
    requested = [s for s, on in flags if on]
    if not requested:
        return SortStrategy.NAME
    if len(requested) > 1:
        names = ", ".join(s.value for s in requested)
        raise ConfigurationError(f"Sort orders are mutually exclusive (got: {names}).")
    return requested[0]


def as_root_list(roots: Union[str, os.PathLike, Sequence[Union[str, os.PathLike]]]) -> List[str]:
    """Normalizes one root or a sequence of roots to a list of absolute path strings."""
    if isinstance(roots, (str, os.PathLike)):
        roots = [roots]
    return [os.path.abspath(os.fspath(r)) for r in roots]
