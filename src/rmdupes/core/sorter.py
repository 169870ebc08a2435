"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/sorter.py
Pure sorting logic for duplicate sets.
One strategy object orders the members of every set; the same object can order
the sets of a registry. Ties are always broken by full path, ascending, so the
result is deterministic whichever direction the primary key runs.
"""
import logging
import os
import sys
from typing import Callable, Dict, Iterable, List, Optional, Sequence

from rmdupes.core.errors import ConfigurationError
from rmdupes.core.models import DuplicateSet, FileRecord, SetOrder, SortStrategy

logger = logging.getLogger(__name__)

_SORT_KEYS: Dict[SortStrategy, Callable[[FileRecord], object]] = {
    SortStrategy.NAME: lambda f: f.name,
    SortStrategy.CREATION_TIME: lambda f: f.creation_time,
    SortStrategy.LAST_READ_TIME: lambda f: f.last_read_time,
    SortStrategy.LAST_WRITE_TIME: lambda f: f.last_write_time,
    SortStrategy.SIZE: lambda f: f.size,
}


class Sorter:
    """
    Orders files inside duplicate sets according to a strategy and direction.
    Sorting priority:
    1. Primary key of the strategy (name, creation time, last read time, last write time, size),
       reversed when `descending` is set
    2. Full path, always ascending
    """

    def __init__(self, strategy: SortStrategy = SortStrategy.NAME, descending: bool = False):
        if strategy not in _SORT_KEYS:
            raise ConfigurationError(f"Unknown sort strategy: {strategy!r}")
        self.strategy = strategy
        self.descending = descending
        self._key = _SORT_KEYS[strategy]

    def key(self, record: FileRecord) -> object:
        """Primary sort key of one record."""
        return self._key(record)

    def compare(self, a: FileRecord, b: FileRecord) -> int:
        """Three-way comparison; negative when `a` goes first."""
        ka, kb = self._key(a), self._key(b)
        if ka != kb:
            result = -1 if ka < kb else 1
            return -result if self.descending else result
        if a.path != b.path:
            return -1 if a.path < b.path else 1
        return 0

    def sort_files(self, files: Iterable[FileRecord]) -> List[FileRecord]:
        """
        Returns a new list in the active order.
        Python's sort is stable (also with reverse=True), so pre-sorting by path
        leaves ties in ascending path order.
        """
        ordered = sorted(files, key=lambda f: f.path)
        ordered.sort(key=self._key, reverse=self.descending)
        return ordered

    def sort_files_inside_sets(self, sets: Optional[Sequence[DuplicateSet]]) -> None:
        """Finalizes every set with its members in the active order."""
        if not sets:
            return
        for dup_set in sets:
            dup_set.finalize(self.sort_files(dup_set.files))

    @staticmethod
    def order_sets(sets: Sequence[DuplicateSet], set_order: SetOrder) -> List[DuplicateSet]:
        """
        Registry-level order. DISCOVERY keeps the incoming order;
        SIZE puts the largest reclaimable space first, keeping discovery order for ties.
        """
        if set_order is SetOrder.SIZE:
            return sorted(sets, key=lambda s: s.reclaimable_size, reverse=True)
        return list(sets)


def _mount_options_for(path: str, mounts_file: str = "/proc/self/mounts") -> Optional[List[str]]:
    """Mount options of the longest mount point containing `path`, or None if unknown."""
    try:
        with open(mounts_file, "r", encoding="utf-8", errors="replace") as f:
            lines = f.readlines()
    except OSError:
        return None

    real = os.path.realpath(path)
    best_point, best_options = "", None
    for line in lines:
        parts = line.split()
        if len(parts) < 4:
            continue
        # Spaces in mount points are octal-escaped
        point = parts[1].replace("\\040", " ")
        if real == point or real.startswith(point.rstrip("/") + "/"):
            if len(point) >= len(best_point):
                best_point, best_options = point, parts[3].split(",")
    return best_options


def validate_access_time_tracking(roots: Sequence[str], mounts_file: str = "/proc/self/mounts") -> None:
    """
    Last-read-time ordering is only meaningful where the file system records access times.
    Raises ConfigurationError for any root mounted with `noatime`; unknown platforms pass.
    """
    if not sys.platform.startswith("linux"):
        return
    for root in roots:
        options = _mount_options_for(root, mounts_file)
        if options and "noatime" in options:
            raise ConfigurationError(
                f"Cannot sort by last read time: {root} is on a file system mounted with 'noatime', "
                f"so access times are not recorded."
            )
        logger.debug(f"Access-time tracking for {root}: mount options {options}")
