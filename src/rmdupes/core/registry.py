"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/registry.py
Duplicate set registry: maps fingerprints to ordered groups of file records.

Files are bucketed by size as they arrive. The first file of a size waits in its
bucket unhashed; only when a second file of the same size shows up are both
handed back for hashing (claim), then filed under their content hash (insert).
A DuplicateSet is created the moment a hash group reaches two members, which fixes
the discovery order of sets.

The mutation path (claim + insert) runs under one lock, so worker threads hashing
different files can never split one fingerprint across two sets.
After finalize() the registry is read-only.
"""

import threading
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Tuple

from rmdupes.core.models import DuplicateSet, FileRecord, Fingerprint, SetOrder
from rmdupes.core.sorter import Sorter


@dataclass
class SizeBucket:
    """All files seen so far with one size."""
    size: int
    pending: Optional[FileRecord] = None
    by_hash: Dict[bytes, List[FileRecord]] = field(default_factory=dict)


class DuplicateSetRegistry:
    """
    Append-only during the scan, read-only afterwards.
    Iterates forwards and backwards over sets in a stable order.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._buckets: Dict[int, SizeBucket] = {}
        self._sets: List[DuplicateSet] = []
        self._by_fingerprint: Dict[Fingerprint, DuplicateSet] = {}
        self._files_examined = 0
        self._finalized = False

    # ---------- mutation (scan time) ----------

    def claim(self, record: FileRecord) -> List[FileRecord]:
        """
        Registers a file under its size and returns the records that now need a content hash:
        nothing for the first file of a size, the new file plus the waiting one for the
        second, and just the new file afterwards.
        """
        with self._lock:
            self._check_writable()
            bucket = self._buckets.get(record.size)
            if bucket is None:
                self._buckets[record.size] = SizeBucket(size=record.size, pending=record)
                return []
            to_hash = [record]
            if bucket.pending is not None:
                to_hash.append(bucket.pending)
                bucket.pending = None
            return to_hash

    def insert(self, record: FileRecord, content_hash: bytes) -> Optional[DuplicateSet]:
        """
        Files a hashed record. Returns the duplicate set it joined or created,
        or None while its fingerprint is still unique.
        """
        with self._lock:
            self._check_writable()
            bucket = self._buckets.setdefault(record.size, SizeBucket(size=record.size))
            group = bucket.by_hash.setdefault(content_hash, [])
            group.append(record)

            if len(group) < 2:
                return None

            fingerprint = Fingerprint(size=record.size, content_hash=content_hash)
            dup_set = self._by_fingerprint.get(fingerprint)
            if dup_set is None:
                dup_set = DuplicateSet(fingerprint=fingerprint, files=list(group))
                self._by_fingerprint[fingerprint] = dup_set
                self._sets.append(dup_set)
            else:
                dup_set.add_file(record)
            return dup_set

    def finalize(self, sorter: Sorter, files_examined: int, set_order: SetOrder = SetOrder.DISCOVERY) -> None:
        """Orders members (and optionally sets) once and freezes the registry."""
        with self._lock:
            self._check_writable()
            sorter.sort_files_inside_sets(self._sets)
            self._sets = Sorter.order_sets(self._sets, set_order)
            self._files_examined = files_examined
            self._buckets.clear()
            self._finalized = True

    def _check_writable(self) -> None:
        if self._finalized:
            raise RuntimeError("Registry is finalized and read-only.")

    # ---------- read access ----------

    @property
    def is_finalized(self) -> bool:
        return self._finalized

    @property
    def sets(self) -> Tuple[DuplicateSet, ...]:
        return tuple(self._sets)

    def get(self, fingerprint: Fingerprint) -> Optional[DuplicateSet]:
        return self._by_fingerprint.get(fingerprint)

    def set_count(self) -> int:
        return len(self._sets)

    def file_count(self) -> int:
        """Sum of member counts across all sets."""
        return sum(s.member_count for s in self._sets)

    def files_examined(self) -> int:
        return self._files_examined

    def space_occupied(self) -> int:
        """Reclaimable space: sum of member_size * (member_count - 1) over all sets."""
        return sum(s.reclaimable_size for s in self._sets)

    def __iter__(self) -> Iterator[DuplicateSet]:
        return iter(tuple(self._sets))

    def __reversed__(self) -> Iterator[DuplicateSet]:
        return reversed(tuple(self._sets))

    def __len__(self) -> int:
        return len(self._sets)

    def __getitem__(self, index: int) -> DuplicateSet:
        return self._sets[index]

    def __contains__(self, item) -> bool:
        if isinstance(item, Fingerprint):
            return item in self._by_fingerprint
        return item in self._sets

    def __bool__(self) -> bool:
        return True

    def __repr__(self):
        return f"<DuplicateSetRegistry sets={self.set_count()}, files={self.file_count()}>"
