"""
Core duplicate-detection engine: path filter, fingerprint engine, directory walker,
duplicate set registry and sort strategies.

This package contains the performance-critical foundation of rmdupes:
- PathFilter: per-entry eligibility (symlinks, hidden entries, size bounds)
- HasherImpl + SHA256AlgorithmImpl: size key and chunked SHA-256 content hash
- DirectoryWalker: deterministic traversal feeding the registry, with event sink and cancellation
- DuplicateSetRegistry: size buckets, lazily hashed fingerprints, ordered duplicate sets
- Sorter: the five member orders (name, creation, last read, last write, size)

All components are pure Python with no console dependencies.
"""

from .errors import (
    RmDupesError, FilesystemAccessError, SymlinkCycleError, DataLossRiskError,
    ConfigurationError, ScanCancelled)
from .models import (
    FileRecord, Fingerprint, DuplicateSet, ScanConfiguration, ScanStatistics, ActionParams,
    SortStrategy, SetOrder, Action, select_action, select_sort_strategy)
from .path_filter import PathFilter
from .hasher import HasherImpl, SHA256AlgorithmImpl, BLAKE2bAlgorithmImpl
from .sorter import Sorter
from .registry import DuplicateSetRegistry
from .scanner import DirectoryWalker
from .interfaces import ScanEventSink, NullEventSink, KeeperChooser

__all__ = [
    "RmDupesError",
    "FilesystemAccessError",
    "SymlinkCycleError",
    "DataLossRiskError",
    "ConfigurationError",
    "ScanCancelled",
    "FileRecord",
    "Fingerprint",
    "DuplicateSet",
    "ScanConfiguration",
    "ScanStatistics",
    "ActionParams",
    "SortStrategy",
    "SetOrder",
    "Action",
    "select_action",
    "select_sort_strategy",
    "PathFilter",
    "HasherImpl",
    "SHA256AlgorithmImpl",
    "BLAKE2bAlgorithmImpl",
    "Sorter",
    "DuplicateSetRegistry",
    "DirectoryWalker",
    "ScanEventSink",
    "NullEventSink",
    "KeeperChooser",
]
