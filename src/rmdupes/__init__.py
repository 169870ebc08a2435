"""
rmdupes — find duplicate files and keep only one of each.

Core features:
- Size pre-filter, then SHA-256 content hashes only for files whose size collides
- Five member orders (name, creation time, last read time, last write time, size), ascending or descending
- Summary report, delete-all-but-one, or replace-all-but-one with a symbolic link
- Optional safe deletion to the system trash (via send2trash)
- CLI interface for headless/server usage
"""

from importlib.metadata import version as _version, PackageNotFoundError

try:
    __version__ = _version("rmdupes")
except PackageNotFoundError:
    __version__ = "0.0.0"

# Public API — only what users should import directly
from rmdupes.commands import DuplicateScanCommand
from rmdupes.core import (
    ScanConfiguration, ActionParams, SortStrategy, SetOrder, Action,
    FileRecord, DuplicateSet, DuplicateSetRegistry, ScanEventSink, NullEventSink,
    ConfigurationError, ScanCancelled)
from rmdupes.utils.convert_utils import ConvertUtils
from rmdupes.services import ActionExecutor, ActionReport, FileService

__all__ = [
    "DuplicateScanCommand",
    "ScanConfiguration",
    "ActionParams",
    "SortStrategy",
    "SetOrder",
    "Action",
    "FileRecord",
    "DuplicateSet",
    "DuplicateSetRegistry",
    "ScanEventSink",
    "NullEventSink",
    "ConfigurationError",
    "ScanCancelled",
    "ConvertUtils",
    "ActionExecutor",
    "ActionReport",
    "FileService",
    "__version__",
]
