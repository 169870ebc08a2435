"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/errors.py
Error taxonomy shared by the scanner, the registry and the action layer.

Per-entry failures (FilesystemAccessError and subclasses) are always recoverable:
the scanner converts them to sink notifications and the action layer tallies them.
ConfigurationError is fatal and raised before any I/O. ScanCancelled is not an
error at all, it only unwinds a cancelled scan so partial results are dropped.
"""
from typing import Optional


class RmDupesError(Exception):
    """Base class for every error raised by rmdupes."""


class FilesystemAccessError(RmDupesError, OSError):
    """A stat/read/delete/link failure on a single file-system entry."""

    def __init__(self, path: str, cause: Optional[BaseException] = None, message: Optional[str] = None):
        self.path = path
        self.cause = cause
        if message is None:
            message = str(cause) if cause is not None else "file-system access failed"
        self.message = f"{path}: {message}"
        super().__init__(self.message)
        if isinstance(cause, OSError):
            self.errno = cause.errno
            self.strerror = cause.strerror
            self.filename = path

    def __str__(self):
        return self.message


class SymlinkCycleError(FilesystemAccessError):
    """A followed symbolic link leads back into one of its own ancestors."""

    def __init__(self, path: str, target: str):
        self.target = target
        super().__init__(path, message=f"symbolic link cycle detected (points back to {target})")


class DataLossRiskError(FilesystemAccessError):
    """The original was removed but the replacement link could not be created."""

    def __init__(self, path: str, target: str, cause: Optional[BaseException] = None):
        self.target = target
        super().__init__(
            path,
            cause=cause,
            message=f"DATA LOSS RISK: original removed but link to {target} failed ({cause})"
        )


class ConfigurationError(RmDupesError, ValueError):
    """Conflicting or missing configuration, detected before the scan starts."""


class ScanCancelled(RmDupesError):
    """Raised out of a scan that was cooperatively stopped. Partial results are discarded."""
