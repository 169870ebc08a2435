"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/path_filter.py
Decides, per file-system entry, whether it is eligible for scanning.

Rules, applied in order:
1. Symbolic link while links are not followed -> exclude (never read, never traversed)
2. Hidden entry while hidden entries are skipped -> exclude
3. Directory -> include (the walker decides whether to descend)
4. Anything that is not a regular file (FIFO, socket, device) -> exclude
5. Regular file outside [min_size, max_size] -> exclude
6. Otherwise -> include

Metadata failures (permission denied, dangling link target, I/O error) yield ERROR
with the wrapped exception; the caller reports it and treats the entry as excluded.
"""

import logging
import os
import stat
import sys
from dataclasses import dataclass
from typing import Optional

from rmdupes.core.errors import FilesystemAccessError
from rmdupes.core.models import FilterDecision, ScanConfiguration

logger = logging.getLogger(__name__)

_FILE_ATTRIBUTE_HIDDEN = getattr(stat, "FILE_ATTRIBUTE_HIDDEN", 0x2)
_UF_HIDDEN = getattr(stat, "UF_HIDDEN", 0x8000)


@dataclass(frozen=True)
class FilterResult:
    decision: FilterDecision
    path: str
    stat: Optional[os.stat_result] = None
    is_symlink: bool = False
    error: Optional[FilesystemAccessError] = None

    @property
    def included(self) -> bool:
        return self.decision is FilterDecision.INCLUDE

    @property
    def is_dir(self) -> bool:
        return self.stat is not None and stat.S_ISDIR(self.stat.st_mode)

    @property
    def is_file(self) -> bool:
        return self.stat is not None and stat.S_ISREG(self.stat.st_mode)


def is_hidden(path: str, st: Optional[os.stat_result] = None) -> bool:
    """
    Platform-appropriate hidden check: a leading dot everywhere, plus the
    hidden attribute on Windows and the UF_HIDDEN flag on macOS/BSD.
    """
    name = os.path.basename(os.path.normpath(path))
    if name.startswith(".") and name not in (".", ".."):
        return True
    if st is None:
        return False
    if sys.platform == "win32":
        return bool(getattr(st, "st_file_attributes", 0) & _FILE_ATTRIBUTE_HIDDEN)
    return bool(getattr(st, "st_flags", 0) & _UF_HIDDEN)


class PathFilter:
    """
    Stateless eligibility check bound to one ScanConfiguration.
    """

    def __init__(self, config: ScanConfiguration):
        self.config = config

    def evaluate(self, path: str) -> FilterResult:
        """
        Classify one entry. Never raises for per-entry problems.
        Returns:
            FilterResult with decision INCLUDE, EXCLUDE or ERROR. INCLUDE results
            carry the (link-followed) stat result of the entry.
        """
        try:
            lst = os.lstat(path)
        except OSError as e:
            logger.debug(f"Could not read metadata of {path}: {e}")
            return FilterResult(FilterDecision.ERROR, path, error=FilesystemAccessError(path, e))

        is_link = stat.S_ISLNK(lst.st_mode)
        if is_link and not self.config.follow_symlinks:
            logger.debug(f"Skipping symbolic link: {path}")
            return FilterResult(FilterDecision.EXCLUDE, path, stat=lst, is_symlink=True)

        if self.config.skip_hidden and is_hidden(path, lst):
            logger.debug(f"Skipping hidden entry: {path}")
            return FilterResult(FilterDecision.EXCLUDE, path, stat=lst, is_symlink=is_link)

        st = lst
        if is_link:
            try:
                st = os.stat(path)
            except OSError as e:
                logger.debug(f"Could not follow symbolic link {path}: {e}")
                return FilterResult(
                    FilterDecision.ERROR, path, is_symlink=True, error=FilesystemAccessError(path, e)
                )

        if stat.S_ISDIR(st.st_mode):
            return FilterResult(FilterDecision.INCLUDE, path, stat=st, is_symlink=is_link)

        if not stat.S_ISREG(st.st_mode):
            logger.debug(f"Skipping special file: {path}")
            return FilterResult(FilterDecision.EXCLUDE, path, stat=st, is_symlink=is_link)

        if not self.config.size_passes(st.st_size):
            logger.debug(f"Skipping {path} (size {st.st_size} bytes outside range)")
            return FilterResult(FilterDecision.EXCLUDE, path, stat=st, is_symlink=is_link)

        return FilterResult(FilterDecision.INCLUDE, path, stat=st, is_symlink=is_link)
