"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/scanner.py
Directory walker: traverses one or more roots, filters entries, fingerprints
size-colliding files and builds the duplicate set registry.
Features:
- Deterministic depth-first traversal (entries sorted by name), recursive or single-level
- Per-entry errors are reported through the event sink and never abort the scan
- Symlink cycles are detected against the chain of ancestor directories
- Each underlying file (device, inode) is fingerprinted once, even when reachable twice
- Optional thread pool for content hashing; traversal and progress stay on the caller's thread
- Cooperative cancellation via stopped_flag; a cancelled scan raises ScanCancelled
"""

import logging
import os
import stat
import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Callable, List, Optional, Sequence, Set, Tuple, Union

from rmdupes.core.errors import FilesystemAccessError, ScanCancelled, SymlinkCycleError
from rmdupes.core.hasher import HasherImpl
from rmdupes.core.interfaces import FileScanner, Hasher, ScanEventSink
from rmdupes.core.models import (
    FileRecord, FilterDecision, ScanConfiguration, ScanError, ScanStatistics, as_root_list
)
from rmdupes.core.path_filter import PathFilter
from rmdupes.core.registry import DuplicateSetRegistry
from rmdupes.core.sorter import Sorter

logger = logging.getLogger(__name__)

Identity = Tuple[int, int]


class DirectoryWalker(FileScanner):
    """
    Scans directories and returns a finished DuplicateSetRegistry.
    The walker itself keeps no state between scans apart from the statistics of the last run.

    Attributes:
        hasher: Fingerprint engine used for content hashes
        statistics: ScanStatistics of the most recent completed scan
    """

    def __init__(self, hasher: Optional[Hasher] = None):
        self.hasher = hasher or HasherImpl()
        self.statistics: Optional[ScanStatistics] = None

    def scan(
            self,
            roots: Union[str, os.PathLike, Sequence[Union[str, os.PathLike]]],
            config: ScanConfiguration,
            sink: Optional[ScanEventSink] = None,
            stopped_flag: Optional[Callable[[], bool]] = None
    ) -> DuplicateSetRegistry:
        run = _ScanRun(self.hasher, config, sink, stopped_flag)
        registry = run.execute(as_root_list(roots))
        self.statistics = run.stats
        return registry


class _ScanRun:
    """State of one scan invocation."""

    def __init__(
            self,
            hasher: Hasher,
            config: ScanConfiguration,
            sink: Optional[ScanEventSink],
            stopped_flag: Optional[Callable[[], bool]]
    ):
        self.hasher = hasher
        self.config = config
        self.sink = sink
        self.stopped_flag = stopped_flag
        self.path_filter = PathFilter(config)
        self.registry = DuplicateSetRegistry()
        self.stats = ScanStatistics()

        self._event_lock = threading.Lock()
        self._stats_lock = threading.Lock()
        self._seen_files: Set[Identity] = set()
        self._visited_dirs: Set[Identity] = set()
        self._executor: Optional[ThreadPoolExecutor] = None
        self._futures: List[Future] = []
        self._last_progress = 0

    # ---------- lifecycle ----------

    def execute(self, roots: List[str]) -> DuplicateSetRegistry:
        logger.debug(f"Starting scan of {roots}")
        logger.debug(
            f"Filters: recurse={self.config.recurse}, follow_symlinks={self.config.follow_symlinks}, "
            f"min_size={self.config.min_size}, max_size={self.config.max_size}, "
            f"skip_hidden={self.config.skip_hidden}, workers={self.config.max_workers}"
        )
        start_time = time.time()

        if self.config.max_workers > 1:
            self._executor = ThreadPoolExecutor(
                max_workers=self.config.max_workers, thread_name_prefix="rmdupes-hash"
            )

        try:
            for root in roots:
                if self._stopped():
                    break
                self._notify("on_scan_started", root)
                self._walk_root(root)
        finally:
            self._drain_workers()

        if self._stopped():
            logger.info("Scan cancelled; discarding partial results")
            raise ScanCancelled("Scan cancelled before completion")

        if self.stats.files_examined > self._last_progress:
            self._emit_progress()

        self.registry.finalize(
            Sorter(self.config.sort_strategy, self.config.descending),
            files_examined=self.stats.files_examined,
            set_order=self.config.set_order,
        )
        self.stats.duplicate_set_count = self.registry.set_count()
        self.stats.duplicate_file_count = self.registry.file_count()
        self.stats.space_occupied = self.registry.space_occupied()

        logger.debug(f"Total scan time: {time.time() - start_time:.2f} seconds")
        logger.info(
            f"Scan completed: {self.stats.files_examined} files examined, "
            f"{self.stats.duplicate_set_count} duplicate sets, {self.stats.error_count} errors"
        )
        self._notify(
            "on_scan_completed",
            self.stats.files_examined,
            self.stats.duplicate_file_count,
            self.stats.duplicate_set_count,
            self.stats.space_occupied,
        )
        return self.registry

    def _drain_workers(self) -> None:
        """Waits for in-flight hashing; queued work is dropped when the scan was cancelled."""
        if self._executor is None:
            return
        self._executor.shutdown(wait=True, cancel_futures=self._stopped())
        for future in self._futures:
            if not future.cancelled():
                # Re-raises unexpected worker failures on the caller's thread
                future.result()
        self._executor = None
        self._futures = []

    def _stopped(self) -> bool:
        return bool(self.stopped_flag and self.stopped_flag())

    # ---------- traversal ----------

    def _walk_root(self, root: str) -> None:
        try:
            st = os.stat(root)
        except OSError as e:
            self._report_error(None, root, FilesystemAccessError(root, e))
            return

        if not stat.S_ISDIR(st.st_mode):
            self._report_error(None, root, FilesystemAccessError(root, message="not a directory"))
            return

        root_id = (st.st_dev, st.st_ino)
        if root_id in self._visited_dirs:
            logger.debug(f"Root already covered by an earlier root: {root}")
            return
        self._visited_dirs.add(root_id)

        stack: List[Tuple[str, Tuple[Identity, ...]]] = [(root, (root_id,))]
        while stack:
            if self._stopped():
                logger.debug("Scan interrupted by user")
                return
            dir_path, ancestors = stack.pop()
            subdirs = self._scan_directory(dir_path, ancestors)
            # Reversed so the stack pops subdirectories in name order
            stack.extend(reversed(subdirs))

    def _scan_directory(
            self,
            dir_path: str,
            ancestors: Tuple[Identity, ...]
    ) -> List[Tuple[str, Tuple[Identity, ...]]]:
        try:
            with os.scandir(dir_path) as it:
                names = sorted(entry.name for entry in it)
        except OSError as e:
            self._report_error(dir_path, dir_path, FilesystemAccessError(dir_path, e))
            return []

        subdirs = []
        for name in names:
            if self._stopped():
                return []
            path = os.path.join(dir_path, name)
            result = self.path_filter.evaluate(path)

            if result.decision is FilterDecision.ERROR:
                self._report_error(dir_path, path, result.error)
                continue
            if result.decision is FilterDecision.EXCLUDE:
                continue

            if result.is_dir:
                if not self.config.recurse:
                    continue
                ident = (result.stat.st_dev, result.stat.st_ino)
                if ident in ancestors:
                    target = os.path.realpath(path)
                    self._report_error(dir_path, path, SymlinkCycleError(path, target))
                    continue
                if ident in self._visited_dirs:
                    logger.debug(f"Skipping directory already scanned through another path: {path}")
                    continue
                self._visited_dirs.add(ident)
                subdirs.append((path, ancestors + (ident,)))
            else:
                self._process_file(path, result.stat, result.is_symlink)

        return subdirs

    # ---------- fingerprinting ----------

    def _process_file(self, path: str, st: os.stat_result, is_link: bool = False) -> None:
        ident = (st.st_dev, st.st_ino)
        if ident in self._seen_files:
            logger.debug(f"Skipping file already scanned through another path: {path}")
            return
        self._seen_files.add(ident)

        record = FileRecord.from_stat(path, st, is_link)
        with self._stats_lock:
            self.stats.files_examined += 1
        logger.debug(f"Accepted file: {record.name} ({record.size} bytes)")

        to_hash = self.registry.claim(record)
        if to_hash:
            if self._executor is not None:
                self._futures.append(self._executor.submit(self._hash_and_insert, to_hash))
            else:
                self._hash_and_insert(to_hash)

        if self.stats.files_examined - self._last_progress >= self.config.progress_interval:
            self._emit_progress()

    def _hash_and_insert(self, records: List[FileRecord]) -> None:
        """Hashes each record once and files it; unreadable files are reported and dropped."""
        for record in records:
            if self._stopped():
                return
            try:
                digest = self.hasher.content_hash(record.path)
            except FilesystemAccessError as e:
                self._report_error(os.path.dirname(record.path), record.path, e)
                continue
            with self._stats_lock:
                self.stats.files_hashed += 1
            self.registry.insert(record, digest)

    # ---------- notifications ----------

    def _emit_progress(self) -> None:
        self._last_progress = self.stats.files_examined
        self._notify("on_scan_progress", self.stats.files_examined, self.registry.set_count())

    def _report_error(self, context_path: Optional[str], path: str, error: BaseException) -> None:
        logger.warning(f"Error scanning {path}: {error}")
        with self._stats_lock:
            self.stats.errors.append(ScanError(path=path, error=error, context_path=context_path))
        self._notify("on_scan_error", context_path, path, error)

    def _notify(self, event: str, *args) -> None:
        if self.sink is None:
            return
        handler = getattr(self.sink, event, None)
        if handler is None:
            return
        with self._event_lock:
            handler(*args)
