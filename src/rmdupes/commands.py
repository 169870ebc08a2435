"""
Unified command orchestrator for a duplicate scan followed by one action.
This is the SINGLE source of truth for the workflow — the CLI only adds console glue.
"""
import logging
from typing import Callable, List, Optional, Sequence, Tuple, Union
import os

from rmdupes.core.errors import ConfigurationError
from rmdupes.core.interfaces import KeeperChooser, ScanEventSink
from rmdupes.core.models import ActionParams, ScanConfiguration, ScanStatistics, SortStrategy, as_root_list
from rmdupes.core.registry import DuplicateSetRegistry
from rmdupes.core.scanner import DirectoryWalker
from rmdupes.core.sorter import validate_access_time_tracking
from rmdupes.services.action_service import ActionExecutor, ActionReport

logger = logging.getLogger(__name__)

Roots = Union[str, os.PathLike, Sequence[Union[str, os.PathLike]]]


class DuplicateScanCommand:
    """
    Orchestrates the entire workflow:
    1. Validate configuration (before any I/O on the scanned trees)
    2. Scan the roots into a finished registry
    3. Run the selected action against it

    Usage:
        config = ScanConfiguration(recurse=True)
        command = DuplicateScanCommand()
        registry, report = command.execute(
            ["/data/photos"],
            config,
            ActionParams(action=Action.DELETE, no_prompt=True),
            sink=console_sink,
            stopped_flag=interrupt_event.is_set
        )

    A cancelled scan raises ScanCancelled out of execute(); no action runs in that case.
    """

    def __init__(self, walker: Optional[DirectoryWalker] = None):
        self._walker = walker or DirectoryWalker()

    @staticmethod
    def validate(roots: List[str], config: ScanConfiguration) -> None:
        """
        Raises:
            ConfigurationError: no roots given, or last-read-time ordering on a
                file system that does not record access times
        """
        if not roots:
            raise ConfigurationError("At least one search directory is required")
        if config.sort_strategy is SortStrategy.LAST_READ_TIME:
            validate_access_time_tracking(roots)

    def scan(
            self,
            roots: Roots,
            config: ScanConfiguration,
            sink: Optional[ScanEventSink] = None,
            stopped_flag: Optional[Callable[[], bool]] = None
    ) -> DuplicateSetRegistry:
        root_list = as_root_list(roots)
        self.validate(root_list, config)
        return self._walker.scan(root_list, config, sink=sink, stopped_flag=stopped_flag)

    def execute(
            self,
            roots: Roots,
            config: ScanConfiguration,
            action_params: ActionParams,
            sink: Optional[ScanEventSink] = None,
            chooser: Optional[KeeperChooser] = None,
            stopped_flag: Optional[Callable[[], bool]] = None
    ) -> Tuple[DuplicateSetRegistry, ActionReport]:
        """
        Scan, then act.

        Returns:
            Tuple of (registry, action report)

        Raises:
            ConfigurationError: invalid configuration, raised before scanning
            ScanCancelled: stopped_flag fired during the scan; nothing was modified
        """
        # Built first so a missing chooser is rejected before the scan
        executor = ActionExecutor(action_params, chooser=chooser)
        registry = self.scan(roots, config, sink=sink, stopped_flag=stopped_flag)
        report = executor.execute(registry, stopped_flag=stopped_flag)
        return registry, report

    def get_statistics(self) -> Optional[ScanStatistics]:
        """Statistics of the last completed scan."""
        return self._walker.statistics
