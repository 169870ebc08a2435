"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

services/action_service.py
Runs the selected action (summary, delete or link) against a finished registry.

For each duplicate set a keeper is designated: the first member in the active sort
order, or the member picked by the keeper chooser in interactive mode. The keeper is
re-checked on disk and never touched; every other member is re-checked, removed and,
for the link action, replaced with a symbolic link to the keeper.
Failures are tallied per member and never stop sibling members or sibling sets.
"""
import logging
import stat
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List, Optional

from rmdupes.core.errors import ConfigurationError, DataLossRiskError, FilesystemAccessError
from rmdupes.core.interfaces import KeeperChooser
from rmdupes.core.models import Action, ActionParams, DuplicateSet, FileRecord
from rmdupes.core.registry import DuplicateSetRegistry
from rmdupes.services.file_service import FileService

logger = logging.getLogger(__name__)


class FailureKind(Enum):
    ACCESS_ERROR = "access-error"
    KEEPER_MISSING = "keeper-missing"
    CONTENT_CHANGED = "content-changed"
    DATA_LOSS_RISK = "data-loss-risk"
    INVALID_CHOICE = "invalid-choice"


@dataclass
class ActionFailure:
    path: str
    kind: FailureKind
    error: Optional[BaseException] = None
    set_index: int = 0

    @property
    def message(self) -> str:
        return str(self.error) if self.error is not None else self.kind.value


@dataclass
class ScanSummary:
    files_examined: int
    duplicate_file_count: int
    duplicate_set_count: int
    space_occupied: int

    @classmethod
    def from_registry(cls, registry: DuplicateSetRegistry) -> "ScanSummary":
        return cls(
            files_examined=registry.files_examined(),
            duplicate_file_count=registry.file_count(),
            duplicate_set_count=registry.set_count(),
            space_occupied=registry.space_occupied(),
        )


@dataclass
class ActionReport:
    """Final tally of one action run."""
    action: Action
    summary: ScanSummary
    sets_processed: int = 0
    sets_skipped: int = 0
    files_removed: int = 0
    links_created: int = 0
    space_reclaimed: int = 0
    cancelled: bool = False
    failures: List[ActionFailure] = field(default_factory=list)

    @property
    def failure_count(self) -> int:
        return len(self.failures)

    @property
    def data_loss_risks(self) -> List[ActionFailure]:
        return [f for f in self.failures if f.kind is FailureKind.DATA_LOSS_RISK]

    @property
    def succeeded(self) -> bool:
        return not self.failures and not self.cancelled


class ActionExecutor:
    """
    State machine over one finished registry with exactly one action selected.
    """

    def __init__(
            self,
            params: ActionParams,
            chooser: Optional[KeeperChooser] = None,
            file_service: type = FileService
    ):
        if params.action.is_destructive and not params.no_prompt and chooser is None:
            raise ConfigurationError("Interactive mode requires a keeper chooser (or enable no-prompt mode).")
        self.params = params
        self.chooser = chooser
        self.file_service = file_service

    @staticmethod
    def summarize(registry: DuplicateSetRegistry) -> ScanSummary:
        return ScanSummary.from_registry(registry)

    def execute(
            self,
            registry: DuplicateSetRegistry,
            stopped_flag: Optional[Callable[[], bool]] = None
    ) -> ActionReport:
        """
        Run the action. Destructive actions only run against a finalized registry,
        and stopping is honoured between sets, never inside one.
        """
        if not registry.is_finalized:
            raise ValueError("Actions can only run against a completed scan.")

        report = ActionReport(action=self.params.action, summary=self.summarize(registry))
        if self.params.action is Action.SUMMARY:
            return report

        for index, dup_set in enumerate(registry, 1):
            if stopped_flag and stopped_flag():
                logger.info(f"Stopping before set {index}; remaining sets left untouched")
                report.cancelled = True
                break
            self._process_set(index, dup_set, report)

        logger.info(
            f"{self.params.action.value}: {report.sets_processed} sets processed, "
            f"{report.files_removed} files removed, {report.links_created} links created, "
            f"{report.failure_count} failures"
        )
        return report

    def _choose_keeper(self, dup_set: DuplicateSet) -> Optional[int]:
        if self.params.no_prompt:
            return 0
        index = self.chooser(dup_set)
        if index is None:
            return None
        if not isinstance(index, int) or not 0 <= index < dup_set.member_count:
            raise ValueError(f"Keeper index {index!r} out of range for a set of {dup_set.member_count}")
        return index

    def _process_set(self, index: int, dup_set: DuplicateSet, report: ActionReport) -> None:
        try:
            keeper_index = self._choose_keeper(dup_set)
        except ValueError as e:
            logger.warning(f"Set {index} left untouched: {e}")
            report.failures.append(ActionFailure(dup_set[0].path, FailureKind.INVALID_CHOICE, e, index))
            report.sets_skipped += 1
            return

        if keeper_index is None:
            logger.debug(f"Set {index} skipped by user")
            report.sets_skipped += 1
            return

        keeper = dup_set[keeper_index]
        if not self._still_matches(keeper):
            logger.warning(f"Keeper {keeper.path} is missing or changed; leaving set {index} untouched")
            report.failures.append(ActionFailure(keeper.path, FailureKind.KEEPER_MISSING, set_index=index))
            report.sets_skipped += 1
            return

        for position, member in enumerate(dup_set):
            if position == keeper_index:
                continue
            self._process_member(index, member, keeper, report)
        report.sets_processed += 1

    def _still_matches(self, record: FileRecord) -> bool:
        try:
            return self._matches_on_disk(record)
        except FilesystemAccessError:
            return False

    def _matches_on_disk(self, record: FileRecord) -> bool:
        """
        True if the path still holds what was scanned: a regular file of the recorded size or,
        for a followed link, a link whose target is still the scanned file.
        Raises:
            FilesystemAccessError: the path (or the link target) cannot be read
        """
        st = self.file_service.current_state(record.path)
        if record.is_link:
            if not stat.S_ISLNK(st.st_mode):
                return False
            st = self.file_service.target_state(record.path)
            if (st.st_dev, st.st_ino) != record.identity:
                return False
        return stat.S_ISREG(st.st_mode) and st.st_size == record.size

    def _process_member(self, index: int, member: FileRecord, keeper: FileRecord, report: ActionReport) -> None:
        try:
            unchanged = self._matches_on_disk(member)
        except FilesystemAccessError as e:
            logger.warning(f"Cannot remove {member.path}: {e}")
            report.failures.append(ActionFailure(member.path, FailureKind.ACCESS_ERROR, e, index))
            return

        if not unchanged:
            logger.warning(f"{member.path} changed since the scan; leaving it in place")
            report.failures.append(ActionFailure(member.path, FailureKind.CONTENT_CHANGED, set_index=index))
            return

        try:
            self.file_service.remove_file(member.path, use_trash=self.params.use_trash)
        except FilesystemAccessError as e:
            logger.warning(f"Failed to remove {member.path}: {e}")
            report.failures.append(ActionFailure(member.path, FailureKind.ACCESS_ERROR, e, index))
            return

        report.files_removed += 1
        # Unlinking a followed link frees nothing, its target stays in place
        if not member.is_link:
            report.space_reclaimed += member.size

        if self.params.action is not Action.LINK:
            return

        try:
            self.file_service.create_symlink(member.path, keeper.path)
        except FilesystemAccessError as e:
            if self.params.use_trash or member.is_link:
                logger.warning(f"Link {member.path} -> {keeper.path} failed; the content is still recoverable: {e}")
                report.failures.append(ActionFailure(member.path, FailureKind.ACCESS_ERROR, e, index))
            else:
                risk = DataLossRiskError(member.path, keeper.path, e.cause or e)
                logger.error(str(risk))
                report.failures.append(ActionFailure(member.path, FailureKind.DATA_LOSS_RISK, risk, index))
            return

        report.links_created += 1
