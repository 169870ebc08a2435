"""File operations and duplicate set action services."""

from .file_service import FileService
from .action_service import ActionExecutor, ActionReport, ActionFailure, FailureKind, ScanSummary

__all__ = ["FileService", "ActionExecutor", "ActionReport", "ActionFailure", "FailureKind", "ScanSummary"]
