"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

services/file_service.py
File-system checks and mutations used by the delete and link actions.
Every failure surfaces as FilesystemAccessError carrying the offending path.
"""
import logging
import os
from pathlib import Path

from send2trash import send2trash

from rmdupes.core.errors import FilesystemAccessError

logger = logging.getLogger(__name__)


class FileService:
    """
    Thin wrappers around os / send2trash with uniform error reporting.
    """

    @staticmethod
    def current_state(file_path: str) -> os.stat_result:
        """Fresh lstat() of a path, used to re-check a member right before touching it."""
        try:
            return os.lstat(file_path)
        except OSError as e:
            raise FilesystemAccessError(file_path, e) from e

    @staticmethod
    def target_state(file_path: str) -> os.stat_result:
        """Fresh stat() of a path, following a symbolic link to its target."""
        try:
            return os.stat(file_path)
        except OSError as e:
            raise FilesystemAccessError(file_path, e) from e

    @staticmethod
    def move_to_trash(file_path: str) -> None:
        """Moves a file to the system trash."""
        path = Path(file_path)

        if not path.exists() and not path.is_symlink():
            raise FilesystemAccessError(file_path, FileNotFoundError(2, "No such file or directory", file_path))

        try:
            send2trash(str(path))
        except OSError as e:
            raise FilesystemAccessError(file_path, e) from e
        except Exception as e:
            # send2trash raises its own TrashPermissionError and platform-specific errors
            raise FilesystemAccessError(file_path, message=f"Failed to move to trash: {e}") from e

    @staticmethod
    def delete_file(file_path: str) -> None:
        """Permanently removes a file."""
        try:
            os.remove(file_path)
        except OSError as e:
            raise FilesystemAccessError(file_path, e) from e

    @classmethod
    def remove_file(cls, file_path: str, use_trash: bool = False) -> None:
        """Removes a file either permanently or into the trash."""
        if use_trash:
            cls.move_to_trash(file_path)
        else:
            cls.delete_file(file_path)
        logger.debug(f"Removed {file_path} ({'trash' if use_trash else 'unlink'})")

    @staticmethod
    def create_symlink(link_path: str, target_path: str) -> None:
        """Creates `link_path` as a symbolic link pointing at the absolute `target_path`."""
        try:
            os.symlink(os.path.abspath(target_path), link_path)
        except (OSError, NotImplementedError) as e:
            raise FilesystemAccessError(link_path, e) from e
