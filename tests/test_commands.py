"""
Tests for DuplicateScanCommand — the single workflow used by the CLI.
"""
from unittest import mock

import pytest

from rmdupes.commands import DuplicateScanCommand
from rmdupes.core.errors import ConfigurationError, ScanCancelled
from rmdupes.core.models import Action, ActionParams, ScanConfiguration, SortStrategy


def write(path, content=b"duplicate"):
    path.write_bytes(content)
    return path


class TestDuplicateScanCommand:

    def test_scan_and_summarise(self, temp_dir, test_files):
        command = DuplicateScanCommand()
        registry, report = command.execute(
            [temp_dir], ScanConfiguration(recurse=True), ActionParams(Action.SUMMARY)
        )

        assert registry.set_count() == 2
        assert report.summary.duplicate_set_count == 2
        assert command.get_statistics().files_examined == len(test_files)
        assert all(p.exists() for p in test_files.values())

    def test_delete_workflow(self, temp_dir):
        keep = write(temp_dir / "a.txt")
        drop = write(temp_dir / "b.txt")

        _, report = DuplicateScanCommand().execute(
            temp_dir, ScanConfiguration(), ActionParams(Action.DELETE, no_prompt=True)
        )

        assert keep.exists()
        assert not drop.exists()
        assert report.files_removed == 1

    def test_no_roots_is_configuration_error(self):
        with pytest.raises(ConfigurationError):
            DuplicateScanCommand().scan([], ScanConfiguration())

    def test_missing_chooser_rejected_before_scanning(self, temp_dir):
        command = DuplicateScanCommand()
        with mock.patch.object(command, "scan") as scan:
            with pytest.raises(ConfigurationError):
                command.execute(temp_dir, ScanConfiguration(), ActionParams(Action.DELETE))
        scan.assert_not_called()

    def test_interrupted_scan_deletes_nothing(self, temp_dir):
        files = [write(temp_dir / f"f{i}") for i in range(5)]

        with pytest.raises(ScanCancelled):
            DuplicateScanCommand().execute(
                temp_dir,
                ScanConfiguration(),
                ActionParams(Action.DELETE, no_prompt=True),
                stopped_flag=lambda: True
            )

        assert all(f.exists() for f in files)

    def test_last_read_time_checked_before_scan(self, temp_dir):
        config = ScanConfiguration(sort_strategy=SortStrategy.LAST_READ_TIME)
        with mock.patch(
                "rmdupes.commands.validate_access_time_tracking",
                side_effect=ConfigurationError("noatime")
        ) as check:
            with pytest.raises(ConfigurationError):
                DuplicateScanCommand().scan(temp_dir, config)
        check.assert_called_once_with([str(temp_dir)])

    def test_other_strategies_skip_access_time_check(self, temp_dir):
        with mock.patch("rmdupes.commands.validate_access_time_tracking") as check:
            DuplicateScanCommand().scan(temp_dir, ScanConfiguration(sort_strategy=SortStrategy.SIZE))
        check.assert_not_called()
