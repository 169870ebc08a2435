"""
Critical CLI tests — focus on data safety, switch validation and what the user sees.
"""
import io
from unittest import mock

import pytest

from rmdupes.cli import CLIApplication, ConsoleEventSink, main
from rmdupes.core.errors import FilesystemAccessError, ScanCancelled
from rmdupes.core.models import Action, DuplicateSet, Fingerprint, FileRecord, SetOrder, SortStrategy
from rmdupes.services.file_service import FileService


def make_duplicates(directory, names, content=b"identical content"):
    paths = []
    for name in names:
        path = directory / name
        path.write_bytes(content)
        paths.append(path)
    return paths


class TestArgumentParsing:

    def test_defaults(self, tmp_path):
        args = CLIApplication.parse_args([str(tmp_path), "-m"])
        assert args.search_directories == [str(tmp_path)]
        assert args.summarise
        assert not args.recurse
        assert args.minsize == "0"
        assert args.maxsize is None
        assert args.jobs == 1

    def test_short_switches(self, tmp_path):
        args = CLIApplication.parse_args([str(tmp_path), "-r", "-s", "-l", "-N", "-M", "-S", "-t", "-q"])
        assert args.recurse and args.symlinks and args.link and args.noprompt
        assert args.sort_last_write
        assert args.show_size and args.show_time and args.quiet

    def test_create_config(self, tmp_path):
        app = CLIApplication()
        args = app.parse_args([
            str(tmp_path), "-m", "-r", "-c", "--descending", "--minsize", "1K", "--maxsize", "2M",
            "--nohidden", "--set-order", "size", "-j", "3"
        ])

        config = app.create_config(args)

        assert config.recurse
        assert config.skip_hidden
        assert config.sort_strategy is SortStrategy.CREATION_TIME
        assert config.descending
        assert config.min_size == 1024
        assert config.max_size == 2 * 1024 * 1024
        assert config.set_order is SetOrder.SIZE
        assert config.max_workers == 3
        assert app.create_action_params(args).action is Action.SUMMARY


class TestValidation:

    @pytest.mark.parametrize("argv", [
        ["-N"],                      # no-prompt without delete/link
        ["-m", "--trash"],           # trash without delete/link
        [],                          # no operation
        ["-m", "-d"],                # two operations
        ["-m", "-c", "-M"],          # two sort orders
        ["-m", "--minsize", "big"],  # unparseable size
        ["-m", "--minsize", "2K", "--maxsize", "1K"],
        ["-m", "-j", "0"],
    ])
    def test_rejected_switch_combinations(self, tmp_path, argv):
        with pytest.raises(SystemExit) as exc_info:
            CLIApplication().run([str(tmp_path)] + argv)
        assert exc_info.value.code == 1

    def test_missing_directory(self, tmp_path, capsys):
        with pytest.raises(SystemExit) as exc_info:
            CLIApplication().run([str(tmp_path / "nope"), "-m"])
        assert exc_info.value.code == 1
        assert "Directory not found" in capsys.readouterr().err

    def test_interactive_mode_needs_a_terminal(self, tmp_path, capsys):
        """Under pytest stdin is not a TTY, so prompting must be refused up front."""
        make_duplicates(tmp_path, ["a", "b"])
        with pytest.raises(SystemExit):
            CLIApplication().run([str(tmp_path), "-d"])
        assert "--noprompt" in capsys.readouterr().err
        assert (tmp_path / "b").exists()


class TestDeletionSafety:

    def test_summary_never_deletes(self, tmp_path):
        make_duplicates(tmp_path, ["a.txt", "b.txt"])

        with mock.patch.object(FileService, "delete_file") as delete, \
                mock.patch.object(FileService, "move_to_trash") as trash:
            code = CLIApplication().run([str(tmp_path), "-m"])

        assert code == 0
        delete.assert_not_called()
        trash.assert_not_called()

    def test_delete_keeps_exactly_one_per_set(self, tmp_path):
        files = make_duplicates(tmp_path, ["file0.txt", "file1.txt", "file2.txt"])

        code = CLIApplication().run([str(tmp_path), "-d", "-N", "-q"])

        assert code == 0
        assert [f.exists() for f in files] == [True, False, False]

    def test_delete_with_trash(self, tmp_path):
        make_duplicates(tmp_path, ["a.txt", "b.txt"])

        with mock.patch.object(FileService, "move_to_trash") as trash:
            CLIApplication().run([str(tmp_path), "-d", "-N", "--trash", "-q"])

        trash.assert_called_once_with(str(tmp_path / "b.txt"))

    def test_partial_failure_gives_exit_code_1(self, tmp_path, capsys):
        make_duplicates(tmp_path, ["a.txt", "b.txt", "c.txt"])
        real_delete = FileService.delete_file

        def flaky_delete(path):
            if path.endswith("b.txt"):
                raise FilesystemAccessError(path, PermissionError(13, "Permission denied"))
            real_delete(path)

        with mock.patch.object(FileService, "delete_file", side_effect=flaky_delete):
            code = CLIApplication().run([str(tmp_path), "-d", "-N", "-q"])

        assert code == 1
        assert not (tmp_path / "c.txt").exists()
        assert "could not be processed" in capsys.readouterr().out


class TestOutput:

    def test_summary_lists_sets(self, tmp_path, capsys):
        make_duplicates(tmp_path, ["a.txt", "b.txt"])
        make_duplicates(tmp_path, ["unique.txt"], b"something else")

        CLIApplication().run([str(tmp_path), "-m", "-S"])

        out = capsys.readouterr().out
        assert f"Starting scan of directory {tmp_path}" in out
        assert "Duplicate sets found:  1" in out
        assert "Set 1" in out
        assert str(tmp_path / "a.txt") in out
        assert "unique.txt" not in out
        assert "[17B]" in out

    def test_quiet_hides_scan_messages(self, tmp_path, capsys):
        make_duplicates(tmp_path, ["a.txt", "b.txt"])

        CLIApplication().run([str(tmp_path), "-m", "-q"])

        captured = capsys.readouterr()
        assert "Starting scan" not in captured.out
        assert "Files encountered" not in captured.err
        assert "Duplicate sets found" in captured.out

    def test_reverse_listing(self, tmp_path, capsys):
        make_duplicates(tmp_path, ["a1", "a2"], b"first")
        make_duplicates(tmp_path, ["b1", "b2"], b"second!")

        CLIApplication().run([str(tmp_path), "-m", "-q", "--reverse"])

        out = capsys.readouterr().out
        assert out.index("Set 2") < out.index("Set 1")
        assert out.index(str(tmp_path / "b1")) < out.index(str(tmp_path / "a1"))

    def test_verbose_shows_member_order(self, tmp_path, capsys):
        CLIApplication().run([str(tmp_path), "-m", "-q", "-v", "-M", "--descending"])
        out = capsys.readouterr().out
        assert "Member order: Last write time (descending)" in out
        assert "Completed in" in out

    def test_no_duplicates(self, tmp_path, capsys):
        make_duplicates(tmp_path, ["only.txt"])
        assert CLIApplication().run([str(tmp_path), "-m", "-q"]) == 0
        assert "No duplicate sets found" in capsys.readouterr().out

    def test_sink_error_messages(self):
        out, err = io.StringIO(), io.StringIO()
        sink = ConsoleEventSink(stream=out, error_stream=err)

        sink.on_scan_progress(10, 1)
        sink.on_scan_error("/dir", "/dir/file", OSError("boom"))
        sink.on_scan_error(None, "/missing", OSError("gone"))

        text = err.getvalue()
        assert "Files encountered: 10" in text
        assert "while scanning the file or directory /dir/file - boom" in text
        assert "while scanning /missing - gone" in text


class TestInteractivePrompt:

    @pytest.fixture
    def dup_set(self):
        fp = Fingerprint(size=3, content_hash=b"\x00" * 32)
        return DuplicateSet(fp, [FileRecord("/x/a", 3), FileRecord("/x/b", 3), FileRecord("/x/c", 3)])

    def test_number_is_one_based(self, dup_set, capsys):
        app = CLIApplication()
        with mock.patch("builtins.input", side_effect=["0", "9", "abc", "2"]):
            assert app.prompt_keeper(dup_set) == 1
        assert "between 1 and 3" in capsys.readouterr().out

    def test_skip(self, dup_set):
        app = CLIApplication()
        with mock.patch("builtins.input", return_value="s"):
            assert app.prompt_keeper(dup_set) is None
        assert not app.stopped_flag()

    def test_quit_requests_stop(self, dup_set):
        app = CLIApplication()
        with mock.patch("builtins.input", return_value="q"):
            assert app.prompt_keeper(dup_set) is None
        assert app.stopped_flag()

    def test_end_of_input_quits(self, dup_set):
        app = CLIApplication()
        with mock.patch("builtins.input", side_effect=EOFError):
            assert app.prompt_keeper(dup_set) is None
        assert app.stopped_flag()


class TestMain:

    def test_cancelled_scan_exits_130(self, tmp_path, capsys):
        with mock.patch("sys.argv", ["rmdupes", str(tmp_path), "-m"]), \
                mock.patch.object(CLIApplication, "install_signal_handler"), \
                mock.patch("rmdupes.cli.DuplicateScanCommand.execute", side_effect=ScanCancelled):
            with pytest.raises(SystemExit) as exc_info:
                main()
        assert exc_info.value.code == 130
        assert "No files were modified" in capsys.readouterr().err

    def test_keyboard_interrupt_exits_130(self, tmp_path):
        with mock.patch("sys.argv", ["rmdupes", str(tmp_path), "-m"]), \
                mock.patch.object(CLIApplication, "install_signal_handler"), \
                mock.patch.object(CLIApplication, "run", side_effect=KeyboardInterrupt):
            with pytest.raises(SystemExit) as exc_info:
                main()
        assert exc_info.value.code == 130

    def test_success_exits_0(self, tmp_path):
        with mock.patch("sys.argv", ["rmdupes", str(tmp_path), "-m", "-q"]), \
                mock.patch.object(CLIApplication, "install_signal_handler"):
            with pytest.raises(SystemExit) as exc_info:
                main()
        assert exc_info.value.code == 0
