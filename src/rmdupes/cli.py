#!/usr/bin/env python3
"""
rmdupes CLI — Command line interface for duplicate file detection and removal.
Parses switches into one immutable ScanConfiguration and one ActionParams, then hands
both to DuplicateScanCommand. Everything printed here is presentation only.
"""
from __future__ import annotations  # Enable postponed evaluation of annotations (PEP 563)
import argparse
import os
import signal
import sys
import threading
import time
from pathlib import Path
from typing import List, Optional, NoReturn
import logging

logging.basicConfig(
    level=logging.ERROR,
    format="%(levelname)-8s | %(name)-25s | %(message)s"
)

# === EARLY DEPENDENCY VALIDATION ===
_MISSING_DEPS = []
try:
    from send2trash import send2trash  # noqa: F401
except ImportError:
    _MISSING_DEPS.append("send2trash")

if _MISSING_DEPS:
    print("❌ Missing required dependencies:", file=sys.stderr)
    print(f"   pip install {' '.join(_MISSING_DEPS)}", file=sys.stderr)
    sys.exit(1)

# === NORMAL IMPORTS (after validation) ===
from rmdupes import __version__
from rmdupes.aliases import SET_ORDER_ALIASES, SET_ORDER_CHOICES, SET_ORDER_HELP_TEXT, SORT_HELP_TEXT, EPILOG_TEXT
from rmdupes.commands import DuplicateScanCommand
from rmdupes.core.errors import ConfigurationError, ScanCancelled
from rmdupes.core.interfaces import NullEventSink
from rmdupes.core.models import (
    Action, ActionParams, DuplicateSet, ScanConfiguration, select_action, select_sort_strategy
)
from rmdupes.core.registry import DuplicateSetRegistry
from rmdupes.services.action_service import ActionReport, FailureKind, ScanSummary
from rmdupes.utils.convert_utils import ConvertUtils


class ConsoleEventSink(NullEventSink):
    """Prints scan lifecycle events. Progress and errors go to stderr."""

    def __init__(self, stream=None, error_stream=None):
        self.stream = stream or sys.stdout
        self.error_stream = error_stream or sys.stderr
        self._progress_shown = False

    def on_scan_started(self, root_path: str) -> None:
        print(f"Starting scan of directory {root_path}...", file=self.stream)

    def on_scan_progress(self, files_examined: int, sets_found: int) -> None:
        self.error_stream.write(f"\r  Files encountered: {files_examined:,}, duplicate sets found: {sets_found:,}")
        self.error_stream.flush()
        self._progress_shown = True

    def on_scan_error(self, context_path: Optional[str], offending_path: str, error: BaseException) -> None:
        self._end_progress_line()
        if context_path is None:
            print(f"⚠️  An error occurred while scanning {offending_path} - {error}", file=self.error_stream)
        else:
            print(f"⚠️  An error occurred while scanning the file or directory {offending_path} - {error}",
                  file=self.error_stream)

    def on_scan_completed(
            self,
            files_examined: int,
            duplicate_file_count: int,
            sets_found: int,
            space_occupied: int
    ) -> None:
        self._end_progress_line()
        print(f"Files examined: {files_examined:,}, duplicate sets found: {sets_found:,}", file=self.stream)

    def _end_progress_line(self) -> None:
        if self._progress_shown:
            self.error_stream.write("\n")
            self._progress_shown = False


class CLIApplication:
    """Main CLI application controller."""

    def __init__(self):
        self.start_time: float = time.time()
        self.verbose: bool = False
        self.quiet: bool = False
        self.show_size: bool = False
        self.show_time: bool = False
        self._stop_event = threading.Event()

        # Fix encoding for Windows consoles to prevent UnicodeEncodeError
        for stream in (sys.stdout, sys.stderr):
            if hasattr(stream, "reconfigure"):
                stream.reconfigure(encoding='utf-8')

    @staticmethod
    def parse_args(args=None) -> argparse.Namespace:
        """Parse command-line arguments."""
        parser = argparse.ArgumentParser(
            prog="rmdupes",
            description="rmdupes — find duplicate files, then summarise, delete or link them",
            formatter_class=argparse.RawTextHelpFormatter,
            epilog=EPILOG_TEXT
        )

        parser.add_argument(
            "search_directories",
            nargs="+",
            metavar="DIRECTORY",
            help="Directory (or directories) to search"
        )
        parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

        # Traversal and filtering options
        parser.add_argument(
            "--recurse", "-r",
            action="store_true",
            help="For every directory encountered follow subdirectories within"
        )
        parser.add_argument(
            "--symlinks", "-s",
            action="store_true",
            help="Follow symbolic links instead of skipping them"
        )
        parser.add_argument(
            "--minsize",
            default="0",
            type=str,
            metavar="SIZE",
            help="Consider only files greater than or equal to SIZE (e.g. 500K, 1MB). Default: 0"
        )
        parser.add_argument(
            "--maxsize",
            default=None,
            type=str,
            metavar="SIZE",
            help="Consider only files less than or equal to SIZE. Default: no limit"
        )
        parser.add_argument(
            "--nohidden",
            action="store_true",
            help="Do not consider hidden files and directories"
        )
        parser.add_argument(
            "--jobs", "-j",
            default=1,
            type=int,
            metavar="N",
            help="Number of threads used for content hashing. Default: 1"
        )

        # Output options
        parser.add_argument("--size", "-S", action="store_true", dest="show_size",
                            help="Show size of duplicate files")
        parser.add_argument("--time", "-t", action="store_true", dest="show_time",
                            help="Show modified time of duplicate files")
        parser.add_argument("--quiet", "-q", action="store_true",
                            help="Hide the progress indicator and scan messages")
        parser.add_argument("--verbose", "-v", action="store_true",
                            help="Show informational log messages")
        parser.add_argument("--reverse", action="store_true",
                            help="List duplicate sets in reverse order")
        parser.add_argument(
            "--set-order",
            choices=SET_ORDER_CHOICES,
            default="discovery",
            help=SET_ORDER_HELP_TEXT
        )

        # Actions
        actions = parser.add_argument_group("operations (exactly one is required)")
        actions.add_argument("--summarise", "--summarize", "-m", action="store_true", dest="summarise",
                             help="Show a summary of the duplicate file information")
        actions.add_argument("--delete", "-d", action="store_true",
                             help="List the files of each set and prompt for one to keep, "
                                  "the remainder will be deleted")
        actions.add_argument("--link", "-l", action="store_true",
                             help="List the files of each set and prompt for one to keep, the remainder\n"
                                  "will be deleted and replaced with a symbolic link to the kept file")
        actions.add_argument("--noprompt", "-N", action="store_true",
                             help="With --delete or --link, keep the first file of each set without prompting")
        actions.add_argument("--trash", action="store_true",
                             help="With --delete or --link, move removed files to the system trash")

        # Sort orders
        sorting = parser.add_argument_group("member order", SORT_HELP_TEXT)
        sorting.add_argument("--name", "-n", action="store_true", dest="sort_name",
                             help="Order by file name (this is the default)")
        sorting.add_argument("--creation-time", "-c", action="store_true", dest="sort_creation",
                             help="Order by creation time")
        sorting.add_argument("--last-read-time", "-a", action="store_true", dest="sort_last_read",
                             help="Order by last read (access) time")
        sorting.add_argument("--last-write-time", "-M", action="store_true", dest="sort_last_write",
                             help="Order by last write (modification) time")
        sorting.add_argument("--by-size", "-b", action="store_true", dest="sort_size",
                             help="Order by file size")
        sorting.add_argument("--descending", action="store_true",
                             help="Sort in descending order")

        return parser.parse_args(args)

    def validate_args(self, args: argparse.Namespace) -> None:
        """Validate command-line arguments that the core cannot check."""
        destructive = args.delete or args.link
        if args.noprompt and not destructive:
            self.error_exit("--noprompt can only be used with --delete or --link")
        if args.trash and not destructive:
            self.error_exit("--trash can only be used with --delete or --link")

        # Prevent interactive prompts in non-TTY environments
        if destructive and not args.noprompt:
            if not sys.stdin.isatty() or not sys.stdout.isatty():
                self.error_exit(
                    "Cannot prompt for the file to keep in a non-interactive session.\n"
                    "Use --noprompt to keep the first file of each set when piping output or running in scripts."
                )

        for directory in args.search_directories:
            root_path = Path(directory)
            if not root_path.exists():
                self.error_exit(f"Directory not found: {directory}")
            if not root_path.is_dir():
                self.error_exit(f"Path is not a directory: {directory}")

        if args.jobs < 1:
            self.error_exit("--jobs must be at least 1")

    def create_config(self, args: argparse.Namespace) -> ScanConfiguration:
        """Create the immutable ScanConfiguration from CLI arguments."""
        try:
            sort_strategy = select_sort_strategy(
                name=args.sort_name,
                creation_time=args.sort_creation,
                last_read_time=args.sort_last_read,
                last_write_time=args.sort_last_write,
                size=args.sort_size,
            )
            return ScanConfiguration.from_human_readable(
                min_size_str=args.minsize,
                max_size_str=args.maxsize,
                recurse=args.recurse,
                follow_symlinks=args.symlinks,
                skip_hidden=args.nohidden,
                sort_strategy=sort_strategy,
                descending=args.descending,
                set_order=SET_ORDER_ALIASES[args.set_order],
                max_workers=args.jobs,
            )
        except ConfigurationError as e:
            self.error_exit(str(e))

    def create_action_params(self, args: argparse.Namespace) -> ActionParams:
        try:
            action = select_action(summary=args.summarise, delete=args.delete, link=args.link)
        except ConfigurationError as e:
            self.error_exit(str(e))
        return ActionParams(action=action, no_prompt=args.noprompt, use_trash=args.trash)

    # ---------- interaction ----------

    def stopped_flag(self) -> bool:
        """True once an interrupt (or 'q' at the prompt) asked the run to stop."""
        return self._stop_event.is_set()

    def install_signal_handler(self) -> None:
        """First Ctrl+C requests a cooperative stop; the second one aborts immediately."""
        def handler(signum, frame):
            if self._stop_event.is_set():
                raise KeyboardInterrupt
            self._stop_event.set()
            print("\nInterrupt received, stopping after the current operation...", file=sys.stderr)

        signal.signal(signal.SIGINT, handler)

    def prompt_keeper(self, dup_set: DuplicateSet) -> Optional[int]:
        """Interactive keeper selection: returns a 0-based index, or None to skip the set."""
        print()
        self.print_set(dup_set)
        count = dup_set.member_count
        while True:
            try:
                answer = input(f"Keep which file? [1-{count}, s = skip set, q = quit]: ").strip().lower()
            except EOFError:
                answer = "q"
            if answer in ("s", "skip", ""):
                return None
            if answer in ("q", "quit"):
                self._stop_event.set()
                return None
            if answer.isdigit() and 1 <= int(answer) <= count:
                return int(answer) - 1
            print(f"Please enter a number between 1 and {count}.")

    # ---------- output ----------

    def format_member(self, index: int, record) -> str:
        parts = [f"  [{index}] {record.path}"]
        if self.show_size:
            parts.append(f"[{ConvertUtils.bytes_to_human(record.size)}]")
        if self.show_time:
            parts.append(f"[{ConvertUtils.timestamp_to_human(record.last_write_time)}]")
        return " ".join(parts)

    def print_set(self, dup_set: DuplicateSet, number: Optional[int] = None) -> None:
        header = f"Set {number}" if number is not None else "Duplicate set"
        print(f"📁 {header} | Size: {ConvertUtils.bytes_to_human(dup_set.size)} | Files: {dup_set.member_count}")
        for idx, record in enumerate(dup_set, 1):
            print(self.format_member(idx, record))

    def output_summary(self, summary: ScanSummary) -> None:
        print("\nScan completed:-")
        print(f"  Files examined:        {summary.files_examined:,}")
        print(f"  Duplicate files found: {summary.duplicate_file_count:,}")
        print(f"  Duplicate sets found:  {summary.duplicate_set_count:,}")
        print(f"  Space occupied:        {summary.space_occupied:,} bytes "
              f"({ConvertUtils.bytes_to_human(summary.space_occupied)})")

    def output_sets(self, registry: DuplicateSetRegistry, reverse: bool = False) -> None:
        """Lists every set, numbered in forward order whichever direction is printed."""
        if not registry.set_count():
            print("\nNo duplicate sets found.")
            return
        total = registry.set_count()
        if reverse:
            numbered = zip(range(total, 0, -1), reversed(registry))
        else:
            numbered = zip(range(1, total + 1), registry)
        print()
        for number, dup_set in numbered:
            self.print_set(dup_set, number)

    def output_report(self, report: ActionReport) -> None:
        verb = "linked" if report.action is Action.LINK else "deleted"
        print()
        print("=" * 60)
        print(f"Sets processed: {report.sets_processed}, skipped: {report.sets_skipped}")
        print(f"Files {verb}: {report.files_removed if report.action is Action.DELETE else report.links_created}")
        print(f"Space reclaimed: {ConvertUtils.bytes_to_human(report.space_reclaimed)}")
        if report.cancelled:
            self.warning("Stopped before all sets were processed.")

        risks = report.data_loss_risks
        if risks:
            print("\n" + "!" * 60, file=sys.stderr)
            print(f"❌ DATA LOSS RISK: {len(risks)} file(s) were removed but could not be replaced with a link:",
                  file=sys.stderr)
            for failure in risks:
                print(f"  • {failure.path}", file=sys.stderr)
            print("!" * 60, file=sys.stderr)

        others = [f for f in report.failures if f.kind is not FailureKind.DATA_LOSS_RISK]
        if others:
            print(f"\n⚠️  {len(others)} file(s) could not be processed:")
            for failure in others[:10]:
                print(f"  • {failure.path}: {failure.kind.value} ({failure.message})")
            if len(others) > 10:
                print(f"  ...and {len(others) - 10} more files")

    def warning(self, message: str) -> None:
        """Print a warning message to stderr."""
        if not self.quiet:
            print(f"⚠️  {message}", file=sys.stderr)

    @staticmethod
    def error_exit(message: str, code: int = 1) -> NoReturn:
        """Print error and exit."""
        print(f"❌ Error: {message}", file=sys.stderr)
        sys.exit(code)

    def run(self, argv: Optional[List[str]] = None) -> int:
        """Main entry point. Returns the process exit code."""
        args = self.parse_args(argv)
        self.verbose = args.verbose
        self.quiet = args.quiet
        self.show_size = args.show_size
        self.show_time = args.show_time
        if self.verbose:
            logging.getLogger("rmdupes").setLevel(logging.INFO)

        self.validate_args(args)
        config = self.create_config(args)
        action_params = self.create_action_params(args)

        if self.verbose:
            order = "descending" if config.descending else "ascending"
            print(f"Member order: {config.sort_strategy.display_name} ({order})")

        sink = None if self.quiet else ConsoleEventSink()
        chooser = None if action_params.no_prompt else self.prompt_keeper
        command = DuplicateScanCommand()

        try:
            registry, report = command.execute(
                args.search_directories,
                config,
                action_params,
                sink=sink,
                chooser=chooser,
                stopped_flag=self.stopped_flag
            )
        except ConfigurationError as e:
            self.error_exit(str(e))
        except ScanCancelled:
            print("\n⚠️  Scan cancelled. No files were modified.", file=sys.stderr)
            return 130

        if action_params.action is Action.SUMMARY:
            self.output_summary(report.summary)
            self.output_sets(registry, reverse=args.reverse)
        else:
            self.output_report(report)

        if self.verbose:
            elapsed = time.time() - self.start_time
            print(f"\n✅ Completed in {elapsed:.2f} seconds")

        return 0 if report.succeeded else 1


def main() -> None:
    """Application entry point."""
    app = CLIApplication()
    app.install_signal_handler()
    try:
        sys.exit(app.run())
    except KeyboardInterrupt:
        print("\n⚠️  Operation cancelled by user (Ctrl+C)", file=sys.stderr)
        sys.exit(130)
    except Exception as e:
        if os.environ.get("DEBUG"):
            raise
        print(f"❌ Unexpected error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
