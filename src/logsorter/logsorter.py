#
# logsorter.py
#
# Utility for merging multiple log files into a single log file, in timestamp order.
#

from __future__ import annotations

import argparse
from collections.abc import Callable, Iterable, Iterator
from pathlib import Path
import sys
from typing import Protocol

from rich.console import Console
from rich.table import Table

from .entry_building import LogEntryBuilder
from .file_reading import read_log_file
from .log_entry import LogEntry, RenderStyle
from .merging import MERGE_STRATEGIES, OrderedMerger, make_merger
from .segmenting import split_sections
from .timings import PhaseTimings, timings_enabled_by_env
from .writing import STDOUT_NAME, export_csv, write_log_entries


def make_argument_parser():
    epilog_notes = """
    Each log entry starts with a timestamp in `YYYY-MM-DD HH:MM:SS.SSS` format, and runs
    up to the next timestamp, so entries may span multiple lines. Text before the first
    timestamp in a file (such as a header) is ignored.

    Entries from all the input files are written to the output file in timestamp order.
    Entries with the same timestamp are kept in the order the files were given on the
    command line. Use "-" as the output file name to write to stdout.
    """

    parser = argparse.ArgumentParser(prog="logsorter", epilog=epilog_notes)
    parser.add_argument(
        "files",
        nargs="+",
        metavar="FILE",
        help="log files to be merged, followed by the output file name"
    )
    parser.add_argument(
        "--strategy", "-st",
        choices=list(MERGE_STRATEGIES),
        default="sort",
        help="algorithm used to merge and sort log entries (default: sort)"
    )
    parser.add_argument(
        "--legacy-format",
        action="store_true",
        help="write timestamps without zero-padding (as in 2023-1-5 9:3:2.5)"
    )
    parser.add_argument("--csv", "-csv", help="also save merged logs to CSV file")
    parser.add_argument("--verbose", "-v", action="store_true", help="show progress and timings on stderr")
    parser.add_argument(
        "--encoding", "-enc",
        type=str,
        default=sys.getfilesystemencoding(),
        help="encoding to use when reading and writing log files (defaults to the system default encoding)")

    return parser


class LogMergeStrategy(Protocol):
    """
    The steps of a log merge run, in the order run() calls them.
    """
    def parse_inputs(self, files: list[str]) -> tuple[str, list[str]]: ...

    def parse_log_files(self, input_files: Iterable[str]) -> Iterator[list[LogEntry]]: ...

    def merge_and_sort(self, entries_per_file: Iterable[list[LogEntry]]) -> OrderedMerger: ...

    def write_to_file(self, entries: Iterable[LogEntry]) -> int: ...


class LogSorterApplication:
    def __init__(
            self,
            config: argparse.Namespace,
            merger_factory: Callable[[], OrderedMerger] | None = None,
    ):
        self.config = config

        self.merger_factory = merger_factory or (lambda: make_merger(config.strategy))
        self.render_style = RenderStyle.LEGACY if config.legacy_format else RenderStyle.CANONICAL
        self.encoding = config.encoding
        self.save_to_csv = config.csv

        self.verbose = config.verbose
        self.console = Console(stderr=True, quiet=not self.verbose)
        self.timings = PhaseTimings()
        self.show_timings = self.verbose or timings_enabled_by_env()

        self.output_file: str = ""
        self.input_files: list[str] = []
        self.entry_counts: dict[str, int] = {}

    def run(self) -> int:
        with self.timings.phase("total"):
            self.output_file, self.input_files = self.parse_inputs(self.config.files)

            # all files are parsed and merged before the output file is opened
            merged_entries = self.merge_and_sort(self.parse_log_files(self.input_files))
            count = self.write_to_file(merged_entries)

            if self.save_to_csv:
                export_csv(merged_entries, self.save_to_csv, self.render_style)

        self.console.print(f"Merged {count} log entries into {self.output_file}")
        self._print_entry_counts()
        if self.show_timings:
            Console(stderr=True).print("\n".join(self.timings.as_summary_lines()), highlight=False)
        return count

    def parse_inputs(self, files: list[str]) -> tuple[str, list[str]]:
        if len(files) < 2:
            raise ValueError("expected one or more input files, followed by an output file")

        *input_files, output_file = files
        for input_file in input_files:
            if not Path(input_file).is_file():
                raise FileNotFoundError(f"input file {input_file!r} does not exist")
            self.console.print(f"Input log file: {input_file}")

        if output_file != STDOUT_NAME:
            self._check_output_dir(output_file, "output")
        self.console.print(f"Output log file: {output_file}")

        if self.save_to_csv:
            self._check_output_dir(self.save_to_csv, "CSV")
            self.console.print(f"CSV file: {self.save_to_csv}")

        return output_file, input_files

    @staticmethod
    def _check_output_dir(file_name: str, description: str):
        output_dir = Path(file_name).parent
        if not output_dir.is_dir():
            raise NotADirectoryError(f"{description} directory {str(output_dir)!r} does not exist")

    def parse_log_files(self, input_files: Iterable[str]) -> Iterator[list[LogEntry]]:
        for input_file in input_files:
            self.console.print(f"Reading {input_file}...")
            with self.timings.phase("read"):
                text = read_log_file(input_file, self.encoding)

            with self.timings.phase("split"):
                sections = split_sections(text)

            with self.timings.phase("build"):
                entries = list(LogEntryBuilder(input_file)(sections))

            self.entry_counts[input_file] = len(entries)
            yield entries

    def merge_and_sort(self, entries_per_file: Iterable[list[LogEntry]]) -> OrderedMerger:
        merger = self.merger_factory()
        for entries in entries_per_file:
            with self.timings.phase("merge"):
                merger.add_entries(entries)
        return merger

    def write_to_file(self, entries: Iterable[LogEntry]) -> int:
        self.console.print(f"Writing merged entries to {self.output_file}...")
        with self.timings.phase("write"):
            return write_log_entries(entries, self.output_file, self.render_style, self.encoding)

    def _print_entry_counts(self):
        if not self.verbose:
            return
        counts_table = Table("file", "entries")
        for fname, count in self.entry_counts.items():
            counts_table.add_row(fname, str(count))
        self.console.print(counts_table)


def main(argv: list[str] | None = None):

    parser = make_argument_parser()
    args_ns = parser.parse_args(argv)
    if len(args_ns.files) < 2:
        parser.error("at least one input file and an output file are required")

    try:
        app = LogSorterApplication(args_ns)
        app.run()
    except (OSError, ValueError) as exc:
        # MalformedTimestampError is a ValueError
        parser.exit(1, f"{parser.prog}: error: {exc}\n")


if __name__ == '__main__':
    main()
