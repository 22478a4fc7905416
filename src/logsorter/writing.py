from __future__ import annotations

from collections.abc import Iterable, Iterator
import os
from pathlib import Path
import shutil
import sys
import tempfile

import littletable as lt

from .log_entry import LogEntry, RenderStyle, format_timestamp

STDOUT_NAME = "-"


def render_lines(entries: Iterable[LogEntry], style: RenderStyle = RenderStyle.CANONICAL) -> Iterator[str]:
    return (entry.render(style) for entry in entries)


def write_log_entries(
        entries: Iterable[LogEntry],
        output_file: str,
        style: RenderStyle = RenderStyle.CANONICAL,
        encoding: str = "utf-8",
) -> int:
    """
    Write entries to output_file, one per line, replacing any existing content.

    The lines go to a temporary file in the same directory first, which is then
    renamed over output_file - if anything fails along the way, output_file is
    left as it was.
    """
    if output_file == STDOUT_NAME:
        return _write_lines(render_lines(entries, style), sys.stdout)

    # write through a symlink to the file it points at
    output_path = Path(output_file).resolve()
    fd, temp_name = tempfile.mkstemp(
        dir=output_path.parent, prefix=f".{output_path.name}.", suffix=".tmp"
    )
    try:
        with open(fd, "w", encoding=encoding) as temp_file:
            count = _write_lines(render_lines(entries, style), temp_file)
        _copy_destination_mode(temp_name, output_path)
        os.replace(temp_name, output_path)
    except BaseException:
        Path(temp_name).unlink(missing_ok=True)
        raise
    return count


def _copy_destination_mode(temp_name: str, output_path: Path) -> None:
    # mkstemp creates files as 0600; a replaced file keeps its mode, a new file
    # gets the umask default
    if output_path.exists():
        shutil.copymode(output_path, temp_name)
    else:
        umask = os.umask(0)
        os.umask(umask)
        os.chmod(temp_name, 0o666 & ~umask)


def _write_lines(lines: Iterable[str], outfile) -> int:
    count = 0
    for count, line in enumerate(lines, start=1):
        outfile.write(line)
        outfile.write("\n")
    return count


def export_csv(
        entries: Iterable[LogEntry],
        csv_file: str,
        style: RenderStyle = RenderStyle.CANONICAL,
) -> None:
    # build a littletable Table for easy CSV output
    entries_table = lt.Table()
    entries_table.insert_many(
        {"timestamp": format_timestamp(entry.timestamp, style), "message": entry.message.strip()}
        for entry in entries
    )
    entries_table.csv_export(csv_file, fieldnames=["timestamp", "message"])
