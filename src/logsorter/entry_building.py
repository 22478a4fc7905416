from __future__ import annotations

from collections.abc import Generator, Sequence

from .log_entry import LogEntry
from .segmenting import MalformedTimestampError, is_timestamp, parse_timestamp, split_sections


class LogEntryBuilder:
    """
    Callable class to walk the sections returned by split_sections, and pair each
    timestamp with the message text that follows it.

    Converts:
        ["Log started\\n",
         "2023-07-14 08:00:04.000", " ERROR  Request processed unsuccessfully\\n"
                                    "Traceback (last line is latest):\\n"
                                    "    sample.py: line 32\\n",
         "2023-07-14 08:00:06.000", "",
         "2023-07-14 08:00:06.000", " INFO   User authentication failed\\n"]

    to three log entries, the middle one with an empty message. Text ahead of the
    first timestamp has no entry to belong to, and is dropped.
    """
    def __init__(self, source: str | None = None):
        self.source = source

    def __call__(self, sections: Sequence[str]) -> Generator[LogEntry, None, None]:
        i = 0
        num_sections = len(sections)
        while i < num_sections:
            section = sections[i]
            i += 1
            if not is_timestamp(section):
                continue

            try:
                timestamp = parse_timestamp(section)
            except MalformedTimestampError as mte:
                raise mte.with_source(self.source) from mte.__cause__

            # a following timestamp starts the next entry, anything else is this
            # entry's message
            if i < num_sections and not is_timestamp(sections[i]):
                message = sections[i]
                i += 1
            else:
                message = ""

            yield LogEntry(timestamp, message)


def build_entries(text: str, source: str | None = None) -> list[LogEntry]:
    return list(LogEntryBuilder(source)(split_sections(text)))
