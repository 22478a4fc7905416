from __future__ import annotations

from datetime import datetime
import re


# log files with timestamp "YYYY-MM-DD HH:MM:SS.SSS"
TIMESTAMP_PATTERN = r"\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}\.\d{3}"
STRPTIME_FORMAT = "%Y-%m-%d %H:%M:%S.%f"

# the capture group makes re.split keep the timestamps in its output
_split_on_timestamps = re.compile(f"({TIMESTAMP_PATTERN})").split
_match_timestamp = re.compile(TIMESTAMP_PATTERN).fullmatch


class MalformedTimestampError(ValueError):
    """
    Raised when text that has the shape of a timestamp is not a valid date and time,
    such as "2023-13-45 25:61:00.000".
    """
    def __init__(self, timestamp_text: str, source: str | None = None):
        self.timestamp_text = timestamp_text
        self.source = source
        where = f" in {source!r}" if source else ""
        super().__init__(f"malformed timestamp {timestamp_text!r}{where}")

    def with_source(self, source: str | None) -> MalformedTimestampError:
        return MalformedTimestampError(self.timestamp_text, source)


def split_sections(text: str) -> list[str]:
    """
    Split raw log text into sections that alternate between text that is not a
    timestamp, and a timestamp:

        ["header text", "2023-01-01 10:00:00.000", " first", "2023-01-01 10:00:01.000", ""]

    The first section is whatever preceded the first timestamp (possibly ""), and
    empty sections are kept in place, so that "".join(sections) == text.
    """
    return _split_on_timestamps(text)


def is_timestamp(section: str) -> bool:
    return _match_timestamp(section) is not None


def parse_timestamp(section: str) -> datetime:
    try:
        return datetime.strptime(section, STRPTIME_FORMAT)
    except ValueError as ve:
        raise MalformedTimestampError(section) from ve
