from __future__ import annotations

from datetime import datetime
import enum
from typing import NamedTuple


class RenderStyle(enum.Enum):
    # "2023-01-05 09:03:02.005", same shape as the timestamps in the input files
    CANONICAL = "canonical"
    # "2023-1-5 9:3:2.5", every numeric field printed without padding
    LEGACY = "legacy"


def format_timestamp(dt: datetime, style: RenderStyle = RenderStyle.CANONICAL) -> str:
    """
    format a datetime to microseconds, truncate to just millis
    """
    if style is RenderStyle.LEGACY:
        return (
            f"{dt.year}-{dt.month}-{dt.day}"
            f" {dt.hour}:{dt.minute}:{dt.second}.{dt.microsecond // 1000}"
        )
    return dt.strftime("%Y-%m-%d %H:%M:%S.%f")[:23]


class LogEntry(NamedTuple):
    """
    A single log record: the timestamp that introduced it, and all the text
    up to the next timestamp (or the end of the file).
    """
    timestamp: datetime
    message: str = ""

    def render(self, style: RenderStyle = RenderStyle.CANONICAL) -> str:
        # an empty message still gets the separating space
        return f"{format_timestamp(self.timestamp, style)} {self.message.strip()}"

    def __str__(self):
        return self.render()
