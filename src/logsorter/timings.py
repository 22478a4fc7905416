"""
Lightweight stopwatch instrumentation for logsorter phases.

Phases:
- read: loading each input file into memory
- split: dividing each file's text into timestamp and message sections
- build: pairing each timestamp with its message to make log entries
- merge: adding each file's entries to the ordered merger
- write: rendering and writing the merged entries
- total: the whole run

Repeated phases (one per input file) accumulate. The summary is printed at the
end of a run when --verbose is given, or when LOGSORTER_TIMINGS is set.
"""

from __future__ import annotations

from contextlib import contextmanager
import os
import time


def timings_enabled_by_env() -> bool:
    return os.getenv("LOGSORTER_TIMINGS", "0").lower() in {"1", "true", "on"}


class PhaseTimings:
    def __init__(self) -> None:
        # phase name -> elapsed seconds, in the order phases were first seen
        self.elapsed: dict[str, float] = {}

    @contextmanager
    def phase(self, name: str):
        start = time.perf_counter()
        try:
            yield
        finally:
            self.elapsed[name] = self.elapsed.get(name, 0.0) + time.perf_counter() - start

    def elapsed_ms(self, name: str) -> float:
        return self.elapsed.get(name, 0.0) * 1000

    def as_summary_lines(self) -> list[str]:
        if not self.elapsed:
            return ["No timings recorded."]
        width = max(len(name) for name in self.elapsed)
        return [
            "Timing summary:",
            *(f"  {name:<{width}}  {self.elapsed_ms(name):10.1f} ms" for name in self.elapsed),
        ]
