from __future__ import annotations

import bisect
from collections.abc import Iterable, Iterator
import heapq
from operator import attrgetter
from typing import Protocol

from .log_entry import LogEntry

_by_timestamp = attrgetter("timestamp")


class OrderedMerger(Protocol):
    """
    Accepts the entries of each log file in turn (by calling add_entries once per
    file), and iterates over all of them in timestamp order. Entries with equal
    timestamps are returned in the order they were added.
    """
    def add_entries(self, entries: Iterable[LogEntry]) -> None: ...

    def __iter__(self) -> Iterator[LogEntry]: ...

    def __len__(self) -> int: ...


class InsertionMerger:
    """
    Keeps a list that is always in timestamp order, inserting each entry as it
    arrives just ahead of the first entry with a later timestamp. Since bisect_right
    puts the new entry after any entries with the same timestamp, ties stay in
    arrival order.
    """
    def __init__(self):
        self._entries: list[LogEntry] = []

    def insert(self, entry: LogEntry) -> None:
        bisect.insort_right(self._entries, entry, key=_by_timestamp)

    def add_entries(self, entries: Iterable[LogEntry]) -> None:
        for entry in entries:
            self.insert(entry)

    def __iter__(self) -> Iterator[LogEntry]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)


class SortThenMerger:
    """
    Collects all entries, and sorts them once when they are read back. list.sort is
    stable, so ties stay in arrival order.
    """
    def __init__(self):
        self._entries: list[LogEntry] = []
        self._is_sorted = True

    def add_entries(self, entries: Iterable[LogEntry]) -> None:
        self._entries.extend(entries)
        self._is_sorted = False

    def __iter__(self) -> Iterator[LogEntry]:
        if not self._is_sorted:
            self._entries.sort(key=_by_timestamp)
            self._is_sorted = True
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)


class HeapMerger:
    """
    Sorts each file's entries on their own, and then uses a heap to pull entries
    in timestamp order from all the files. heapq.merge returns equal keys in the
    order of the input sequences, so ties come out first file first.
    """
    def __init__(self):
        self._entries_per_file: list[list[LogEntry]] = []

    def add_entries(self, entries: Iterable[LogEntry]) -> None:
        self._entries_per_file.append(sorted(entries, key=_by_timestamp))

    def __iter__(self) -> Iterator[LogEntry]:
        return heapq.merge(*self._entries_per_file, key=_by_timestamp)

    def __len__(self) -> int:
        return sum(len(entries) for entries in self._entries_per_file)


MERGE_STRATEGIES: dict[str, type] = {
    "sort": SortThenMerger,
    "insertion": InsertionMerger,
    "heap": HeapMerger,
}


def make_merger(strategy_name: str) -> OrderedMerger:
    try:
        merger_class = MERGE_STRATEGIES[strategy_name]
    except KeyError:
        raise ValueError(
            f"unknown merge strategy {strategy_name!r}, choose from {', '.join(MERGE_STRATEGIES)}"
        ) from None
    return merger_class()
