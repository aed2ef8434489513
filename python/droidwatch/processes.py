"""Tracking of application processes that are alive on the device."""

from __future__ import annotations

import logging
from typing import Iterator, Optional, Set

from .entry import LogEntry


logger = logging.getLogger(__name__)

START_KEYWORD = "onStart"
STOP_KEYWORD = "onStop"


class ProcessTracker:
    """Set of pids currently considered live inside the monitored app.

    Only lifecycle markers and kill signals mutate the set; console output
    never does.
    """

    def __init__(self) -> None:
        self._active: Set[int] = set()

    def start_process(self, pid: int, name: Optional[str] = None) -> None:
        if pid not in self._active:
            logger.debug("process %s started at pid %d", name or "?", pid)
        self._active.add(pid)

    def end_process(self, pid: int) -> None:
        if pid in self._active:
            logger.debug("process %d stopped", pid)
        self._active.discard(pid)

    def is_active(self, pid: Optional[int]) -> bool:
        return pid is not None and pid in self._active

    def clear(self) -> None:
        self._active.clear()

    @property
    def active(self) -> frozenset:
        return frozenset(self._active)

    def __contains__(self, pid: object) -> bool:
        return pid in self._active

    def __iter__(self) -> Iterator[int]:
        return iter(sorted(self._active))

    def __len__(self) -> int:
        return len(self._active)


def is_lifecycle_marker(entry: LogEntry, marker_tag: str) -> bool:
    return entry.source == marker_tag or entry.message.startswith(marker_tag)


def apply_lifecycle_marker(tracker: ProcessTracker, entry: LogEntry) -> bool:
    """Apply an ``onStart``/``onStop`` marker; returns False if neither keyword is present."""
    if entry.pid is None:
        return False
    if START_KEYWORD in entry.message:
        tracker.start_process(entry.pid, entry.source)
        return True
    if STOP_KEYWORD in entry.message:
        tracker.end_process(entry.pid)
        return True
    return False


__all__ = [
    "ProcessTracker",
    "START_KEYWORD",
    "STOP_KEYWORD",
    "is_lifecycle_marker",
    "apply_lifecycle_marker",
]
