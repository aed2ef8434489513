"""Stack-trace capture from ``AndroidRuntime`` error lines."""

from __future__ import annotations

import logging
import threading
from collections import deque
from typing import Deque, Dict, List, Optional

from .entry import LogEntry, Severity
from .listeners import ListenerRegistry, TraceSnapshot
from .processes import ProcessTracker


logger = logging.getLogger(__name__)

RUNTIME_TAG = "AndroidRuntime"
NOISE_PREFIX = "Uncaught handler"
MAX_ANOMALIES = 256


class StackTraceAggregator:
    """Buffers runtime error lines until a signal 3 flushes them to listeners.

    By default a single buffer is shared by the whole session, so traces from
    two processes crashing at once interleave. ``partition_by_pid=True`` keys
    the buffer by pid instead; that is a behaviour change and is off unless
    asked for.
    """

    def __init__(
        self,
        listeners: ListenerRegistry,
        tracker: ProcessTracker,
        *,
        runtime_tag: str = RUNTIME_TAG,
        noise_prefix: str = NOISE_PREFIX,
        partition_by_pid: bool = False,
        max_anomalies: int = MAX_ANOMALIES,
    ) -> None:
        self.listeners = listeners
        self.tracker = tracker
        self.runtime_tag = runtime_tag
        self.noise_prefix = noise_prefix
        self.partition_by_pid = partition_by_pid
        # pids of the most recent empty flushes
        self.anomalies: Deque[int] = deque(maxlen=max_anomalies)
        self._buffers: Dict[Optional[int], List[str]] = {}
        self._lock = threading.Lock()

    def _key(self, pid: Optional[int]) -> Optional[int]:
        return pid if self.partition_by_pid else None

    def is_trace_line(self, entry: LogEntry) -> bool:
        return entry.source == self.runtime_tag and entry.severity is Severity.ERROR

    def offer(self, entry: LogEntry) -> bool:
        """Append *entry* if it belongs to a trace of an active process."""
        if not self.is_trace_line(entry) or not self.tracker.is_active(entry.pid):
            return False
        if entry.message.startswith(self.noise_prefix):
            return False
        with self._lock:
            self._buffers.setdefault(self._key(entry.pid), []).append(entry.message)
        return True

    def pending(self, pid: Optional[int] = None) -> TraceSnapshot:
        with self._lock:
            return tuple(self._buffers.get(self._key(pid), ()))

    def flush(self, pid: int) -> TraceSnapshot:
        """Snapshot and clear the buffer, then hand the snapshot to listeners.

        An empty buffer is recorded as an anomaly; the empty snapshot is still
        delivered.
        """
        with self._lock:
            snapshot: TraceSnapshot = tuple(self._buffers.pop(self._key(pid), ()))
        if not snapshot:
            self.anomalies.append(pid)
            logger.warning("process %d got signal 3, but there's no stack trace", pid)
        self.listeners.dispatch(snapshot)
        return snapshot

    def clear(self) -> None:
        with self._lock:
            self._buffers.clear()


__all__ = ["StackTraceAggregator", "RUNTIME_TAG", "NOISE_PREFIX"]
