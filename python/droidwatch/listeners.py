"""Registration and fan-out of captured stack traces."""

from __future__ import annotations

import logging
import threading
from typing import Callable, Iterable, List, Tuple


logger = logging.getLogger(__name__)

TraceSnapshot = Tuple[str, ...]
TraceListener = Callable[[TraceSnapshot], None]


class ListenerRegistry:
    """Thread-safe listener set with copy-on-dispatch delivery.

    ``dispatch`` copies the listener set under the lock and invokes listeners
    without holding it, so callbacks may add or remove listeners (including
    themselves). Membership is re-checked right before each invocation, so a
    listener removed mid-dispatch is skipped for the rest of that dispatch and
    every later one. The only overlap is a call whose check passed before
    ``remove()`` acquired the lock; that single call still runs. Each listener
    gets a snapshot at most once per dispatch. Listeners added during a
    dispatch first receive the next snapshot.
    """

    def __init__(self, *, isolate_errors: bool = True) -> None:
        self.isolate_errors = isolate_errors
        self._listeners: List[TraceListener] = []
        self._lock = threading.Lock()

    def add(self, listener: TraceListener) -> None:
        if not callable(listener):
            raise TypeError(f"listener must be callable, got {listener!r}")
        with self._lock:
            if listener not in self._listeners:
                self._listeners.append(listener)

    def remove(self, listener: TraceListener) -> None:
        with self._lock:
            if listener in self._listeners:
                self._listeners.remove(listener)

    def clear(self) -> None:
        with self._lock:
            self._listeners.clear()

    def snapshot(self) -> List[TraceListener]:
        with self._lock:
            return list(self._listeners)

    def __contains__(self, listener: object) -> bool:
        with self._lock:
            return listener in self._listeners

    def __len__(self) -> int:
        with self._lock:
            return len(self._listeners)

    def dispatch(self, trace: Iterable[str]) -> int:
        """Deliver *trace* to every registered listener; returns the delivery count."""
        snapshot: TraceSnapshot = tuple(trace)
        delivered = 0
        for listener in self.snapshot():
            with self._lock:
                if listener not in self._listeners:
                    continue
            if self.isolate_errors:
                try:
                    listener(snapshot)
                except Exception:
                    logger.exception("trace listener %r failed", listener)
                    continue
            else:
                listener(snapshot)
            delivered += 1
        return delivered


__all__ = ["ListenerRegistry", "TraceListener", "TraceSnapshot"]
