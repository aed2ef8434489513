"""Interpretation of ``Process`` signal lines.

The process manager logs lines such as::

    I/Process ( 9213): Sending signal. PID: 9213 SIG: 9

Signal 9 ends the process; signal 3 (SIGQUIT, the VM's dump request) marks
the end of an uncaught exception and triggers a trace flush.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Optional

from .entry import LogEntry
from .processes import ProcessTracker
from .stacktrace import StackTraceAggregator


logger = logging.getLogger(__name__)

SIGNAL_TAG = "Process"
SIGQUIT = 3
SIGKILL = 9

_SIGNAL_RE = re.compile(r"PID:\s+(\d+)\s+SIG:\s+(\d+)")


@dataclass(frozen=True)
class ProcessSignal:
    pid: int
    signal: int


def parse_signal(message: str) -> Optional[ProcessSignal]:
    match = _SIGNAL_RE.search(message)
    if not match:
        return None
    return ProcessSignal(pid=int(match.group(1)), signal=int(match.group(2)))


class SignalInterpreter:
    def __init__(
        self,
        tracker: ProcessTracker,
        aggregator: StackTraceAggregator,
        *,
        signal_tag: str = SIGNAL_TAG,
    ) -> None:
        self.tracker = tracker
        self.aggregator = aggregator
        self.signal_tag = signal_tag

    def applies_to(self, entry: LogEntry) -> bool:
        return entry.source == self.signal_tag

    def handle(self, entry: LogEntry) -> Optional[ProcessSignal]:
        """Act on a signal line; non-matching messages and other signals are ignored."""
        sig = parse_signal(entry.message)
        if sig is None:
            return None
        if sig.signal == SIGKILL:
            self.tracker.end_process(sig.pid)
        elif sig.signal == SIGQUIT:
            self.aggregator.flush(sig.pid)
        else:
            logger.debug("ignoring signal %d for pid %d", sig.signal, sig.pid)
        return sig


__all__ = [
    "ProcessSignal",
    "SignalInterpreter",
    "parse_signal",
    "SIGNAL_TAG",
    "SIGKILL",
    "SIGQUIT",
]
