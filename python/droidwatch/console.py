"""Passthrough of the monitored app's ``System.out``/``System.err`` lines."""

from __future__ import annotations

import sys
import threading
from typing import Optional, TextIO

from .entry import LogEntry
from .processes import ProcessTracker


STDOUT_TAG = "System.out"
STDERR_TAG = "System.err"


class ConsoleMirror:
    """Forward console lines of active processes to local streams.

    Stream selection follows the entry's severity (``W``/``E``/``F`` go to the
    error stream); the tag itself does not pick the stream.
    """

    def __init__(
        self,
        tracker: ProcessTracker,
        *,
        stdout: Optional[TextIO] = None,
        stderr: Optional[TextIO] = None,
        stdout_tag: str = STDOUT_TAG,
        stderr_tag: str = STDERR_TAG,
    ) -> None:
        self.tracker = tracker
        self._stdout = stdout
        self._stderr = stderr
        self.tags = frozenset((stdout_tag, stderr_tag))
        self._lock = threading.Lock()

    @property
    def stdout(self) -> TextIO:
        return self._stdout if self._stdout is not None else sys.stdout

    @property
    def stderr(self) -> TextIO:
        return self._stderr if self._stderr is not None else sys.stderr

    def forward(self, entry: LogEntry) -> bool:
        if entry.source not in self.tags or not self.tracker.is_active(entry.pid):
            return False
        if entry.use_error_stream:
            self.write_error(entry.message)
        else:
            self._write(self.stdout, entry.message)
        return True

    def write_error(self, text: str) -> None:
        self._write(self.stderr, text)

    def _write(self, stream: TextIO, text: str) -> None:
        # The error channel pump writes from its own thread.
        with self._lock:
            print(text, file=stream, flush=True)


__all__ = ["ConsoleMirror", "STDOUT_TAG", "STDERR_TAG"]
