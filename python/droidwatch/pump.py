"""Line sources feeding a device session.

A line source delivers text lines from two channels (the primary log stream
and the error stream) in emission order, one reader thread per channel.
Anything with ``start(on_line, on_error_line)`` and ``close()`` can stand in
for :class:`LogcatSource`.
"""

from __future__ import annotations

import logging
import subprocess
import threading
from typing import Callable, List, Optional, Sequence, TextIO


logger = logging.getLogger(__name__)

LineHandler = Callable[[str], None]


class StreamPump:
    """Reads a text stream line by line on a daemon thread."""

    def __init__(self, stream: TextIO, handler: LineHandler, *, name: str = "droidwatch-pump") -> None:
        self.stream = stream
        self.handler = handler
        self.name = name
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> "StreamPump":
        if self.running:
            return self
        self._stop.clear()
        self._thread = threading.Thread(target=self._run, name=self.name, daemon=True)
        self._thread.start()
        return self

    def stop(self) -> None:
        self._stop.set()

    def join(self, timeout: Optional[float] = None) -> None:
        thread = self._thread
        if thread and thread.is_alive() and thread is not threading.current_thread():
            thread.join(timeout=timeout)

    def _run(self) -> None:
        try:
            while not self._stop.is_set():
                try:
                    line = self.stream.readline()
                except (OSError, ValueError):
                    # stream closed underneath us during shutdown
                    break
                if not line:
                    break
                try:
                    self.handler(line.rstrip("\r\n"))
                except Exception:
                    logger.exception("%s: line handler failed", self.name)
        finally:
            self._stop.set()


class LogcatSource:
    """Spawns ``adb logcat`` and pumps its stdout and stderr."""

    def __init__(self, argv: Sequence[str], *, encoding: str = "utf-8") -> None:
        self.argv = list(argv)
        self.encoding = encoding
        self.process: Optional[subprocess.Popen] = None
        self._pumps: List[StreamPump] = []

    def start(self, on_line: LineHandler, on_error_line: LineHandler) -> None:
        if self.process is not None:
            raise RuntimeError("line source already started")
        logger.debug("starting %s", " ".join(self.argv))
        self.process = subprocess.Popen(
            self.argv,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
            encoding=self.encoding,
            errors="replace",
            bufsize=1,
        )
        assert self.process.stdout is not None and self.process.stderr is not None
        self._pumps = [
            StreamPump(self.process.stdout, on_line, name="logcat-stdout").start(),
            StreamPump(self.process.stderr, on_error_line, name="logcat-stderr").start(),
        ]

    def close(self) -> None:
        proc = self.process
        if proc is not None and proc.poll() is None:
            proc.terminate()
            try:
                proc.wait(timeout=5.0)
            except subprocess.TimeoutExpired:
                logger.debug("logcat terminate timeout, killing pid %d", proc.pid)
                proc.kill()
                proc.wait()
        for pump in self._pumps:
            pump.stop()
            pump.join(timeout=0.5)
        self._pumps = []
        if proc is not None:
            for stream in (proc.stdout, proc.stderr):
                if stream is not None:
                    stream.close()


__all__ = ["LineHandler", "StreamPump", "LogcatSource"]
