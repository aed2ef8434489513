"""Device session: wires a logcat stream into the trace pipeline.

Routing per line, in order:

    lifecycle marker   -> ProcessTracker start/stop
    ``Process`` line   -> SignalInterpreter (kill / trace flush)
    active pid only    -> StackTraceAggregator or ConsoleMirror

Lines are handled one at a time on the primary channel's reader thread;
listener dispatch happens on that same thread.
"""

from __future__ import annotations

import enum
import logging
import threading
from pathlib import Path
from typing import TYPE_CHECKING, Callable, List, Optional, TextIO, Union

from .adb import (
    CommandError,
    CommandInterrupted,
    CommandRunner,
    ProcessResult,
    adb_command,
    failure_lines,
    failure_reason,
)
from .config import SessionConfig
from .console import ConsoleMirror
from .entry import LogEntry, parse_entry
from .listeners import ListenerRegistry, TraceListener
from .processes import ProcessTracker, apply_lifecycle_marker, is_lifecycle_marker
from .pump import LineHandler, LogcatSource
from .signals import SignalInterpreter
from .stacktrace import StackTraceAggregator
from .status import StatusSink

if TYPE_CHECKING:  # pragma: no cover
    from .environment import DeviceEnvironment


logger = logging.getLogger(__name__)


class LineSource:
    """Interface of the two-channel line source a session subscribes to."""

    def start(self, on_line: LineHandler, on_error_line: LineHandler) -> None:  # pragma: no cover
        raise NotImplementedError

    def close(self) -> None:  # pragma: no cover
        raise NotImplementedError


SourceFactory = Callable[[List[str]], LineSource]


class SessionState(enum.Enum):
    CREATED = "created"
    INITIALIZED = "initialized"
    SHUTTING_DOWN = "shutting_down"
    TERMINATED = "terminated"


class SessionStateError(RuntimeError):
    """Raised on an illegal session state transition."""


class DeviceSession:
    """Live monitoring context for one connected device."""

    def __init__(
        self,
        environment: Optional["DeviceEnvironment"],
        device_id: str,
        *,
        config: Optional[SessionConfig] = None,
        runner: Optional[CommandRunner] = None,
        source_factory: Optional[SourceFactory] = None,
        stdout: Optional[TextIO] = None,
        stderr: Optional[TextIO] = None,
    ) -> None:
        self.environment = environment
        self.device_id = device_id
        self.config = config or SessionConfig()
        self.runner = runner or CommandRunner()
        self._source_factory: SourceFactory = source_factory or LogcatSource
        cfg = self.config
        self.tracker = ProcessTracker()
        self.listeners = ListenerRegistry(isolate_errors=cfg.isolate_listener_errors)
        self.aggregator = StackTraceAggregator(
            self.listeners,
            self.tracker,
            runtime_tag=cfg.runtime_tag,
            noise_prefix=cfg.noise_prefix,
            partition_by_pid=cfg.partition_traces_by_pid,
        )
        self.signals = SignalInterpreter(self.tracker, self.aggregator, signal_tag=cfg.signal_tag)
        self.console = ConsoleMirror(
            self.tracker,
            stdout=stdout,
            stderr=stderr,
            stdout_tag=cfg.stdout_tag,
            stderr_tag=cfg.stderr_tag,
        )
        self._state = SessionState.CREATED
        self._source: Optional[LineSource] = None
        # Held while a line is processed; shutdown takes it to fence off the pipeline.
        self._lock = threading.RLock()

    # ------------------------------------------------------------------ Basics

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def is_emulator(self) -> bool:
        return self.device_id.startswith("emulator")

    def __repr__(self) -> str:
        return f"[AndroidDevice {self.device_id}]"

    def add_listener(self, listener: TraceListener) -> None:
        """Register *listener*; ignored once the session is shutting down."""
        with self._lock:
            if self._state not in (SessionState.CREATED, SessionState.INITIALIZED):
                logger.debug("%r: ignoring listener added in state %s", self, self._state.value)
                return
            self.listeners.add(listener)

    def remove_listener(self, listener: TraceListener) -> None:
        self.listeners.remove(listener)

    # --------------------------------------------------------------- Lifecycle

    def initialize(self) -> None:
        """Clear the device log, then subscribe to ``adb logcat``."""
        with self._lock:
            if self._state is not SessionState.CREATED:
                raise SessionStateError(f"cannot initialize {self!r} in state {self._state.value}")
        cleared = self.adb("logcat", "-c")
        if not cleared.succeeded:
            logger.warning("%r: clearing the log buffer failed\n%s", self, cleared)
        source = self._source_factory(self.adb_command("logcat"))
        with self._lock:
            if self._state is not SessionState.CREATED:
                raise SessionStateError(f"{self!r} was shut down during initialize")
            self._source = source
            self._state = SessionState.INITIALIZED
        try:
            source.start(self.process_line, self.process_error_line)
        except Exception:
            with self._lock:
                self._source = None
                self._state = SessionState.CREATED
            raise
        logger.debug("%r: initialized", self)

    def shutdown(self) -> None:
        with self._lock:
            if self._state in (SessionState.SHUTTING_DOWN, SessionState.TERMINATED):
                return
            self._state = SessionState.SHUTTING_DOWN
            source = self._source
            self._source = None
        if source is not None:
            source.close()
        if self.environment is not None:
            self.environment.device_removed(self)
        self.listeners.clear()
        with self._lock:
            self._state = SessionState.TERMINATED
        logger.debug("%r: terminated", self)

    # --------------------------------------------------------- Line pipeline

    def process_line(self, line: str) -> Optional[LogEntry]:
        """Run one primary-channel line through the pipeline.

        Returns the parsed entry, or None once the session is no longer live.
        """
        with self._lock:
            if self._state is not SessionState.INITIALIZED:
                return None
            entry = parse_entry(line)
            self._route(entry)
            return entry

    def process_error_line(self, line: str) -> None:
        with self._lock:
            if self._state is not SessionState.INITIALIZED:
                return
            self.console.write_error(line)

    def _route(self, entry: LogEntry) -> None:
        if is_lifecycle_marker(entry, self.config.marker_tag):
            apply_lifecycle_marker(self.tracker, entry)
        elif self.signals.applies_to(entry):
            self.signals.handle(entry)
        elif self.tracker.is_active(entry.pid):
            if self.aggregator.is_trace_line(entry):
                if self.aggregator.offer(entry) and self.config.echo_trace_lines:
                    self.console.write_error(entry.message)
            else:
                self.console.forward(entry)

    # --------------------------------------------------------- Device commands

    def adb_command(self, *args: str) -> List[str]:
        return adb_command(self.config.adb_path, self.device_id, *args)

    def adb(self, *args: str) -> ProcessResult:
        return self.runner.run(self.adb_command(*args))

    def _interrupted(self, what: str, exc: CommandInterrupted) -> None:
        if not self.config.swallow_interrupts:
            raise exc
        logger.debug("%r: %s interrupted", self, what)

    def bring_launcher_to_front(self) -> bool:
        try:
            return self.adb(
                "shell", "am", "start",
                "-a", "android.intent.action.MAIN",
                "-c", "android.intent.category.HOME",
            ).succeeded
        except CommandInterrupted as exc:
            self._interrupted("bring-to-front", exc)
        except (OSError, CommandError):
            logger.exception("%r: could not bring the launcher to front", self)
        return False

    def install_app(self, apk_path: Union[str, Path], status: Optional[StatusSink] = None) -> bool:
        """Install (or reinstall) *apk_path*; outcome is reported to *status*."""
        status = status or StatusSink()
        self.bring_launcher_to_front()
        try:
            result = self.adb("install", "-r", str(apk_path))
        except CommandInterrupted as exc:
            self._interrupted("install", exc)
            return False
        except (OSError, CommandError) as exc:
            status.status_error(exc)
            return False
        if not result.succeeded:
            status.status_error("Could not install the app.")
            self.console.write_error(str(result))
            return False
        failures = failure_lines(result)
        for line in failures:
            self.console.write_error(line)
        if failures:
            status.status_error(f"Error while installing {failure_reason(failures[-1])}")
            return False
        status.status_notice("Done installing.")
        return True

    def launch_app(self, package: str, activity: str) -> bool:
        try:
            result = self.adb(
                "shell", "am", "start",
                "-e", "debug", "true",
                "-a", "android.intent.action.MAIN",
                "-c", "android.intent.category.LAUNCHER",
                "-n", f"{package}/.{activity}",
            )
        except CommandInterrupted as exc:
            self._interrupted("launch", exc)
            return False
        return result.succeeded


__all__ = [
    "DeviceSession",
    "LineSource",
    "SessionState",
    "SessionStateError",
    "SourceFactory",
]
