"""
droidwatch - logcat monitoring for apps running on an Android device.

Follows the live log of one device, tracks which of the app's processes are
alive, and captures the stack traces the runtime prints before a process
receives SIGQUIT.  Each module covers one stage of the pipeline:

    entry.py       → logcat line parsing
    processes.py   → active process tracking, lifecycle markers
    signals.py     → ``Process`` signal lines (kill / dump request)
    stacktrace.py  → trace buffering and flush
    console.py     → System.out / System.err passthrough
    listeners.py   → trace listener registry
    adb.py         → adb command execution
    pump.py        → logcat line sources
    device.py      → per-device session controller
    environment.py → registry of device sessions

Use ``python -m droidwatch <serial>`` or the ``droidwatch`` script to watch a
device from the command line.
"""

from .adb import CommandError, CommandInterrupted, CommandRunner, ProcessResult  # noqa: F401
from .config import SessionConfig  # noqa: F401
from .console import ConsoleMirror  # noqa: F401
from .device import DeviceSession, LineSource, SessionState, SessionStateError  # noqa: F401
from .entry import LogEntry, Severity, parse_entry  # noqa: F401
from .environment import DeviceEnvironment  # noqa: F401
from .listeners import ListenerRegistry, TraceListener, TraceSnapshot  # noqa: F401
from .processes import ProcessTracker  # noqa: F401
from .pump import LogcatSource, StreamPump  # noqa: F401
from .signals import ProcessSignal, SignalInterpreter, parse_signal  # noqa: F401
from .stacktrace import StackTraceAggregator  # noqa: F401
from .status import ConsoleStatus, RecordingStatus, StatusSink  # noqa: F401

__all__ = [
    "CommandError",
    "CommandInterrupted",
    "CommandRunner",
    "ProcessResult",
    "SessionConfig",
    "ConsoleMirror",
    "DeviceSession",
    "LineSource",
    "SessionState",
    "SessionStateError",
    "LogEntry",
    "Severity",
    "parse_entry",
    "DeviceEnvironment",
    "ListenerRegistry",
    "TraceListener",
    "TraceSnapshot",
    "ProcessTracker",
    "LogcatSource",
    "StreamPump",
    "ProcessSignal",
    "SignalInterpreter",
    "parse_signal",
    "StackTraceAggregator",
    "ConsoleStatus",
    "RecordingStatus",
    "StatusSink",
]

__version__ = "0.1.0"
