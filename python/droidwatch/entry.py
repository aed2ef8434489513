"""Logcat line parsing.

Lines in the ``brief`` logcat format look like::

    I/Process ( 9213): Sending signal. PID: 9213 SIG: 9
    E/AndroidRuntime(  812): java.lang.RuntimeException: boom

Anything that does not match still yields a :class:`LogEntry`; the pipeline
never stops on malformed device output.
"""

from __future__ import annotations

import enum
import re
from dataclasses import dataclass
from typing import Optional


class Severity(enum.Enum):
    VERBOSE = ("V", False)
    DEBUG = ("D", False)
    INFO = ("I", False)
    WARN = ("W", True)
    ERROR = ("E", True)
    FATAL = ("F", True)

    def __init__(self, tag: str, use_error_stream: bool) -> None:
        self.tag = tag
        self.use_error_stream = use_error_stream

    @classmethod
    def from_tag(cls, tag: str) -> Optional["Severity"]:
        return _SEVERITY_BY_TAG.get(tag.upper())


# "A" (assert) is what older devices emit for wtf() logging.
_SEVERITY_BY_TAG = {sev.tag: sev for sev in Severity}
_SEVERITY_BY_TAG["A"] = Severity.FATAL

_ENTRY_RE = re.compile(
    r"^(?P<severity>[A-Za-z])/(?P<source>[^(]*)\(\s*(?P<pid>\d+)\s*\):\s?(?P<message>.*)$"
)


@dataclass(frozen=True)
class LogEntry:
    severity: Optional[Severity]
    source: str
    pid: Optional[int]
    message: str

    @property
    def use_error_stream(self) -> bool:
        return self.severity is not None and self.severity.use_error_stream

    def format(self) -> str:
        """Render back to the brief logcat layout (best-effort for fallbacks)."""
        if self.severity is None or self.pid is None:
            return self.message
        return f"{self.severity.tag}/{self.source}({self.pid:5d}): {self.message}"


def parse_entry(line: str) -> LogEntry:
    """Parse one logcat line; never raises."""
    text = line.rstrip("\r\n") if isinstance(line, str) else str(line)
    match = _ENTRY_RE.match(text)
    if not match:
        return LogEntry(severity=None, source="", pid=None, message=text)
    return LogEntry(
        severity=Severity.from_tag(match.group("severity")),
        source=match.group("source").strip(),
        pid=int(match.group("pid")),
        message=match.group("message"),
    )


__all__ = ["Severity", "LogEntry", "parse_entry"]
