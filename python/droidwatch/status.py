"""User-visible status reporting for device commands."""

from __future__ import annotations

import json
import logging
import sys
from typing import Any, Dict, List, Optional, TextIO, Tuple, Union


logger = logging.getLogger(__name__)

StatusMessage = Union[str, BaseException]


def _describe(message: StatusMessage) -> str:
    if isinstance(message, BaseException):
        text = str(message)
        return f"{type(message).__name__}: {text}" if text else type(message).__name__
    return str(message)


class StatusSink:
    """Receives notices and errors; the default implementation only logs."""

    def status_notice(self, message: str) -> None:
        logger.info("%s", message)

    def status_error(self, message: StatusMessage) -> None:
        logger.error("%s", _describe(message))


class ConsoleStatus(StatusSink):
    """Prints status lines, optionally as JSON objects."""

    def __init__(self, *, json_output: bool = False, stream: Optional[TextIO] = None) -> None:
        self.json_output = json_output
        self._stream = stream

    @property
    def stream(self) -> TextIO:
        return self._stream if self._stream is not None else sys.stdout

    def _emit(self, status: str, text: str) -> None:
        if self.json_output:
            payload: Dict[str, Any] = {"status": status, "message": text}
            print(json.dumps(payload, sort_keys=True), file=self.stream)
        elif status == "error":
            print(f"error: {text}", file=self.stream)
        else:
            print(text, file=self.stream)

    def status_notice(self, message: str) -> None:
        self._emit("ok", message)

    def status_error(self, message: StatusMessage) -> None:
        self._emit("error", _describe(message))


class RecordingStatus(StatusSink):
    """Keeps every status call in order; handy for scripting and tests."""

    def __init__(self) -> None:
        self.events: List[Tuple[str, StatusMessage]] = []

    def status_notice(self, message: str) -> None:
        self.events.append(("notice", message))

    def status_error(self, message: StatusMessage) -> None:
        self.events.append(("error", message))

    @property
    def errors(self) -> List[StatusMessage]:
        return [msg for kind, msg in self.events if kind == "error"]

    @property
    def notices(self) -> List[StatusMessage]:
        return [msg for kind, msg in self.events if kind == "notice"]


__all__ = ["StatusSink", "ConsoleStatus", "RecordingStatus", "StatusMessage"]
