"""
Pytest configuration and fixtures for droidwatch tests.
"""
import io
from typing import Dict, List

import pytest

from droidwatch.adb import ProcessResult
from droidwatch.device import DeviceSession


class StubRunner:
    """Command runner that replays queued results instead of spawning adb."""

    def __init__(self, results=None):
        self.results: Dict[str, List] = {}
        self.calls: List[List[str]] = []
        for key, result in (results or {}).items():
            self.queue(key, result)

    def queue(self, subcommand, result):
        self.results.setdefault(subcommand, []).append(result)

    def run(self, argv):
        argv = list(argv)
        self.calls.append(argv)
        # argv is [adb, -s, serial, subcommand, ...]
        queued = self.results.get(argv[3])
        result = queued.pop(0) if queued else ProcessResult(argv=argv, returncode=0)
        if isinstance(result, BaseException):
            raise result
        return result


class StubSource:
    """Line source driven by the test instead of a logcat process."""

    instances: List["StubSource"] = []

    def __init__(self, argv):
        self.argv = list(argv)
        self.on_line = None
        self.on_error_line = None
        self.closed = False
        StubSource.instances.append(self)

    def start(self, on_line, on_error_line):
        self.on_line = on_line
        self.on_error_line = on_error_line

    def close(self):
        self.closed = True

    def emit(self, *lines):
        for line in lines:
            self.on_line(line)

    def emit_error(self, *lines):
        for line in lines:
            self.on_error_line(line)


@pytest.fixture
def runner():
    return StubRunner()


@pytest.fixture
def streams():
    return io.StringIO(), io.StringIO()


@pytest.fixture
def session(runner, streams):
    """An initialized session fed through a StubSource."""
    StubSource.instances = []
    stdout, stderr = streams
    device = DeviceSession(
        None,
        "emulator-5554",
        runner=runner,
        source_factory=StubSource,
        stdout=stdout,
        stderr=stderr,
    )
    device.initialize()
    return device


@pytest.fixture
def source(session):
    return StubSource.instances[-1]
