"""Device-scoped ``adb`` command execution."""

from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass
from typing import Iterator, List, Sequence


logger = logging.getLogger(__name__)


class CommandError(RuntimeError):
    """Raised when a device command cannot be completed."""


class CommandInterrupted(CommandError):
    """Raised when the wait for a device command was interrupted."""


def adb_command(adb_path: str, device_id: str, *args: str) -> List[str]:
    """Build ``adb -s <device> <args...>``."""
    return [adb_path, "-s", device_id, *args]


@dataclass
class ProcessResult:
    argv: List[str]
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def succeeded(self) -> bool:
        return self.returncode == 0

    @property
    def lines(self) -> List[str]:
        return self.stdout.splitlines()

    def __iter__(self) -> Iterator[str]:
        return iter(self.lines)

    def __str__(self) -> str:
        parts = [" ".join(self.argv), f"exit code: {self.returncode}"]
        if self.stdout:
            parts.append("stdout:")
            parts.append(self.stdout.rstrip("\n"))
        if self.stderr:
            parts.append("stderr:")
            parts.append(self.stderr.rstrip("\n"))
        return "\n".join(parts)


@dataclass
class CommandRunner:
    """Runs a command to completion and captures its output.

    No timeout is applied; a wait interrupted by Ctrl-C kills the child and
    raises :class:`CommandInterrupted`. Spawn failures propagate as ``OSError``.
    """

    encoding: str = "utf-8"

    def run(self, argv: Sequence[str]) -> ProcessResult:
        cmd = [str(part) for part in argv]
        logger.debug("running %s", " ".join(cmd))
        proc = subprocess.Popen(
            cmd,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
            encoding=self.encoding,
            errors="replace",
        )
        try:
            stdout, stderr = proc.communicate()
        except KeyboardInterrupt as exc:
            proc.kill()
            proc.wait()
            raise CommandInterrupted(f"interrupted: {' '.join(cmd)}") from exc
        return ProcessResult(argv=cmd, returncode=proc.returncode, stdout=stdout or "", stderr=stderr or "")


def failure_lines(result: ProcessResult) -> List[str]:
    """``adb install`` exits 0 on most failures; the output says ``Failure [...]``."""
    return [line for line in result if line.startswith("Failure")]


def failure_reason(line: str) -> str:
    return line[len("Failure "):]


__all__ = [
    "CommandError",
    "CommandInterrupted",
    "CommandRunner",
    "ProcessResult",
    "adb_command",
    "failure_lines",
    "failure_reason",
]
