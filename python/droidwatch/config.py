"""Session configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass, fields, replace
from typing import Mapping, Optional

from .console import STDERR_TAG, STDOUT_TAG
from .signals import SIGNAL_TAG
from .stacktrace import NOISE_PREFIX, RUNTIME_TAG

ENV_PREFIX = "DROIDWATCH_"

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


def _to_bool(name: str, value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in _TRUE:
        return True
    if lowered in _FALSE:
        return False
    raise ValueError(f"{ENV_PREFIX}{name.upper()}: expected a boolean, got {value!r}")


@dataclass(frozen=True)
class SessionConfig:
    adb_path: str = "adb"
    marker_tag: str = "PROCESSING"
    signal_tag: str = SIGNAL_TAG
    runtime_tag: str = RUNTIME_TAG
    stdout_tag: str = STDOUT_TAG
    stderr_tag: str = STDERR_TAG
    noise_prefix: str = NOISE_PREFIX
    # interrupted command waits return False instead of raising
    swallow_interrupts: bool = True
    isolate_listener_errors: bool = True
    partition_traces_by_pid: bool = False
    echo_trace_lines: bool = True

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None, **overrides) -> "SessionConfig":
        """Build a config from ``DROIDWATCH_*`` variables, then apply *overrides*."""
        env = os.environ if environ is None else environ
        values = {}
        for item in fields(cls):
            raw = env.get(ENV_PREFIX + item.name.upper())
            if raw is None:
                continue
            values[item.name] = _to_bool(item.name, raw) if item.type in ("bool", bool) else raw
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)

    def with_overrides(self, **overrides) -> "SessionConfig":
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})


__all__ = ["SessionConfig", "ENV_PREFIX"]
