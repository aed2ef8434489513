"""droidwatch CLI entry point."""

from __future__ import annotations

import argparse
import logging
import os
import sys
import time
from typing import List, Optional, Sequence, TextIO, Tuple

from .adb import CommandInterrupted
from .config import SessionConfig
from .environment import DeviceEnvironment
from .status import ConsoleStatus

LOG = logging.getLogger("droidwatch.cli")


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _split_component(value: str) -> Tuple[str, str]:
    package, sep, activity = value.partition("/")
    if not sep or not package or not activity:
        raise argparse.ArgumentTypeError(f"expected PACKAGE/ACTIVITY, got {value!r}")
    return package, activity.lstrip(".")


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Watch an Android app's logcat for stack traces")
    parser.add_argument("device", help="Device serial (as listed by `adb devices`)")
    parser.add_argument("--adb", help="Path to the adb executable (default: $DROIDWATCH_ADB_PATH or adb)")
    parser.add_argument("--install", metavar="APK", help="Install (or reinstall) an APK before watching")
    parser.add_argument(
        "--launch",
        metavar="PACKAGE/ACTIVITY",
        type=_split_component,
        help="Launch an activity once the log stream is running",
    )
    parser.add_argument("--json", action="store_true", help="Emit status lines as JSON")
    parser.add_argument(
        "--per-pid-traces",
        action="store_true",
        default=None,
        help="Keep a separate trace buffer for each process",
    )
    parser.add_argument(
        "--propagate-listener-errors",
        action="store_true",
        help="Let a failing trace listener abort delivery",
    )
    parser.add_argument(
        "--log-level",
        default=os.environ.get("DROIDWATCH_LOG", "WARNING"),
        help="Logging level (default WARNING)",
    )
    return parser


def print_trace(trace: Sequence[str], stream: Optional[TextIO] = None) -> None:
    out = stream if stream is not None else sys.stderr
    print(f"--- stack trace ({len(trace)} lines) ---", file=out)
    for line in trace:
        print(f"    {line}", file=out)
    out.flush()


def main(argv: List[str] | None = None) -> int:
    parser = build_arg_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.log_level)
    config = SessionConfig.from_env(
        adb_path=args.adb,
        partition_traces_by_pid=args.per_pid_traces,
    )
    if args.propagate_listener_errors:
        config = config.with_overrides(isolate_listener_errors=False)
    status = ConsoleStatus(json_output=args.json)
    environment = DeviceEnvironment(config=config)
    try:
        device = environment.connect(args.device)
    except OSError as exc:
        LOG.debug("connect failed", exc_info=True)
        status.status_error(exc)
        return 1
    except (CommandInterrupted, KeyboardInterrupt):
        print()
        environment.shutdown()
        return 0
    try:
        device.add_listener(print_trace)
        if args.install and not device.install_app(args.install, status):
            return 1
        if args.launch:
            package, activity = args.launch
            if not device.launch_app(package, activity):
                status.status_error(f"Could not launch {package}/.{activity}")
                return 1
        status.status_notice(f"Watching {device.device_id} (Ctrl-C to stop)")
        while True:
            time.sleep(0.5)
    except OSError as exc:
        LOG.debug("device command failed", exc_info=True)
        status.status_error(exc)
        return 1
    except KeyboardInterrupt:
        print()
    finally:
        environment.shutdown()
    return 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
