"""Tests for DeviceEnvironment, SessionConfig and the CLI."""

import argparse

import pytest

from conftest import StubRunner, StubSource

from droidwatch import cli
from droidwatch.adb import CommandInterrupted, ProcessResult
from droidwatch.config import SessionConfig
from droidwatch.device import SessionState
from droidwatch.environment import DeviceEnvironment


def make_environment(**config):
    return DeviceEnvironment(
        config=SessionConfig(**config),
        runner=StubRunner(),
        source_factory=StubSource,
    )


def test_connect_creates_and_reuses_sessions():
    env = make_environment()
    first = env.connect("emulator-5554")
    assert first.state is SessionState.INITIALIZED
    assert env.connect("emulator-5554") is first
    assert env.get("emulator-5554") is first
    assert env.devices == [first]


def test_shutdown_notifies_environment():
    env = make_environment()
    device = env.connect("emulator-5554")
    device.shutdown()
    assert env.devices == []
    assert env.get("emulator-5554") is None
    again = env.connect("emulator-5554")
    assert again is not device


def test_environment_shutdown_terminates_all():
    env = make_environment()
    devices = [env.connect("emulator-5554"), env.connect("HT91MLC00031")]
    env.shutdown()
    assert env.devices == []
    assert all(device.state is SessionState.TERMINATED for device in devices)


def test_connect_failure_removes_device():
    class BrokenSource(StubSource):
        def start(self, on_line, on_error_line):
            raise OSError("adb not found")

    env = DeviceEnvironment(runner=StubRunner(), source_factory=BrokenSource)
    with pytest.raises(OSError):
        env.connect("serial")
    assert env.devices == []


def test_sessions_share_environment_config():
    env = make_environment(partition_traces_by_pid=True, isolate_listener_errors=False)
    device = env.connect("serial")
    assert device.aggregator.partition_by_pid
    assert not device.listeners.isolate_errors


def test_config_from_env():
    config = SessionConfig.from_env(
        {
            "DROIDWATCH_ADB_PATH": "/sdk/adb",
            "DROIDWATCH_SWALLOW_INTERRUPTS": "no",
            "DROIDWATCH_PARTITION_TRACES_BY_PID": "1",
            "UNRELATED": "x",
        },
        runtime_tag="MyRuntime",
        noise_prefix=None,
    )
    assert config.adb_path == "/sdk/adb"
    assert config.swallow_interrupts is False
    assert config.partition_traces_by_pid is True
    assert config.runtime_tag == "MyRuntime"
    assert config.noise_prefix == "Uncaught handler"


def test_config_from_env_rejects_bad_boolean():
    with pytest.raises(ValueError):
        SessionConfig.from_env({"DROIDWATCH_ECHO_TRACE_LINES": "maybe"})


def test_config_defaults_keep_shared_buffer():
    config = SessionConfig()
    assert config.swallow_interrupts
    assert config.isolate_listener_errors
    assert not config.partition_traces_by_pid
    assert config.with_overrides(adb_path=None) == config


def test_arg_parser_launch_component():
    args = cli.build_arg_parser().parse_args(["serial", "--launch", "processing.test/.Sketch"])
    assert args.launch == ("processing.test", "Sketch")
    with pytest.raises(argparse.ArgumentTypeError):
        cli._split_component("no-activity")


def test_print_trace_format(capsys):
    cli.print_trace(("java.lang.RuntimeException", "  at Main.draw"))
    err = capsys.readouterr().err
    assert err.splitlines() == [
        "--- stack trace (2 lines) ---",
        "    java.lang.RuntimeException",
        "      at Main.draw",
    ]


def test_main_reports_install_failure(monkeypatch, capsys):
    created = []

    class Environment(DeviceEnvironment):
        def __init__(self, *, config=None):
            runner = StubRunner()
            runner.queue("install", cli_result("Failure [INSTALL_FAILED_INVALID_APK]"))
            super().__init__(config=config, runner=runner, source_factory=StubSource)
            created.append(self)

    monkeypatch.setattr(cli, "DeviceEnvironment", Environment)
    assert cli.main(["emulator-5554", "--install", "bad.apk", "--log-level", "ERROR"]) == 1
    out = capsys.readouterr().out
    assert "error: Error while installing [INSTALL_FAILED_INVALID_APK]" in out
    assert created[0].devices == []


def test_main_connect_error(monkeypatch, capsys):
    class Environment:
        def __init__(self, *, config=None):
            pass

        def connect(self, device_id):
            raise FileNotFoundError(2, "No such file or directory", "adb")

    monkeypatch.setattr(cli, "DeviceEnvironment", Environment)
    assert cli.main(["emulator-5554", "--json"]) == 1
    assert '"status": "error"' in capsys.readouterr().out


def test_main_interrupted_while_connecting(monkeypatch, capsys):
    created = []

    class Environment(DeviceEnvironment):
        def __init__(self, *, config=None):
            runner = StubRunner()
            runner.queue("logcat", CommandInterrupted("interrupted"))
            super().__init__(config=config, runner=runner, source_factory=StubSource)
            created.append(self)

    monkeypatch.setattr(cli, "DeviceEnvironment", Environment)
    assert cli.main(["emulator-5554"]) == 0
    assert created[0].devices == []
    assert "error:" not in capsys.readouterr().out


def cli_result(stdout):
    return ProcessResult(argv=["adb", "install"], returncode=0, stdout=stdout + "\n")
