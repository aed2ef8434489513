import pytest

from droidwatch.entry import LogEntry, Severity, parse_entry


def test_parse_signal_line():
    entry = parse_entry("I/Process ( 9213): Sending signal. PID: 9213 SIG: 9")
    assert entry.severity is Severity.INFO
    assert entry.source == "Process"
    assert entry.pid == 9213
    assert entry.message == "Sending signal. PID: 9213 SIG: 9"


def test_parse_runtime_error_line():
    entry = parse_entry("E/AndroidRuntime(  812):   at com.example.Main.draw(Main.java:42)\n")
    assert entry.severity is Severity.ERROR
    assert entry.source == "AndroidRuntime"
    assert entry.pid == 812
    assert entry.message == "  at com.example.Main.draw(Main.java:42)"


@pytest.mark.parametrize(
    "tag,severity",
    [
        ("V", Severity.VERBOSE),
        ("D", Severity.DEBUG),
        ("I", Severity.INFO),
        ("W", Severity.WARN),
        ("E", Severity.ERROR),
        ("F", Severity.FATAL),
        ("A", Severity.FATAL),
    ],
)
def test_severity_tags(tag, severity):
    assert parse_entry(f"{tag}/System.out( 1): hi").severity is severity


def test_error_stream_routing_attribute():
    assert not Severity.INFO.use_error_stream
    assert not Severity.DEBUG.use_error_stream
    assert Severity.WARN.use_error_stream
    assert Severity.ERROR.use_error_stream
    assert Severity.FATAL.use_error_stream


@pytest.mark.parametrize(
    "original",
    [LogEntry(severity, "System.err", 4711, "java.io.IOException: nope (really)") for severity in Severity]
    + [
        LogEntry(Severity.INFO, "Tag", 1, ""),
        LogEntry(Severity.ERROR, "AndroidRuntime", 812, "   at com.example.Main.draw(Main.java:42)"),
        LogEntry(Severity.DEBUG, "dalvikvm", 123456, "GC freed 12K: (x) 3ms"),
        LogEntry(Severity.INFO, "PROCESSING", 7, "onStart"),
    ],
)
def test_format_round_trip(original):
    assert parse_entry(original.format()) == original


@pytest.mark.parametrize(
    "line,fields",
    [
        ("I/Process ( 9213): Sending signal. PID: 9213 SIG: 3", (Severity.INFO, "Process", 9213, "Sending signal. PID: 9213 SIG: 3")),
        ("I/System.out  (   42): ", (Severity.INFO, "System.out", 42, "")),
        ("E/AndroidRuntime(  812):  \tat Main", (Severity.ERROR, "AndroidRuntime", 812, " \tat Main")),
        ("W/System.err(1): a: b (c)", (Severity.WARN, "System.err", 1, "a: b (c)")),
        ("F/libc(  77):", (Severity.FATAL, "libc", 77, "")),
    ],
)
def test_parse_recovers_exact_fields(line, fields):
    entry = parse_entry(line)
    assert (entry.severity, entry.source, entry.pid, entry.message) == fields


def test_padded_source_tag_is_trimmed():
    padded = LogEntry(Severity.INFO, "Process ", 9213, "Sending signal. PID: 9213 SIG: 9")
    assert parse_entry(padded.format()) == LogEntry(Severity.INFO, "Process", 9213, padded.message)


@pytest.mark.parametrize(
    "line",
    [
        "",
        "--------- beginning of /dev/log/main",
        "garbage without structure",
        "E/AndroidRuntime: missing pid",
        "E/Tag(abc): not a pid",
    ],
)
def test_malformed_lines_degrade(line):
    entry = parse_entry(line)
    assert entry.severity is None
    assert entry.pid is None
    assert entry.source == ""
    assert entry.message == line
    assert not entry.use_error_stream


def test_unknown_severity_keeps_structure():
    entry = parse_entry("X/Thing( 12): hello")
    assert entry.severity is None
    assert entry.source == "Thing"
    assert entry.pid == 12
