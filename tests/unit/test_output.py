"""Tests for timestamped build output."""

import io
import re

import pytest

from modbuild.output import (
    TimedLogger,
    format_timestamp,
    init_timer,
    log,
    log_build_complete,
    log_detail,
    log_error,
    log_header,
    log_module,
    log_phase,
    log_warning,
    set_verbose,
)

TIMESTAMP = r"\d{2}:\d{2}\.\d{2}"


@pytest.fixture
def stream():
    buffer = io.StringIO()
    init_timer(buffer)
    return buffer


def lines(buffer):
    return buffer.getvalue().splitlines()


def test_format_timestamp():
    init_timer()

    assert re.fullmatch(TIMESTAMP, format_timestamp())


def test_log_prefixes_timestamp(stream):
    log("Cleaning build")

    assert re.fullmatch(rf"{TIMESTAMP} Cleaning build", lines(stream)[0])


def test_log_phase(stream):
    log_phase(2, 3, "Compiling x64 -> build")

    assert lines(stream)[0].endswith("[2/3] Compiling x64 -> build")


def test_log_detail_indent(stream):
    log_detail("Compiled 2 module(s)", indent=4)

    assert lines(stream)[0].endswith("     Compiled 2 module(s)")


def test_log_module(stream):
    log_module("compile", "Scanner", "Scanner.o")
    log_module("cached", "Token")

    assert lines(stream)[0].endswith("      [compile] Scanner -> Scanner.o")
    assert lines(stream)[1].endswith("      [cached] Token")


def test_verbose_only_suppressed(stream):
    set_verbose(False)

    log("hidden", verbose_only=True)
    log_phase(1, 3, "hidden", verbose_only=True)
    log_detail("hidden", verbose_only=True)
    log_module("cached", "hidden")
    log("shown")

    assert len(lines(stream)) == 1
    assert lines(stream)[0].endswith("shown")


def test_header_and_completion(stream):
    log_header("modbuild", "0.1.0")
    log_build_complete(1.234)

    text = stream.getvalue()
    assert "modbuild v0.1.0" in text
    assert "Build time: 1.23s" in text


def test_error_and_warning(stream):
    log_error("cl exited with status 2")
    log_warning("Ignoring corrupted cache")

    assert lines(stream)[0].endswith("ERROR: cl exited with status 2")
    assert lines(stream)[1].endswith("WARNING: Ignoring corrupted cache")


def test_timed_logger(stream):
    with TimedLogger("Initializing gcc toolchain (x64)", phase=(1, 3)) as timed:
        timed.detail("Using C++ compiler /usr/bin/g++")

    out = lines(stream)
    assert out[0].endswith("[1/3] Initializing gcc toolchain (x64)...")
    assert out[1].endswith("Using C++ compiler /usr/bin/g++")
    assert re.search(r"Done \(\d+\.\d{2}s\)$", out[2])


def test_timed_logger_reports_failure(stream):
    with pytest.raises(RuntimeError):
        with TimedLogger("Discovering environment"):
            raise RuntimeError("vcvarsall.bat not found")

    text = stream.getvalue()
    assert "Done" not in text
    assert re.search(r"Failed after \d+\.\d{2}s: vcvarsall.bat not found", text)


def test_timed_logger_silent_on_interrupt(stream):
    with pytest.raises(KeyboardInterrupt):
        with TimedLogger("Discovering environment"):
            raise KeyboardInterrupt

    assert len(lines(stream)) == 1
