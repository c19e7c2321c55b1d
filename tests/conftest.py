"""
Root pytest configuration and shared fixtures.

This conftest provides:
- Path configuration for imports
- Event factories for building classified or raw event streams
- A realistic `go test -json` stream covering two interleaved packages
"""

import json
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest
from loguru import logger

# Add src to path for imports
src_path = Path(__file__).parent.parent / "src"
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))

from gotest_report.classifier import classify_action  # noqa: E402
from gotest_report.models import TestEvent  # noqa: E402

BASE_TIME = datetime(2022, 1, 23, 16, 58, 49, 186901, tzinfo=timezone(timedelta(hours=8)))


@pytest.fixture(autouse=True)
def reset_logger():
    """Drop any sinks a test installed and restore library silence."""
    yield
    logger.remove()
    logger.disable("gotest_report")


@pytest.fixture
def make_event():
    """Factory for classified TestEvents with sequential indices."""
    counter = {"index": 0}

    def _make(action, package="example.com/pkg", test="", output="", elapsed=None, timestamp=None):
        if timestamp is None and elapsed is not None:
            timestamp = BASE_TIME
        event = TestEvent(
            action=action,
            package=package,
            test=test,
            output=output,
            elapsed=elapsed,
            timestamp=timestamp,
            index=counter["index"],
        )
        counter["index"] += 1
        event.phase = classify_action(action)
        return event

    return _make


def wire(action, package="", test="", output=None, elapsed=None, time=None):
    """Encode one event the way `go test -json` writes it."""
    record = {"Action": action}
    if time is not None:
        record = {"Time": time, **record}
    if package:
        record["Package"] = package
    if test:
        record["Test"] = test
    if output is not None:
        record["Output"] = output
    if elapsed is not None:
        record["Elapsed"] = elapsed
    return json.dumps(record)


@pytest.fixture
def wire_event():
    """The wire encoder, for tests that build their own streams."""
    return wire


@pytest.fixture
def go_test_stream():
    """Two packages whose events interleave, as with `go test -json -p 2 ./...`."""
    t = "2022-01-23T16:58:49.{:06d}+08:00"
    lines = [
        wire("run", "example.com/alpha", "TestOne", time=t.format(100)),
        wire("output", "example.com/alpha", "TestOne", "=== RUN   TestOne\n", time=t.format(110)),
        wire("run", "example.com/beta", "TestBeta", time=t.format(120)),
        wire("output", "example.com/alpha", "TestOne", "--- PASS: TestOne (0.01s)\n", time=t.format(130)),
        wire("pass", "example.com/alpha", "TestOne", elapsed=0.01, time=t.format(140)),
        wire("run", "example.com/alpha", "TestTwo", time=t.format(150)),
        wire("output", "example.com/beta", "TestBeta", "--- SKIP: TestBeta (0.00s)\n", time=t.format(160)),
        wire("skip", "example.com/beta", "TestBeta", elapsed=0, time=t.format(170)),
        wire("output", "example.com/alpha", "TestTwo", "    two_test.go:9: boom\n", time=t.format(180)),
        wire("fail", "example.com/alpha", "TestTwo", elapsed=0.25, time=t.format(190)),
        wire("output", "example.com/alpha", output="FAIL\n", time=t.format(200)),
        wire("fail", "example.com/alpha", elapsed=0.3, time=t.format(210)),
        wire("output", "example.com/beta", output="ok  \texample.com/beta\t0.002s\n", time=t.format(220)),
        wire("pass", "example.com/beta", elapsed=0.002, time=t.format(230)),
    ]
    return "\n".join(lines) + "\n"
