"""
Unit tests for decoding the `go test -json` stream.

Tests field mapping, sequence indices, timestamp parsing and every
malformed-input path.
"""

import io
import json
from datetime import datetime, timedelta, timezone

import pytest

from gotest_report.decoder import decode_events, iter_records, read_events
from gotest_report.errors import MalformedEventError


class TestTimestamps:
    """Test RFC 3339 timestamps with Go's precision."""

    @staticmethod
    def decode_time(value):
        (event,) = decode_events(json.dumps({"Action": "pass", "Time": value}))
        return event.timestamp

    def test_microseconds_with_offset(self):
        parsed = self.decode_time("2022-01-23T16:58:49.186901+08:00")

        assert parsed == datetime(2022, 1, 23, 16, 58, 49, 186901, tzinfo=timezone(timedelta(hours=8)))

    def test_nanoseconds_are_truncated(self):
        parsed = self.decode_time("2022-01-23T16:58:49.123456789Z")

        assert parsed.microsecond == 123456
        assert parsed.utcoffset() == timedelta(0)

    def test_short_fraction_is_padded(self):
        assert self.decode_time("2022-01-23T16:58:49.5-05:00").microsecond == 500000

    def test_no_fraction(self):
        assert self.decode_time("2022-01-23T16:58:49Z").second == 49

    @pytest.mark.parametrize("value", ["yesterday", "16:58:49", ""])
    def test_invalid(self, value):
        with pytest.raises(MalformedEventError, match="Time"):
            self.decode_time(value)


class TestIterRecords:
    """Test splitting a concatenated JSON stream into values."""

    def test_newline_delimited(self):
        assert list(iter_records('{"a": 1}\n{"b": 2}\n')) == [{"a": 1}, {"b": 2}]

    def test_any_whitespace_between_values(self):
        assert list(iter_records('  {"a": 1}{"b": 2}\t\r\n {"c": 3}  ')) == [{"a": 1}, {"b": 2}, {"c": 3}]

    def test_empty_stream(self):
        assert list(iter_records("")) == []
        assert list(iter_records(" \n\n ")) == []

    def test_truncated_value(self):
        records = iter_records('{"Action": "run"}\n{"Action": "pa')

        assert next(records) == {"Action": "run"}
        with pytest.raises(MalformedEventError) as exc_info:
            next(records)
        assert exc_info.value.position == 1


class TestDecodeEvents:
    """Test mapping records onto TestEvents."""

    def test_fields_and_indices(self, go_test_stream):
        events = decode_events(go_test_stream)

        assert [e.index for e in events] == list(range(len(events)))
        first = events[0]
        assert first.action == "run"
        assert first.package == "example.com/alpha"
        assert first.test == "TestOne"
        assert first.output == ""
        assert first.elapsed is None
        assert first.timestamp.microsecond == 100

    def test_zero_elapsed_is_not_absent(self, wire_event):
        (event,) = decode_events(wire_event("skip", "pkg", elapsed=0, time="2022-01-23T16:58:49Z"))

        assert event.elapsed == 0.0
        assert event.has_elapsed

    def test_optional_fields_default_empty(self):
        (event,) = decode_events('{"Action": "output", "Package": null, "Output": "x\\n"}')

        assert event.package == ""
        assert event.test == ""
        assert event.output == "x\n"
        assert event.timestamp is None

    def test_unknown_fields_are_ignored(self):
        (event,) = decode_events('{"Action": "run", "Test": "TestX", "FailedBuild": "pkg"}')

        assert event.test == "TestX"

    def test_empty_action_is_left_for_classification(self):
        (event,) = decode_events('{"Action": ""}')

        assert event.action == ""

    def test_read_events_from_stream(self, go_test_stream):
        events = read_events(io.StringIO(go_test_stream))

        assert len(events) == len(go_test_stream.strip().splitlines())

    @pytest.mark.parametrize(
        "text",
        [
            "not json",
            '["run"]',
            '"run"',
            "{}",
            '{"Action": 3}',
            '{"Action": "pass", "Elapsed": "fast"}',
            '{"Action": "pass", "Elapsed": NaN}',
            '{"Action": "pass", "Elapsed": Infinity}',
            '{"Action": "pass", "Elapsed": -Infinity}',
            '{"Action": "pass", "Time": "half past four"}',
            '{"Action": "output", "Output": 12}',
        ],
    )
    def test_malformed_records(self, text):
        with pytest.raises(MalformedEventError):
            decode_events(text)

    def test_error_names_record_position(self):
        text = '{"Action": "run"}\n{"Action": "run"}\n{"Elapsed": 1}\n'

        with pytest.raises(MalformedEventError) as exc_info:
            decode_events(text)

        assert exc_info.value.position == 2
        assert "record 2" in str(exc_info.value)
        assert "Action" in str(exc_info.value)

    def test_unpaired_surrogates_are_replaced(self, wire_event):
        (event,) = decode_events(wire_event("output", "pkg", "Test\udc00", "half \ud800 pair\n"))

        assert event.output == "half \ufffd pair\n"
        assert event.test == "Test\ufffd"
        event.output.encode("utf-8")

    def test_surrogate_pairs_are_kept(self):
        (event,) = decode_events('{"Action": "output", "Output": "\\ud83d\\ude00"}')

        assert event.output == "\U0001F600"


class TestReadEvents:
    def test_invalid_utf8(self, tmp_path):
        path = tmp_path / "events.json"
        path.write_bytes(b'{"Action": "output", "Output": "\xff\xfe"}\n')

        with open(path, "r", encoding="utf-8") as f:
            with pytest.raises(MalformedEventError, match="not valid UTF-8"):
                read_events(f)
