"""
Decoding of the `go test -json` event stream.

The runner writes one JSON object per event. Objects are normally newline
delimited, but any whitespace between them is accepted, so the stream is
decoded value by value rather than line by line. Each value is validated
against the runner's field names before it becomes a TestEvent carrying its
sequence index.
"""

import json
import re
from datetime import datetime
from typing import Any, Iterator, List, Optional, TextIO

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .errors import MalformedEventError
from .models import TestEvent

_WHITESPACE = re.compile(r"\s*")
# JSON escapes can smuggle in surrogates that have no UTF-8 encoding
_LONE_SURROGATE = re.compile(r"[\ud800-\udfff]")


class WireEvent(BaseModel):
    """One event exactly as the runner encodes it."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    action: str = Field(alias="Action")
    package: Optional[str] = Field(default=None, alias="Package")
    test: Optional[str] = Field(default=None, alias="Test")
    output: Optional[str] = Field(default=None, alias="Output")
    elapsed: Optional[float] = Field(default=None, alias="Elapsed", allow_inf_nan=False)
    time: Optional[datetime] = Field(default=None, alias="Time")

    @field_validator("action", "package", "test", "output")
    @classmethod
    def replace_surrogates(cls, value: Optional[str]) -> Optional[str]:
        """Replace unpaired surrogates with U+FFFD, as Go's decoder does."""
        if value is None:
            return value
        return _LONE_SURROGATE.sub("\ufffd", value)

    def to_event(self, index: int) -> TestEvent:
        return TestEvent(
            action=self.action,
            package=self.package or "",
            test=self.test or "",
            output=self.output or "",
            elapsed=self.elapsed,
            timestamp=self.time,
            index=index,
        )


def iter_records(text: str) -> Iterator[Any]:
    """Yield each JSON value of a concatenated JSON stream."""
    decoder = json.JSONDecoder()
    position = 0
    count = 0
    end = len(text)
    while True:
        position = _WHITESPACE.match(text, position).end()
        if position >= end:
            return
        try:
            record, position = decoder.raw_decode(text, position)
        except json.JSONDecodeError as e:
            raise MalformedEventError(
                f"invalid JSON at line {e.lineno} column {e.colno}: {e.msg}",
                position=count,
            ) from e
        yield record
        count += 1


def _describe(error: ValidationError) -> str:
    problems = []
    for detail in error.errors():
        location = ".".join(str(part) for part in detail["loc"]) or "record"
        problems.append(f"{location}: {detail['msg']}")
    return "; ".join(problems)


def decode_record(record: Any, index: int) -> TestEvent:
    """Validate one decoded JSON value and turn it into a TestEvent."""
    if not isinstance(record, dict):
        raise MalformedEventError(
            f"expected a JSON object, got {type(record).__name__}", position=index
        )
    try:
        wire = WireEvent.model_validate(record)
    except ValidationError as e:
        raise MalformedEventError(_describe(e), position=index) from e
    return wire.to_event(index)


def decode_events(text: str) -> List[TestEvent]:
    """
    Decode a complete event stream.

    Args:
        text: Concatenated JSON objects as written by `go test -json`

    Returns:
        Events in arrival order with sequence indices 0, 1, 2, ...

    Raises:
        MalformedEventError: If any record fails to decode or validate
    """
    events = [decode_record(record, index) for index, record in enumerate(iter_records(text))]
    logger.debug("Decoded {} events", len(events))
    return events


def read_events(stream: TextIO) -> List[TestEvent]:
    """
    Read and decode an entire event stream from a text file object.

    Raises:
        MalformedEventError: If the stream is not valid UTF-8, or any record
            fails to decode or validate
    """
    try:
        text = stream.read()
    except UnicodeDecodeError as e:
        raise MalformedEventError(
            f"input is not valid UTF-8: byte {e.object[e.start:e.start + 1]!r}: {e.reason}"
        ) from e
    return decode_events(text)

