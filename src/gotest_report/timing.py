"""
Timing resolution for concluded tests and packages.

The runner stamps an event when a test concludes and reports the time elapsed
since the test began. The report keeps the runner's convention for the two
clock fields: the end time is the event timestamp itself, and the start time
is that timestamp shifted by the elapsed duration (added, not subtracted).
"""

from datetime import datetime, timedelta
from typing import Optional

from .errors import MalformedEventError
from .models import Timing

CLOCK_FORMAT = "%H:%M:%S"

_NANOSECOND = 1
_MICROSECOND = 1000 * _NANOSECOND
_MILLISECOND = 1000 * _MICROSECOND
_SECOND = 1000 * _MILLISECOND
_MINUTE = 60 * _SECOND
_HOUR = 60 * _MINUTE


def format_clock(moment: datetime) -> str:
    """Format a point in time as HH:MM:SS.mmm in its own timezone."""
    return f"{moment.strftime(CLOCK_FORMAT)}.{moment.microsecond // 1000:03d}"


def _decimal(value: int, unit: int) -> str:
    """Render value/unit with the fraction's trailing zeros dropped."""
    whole, remainder = divmod(value, unit)
    if not remainder:
        return str(whole)
    width = len(str(unit)) - 1
    fraction = f"{remainder:0{width}d}".rstrip("0")
    return f"{whole}.{fraction}"


def format_duration(seconds: float) -> str:
    """
    Format a duration the way Go prints a time.Duration.

    Examples: 0s, 850ns, 1.5µs, 10ms, 1.25s, 2m3.5s, 1h0m0s.
    """
    nanos = round(seconds * _SECOND)
    if nanos == 0:
        return "0s"

    sign = "-" if nanos < 0 else ""
    nanos = abs(nanos)

    if nanos < _MICROSECOND:
        return f"{sign}{nanos}ns"
    if nanos < _MILLISECOND:
        return f"{sign}{_decimal(nanos, _MICROSECOND)}µs"
    if nanos < _SECOND:
        return f"{sign}{_decimal(nanos, _MILLISECOND)}ms"

    hours, nanos = divmod(nanos, _HOUR)
    minutes, nanos = divmod(nanos, _MINUTE)
    text = f"{_decimal(nanos, _SECOND)}s"
    if hours or minutes:
        text = f"{minutes}m{text}"
    if hours:
        text = f"{hours}h{text}"
    return sign + text


def resolve_timing(timestamp: Optional[datetime], elapsed: Optional[float]) -> Timing:
    """
    Derive the display timing for a concluded test or package.

    Args:
        timestamp: Time the runner stamped on the concluding event
        elapsed: Seconds elapsed, None when the runner sent none

    Returns:
        Timing with millisecond clock strings and a duration string

    Raises:
        MalformedEventError: If either input is missing, or the elapsed time
            is not finite or does not fit the calendar
    """
    if timestamp is None:
        raise MalformedEventError("elapsed time reported without a timestamp")
    if elapsed is None:
        raise MalformedEventError("concluding event carries no elapsed time")

    try:
        start = timestamp + timedelta(seconds=elapsed)
    except (OverflowError, ValueError) as e:
        raise MalformedEventError(f"elapsed time {elapsed}s is not a usable duration") from e

    return Timing(
        start_time=format_clock(start),
        end_time=format_clock(timestamp),
        duration=format_duration(elapsed),
    )
