"""
Data models for go test event aggregation.

Provides the raw event record emitted by `go test -json` and the three
aggregate levels built from it: test units, packages and the report.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional


class Action(str, Enum):
    """Action labels emitted by the go test runner."""

    RUN = "run"
    PASS = "pass"
    FAIL = "fail"
    SKIP = "skip"
    OUTPUT = "output"
    PAUSE = "pause"
    CONT = "cont"
    BENCH = "bench"


class PhaseKind(str, Enum):
    """Where an event sits in the life of a test."""

    START = "start"
    END = "end"
    IN_PROGRESS = "in_progress"


@dataclass
class TestEvent:
    """A single occurrence in the event stream."""

    __test__ = False

    action: str
    package: str = ""
    test: str = ""
    output: str = ""
    elapsed: Optional[float] = None  # None means the runner sent no elapsed
    timestamp: Optional[datetime] = None
    index: int = 0  # Sequence index assigned at ingestion
    phase: Optional[PhaseKind] = None  # Set by the classifier

    @property
    def has_elapsed(self) -> bool:
        return self.elapsed is not None

    @property
    def is_package_level(self) -> bool:
        return not self.test


@dataclass
class Timing:
    """Display strings derived from a timestamp and an elapsed duration."""

    start_time: str
    end_time: str
    duration: str

    def to_dict(self) -> Dict[str, str]:
        return {
            "start_time": self.start_time,
            "end_time": self.end_time,
            "duration": self.duration,
        }


@dataclass
class Counts:
    """Outcome counters for a package or a whole report."""

    total: int = 0
    passed: int = 0
    skipped: int = 0
    bench: int = 0
    failed: int = 0

    def add(self, other: "Counts") -> None:
        """Add another set of counters into this one."""
        self.total += other.total
        self.passed += other.passed
        self.skipped += other.skipped
        self.bench += other.bench
        self.failed += other.failed

    def to_dict(self) -> Dict[str, int]:
        """Convert to dictionary for serialization."""
        return {
            "total": self.total,
            "pass": self.passed,
            "skip": self.skipped,
            "bench": self.bench,
            "fail": self.failed,
        }


def _timing_dict(timing: Optional[Timing]) -> Dict[str, Optional[str]]:
    if timing is None:
        return {"start_time": None, "end_time": None, "duration": None}
    return timing.to_dict()


@dataclass
class TestUnit:
    """Aggregate of every event sharing one (package, test) pair."""

    __test__ = False

    name: str
    package: str = ""
    action: str = ""  # Terminal outcome, only set from an end-phase event
    output: str = ""
    elapsed: Optional[float] = None
    timestamp: Optional[datetime] = None
    timing: Optional[Timing] = None
    index: int = 0
    benchmarked: bool = False

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "name": self.name,
            "package": self.package,
            "action": self.action,
            "output": self.output,
            "elapsed": self.elapsed,
            "timestamp": self.timestamp.isoformat() if self.timestamp else None,
            **_timing_dict(self.timing),
        }


@dataclass
class TestPackage:
    """
    Aggregate of one package: its test units plus package-level events.

    Package-level events are those without a test name, e.g. the final
    "ok"/"FAIL" lines and the package's own pass/fail/skip event.
    """

    __test__ = False

    name: str
    action: str = ""
    output: str = ""
    elapsed: Optional[float] = None
    timestamp: Optional[datetime] = None
    timing: Optional[Timing] = None
    index: int = 0  # Smallest sequence index seen for this package
    tests: List[TestUnit] = field(default_factory=list)
    counts: Counts = field(default_factory=Counts)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "name": self.name,
            "action": self.action,
            "output": self.output,
            "elapsed": self.elapsed,
            "timestamp": self.timestamp.isoformat() if self.timestamp else None,
            **_timing_dict(self.timing),
            "counts": self.counts.to_dict(),
            "tests": [t.to_dict() for t in self.tests],
        }


@dataclass
class TestReport:
    """The complete report: ordered packages plus grand totals."""

    __test__ = False

    created: datetime
    packages: List[TestPackage] = field(default_factory=list)
    counts: Counts = field(default_factory=Counts)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "created": self.created.isoformat(),
            "counts": self.counts.to_dict(),
            "packages": [p.to_dict() for p in self.packages],
        }
