"""
gotest-report: aggregate `go test -json` event streams into package/test reports.

Aggregation API:
    >>> from gotest_report import build_report, decode_events
    >>> report = build_report(decode_events(stream_text))
    >>> print(f"{report.counts.passed}/{report.counts.total} passed")

Rendering:
    >>> from gotest_report import write_report
    >>> write_report(report, "report.xml", fmt="xml")
"""

__version__ = "0.1.0"

from loguru import logger

from .assembler import ReportAssembler, build_report
from .builders import PackageBuilder, TestUnitBuilder
from .classifier import classify_action, classify_events
from .decoder import decode_events, read_events
from .errors import (
    ConfigurationError,
    IncompleteTestError,
    MalformedEventError,
    ReportError,
    ReportFormatError,
    UnknownActionError,
)
from .models import (
    Action,
    Counts,
    PhaseKind,
    TestEvent,
    TestPackage,
    TestReport,
    TestUnit,
    Timing,
)
from .timing import format_duration, resolve_timing
from .writers import render_report, write_report

# Silent as a library; the command line enables its own records
logger.disable(__name__)

__all__ = [
    # Pipeline
    "build_report",
    "decode_events",
    "read_events",
    "render_report",
    "write_report",
    # Components
    "ReportAssembler",
    "PackageBuilder",
    "TestUnitBuilder",
    "classify_action",
    "classify_events",
    "format_duration",
    "resolve_timing",
    # Models
    "Action",
    "Counts",
    "PhaseKind",
    "TestEvent",
    "TestPackage",
    "TestReport",
    "TestUnit",
    "Timing",
    # Errors
    "ReportError",
    "MalformedEventError",
    "UnknownActionError",
    "IncompleteTestError",
    "ReportFormatError",
    "ConfigurationError",
]
