"""
Exception hierarchy for gotest-report.

Every error raised while decoding, aggregating or rendering a report derives
from ReportError, so callers can abort the whole run with a single handler.
None of these errors are recoverable: the input is one finite stream and a
report built from part of it would be misleading.
"""

from typing import Optional


class ReportError(Exception):
    """Base exception for all report construction errors."""
    pass


class MalformedEventError(ReportError):
    """Raised when a record cannot be decoded into a test event."""

    def __init__(self, message: str, position: Optional[int] = None):
        self.position = position
        if position is not None:
            message = f"record {position}: {message}"
        super().__init__(message)


class UnknownActionError(ReportError):
    """Raised when an event carries an action outside the known vocabulary."""

    def __init__(self, action: str, index: Optional[int] = None):
        self.action = action
        self.index = index
        location = f" (event {index})" if index is not None else ""
        super().__init__(f"unknown action {action!r}{location}")


class IncompleteTestError(ReportError):
    """Raised when a test started but never reported pass, fail or skip."""

    def __init__(self, package: str, test: str):
        self.package = package
        self.test = test
        super().__init__(
            f"test {test!r} in package {package!r} has no terminal event; "
            "the event stream looks truncated"
        )


class ReportFormatError(ReportError):
    """Raised when an unsupported output format is requested."""
    pass


class ConfigurationError(ReportError):
    """Raised when configuration values or files are invalid."""
    pass
