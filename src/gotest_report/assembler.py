"""
Report assembly for go test event streams.

Orchestrates classification, per-package building and final assembly of a
TestReport. Packages are grouped through a dict keyed by package name; the
report order is restored afterwards from each package's sequence index.
"""

from datetime import datetime
from typing import Dict, Iterable, List, Optional

from loguru import logger

from .builders import PackageBuilder
from .classifier import classify_events
from .models import Counts, TestEvent, TestPackage, TestReport


class ReportAssembler:
    """
    Collects built packages and produces the final report.

    The creation time is captured when the assembler is created, which is
    the moment assembly of a report begins.
    """

    def __init__(self, created: Optional[datetime] = None):
        """
        Initialize assembler.

        Args:
            created: Report creation time. Defaults to now.
        """
        self.created = created or datetime.now()
        self.packages: List[TestPackage] = []

    def add(self, package: TestPackage) -> None:
        """Add a built package to the report."""
        self.packages.append(package)

    def assemble(self) -> TestReport:
        """
        Sum package counts and order packages by discovery.

        Returns:
            TestReport with packages sorted by their first sequence index
        """
        counts = Counts()
        for package in self.packages:
            counts.add(package.counts)

        packages = sorted(self.packages, key=lambda p: p.index)
        return TestReport(created=self.created, packages=packages, counts=counts)


def build_report(
    events: Iterable[TestEvent],
    created: Optional[datetime] = None,
) -> TestReport:
    """
    Run the whole aggregation pipeline over a decoded event stream.

    Every event is classified before any aggregation starts, so an unknown
    action aborts the run without touching the builders.

    Args:
        events: Decoded events carrying their sequence indices
        created: Optional report creation time (defaults to now)

    Returns:
        The assembled TestReport

    Raises:
        UnknownActionError: If any event has an unrecognized action
        MalformedEventError: If a terminal event lacks its timing fields
        IncompleteTestError: If a test never reported pass, fail or skip
    """
    assembler = ReportAssembler(created)
    classified = classify_events(list(events))

    builders: Dict[str, PackageBuilder] = {}
    for event in classified:
        builder = builders.get(event.package)
        if builder is None:
            builder = PackageBuilder(event.package)
            builders[event.package] = builder
        builder.feed(event)

    for builder in builders.values():
        assembler.add(builder.build())

    report = assembler.assemble()
    logger.info(
        "Assembled report: {} packages, {} tests ({} passed, {} failed, {} skipped)",
        len(report.packages),
        report.counts.total,
        report.counts.passed,
        report.counts.failed,
        report.counts.skipped,
    )
    return report
