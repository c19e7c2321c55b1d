"""
Builders that fold classified events into test units and packages.

Events arrive interleaved across packages and tests. The builders are fed one
event at a time in arrival order and keep enough state to produce a single
aggregate each once the stream is exhausted.
"""

from typing import Dict

from loguru import logger

from .errors import IncompleteTestError, MalformedEventError
from .models import Action, Counts, PhaseKind, TestEvent, TestPackage, TestUnit
from .timing import resolve_timing


def _require_timing(event: TestEvent) -> None:
    """Terminal events must carry both a timestamp and an elapsed duration."""
    if event.timestamp is None or not event.has_elapsed:
        subject = f"test {event.test!r}" if event.test else f"package {event.package!r}"
        raise MalformedEventError(
            f"{event.action.strip()} event for {subject} lacks elapsed or timestamp",
            position=event.index,
        )


class TestUnitBuilder:
    """Accumulates the events of one (package, test) pair into a TestUnit."""

    __test__ = False

    def __init__(self, package: str, name: str):
        self.unit = TestUnit(name=name, package=package)
        self._fed = False
        self._started = False

    def feed(self, event: TestEvent) -> None:
        unit = self.unit
        if not self._fed:
            unit.index = event.index
            self._fed = True

        unit.output += event.output

        if event.phase is PhaseKind.START and not self._started:
            unit.package = event.package
            unit.index = event.index
            self._started = True
        elif event.phase is PhaseKind.END:
            _require_timing(event)
            unit.elapsed = event.elapsed
            unit.timestamp = event.timestamp
            unit.action = event.action.strip()
        elif event.action.strip() == Action.BENCH.value:
            unit.benchmarked = True

    def build(self) -> TestUnit:
        """
        Finish the unit and resolve its timing.

        Raises:
            IncompleteTestError: If no pass, fail or skip event was ever fed
        """
        unit = self.unit
        if not unit.action:
            raise IncompleteTestError(unit.package, unit.name)
        unit.timing = resolve_timing(unit.timestamp, unit.elapsed)
        return unit


class PackageBuilder:
    """
    Accumulates every event of one package into a TestPackage.

    Events naming a test are routed to a per-test TestUnitBuilder. Events
    without a test name belong to the package itself: their output is kept
    on the package, and the package's own terminal event supplies its action
    and timing.
    """

    def __init__(self, name: str):
        self.package = TestPackage(name=name)
        self._units: Dict[str, TestUnitBuilder] = {}
        self._fed = False

    def feed(self, event: TestEvent) -> None:
        package = self.package
        if not self._fed or event.index < package.index:
            package.index = event.index
            self._fed = True

        if event.test:
            builder = self._units.get(event.test)
            if builder is None:
                builder = TestUnitBuilder(package.name, event.test)
                self._units[event.test] = builder
            builder.feed(event)
            return

        package.output += event.output
        if event.phase is PhaseKind.END:
            _require_timing(event)
            package.action = event.action.strip()
            package.timestamp = event.timestamp
        if event.has_elapsed:
            package.elapsed = event.elapsed
            timestamp = event.timestamp or package.timestamp
            if timestamp is None:
                raise MalformedEventError(
                    f"elapsed time for package {package.name!r} reported without a timestamp",
                    position=event.index,
                )
            package.timing = resolve_timing(timestamp, event.elapsed)

    def build(self) -> TestPackage:
        """Build every test unit, count outcomes and return the package."""
        package = self.package
        counts = Counts(total=len(self._units))

        units = [builder.build() for builder in self._units.values()]
        for unit in units:
            self._count(counts, unit)

        package.tests = sorted(units, key=lambda u: u.index)
        package.counts = counts
        logger.debug(
            "Built package {!r}: {} tests, {} passed, {} failed, {} skipped",
            package.name,
            counts.total,
            counts.passed,
            counts.failed,
            counts.skipped,
        )
        return package

    @staticmethod
    def _count(counts: Counts, unit: TestUnit) -> None:
        if unit.action == Action.PASS.value:
            counts.passed += 1
        elif unit.action == Action.FAIL.value:
            counts.failed += 1
        elif unit.action == Action.SKIP.value:
            counts.skipped += 1
        # Any other terminal action is counted in total only.
        if unit.benchmarked:
            counts.bench += 1
