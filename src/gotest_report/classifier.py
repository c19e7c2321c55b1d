"""Map go test actions onto start / end / in-progress phases."""

from typing import Dict, List

from loguru import logger

from .errors import UnknownActionError
from .models import Action, PhaseKind, TestEvent

PHASES: Dict[str, PhaseKind] = {
    Action.RUN.value: PhaseKind.START,
    Action.PASS.value: PhaseKind.END,
    Action.FAIL.value: PhaseKind.END,
    Action.SKIP.value: PhaseKind.END,
    Action.OUTPUT.value: PhaseKind.IN_PROGRESS,
    Action.PAUSE.value: PhaseKind.IN_PROGRESS,
    Action.CONT.value: PhaseKind.IN_PROGRESS,
    Action.BENCH.value: PhaseKind.IN_PROGRESS,
}


def classify_action(action: str) -> PhaseKind:
    """
    Return the phase kind for an action label.

    Surrounding whitespace is ignored. Any other label, the empty string
    included, raises UnknownActionError.
    """
    phase = PHASES.get(action.strip())
    if phase is None:
        raise UnknownActionError(action)
    return phase


def classify_events(events: List[TestEvent]) -> List[TestEvent]:
    """Set the phase of every event in place, aborting on the first unknown action."""
    for event in events:
        try:
            event.phase = classify_action(event.action)
        except UnknownActionError:
            raise UnknownActionError(event.action, event.index) from None
    logger.debug("Classified {} events", len(events))
    return events
