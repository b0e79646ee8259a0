"""Festival lifecycle state machine.

States advance strictly forward, one step at a time:
CREATED → SUBMISSION → ASSIGNMENT → REVIEW → SCHEDULING →
FINAL_SUBMISSION → DECISION → ANNOUNCED
"""

from enum import Enum

from festivalhub.core.exceptions import PreconditionFailedError
from festivalhub.core.permissions import Action


class FestivalState(str, Enum):
    """Festival phases, in lifecycle order."""

    CREATED = "CREATED"
    SUBMISSION = "SUBMISSION"
    ASSIGNMENT = "ASSIGNMENT"
    REVIEW = "REVIEW"
    SCHEDULING = "SCHEDULING"
    FINAL_SUBMISSION = "FINAL_SUBMISSION"
    DECISION = "DECISION"
    ANNOUNCED = "ANNOUNCED"


FESTIVAL_PHASES: tuple[FestivalState, ...] = tuple(FestivalState)

# One action per step of the sequence, in order
PHASE_ACTIONS: tuple[Action, ...] = (
    Action.START_SUBMISSION,
    Action.START_ASSIGNMENT,
    Action.START_REVIEW,
    Action.START_SCHEDULING,
    Action.START_FINAL_SUBMISSION,
    Action.START_DECISION,
    Action.ANNOUNCE,
)

# action -> (required state, new state)
FESTIVAL_TRANSITIONS: dict[Action, tuple[FestivalState, FestivalState]] = {
    action: (FESTIVAL_PHASES[index], FESTIVAL_PHASES[index + 1])
    for index, action in enumerate(PHASE_ACTIONS)
}

# Festival phases during which performances may still be created
OPEN_FOR_CREATION: frozenset[FestivalState] = frozenset(
    {FestivalState.CREATED, FestivalState.SUBMISSION}
)


def next_state(current: FestivalState) -> FestivalState | None:
    """Return the phase following ``current``, or None once ANNOUNCED."""
    index = FESTIVAL_PHASES.index(current)
    if index + 1 >= len(FESTIVAL_PHASES):
        return None
    return FESTIVAL_PHASES[index + 1]


def is_locked(state: FestivalState) -> bool:
    """Descriptive fields are immutable once the festival is announced."""
    return state == FestivalState.ANNOUNCED


def assert_festival_transition(current: FestivalState, action: Action) -> FestivalState:
    """Validate a festival phase transition.

    Args:
        current: Current festival state
        action: Requested phase transition

    Returns:
        The state the festival moves to

    Raises:
        PreconditionFailedError: If the festival is not in the required state
    """
    required, target = FESTIVAL_TRANSITIONS[action]
    if current != required:
        raise PreconditionFailedError(
            f"Festival must be in {required.value} state to {action.value} "
            f"(current state: {current.value})",
            required_state=required.value,
        )
    return target
