"""Performance state machine.

Unlike the festival, performance states form a directed graph and every edge
is additionally gated by the parent festival's phase:

    CREATED ─submit─▶ SUBMITTED ─review─▶ REVIEWED ─approve─▶ APPROVED
    APPROVED ─final-submit─▶ FINAL_SUBMITTED ─accept─▶ SCHEDULED
    REVIEWED|APPROVED ─reject─▶ REJECTED
    CREATED ─withdraw─▶ (deleted)

Approval is also recorded as a durable flag on the performance, so a
FINAL_SUBMITTED performance is still known to be approved.
"""

from dataclasses import dataclass

from enum import Enum

from festivalhub.core.exceptions import PreconditionFailedError
from festivalhub.core.permissions import Action
from festivalhub.domain.festival_state import FestivalState


class PerformanceState(str, Enum):
    """Lifecycle states of a performance."""

    CREATED = "CREATED"
    SUBMITTED = "SUBMITTED"
    REVIEWED = "REVIEWED"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    SCHEDULED = "SCHEDULED"
    FINAL_SUBMITTED = "FINAL_SUBMITTED"


TERMINAL_STATES: frozenset[PerformanceState] = frozenset(
    {PerformanceState.SCHEDULED, PerformanceState.REJECTED}
)

# Scores strictly below this allow a manual rejection during SCHEDULING
REJECTION_SCORE_THRESHOLD = 5

MIN_REVIEW_SCORE = 1
MAX_REVIEW_SCORE = 10


@dataclass(frozen=True)
class TransitionRule:
    """Source states, required festival phases and target of one transition.

    ``festival_states`` of None means any festival phase; ``target`` of None
    means the performance is deleted.
    """

    sources: frozenset[PerformanceState]
    festival_states: frozenset[FestivalState] | None
    target: PerformanceState | None


PERFORMANCE_TRANSITIONS: dict[Action, TransitionRule] = {
    Action.SUBMIT: TransitionRule(
        frozenset({PerformanceState.CREATED}),
        frozenset({FestivalState.SUBMISSION}),
        PerformanceState.SUBMITTED,
    ),
    Action.REVIEW: TransitionRule(
        frozenset({PerformanceState.SUBMITTED}),
        frozenset({FestivalState.REVIEW}),
        PerformanceState.REVIEWED,
    ),
    Action.APPROVE: TransitionRule(
        frozenset({PerformanceState.REVIEWED}),
        frozenset({FestivalState.SCHEDULING}),
        PerformanceState.APPROVED,
    ),
    Action.REJECT: TransitionRule(
        frozenset({PerformanceState.REVIEWED, PerformanceState.APPROVED}),
        frozenset({FestivalState.SCHEDULING, FestivalState.DECISION}),
        PerformanceState.REJECTED,
    ),
    Action.FINAL_SUBMIT: TransitionRule(
        frozenset({PerformanceState.APPROVED}),
        None,
        PerformanceState.FINAL_SUBMITTED,
    ),
    Action.ACCEPT: TransitionRule(
        frozenset({PerformanceState.FINAL_SUBMITTED}),
        frozenset({FestivalState.DECISION}),
        PerformanceState.SCHEDULED,
    ),
    Action.WITHDRAW: TransitionRule(
        frozenset({PerformanceState.CREATED}),
        None,
        None,
    ),
}


def _names(states: frozenset) -> str:
    return " or ".join(sorted(s.value for s in states))


def assert_performance_transition(
    current: PerformanceState,
    festival_state: FestivalState,
    action: Action,
) -> TransitionRule:
    """Validate a performance transition against both state machines.

    Raises:
        PreconditionFailedError: If the festival phase or the performance
            state does not allow the transition
    """
    rule = PERFORMANCE_TRANSITIONS[action]
    if rule.festival_states is not None and festival_state not in rule.festival_states:
        required = _names(rule.festival_states)
        raise PreconditionFailedError(
            f"Festival must be in {required} state to {action.value} a performance "
            f"(current state: {festival_state.value})",
            required_state=required,
        )
    if current not in rule.sources:
        required = _names(rule.sources)
        raise PreconditionFailedError(
            f"Performance must be in {required} state to {action.value} "
            f"(current state: {current.value})",
            required_state=required,
        )
    return rule


def assert_rejection_allowed(
    current: PerformanceState,
    festival_state: FestivalState,
    review_score: int | None,
) -> None:
    """Apply the extra guards of a manual rejection.

    During SCHEDULING only poorly reviewed performances may be rejected;
    during DECISION only approved performances that missed final submission.
    """
    assert_performance_transition(current, festival_state, Action.REJECT)

    if festival_state == FestivalState.SCHEDULING:
        if review_score is None or review_score >= REJECTION_SCORE_THRESHOLD:
            raise PreconditionFailedError(
                "Performance cannot be rejected. The review score is acceptable.",
                required_state=PerformanceState.REVIEWED.value,
            )
    elif current != PerformanceState.APPROVED:
        raise PreconditionFailedError(
            "Only approved performances without a final submission can be "
            "rejected during DECISION",
            required_state=PerformanceState.APPROVED.value,
        )


def is_decision_casualty(state: PerformanceState) -> bool:
    """Approved but never final-submitted: rejected when DECISION starts."""
    return state == PerformanceState.APPROVED
