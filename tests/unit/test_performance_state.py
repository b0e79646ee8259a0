"""
Unit tests for the performance transition graph and its festival-phase gates.
"""

import pytest

from festivalhub.core.exceptions import PreconditionFailedError
from festivalhub.core.permissions import Action
from festivalhub.domain.festival_state import FestivalState
from festivalhub.domain.performance_state import (
    PERFORMANCE_TRANSITIONS,
    TERMINAL_STATES,
    PerformanceState,
    assert_performance_transition,
    assert_rejection_allowed,
    is_decision_casualty,
)

F = FestivalState
P = PerformanceState


class TestTransitionGraph:
    """Each edge is legal only for its source states and festival phases."""

    @pytest.mark.parametrize(
        ("action", "current", "festival", "target"),
        [
            (Action.SUBMIT, P.CREATED, F.SUBMISSION, P.SUBMITTED),
            (Action.REVIEW, P.SUBMITTED, F.REVIEW, P.REVIEWED),
            (Action.APPROVE, P.REVIEWED, F.SCHEDULING, P.APPROVED),
            (Action.FINAL_SUBMIT, P.APPROVED, F.FINAL_SUBMISSION, P.FINAL_SUBMITTED),
            (Action.FINAL_SUBMIT, P.APPROVED, F.SCHEDULING, P.FINAL_SUBMITTED),
            (Action.ACCEPT, P.FINAL_SUBMITTED, F.DECISION, P.SCHEDULED),
            (Action.REJECT, P.REVIEWED, F.SCHEDULING, P.REJECTED),
            (Action.REJECT, P.APPROVED, F.DECISION, P.REJECTED),
        ],
    )
    def test_legal_edges(self, action, current, festival, target):
        rule = assert_performance_transition(current, festival, action)
        assert rule.target == target

    def test_withdraw_deletes(self):
        rule = assert_performance_transition(P.CREATED, F.REVIEW, Action.WITHDRAW)
        assert rule.target is None

    @pytest.mark.parametrize("festival", [s for s in FestivalState if s != F.SUBMISSION])
    def test_submit_outside_submission_phase(self, festival):
        with pytest.raises(PreconditionFailedError) as exc_info:
            assert_performance_transition(P.CREATED, festival, Action.SUBMIT)
        assert exc_info.value.required_state == "SUBMISSION"

    def test_approve_requires_reviewed(self):
        with pytest.raises(PreconditionFailedError) as exc_info:
            assert_performance_transition(P.SUBMITTED, F.SCHEDULING, Action.APPROVE)
        assert exc_info.value.required_state == "REVIEWED"

    def test_scheduled_requires_decision_phase(self):
        for festival in FestivalState:
            if festival == F.DECISION:
                continue
            with pytest.raises(PreconditionFailedError):
                assert_performance_transition(P.FINAL_SUBMITTED, festival, Action.ACCEPT)

    def test_festival_phase_checked_before_source_state(self):
        with pytest.raises(PreconditionFailedError) as exc_info:
            assert_performance_transition(P.APPROVED, F.REVIEW, Action.APPROVE)
        assert exc_info.value.required_state == "SCHEDULING"

    @pytest.mark.parametrize("terminal", sorted(TERMINAL_STATES))
    @pytest.mark.parametrize("action", list(PERFORMANCE_TRANSITIONS))
    def test_terminal_states_have_no_exit(self, terminal, action):
        for festival in FestivalState:
            with pytest.raises(PreconditionFailedError):
                assert_performance_transition(terminal, festival, action)

    def test_withdraw_only_from_created(self):
        with pytest.raises(PreconditionFailedError):
            assert_performance_transition(P.SUBMITTED, F.SUBMISSION, Action.WITHDRAW)


class TestManualRejection:
    """Rejection windows: low score in SCHEDULING, approved-only in DECISION."""

    def test_low_score_during_scheduling(self):
        assert_rejection_allowed(P.REVIEWED, F.SCHEDULING, 3)
        assert_rejection_allowed(P.APPROVED, F.SCHEDULING, 4)

    @pytest.mark.parametrize("score", [5, 6, 10, None])
    def test_acceptable_score_during_scheduling(self, score):
        with pytest.raises(PreconditionFailedError) as exc_info:
            assert_rejection_allowed(P.REVIEWED, F.SCHEDULING, score)
        assert "score" in exc_info.value.detail

    def test_approved_during_decision(self):
        assert_rejection_allowed(P.APPROVED, F.DECISION, 9)

    def test_reviewed_during_decision(self):
        with pytest.raises(PreconditionFailedError):
            assert_rejection_allowed(P.REVIEWED, F.DECISION, 2)

    def test_final_submitted_during_decision(self):
        with pytest.raises(PreconditionFailedError):
            assert_rejection_allowed(P.FINAL_SUBMITTED, F.DECISION, 2)

    def test_outside_windows(self):
        with pytest.raises(PreconditionFailedError):
            assert_rejection_allowed(P.REVIEWED, F.REVIEW, 1)


class TestDecisionCascade:
    def test_only_approved_is_a_casualty(self):
        assert [s for s in PerformanceState if is_decision_casualty(s)] == [P.APPROVED]
