"""Role-based access control for workflow actions.

The policy is a pure function over plain values: who the actor is, which
action is requested and the ownership facts of the entity it targets. Every
action has exactly one entry in ``POLICY`` so the allow-list can be audited
and tested exhaustively.
"""

from dataclasses import dataclass, field
from enum import Enum
from uuid import UUID

from festivalhub.core.exceptions import AuthorizationError


class UserRole(str, Enum):
    """User roles in the system."""

    USER = "USER"
    ADMIN = "ADMIN"
    ARTIST = "ARTIST"
    STAFF = "STAFF"
    ORGANIZER = "ORGANIZER"


class AccountStatus(str, Enum):
    """Account status supplied by the identity service."""

    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"


class Action(str, Enum):
    """Workflow actions gated by the policy."""

    # Festival
    CREATE_FESTIVAL = "create-festival"
    UPDATE_FESTIVAL = "update-festival"
    ADD_ORGANIZER = "add-organizer"
    START_SUBMISSION = "start-submission"
    START_ASSIGNMENT = "start-assignment"
    START_REVIEW = "start-review"
    START_SCHEDULING = "start-scheduling"
    START_FINAL_SUBMISSION = "start-final-submission"
    START_DECISION = "start-decision"
    ANNOUNCE = "announce"

    # Performance
    CREATE_PERFORMANCE = "create-performance"
    UPDATE_PERFORMANCE = "update-performance"
    SUBMIT = "submit"
    REVIEW = "review"
    APPROVE = "approve"
    REJECT = "reject"
    FINAL_SUBMIT = "final-submit"
    ACCEPT = "accept"
    WITHDRAW = "withdraw"
    ASSIGN_STAFF = "assign-staff"
    ADD_BAND_MEMBER = "add-band-member"


class Ownership(str, Enum):
    """Identity checks applied after the role check."""

    NONE = "none"
    CREATOR = "creator"
    FESTIVAL_ORGANIZER = "festival_organizer"
    ASSIGNED_STAFF_OR_ORGANIZER = "assigned_staff_or_organizer"
    CREATOR_OR_ORGANIZER = "creator_or_organizer"


@dataclass(frozen=True)
class Rule:
    """Allowed roles plus the ownership check for one action."""

    roles: frozenset[UserRole]
    ownership: Ownership = Ownership.NONE


@dataclass(frozen=True)
class Actor:
    """The caller as seen by the workflow core."""

    id: UUID
    role: UserRole
    account_status: AccountStatus = AccountStatus.ACTIVE

    @property
    def is_active(self) -> bool:
        return self.account_status == AccountStatus.ACTIVE


@dataclass(frozen=True)
class Subject:
    """Ownership facts of the entity an action targets."""

    creator_id: UUID | None = None
    staff_assigned_id: UUID | None = None
    organizer_ids: frozenset[UUID] = field(default_factory=frozenset)


@dataclass(frozen=True)
class Decision:
    """Outcome of a policy check."""

    allowed: bool
    reason: str | None = None

    def __bool__(self) -> bool:
        return self.allowed


ANY_ROLE = frozenset(UserRole)
FESTIVAL_MANAGERS = frozenset({UserRole.ORGANIZER, UserRole.ADMIN})
ORGANIZERS = frozenset({UserRole.ORGANIZER})
ARTISTS = frozenset({UserRole.ARTIST})

_FESTIVAL_RULE = Rule(FESTIVAL_MANAGERS, Ownership.FESTIVAL_ORGANIZER)
_ORGANIZER_RULE = Rule(ORGANIZERS, Ownership.FESTIVAL_ORGANIZER)

# Action to rule mapping
POLICY: dict[Action, Rule] = {
    Action.CREATE_FESTIVAL: Rule(FESTIVAL_MANAGERS),
    Action.UPDATE_FESTIVAL: _FESTIVAL_RULE,
    Action.ADD_ORGANIZER: _FESTIVAL_RULE,
    Action.START_SUBMISSION: _FESTIVAL_RULE,
    Action.START_ASSIGNMENT: _FESTIVAL_RULE,
    Action.START_REVIEW: _FESTIVAL_RULE,
    Action.START_SCHEDULING: _FESTIVAL_RULE,
    Action.START_FINAL_SUBMISSION: _FESTIVAL_RULE,
    Action.START_DECISION: _FESTIVAL_RULE,
    Action.ANNOUNCE: _FESTIVAL_RULE,
    Action.CREATE_PERFORMANCE: Rule(ARTISTS),
    Action.UPDATE_PERFORMANCE: Rule(
        frozenset({UserRole.ARTIST, UserRole.ORGANIZER}), Ownership.CREATOR_OR_ORGANIZER
    ),
    Action.SUBMIT: Rule(ANY_ROLE, Ownership.CREATOR),
    Action.REVIEW: Rule(
        frozenset({UserRole.STAFF, UserRole.ORGANIZER}), Ownership.ASSIGNED_STAFF_OR_ORGANIZER
    ),
    Action.APPROVE: _ORGANIZER_RULE,
    Action.REJECT: _ORGANIZER_RULE,
    Action.FINAL_SUBMIT: Rule(ANY_ROLE, Ownership.CREATOR),
    Action.ACCEPT: _ORGANIZER_RULE,
    Action.WITHDRAW: Rule(ARTISTS, Ownership.CREATOR),
    Action.ASSIGN_STAFF: _ORGANIZER_RULE,
    Action.ADD_BAND_MEMBER: Rule(ARTISTS, Ownership.CREATOR),
}


def _is_festival_organizer(actor: Actor, subject: Subject) -> bool:
    return actor.role == UserRole.ORGANIZER and actor.id in subject.organizer_ids


def _check_ownership(actor: Actor, ownership: Ownership, subject: Subject) -> bool:
    if ownership == Ownership.NONE:
        return True
    if ownership == Ownership.CREATOR:
        return subject.creator_id is not None and actor.id == subject.creator_id
    if ownership == Ownership.FESTIVAL_ORGANIZER:
        return actor.role == UserRole.ADMIN or _is_festival_organizer(actor, subject)
    if ownership == Ownership.ASSIGNED_STAFF_OR_ORGANIZER:
        is_assigned = (
            actor.role == UserRole.STAFF
            and subject.staff_assigned_id is not None
            and actor.id == subject.staff_assigned_id
        )
        return is_assigned or _is_festival_organizer(actor, subject)
    if ownership == Ownership.CREATOR_OR_ORGANIZER:
        return actor.id == subject.creator_id or _is_festival_organizer(actor, subject)
    return False


_OWNERSHIP_MESSAGES = {
    Ownership.CREATOR: "Only the creator of the performance can perform '{action}'",
    Ownership.FESTIVAL_ORGANIZER: "Only an organizer of this festival can perform '{action}'",
    Ownership.ASSIGNED_STAFF_OR_ORGANIZER: (
        "Only the assigned staff member or an organizer of this festival can perform '{action}'"
    ),
    Ownership.CREATOR_OR_ORGANIZER: (
        "Only the creator or an organizer of this festival can perform '{action}'"
    ),
}


def authorize(actor: Actor, action: Action, subject: Subject | None = None) -> Decision:
    """Decide whether ``actor`` may perform ``action`` on ``subject``."""
    if not actor.is_active:
        return Decision(False, "Account is inactive. Contact an administrator.")

    rule = POLICY[action]
    if actor.role not in rule.roles:
        return Decision(False, f"Role '{actor.role.value}' is not authorized for '{action.value}'")

    if not _check_ownership(actor, rule.ownership, subject or Subject()):
        return Decision(False, _OWNERSHIP_MESSAGES[rule.ownership].format(action=action.value))

    return Decision(True)


def assert_authorized(actor: Actor, action: Action, subject: Subject | None = None) -> None:
    """Raise ``AuthorizationError`` unless the policy allows the action."""
    decision = authorize(actor, action, subject)
    if not decision:
        raise AuthorizationError(decision.reason)
