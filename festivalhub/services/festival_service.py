"""Festival lifecycle service."""

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Any
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from festivalhub.core.exceptions import (
    ConflictError,
    LockedError,
    NotFoundError,
    ValidationError,
)
from festivalhub.core.permissions import Action, Subject, UserRole
from festivalhub.domain.festival_state import (
    FESTIVAL_TRANSITIONS,
    FestivalState,
    assert_festival_transition,
    is_locked,
)
from festivalhub.domain.performance_state import PerformanceState, is_decision_casualty
from festivalhub.models.festival import Festival
from festivalhub.models.performance import Performance
from festivalhub.services.audit_service import audit_service
from festivalhub.services.base import TransactionalService, check_authorized, festival_query
from festivalhub.services.user_service import UserService, user_service

logger = logging.getLogger(__name__)


@dataclass
class DecisionOutcome:
    """Festival after start-decision plus the performances it auto-rejected."""

    festival: Festival
    rejected_performances: list[str] = field(default_factory=list)


def festival_subject(festival: Festival) -> Subject:
    return Subject(organizer_ids=festival.organizer_ids)


class FestivalService(TransactionalService):
    """Service owning festival state and its phase transitions."""

    def __init__(self, *args: Any, users: UserService | None = None, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.users = users or user_service

    async def create_festival(
        self,
        actor_id: UUID,
        name: str,
        description: str | None = None,
        start_date: date | None = None,
        end_date: date | None = None,
        venue: str | None = None,
    ) -> Festival:
        """Create a festival; the creator becomes its first organizer.

        Raises:
            ValidationError: If the name is blank or the dates are reversed
            AuthorizationError: If the caller is not an organizer or admin
            ConflictError: If the name is taken
        """
        name = (name or "").strip()
        if not name:
            raise ValidationError("Festival name is required")
        _check_dates(start_date, end_date)

        async with self.transaction() as db:
            actor = await self.users.load_actor(db, actor_id)
            check_authorized(actor, Action.CREATE_FESTIVAL)
            await self._assert_name_free(db, name)

            creator = await self.users.load_user(db, actor_id)
            festival = Festival(
                name=name,
                description=description,
                start_date=start_date,
                end_date=end_date,
                venue=venue,
                state=FestivalState.CREATED.value,
                organizers=[creator],
            )
            db.add(festival)
            await db.flush()

            await audit_service.log_transition(
                db, actor.id, Action.CREATE_FESTIVAL.value, "festival", festival.id,
                None, festival.state, name=name,
            )

        logger.info(f"Festival {festival.name} created by {actor_id}")
        return festival

    async def update_festival(
        self, actor_id: UUID, festival_id: UUID, changes: dict[str, Any]
    ) -> Festival:
        """Update descriptive fields of a festival that is not yet announced.

        Raises:
            NotFoundError: If the festival does not exist
            AuthorizationError: If the caller is not an organizer of it
            LockedError: If the festival is announced
            ConflictError: If the new name is taken
        """
        changes = {k: v for k, v in changes.items() if k in Festival.DESCRIPTIVE_FIELDS}
        if "name" in changes:
            changes["name"] = (changes["name"] or "").strip()
            if not changes["name"]:
                raise ValidationError("Festival name cannot be empty")

        async with self.transaction(festival_id) as db:
            festival = await self._get_festival(db, festival_id, for_update=True)
            actor = await self.users.load_actor(db, actor_id)
            check_authorized(actor, Action.UPDATE_FESTIVAL, festival_subject(festival))

            if is_locked(festival.festival_state):
                raise LockedError("Festival is announced and can no longer be updated")

            _check_dates(
                changes.get("start_date", festival.start_date),
                changes.get("end_date", festival.end_date),
            )
            if changes.get("name") and changes["name"] != festival.name:
                await self._assert_name_free(db, changes["name"])

            old_values = {k: _jsonable(getattr(festival, k)) for k in changes}
            for key, value in changes.items():
                setattr(festival, key, value)

            if changes:
                await audit_service.log_action(
                    db, actor.id, Action.UPDATE_FESTIVAL.value, "festival", festival.id,
                    old_values, {k: _jsonable(v) for k, v in changes.items()},
                )

        return festival

    async def add_organizer(self, actor_id: UUID, festival_id: UUID, user_id: UUID) -> Festival:
        """Add another organizer to a festival.

        Raises:
            NotFoundError: If the festival or the target user does not exist
            ValidationError: If the target user is not an organizer
            ConflictError: If the user already organizes the festival
            LockedError: If the festival is announced
        """
        async with self.transaction(festival_id) as db:
            festival = await self._get_festival(db, festival_id, for_update=True)
            actor = await self.users.load_actor(db, actor_id)
            check_authorized(actor, Action.ADD_ORGANIZER, festival_subject(festival))

            if is_locked(festival.festival_state):
                raise LockedError("Festival is announced and can no longer be updated")

            user = await self.users.load_user(db, user_id)
            if user.role != UserRole.ORGANIZER.value:
                raise ValidationError("Only users with the ORGANIZER role can organize a festival")
            if user.id in festival.organizer_ids:
                raise ConflictError(f"{user.username} is already an organizer of this festival")

            festival.organizers.append(user)

            await audit_service.log_action(
                db, actor.id, Action.ADD_ORGANIZER.value, "festival", festival.id,
                None, {"organizer": user.username},
            )

        return festival

    async def get_festival(self, festival_id: UUID) -> Festival:
        async with self.session_factory() as db:
            return await self._get_festival(db, festival_id)

    async def transition(self, actor_id: UUID, festival_id: UUID, action: Action) -> Festival:
        """Advance a festival one phase.

        Raises:
            NotFoundError: If the festival does not exist
            AuthorizationError: If the caller is not an organizer of it
            PreconditionFailedError: If the festival is not in the required state
        """
        if action == Action.START_DECISION:
            return (await self.start_decision(actor_id, festival_id)).festival
        return (await self._advance(actor_id, festival_id, action)).festival

    async def start_submission(self, actor_id: UUID, festival_id: UUID) -> Festival:
        return await self.transition(actor_id, festival_id, Action.START_SUBMISSION)

    async def start_assignment(self, actor_id: UUID, festival_id: UUID) -> Festival:
        return await self.transition(actor_id, festival_id, Action.START_ASSIGNMENT)

    async def start_review(self, actor_id: UUID, festival_id: UUID) -> Festival:
        return await self.transition(actor_id, festival_id, Action.START_REVIEW)

    async def start_scheduling(self, actor_id: UUID, festival_id: UUID) -> Festival:
        return await self.transition(actor_id, festival_id, Action.START_SCHEDULING)

    async def start_final_submission(self, actor_id: UUID, festival_id: UUID) -> Festival:
        return await self.transition(actor_id, festival_id, Action.START_FINAL_SUBMISSION)

    async def start_decision(self, actor_id: UUID, festival_id: UUID) -> DecisionOutcome:
        """Enter DECISION, rejecting approved performances never final-submitted."""
        return await self._advance(actor_id, festival_id, Action.START_DECISION)

    async def announce(self, actor_id: UUID, festival_id: UUID) -> Festival:
        return await self.transition(actor_id, festival_id, Action.ANNOUNCE)

    async def _advance(self, actor_id: UUID, festival_id: UUID, action: Action) -> DecisionOutcome:
        if action not in FESTIVAL_TRANSITIONS:
            raise ValidationError(f"Unknown festival transition: {action.value}")

        async with self.transaction(festival_id) as db:
            festival = await self._get_festival(db, festival_id, for_update=True)
            actor = await self.users.load_actor(db, actor_id)
            check_authorized(actor, action, festival_subject(festival))

            old_state = festival.state
            target = assert_festival_transition(festival.festival_state, action)
            festival.state = target.value

            rejected: list[str] = []
            if action == Action.START_DECISION:
                rejected = await self._reject_unsubmitted(db, festival, actor.id)

            await audit_service.log_transition(
                db, actor.id, action.value, "festival", festival.id, old_state, festival.state,
                **({"rejected_performances": rejected} if rejected else {}),
            )

        logger.info(f"Festival {festival.id} {old_state} -> {festival.state} by {actor_id}")
        return DecisionOutcome(festival=festival, rejected_performances=rejected)

    async def _reject_unsubmitted(
        self, db: AsyncSession, festival: Festival, actor_id: UUID
    ) -> list[str]:
        """Cascade of start-decision over every child performance."""
        result = await db.execute(
            select(Performance)
            .where(Performance.festival_id == festival.id)
            .order_by(Performance.name)
        )
        rejected = []
        for performance in result.scalars():
            if not is_decision_casualty(performance.performance_state):
                continue
            performance.state = PerformanceState.REJECTED.value
            performance.rejection_reason = "Not final-submitted before the decision phase"
            rejected.append(performance.name)
            await audit_service.log_transition(
                db, actor_id, "auto-reject", "performance", performance.id,
                PerformanceState.APPROVED.value, PerformanceState.REJECTED.value,
            )

        if rejected:
            logger.info(f"Festival {festival.id} decision auto-rejected: {', '.join(rejected)}")
        return rejected

    async def _get_festival(
        self, db: AsyncSession, festival_id: UUID, *, for_update: bool = False
    ) -> Festival:
        """Get festival by ID or raise NotFoundError."""
        result = await db.execute(festival_query(festival_id, for_update=for_update))
        festival = result.scalar_one_or_none()
        if not festival:
            raise NotFoundError("Festival", str(festival_id))
        return festival

    async def _assert_name_free(self, db: AsyncSession, name: str) -> None:
        result = await db.execute(select(Festival.id).where(Festival.name == name))
        if result.scalar_one_or_none():
            raise ConflictError("Festival name must be unique")


def _check_dates(start: date | None, end: date | None) -> None:
    if start and end and end < start:
        raise ValidationError("Festival end date cannot be before its start date")


def _jsonable(value: Any) -> Any:
    return value.isoformat() if isinstance(value, date) else value


festival_service = FestivalService()
