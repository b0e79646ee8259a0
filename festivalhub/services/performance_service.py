"""Performance lifecycle service."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from festivalhub.core.exceptions import (
    ConflictError,
    LockedError,
    NotFoundError,
    PreconditionFailedError,
    ValidationError,
)
from festivalhub.core.permissions import Action, Actor, Subject, UserRole
from festivalhub.domain.festival_state import OPEN_FOR_CREATION, is_locked
from festivalhub.domain.performance_state import (
    MAX_REVIEW_SCORE,
    MIN_REVIEW_SCORE,
    TERMINAL_STATES,
    PerformanceState,
    assert_performance_transition,
    assert_rejection_allowed,
)
from festivalhub.models.festival import Festival
from festivalhub.models.performance import Performance
from festivalhub.services.audit_service import audit_service
from festivalhub.services.base import TransactionalService, check_authorized, festival_query
from festivalhub.services.user_service import RoleElevationRequested, UserService, user_service

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ("name", "description", "genre", "duration")

# Roles that see performance ids in search results
ID_VISIBLE_ROLES = frozenset({UserRole.ADMIN, UserRole.ORGANIZER, UserRole.ARTIST})


def performance_subject(performance: Performance, festival: Festival) -> Subject:
    return Subject(
        creator_id=performance.creator_id,
        staff_assigned_id=performance.staff_assigned_id,
        organizer_ids=festival.organizer_ids,
    )


def _clean_list(values: Any, field_name: str) -> list[str]:
    if not isinstance(values, list) or not values:
        raise ValidationError(f"{field_name} must be a non-empty list")
    cleaned = [str(v).strip() for v in values if v is not None and str(v).strip()]
    if len(cleaned) != len(values):
        raise ValidationError(f"{field_name} cannot contain empty entries")
    return cleaned


def _words(query: str | None) -> list[str]:
    return query.split() if query else []


class PerformanceService(TransactionalService):
    """Service owning performance state; every transition is gated by the festival phase."""

    def __init__(self, *args: Any, users: UserService | None = None, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.users = users or user_service

    # ============ CREATE / UPDATE ============

    async def create_performance(
        self,
        actor_id: UUID,
        festival_id: UUID,
        name: str,
        description: str | None = None,
        genre: str | None = None,
        duration: int | None = None,
        band_members: list[str] | None = None,
    ) -> Performance:
        """Create a performance in a festival that is still open.

        Raises:
            ValidationError: If the name is blank
            NotFoundError: If the festival does not exist
            AuthorizationError: If the caller is not an artist
            PreconditionFailedError: If the festival no longer accepts performances
            ConflictError: If the name is taken within the festival
        """
        name = (name or "").strip()
        if not name:
            raise ValidationError("Performance name is required")

        async with self.transaction(festival_id) as db:
            festival = await self._get_festival(db, festival_id, for_update=True)
            actor = await self.users.load_actor(db, actor_id)
            check_authorized(actor, Action.CREATE_PERFORMANCE)

            if festival.festival_state not in OPEN_FOR_CREATION:
                raise PreconditionFailedError(
                    "Performances can only be created while the festival is in CREATED "
                    f"or SUBMISSION state (current state: {festival.state})",
                    required_state="CREATED or SUBMISSION",
                )
            await self._assert_name_free(db, festival.id, name)

            members = list(dict.fromkeys(m.strip() for m in band_members or [] if m and m.strip()))
            performance = Performance(
                festival_id=festival.id,
                creator_id=actor.id,
                name=name,
                description=description,
                genre=genre,
                duration=duration,
                band_members=members,
                state=PerformanceState.CREATED.value,
                approved=False,
            )
            db.add(performance)
            await db.flush()

            await audit_service.log_transition(
                db, actor.id, Action.CREATE_PERFORMANCE.value, "performance", performance.id,
                None, performance.state, name=name,
            )

        logger.info(f"Performance {performance.name} created in festival {festival_id}")
        return performance

    async def update_performance(
        self, actor_id: UUID, performance_id: UUID, changes: dict[str, Any]
    ) -> Performance:
        """Update descriptive fields of a performance.

        Raises:
            PreconditionFailedError: If the performance is SCHEDULED or REJECTED
            LockedError: If the festival is announced
            ConflictError: If the new name is taken within the festival
        """
        changes = {k: v for k, v in changes.items() if k in EDITABLE_FIELDS}
        if "name" in changes:
            changes["name"] = (changes["name"] or "").strip()
            if not changes["name"]:
                raise ValidationError("Performance name cannot be empty")

        async with self._locked(performance_id) as (db, performance, festival):
            actor = await self.users.load_actor(db, actor_id)
            check_authorized(
                actor, Action.UPDATE_PERFORMANCE, performance_subject(performance, festival)
            )

            if is_locked(festival.festival_state):
                raise LockedError("Festival is announced and its performances can no longer be updated")
            if performance.performance_state in TERMINAL_STATES:
                raise PreconditionFailedError(
                    f"Performance in {performance.state} state can no longer be updated"
                )
            if changes.get("name") and changes["name"] != performance.name:
                await self._assert_name_free(db, festival.id, changes["name"])

            old_values = {k: getattr(performance, k) for k in changes}
            for key, value in changes.items():
                setattr(performance, key, value)

            if changes:
                await audit_service.log_action(
                    db, actor.id, Action.UPDATE_PERFORMANCE.value, "performance", performance.id,
                    old_values, changes,
                )

        return performance

    # ============ TRANSITIONS ============

    async def submit(self, actor_id: UUID, performance_id: UUID) -> Performance:
        """Submit a created performance while the festival is in SUBMISSION."""
        async with self._locked(performance_id) as (db, performance, festival):
            actor = await self._authorize(db, actor_id, Action.SUBMIT, performance, festival)
            await self._apply(db, actor, performance, festival, Action.SUBMIT)
        return performance

    async def review(
        self, actor_id: UUID, performance_id: UUID, score: Any, comments: str | None
    ) -> Performance:
        """Record a review and move the performance to REVIEWED.

        The payload is checked before the caller, so a malformed review fails
        with ValidationError whoever sends it.
        """
        if isinstance(score, bool) or not isinstance(score, int):
            raise ValidationError("Review score is required and must be an integer")
        if not MIN_REVIEW_SCORE <= score <= MAX_REVIEW_SCORE:
            raise ValidationError(
                f"Review score must be between {MIN_REVIEW_SCORE} and {MAX_REVIEW_SCORE}"
            )
        if not comments or not comments.strip():
            raise ValidationError("Review comments are required")

        async with self._locked(performance_id) as (db, performance, festival):
            actor = await self._authorize(db, actor_id, Action.REVIEW, performance, festival)
            await self._apply(
                db, actor, performance, festival, Action.REVIEW, review_score=score
            )
            performance.review_score = score
            performance.review_comments = comments.strip()
        return performance

    async def approve(self, actor_id: UUID, performance_id: UUID) -> Performance:
        """Approve a reviewed performance during SCHEDULING."""
        async with self._locked(performance_id) as (db, performance, festival):
            actor = await self._authorize(db, actor_id, Action.APPROVE, performance, festival)
            await self._apply(db, actor, performance, festival, Action.APPROVE)
            performance.approved = True
        return performance

    async def reject(
        self, actor_id: UUID, performance_id: UUID, rejection_reason: str | None
    ) -> Performance:
        """Manually reject a performance.

        Raises:
            ValidationError: If no reason is given
            PreconditionFailedError: If neither rejection window applies
        """
        if not rejection_reason or not rejection_reason.strip():
            raise ValidationError("Rejection reason is required")

        async with self._locked(performance_id) as (db, performance, festival):
            actor = await self._authorize(db, actor_id, Action.REJECT, performance, festival)
            assert_rejection_allowed(
                performance.performance_state, festival.festival_state, performance.review_score
            )
            await self._apply(
                db, actor, performance, festival, Action.REJECT,
                rejection_reason=rejection_reason.strip(),
            )
            performance.rejection_reason = rejection_reason.strip()
        return performance

    async def final_submit(
        self,
        actor_id: UUID,
        performance_id: UUID,
        setlist: list[str],
        preferred_rehearsal_slots: list[str],
        preferred_performance_slots: list[str],
    ) -> Performance:
        """Final submission by the creator; the approved flag is kept."""
        setlist = _clean_list(setlist, "setlist")
        rehearsal = _clean_list(preferred_rehearsal_slots, "preferred_rehearsal_slots")
        slots = _clean_list(preferred_performance_slots, "preferred_performance_slots")

        async with self._locked(performance_id) as (db, performance, festival):
            actor = await self._authorize(db, actor_id, Action.FINAL_SUBMIT, performance, festival)
            await self._apply(db, actor, performance, festival, Action.FINAL_SUBMIT)
            performance.setlist = setlist
            performance.preferred_rehearsal_slots = rehearsal
            performance.preferred_performance_slots = slots
        return performance

    async def accept(self, actor_id: UUID, performance_id: UUID) -> Performance:
        """Schedule an approved, final-submitted performance during DECISION."""
        async with self._locked(performance_id) as (db, performance, festival):
            actor = await self._authorize(db, actor_id, Action.ACCEPT, performance, festival)
            assert_performance_transition(
                performance.performance_state, festival.festival_state, Action.ACCEPT
            )
            if not performance.approved:
                raise PreconditionFailedError(
                    "Only approved performances can be accepted",
                    required_state=PerformanceState.APPROVED.value,
                )
            await self._apply(db, actor, performance, festival, Action.ACCEPT)
        return performance

    async def withdraw(self, actor_id: UUID, performance_id: UUID) -> None:
        """Delete a performance that was never submitted."""
        async with self._locked(performance_id) as (db, performance, festival):
            actor = await self._authorize(db, actor_id, Action.WITHDRAW, performance, festival)
            await self._apply(db, actor, performance, festival, Action.WITHDRAW)
            await db.delete(performance)

        logger.info(f"Performance {performance_id} withdrawn by {actor_id}")

    async def assign_staff(
        self, actor_id: UUID, performance_id: UUID, staff_id: UUID
    ) -> Performance:
        """Assign a staff reviewer; the performance state is unchanged.

        Raises:
            NotFoundError: If the staff user does not exist
            ValidationError: If the user does not have the STAFF role
        """
        async with self._locked(performance_id) as (db, performance, festival):
            actor = await self._authorize(db, actor_id, Action.ASSIGN_STAFF, performance, festival)

            staff = await self.users.load_user(db, staff_id)
            if staff.role != UserRole.STAFF.value:
                raise ValidationError("Only users with the STAFF role can be assigned")

            old_staff = performance.staff_assigned_id
            performance.staff_assigned_id = staff.id
            await audit_service.log_action(
                db, actor.id, Action.ASSIGN_STAFF.value, "performance", performance.id,
                {"staff_assigned_id": str(old_staff) if old_staff else None},
                {"staff_assigned_id": str(staff.id)},
            )
        return performance

    async def add_band_member(
        self, actor_id: UUID, performance_id: UUID, username: str
    ) -> Performance:
        """Add a registered user to the band roster.

        The identity service elevates the new member to ARTIST in the same
        transaction.

        Raises:
            ValidationError: If no username is given
            NotFoundError: If no user has that username
            ConflictError: If the user is already a member
        """
        username = (username or "").strip()
        if not username:
            raise ValidationError("Username of the new member is required")

        async with self._locked(performance_id) as (db, performance, festival):
            actor = await self._authorize(
                db, actor_id, Action.ADD_BAND_MEMBER, performance, festival
            )

            member = await self.users.get_user_by_username(db, username)
            if member.username in performance.band_members:
                raise ConflictError(f"{member.username} is already a band member")

            # Reassign so the JSON column is flagged dirty
            performance.band_members = [*performance.band_members, member.username]
            await audit_service.log_action(
                db, actor.id, Action.ADD_BAND_MEMBER.value, "performance", performance.id,
                None, {"band_member": member.username},
            )
            await self.users.apply_role_elevation(
                db,
                RoleElevationRequested(user_id=member.id, role=UserRole.ARTIST, requested_by=actor.id),
            )
        return performance

    # ============ QUERIES ============

    async def get_performance(self, performance_id: UUID) -> Performance:
        async with self.session_factory() as db:
            return await self._get_performance(db, performance_id)

    async def search(
        self,
        name: str | None = None,
        artist: str | None = None,
        genre: str | None = None,
    ) -> list[Performance]:
        """Find performances whose name, band members and genre match every word.

        Matching is a case-insensitive substring test per word. Results are
        ordered by genre then name, ignoring case.
        """
        query = select(Performance)
        for word in _words(name):
            query = query.where(Performance.name.icontains(word, autoescape=True))
        for word in _words(genre):
            query = query.where(Performance.genre.icontains(word, autoescape=True))

        async with self.session_factory() as db:
            result = await db.execute(query)
            performances = list(result.scalars().all())

        for word in _words(artist):
            needle = word.lower()
            performances = [
                p for p in performances if any(needle in m.lower() for m in p.band_members)
            ]

        performances.sort(key=lambda p: ((p.genre or "").lower(), p.name.lower()))
        return performances

    @staticmethod
    def can_see_ids(actor: Actor | None) -> bool:
        return actor is not None and actor.is_active and actor.role in ID_VISIBLE_ROLES

    # ============ HELPERS ============

    @asynccontextmanager
    async def _locked(
        self, performance_id: UUID
    ) -> AsyncIterator[tuple[AsyncSession, Performance, Festival]]:
        """Transaction on a performance and its festival under the festival lock.

        The festival row is locked before the performance is read, so the
        performance state seen here is the one left by the previous writer.
        """
        festival_id = await self._festival_id_of(performance_id)
        async with self.transaction(festival_id) as db:
            festival = await self._get_festival(db, festival_id, for_update=True)
            performance = await self._get_performance(db, performance_id)
            yield db, performance, festival

    async def _festival_id_of(self, performance_id: UUID) -> UUID:
        async with self.session_factory() as db:
            festival_id = await db.scalar(
                select(Performance.festival_id).where(Performance.id == performance_id)
            )
        if festival_id is None:
            raise NotFoundError("Performance", str(performance_id))
        return festival_id

    async def _authorize(
        self,
        db: AsyncSession,
        actor_id: UUID,
        action: Action,
        performance: Performance,
        festival: Festival,
    ) -> Actor:
        actor = await self.users.load_actor(db, actor_id)
        check_authorized(actor, action, performance_subject(performance, festival))
        return actor

    async def _apply(
        self,
        db: AsyncSession,
        actor: Actor,
        performance: Performance,
        festival: Festival,
        action: Action,
        **audit_extra: Any,
    ) -> None:
        """Validate ``action`` against both state machines and apply it."""
        rule = assert_performance_transition(
            performance.performance_state, festival.festival_state, action
        )
        old_state = performance.state
        new_state = rule.target.value if rule.target else None
        if rule.target is not None:
            performance.state = rule.target.value

        await audit_service.log_transition(
            db, actor.id, action.value, "performance", performance.id, old_state, new_state,
            **audit_extra,
        )
        logger.info(
            f"Performance {performance.id} {old_state} -> {new_state or 'deleted'} "
            f"({action.value} by {actor.id})"
        )

    async def _get_performance(self, db: AsyncSession, performance_id: UUID) -> Performance:
        """Get performance by ID or raise NotFoundError."""
        performance = await db.get(Performance, performance_id)
        if not performance:
            raise NotFoundError("Performance", str(performance_id))
        return performance

    async def _get_festival(
        self, db: AsyncSession, festival_id: UUID, *, for_update: bool = False
    ) -> Festival:
        result = await db.execute(festival_query(festival_id, for_update=for_update))
        festival = result.scalar_one_or_none()
        if not festival:
            raise NotFoundError("Festival", str(festival_id))
        return festival

    async def _assert_name_free(self, db: AsyncSession, festival_id: UUID, name: str) -> None:
        result = await db.execute(
            select(Performance.id).where(
                Performance.festival_id == festival_id, Performance.name == name
            )
        )
        if result.scalar_one_or_none():
            raise ConflictError("Performance name must be unique within the festival")


performance_service = PerformanceService()
