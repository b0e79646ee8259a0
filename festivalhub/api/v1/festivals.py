"""Festival endpoints."""

from typing import Any
from uuid import UUID

from fastapi import APIRouter, status

from festivalhub.api.deps import CurrentUser, Festivals, OptionalUser
from festivalhub.core.permissions import Action
from festivalhub.models.festival import Festival
from festivalhub.schemas.festival import (
    DecisionResponse,
    FestivalCreate,
    FestivalPublicResponse,
    FestivalResponse,
    FestivalUpdate,
    OrganizerAdd,
)

router = APIRouter()


@router.post("", response_model=FestivalResponse, status_code=status.HTTP_201_CREATED)
async def create_festival(
    data: FestivalCreate,
    current_user: CurrentUser,
    festivals: Festivals,
) -> Festival:
    """Create a festival (organizers and admins)."""
    return await festivals.create_festival(
        current_user.id,
        name=data.name,
        description=data.description,
        start_date=data.start_date,
        end_date=data.end_date,
        venue=data.venue,
    )


@router.get("/{festival_id}")
async def get_festival(
    festival_id: UUID,
    current_user: OptionalUser,
    festivals: Festivals,
) -> dict[str, Any]:
    """Get a festival. Anonymous callers do not see its id."""
    festival = await festivals.get_festival(festival_id)
    schema = FestivalResponse if current_user else FestivalPublicResponse
    return schema.model_validate(festival).model_dump(mode="json")


@router.put("/{festival_id}", response_model=FestivalResponse)
async def update_festival(
    festival_id: UUID,
    data: FestivalUpdate,
    current_user: CurrentUser,
    festivals: Festivals,
) -> Festival:
    """Update descriptive fields of a festival."""
    return await festivals.update_festival(
        current_user.id, festival_id, data.model_dump(exclude_unset=True)
    )


@router.post("/{festival_id}/organizers", response_model=FestivalResponse)
async def add_organizer(
    festival_id: UUID,
    data: OrganizerAdd,
    current_user: CurrentUser,
    festivals: Festivals,
) -> Festival:
    """Add an organizer to a festival."""
    return await festivals.add_organizer(current_user.id, festival_id, data.user_id)


# ============ PHASE TRANSITIONS ============


@router.post("/{festival_id}/start-submission", response_model=FestivalResponse)
async def start_submission(
    festival_id: UUID, current_user: CurrentUser, festivals: Festivals
) -> Festival:
    return await festivals.transition(current_user.id, festival_id, Action.START_SUBMISSION)


@router.post("/{festival_id}/start-assignment", response_model=FestivalResponse)
async def start_assignment(
    festival_id: UUID, current_user: CurrentUser, festivals: Festivals
) -> Festival:
    return await festivals.transition(current_user.id, festival_id, Action.START_ASSIGNMENT)


@router.post("/{festival_id}/start-review", response_model=FestivalResponse)
async def start_review(
    festival_id: UUID, current_user: CurrentUser, festivals: Festivals
) -> Festival:
    return await festivals.transition(current_user.id, festival_id, Action.START_REVIEW)


@router.post("/{festival_id}/start-scheduling", response_model=FestivalResponse)
async def start_scheduling(
    festival_id: UUID, current_user: CurrentUser, festivals: Festivals
) -> Festival:
    return await festivals.transition(current_user.id, festival_id, Action.START_SCHEDULING)


@router.post("/{festival_id}/start-final-submission", response_model=FestivalResponse)
async def start_final_submission(
    festival_id: UUID, current_user: CurrentUser, festivals: Festivals
) -> Festival:
    return await festivals.transition(
        current_user.id, festival_id, Action.START_FINAL_SUBMISSION
    )


@router.post("/{festival_id}/start-decision", response_model=DecisionResponse)
async def start_decision(
    festival_id: UUID, current_user: CurrentUser, festivals: Festivals
) -> DecisionResponse:
    """Enter DECISION; approved performances without a final submission are rejected."""
    outcome = await festivals.start_decision(current_user.id, festival_id)
    return DecisionResponse(
        festival=FestivalResponse.model_validate(outcome.festival),
        rejected_performances=outcome.rejected_performances,
    )


@router.post("/{festival_id}/announce", response_model=FestivalResponse)
async def announce(
    festival_id: UUID, current_user: CurrentUser, festivals: Festivals
) -> Festival:
    """Announce the festival; its details are locked afterwards."""
    return await festivals.transition(current_user.id, festival_id, Action.ANNOUNCE)
