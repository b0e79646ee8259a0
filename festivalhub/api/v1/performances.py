"""Performance endpoints."""

from typing import Annotated, Any
from uuid import UUID

from fastapi import APIRouter, Depends, status

from festivalhub.api.deps import CurrentUser, OptionalUser, Performances, actor_of
from festivalhub.models.performance import Performance
from festivalhub.schemas.performance import (
    BandMemberAdd,
    PerformanceCreate,
    PerformanceFinalSubmit,
    PerformancePublicResponse,
    PerformanceReject,
    PerformanceResponse,
    PerformanceReview,
    PerformanceSearchParams,
    PerformanceUpdate,
    StaffAssign,
)

router = APIRouter()


@router.post("", response_model=PerformanceResponse, status_code=status.HTTP_201_CREATED)
async def create_performance(
    data: PerformanceCreate,
    current_user: CurrentUser,
    performances: Performances,
) -> Performance:
    """Create a performance (artists only)."""
    return await performances.create_performance(
        current_user.id,
        festival_id=data.festival_id,
        name=data.name,
        description=data.description,
        genre=data.genre,
        duration=data.duration,
        band_members=data.band_members,
    )


@router.get("/search")
async def search_performances(
    params: Annotated[PerformanceSearchParams, Depends()],
    current_user: OptionalUser,
    performances: Performances,
) -> list[dict[str, Any]]:
    """Search by name, band member and genre words, sorted by genre then name."""
    results = await performances.search(name=params.name, artist=params.artist, genre=params.genre)
    schema = (
        PerformanceResponse
        if performances.can_see_ids(actor_of(current_user))
        else PerformancePublicResponse
    )
    return [schema.model_validate(p).model_dump(mode="json") for p in results]


@router.get("/{performance_id}", response_model=PerformanceResponse)
async def get_performance(
    performance_id: UUID,
    current_user: CurrentUser,
    performances: Performances,
) -> Performance:
    return await performances.get_performance(performance_id)


@router.put("/{performance_id}", response_model=PerformanceResponse)
async def update_performance(
    performance_id: UUID,
    data: PerformanceUpdate,
    current_user: CurrentUser,
    performances: Performances,
) -> Performance:
    """Update performance details (creator or festival organizer)."""
    return await performances.update_performance(
        current_user.id, performance_id, data.model_dump(exclude_unset=True)
    )


@router.delete("/{performance_id}", status_code=status.HTTP_204_NO_CONTENT)
async def withdraw_performance(
    performance_id: UUID,
    current_user: CurrentUser,
    performances: Performances,
) -> None:
    """Withdraw a performance that has not been submitted."""
    await performances.withdraw(current_user.id, performance_id)


# ============ TRANSITIONS ============


@router.post("/{performance_id}/submit", response_model=PerformanceResponse)
async def submit_performance(
    performance_id: UUID, current_user: CurrentUser, performances: Performances
) -> Performance:
    return await performances.submit(current_user.id, performance_id)


@router.post("/{performance_id}/review", response_model=PerformanceResponse)
async def review_performance(
    performance_id: UUID,
    data: PerformanceReview,
    current_user: CurrentUser,
    performances: Performances,
) -> Performance:
    return await performances.review(current_user.id, performance_id, data.score, data.comments)


@router.post("/{performance_id}/approve", response_model=PerformanceResponse)
async def approve_performance(
    performance_id: UUID, current_user: CurrentUser, performances: Performances
) -> Performance:
    return await performances.approve(current_user.id, performance_id)


@router.post("/{performance_id}/reject", response_model=PerformanceResponse)
async def reject_performance(
    performance_id: UUID,
    data: PerformanceReject,
    current_user: CurrentUser,
    performances: Performances,
) -> Performance:
    return await performances.reject(current_user.id, performance_id, data.rejection_reason)


@router.post("/{performance_id}/final-submit", response_model=PerformanceResponse)
async def final_submit_performance(
    performance_id: UUID,
    data: PerformanceFinalSubmit,
    current_user: CurrentUser,
    performances: Performances,
) -> Performance:
    return await performances.final_submit(
        current_user.id,
        performance_id,
        setlist=data.setlist,
        preferred_rehearsal_slots=data.preferred_rehearsal_slots,
        preferred_performance_slots=data.preferred_performance_slots,
    )


@router.post("/{performance_id}/accept", response_model=PerformanceResponse)
async def accept_performance(
    performance_id: UUID, current_user: CurrentUser, performances: Performances
) -> Performance:
    return await performances.accept(current_user.id, performance_id)


@router.post("/{performance_id}/assign-staff", response_model=PerformanceResponse)
async def assign_staff(
    performance_id: UUID,
    data: StaffAssign,
    current_user: CurrentUser,
    performances: Performances,
) -> Performance:
    return await performances.assign_staff(current_user.id, performance_id, data.staff_id)


@router.post("/{performance_id}/add-member", response_model=PerformanceResponse)
async def add_band_member(
    performance_id: UUID,
    data: BandMemberAdd,
    current_user: CurrentUser,
    performances: Performances,
) -> Performance:
    return await performances.add_band_member(current_user.id, performance_id, data.username)
