"""Performance-related Pydantic schemas."""

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from festivalhub.domain.performance_state import PerformanceState


class PerformanceCreate(BaseModel):
    """Schema for creating a performance."""

    festival_id: UUID
    name: str = Field(..., max_length=200)
    description: str | None = Field(None, max_length=5000)
    genre: str | None = Field(None, max_length=100)
    duration: int | None = Field(None, gt=0)
    band_members: list[str] = Field(default_factory=list)


class PerformanceUpdate(BaseModel):
    """Schema for updating performance details."""

    name: str | None = Field(None, max_length=200)
    description: str | None = Field(None, max_length=5000)
    genre: str | None = Field(None, max_length=100)
    duration: int | None = Field(None, gt=0)


class PerformanceReview(BaseModel):
    """Schema for a staff review.

    Range and presence are checked by the service so the failure is reported
    the same way for every caller.
    """

    score: Any = None
    comments: str | None = None


class PerformanceReject(BaseModel):
    """Schema for a manual rejection."""

    rejection_reason: str | None = None


class PerformanceFinalSubmit(BaseModel):
    """Schema for a final submission."""

    setlist: list[str] = Field(default_factory=list)
    preferred_rehearsal_slots: list[str] = Field(default_factory=list)
    preferred_performance_slots: list[str] = Field(default_factory=list)


class StaffAssign(BaseModel):
    """Schema for assigning a staff reviewer."""

    staff_id: UUID


class BandMemberAdd(BaseModel):
    """Schema for adding a band member by username."""

    username: str


class PerformanceSearchParams(BaseModel):
    """Search filters; each is split into words that must all match."""

    name: str | None = None
    artist: str | None = None
    genre: str | None = None


class PerformancePublicResponse(BaseModel):
    """Performance as shown in search results to non-privileged callers."""

    model_config = ConfigDict(from_attributes=True)

    festival_id: UUID
    name: str
    description: str | None
    genre: str | None
    duration: int | None
    band_members: list[str]
    state: PerformanceState


class PerformanceResponse(PerformancePublicResponse):
    """Full performance record."""

    id: UUID
    creator_id: UUID
    staff_assigned_id: UUID | None
    approved: bool
    review_score: int | None
    review_comments: str | None
    rejection_reason: str | None
    setlist: list[str] | None
    preferred_rehearsal_slots: list[str] | None
    preferred_performance_slots: list[str] | None
    version: int
    created_at: datetime | None = None
    updated_at: datetime | None = None
