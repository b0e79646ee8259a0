"""Festival-related Pydantic schemas."""

from datetime import date, datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from festivalhub.domain.festival_state import FestivalState


class FestivalBase(BaseModel):
    """Descriptive festival fields."""

    description: str | None = Field(None, max_length=5000)
    start_date: date | None = None
    end_date: date | None = None
    venue: str | None = Field(None, max_length=255)


class FestivalCreate(FestivalBase):
    """Schema for creating a festival."""

    name: str = Field(..., max_length=200)


class FestivalUpdate(FestivalBase):
    """Schema for updating a festival. Only the fields sent are changed."""

    name: str | None = Field(None, max_length=200)


class OrganizerAdd(BaseModel):
    """Schema for adding an organizer to a festival."""

    user_id: UUID


class FestivalPublicResponse(BaseModel):
    """Festival as shown to anonymous callers."""

    model_config = ConfigDict(from_attributes=True)

    name: str
    description: str | None
    start_date: date | None
    end_date: date | None
    venue: str | None
    state: FestivalState
    organizers: list[str]

    @field_validator("organizers", mode="before")
    @classmethod
    def organizer_usernames(cls, v: Any) -> list[str]:
        return [getattr(user, "username", user) for user in v]


class FestivalResponse(FestivalPublicResponse):
    """Full festival record."""

    id: UUID
    version: int
    created_at: datetime | None = None
    updated_at: datetime | None = None


class DecisionResponse(BaseModel):
    """Result of starting the decision phase."""

    festival: FestivalResponse
    rejected_performances: list[str]
