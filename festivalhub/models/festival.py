"""Festival model."""

from __future__ import annotations

import uuid
from datetime import date, datetime
from typing import TYPE_CHECKING

from sqlalchemy import Column, Date, DateTime, ForeignKey, Integer, String, Table, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from festivalhub.database import Base
from festivalhub.domain.festival_state import FestivalState

if TYPE_CHECKING:
    from festivalhub.models.user import User


festival_organizers = Table(
    "festival_organizers",
    Base.metadata,
    Column(
        "festival_id",
        Uuid,
        ForeignKey("festivals.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column(
        "user_id",
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True,
    ),
)


class Festival(Base):
    """A festival moving through its ordered lifecycle phases."""

    __tablename__ = "festivals"

    # Fields frozen once the festival is announced
    DESCRIPTIVE_FIELDS = ("name", "description", "start_date", "end_date", "venue")

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(200), unique=True, nullable=False, index=True)
    description: Mapped[str | None] = mapped_column(Text)
    start_date: Mapped[date | None] = mapped_column(Date)
    end_date: Mapped[date | None] = mapped_column(Date)
    venue: Mapped[str | None] = mapped_column(String(255))

    state: Mapped[str] = mapped_column(
        String(30), nullable=False, default=FestivalState.CREATED.value, index=True
    )
    version: Mapped[int] = mapped_column(Integer, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    organizers: Mapped[list["User"]] = relationship(
        "User", secondary=festival_organizers, lazy="selectin", order_by="User.username"
    )

    __mapper_args__ = {"version_id_col": version, "eager_defaults": True}

    @property
    def organizer_ids(self) -> frozenset[uuid.UUID]:
        return frozenset(user.id for user in self.organizers)

    @property
    def festival_state(self) -> FestivalState:
        return FestivalState(self.state)
