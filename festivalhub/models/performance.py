"""Performance model."""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import (
    JSON,
    Boolean,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from festivalhub.database import Base
from festivalhub.domain.performance_state import PerformanceState


class Performance(Base):
    """A performance submitted to a festival."""

    __tablename__ = "performances"
    __table_args__ = (
        UniqueConstraint("festival_id", "name", name="uq_performances_festival_name"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    festival_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("festivals.id", ondelete="CASCADE"), nullable=False, index=True
    )
    creator_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id"), nullable=False, index=True
    )
    staff_assigned_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="SET NULL")
    )

    # Details
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    genre: Mapped[str | None] = mapped_column(String(100), index=True)
    duration: Mapped[int | None] = mapped_column(Integer)  # minutes
    band_members: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)

    state: Mapped[str] = mapped_column(
        String(30), nullable=False, default=PerformanceState.CREATED.value, index=True
    )
    approved: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    # Review
    review_score: Mapped[int | None] = mapped_column(Integer)
    review_comments: Mapped[str | None] = mapped_column(Text)
    rejection_reason: Mapped[str | None] = mapped_column(Text)

    # Final submission
    setlist: Mapped[list[str] | None] = mapped_column(JSON)
    preferred_rehearsal_slots: Mapped[list[str] | None] = mapped_column(JSON)
    preferred_performance_slots: Mapped[list[str] | None] = mapped_column(JSON)

    version: Mapped[int] = mapped_column(Integer, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    __mapper_args__ = {"version_id_col": version, "eager_defaults": True}

    @property
    def performance_state(self) -> PerformanceState:
        return PerformanceState(self.state)
