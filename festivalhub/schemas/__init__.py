"""Pydantic schemas for API validation."""

from festivalhub.schemas.festival import (
    DecisionResponse,
    FestivalCreate,
    FestivalPublicResponse,
    FestivalResponse,
    FestivalUpdate,
    OrganizerAdd,
)
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
from festivalhub.schemas.user import (
    AccountStatusUpdate,
    MessageResponse,
    PasswordChange,
    TokenResponse,
    UserCreate,
    UserLogin,
    UserResponse,
    UserUpdate,
)

__all__ = [
    # User
    "UserCreate",
    "UserLogin",
    "UserUpdate",
    "UserResponse",
    "PasswordChange",
    "AccountStatusUpdate",
    "TokenResponse",
    "MessageResponse",
    # Festival
    "FestivalCreate",
    "FestivalUpdate",
    "FestivalResponse",
    "FestivalPublicResponse",
    "OrganizerAdd",
    "DecisionResponse",
    # Performance
    "PerformanceCreate",
    "PerformanceUpdate",
    "PerformanceReview",
    "PerformanceReject",
    "PerformanceFinalSubmit",
    "PerformanceResponse",
    "PerformancePublicResponse",
    "PerformanceSearchParams",
    "StaffAssign",
    "BandMemberAdd",
]
