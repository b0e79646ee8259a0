"""Database models."""

from festivalhub.models.audit import AuditLog
from festivalhub.models.festival import Festival, festival_organizers
from festivalhub.models.performance import Performance
from festivalhub.models.user import User

__all__ = [
    # User
    "User",
    # Festival
    "Festival",
    "festival_organizers",
    # Performance
    "Performance",
    # Audit
    "AuditLog",
]

from festivalhub.core.immutability import register_immutability_enforcement  # noqa: E402

register_immutability_enforcement()
