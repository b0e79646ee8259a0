"""Core utilities: errors, security and the authorization policy."""

from festivalhub.core.exceptions import (
    AppException,
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    LockedError,
    NotFoundError,
    PreconditionFailedError,
    ValidationError,
)
from festivalhub.core.permissions import (
    AccountStatus,
    Action,
    Actor,
    Subject,
    UserRole,
    assert_authorized,
    authorize,
)
from festivalhub.core.security import (
    create_access_token,
    get_password_hash,
    verify_password,
    verify_token,
)

__all__ = [
    "AppException",
    "AuthenticationError",
    "AuthorizationError",
    "ConflictError",
    "LockedError",
    "NotFoundError",
    "PreconditionFailedError",
    "ValidationError",
    "AccountStatus",
    "Action",
    "Actor",
    "Subject",
    "UserRole",
    "assert_authorized",
    "authorize",
    "create_access_token",
    "get_password_hash",
    "verify_password",
    "verify_token",
]
