"""Workflow error kinds.

Every failure a service can raise is one of the classes below. Each class pins
one HTTP status and one ``kind`` string, so the app-level handler renders any
of them as ``{"detail": ..., "error": kind}`` without looking at the message.
"""

from typing import Any

from fastapi import HTTPException, status as http_status


class AppException(HTTPException):
    """Base class; subclasses override ``status``, ``kind`` and ``default_detail``."""

    status: int = http_status.HTTP_500_INTERNAL_SERVER_ERROR
    kind: str = "Internal"
    default_detail: str = "Unexpected server error"

    def __init__(self, detail: str | None = None, headers: dict[str, str] | None = None) -> None:
        super().__init__(status_code=self.status, detail=detail or self.default_detail, headers=headers)


class NotFoundError(AppException):
    """Entity, parent entity or referenced user is absent."""

    status = http_status.HTTP_404_NOT_FOUND
    kind = "NotFound"

    def __init__(self, resource: str = "Resource", identifier: str | None = None) -> None:
        self.resource = resource
        suffix = f" '{identifier}'" if identifier else ""
        super().__init__(f"{resource}{suffix} not found")


class AuthenticationError(AppException):
    status = http_status.HTTP_401_UNAUTHORIZED
    kind = "Unauthenticated"
    default_detail = "Could not validate credentials"

    def __init__(self, detail: str | None = None) -> None:
        super().__init__(detail, headers={"WWW-Authenticate": "Bearer"})


class AuthorizationError(AppException):
    """Wrong role, wrong owner, or inactive account."""

    status = http_status.HTTP_403_FORBIDDEN
    kind = "Forbidden"
    default_detail = "Not allowed to perform this action"


class PreconditionFailedError(AppException):
    """Entity or its parent festival is not in the required state."""

    status = http_status.HTTP_400_BAD_REQUEST
    kind = "PreconditionFailed"
    default_detail = "Not allowed in the current state"

    def __init__(self, detail: str | None = None, required_state: str | None = None) -> None:
        self.required_state = required_state
        super().__init__(detail)


class ValidationError(AppException):
    status = http_status.HTTP_422_UNPROCESSABLE_ENTITY
    kind = "ValidationFailed"
    default_detail = "Invalid payload"

    def __init__(self, detail: str | None = None, errors: list[dict[str, Any]] | None = None) -> None:
        self.errors = errors
        super().__init__(detail)


class ConflictError(AppException):
    """Uniqueness violation."""

    status = http_status.HTTP_409_CONFLICT
    kind = "Conflict"
    default_detail = "Already exists"


class LockedError(AppException):
    status = http_status.HTTP_423_LOCKED
    kind = "Locked"
    default_detail = "Record is locked"
