"""API dependencies for authentication and service access."""

from typing import Annotated
from uuid import UUID

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from festivalhub.core.exceptions import AuthenticationError, AuthorizationError
from festivalhub.core.permissions import AccountStatus, Actor, UserRole
from festivalhub.core.security import verify_token
from festivalhub.database import get_db
from festivalhub.models.user import User
from festivalhub.services.festival_service import FestivalService, festival_service
from festivalhub.services.performance_service import PerformanceService, performance_service
from festivalhub.services.user_service import UserService, user_service

# Security scheme; a missing header is reported as 401 by get_current_user
security = HTTPBearer(auto_error=False)


async def _user_from_token(db: AsyncSession, token: str) -> User:
    payload = verify_token(token, token_type="access")
    subject = payload.get("sub")
    if not subject:
        raise AuthenticationError("Invalid token payload")
    try:
        user_id = UUID(subject)
    except ValueError:
        raise AuthenticationError("Invalid token payload")

    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if not user:
        raise AuthenticationError("Invalid token. User not found.")
    return user


async def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> User:
    """Get the current authenticated, active user from the bearer token."""
    if not credentials:
        raise AuthenticationError("Access denied. No token provided.")

    user = await _user_from_token(db, credentials.credentials)
    if not user.is_active:
        raise AuthorizationError("Account is inactive. Contact an administrator.")
    return user


async def get_current_admin(
    current_user: Annotated[User, Depends(get_current_user)],
) -> User:
    """Get current user and verify they are an admin."""
    if current_user.role != UserRole.ADMIN.value:
        raise AuthorizationError("Admin access required")
    return current_user


async def get_optional_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> User | None:
    """Optionally get the current user; invalid tokens count as anonymous."""
    if not credentials:
        return None
    try:
        user = await _user_from_token(db, credentials.credentials)
    except AuthenticationError:
        return None
    return user if user.is_active else None


def actor_of(user: User | None) -> Actor | None:
    if user is None:
        return None
    return Actor(
        id=user.id,
        role=UserRole(user.role),
        account_status=AccountStatus(user.account_status),
    )


def get_user_service() -> UserService:
    return user_service


def get_festival_service() -> FestivalService:
    return festival_service


def get_performance_service() -> PerformanceService:
    return performance_service


CurrentUser = Annotated[User, Depends(get_current_user)]
OptionalUser = Annotated[User | None, Depends(get_optional_user)]
AdminUser = Annotated[User, Depends(get_current_admin)]
Users = Annotated[UserService, Depends(get_user_service)]
Festivals = Annotated[FestivalService, Depends(get_festival_service)]
Performances = Annotated[PerformanceService, Depends(get_performance_service)]
