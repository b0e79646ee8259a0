"""Identity and account service."""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from festivalhub.config import settings
from festivalhub.core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from festivalhub.core.permissions import AccountStatus, Actor, UserRole
from festivalhub.core.security import create_tokens, get_password_hash, verify_password
from festivalhub.models.performance import Performance
from festivalhub.models.user import User
from festivalhub.services.audit_service import audit_service
from festivalhub.services.base import TransactionalService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RoleElevationRequested:
    """Emitted by the performance workflow when a user joins a band."""

    user_id: UUID
    role: UserRole
    requested_by: UUID


class UserService(TransactionalService):
    """Service for user accounts, credentials and actor resolution."""

    async def register(self, username: str, password: str, role: UserRole = UserRole.USER) -> User:
        """Create a new account.

        Raises:
            ValidationError: If an administrator account is requested
            ConflictError: If the username is taken
        """
        if role == UserRole.ADMIN:
            raise ValidationError("Administrator accounts cannot be self-registered")

        async with self.transaction() as db:
            await self._assert_username_free(db, username)
            user = User(
                username=username,
                password_hash=get_password_hash(password),
                role=role.value,
                account_status=AccountStatus.ACTIVE.value,
                failed_password_attempts=0,
            )
            db.add(user)
            await db.flush()

        logger.info(f"Registered user {user.username} ({user.role})")
        return user

    async def authenticate(self, username: str, password: str) -> User:
        """Check credentials and record the login.

        Raises:
            AuthenticationError: If the username or password is wrong
            AuthorizationError: If the account is inactive
        """
        async with self.transaction() as db:
            result = await db.execute(select(User).where(User.username == username))
            user = result.scalar_one_or_none()

            if not user or not verify_password(password, user.password_hash):
                raise AuthenticationError("Invalid username or password")

            if not user.is_active:
                raise AuthorizationError(
                    "Account is inactive due to multiple failed attempts. Contact an administrator."
                )

            user.last_login_at = datetime.now(UTC)

        return user

    async def login(self, username: str, password: str) -> dict[str, str]:
        """Authenticate and issue a bearer token."""
        user = await self.authenticate(username, password)
        return create_tokens(str(user.id), user.role)

    async def get_user(self, user_id: UUID) -> User:
        async with self.session_factory() as db:
            return await self.load_user(db, user_id)

    async def resolve_actor(self, user_id: UUID) -> Actor:
        """Return ``(id, role, account_status)`` for ``user_id``."""
        async with self.session_factory() as db:
            return await self.load_actor(db, user_id)

    async def load_actor(self, db: AsyncSession, user_id: UUID) -> Actor:
        """Resolve an actor inside the caller's transaction."""
        user = await self.load_user(db, user_id)
        return Actor(
            id=user.id,
            role=UserRole(user.role),
            account_status=AccountStatus(user.account_status),
        )

    async def update_user(self, actor_id: UUID, user_id: UUID, changes: dict[str, Any]) -> User:
        """Update username (or, for administrators, role) of a user.

        Raises:
            NotFoundError: If either user does not exist
            AuthorizationError: If the caller is neither the user nor an admin
            ValidationError: If a password change is attempted
            ConflictError: If the new username is taken
        """
        async with self.transaction() as db:
            user = await self.load_user(db, user_id)
            actor = await self.load_actor(db, actor_id)

            if not actor.is_active:
                raise AuthorizationError("Account is inactive. Contact an administrator.")
            if actor.id != user.id and actor.role != UserRole.ADMIN:
                raise AuthorizationError("Only the user or an administrator can update this account")
            if changes.get("password") is not None:
                raise ValidationError("Password cannot be updated using this endpoint")

            old_values: dict[str, Any] = {}
            new_values: dict[str, Any] = {}

            username = changes.get("username")
            if username is not None and username != user.username:
                await self._assert_username_free(db, username)
                old_values["username"], new_values["username"] = user.username, username
                user.username = username

            role = changes.get("role")
            if role is not None and UserRole(role).value != user.role:
                if actor.role != UserRole.ADMIN:
                    raise AuthorizationError("Only an administrator can change roles")
                old_values["role"], new_values["role"] = user.role, UserRole(role).value
                user.role = UserRole(role).value

            if new_values:
                await audit_service.log_action(
                    db, actor.id, "update-user", "user", user.id, old_values, new_values
                )

        return user

    async def change_password(
        self, user_id: UUID, old_password: str, new_password: str
    ) -> User:
        """Change a password, deactivating the account after repeated failures.

        A failed attempt is committed before the error is raised so the
        counter survives the request.

        Raises:
            ValidationError: If the old password is wrong
            AuthorizationError: If the account is (or just became) inactive
        """
        locked_out = False
        wrong_password = False

        async with self.transaction() as db:
            user = await self.load_user(db, user_id)
            if not user.is_active:
                raise AuthorizationError("Account is inactive. Contact an administrator.")

            if not verify_password(old_password, user.password_hash):
                wrong_password = True
                user.failed_password_attempts += 1
                if user.failed_password_attempts >= settings.max_failed_password_attempts:
                    user.account_status = AccountStatus.INACTIVE.value
                    locked_out = True
                    await audit_service.log_action(
                        db,
                        user.id,
                        "deactivate-account",
                        "user",
                        user.id,
                        {"account_status": AccountStatus.ACTIVE.value},
                        {"account_status": AccountStatus.INACTIVE.value},
                    )
            else:
                user.password_hash = get_password_hash(new_password)
                user.failed_password_attempts = 0

        if locked_out:
            logger.warning(f"Account {user.username} deactivated after failed password attempts")
            raise AuthorizationError("Account deactivated due to multiple failed attempts")
        if wrong_password:
            raise ValidationError("Old password is incorrect")
        return user

    async def set_account_status(
        self, actor_id: UUID, user_id: UUID, status: AccountStatus
    ) -> User:
        """Activate or deactivate an account (administrators only)."""
        async with self.transaction() as db:
            actor = await self.load_actor(db, actor_id)
            self._assert_admin(actor)
            user = await self.load_user(db, user_id)

            old_status = user.account_status
            user.account_status = status.value
            if status == AccountStatus.ACTIVE:
                user.failed_password_attempts = 0

            await audit_service.log_action(
                db,
                actor.id,
                "set-account-status",
                "user",
                user.id,
                {"account_status": old_status},
                {"account_status": status.value},
            )

        logger.info(f"User {user.username} status set to {status.value}")
        return user

    async def delete_user(self, actor_id: UUID, user_id: UUID) -> None:
        """Delete an account (administrators only).

        Raises:
            ConflictError: If the user still owns performances
        """
        async with self.transaction() as db:
            actor = await self.load_actor(db, actor_id)
            self._assert_admin(actor)
            user = await self.load_user(db, user_id)

            owned = await db.scalar(
                select(func.count()).select_from(Performance).where(Performance.creator_id == user.id)
            )
            if owned:
                raise ConflictError(
                    f"User {user.username} created {owned} performance(s) and cannot be deleted"
                )

            await audit_service.log_action(
                db, actor.id, "delete-user", "user", user.id, {"username": user.username}, None
            )
            await db.delete(user)

        logger.info(f"Deleted user {user_id}")

    async def get_user_by_username(self, db: AsyncSession, username: str) -> User:
        result = await db.execute(select(User).where(User.username == username))
        user = result.scalar_one_or_none()
        if not user:
            raise NotFoundError("User", username)
        return user

    async def apply_role_elevation(self, db: AsyncSession, request: RoleElevationRequested) -> User:
        """Apply a role elevation emitted by the workflow, in its transaction.

        Only plain users are elevated; staff, organizers and admins keep
        their role.
        """
        user = await self.load_user(db, request.user_id)
        if user.role == UserRole.USER.value and request.role != UserRole.USER:
            old_role = user.role
            user.role = request.role.value
            await audit_service.log_action(
                db,
                request.requested_by,
                "elevate-role",
                "user",
                user.id,
                {"role": old_role},
                {"role": user.role},
            )
            logger.info(f"User {user.username} elevated to {user.role}")
        return user

    async def load_user(self, db: AsyncSession, user_id: UUID) -> User:
        """Get user by ID or raise NotFoundError."""
        user = await db.get(User, user_id)
        if not user:
            raise NotFoundError("User", str(user_id))
        return user

    async def _assert_username_free(self, db: AsyncSession, username: str) -> None:
        result = await db.execute(select(User.id).where(User.username == username))
        if result.scalar_one_or_none():
            raise ConflictError("Username is already taken")

    @staticmethod
    def _assert_admin(actor: Actor) -> None:
        if not actor.is_active:
            raise AuthorizationError("Account is inactive. Contact an administrator.")
        if actor.role != UserRole.ADMIN:
            raise AuthorizationError("Admin access required")


user_service = UserService()
