"""Account payloads: registration, login, profile edits and password changes."""

import re
from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from festivalhub.core.permissions import AccountStatus, UserRole

USERNAME_PATTERN = r"^[a-zA-Z][a-zA-Z0-9_]{4,}$"

_PASSWORD_RULES = (
    (r"[A-Z]", "an uppercase letter"),
    (r"[a-z]", "a lowercase letter"),
    (r"\d", "a digit"),
    (r"[\W_]", "a special character"),
)


def check_password_strength(password: str) -> str:
    if len(password) < 8:
        raise ValueError("Password needs at least 8 characters")
    missing = [label for pattern, label in _PASSWORD_RULES if not re.search(pattern, password)]
    if missing:
        raise ValueError("Password needs " + ", ".join(missing))
    return password


class UserCreate(BaseModel):
    username: str = Field(..., max_length=50, pattern=USERNAME_PATTERN)
    password: str = Field(..., min_length=8, max_length=128)
    confirm_password: str
    role: UserRole = UserRole.USER

    @field_validator("password")
    @classmethod
    def strong_password(cls, v: str) -> str:
        return check_password_strength(v)

    @field_validator("role")
    @classmethod
    def validate_role(cls, v: UserRole) -> UserRole:
        if v == UserRole.ADMIN:
            raise ValueError("Administrator accounts cannot be self-registered")
        return v

    @model_validator(mode="after")
    def passwords_match(self) -> "UserCreate":
        if self.password != self.confirm_password:
            raise ValueError("Passwords do not match")
        return self


class UserLogin(BaseModel):
    username: str
    password: str


class UserUpdate(BaseModel):
    """Schema for updating a user.

    ``password`` is accepted only so the service can refuse it explicitly.
    """

    username: str | None = Field(None, max_length=50, pattern=USERNAME_PATTERN)
    role: UserRole | None = None
    password: str | None = None


class PasswordChange(BaseModel):
    """Schema for changing the caller's password."""

    old_password: str
    new_password: str = Field(..., min_length=8, max_length=128)
    confirm_password: str

    @field_validator("new_password")
    @classmethod
    def validate_new_password(cls, v: str) -> str:
        return check_password_strength(v)

    @model_validator(mode="after")
    def passwords_match(self) -> "PasswordChange":
        if self.new_password != self.confirm_password:
            raise ValueError("Passwords do not match")
        return self


class AccountStatusUpdate(BaseModel):
    """Schema for changing a user's account status."""

    status: AccountStatus


class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    username: str
    role: UserRole
    account_status: AccountStatus
    created_at: datetime | None = None


class TokenResponse(BaseModel):
    """Bearer token returned by login."""

    access_token: str
    token_type: str = "bearer"


class MessageResponse(BaseModel):
    """Schema for simple confirmation responses."""

    message: str
