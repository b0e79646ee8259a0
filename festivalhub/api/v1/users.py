"""User account endpoints."""

from uuid import UUID

from fastapi import APIRouter, status

from festivalhub.api.deps import AdminUser, CurrentUser, Users
from festivalhub.models.user import User
from festivalhub.schemas.user import (
    AccountStatusUpdate,
    MessageResponse,
    PasswordChange,
    UserResponse,
    UserUpdate,
)

router = APIRouter()


@router.post("/change-password", response_model=MessageResponse)
async def change_password(
    data: PasswordChange,
    current_user: CurrentUser,
    users: Users,
) -> MessageResponse:
    """Change the caller's password."""
    await users.change_password(current_user.id, data.old_password, data.new_password)
    return MessageResponse(message="Password updated successfully")


@router.put("/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: UUID,
    data: UserUpdate,
    current_user: CurrentUser,
    users: Users,
) -> User:
    """Update a user (self or admin)."""
    return await users.update_user(
        current_user.id, user_id, data.model_dump(exclude_unset=True)
    )


@router.post("/{user_id}/status", response_model=UserResponse)
async def set_account_status(
    user_id: UUID,
    data: AccountStatusUpdate,
    current_user: AdminUser,
    users: Users,
) -> User:
    """Activate or deactivate an account (admin only)."""
    return await users.set_account_status(current_user.id, user_id, data.status)


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(
    user_id: UUID,
    current_user: AdminUser,
    users: Users,
) -> None:
    """Delete a user (admin only)."""
    await users.delete_user(current_user.id, user_id)
