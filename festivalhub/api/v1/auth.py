"""Authentication endpoints."""

from fastapi import APIRouter, status

from festivalhub.api.deps import CurrentUser, Users
from festivalhub.models.user import User
from festivalhub.schemas.user import TokenResponse, UserCreate, UserLogin, UserResponse

router = APIRouter()


@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def register(user_data: UserCreate, users: Users) -> User:
    """Register a new user account."""
    return await users.register(
        username=user_data.username,
        password=user_data.password,
        role=user_data.role,
    )


@router.post("/login", response_model=TokenResponse)
async def login(credentials: UserLogin, users: Users) -> TokenResponse:
    """Login with username and password."""
    tokens = await users.login(credentials.username, credentials.password)
    return TokenResponse(**tokens)


@router.get("/me", response_model=UserResponse)
async def get_me(current_user: CurrentUser) -> User:
    """Get the authenticated user."""
    return current_user
