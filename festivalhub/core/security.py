"""Password hashing and bearer tokens for FestivalHub accounts."""

from datetime import UTC, datetime, timedelta
from typing import Any

from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext

from festivalhub.config import settings
from festivalhub.core.exceptions import AuthenticationError

ACCESS_TOKEN = "access"

_hasher = CryptContext(schemes=["argon2"], deprecated="auto")


def get_password_hash(password: str) -> str:
    return _hasher.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return _hasher.verify(plain_password, hashed_password)


def create_access_token(claims: dict[str, Any], expires_delta: timedelta | None = None) -> str:
    """Sign ``claims`` as an access token.

    ``exp`` and ``type`` are always set here and override anything passed in.
    """
    lifetime = expires_delta if expires_delta is not None else timedelta(
        minutes=settings.access_token_expire_minutes
    )
    payload = {**claims, "exp": datetime.now(UTC) + lifetime, "type": ACCESS_TOKEN}
    return jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def verify_token(token: str, token_type: str = ACCESS_TOKEN) -> dict[str, Any]:
    """Decode ``token`` and check its type; any failure is an AuthenticationError."""
    try:
        claims = jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except ExpiredSignatureError as exc:
        raise AuthenticationError("Session expired, log in again") from exc
    except JWTError as exc:
        raise AuthenticationError(f"Invalid token ({exc})") from exc

    if claims.get("type") != token_type:
        raise AuthenticationError(f"Invalid token type: expected {token_type}")
    return claims


def create_tokens(user_id: str, role: str) -> dict[str, str]:
    """Login response body: a bearer access token carrying the user id and role."""
    return {
        "access_token": create_access_token({"sub": user_id, "role": role}),
        "token_type": "bearer",
    }
