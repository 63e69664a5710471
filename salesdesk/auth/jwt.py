"""
JWT token management.

Tokens are stored in httpOnly cookies.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import JWTError, jwt

from salesdesk.config import settings

# JWT configuration
ALGORITHM = "HS256"
TOKEN_TYPE = "access"
COOKIE_NAME = "access_token"


def create_access_token(
    user_id: str,
    is_admin: bool,
    expires_delta: Optional[timedelta] = None,
) -> str:
    """
    Create a JWT access token.

    Args:
        user_id: User's database ID
        is_admin: Whether the user may manage the team
        expires_delta: Optional custom expiration time

    Returns:
        Encoded JWT token string
    """
    now = datetime.now(timezone.utc)
    if expires_delta:
        expire = now + expires_delta
    else:
        expire = now + timedelta(hours=settings.jwt_expire_hours)

    payload = {
        "sub": str(user_id),
        "admin": bool(is_admin),
        "exp": expire,
        "type": TOKEN_TYPE,
        "iat": now,
    }

    return jwt.encode(payload, settings.secret_key, algorithm=ALGORITHM)


def verify_token(token: str) -> Optional[dict]:
    """
    Verify and decode a JWT token.

    Returns:
        Dict with 'user_id' and 'is_admin', or None if the token is
        invalid or expired
    """
    try:
        payload = jwt.decode(
            token,
            settings.secret_key,
            algorithms=[ALGORITHM],
        )
    except JWTError:
        return None

    if payload.get("type") != TOKEN_TYPE:
        return None

    user_id = payload.get("sub")
    if not user_id:
        return None

    return {
        "user_id": user_id,
        "is_admin": bool(payload.get("admin", False)),
    }


def get_token_from_cookie(request) -> Optional[str]:
    """Extract JWT token from the httpOnly cookie."""
    return request.cookies.get(COOKIE_NAME)
