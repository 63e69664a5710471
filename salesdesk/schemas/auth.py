"""Authentication schemas."""

from pydantic import BaseModel, Field


class LoginRequest(BaseModel):
    """Login request body."""

    email: str = Field(..., min_length=3, max_length=255)
    password: str = Field(..., min_length=1)


class LoginResponse(BaseModel):
    """Login response."""

    success: bool
    message: str
    user_id: str = Field(default="")
    is_admin: bool = False


class TokenPayload(BaseModel):
    """JWT token payload."""

    user_id: str
    is_admin: bool
