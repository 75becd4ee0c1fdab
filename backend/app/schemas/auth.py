"""Authentication schemas."""
from __future__ import annotations

from pydantic import BaseModel, EmailStr, Field

from app.models.user import ProfileRole
from app.schemas.profile import ProfileRead


class Token(BaseModel):
    """Response body for access tokens."""

    access_token: str
    token_type: str = "bearer"


class RegistrationRequest(BaseModel):
    """Self-service sign-up payload."""

    email: EmailStr
    password: str = Field(min_length=8)
    full_name: str = Field(min_length=1, max_length=255)
    role: ProfileRole = ProfileRole.BOTH


class RegistrationResponse(BaseModel):
    """Response after successful sign-up."""

    token: Token
    profile: ProfileRead
