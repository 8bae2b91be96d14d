# backend/trailblazers/schemas/auth.py
"""Identity schemas: registration, sign-in, guide invitations."""

from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import ConfigDict, EmailStr, Field

from ._strict_base import StrictModel, StrictRequestModel


class RegisterRequest(StrictRequestModel):
    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    password: str = Field(..., min_length=6)


class LoginRequest(StrictRequestModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class UserResponse(StrictModel):
    model_config = ConfigDict(from_attributes=True, extra="forbid")

    id: str
    name: str
    email: str
    role: str
    custom_claims: Dict[str, Any] = Field(default_factory=dict)


class TokenResponse(StrictModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int
    user: UserResponse


class GuideInvitationCreate(StrictRequestModel):
    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr


class GuideInvitationResponse(StrictModel):
    token: str
    name: str
    email: str
    expires_at: datetime
    registration_url: str


class GuideInvitationStatus(StrictModel):
    valid: bool
    email: Optional[str] = None
    name: Optional[str] = None


class CompleteGuideRegistration(StrictRequestModel):
    password: str = Field(..., min_length=6)


class PasswordResetRequest(StrictRequestModel):
    token: str
    new_password: str = Field(..., min_length=6)
