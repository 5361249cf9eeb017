"""Authentication request/response schemas."""

from __future__ import annotations

import uuid
from typing import Optional

from pydantic import BaseModel, EmailStr, Field

from .users import UserResponse
from .workplaces import UserWorkplaceResponse

__all__ = [
    "EmailRequest",
    "OtpVerifyRequest",
    "OtpRequestResponse",
    "TokenPair",
    "LoginResponse",
    "SetupWorkplaceRequest",
    "SetupWorkplaceResponse",
    "RefreshRequest",
    "RefreshResponse",
    "InvitationAcceptRequest",
    "InvitationAcceptResponse",
]


class EmailRequest(BaseModel):
    email: EmailStr


class OtpVerifyRequest(BaseModel):
    email: EmailStr
    otp: str = Field(..., min_length=6, max_length=6)


class OtpRequestResponse(BaseModel):
    exists: bool


class TokenPair(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class LoginResponse(BaseModel):
    exists: bool
    user: Optional[UserResponse] = None
    access_token: Optional[str] = None
    refresh_token: Optional[str] = None
    workplaces: list[UserWorkplaceResponse] = Field(default_factory=list)


class SetupWorkplaceRequest(BaseModel):
    email: EmailStr
    workplace_name: str = Field(..., min_length=1, max_length=100)
    first_name: Optional[str] = Field(None, max_length=100)
    last_name: Optional[str] = Field(None, max_length=100)


class SetupWorkplaceResponse(TokenPair):
    user: UserResponse
    workplace_id: uuid.UUID


class RefreshRequest(BaseModel):
    refresh_token: str


class RefreshResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"


class InvitationAcceptRequest(BaseModel):
    token: str
    email: EmailStr


class InvitationAcceptResponse(TokenPair):
    user: UserResponse
    workplace_id: uuid.UUID
    needs_onboarding: bool
