"""User request/response schemas."""

from __future__ import annotations

import datetime as dt
import uuid
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field

__all__ = [
    "UserCreateRequest",
    "UserUpdateRequest",
    "UserResponse",
    "NotificationPreferences",
    "WorkplaceAddRequest",
]


class NotificationPreferences(BaseModel):
    email: bool = True
    push: bool = True
    in_app: bool = True


class UserCreateRequest(BaseModel):
    email: EmailStr
    first_name: Optional[str] = Field(None, max_length=100)
    last_name: Optional[str] = Field(None, max_length=100)
    phone: Optional[str] = Field(None, max_length=50)
    avatar_url: Optional[str] = None
    job_title: Optional[str] = Field(None, max_length=100)
    department: Optional[str] = Field(None, max_length=100)
    timezone: str = "UTC"
    language: str = "en"
    source: Optional[str] = None


class UserUpdateRequest(BaseModel):
    first_name: Optional[str] = Field(None, max_length=100)
    last_name: Optional[str] = Field(None, max_length=100)
    phone: Optional[str] = Field(None, max_length=50)
    avatar_url: Optional[str] = None
    job_title: Optional[str] = Field(None, max_length=100)
    department: Optional[str] = Field(None, max_length=100)
    timezone: Optional[str] = None
    language: Optional[str] = None
    notification_preferences: Optional[NotificationPreferences] = None


class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None
    avatar_url: Optional[str] = None
    job_title: Optional[str] = None
    department: Optional[str] = None
    timezone: str
    language: str
    notification_preferences: dict
    source: Optional[str] = None
    current_workplace_id: Optional[uuid.UUID] = None
    disabled_at: Optional[dt.datetime] = None
    display_name: str
    initials: str
    created_at: dt.datetime
    updated_at: dt.datetime


class WorkplaceAddRequest(BaseModel):
    workplace_id: uuid.UUID
    role_id: Optional[uuid.UUID] = None
