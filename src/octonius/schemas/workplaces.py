"""Workplace, member and invitation schemas."""

from __future__ import annotations

import datetime as dt
import uuid
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from ..schema.enums import InvitationStatus, MembershipStatus, WorkplaceSize
from .common import Pagination, UserSummary

__all__ = [
    "WorkplaceCreateRequest",
    "WorkplaceSettingsRequest",
    "WorkplaceResponse",
    "UserWorkplaceResponse",
    "SelectWorkplaceResponse",
    "WorkplaceMember",
    "WorkplaceMembersResponse",
    "WorkplaceStats",
    "InvitationCreateRequest",
    "InvitationResponse",
    "InvitationVerifyResponse",
]


# ========================================================================
# 워크플레이스
# ========================================================================


class WorkplaceCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None
    logo_url: Optional[str] = None


class WorkplaceSettingsRequest(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = None
    logo_url: Optional[str] = None
    website: Optional[str] = Field(None, max_length=255)
    industry: Optional[str] = Field(None, max_length=100)
    size: Optional[WorkplaceSize] = None
    timezone: Optional[str] = None


class WorkplaceResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    description: Optional[str] = None
    logo_url: Optional[str] = None
    website: Optional[str] = None
    industry: Optional[str] = None
    size: Optional[WorkplaceSize] = None
    timezone: str
    active: bool
    created_by: uuid.UUID
    created_at: dt.datetime
    updated_at: dt.datetime


class UserWorkplaceResponse(WorkplaceResponse):
    role: Optional[str] = None
    joined_at: Optional[dt.datetime] = None


class SelectWorkplaceResponse(BaseModel):
    user_id: uuid.UUID
    workplace_id: uuid.UUID


# ========================================================================
# 멤버
# ========================================================================


class WorkplaceMember(BaseModel):
    user_id: uuid.UUID
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: str
    avatar_url: Optional[str] = None
    role: Optional[str] = None
    status: MembershipStatus
    joined_at: dt.datetime
    is_current_user: bool = False


class WorkplaceMembersResponse(BaseModel):
    data: list[WorkplaceMember]
    pagination: Pagination


class WorkplaceStats(BaseModel):
    total_users: int
    total_admins: int
    total_members: int
    total_agoras: int
    total_work_groups: int


# ========================================================================
# 초대
# ========================================================================


class InvitationCreateRequest(BaseModel):
    email: EmailStr
    role_id: Optional[uuid.UUID] = None
    message: Optional[str] = Field(None, max_length=2000)


class InvitationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    email: str
    workplace_id: uuid.UUID
    invited_by: uuid.UUID
    role_id: Optional[uuid.UUID] = None
    status: InvitationStatus
    message: Optional[str] = None
    expires_at: dt.datetime
    accepted_at: Optional[dt.datetime] = None
    rejected_at: Optional[dt.datetime] = None
    created_at: dt.datetime


class InvitationVerifyResponse(BaseModel):
    email: str
    status: InvitationStatus
    expires_at: dt.datetime
    workplace: WorkplaceResponse
    inviter: UserSummary
    role: Optional[str] = None
    message: Optional[str] = None
