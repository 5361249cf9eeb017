"""Group schemas."""

from __future__ import annotations

import datetime as dt
import uuid
from typing import Any, Literal, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from ..schema.enums import GroupRole, GroupType, MembershipStatus
from .common import UserSummary

__all__ = [
    "GroupSettings",
    "GroupMetadata",
    "GroupCreateRequest",
    "GroupUpdateRequest",
    "GroupResponse",
    "GroupMemberAddRequest",
    "GroupMemberResponse",
]


class GroupSettings(BaseModel):
    allow_member_invites: bool = True
    require_approval: bool = False
    visibility: Literal["public", "private"] = "private"
    default_role: GroupRole = GroupRole.MEMBER


class GroupMetadata(BaseModel):
    tags: list[str] = Field(default_factory=list)
    category: Optional[str] = None
    department: Optional[str] = None


class GroupCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None
    image_url: Optional[str] = None
    settings: Optional[GroupSettings] = None
    metadata: Optional[GroupMetadata] = None


class GroupUpdateRequest(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = None
    image_url: Optional[str] = None
    settings: Optional[dict[str, Any]] = None
    metadata: Optional[dict[str, Any]] = None


class GroupMemberResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    group_id: uuid.UUID
    user_id: uuid.UUID
    role: GroupRole
    status: MembershipStatus
    permissions: dict[str, bool]
    invited_by: Optional[uuid.UUID] = None
    user: Optional[UserSummary] = None
    created_at: dt.datetime


class GroupResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    description: Optional[str] = None
    image_url: Optional[str] = None
    workplace_id: uuid.UUID
    created_by: uuid.UUID
    type: GroupType
    is_active: bool
    settings: dict[str, Any]
    metadata: dict[str, Any] = Field(validation_alias=AliasChoices("meta", "metadata"))
    created_at: dt.datetime
    updated_at: dt.datetime


class GroupMemberAddRequest(BaseModel):
    user_id: uuid.UUID
    role: GroupRole = GroupRole.MEMBER
