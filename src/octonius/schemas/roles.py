"""Role and permission schemas."""

from __future__ import annotations

import datetime as dt
import uuid
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

__all__ = [
    "RoleCreateRequest",
    "RoleUpdateRequest",
    "RoleResponse",
    "AssignRoleRequest",
    "AssignRoleResponse",
    "PermissionResponse",
    "PermissionCatalogResponse",
    "UserRoleResponse",
]


class RoleCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=50)
    description: Optional[str] = None
    permissions: list[str] = Field(default_factory=list)


class RoleUpdateRequest(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=50)
    description: Optional[str] = None
    permissions: Optional[list[str]] = None


class RoleResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    description: Optional[str] = None
    is_system: bool
    workplace_id: uuid.UUID
    active: bool
    permissions: list[str] = Field(default_factory=list)
    member_count: int = 0
    created_at: dt.datetime


class AssignRoleRequest(BaseModel):
    user_id: uuid.UUID
    role_id: uuid.UUID


class AssignRoleResponse(BaseModel):
    user_id: uuid.UUID
    workplace_id: uuid.UUID
    role_id: uuid.UUID
    role: str


class PermissionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    description: Optional[str] = None
    category: str
    module: str
    action: str


class PermissionCatalogResponse(BaseModel):
    categories: dict[str, list[PermissionResponse]]


class UserRoleResponse(BaseModel):
    role_id: uuid.UUID
    role: str
    is_system: bool
    permissions: list[str]
