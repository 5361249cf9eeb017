"""Task board schemas."""

from __future__ import annotations

import datetime as dt
import uuid
from typing import Any, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from ..schema.enums import TaskPriority, TaskStatus
from .common import UserSummary

__all__ = [
    "Label",
    "ColumnCreateRequest",
    "ColumnUpdateRequest",
    "ColumnResponse",
    "TaskCreateRequest",
    "TaskUpdateRequest",
    "TaskMoveRequest",
    "TaskResponse",
    "BoardColumn",
    "BoardResponse",
    "CommentRequest",
    "CommentResponse",
    "TimeEntryRequest",
    "AssigneesRequest",
    "AssigneeResponse",
]


class Label(BaseModel):
    text: str
    color: str = "#757575"


# ========================================================================
# 컬럼
# ========================================================================


class ColumnCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    color: Optional[str] = Field(None, max_length=20)
    position: Optional[int] = Field(None, ge=1)


class ColumnUpdateRequest(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    color: Optional[str] = Field(None, max_length=20)


class ColumnResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    group_id: uuid.UUID
    name: str
    position: int
    color: str
    is_default: bool
    created_at: dt.datetime


# ========================================================================
# 태스크
# ========================================================================


class TaskCreateRequest(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    column_id: uuid.UUID
    description: Optional[str] = None
    status: TaskStatus = TaskStatus.TODO
    priority: TaskPriority = TaskPriority.MEDIUM
    color: Optional[str] = Field(None, max_length=20)
    due_date: Optional[dt.datetime] = None
    start_date: Optional[dt.datetime] = None
    labels: list[Label] = Field(default_factory=list)
    assignee_ids: list[uuid.UUID] = Field(default_factory=list)
    metadata: dict[str, Any] = Field(default_factory=dict)


class TaskUpdateRequest(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    status: Optional[TaskStatus] = None
    priority: Optional[TaskPriority] = None
    color: Optional[str] = Field(None, max_length=20)
    due_date: Optional[dt.datetime] = None
    start_date: Optional[dt.datetime] = None
    labels: Optional[list[Label]] = None
    metadata: Optional[dict[str, Any]] = None


class TaskMoveRequest(BaseModel):
    column_id: uuid.UUID
    position: int = Field(..., ge=1)


class AssigneeResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    user_id: uuid.UUID
    assigned_by: Optional[uuid.UUID] = None
    assigned_at: dt.datetime
    user: Optional[UserSummary] = None


class TaskResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    group_id: uuid.UUID
    column_id: uuid.UUID
    title: str
    description: Optional[str] = None
    status: TaskStatus
    priority: TaskPriority
    color: str
    position: int
    due_date: Optional[dt.datetime] = None
    start_date: Optional[dt.datetime] = None
    completed_at: Optional[dt.datetime] = None
    completed_by: Optional[uuid.UUID] = None
    created_by: uuid.UUID
    labels: list[dict[str, Any]]
    attachments: list[Any]
    metadata: dict[str, Any] = Field(validation_alias=AliasChoices("meta", "metadata"))
    assignees: list[AssigneeResponse] = Field(default_factory=list)
    created_at: dt.datetime
    updated_at: dt.datetime


class BoardColumn(ColumnResponse):
    tasks: list[TaskResponse] = Field(default_factory=list)


class BoardResponse(BaseModel):
    group_id: uuid.UUID
    columns: list[BoardColumn]


# ========================================================================
# 댓글 / 시간 기록 / 담당자
# ========================================================================


class CommentRequest(BaseModel):
    content: str = Field(..., min_length=1, max_length=5000)


class CommentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    task_id: uuid.UUID
    user_id: uuid.UUID
    content: str
    author: Optional[UserSummary] = None
    created_at: dt.datetime
    updated_at: dt.datetime


class TimeEntryRequest(BaseModel):
    hours: float = Field(..., gt=0, le=24)
    description: Optional[str] = Field(None, max_length=500)
    date: Optional[dt.date] = None


class AssigneesRequest(BaseModel):
    user_ids: list[uuid.UUID] = Field(default_factory=list)
