"""Workload dashboard schemas."""

from __future__ import annotations

import datetime as dt
import uuid
from typing import Optional

from pydantic import BaseModel

from ..schema.enums import TaskPriority, TaskStatus

__all__ = ["WorkloadTask", "WorkloadStats", "WorkloadResponse", "WorkloadSectionPage"]


class WorkloadTask(BaseModel):
    id: uuid.UUID
    title: str
    status: TaskStatus
    priority: TaskPriority
    due_date: Optional[dt.datetime] = None
    group_id: uuid.UUID
    group_name: str
    column_id: uuid.UUID


class WorkloadStats(BaseModel):
    total: int
    overdue: int
    todo: int
    in_progress: int
    done: int


class WorkloadResponse(BaseModel):
    stats: WorkloadStats
    overdue: list[WorkloadTask]
    today: list[WorkloadTask]
    tomorrow: list[WorkloadTask]
    this_week: list[WorkloadTask]
    next_week: list[WorkloadTask]


class WorkloadSectionPage(BaseModel):
    section: str
    items: list[WorkloadTask]
    total: int
    page: int
    limit: int
    has_more: bool
