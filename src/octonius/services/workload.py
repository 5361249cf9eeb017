"""Personal workload dashboard: assigned tasks bucketed by due date."""

from __future__ import annotations

import datetime as dt
import uuid
from typing import Callable, Optional

from sqlalchemy import select

from .. import schemas
from ..models import Group, Task, TaskAssignee, ensure_utc, utcnow
from ..schema.enums import TaskStatus
from .base import BaseService

__all__ = ["WorkloadService", "SECTIONS", "SUMMARY_LIMIT"]

SUMMARY_LIMIT = 5

SECTIONS = ("overdue", "today", "tomorrow", "this_week", "next_week")


def _section_predicates(today: dt.date) -> dict[str, Callable[[Task, dt.date], bool]]:
    """Map section name to ``(task, due_day) -> bool``; due_day is a UTC date."""

    def between(start: int, end: int) -> Callable[[Task, dt.date], bool]:
        low, high = today + dt.timedelta(days=start), today + dt.timedelta(days=end)
        return lambda task, day: low <= day <= high

    return {
        "overdue": lambda task, day: day < today and task.status != TaskStatus.DONE,
        "today": between(0, 0),
        "tomorrow": between(1, 1),
        "this_week": between(2, 6),
        "next_week": between(7, 13),
    }


class WorkloadService(BaseService):
    def _assigned(self, user_id: uuid.UUID, workplace_id: uuid.UUID) -> list[tuple[Task, str]]:
        rows = self.session.execute(
            select(Task, Group.name)
            .join(TaskAssignee, TaskAssignee.task_id == Task.id)
            .join(Group, Group.id == Task.group_id)
            .where(
                TaskAssignee.user_id == user_id,
                Group.workplace_id == workplace_id,
                Group.is_active.is_(True),
            )
            .order_by(Task.due_date, Task.created_at)
        ).all()
        return [(task, name) for task, name in rows]

    @staticmethod
    def _to_item(task: Task, group_name: str) -> schemas.WorkloadTask:
        return schemas.WorkloadTask(
            id=task.id,
            title=task.title,
            status=task.status,
            priority=task.priority,
            due_date=ensure_utc(task.due_date),
            group_id=task.group_id,
            group_name=group_name,
            column_id=task.column_id,
        )

    def _bucket(
        self, user_id: uuid.UUID, workplace_id: uuid.UUID, today: Optional[dt.date] = None
    ) -> tuple[dict[str, list[schemas.WorkloadTask]], list[Task]]:
        today = today or utcnow().date()
        predicates = _section_predicates(today)
        buckets: dict[str, list[schemas.WorkloadTask]] = {name: [] for name in SECTIONS}
        tasks = []
        for task, group_name in self._assigned(user_id, workplace_id):
            tasks.append(task)
            if task.due_date is None:
                continue
            day = ensure_utc(task.due_date).astimezone(dt.timezone.utc).date()
            for name in SECTIONS:
                if predicates[name](task, day):
                    buckets[name].append(self._to_item(task, group_name))
                    break
        return buckets, tasks

    def summary(
        self, user_id: uuid.UUID, workplace_id: uuid.UUID, today: Optional[dt.date] = None
    ) -> schemas.WorkloadResponse:
        buckets, tasks = self._bucket(user_id, workplace_id, today)
        stats = schemas.WorkloadStats(
            total=len(buckets["today"]) + len(buckets["overdue"]),
            overdue=len(buckets["overdue"]),
            todo=sum(1 for t in tasks if t.status == TaskStatus.TODO),
            in_progress=sum(1 for t in tasks if t.status == TaskStatus.IN_PROGRESS),
            done=sum(1 for t in tasks if t.status == TaskStatus.DONE),
        )
        return schemas.WorkloadResponse(
            stats=stats, **{name: items[:SUMMARY_LIMIT] for name, items in buckets.items()}
        )

    def section(
        self,
        user_id: uuid.UUID,
        workplace_id: uuid.UUID,
        section: str,
        page: int = 1,
        limit: int = SUMMARY_LIMIT,
        today: Optional[dt.date] = None,
    ) -> schemas.WorkloadSectionPage:
        if section not in SECTIONS:
            raise ValueError(f"Unknown section '{section}'; expected one of {', '.join(SECTIONS)}")
        if page < 1 or limit < 1:
            raise ValueError("page and limit must be positive")
        items = self._bucket(user_id, workplace_id, today)[0][section]
        start = (page - 1) * limit
        return schemas.WorkloadSectionPage(
            section=section,
            items=items[start : start + limit],
            total=len(items),
            page=page,
            limit=limit,
            has_more=start + limit < len(items),
        )
