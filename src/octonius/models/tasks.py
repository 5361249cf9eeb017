"""Task board models: columns, tasks, assignees and comments."""

from __future__ import annotations

import datetime as dt
import uuid
from typing import TYPE_CHECKING, Optional

from sqlalchemy import (
    JSON,
    Boolean,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..schema.enums import TaskPriority, TaskStatus, enum_column
from .base import Base, TimestampMixin, utcnow

if TYPE_CHECKING:  # pragma: no cover
    from .custom_fields import TaskCustomField
    from .groups import Group
    from .users import User

__all__ = [
    "TaskColumn",
    "Task",
    "TaskAssignee",
    "TaskComment",
    "DEFAULT_COLUMNS",
    "DEFAULT_TASK_COLOR",
]

DEFAULT_TASK_COLOR = "#757575"

# (name, color) in board order
DEFAULT_COLUMNS: tuple[tuple[str, str], ...] = (
    ("To Do", "#757575"),
    ("In Progress", "#FBC02D"),
    ("Done", "#66BB6A"),
)


class TaskColumn(TimestampMixin, Base):
    __tablename__ = "task_columns"

    group_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("groups.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    color: Mapped[str] = mapped_column(String(20), default=DEFAULT_TASK_COLOR, nullable=False)
    is_default: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    created_by: Mapped[uuid.UUID] = mapped_column(nullable=False)

    group: Mapped["Group"] = relationship(back_populates="columns")
    tasks: Mapped[list["Task"]] = relationship(
        back_populates="column", cascade="all, delete-orphan", order_by="Task.position"
    )


class Task(TimestampMixin, Base):
    __tablename__ = "tasks"

    group_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("groups.id", ondelete="CASCADE"), nullable=False, index=True
    )
    column_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("task_columns.id", ondelete="CASCADE"), nullable=False, index=True
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text)
    status: Mapped[TaskStatus] = mapped_column(
        enum_column(TaskStatus), default=TaskStatus.TODO, nullable=False
    )
    priority: Mapped[TaskPriority] = mapped_column(
        enum_column(TaskPriority), default=TaskPriority.MEDIUM, nullable=False
    )
    color: Mapped[str] = mapped_column(String(20), default=DEFAULT_TASK_COLOR, nullable=False)
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    due_date: Mapped[Optional[dt.datetime]] = mapped_column(DateTime(timezone=True))
    start_date: Mapped[Optional[dt.datetime]] = mapped_column(DateTime(timezone=True))
    completed_at: Mapped[Optional[dt.datetime]] = mapped_column(DateTime(timezone=True))
    completed_by: Mapped[Optional[uuid.UUID]] = mapped_column()
    created_by: Mapped[uuid.UUID] = mapped_column(nullable=False)
    labels: Mapped[list] = mapped_column(JSON, default=list, nullable=False)
    attachments: Mapped[list] = mapped_column(JSON, default=list, nullable=False)
    meta: Mapped[dict] = mapped_column("metadata", JSON, default=dict, nullable=False)

    group: Mapped["Group"] = relationship(back_populates="tasks")
    column: Mapped[TaskColumn] = relationship(back_populates="tasks")
    assignees: Mapped[list["TaskAssignee"]] = relationship(
        back_populates="task", cascade="all, delete-orphan"
    )
    comments: Mapped[list["TaskComment"]] = relationship(
        back_populates="task", cascade="all, delete-orphan", order_by="TaskComment.created_at"
    )
    custom_fields: Mapped[list["TaskCustomField"]] = relationship(
        back_populates="task",
        cascade="all, delete-orphan",
        order_by="TaskCustomField.display_order",
    )


class TaskAssignee(Base):
    __tablename__ = "task_assignees"
    __table_args__ = (UniqueConstraint("task_id", "user_id"),)

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    task_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("tasks.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    assigned_by: Mapped[Optional[uuid.UUID]] = mapped_column()
    assigned_at: Mapped[dt.datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )

    task: Mapped[Task] = relationship(back_populates="assignees")
    user: Mapped["User"] = relationship()


class TaskComment(TimestampMixin, Base):
    __tablename__ = "task_comments"

    task_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("tasks.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    content: Mapped[str] = mapped_column(Text, nullable=False)

    task: Mapped[Task] = relationship(back_populates="comments")
    author: Mapped["User"] = relationship()
