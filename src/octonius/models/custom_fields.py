"""Group level custom field definitions and per-task values."""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING, Optional

from sqlalchemy import JSON, Boolean, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..schema.enums import FieldType, enum_column
from .base import Base, TimestampMixin

if TYPE_CHECKING:  # pragma: no cover
    from .tasks import Task

__all__ = ["GroupCustomFieldDefinition", "TaskCustomField"]


class GroupCustomFieldDefinition(TimestampMixin, Base):
    __tablename__ = "group_custom_field_definitions"

    group_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("groups.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    type: Mapped[FieldType] = mapped_column(enum_column(FieldType), nullable=False)
    required: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    placeholder: Mapped[Optional[str]] = mapped_column(String(255))
    description: Mapped[Optional[str]] = mapped_column(Text)
    options: Mapped[list] = mapped_column(JSON, default=list, nullable=False)
    validation_rules: Mapped[dict] = mapped_column(JSON, default=dict, nullable=False)
    display_order: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    created_by: Mapped[uuid.UUID] = mapped_column(nullable=False)

    values: Mapped[list["TaskCustomField"]] = relationship(
        back_populates="definition", cascade="all, delete-orphan"
    )


class TaskCustomField(TimestampMixin, Base):
    __tablename__ = "task_custom_fields"
    __table_args__ = (UniqueConstraint("task_id", "field_definition_id"),)

    task_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("tasks.id", ondelete="CASCADE"), nullable=False, index=True
    )
    field_definition_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        ForeignKey("group_custom_field_definitions.id", ondelete="CASCADE")
    )
    field_name: Mapped[str] = mapped_column(String(100), nullable=False)
    field_value: Mapped[str] = mapped_column(Text, nullable=False)
    field_type: Mapped[FieldType] = mapped_column(
        enum_column(FieldType), default=FieldType.TEXT, nullable=False
    )
    is_group_field: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    display_order: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    created_by: Mapped[uuid.UUID] = mapped_column(nullable=False)

    task: Mapped["Task"] = relationship(back_populates="custom_fields")
    definition: Mapped[Optional[GroupCustomFieldDefinition]] = relationship(
        back_populates="values"
    )
