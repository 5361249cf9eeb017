"""Group custom field definitions and their per-task values."""

from __future__ import annotations

import datetime as dt
import uuid
from typing import Optional

import structlog
from sqlalchemy import func, select

from .. import schemas
from ..errors import NotFoundError
from ..models import GroupCustomFieldDefinition, Task, TaskCustomField
from ..schema.enums import FieldType
from .groups import GroupAccess

__all__ = ["CustomFieldService", "validate_field_value"]

logger = structlog.get_logger(__name__)

_TRUE = {"true", "1", "yes", "on"}
_FALSE = {"false", "0", "no", "off"}


def validate_field_value(
    field_type: FieldType, value: str, options: Optional[list] = None
) -> str:
    """Validate and normalise *value* for *field_type*; raises ``ValueError``."""

    value = str(value).strip()
    if field_type is FieldType.NUMBER:
        try:
            float(value)
        except ValueError:
            raise ValueError(f"'{value}' is not a number") from None
    elif field_type is FieldType.BOOLEAN:
        lowered = value.lower()
        if lowered in _TRUE:
            return "true"
        if lowered in _FALSE:
            return "false"
        raise ValueError(f"'{value}' is not a boolean")
    elif field_type is FieldType.DATE:
        try:
            dt.date.fromisoformat(value[:10])
        except ValueError:
            raise ValueError(f"'{value}' is not an ISO date") from None
    elif field_type is FieldType.DROPDOWN:
        if options and value not in [str(o) for o in options]:
            raise ValueError(f"'{value}' is not one of the allowed options")
    return value


class CustomFieldService(GroupAccess):
    """Custom field definitions (group level) and values (task level)."""

    # ========================================================================
    # 정의
    # ========================================================================

    def _get_definition(self, field_id: uuid.UUID) -> GroupCustomFieldDefinition:
        return self._get_or_404(GroupCustomFieldDefinition, field_id, "Field definition")

    def create_definition(
        self,
        group_id: uuid.UUID,
        request: schemas.FieldDefinitionCreateRequest,
        user_id: uuid.UUID,
    ) -> GroupCustomFieldDefinition:
        self.require_member(group_id, user_id)
        if request.type is FieldType.DROPDOWN and not request.options:
            raise ValueError("Dropdown fields need at least one option")

        display_order = request.display_order
        if display_order is None:
            current = self.session.execute(
                select(func.max(GroupCustomFieldDefinition.display_order)).where(
                    GroupCustomFieldDefinition.group_id == group_id
                )
            ).scalar()
            display_order = 0 if current is None else current + 1

        definition = GroupCustomFieldDefinition(
            group_id=group_id,
            name=request.name.strip(),
            type=request.type,
            required=request.required,
            placeholder=request.placeholder,
            description=request.description,
            options=list(request.options),
            validation_rules=dict(request.validation_rules),
            display_order=display_order,
            created_by=user_id,
        )
        self.session.add(definition)
        self._commit()
        logger.info(
            "custom_field.defined",
            group_id=str(group_id),
            field_id=str(definition.id),
            type=request.type.value,
        )
        return definition

    def list_definitions(
        self, group_id: uuid.UUID, user_id: uuid.UUID, include_inactive: bool = False
    ) -> list[GroupCustomFieldDefinition]:
        self.require_member(group_id, user_id)
        stmt = select(GroupCustomFieldDefinition).where(
            GroupCustomFieldDefinition.group_id == group_id
        )
        if not include_inactive:
            stmt = stmt.where(GroupCustomFieldDefinition.is_active.is_(True))
        return list(
            self.session.execute(
                stmt.order_by(
                    GroupCustomFieldDefinition.display_order,
                    GroupCustomFieldDefinition.created_at,
                )
            ).scalars()
        )

    def templates(
        self, group_id: uuid.UUID, user_id: uuid.UUID
    ) -> list[GroupCustomFieldDefinition]:
        return self.list_definitions(group_id, user_id, include_inactive=False)

    def update_definition(
        self,
        field_id: uuid.UUID,
        request: schemas.FieldDefinitionUpdateRequest,
        user_id: uuid.UUID,
    ) -> GroupCustomFieldDefinition:
        definition = self._get_definition(field_id)
        self.require_member(definition.group_id, user_id)

        changes = request.model_dump(exclude_unset=True, exclude_none=True)
        new_type = changes.get("type", definition.type)
        new_options = changes.get("options", definition.options)
        if FieldType(new_type) is FieldType.DROPDOWN and not new_options:
            raise ValueError("Dropdown fields need at least one option")
        if "name" in changes:
            changes["name"] = changes["name"].strip()
        for key, value in changes.items():
            setattr(definition, key, value)

        # keep denormalised copies on task values in sync
        for value in definition.values:
            value.field_name = definition.name
            value.field_type = definition.type
        self._commit()
        logger.info("custom_field.updated", field_id=str(field_id), fields=sorted(changes))
        return definition

    def delete_definition(self, field_id: uuid.UUID, user_id: uuid.UUID) -> None:
        definition = self._get_definition(field_id)
        self.require_member(definition.group_id, user_id)
        self.session.delete(definition)
        self._commit()
        logger.info("custom_field.deleted", field_id=str(field_id))

    # ========================================================================
    # 태스크 값
    # ========================================================================

    def _task_for_member(self, task_id: uuid.UUID, user_id: uuid.UUID) -> Task:
        task = self._get_or_404(Task, task_id, "Task")
        self.require_member(task.group_id, user_id)
        return task

    def upsert_task_field(
        self,
        task_id: uuid.UUID,
        request: schemas.TaskFieldUpsertRequest,
        user_id: uuid.UUID,
    ) -> TaskCustomField:
        task = self._task_for_member(task_id, user_id)

        if request.field_definition_id is not None:
            definition = self._get_definition(request.field_definition_id)
            if definition.group_id != task.group_id or not definition.is_active:
                raise NotFoundError("Field definition not found")
            value = validate_field_value(definition.type, request.field_value, definition.options)
            field = self.session.execute(
                select(TaskCustomField).where(
                    TaskCustomField.task_id == task.id,
                    TaskCustomField.field_definition_id == definition.id,
                )
            ).scalar_one_or_none()
            if field is None:
                field = TaskCustomField(
                    task_id=task.id,
                    field_definition_id=definition.id,
                    is_group_field=True,
                    display_order=(
                        request.display_order
                        if request.display_order is not None
                        else definition.display_order
                    ),
                    created_by=user_id,
                )
                self.session.add(field)
            field.field_name = definition.name
            field.field_type = definition.type
            field.field_value = value
        else:
            if not request.field_name or not request.field_name.strip():
                raise ValueError("field_name or field_definition_id is required")
            name = request.field_name.strip()
            value = validate_field_value(request.field_type, request.field_value)
            field = self.session.execute(
                select(TaskCustomField).where(
                    TaskCustomField.task_id == task.id,
                    TaskCustomField.field_definition_id.is_(None),
                    TaskCustomField.field_name == name,
                )
            ).scalar_one_or_none()
            if field is None:
                current = self.session.execute(
                    select(func.max(TaskCustomField.display_order)).where(
                        TaskCustomField.task_id == task.id
                    )
                ).scalar()
                field = TaskCustomField(
                    task_id=task.id,
                    field_name=name,
                    is_group_field=False,
                    display_order=(
                        request.display_order
                        if request.display_order is not None
                        else (0 if current is None else current + 1)
                    ),
                    created_by=user_id,
                )
                self.session.add(field)
            field.field_type = request.field_type
            field.field_value = value

        if request.display_order is not None:
            field.display_order = request.display_order
        self._commit()
        logger.info("custom_field.value_set", task_id=str(task.id), field=field.field_name)
        return field

    def list_task_fields(self, task_id: uuid.UUID, user_id: uuid.UUID) -> list[TaskCustomField]:
        task = self._task_for_member(task_id, user_id)
        return list(
            self.session.execute(
                select(TaskCustomField)
                .where(TaskCustomField.task_id == task.id)
                .order_by(TaskCustomField.display_order, TaskCustomField.created_at)
            ).scalars()
        )

    def delete_task_field(self, field_id: uuid.UUID, user_id: uuid.UUID) -> None:
        field = self._get_or_404(TaskCustomField, field_id, "Custom field")
        self._task_for_member(field.task_id, user_id)
        self.session.delete(field)
        self._commit()

    def reorder_task_fields(
        self,
        task_id: uuid.UUID,
        request: schemas.ReorderRequest,
        user_id: uuid.UUID,
    ) -> list[TaskCustomField]:
        task = self._task_for_member(task_id, user_id)
        by_id = {
            field.id: field
            for field in self.session.execute(
                select(TaskCustomField).where(TaskCustomField.task_id == task.id)
            ).scalars()
        }
        unknown = [str(item.id) for item in request.fields if item.id not in by_id]
        if unknown:
            raise NotFoundError("Custom field not found", details={"ids": unknown})
        for item in request.fields:
            by_id[item.id].display_order = item.display_order
        self._commit()
        return self.list_task_fields(task_id, user_id)
