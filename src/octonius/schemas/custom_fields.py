"""Custom field schemas."""

from __future__ import annotations

import datetime as dt
import uuid
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..schema.enums import FieldType

__all__ = [
    "FieldDefinitionCreateRequest",
    "FieldDefinitionUpdateRequest",
    "FieldDefinitionResponse",
    "TaskFieldUpsertRequest",
    "TaskFieldResponse",
    "ReorderItem",
    "ReorderRequest",
    "TaskFieldsMapRequest",
]


class FieldDefinitionCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    type: FieldType
    required: bool = False
    placeholder: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = None
    options: list[str] = Field(default_factory=list)
    validation_rules: dict[str, Any] = Field(default_factory=dict)
    display_order: Optional[int] = Field(None, ge=0)


class FieldDefinitionUpdateRequest(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    type: Optional[FieldType] = None
    required: Optional[bool] = None
    placeholder: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = None
    options: Optional[list[str]] = None
    validation_rules: Optional[dict[str, Any]] = None
    display_order: Optional[int] = Field(None, ge=0)
    is_active: Optional[bool] = None


class FieldDefinitionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    group_id: uuid.UUID
    name: str
    type: FieldType
    required: bool
    placeholder: Optional[str] = None
    description: Optional[str] = None
    options: list[Any]
    validation_rules: dict[str, Any]
    display_order: int
    is_active: bool
    created_by: uuid.UUID
    created_at: dt.datetime


class TaskFieldUpsertRequest(BaseModel):
    field_definition_id: Optional[uuid.UUID] = None
    field_name: Optional[str] = Field(None, min_length=1, max_length=100)
    field_value: str
    field_type: FieldType = FieldType.TEXT
    display_order: Optional[int] = Field(None, ge=0)


class TaskFieldResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    task_id: uuid.UUID
    field_definition_id: Optional[uuid.UUID] = None
    field_name: str
    field_value: str
    field_type: FieldType
    is_group_field: bool
    display_order: int
    definition: Optional[FieldDefinitionResponse] = None
    created_at: dt.datetime
    updated_at: dt.datetime


class ReorderItem(BaseModel):
    id: uuid.UUID
    display_order: int = Field(..., ge=0)


class ReorderRequest(BaseModel):
    fields: list[ReorderItem]


class TaskFieldsMapRequest(BaseModel):
    custom_fields: dict[str, str]
