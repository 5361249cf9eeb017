"""Custom field definitions (per group) and values (per task)."""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, Query, status

from ... import schemas
from ...models import User
from ...services import CustomFieldService
from ..deps import get_custom_field_service, ok, require_logged_in

router = APIRouter(prefix="/v1", tags=["custom-fields"])


def _definition(definition) -> schemas.FieldDefinitionResponse:
    return schemas.FieldDefinitionResponse.model_validate(definition)


def _field(field) -> schemas.TaskFieldResponse:
    return schemas.TaskFieldResponse.model_validate(field)


@router.post(
    "/groups/{group_id}/custom-field-definitions",
    response_model=schemas.Envelope[schemas.FieldDefinitionResponse],
    status_code=status.HTTP_201_CREATED,
)
def create_definition(
    group_id: uuid.UUID,
    request: schemas.FieldDefinitionCreateRequest,
    fields: CustomFieldService = Depends(get_custom_field_service),
    user: User = Depends(require_logged_in),
):
    return ok(_definition(fields.create_definition(group_id, request, user.id)), "Field created")


@router.get(
    "/groups/{group_id}/custom-field-definitions",
    response_model=schemas.Envelope[list[schemas.FieldDefinitionResponse]],
)
def list_definitions(
    group_id: uuid.UUID,
    include_inactive: bool = Query(False),
    fields: CustomFieldService = Depends(get_custom_field_service),
    user: User = Depends(require_logged_in),
):
    definitions = fields.list_definitions(group_id, user.id, include_inactive)
    return ok([_definition(d) for d in definitions])


@router.get(
    "/groups/{group_id}/custom-field-templates",
    response_model=schemas.Envelope[list[schemas.FieldDefinitionResponse]],
)
def templates(
    group_id: uuid.UUID,
    fields: CustomFieldService = Depends(get_custom_field_service),
    user: User = Depends(require_logged_in),
):
    return ok([_definition(d) for d in fields.templates(group_id, user.id)])


@router.put(
    "/custom-field-definitions/{field_id}",
    response_model=schemas.Envelope[schemas.FieldDefinitionResponse],
)
def update_definition(
    field_id: uuid.UUID,
    request: schemas.FieldDefinitionUpdateRequest,
    fields: CustomFieldService = Depends(get_custom_field_service),
    user: User = Depends(require_logged_in),
):
    return ok(_definition(fields.update_definition(field_id, request, user.id)), "Field updated")


@router.delete("/custom-field-definitions/{field_id}", response_model=schemas.Envelope[None])
def delete_definition(
    field_id: uuid.UUID,
    fields: CustomFieldService = Depends(get_custom_field_service),
    user: User = Depends(require_logged_in),
):
    fields.delete_definition(field_id, user.id)
    return ok(None, "Field deleted")


# ========================================================================
# 태스크 값
# ========================================================================


@router.post(
    "/tasks/{task_id}/custom-fields",
    response_model=schemas.Envelope[schemas.TaskFieldResponse],
)
def upsert_task_field(
    task_id: uuid.UUID,
    request: schemas.TaskFieldUpsertRequest,
    fields: CustomFieldService = Depends(get_custom_field_service),
    user: User = Depends(require_logged_in),
):
    return ok(_field(fields.upsert_task_field(task_id, request, user.id)), "Field saved")


@router.get(
    "/tasks/{task_id}/custom-fields",
    response_model=schemas.Envelope[list[schemas.TaskFieldResponse]],
)
def list_task_fields(
    task_id: uuid.UUID,
    fields: CustomFieldService = Depends(get_custom_field_service),
    user: User = Depends(require_logged_in),
):
    return ok([_field(f) for f in fields.list_task_fields(task_id, user.id)])


@router.put(
    "/tasks/{task_id}/custom-fields/reorder",
    response_model=schemas.Envelope[list[schemas.TaskFieldResponse]],
)
def reorder_task_fields(
    task_id: uuid.UUID,
    request: schemas.ReorderRequest,
    fields: CustomFieldService = Depends(get_custom_field_service),
    user: User = Depends(require_logged_in),
):
    reordered = fields.reorder_task_fields(task_id, request, user.id)
    return ok([_field(f) for f in reordered], "Fields reordered")


@router.delete("/custom-fields/{field_id}", response_model=schemas.Envelope[None])
def delete_task_field(
    field_id: uuid.UUID,
    fields: CustomFieldService = Depends(get_custom_field_service),
    user: User = Depends(require_logged_in),
):
    fields.delete_task_field(field_id, user.id)
    return ok(None, "Field removed")
