"""Groups within the current workplace."""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, Query, status

from ... import schemas
from ...models import User
from ...services import GroupService
from ..deps import get_group_service, ok, require_logged_in, require_workplace

router = APIRouter(prefix="/v1/groups", tags=["groups"])


def _group(group) -> schemas.GroupResponse:
    return schemas.GroupResponse.model_validate(group)


@router.post(
    "/",
    response_model=schemas.Envelope[schemas.GroupResponse],
    status_code=status.HTTP_201_CREATED,
)
def create_group(
    request: schemas.GroupCreateRequest,
    groups: GroupService = Depends(get_group_service),
    user: User = Depends(require_logged_in),
    workplace_id: uuid.UUID = Depends(require_workplace),
):
    return ok(_group(groups.create_group(workplace_id, request, user.id)), "Group created")


@router.get("/", response_model=schemas.Envelope[list[schemas.GroupResponse]])
def list_groups(
    groups: GroupService = Depends(get_group_service),
    user: User = Depends(require_logged_in),
    workplace_id: uuid.UUID = Depends(require_workplace),
):
    return ok([_group(g) for g in groups.list_groups(workplace_id, user.id)])


@router.get("/search", response_model=schemas.Envelope[list[schemas.GroupResponse]])
def search_groups(
    q: str = Query(..., min_length=1),
    groups: GroupService = Depends(get_group_service),
    user: User = Depends(require_logged_in),
    workplace_id: uuid.UUID = Depends(require_workplace),
):
    return ok([_group(g) for g in groups.search_groups(workplace_id, q, user.id)])


@router.get("/{group_id}", response_model=schemas.Envelope[schemas.GroupResponse])
def get_group(
    group_id: uuid.UUID,
    groups: GroupService = Depends(get_group_service),
    user: User = Depends(require_logged_in),
    workplace_id: uuid.UUID = Depends(require_workplace),
):
    return ok(_group(groups.get_group(group_id, user.id, workplace_id)))


@router.put("/{group_id}", response_model=schemas.Envelope[schemas.GroupResponse])
def update_group(
    group_id: uuid.UUID,
    request: schemas.GroupUpdateRequest,
    groups: GroupService = Depends(get_group_service),
    user: User = Depends(require_logged_in),
    workplace_id: uuid.UUID = Depends(require_workplace),
):
    groups.get_group(group_id, user.id, workplace_id)
    return ok(_group(groups.update_group(group_id, request, user.id)), "Group updated")


@router.delete("/{group_id}", response_model=schemas.Envelope[None])
def delete_group(
    group_id: uuid.UUID,
    groups: GroupService = Depends(get_group_service),
    user: User = Depends(require_logged_in),
    workplace_id: uuid.UUID = Depends(require_workplace),
):
    groups.get_group(group_id, user.id, workplace_id)
    groups.delete_group(group_id, user.id)
    return ok(None, "Group deleted")


# ========================================================================
# 멤버
# ========================================================================


@router.get(
    "/{group_id}/members",
    response_model=schemas.Envelope[list[schemas.GroupMemberResponse]],
)
def list_members(
    group_id: uuid.UUID,
    groups: GroupService = Depends(get_group_service),
    user: User = Depends(require_logged_in),
    _: uuid.UUID = Depends(require_workplace),
):
    members = groups.list_members(group_id, user.id)
    return ok([schemas.GroupMemberResponse.model_validate(m) for m in members])


@router.post(
    "/{group_id}/members",
    response_model=schemas.Envelope[schemas.GroupMemberResponse],
    status_code=status.HTTP_201_CREATED,
)
def add_member(
    group_id: uuid.UUID,
    request: schemas.GroupMemberAddRequest,
    groups: GroupService = Depends(get_group_service),
    user: User = Depends(require_logged_in),
    _: uuid.UUID = Depends(require_workplace),
):
    membership = groups.add_member(group_id, request, user.id)
    return ok(schemas.GroupMemberResponse.model_validate(membership), "Member added")


@router.delete("/{group_id}/members/{user_id}", response_model=schemas.Envelope[None])
def remove_member(
    group_id: uuid.UUID,
    user_id: uuid.UUID,
    groups: GroupService = Depends(get_group_service),
    user: User = Depends(require_logged_in),
    _: uuid.UUID = Depends(require_workplace),
):
    groups.remove_member(group_id, user_id, user.id)
    return ok(None, "Member removed")
