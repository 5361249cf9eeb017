"""Workplaces, members and invitations."""

from __future__ import annotations

import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from ... import schemas
from ...models import User
from ...schema.enums import InvitationStatus
from ...services import WorkplaceService
from ..deps import get_current_user, get_workplace_service, ok, require_logged_in

router = APIRouter(prefix="/v1/workplaces", tags=["workplaces"])


def _workplace(workplace) -> schemas.WorkplaceResponse:
    return schemas.WorkplaceResponse.model_validate(workplace)


@router.get(
    "/users/{user_id}",
    response_model=schemas.Envelope[list[schemas.UserWorkplaceResponse]],
)
def user_workplaces(
    user_id: uuid.UUID,
    workplaces: WorkplaceService = Depends(get_workplace_service),
    _: User = Depends(get_current_user),
):
    return ok(workplaces.user_workplaces(user_id))


@router.get(
    "/{workplace_id}/users",
    response_model=schemas.Envelope[list[schemas.UserSummary]],
)
def workplace_users(
    workplace_id: uuid.UUID,
    workplaces: WorkplaceService = Depends(get_workplace_service),
    _: User = Depends(get_current_user),
):
    users = workplaces.workplace_users(workplace_id)
    return ok([schemas.UserSummary.model_validate(u) for u in users])


@router.post(
    "/{workplace_id}/select",
    response_model=schemas.Envelope[schemas.SelectWorkplaceResponse],
)
def select_workplace(
    workplace_id: uuid.UUID,
    workplaces: WorkplaceService = Depends(get_workplace_service),
    user: User = Depends(require_logged_in),
):
    return ok(workplaces.select_workplace(user, workplace_id), "Workplace selected")


@router.get("/", response_model=schemas.Envelope[list[schemas.WorkplaceResponse]])
def list_workplaces(
    workplaces: WorkplaceService = Depends(get_workplace_service),
    _: User = Depends(get_current_user),
):
    return ok([_workplace(w) for w in workplaces.list_workplaces()])


@router.post(
    "/",
    response_model=schemas.Envelope[schemas.WorkplaceResponse],
    status_code=status.HTTP_201_CREATED,
)
def create_workplace(
    request: schemas.WorkplaceCreateRequest,
    workplaces: WorkplaceService = Depends(get_workplace_service),
    user: User = Depends(require_logged_in),
):
    return ok(_workplace(workplaces.create_workplace(request, user)), "Workplace created")


@router.get("/{workplace_id}", response_model=schemas.Envelope[schemas.WorkplaceResponse])
def get_workplace(
    workplace_id: uuid.UUID,
    workplaces: WorkplaceService = Depends(get_workplace_service),
    _: User = Depends(get_current_user),
):
    return ok(_workplace(workplaces.get_workplace(workplace_id)))


@router.put(
    "/{workplace_id}/settings",
    response_model=schemas.Envelope[schemas.WorkplaceResponse],
)
def update_settings(
    workplace_id: uuid.UUID,
    request: schemas.WorkplaceSettingsRequest,
    workplaces: WorkplaceService = Depends(get_workplace_service),
    user: User = Depends(require_logged_in),
):
    workplace = workplaces.update_settings(workplace_id, request, user.id)
    return ok(_workplace(workplace), "Workplace settings updated")


@router.get(
    "/{workplace_id}/members",
    response_model=schemas.Envelope[schemas.WorkplaceMembersResponse],
)
def list_members(
    workplace_id: uuid.UUID,
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    search: Optional[str] = Query(None),
    workplaces: WorkplaceService = Depends(get_workplace_service),
    user: User = Depends(require_logged_in),
):
    return ok(
        workplaces.members(workplace_id, user.id, limit=limit, offset=offset, search=search)
    )


@router.get("/{workplace_id}/stats", response_model=schemas.Envelope[schemas.WorkplaceStats])
def stats(
    workplace_id: uuid.UUID,
    workplaces: WorkplaceService = Depends(get_workplace_service),
    _: User = Depends(require_logged_in),
):
    return ok(workplaces.stats(workplace_id))


# ========================================================================
# 초대
# ========================================================================


@router.post(
    "/{workplace_id}/invitations",
    response_model=schemas.Envelope[schemas.InvitationResponse],
    status_code=status.HTTP_201_CREATED,
)
def create_invitation(
    workplace_id: uuid.UUID,
    request: schemas.InvitationCreateRequest,
    workplaces: WorkplaceService = Depends(get_workplace_service),
    user: User = Depends(require_logged_in),
):
    invitation = workplaces.create_invitation(workplace_id, request, user)
    return ok(schemas.InvitationResponse.model_validate(invitation), "Invitation sent")


@router.get(
    "/{workplace_id}/invitations",
    response_model=schemas.Envelope[list[schemas.InvitationResponse]],
)
def list_invitations(
    workplace_id: uuid.UUID,
    status_filter: Optional[InvitationStatus] = Query(None, alias="status"),
    workplaces: WorkplaceService = Depends(get_workplace_service),
    user: User = Depends(require_logged_in),
):
    invitations = workplaces.list_invitations(workplace_id, user.id, status_filter)
    return ok([schemas.InvitationResponse.model_validate(i) for i in invitations])


@router.delete(
    "/invitations/{invitation_id}",
    response_model=schemas.Envelope[schemas.InvitationResponse],
)
def cancel_invitation(
    invitation_id: uuid.UUID,
    workplaces: WorkplaceService = Depends(get_workplace_service),
    user: User = Depends(require_logged_in),
):
    invitation = workplaces.cancel_invitation(invitation_id, user.id)
    return ok(schemas.InvitationResponse.model_validate(invitation), "Invitation cancelled")
