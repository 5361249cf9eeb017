"""Workplace roles and the permission catalogue."""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, status

from ... import schemas
from ...errors import NotFoundError
from ...models import User
from ...services import RoleService
from ..deps import get_role_service, ok, require_logged_in

router = APIRouter(prefix="/v1/roles", tags=["roles"])


@router.get("/permissions", response_model=schemas.Envelope[schemas.PermissionCatalogResponse])
def permission_catalog(
    roles: RoleService = Depends(get_role_service),
    _: User = Depends(require_logged_in),
):
    catalog = roles.permission_catalog()
    return ok(
        schemas.PermissionCatalogResponse(
            categories={
                category: [schemas.PermissionResponse.model_validate(p) for p in items]
                for category, items in catalog.items()
            }
        )
    )


@router.get("/{workplace_id}/roles", response_model=schemas.Envelope[list[schemas.RoleResponse]])
def list_roles(
    workplace_id: uuid.UUID,
    roles: RoleService = Depends(get_role_service),
    user: User = Depends(require_logged_in),
):
    return ok([roles.to_response(role) for role in roles.list_roles(workplace_id, user.id)])


@router.get("/{workplace_id}/user/role", response_model=schemas.Envelope[schemas.UserRoleResponse])
def current_user_role(
    workplace_id: uuid.UUID,
    roles: RoleService = Depends(get_role_service),
    user: User = Depends(require_logged_in),
):
    role = roles.get_user_role(user.id, workplace_id)
    if role is None:
        raise NotFoundError("You have no role in this workplace")
    return ok(
        schemas.UserRoleResponse(
            role_id=role.id,
            role=role.name,
            is_system=role.is_system,
            permissions=roles.get_user_permissions(user.id, workplace_id),
        )
    )


@router.post(
    "/{workplace_id}/roles",
    response_model=schemas.Envelope[schemas.RoleResponse],
    status_code=status.HTTP_201_CREATED,
)
def create_role(
    workplace_id: uuid.UUID,
    request: schemas.RoleCreateRequest,
    roles: RoleService = Depends(get_role_service),
    user: User = Depends(require_logged_in),
):
    role = roles.create_role(workplace_id, request, user.id)
    return ok(roles.to_response(role), "Role created")


@router.put("/roles/{role_id}", response_model=schemas.Envelope[schemas.RoleResponse])
def update_role(
    role_id: uuid.UUID,
    request: schemas.RoleUpdateRequest,
    roles: RoleService = Depends(get_role_service),
    user: User = Depends(require_logged_in),
):
    role = roles.update_role(role_id, request, user.id)
    return ok(roles.to_response(role), "Role updated")


@router.delete("/roles/{role_id}", response_model=schemas.Envelope[None])
def delete_role(
    role_id: uuid.UUID,
    roles: RoleService = Depends(get_role_service),
    user: User = Depends(require_logged_in),
):
    roles.delete_role(role_id, user.id)
    return ok(None, "Role deleted")


@router.post(
    "/{workplace_id}/members/assign-role",
    response_model=schemas.Envelope[schemas.AssignRoleResponse],
)
def assign_role(
    workplace_id: uuid.UUID,
    request: schemas.AssignRoleRequest,
    roles: RoleService = Depends(get_role_service),
    user: User = Depends(require_logged_in),
):
    membership = roles.assign_role(workplace_id, request.user_id, request.role_id, user.id)
    return ok(
        schemas.AssignRoleResponse(
            user_id=membership.user_id,
            workplace_id=membership.workplace_id,
            role_id=membership.role_id,
            role=membership.role.name,
        ),
        "Role assigned",
    )
