"""User accounts."""

from __future__ import annotations

import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from ... import schemas
from ...models import User
from ...services import UserService
from ..deps import get_user_service, ok, require_logged_in

router = APIRouter(prefix="/v1/users", tags=["users"])


def _user(user: User) -> schemas.UserResponse:
    return schemas.UserResponse.model_validate(user)


@router.get("/me", response_model=schemas.Envelope[schemas.UserResponse])
def me(user: User = Depends(require_logged_in)):
    return ok(_user(user))


@router.get("/email/{email}", response_model=schemas.Envelope[schemas.UserResponse])
def get_by_email(
    email: str,
    users: UserService = Depends(get_user_service),
    _: User = Depends(require_logged_in),
):
    return ok(_user(users.get_user_by_email(email)))


@router.post(
    "/",
    response_model=schemas.Envelope[schemas.UserResponse],
    status_code=status.HTTP_201_CREATED,
)
def create_user(
    request: schemas.UserCreateRequest,
    users: UserService = Depends(get_user_service),
    _: User = Depends(require_logged_in),
):
    return ok(_user(users.create_user(request)), "User created")


@router.get("/", response_model=schemas.Envelope[schemas.PageResponse[schemas.UserResponse]])
def list_users(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    search: Optional[str] = Query(None),
    users: UserService = Depends(get_user_service),
    _: User = Depends(require_logged_in),
):
    return ok(users.page(page=page, limit=limit, search=search))


@router.get("/{user_id}", response_model=schemas.Envelope[schemas.UserResponse])
def get_user(
    user_id: uuid.UUID,
    users: UserService = Depends(get_user_service),
    _: User = Depends(require_logged_in),
):
    return ok(_user(users.get_user(user_id)))


@router.put("/{user_id}", response_model=schemas.Envelope[schemas.UserResponse])
def update_user(
    user_id: uuid.UUID,
    request: schemas.UserUpdateRequest,
    users: UserService = Depends(get_user_service),
    user: User = Depends(require_logged_in),
):
    return ok(_user(users.update_user(user_id, request, actor_id=user.id)), "User updated")


@router.delete("/{user_id}", response_model=schemas.Envelope[None])
def delete_user(
    user_id: uuid.UUID,
    users: UserService = Depends(get_user_service),
    user: User = Depends(require_logged_in),
):
    users.delete_user(user_id, actor_id=user.id)
    return ok(None, "User deleted")


@router.post(
    "/{user_id}/workplaces",
    response_model=schemas.Envelope[dict],
    status_code=status.HTTP_201_CREATED,
)
def add_to_workplace(
    user_id: uuid.UUID,
    request: schemas.WorkplaceAddRequest,
    users: UserService = Depends(get_user_service),
    user: User = Depends(require_logged_in),
):
    membership = users.add_member(user_id, request.workplace_id, request.role_id, user.id)
    return ok(
        {
            "user_id": membership.user_id,
            "workplace_id": membership.workplace_id,
            "role_id": membership.role_id,
            "status": membership.status,
        },
        "User added to workplace",
    )


@router.delete("/{user_id}/workplaces/{workplace_id}", response_model=schemas.Envelope[None])
def remove_from_workplace(
    user_id: uuid.UUID,
    workplace_id: uuid.UUID,
    users: UserService = Depends(get_user_service),
    user: User = Depends(require_logged_in),
):
    users.remove_member(user_id, workplace_id, user.id)
    return ok(None, "User removed from workplace")
