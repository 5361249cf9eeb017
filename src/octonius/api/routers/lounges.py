"""Lounge stories for the current workplace."""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, status

from ... import schemas
from ...models import User
from ...services import LoungeService
from ..deps import get_lounge_service, ok, require_logged_in, require_workplace

router = APIRouter(prefix="/v1/lounges", tags=["lounge"])


def _story(story) -> schemas.StoryResponse:
    return schemas.StoryResponse.model_validate(story)


@router.get("/", response_model=schemas.Envelope[list[schemas.StoryResponse]])
def list_stories(
    lounge: LoungeService = Depends(get_lounge_service),
    workplace_id: uuid.UUID = Depends(require_workplace),
):
    return ok([_story(s) for s in lounge.list_stories(workplace_id)])


@router.post(
    "/",
    response_model=schemas.Envelope[schemas.StoryResponse],
    status_code=status.HTTP_201_CREATED,
)
def create_story(
    request: schemas.StoryCreateRequest,
    lounge: LoungeService = Depends(get_lounge_service),
    user: User = Depends(require_logged_in),
    workplace_id: uuid.UUID = Depends(require_workplace),
):
    return ok(_story(lounge.create_story(workplace_id, request, user.id)), "Story created")


@router.get("/{story_id}", response_model=schemas.Envelope[schemas.StoryResponse])
def get_story(
    story_id: uuid.UUID,
    lounge: LoungeService = Depends(get_lounge_service),
    workplace_id: uuid.UUID = Depends(require_workplace),
):
    return ok(_story(lounge.get_story(workplace_id, story_id)))


@router.put("/{story_id}", response_model=schemas.Envelope[schemas.StoryResponse])
def update_story(
    story_id: uuid.UUID,
    request: schemas.StoryUpdateRequest,
    lounge: LoungeService = Depends(get_lounge_service),
    user: User = Depends(require_logged_in),
    workplace_id: uuid.UUID = Depends(require_workplace),
):
    story = lounge.update_story(workplace_id, story_id, request, user.id)
    return ok(_story(story), "Story updated")


@router.delete("/{story_id}", response_model=schemas.Envelope[None])
def delete_story(
    story_id: uuid.UUID,
    lounge: LoungeService = Depends(get_lounge_service),
    user: User = Depends(require_logged_in),
    workplace_id: uuid.UUID = Depends(require_workplace),
):
    lounge.delete_story(workplace_id, story_id, user.id)
    return ok(None, "Story deleted")
