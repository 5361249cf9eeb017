"""Workplace lounge stories."""

from __future__ import annotations

import uuid

import structlog
from sqlalchemy import select

from .. import schemas
from ..errors import ForbiddenError, NotFoundError
from ..models import LoungeStory, utcnow
from .base import BaseService
from .roles import RoleService

__all__ = ["LoungeService"]

logger = structlog.get_logger(__name__)


class LoungeService(BaseService):
    def _get_story(self, workplace_id: uuid.UUID, story_id: uuid.UUID) -> LoungeStory:
        story = self.session.get(LoungeStory, story_id)
        if story is None or story.workplace_id != workplace_id:
            raise NotFoundError("Story not found")
        return story

    def list_stories(self, workplace_id: uuid.UUID) -> list[LoungeStory]:
        return list(
            self.session.execute(
                select(LoungeStory)
                .where(LoungeStory.workplace_id == workplace_id)
                .order_by(LoungeStory.date.desc())
            ).scalars()
        )

    def get_story(self, workplace_id: uuid.UUID, story_id: uuid.UUID) -> LoungeStory:
        return self._get_story(workplace_id, story_id)

    def create_story(
        self,
        workplace_id: uuid.UUID,
        request: schemas.StoryCreateRequest,
        user_id: uuid.UUID,
    ) -> LoungeStory:
        story = LoungeStory(
            workplace_id=workplace_id,
            user_id=user_id,
            title=request.title.strip(),
            description=request.description,
            type=request.type,
            date=request.date or utcnow(),
            image=request.image,
            event_date=request.event_date,
            location=request.location,
            attendees=[str(a) for a in request.attendees],
        )
        self.session.add(story)
        self._commit()
        logger.info("lounge.created", story_id=str(story.id), type=story.type.value)
        return story

    def _editable(
        self, workplace_id: uuid.UUID, story_id: uuid.UUID, user_id: uuid.UUID
    ) -> LoungeStory:
        story = self._get_story(workplace_id, story_id)
        if story.user_id != user_id and not RoleService(
            self.session, self.settings
        ).check_user_permission(user_id, workplace_id, "workplace.manage"):
            raise ForbiddenError("Only the author or a workplace manager can change this story")
        return story

    def update_story(
        self,
        workplace_id: uuid.UUID,
        story_id: uuid.UUID,
        request: schemas.StoryUpdateRequest,
        user_id: uuid.UUID,
    ) -> LoungeStory:
        story = self._editable(workplace_id, story_id, user_id)
        changes = request.model_dump(exclude_unset=True, exclude_none=True)
        if "attendees" in changes:
            changes["attendees"] = [str(a) for a in changes["attendees"]]
        for key, value in changes.items():
            setattr(story, key, value)
        self._commit()
        return story

    def delete_story(self, workplace_id: uuid.UUID, story_id: uuid.UUID, user_id: uuid.UUID) -> None:
        story = self._editable(workplace_id, story_id, user_id)
        self.session.delete(story)
        self._commit()
        logger.info("lounge.deleted", story_id=str(story_id))
