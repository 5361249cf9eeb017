"""Lounge story schemas."""

from __future__ import annotations

import datetime as dt
import uuid
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from ..schema.enums import StoryType
from .common import UserSummary

__all__ = ["StoryCreateRequest", "StoryUpdateRequest", "StoryResponse"]


class StoryCreateRequest(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    type: StoryType
    date: Optional[dt.datetime] = None
    image: Optional[str] = None
    event_date: Optional[dt.datetime] = None
    location: Optional[str] = Field(None, max_length=255)
    attendees: list[uuid.UUID] = Field(default_factory=list)


class StoryUpdateRequest(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    type: Optional[StoryType] = None
    date: Optional[dt.datetime] = None
    image: Optional[str] = None
    event_date: Optional[dt.datetime] = None
    location: Optional[str] = Field(None, max_length=255)
    attendees: Optional[list[uuid.UUID]] = None


class StoryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    workplace_id: uuid.UUID
    user_id: uuid.UUID
    title: str
    description: Optional[str] = None
    type: StoryType
    date: dt.datetime
    image: Optional[str] = None
    event_date: Optional[dt.datetime] = None
    location: Optional[str] = None
    attendees: list[uuid.UUID]
    author: Optional[UserSummary] = None
    created_at: dt.datetime
