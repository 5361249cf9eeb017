"""Group activity feed schemas."""

from __future__ import annotations

import datetime as dt
import uuid
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from .common import UserSummary

__all__ = [
    "PostRequest",
    "PostResponse",
    "PostCommentRequest",
    "PostCommentResponse",
    "LikeResponse",
]


class PostRequest(BaseModel):
    content: str = Field(..., min_length=1, max_length=10000)


class PostResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    group_id: uuid.UUID
    user_id: uuid.UUID
    content: str
    author: Optional[UserSummary] = None
    like_count: int = 0
    comment_count: int = 0
    liked_by_me: bool = False
    created_at: dt.datetime
    updated_at: dt.datetime


class PostCommentRequest(BaseModel):
    content: str = Field(..., min_length=1, max_length=5000)


class PostCommentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    post_id: uuid.UUID
    user_id: uuid.UUID
    content: str
    author: Optional[UserSummary] = None
    created_at: dt.datetime


class LikeResponse(BaseModel):
    post_id: uuid.UUID
    liked: bool
    like_count: int
