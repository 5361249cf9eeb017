"""Response envelopes and shared summary schemas."""

from __future__ import annotations

import datetime as dt
import uuid
from typing import Any, Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field

__all__ = [
    "Envelope",
    "ErrorBody",
    "ErrorEnvelope",
    "PageResponse",
    "Pagination",
    "UserSummary",
    "CountResponse",
]

T = TypeVar("T")


class Envelope(BaseModel, Generic[T]):
    """Success envelope returned by every endpoint."""

    success: bool = True
    message: str = "OK"
    data: Optional[T] = None


class ErrorBody(BaseModel):
    code: int
    message: str
    details: Any = None
    timestamp: dt.datetime


class ErrorEnvelope(BaseModel):
    success: bool = False
    error: ErrorBody


class Pagination(BaseModel):
    total: int
    limit: int
    offset: int
    has_more: bool


class PageResponse(BaseModel, Generic[T]):
    """Page-number pagination (``page`` starts at 1)."""

    items: list[T]
    total: int
    page: int
    limit: int
    pages: int = 0
    has_more: bool = False


class UserSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    avatar_url: Optional[str] = None
    display_name: str = Field(default="")


class CountResponse(BaseModel):
    count: int
