"""Email notification request schema."""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, EmailStr, Field

__all__ = ["EmailNotificationRequest", "EmailNotificationResponse"]


class EmailNotificationRequest(BaseModel):
    template: str = Field(..., min_length=1)
    to: EmailStr
    data: dict[str, Any] = Field(default_factory=dict)


class EmailNotificationResponse(BaseModel):
    delivered: bool
    id: Optional[str] = None
