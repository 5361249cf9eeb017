"""Workplace lounge stories (news, events, updates)."""

from __future__ import annotations

import datetime as dt
import uuid
from typing import TYPE_CHECKING, Optional

from sqlalchemy import JSON, DateTime, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..schema.enums import StoryType, enum_column
from .base import Base, TimestampMixin, utcnow

if TYPE_CHECKING:  # pragma: no cover
    from .users import User

__all__ = ["LoungeStory"]


class LoungeStory(TimestampMixin, Base):
    __tablename__ = "lounge_stories"

    workplace_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("workplaces.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text)
    type: Mapped[StoryType] = mapped_column(enum_column(StoryType), nullable=False)
    date: Mapped[dt.datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )
    image: Mapped[Optional[str]] = mapped_column(Text)
    event_date: Mapped[Optional[dt.datetime]] = mapped_column(DateTime(timezone=True))
    location: Mapped[Optional[str]] = mapped_column(String(255))
    # list of user ids (as strings)
    attendees: Mapped[list] = mapped_column(JSON, default=list, nullable=False)

    author: Mapped["User"] = relationship()
