"""User accounts."""

from __future__ import annotations

import datetime as dt
import uuid
from typing import TYPE_CHECKING, Optional

from sqlalchemy import JSON, DateTime, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, TimestampMixin

if TYPE_CHECKING:  # pragma: no cover
    from .workplaces import WorkplaceMembership

__all__ = ["User", "default_notification_preferences"]


def default_notification_preferences() -> dict:
    return {"email": True, "push": True, "in_app": True}


class User(TimestampMixin, Base):
    """A person who can belong to many workplaces."""

    __tablename__ = "users"

    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    first_name: Mapped[Optional[str]] = mapped_column(String(100))
    last_name: Mapped[Optional[str]] = mapped_column(String(100))
    phone: Mapped[Optional[str]] = mapped_column(String(50))
    avatar_url: Mapped[Optional[str]] = mapped_column(Text)
    job_title: Mapped[Optional[str]] = mapped_column(String(100))
    department: Mapped[Optional[str]] = mapped_column(String(100))
    timezone: Mapped[str] = mapped_column(String(64), default="UTC", nullable=False)
    language: Mapped[str] = mapped_column(String(16), default="en", nullable=False)
    notification_preferences: Mapped[dict] = mapped_column(
        JSON, default=default_notification_preferences, nullable=False
    )
    source: Mapped[Optional[str]] = mapped_column(String(50))
    disabled_at: Mapped[Optional[dt.datetime]] = mapped_column(DateTime(timezone=True))
    current_workplace_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        ForeignKey("workplaces.id", ondelete="SET NULL")
    )

    memberships: Mapped[list["WorkplaceMembership"]] = relationship(
        back_populates="user", cascade="all, delete-orphan"
    )

    @property
    def display_name(self) -> str:
        full = f"{self.first_name or ''} {self.last_name or ''}".strip()
        return full or self.email

    @property
    def initials(self) -> str:
        parts = [p for p in self.display_name.replace("@", " ").split() if p]
        return "".join(p[0] for p in parts[:2]).upper() or "U"

    @property
    def is_disabled(self) -> bool:
        return self.disabled_at is not None
