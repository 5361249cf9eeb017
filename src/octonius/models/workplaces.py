"""Workplace, membership and invitation models."""

from __future__ import annotations

import datetime as dt
import uuid
from typing import TYPE_CHECKING, Optional

from sqlalchemy import Boolean, DateTime, ForeignKey, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..schema.enums import (
    InvitationStatus,
    MembershipStatus,
    WorkplaceSize,
    enum_column,
)
from .base import Base, TimestampMixin, utcnow

if TYPE_CHECKING:  # pragma: no cover
    from .roles import Role
    from .users import User

__all__ = ["Workplace", "WorkplaceMembership", "WorkplaceInvitation"]


class Workplace(TimestampMixin, Base):
    """Top level tenant owning groups, roles and files."""

    __tablename__ = "workplaces"

    name: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text)
    logo_url: Mapped[Optional[str]] = mapped_column(Text)
    website: Mapped[Optional[str]] = mapped_column(String(255))
    industry: Mapped[Optional[str]] = mapped_column(String(100))
    size: Mapped[Optional[WorkplaceSize]] = mapped_column(enum_column(WorkplaceSize))
    timezone: Mapped[str] = mapped_column(String(64), default="UTC", nullable=False)
    active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    created_by: Mapped[uuid.UUID] = mapped_column(nullable=False)

    memberships: Mapped[list["WorkplaceMembership"]] = relationship(
        back_populates="workplace", cascade="all, delete-orphan"
    )
    roles: Mapped[list["Role"]] = relationship(
        back_populates="workplace", cascade="all, delete-orphan"
    )
    invitations: Mapped[list["WorkplaceInvitation"]] = relationship(
        back_populates="workplace", cascade="all, delete-orphan"
    )


class WorkplaceMembership(TimestampMixin, Base):
    __tablename__ = "workplace_memberships"
    __table_args__ = (UniqueConstraint("user_id", "workplace_id"),)

    user_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    workplace_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("workplaces.id", ondelete="CASCADE"), nullable=False, index=True
    )
    role_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("roles.id", ondelete="RESTRICT"), nullable=False
    )
    status: Mapped[MembershipStatus] = mapped_column(
        enum_column(MembershipStatus), default=MembershipStatus.ACTIVE, nullable=False
    )
    joined_at: Mapped[dt.datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )
    last_active_at: Mapped[Optional[dt.datetime]] = mapped_column(DateTime(timezone=True))

    user: Mapped["User"] = relationship(back_populates="memberships")
    workplace: Mapped[Workplace] = relationship(back_populates="memberships")
    role: Mapped["Role"] = relationship()


class WorkplaceInvitation(TimestampMixin, Base):
    __tablename__ = "workplace_invitations"

    email: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    workplace_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("workplaces.id", ondelete="CASCADE"), nullable=False
    )
    invited_by: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    role_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        ForeignKey("roles.id", ondelete="SET NULL")
    )
    user_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL")
    )
    status: Mapped[InvitationStatus] = mapped_column(
        enum_column(InvitationStatus), default=InvitationStatus.PENDING, nullable=False
    )
    token: Mapped[str] = mapped_column(String(128), unique=True, nullable=False)
    message: Mapped[Optional[str]] = mapped_column(Text)
    expires_at: Mapped[dt.datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    accepted_at: Mapped[Optional[dt.datetime]] = mapped_column(DateTime(timezone=True))
    rejected_at: Mapped[Optional[dt.datetime]] = mapped_column(DateTime(timezone=True))

    workplace: Mapped[Workplace] = relationship(back_populates="invitations")
    inviter: Mapped["User"] = relationship(foreign_keys=[invited_by])
    role: Mapped[Optional["Role"]] = relationship()
