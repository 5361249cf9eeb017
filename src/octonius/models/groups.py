"""Group and group membership models."""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING, Optional

from sqlalchemy import JSON, Boolean, ForeignKey, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..schema.enums import GroupRole, GroupType, MembershipStatus, enum_column
from .base import Base, TimestampMixin

if TYPE_CHECKING:  # pragma: no cover
    from .tasks import Task, TaskColumn
    from .users import User

__all__ = [
    "Group",
    "GroupMembership",
    "GROUP_PERMISSION_KEYS",
    "default_group_settings",
    "default_group_metadata",
    "member_permissions",
]

GROUP_PERMISSION_KEYS: tuple[str, ...] = (
    "can_edit_group",
    "can_add_members",
    "can_remove_members",
    "can_create_tasks",
    "can_assign_tasks",
    "can_view_analytics",
)


def default_group_settings() -> dict:
    return {
        "allow_member_invites": True,
        "require_approval": False,
        "visibility": "private",
        "default_role": "member",
    }


def default_group_metadata() -> dict:
    return {"tags": [], "category": None, "department": None}


def member_permissions(role: GroupRole | str) -> dict[str, bool]:
    """Default per-member permission flags for a group role."""

    role = GroupRole(role)
    if role is GroupRole.ADMIN:
        return {key: True for key in GROUP_PERMISSION_KEYS}
    if role is GroupRole.MEMBER:
        return {
            "can_edit_group": False,
            "can_add_members": False,
            "can_remove_members": False,
            "can_create_tasks": True,
            "can_assign_tasks": True,
            "can_view_analytics": False,
        }
    return {key: False for key in GROUP_PERMISSION_KEYS}


class Group(TimestampMixin, Base):
    """A team inside a workplace holding a task board and files."""

    __tablename__ = "groups"

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text)
    image_url: Mapped[Optional[str]] = mapped_column(Text)
    workplace_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("workplaces.id", ondelete="CASCADE"), nullable=False, index=True
    )
    created_by: Mapped[uuid.UUID] = mapped_column(nullable=False)
    type: Mapped[GroupType] = mapped_column(
        enum_column(GroupType), default=GroupType.REGULAR, nullable=False
    )
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    settings: Mapped[dict] = mapped_column(JSON, default=default_group_settings, nullable=False)
    # "metadata" is reserved on declarative classes
    meta: Mapped[dict] = mapped_column(
        "metadata", JSON, default=default_group_metadata, nullable=False
    )

    memberships: Mapped[list["GroupMembership"]] = relationship(
        back_populates="group", cascade="all, delete-orphan"
    )
    columns: Mapped[list["TaskColumn"]] = relationship(
        back_populates="group", cascade="all, delete-orphan", order_by="TaskColumn.position"
    )
    tasks: Mapped[list["Task"]] = relationship(
        back_populates="group", cascade="all, delete-orphan"
    )


class GroupMembership(TimestampMixin, Base):
    __tablename__ = "group_memberships"
    __table_args__ = (UniqueConstraint("group_id", "user_id"),)

    group_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("groups.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    role: Mapped[GroupRole] = mapped_column(
        enum_column(GroupRole), default=GroupRole.MEMBER, nullable=False
    )
    status: Mapped[MembershipStatus] = mapped_column(
        enum_column(MembershipStatus), default=MembershipStatus.ACTIVE, nullable=False
    )
    invited_by: Mapped[Optional[uuid.UUID]] = mapped_column()
    permissions: Mapped[dict] = mapped_column(JSON, default=dict, nullable=False)

    group: Mapped[Group] = relationship(back_populates="memberships")
    user: Mapped["User"] = relationship()

    def can(self, permission: str) -> bool:
        if self.role == GroupRole.ADMIN:
            return True
        return bool((self.permissions or {}).get(permission))
