"""Groups, group membership and per-user private groups."""

from __future__ import annotations

import uuid
from typing import Optional

import structlog
from sqlalchemy import and_, func, or_, select

from .. import schemas
from ..errors import ConflictError, ForbiddenError, NotFoundError
from ..models import Group, GroupMembership, User, WorkplaceMembership
from ..models.groups import default_group_metadata, default_group_settings, member_permissions
from ..schema.enums import GroupRole, GroupType, MembershipStatus
from .base import BaseService

__all__ = ["GroupService", "PrivateGroupService", "GroupAccess"]

logger = structlog.get_logger(__name__)


class GroupAccess(BaseService):
    """Group lookup and membership checks shared by group-scoped services."""

    def get_active_group(self, group_id: uuid.UUID) -> Group:
        group = self.session.get(Group, group_id)
        if group is None or not group.is_active:
            raise NotFoundError("Group not found")
        return group

    def get_membership(
        self, group_id: uuid.UUID, user_id: uuid.UUID
    ) -> Optional[GroupMembership]:
        return self.session.execute(
            select(GroupMembership).where(
                GroupMembership.group_id == group_id,
                GroupMembership.user_id == user_id,
                GroupMembership.status == MembershipStatus.ACTIVE,
            )
        ).scalar_one_or_none()

    def require_member(
        self, group_id: uuid.UUID, user_id: uuid.UUID
    ) -> tuple[Group, GroupMembership]:
        group = self.get_active_group(group_id)
        membership = self.get_membership(group_id, user_id)
        if membership is None:
            raise ForbiddenError("Not a member of this group")
        return group, membership

    def require_group_permission(
        self, group_id: uuid.UUID, user_id: uuid.UUID, permission: str
    ) -> tuple[Group, GroupMembership]:
        group, membership = self.require_member(group_id, user_id)
        if not membership.can(permission):
            raise ForbiddenError(f"Requires {permission} group permission")
        return group, membership


class PrivateGroupService(GroupAccess):
    """Per-user "My Space" groups holding personal files and notes."""

    @staticmethod
    def private_group_name(user: User) -> str:
        return f"{user.display_name}'s Private Space"

    def get_private_group(
        self, user_id: uuid.UUID, workplace_id: uuid.UUID
    ) -> Optional[Group]:
        return self.session.execute(
            select(Group)
            .join(GroupMembership, GroupMembership.group_id == Group.id)
            .where(
                Group.workplace_id == workplace_id,
                Group.type == GroupType.PRIVATE,
                Group.created_by == user_id,
                Group.is_active.is_(True),
                GroupMembership.user_id == user_id,
            )
        ).scalars().first()

    def ensure_private_group(
        self, user: User, workplace_id: uuid.UUID, *, commit: bool = True
    ) -> Group:
        group = self.get_private_group(user.id, workplace_id)
        if group is not None:
            return group

        settings = default_group_settings()
        settings.update({"allow_member_invites": False, "visibility": "private"})
        group = Group(
            name=self.private_group_name(user),
            description="Personal space for files and notes",
            workplace_id=workplace_id,
            created_by=user.id,
            type=GroupType.PRIVATE,
            settings=settings,
            meta=default_group_metadata(),
        )
        self.session.add(group)
        self.session.flush()
        self.session.add(
            GroupMembership(
                group_id=group.id,
                user_id=user.id,
                role=GroupRole.ADMIN,
                permissions=member_permissions(GroupRole.ADMIN),
            )
        )
        self.session.flush()
        if commit:
            self._commit()
        logger.info(
            "group.private_created", user_id=str(user.id), workplace_id=str(workplace_id)
        )
        return group

    def is_private_group(self, group_id: uuid.UUID) -> bool:
        group = self.session.get(Group, group_id)
        return group is not None and group.type == GroupType.PRIVATE


class GroupService(GroupAccess):
    """Regular group lifecycle and membership."""

    def _name_taken(
        self, workplace_id: uuid.UUID, name: str, exclude_id: Optional[uuid.UUID] = None
    ) -> bool:
        stmt = select(Group.id).where(
            Group.workplace_id == workplace_id,
            func.lower(Group.name) == name.lower(),
            Group.is_active.is_(True),
        )
        if exclude_id is not None:
            stmt = stmt.where(Group.id != exclude_id)
        return self.session.execute(stmt).first() is not None

    def _visible_to(self, group: Group, user_id: uuid.UUID) -> bool:
        if group.type != GroupType.PRIVATE:
            return True
        return self.get_membership(group.id, user_id) is not None

    def create_group(
        self,
        workplace_id: uuid.UUID,
        request: schemas.GroupCreateRequest,
        user_id: uuid.UUID,
    ) -> Group:
        from .tasks import TaskService

        name = request.name.strip()
        if self._name_taken(workplace_id, name):
            raise ConflictError("A group with this name already exists")

        settings = default_group_settings()
        if request.settings is not None:
            settings.update(request.settings.model_dump(mode="json"))
        meta = default_group_metadata()
        if request.metadata is not None:
            meta.update(request.metadata.model_dump(mode="json"))

        group = Group(
            name=name,
            description=request.description,
            image_url=request.image_url,
            workplace_id=workplace_id,
            created_by=user_id,
            type=GroupType.REGULAR,
            settings=settings,
            meta=meta,
        )
        self.session.add(group)
        self.session.flush()
        self.session.add(
            GroupMembership(
                group_id=group.id,
                user_id=user_id,
                role=GroupRole.ADMIN,
                permissions=member_permissions(GroupRole.ADMIN),
            )
        )
        TaskService(self.session, self.settings).create_default_columns(group.id, user_id)
        self._commit("A group with this name already exists")
        logger.info("group.created", group_id=str(group.id), workplace_id=str(workplace_id))
        return group

    def list_groups(self, workplace_id: uuid.UUID, user_id: uuid.UUID) -> list[Group]:
        own_private = select(GroupMembership.group_id).where(
            GroupMembership.user_id == user_id,
            GroupMembership.status == MembershipStatus.ACTIVE,
        )
        stmt = (
            select(Group)
            .where(
                Group.workplace_id == workplace_id,
                Group.is_active.is_(True),
                or_(
                    Group.type == GroupType.REGULAR,
                    and_(Group.type == GroupType.PRIVATE, Group.id.in_(own_private)),
                ),
            )
            .order_by(Group.created_at.desc())
        )
        return list(self.session.execute(stmt).scalars())

    def search_groups(
        self, workplace_id: uuid.UUID, term: str, user_id: uuid.UUID
    ) -> list[Group]:
        term = term.strip().lower()
        return sorted(
            (g for g in self.list_groups(workplace_id, user_id) if term in g.name.lower()),
            key=lambda g: g.name.lower(),
        )

    def get_group(
        self, group_id: uuid.UUID, user_id: uuid.UUID, workplace_id: Optional[uuid.UUID] = None
    ) -> Group:
        group = self.get_active_group(group_id)
        if workplace_id is not None and group.workplace_id != workplace_id:
            raise NotFoundError("Group not found")
        if not self._visible_to(group, user_id):
            raise NotFoundError("Group not found")
        return group

    def update_group(
        self, group_id: uuid.UUID, request: schemas.GroupUpdateRequest, user_id: uuid.UUID
    ) -> Group:
        group, _ = self.require_group_permission(group_id, user_id, "can_edit_group")

        if request.name is not None:
            name = request.name.strip()
            if self._name_taken(group.workplace_id, name, exclude_id=group.id):
                raise ConflictError("A group with this name already exists")
            group.name = name
        if request.description is not None:
            group.description = request.description
        if request.image_url is not None:
            group.image_url = request.image_url
        if request.settings is not None:
            group.settings = {**(group.settings or {}), **request.settings}
        if request.metadata is not None:
            group.meta = {**(group.meta or {}), **request.metadata}

        self._commit("A group with this name already exists")
        logger.info("group.updated", group_id=str(group.id))
        return group

    def delete_group(self, group_id: uuid.UUID, user_id: uuid.UUID) -> Group:
        group, membership = self.require_member(group_id, user_id)
        if membership.role != GroupRole.ADMIN:
            raise ForbiddenError("Only group admins can delete the group")
        if group.type == GroupType.PRIVATE:
            raise ValueError("Private groups cannot be deleted")
        group.is_active = False
        self._commit()
        logger.info("group.deleted", group_id=str(group.id))
        return group

    # ========================================================================
    # 멤버
    # ========================================================================

    def list_members(self, group_id: uuid.UUID, user_id: uuid.UUID) -> list[GroupMembership]:
        self.require_member(group_id, user_id)
        return list(
            self.session.execute(
                select(GroupMembership)
                .where(
                    GroupMembership.group_id == group_id,
                    GroupMembership.status == MembershipStatus.ACTIVE,
                )
                .order_by(GroupMembership.created_at)
            ).scalars()
        )

    def add_member(
        self,
        group_id: uuid.UUID,
        request: schemas.GroupMemberAddRequest,
        added_by: uuid.UUID,
    ) -> GroupMembership:
        group, _ = self.require_group_permission(group_id, added_by, "can_add_members")
        if group.type == GroupType.PRIVATE:
            raise ValueError("Private groups cannot have other members")

        in_workplace = self.session.execute(
            select(WorkplaceMembership.id).where(
                WorkplaceMembership.user_id == request.user_id,
                WorkplaceMembership.workplace_id == group.workplace_id,
                WorkplaceMembership.status == MembershipStatus.ACTIVE,
            )
        ).first()
        if in_workplace is None:
            raise ValueError("User is not a member of this workplace")

        membership = self.session.execute(
            select(GroupMembership).where(
                GroupMembership.group_id == group_id,
                GroupMembership.user_id == request.user_id,
            )
        ).scalar_one_or_none()
        if membership is not None and membership.status == MembershipStatus.ACTIVE:
            raise ConflictError("User is already a member of this group")

        if membership is None:
            membership = GroupMembership(group_id=group_id, user_id=request.user_id)
            self.session.add(membership)
        membership.role = request.role
        membership.status = MembershipStatus.ACTIVE
        membership.invited_by = added_by
        membership.permissions = member_permissions(request.role)
        self._commit("User is already a member of this group")
        logger.info(
            "group.member_added",
            group_id=str(group_id),
            user_id=str(request.user_id),
            role=request.role.value,
        )
        return membership

    def remove_member(
        self, group_id: uuid.UUID, user_id: uuid.UUID, removed_by: uuid.UUID
    ) -> None:
        if user_id == removed_by:
            self.require_member(group_id, removed_by)
        else:
            self.require_group_permission(group_id, removed_by, "can_remove_members")

        membership = self.get_membership(group_id, user_id)
        if membership is None:
            raise NotFoundError("Member not found")

        if membership.role == GroupRole.ADMIN:
            admins = self.session.execute(
                select(func.count(GroupMembership.id)).where(
                    GroupMembership.group_id == group_id,
                    GroupMembership.role == GroupRole.ADMIN,
                    GroupMembership.status == MembershipStatus.ACTIVE,
                )
            ).scalar_one()
            if admins <= 1:
                raise ValueError("Cannot remove the last admin of the group")

        membership.status = MembershipStatus.INACTIVE
        self._commit()
        logger.info(
            "group.member_removed",
            group_id=str(group_id),
            user_id=str(user_id),
            removed_by=str(removed_by),
        )
