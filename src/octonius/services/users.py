"""User accounts and workplace membership management."""

from __future__ import annotations

import math
import uuid
from typing import Optional

import structlog
from sqlalchemy import func, or_, select

from .. import schemas
from ..errors import ConflictError, ForbiddenError, NotFoundError
from ..models import Role, User, Workplace, WorkplaceMembership, utcnow
from ..schema.enums import MembershipStatus
from .base import BaseService
from .roles import RoleService

__all__ = ["UserService", "normalize_email"]

logger = structlog.get_logger(__name__)


def normalize_email(email: str) -> str:
    return email.strip().lower()


class UserService(BaseService):
    """User CRUD."""

    def get_by_email(self, email: str) -> Optional[User]:
        return self.session.execute(
            select(User).where(User.email == normalize_email(email))
        ).scalar_one_or_none()

    def get_user(self, user_id: uuid.UUID) -> User:
        return self._get_or_404(User, user_id, "User")

    def get_user_by_email(self, email: str) -> User:
        user = self.get_by_email(email)
        if user is None:
            raise NotFoundError("User not found")
        return user

    def create_user(
        self, request: schemas.UserCreateRequest, *, commit: bool = True
    ) -> User:
        email = normalize_email(request.email)
        if self.get_by_email(email) is not None:
            raise ConflictError("User with this email already exists")

        user = User(
            email=email,
            first_name=request.first_name,
            last_name=request.last_name,
            phone=request.phone,
            avatar_url=request.avatar_url,
            job_title=request.job_title,
            department=request.department,
            timezone=request.timezone,
            language=request.language,
            source=request.source,
        )
        self.session.add(user)
        if commit:
            self._commit("User with this email already exists")
        else:
            self.session.flush()
        logger.info("user.created", user_id=str(user.id), source=user.source)
        return user

    def list_users(
        self, page: int = 1, limit: int = 10, search: Optional[str] = None
    ) -> tuple[list[User], int]:
        stmt = select(User)
        count_stmt = select(func.count(User.id))
        if search:
            pattern = f"%{search.lower()}%"
            condition = or_(
                func.lower(User.first_name).like(pattern),
                func.lower(User.last_name).like(pattern),
                func.lower(User.email).like(pattern),
            )
            stmt = stmt.where(condition)
            count_stmt = count_stmt.where(condition)

        total = self.session.execute(count_stmt).scalar_one()
        users = list(
            self.session.execute(
                stmt.order_by(User.created_at.desc())
                .limit(limit)
                .offset((page - 1) * limit)
            ).scalars()
        )
        return users, total

    def page(
        self, page: int = 1, limit: int = 10, search: Optional[str] = None
    ) -> schemas.PageResponse[schemas.UserResponse]:
        users, total = self.list_users(page=page, limit=limit, search=search)
        return schemas.PageResponse[schemas.UserResponse](
            items=[schemas.UserResponse.model_validate(u) for u in users],
            total=total,
            page=page,
            limit=limit,
            pages=math.ceil(total / limit) if limit else 0,
            has_more=page * limit < total,
        )

    def _require_self(self, user_id: uuid.UUID, actor_id: Optional[uuid.UUID]) -> None:
        if actor_id is not None and actor_id != user_id:
            raise ForbiddenError("You can only change your own account")

    def update_user(
        self,
        user_id: uuid.UUID,
        request: schemas.UserUpdateRequest,
        actor_id: Optional[uuid.UUID] = None,
    ) -> User:
        self._require_self(user_id, actor_id)
        user = self.get_user(user_id)
        changes = request.model_dump(exclude_unset=True, exclude_none=True)
        prefs = changes.pop("notification_preferences", None)
        for key, value in changes.items():
            setattr(user, key, value)
        if prefs is not None:
            user.notification_preferences = {**(user.notification_preferences or {}), **prefs}
        self._commit()
        logger.info("user.updated", user_id=str(user.id), fields=sorted(changes))
        return user

    def delete_user(self, user_id: uuid.UUID, actor_id: Optional[uuid.UUID] = None) -> None:
        self._require_self(user_id, actor_id)
        user = self.get_user(user_id)
        self.session.delete(user)
        self._commit()
        logger.info("user.deleted", user_id=str(user_id))

    # ========================================================================
    # 워크플레이스 멤버십
    # ========================================================================

    def add_to_workplace(
        self,
        user_id: uuid.UUID,
        workplace_id: uuid.UUID,
        role_id: Optional[uuid.UUID] = None,
        *,
        commit: bool = True,
    ) -> WorkplaceMembership:
        from .groups import PrivateGroupService

        user = self.get_user(user_id)
        self._get_or_404(Workplace, workplace_id, "Workplace")

        if role_id is None:
            role = self.session.execute(
                select(Role).where(
                    Role.workplace_id == workplace_id,
                    Role.name == "member",
                    Role.active.is_(True),
                )
            ).scalar_one_or_none()
            if role is None:
                raise NotFoundError("Default member role not found")
        else:
            role = self.session.get(Role, role_id)
            if role is None or role.workplace_id != workplace_id or not role.active:
                raise NotFoundError("Role not found")

        membership = self.session.execute(
            select(WorkplaceMembership).where(
                WorkplaceMembership.user_id == user_id,
                WorkplaceMembership.workplace_id == workplace_id,
            )
        ).scalar_one_or_none()
        if membership is not None and membership.status == MembershipStatus.ACTIVE:
            raise ConflictError("User is already a member of this workplace")

        if membership is None:
            membership = WorkplaceMembership(
                user_id=user_id,
                workplace_id=workplace_id,
                role_id=role.id,
                status=MembershipStatus.ACTIVE,
            )
            self.session.add(membership)
        else:
            membership.status = MembershipStatus.ACTIVE
            membership.role_id = role.id
            membership.joined_at = utcnow()
        self.session.flush()

        PrivateGroupService(self.session, self.settings).ensure_private_group(
            user, workplace_id, commit=False
        )
        if commit:
            self._commit("User is already a member of this workplace")
        logger.info(
            "user.workplace_added",
            user_id=str(user_id),
            workplace_id=str(workplace_id),
            role=role.name,
        )
        return membership

    def remove_from_workplace(self, user_id: uuid.UUID, workplace_id: uuid.UUID) -> None:
        user = self.get_user(user_id)
        membership = self.session.execute(
            select(WorkplaceMembership).where(
                WorkplaceMembership.user_id == user_id,
                WorkplaceMembership.workplace_id == workplace_id,
            )
        ).scalar_one_or_none()
        if membership is None:
            raise NotFoundError("User is not a member of this workplace")

        self.session.delete(membership)
        if user.current_workplace_id == workplace_id:
            user.current_workplace_id = None
        self._commit()
        logger.info(
            "user.workplace_removed", user_id=str(user_id), workplace_id=str(workplace_id)
        )

    # ========================================================================
    # 권한 체크가 포함된 멤버 관리 (API 경로)
    # ========================================================================

    def add_member(
        self,
        user_id: uuid.UUID,
        workplace_id: uuid.UUID,
        role_id: Optional[uuid.UUID],
        actor_id: uuid.UUID,
    ) -> WorkplaceMembership:
        """Add *user_id* on behalf of *actor_id*, who needs ``user.invite``."""
        roles = RoleService(self.session, self.settings)
        roles.require_member(actor_id, workplace_id)
        roles.require_permission(actor_id, workplace_id, "user.invite")
        if role_id is not None:
            role = self.session.get(Role, role_id)
            if role is None or role.workplace_id != workplace_id or not role.active:
                raise NotFoundError("Role not found")
            roles.check_owner_grant(role, actor_id, workplace_id)
        return self.add_to_workplace(user_id, workplace_id, role_id)

    def remove_member(
        self, user_id: uuid.UUID, workplace_id: uuid.UUID, actor_id: uuid.UUID
    ) -> None:
        """Members may leave; removing others needs ``user.delete``."""
        roles = RoleService(self.session, self.settings)
        if actor_id != user_id:
            roles.require_member(actor_id, workplace_id)
            roles.require_permission(actor_id, workplace_id, "user.delete")
            target = roles.get_user_role(user_id, workplace_id)
            if target is not None:
                roles.check_owner_grant(target, actor_id, workplace_id)
        self.remove_from_workplace(user_id, workplace_id)
