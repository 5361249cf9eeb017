"""Roles, permissions and RBAC checks scoped to a workplace."""

from __future__ import annotations

import uuid
from typing import Iterable, Optional

import structlog
from sqlalchemy import func, select

from .. import schemas
from ..errors import ConflictError, ForbiddenError, NotFoundError
from ..models import Permission, Role, RolePermission, WorkplaceMembership
from ..schema.enums import MembershipStatus
from .base import BaseService
from .permissions import DEFAULT_ROLES, PERMISSIONS, WILDCARD, grants

__all__ = ["RoleService"]

logger = structlog.get_logger(__name__)


class RoleService(BaseService):
    """Workplace role management."""

    # ========================================================================
    # 권한 카탈로그
    # ========================================================================

    def initialize_system_permissions(self, *, commit: bool = True) -> int:
        """Insert missing catalogue permissions; returns how many were created."""
        existing = set(self.session.execute(select(Permission.name)).scalars())
        created = 0
        for spec in PERMISSIONS:
            if spec.name in existing:
                continue
            self.session.add(
                Permission(
                    name=spec.name,
                    description=spec.description,
                    category=spec.category,
                    module=spec.module,
                    action=spec.action,
                    is_system=True,
                )
            )
            created += 1
        if created:
            self.session.flush()
            logger.info("permissions.seeded", created=created)
        if commit:
            self._commit()
        return created

    def _permissions_by_name(self) -> dict[str, Permission]:
        rows = list(
            self.session.execute(select(Permission).where(Permission.active.is_(True))).scalars()
        )
        if not rows:
            self.initialize_system_permissions(commit=False)
            rows = list(
                self.session.execute(
                    select(Permission).where(Permission.active.is_(True))
                ).scalars()
            )
        return {p.name: p for p in rows}

    def permission_catalog(self) -> dict[str, list[Permission]]:
        catalog: dict[str, list[Permission]] = {}
        for permission in sorted(self._permissions_by_name().values(), key=lambda p: p.name):
            catalog.setdefault(permission.category, []).append(permission)
        return catalog

    # ========================================================================
    # 역할 권한
    # ========================================================================

    def _set_role_permissions(
        self, role: Role, names: Iterable[str], granted_by: Optional[uuid.UUID]
    ) -> None:
        available = self._permissions_by_name()
        wanted = set(names)
        if WILDCARD in wanted:
            wanted = set(available)
        unknown = wanted - set(available)
        if unknown:
            raise ValueError(f"Unknown permissions: {', '.join(sorted(unknown))}")

        current = {grant.permission.name: grant for grant in role.grants}
        for name, grant in current.items():
            grant.active = name in wanted
            if grant.active:
                grant.granted_by = granted_by
        for name in wanted - set(current):
            role.grants.append(
                RolePermission(permission=available[name], granted_by=granted_by, active=True)
            )
        self.session.flush()

    def role_permissions(self, role: Role) -> list[str]:
        active = sorted(
            grant.permission.name
            for grant in role.grants
            if grant.active and grant.permission.active
        )
        total = self.session.execute(
            select(func.count(Permission.id)).where(Permission.active.is_(True))
        ).scalar_one()
        if total and len(active) == total:
            return [WILDCARD]
        return active

    def member_count(self, role: Role) -> int:
        return self.session.execute(
            select(func.count(WorkplaceMembership.id)).where(
                WorkplaceMembership.role_id == role.id,
                WorkplaceMembership.status == MembershipStatus.ACTIVE,
            )
        ).scalar_one()

    def to_response(self, role: Role) -> schemas.RoleResponse:
        response = schemas.RoleResponse.model_validate(role)
        response.permissions = self.role_permissions(role)
        response.member_count = self.member_count(role)
        return response

    # ========================================================================
    # 기본 역할
    # ========================================================================

    def create_default_roles(
        self, workplace_id: uuid.UUID, created_by: uuid.UUID
    ) -> dict[str, Role]:
        """Create owner/admin/member for a new workplace (flushes, no commit)."""
        roles: dict[str, Role] = {}
        for name, (description, permission_names) in DEFAULT_ROLES.items():
            role = Role(
                name=name,
                description=description,
                is_system=True,
                workplace_id=workplace_id,
            )
            self.session.add(role)
            self.session.flush()
            self._set_role_permissions(role, permission_names, created_by)
            roles[name] = role
        logger.info("roles.defaults_created", workplace_id=str(workplace_id))
        return roles

    def get_role_by_name(self, workplace_id: uuid.UUID, name: str) -> Optional[Role]:
        return self.session.execute(
            select(Role).where(
                Role.workplace_id == workplace_id,
                Role.name == name.lower(),
                Role.active.is_(True),
            )
        ).scalar_one_or_none()

    def get_workplace_roles(self, workplace_id: uuid.UUID) -> list[Role]:
        return list(
            self.session.execute(
                select(Role)
                .where(Role.workplace_id == workplace_id, Role.active.is_(True))
                .order_by(Role.is_system.desc(), Role.created_at)
            ).scalars()
        )

    # ========================================================================
    # 권한 체크
    # ========================================================================

    def get_membership(
        self, user_id: uuid.UUID, workplace_id: uuid.UUID
    ) -> Optional[WorkplaceMembership]:
        return self.session.execute(
            select(WorkplaceMembership).where(
                WorkplaceMembership.user_id == user_id,
                WorkplaceMembership.workplace_id == workplace_id,
                WorkplaceMembership.status == MembershipStatus.ACTIVE,
            )
        ).scalar_one_or_none()

    def require_member(self, user_id: uuid.UUID, workplace_id: uuid.UUID) -> WorkplaceMembership:
        membership = self.get_membership(user_id, workplace_id)
        if membership is None:
            raise ForbiddenError("You are not a member of this workplace")
        return membership

    def list_roles(self, workplace_id: uuid.UUID, user_id: uuid.UUID) -> list[Role]:
        self.require_member(user_id, workplace_id)
        return self.get_workplace_roles(workplace_id)

    def check_owner_grant(self, role: Role, user_id: uuid.UUID, workplace_id: uuid.UUID) -> None:
        """Only an owner may hand out the owner role."""
        if role.name != "owner":
            return
        granter = self.get_user_role(user_id, workplace_id)
        if granter is None or granter.name != "owner":
            raise ForbiddenError("Only an owner can grant the owner role")

    def get_user_role(self, user_id: uuid.UUID, workplace_id: uuid.UUID) -> Optional[Role]:
        membership = self.get_membership(user_id, workplace_id)
        return membership.role if membership else None

    def get_user_permissions(self, user_id: uuid.UUID, workplace_id: uuid.UUID) -> list[str]:
        role = self.get_user_role(user_id, workplace_id)
        if role is None or not role.active:
            return []
        return self.role_permissions(role)

    def check_user_permission(
        self, user_id: uuid.UUID, workplace_id: uuid.UUID, permission: str
    ) -> bool:
        return grants(self.get_user_permissions(user_id, workplace_id), permission)

    def require_permission(
        self, user_id: uuid.UUID, workplace_id: uuid.UUID, permission: str
    ) -> None:
        if not self.check_user_permission(user_id, workplace_id, permission):
            raise ForbiddenError(f"Requires {permission} permission")

    # ========================================================================
    # 역할 CRUD
    # ========================================================================

    def create_role(
        self,
        workplace_id: uuid.UUID,
        request: schemas.RoleCreateRequest,
        user_id: uuid.UUID,
    ) -> Role:
        self.require_permission(user_id, workplace_id, "role.create")
        name = request.name.strip().lower()
        existing = self.session.execute(
            select(Role).where(Role.workplace_id == workplace_id, Role.name == name)
        ).scalar_one_or_none()
        if existing is not None:
            raise ConflictError(f"Role '{name}' already exists")

        role = Role(
            name=name,
            description=request.description,
            is_system=False,
            workplace_id=workplace_id,
        )
        self.session.add(role)
        self.session.flush()
        try:
            self._set_role_permissions(role, request.permissions, user_id)
        except ValueError:
            self.session.rollback()
            raise
        self._commit(f"Role '{name}' already exists")
        logger.info("role.created", role_id=str(role.id), workplace_id=str(workplace_id))
        return role

    def get_role(self, role_id: uuid.UUID) -> Role:
        role = self.session.get(Role, role_id)
        if role is None or not role.active:
            raise NotFoundError("Role not found")
        return role

    def update_role(
        self, role_id: uuid.UUID, request: schemas.RoleUpdateRequest, user_id: uuid.UUID
    ) -> Role:
        role = self.get_role(role_id)
        self.require_permission(user_id, role.workplace_id, "role.update")
        if role.is_system:
            raise ForbiddenError("System roles cannot be modified")

        if request.name is not None:
            name = request.name.strip().lower()
            clash = self.session.execute(
                select(Role).where(
                    Role.workplace_id == role.workplace_id,
                    Role.name == name,
                    Role.id != role.id,
                )
            ).scalar_one_or_none()
            if clash is not None:
                raise ConflictError(f"Role '{name}' already exists")
            role.name = name
        if request.description is not None:
            role.description = request.description
        if request.permissions is not None:
            try:
                self._set_role_permissions(role, request.permissions, user_id)
            except ValueError:
                self.session.rollback()
                raise
        self._commit()
        logger.info("role.updated", role_id=str(role.id))
        return role

    def delete_role(self, role_id: uuid.UUID, user_id: uuid.UUID) -> None:
        role = self.get_role(role_id)
        self.require_permission(user_id, role.workplace_id, "role.delete")
        if role.is_system:
            raise ForbiddenError("System roles cannot be deleted")
        if self.member_count(role):
            raise ConflictError("Role is assigned to members")

        role.active = False
        for grant in role.grants:
            grant.active = False
        self._commit()
        logger.info("role.deleted", role_id=str(role.id))

    def assign_role(
        self,
        workplace_id: uuid.UUID,
        target_user_id: uuid.UUID,
        role_id: uuid.UUID,
        assigned_by: uuid.UUID,
    ) -> WorkplaceMembership:
        self.require_permission(assigned_by, workplace_id, "role.assign")
        role = self.get_role(role_id)
        if role.workplace_id != workplace_id:
            raise NotFoundError("Role not found")

        membership = self.get_membership(target_user_id, workplace_id)
        if membership is None:
            raise NotFoundError("User is not a member of this workplace")

        assigner_role = self.get_user_role(assigned_by, workplace_id)
        touches_owner = role.name == "owner" or membership.role.name == "owner"
        if touches_owner and (assigner_role is None or assigner_role.name != "owner"):
            raise ForbiddenError("Only an owner can change the owner role")

        membership.role_id = role.id
        self._commit()
        self.session.refresh(membership)
        logger.info(
            "role.assigned",
            workplace_id=str(workplace_id),
            user_id=str(target_user_id),
            role=role.name,
        )
        return membership
