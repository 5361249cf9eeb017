"""Workplaces, membership listings and email invitations."""

from __future__ import annotations

import datetime as dt
import secrets
import uuid
from typing import Optional

import structlog
from sqlalchemy import func, or_, select

from .. import schemas
from ..errors import (
    ConflictError,
    ForbiddenError,
    GoneError,
    NotFoundError,
    ServiceUnavailableError,
)
from ..models import (
    Group,
    Role,
    User,
    Workplace,
    WorkplaceInvitation,
    WorkplaceMembership,
    ensure_utc,
    utcnow,
)
from ..schema.enums import GroupType, InvitationStatus, MembershipStatus
from .base import BaseService
from .groups import PrivateGroupService
from .notifications import Mailer
from .roles import RoleService
from .users import normalize_email

__all__ = ["WorkplaceService"]

logger = structlog.get_logger(__name__)

ADMIN_ROLE_NAMES = ("owner", "admin")


class WorkplaceService(BaseService):
    """Workplace lifecycle, members and invitations."""

    def __init__(self, session, settings, mailer: Optional[Mailer] = None):
        super().__init__(session, settings)
        self.mailer = mailer or Mailer(settings)

    @property
    def roles(self) -> RoleService:
        return RoleService(self.session, self.settings)

    # ========================================================================
    # 조회
    # ========================================================================

    def get_workplace(self, workplace_id: uuid.UUID) -> Workplace:
        return self._get_or_404(Workplace, workplace_id, "Workplace")

    def list_workplaces(self) -> list[Workplace]:
        return list(
            self.session.execute(select(Workplace).order_by(Workplace.created_at.desc())).scalars()
        )

    def user_workplaces(self, user_id: uuid.UUID) -> list[schemas.UserWorkplaceResponse]:
        rows = self.session.execute(
            select(Workplace, WorkplaceMembership)
            .join(WorkplaceMembership, WorkplaceMembership.workplace_id == Workplace.id)
            .where(
                WorkplaceMembership.user_id == user_id,
                WorkplaceMembership.status == MembershipStatus.ACTIVE,
                Workplace.active.is_(True),
            )
            .order_by(WorkplaceMembership.joined_at)
        ).all()
        result = []
        for workplace, membership in rows:
            item = schemas.UserWorkplaceResponse.model_validate(workplace)
            item.role = membership.role.name if membership.role else None
            item.joined_at = membership.joined_at
            result.append(item)
        return result

    def workplace_users(self, workplace_id: uuid.UUID) -> list[User]:
        self.get_workplace(workplace_id)
        return list(
            self.session.execute(
                select(User)
                .join(WorkplaceMembership, WorkplaceMembership.user_id == User.id)
                .where(
                    WorkplaceMembership.workplace_id == workplace_id,
                    WorkplaceMembership.status == MembershipStatus.ACTIVE,
                )
                .order_by(User.created_at)
            ).scalars()
        )

    def _active_membership(
        self, user_id: uuid.UUID, workplace_id: uuid.UUID
    ) -> Optional[WorkplaceMembership]:
        return self.roles.get_membership(user_id, workplace_id)

    def select_workplace(self, user: User, workplace_id: uuid.UUID) -> schemas.SelectWorkplaceResponse:
        self.get_workplace(workplace_id)
        membership = self._active_membership(user.id, workplace_id)
        if membership is None:
            raise ForbiddenError("You are not a member of this workplace")
        user.current_workplace_id = workplace_id
        membership.last_active_at = utcnow()
        self._commit()
        logger.info("workplace.selected", user_id=str(user.id), workplace_id=str(workplace_id))
        return schemas.SelectWorkplaceResponse(user_id=user.id, workplace_id=workplace_id)

    # ========================================================================
    # 생성 / 설정
    # ========================================================================

    def _name_taken(self, name: str, exclude_id: Optional[uuid.UUID] = None) -> bool:
        stmt = select(Workplace.id).where(func.lower(Workplace.name) == name.lower())
        if exclude_id is not None:
            stmt = stmt.where(Workplace.id != exclude_id)
        return self.session.execute(stmt).first() is not None

    def create_workplace(
        self,
        request: schemas.WorkplaceCreateRequest,
        owner: User,
        *,
        commit: bool = True,
    ) -> Workplace:
        """Create a workplace with default roles, owner membership and private group."""
        name = request.name.strip()
        if not name:
            raise ValueError("Workplace name is required")
        if self._name_taken(name):
            raise ConflictError("A workplace with this name already exists")

        workplace = Workplace(
            name=name,
            description=request.description,
            logo_url=request.logo_url,
            created_by=owner.id,
        )
        self.session.add(workplace)
        self.session.flush()

        roles = self.roles.create_default_roles(workplace.id, owner.id)
        self.session.add(
            WorkplaceMembership(
                user_id=owner.id,
                workplace_id=workplace.id,
                role_id=roles["owner"].id,
                status=MembershipStatus.ACTIVE,
                last_active_at=utcnow(),
            )
        )
        self.session.flush()
        PrivateGroupService(self.session, self.settings).ensure_private_group(
            owner, workplace.id, commit=False
        )
        if owner.current_workplace_id is None:
            owner.current_workplace_id = workplace.id

        if commit:
            self._commit("A workplace with this name already exists")
        logger.info("workplace.created", workplace_id=str(workplace.id), owner=str(owner.id))
        return workplace

    def update_settings(
        self,
        workplace_id: uuid.UUID,
        request: schemas.WorkplaceSettingsRequest,
        user_id: uuid.UUID,
    ) -> Workplace:
        workplace = self.get_workplace(workplace_id)
        self.roles.require_permission(user_id, workplace_id, "workplace.update")

        changes = request.model_dump(exclude_unset=True, exclude_none=True)
        if "name" in changes:
            changes["name"] = changes["name"].strip()
            if self._name_taken(changes["name"], exclude_id=workplace.id):
                raise ConflictError("A workplace with this name already exists")
        for key, value in changes.items():
            setattr(workplace, key, value)
        self._commit("A workplace with this name already exists")
        logger.info("workplace.updated", workplace_id=str(workplace.id), fields=sorted(changes))
        return workplace

    # ========================================================================
    # 멤버 / 통계
    # ========================================================================

    def members(
        self,
        workplace_id: uuid.UUID,
        current_user_id: uuid.UUID,
        *,
        limit: int = 20,
        offset: int = 0,
        search: Optional[str] = None,
    ) -> schemas.WorkplaceMembersResponse:
        self.get_workplace(workplace_id)
        if self._active_membership(current_user_id, workplace_id) is None:
            raise ForbiddenError("You are not a member of this workplace")

        conditions = [
            WorkplaceMembership.workplace_id == workplace_id,
            WorkplaceMembership.status == MembershipStatus.ACTIVE,
        ]
        if search:
            pattern = f"%{search.strip().lower()}%"
            conditions.append(
                or_(
                    func.lower(User.first_name).like(pattern),
                    func.lower(User.last_name).like(pattern),
                    func.lower(User.email).like(pattern),
                )
            )

        total = self.session.execute(
            select(func.count(WorkplaceMembership.id))
            .join(User, User.id == WorkplaceMembership.user_id)
            .where(*conditions)
        ).scalar_one()
        rows = self.session.execute(
            select(WorkplaceMembership, User)
            .join(User, User.id == WorkplaceMembership.user_id)
            .where(*conditions)
            .order_by(WorkplaceMembership.joined_at)
            .limit(limit)
            .offset(offset)
        ).all()

        data = [
            schemas.WorkplaceMember(
                user_id=user.id,
                first_name=user.first_name,
                last_name=user.last_name,
                email=user.email,
                avatar_url=user.avatar_url,
                role=membership.role.name if membership.role else None,
                status=membership.status,
                joined_at=membership.joined_at,
                is_current_user=user.id == current_user_id,
            )
            for membership, user in rows
        ]
        return schemas.WorkplaceMembersResponse(
            data=data,
            pagination=schemas.Pagination(
                total=total, limit=limit, offset=offset, has_more=offset + len(data) < total
            ),
        )

    def stats(self, workplace_id: uuid.UUID) -> schemas.WorkplaceStats:
        self.get_workplace(workplace_id)
        role_names = list(
            self.session.execute(
                select(Role.name)
                .join(WorkplaceMembership, WorkplaceMembership.role_id == Role.id)
                .where(
                    WorkplaceMembership.workplace_id == workplace_id,
                    WorkplaceMembership.status == MembershipStatus.ACTIVE,
                )
            ).scalars()
        )
        groups = list(
            self.session.execute(
                select(Group).where(
                    Group.workplace_id == workplace_id, Group.is_active.is_(True)
                )
            ).scalars()
        )
        return schemas.WorkplaceStats(
            total_users=len(role_names),
            total_admins=sum(1 for name in role_names if name in ADMIN_ROLE_NAMES),
            total_members=sum(1 for name in role_names if name == "member"),
            total_agoras=sum(
                1 for g in groups if (g.settings or {}).get("visibility") == "public"
            ),
            total_work_groups=sum(1 for g in groups if g.type == GroupType.REGULAR),
        )

    # ========================================================================
    # 초대
    # ========================================================================

    def invitation_link(self, token: str) -> str:
        return f"https://{self.settings.domain}/auths/accept-invitation?token={token}"

    def create_invitation(
        self,
        workplace_id: uuid.UUID,
        request: schemas.InvitationCreateRequest,
        inviter: User,
    ) -> WorkplaceInvitation:
        workplace = self.get_workplace(workplace_id)
        if self._active_membership(inviter.id, workplace_id) is None:
            raise ForbiddenError("You are not a member of this workplace")
        self.roles.require_permission(inviter.id, workplace_id, "user.invite")

        email = normalize_email(request.email)
        already_member = self.session.execute(
            select(WorkplaceMembership.id)
            .join(User, User.id == WorkplaceMembership.user_id)
            .where(
                User.email == email,
                WorkplaceMembership.workplace_id == workplace_id,
                WorkplaceMembership.status == MembershipStatus.ACTIVE,
            )
        ).first()
        if already_member is not None:
            raise ConflictError("User is already a member of this workplace")

        self._expire_stale(workplace_id)
        pending = self.session.execute(
            select(WorkplaceInvitation.id).where(
                WorkplaceInvitation.workplace_id == workplace_id,
                WorkplaceInvitation.email == email,
                WorkplaceInvitation.status == InvitationStatus.PENDING,
            )
        ).first()
        if pending is not None:
            raise ConflictError("An invitation is already pending for this email")

        if request.role_id is not None:
            role = self.roles.get_role(request.role_id)
            if role.workplace_id != workplace_id:
                raise NotFoundError("Role not found")
            self.roles.check_owner_grant(role, inviter.id, workplace_id)
        else:
            role = self.roles.get_role_by_name(workplace_id, "member")

        invitation = WorkplaceInvitation(
            email=email,
            workplace_id=workplace_id,
            invited_by=inviter.id,
            role_id=role.id if role else None,
            status=InvitationStatus.PENDING,
            token=secrets.token_hex(32),
            message=request.message,
            expires_at=utcnow() + dt.timedelta(days=self.settings.invitation_ttl_days),
        )
        self.session.add(invitation)
        self.session.flush()

        # nothing is stored unless the email went out
        try:
            self.mailer.send(
                "workplace_invitation",
                email,
                {
                    "workplace_name": workplace.name,
                    "inviter_name": inviter.display_name,
                    "invitation_link": self.invitation_link(invitation.token),
                    "message": request.message,
                },
            )
        except ServiceUnavailableError:
            self.session.rollback()
            raise
        self._commit()
        logger.info(
            "invitation.created",
            invitation_id=str(invitation.id),
            workplace_id=str(workplace_id),
            email=email,
        )
        return invitation

    def _expire_stale(self, workplace_id: Optional[uuid.UUID] = None) -> int:
        now = utcnow()
        stmt = select(WorkplaceInvitation).where(
            WorkplaceInvitation.status == InvitationStatus.PENDING
        )
        if workplace_id is not None:
            stmt = stmt.where(WorkplaceInvitation.workplace_id == workplace_id)
        expired = 0
        for invitation in self.session.execute(stmt).scalars():
            if ensure_utc(invitation.expires_at) <= now:
                invitation.status = InvitationStatus.EXPIRED
                expired += 1
        if expired:
            self.session.flush()
        return expired

    def list_invitations(
        self,
        workplace_id: uuid.UUID,
        user_id: uuid.UUID,
        status: Optional[InvitationStatus] = None,
    ) -> list[WorkplaceInvitation]:
        self.get_workplace(workplace_id)
        if self._active_membership(user_id, workplace_id) is None:
            raise ForbiddenError("You are not a member of this workplace")
        if self._expire_stale(workplace_id):
            self._commit()

        stmt = select(WorkplaceInvitation).where(
            WorkplaceInvitation.workplace_id == workplace_id
        )
        if status is not None:
            stmt = stmt.where(WorkplaceInvitation.status == status)
        return list(
            self.session.execute(stmt.order_by(WorkplaceInvitation.created_at.desc())).scalars()
        )

    def cancel_invitation(self, invitation_id: uuid.UUID, user_id: uuid.UUID) -> WorkplaceInvitation:
        invitation = self._get_or_404(WorkplaceInvitation, invitation_id, "Invitation")
        role = self.roles.get_user_role(user_id, invitation.workplace_id)
        is_admin = role is not None and role.name in ADMIN_ROLE_NAMES
        if not is_admin and invitation.invited_by != user_id:
            raise ForbiddenError("Only workplace admins or the inviter can cancel this invitation")
        if invitation.status != InvitationStatus.PENDING:
            raise ConflictError(f"Invitation is already {invitation.status.value}")

        invitation.status = InvitationStatus.REJECTED
        invitation.rejected_at = utcnow()
        self._commit()
        logger.info("invitation.cancelled", invitation_id=str(invitation.id), by=str(user_id))
        return invitation

    def get_invitation_by_token(self, token: str) -> WorkplaceInvitation:
        invitation = self.session.execute(
            select(WorkplaceInvitation).where(WorkplaceInvitation.token == token)
        ).scalar_one_or_none()
        if invitation is None:
            raise NotFoundError("Invitation not found")
        return invitation

    def check_invitation(self, token: str) -> WorkplaceInvitation:
        """Return a usable pending invitation.

        Raises:
            NotFoundError: unknown token.
            GoneError: the invitation expired (its status is updated).
            ConflictError: the invitation was already used or cancelled.
        """
        invitation = self.get_invitation_by_token(token)
        if invitation.status == InvitationStatus.EXPIRED or (
            invitation.status == InvitationStatus.PENDING
            and ensure_utc(invitation.expires_at) <= utcnow()
        ):
            if invitation.status != InvitationStatus.EXPIRED:
                invitation.status = InvitationStatus.EXPIRED
                self._commit()
            raise GoneError("Invitation has expired")
        if invitation.status != InvitationStatus.PENDING:
            raise ConflictError(f"Invitation is already {invitation.status.value}")
        return invitation

    def verify_invitation(self, token: str) -> schemas.InvitationVerifyResponse:
        invitation = self.check_invitation(token)
        return schemas.InvitationVerifyResponse(
            email=invitation.email,
            status=invitation.status,
            expires_at=invitation.expires_at,
            workplace=schemas.WorkplaceResponse.model_validate(invitation.workplace),
            inviter=schemas.UserSummary.model_validate(invitation.inviter),
            role=invitation.role.name if invitation.role else None,
            message=invitation.message,
        )
