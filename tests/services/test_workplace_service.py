import datetime as dt

import pytest

from conftest import CapturingMailer, make_user, make_workplace
from octonius import schemas
from octonius.errors import ConflictError, ForbiddenError, GoneError, ServiceUnavailableError
from octonius.models import WorkplaceInvitation, utcnow
from octonius.schema.enums import GroupType, InvitationStatus
from octonius.services import (
    AuthService,
    GroupService,
    PrivateGroupService,
    RoleService,
    UserService,
    WorkplaceService,
)
from octonius.services.permissions import grants


@pytest.fixture()
def workplaces(session, settings, mailer) -> WorkplaceService:
    return WorkplaceService(session, settings, mailer)


@pytest.fixture()
def roles(session, settings) -> RoleService:
    return RoleService(session, settings)


def test_grants_wildcard_and_module_manage():
    assert grants(["*"], "anything.at_all")
    assert grants(["task.manage"], "task.delete")
    assert grants(["task.view"], "task.view")
    assert not grants(["task.view"], "task.update")
    assert not grants(["group.manage"], "task.delete")


def test_create_workplace_bootstraps_roles_membership_and_private_group(
    session, settings, owner, workplace, roles
):
    assert {role.name for role in roles.get_workplace_roles(workplace.id)} == {
        "owner",
        "admin",
        "member",
    }
    assert roles.get_user_role(owner.id, workplace.id).name == "owner"
    assert roles.check_user_permission(owner.id, workplace.id, "role.delete")
    assert owner.current_workplace_id == workplace.id

    private = PrivateGroupService(session, settings).get_private_group(owner.id, workplace.id)
    assert private is not None
    assert private.type == GroupType.PRIVATE
    assert private.name == "Olive's Private Space"


def test_workplace_names_are_unique_case_insensitively(session, settings, owner, workplace):
    with pytest.raises(ConflictError):
        make_workplace(session, settings, owner, name="  acme ")


def test_member_role_cannot_create_roles(session, settings, workplace, roles):
    member = make_user(session, settings, "member@example.com")
    UserService(session, settings).add_to_workplace(member.id, workplace.id)

    assert roles.get_user_role(member.id, workplace.id).name == "member"
    with pytest.raises(ForbiddenError):
        roles.create_role(workplace.id, schemas.RoleCreateRequest(name="lead"), member.id)


def test_custom_role_lifecycle(session, settings, owner, workplace, roles):
    role = roles.create_role(
        workplace.id,
        schemas.RoleCreateRequest(name="Lead", permissions=["task.manage", "group.view"]),
        owner.id,
    )
    assert role.name == "lead"
    assert sorted(roles.role_permissions(role)) == ["group.view", "task.manage"]

    with pytest.raises(ValueError):
        roles.update_role(
            role.id, schemas.RoleUpdateRequest(permissions=["not.a_permission"]), owner.id
        )

    member = make_user(session, settings, "lead@example.com")
    UserService(session, settings).add_to_workplace(member.id, workplace.id, role.id)
    assert roles.check_user_permission(member.id, workplace.id, "task.delete")
    with pytest.raises(ConflictError):
        roles.delete_role(role.id, owner.id)


def test_system_roles_are_immutable(workplace, owner, roles):
    admin = roles.get_role_by_name(workplace.id, "admin")

    with pytest.raises(ForbiddenError):
        roles.update_role(admin.id, schemas.RoleUpdateRequest(description="x"), owner.id)
    with pytest.raises(ForbiddenError):
        roles.delete_role(admin.id, owner.id)


def test_only_owner_can_grant_owner_role(session, settings, owner, workplace, roles):
    admin_user = make_user(session, settings, "admin@example.com")
    target = make_user(session, settings, "target@example.com")
    users = UserService(session, settings)
    users.add_to_workplace(admin_user.id, workplace.id, roles.get_role_by_name(workplace.id, "admin").id)
    users.add_to_workplace(target.id, workplace.id)
    owner_role = roles.get_role_by_name(workplace.id, "owner")

    with pytest.raises(ForbiddenError):
        roles.assign_role(workplace.id, target.id, owner_role.id, admin_user.id)

    membership = roles.assign_role(workplace.id, target.id, owner_role.id, owner.id)
    assert membership.role.name == "owner"


def test_stats_counts_roles_and_groups(session, settings, owner, workplace, workplaces):
    users = UserService(session, settings)
    users.add_to_workplace(make_user(session, settings, "m1@example.com").id, workplace.id)
    users.add_to_workplace(make_user(session, settings, "m2@example.com").id, workplace.id)
    groups = GroupService(session, settings)
    groups.create_group(
        workplace.id,
        schemas.GroupCreateRequest(name="Town Hall", settings=schemas.GroupSettings(visibility="public")),
        owner.id,
    )
    groups.create_group(workplace.id, schemas.GroupCreateRequest(name="Backend"), owner.id)

    stats = workplaces.stats(workplace.id)

    assert stats.total_users == 3
    assert stats.total_admins == 1
    assert stats.total_members == 2
    assert stats.total_agoras == 1
    assert stats.total_work_groups == 2


def test_members_search_and_pagination(session, settings, owner, workplace, workplaces):
    users = UserService(session, settings)
    for name in ("alice", "bob", "carol"):
        users.add_to_workplace(make_user(session, settings, f"{name}@example.com").id, workplace.id)

    page = workplaces.members(workplace.id, owner.id, limit=2, offset=0)
    assert page.pagination.total == 4
    assert page.pagination.has_more is True
    assert len(page.data) == 2

    found = workplaces.members(workplace.id, owner.id, search="CAROL")
    assert [m.email for m in found.data] == ["carol@example.com"]


# ========================================================================
# 초대
# ========================================================================


def _invite(workplaces, workplace, owner, email="new@example.com"):
    return workplaces.create_invitation(
        workplace.id, schemas.InvitationCreateRequest(email=email, message="join us"), owner
    )


def test_invitation_sends_email_with_link(workplaces, workplace, owner, mailer, settings):
    invitation = _invite(workplaces, workplace, owner)

    assert invitation.status == InvitationStatus.PENDING
    assert len(invitation.token) == 64
    assert invitation.role.name == "member"
    sent = mailer.last("workplace_invitation")
    assert sent["to"] == "new@example.com"
    assert sent["data"]["invitation_link"] == (
        f"https://{settings.domain}/auths/accept-invitation?token={invitation.token}"
    )


def test_duplicate_pending_invitation_conflicts(workplaces, workplace, owner):
    _invite(workplaces, workplace, owner)

    with pytest.raises(ConflictError):
        _invite(workplaces, workplace, owner, email="NEW@example.com")
    with pytest.raises(ConflictError):
        _invite(workplaces, workplace, owner, email=owner.email)


def test_expired_invitation_is_gone(session, workplaces, workplace, owner):
    invitation = _invite(workplaces, workplace, owner)
    invitation.expires_at = utcnow() - dt.timedelta(minutes=1)
    session.commit()

    with pytest.raises(GoneError):
        workplaces.check_invitation(invitation.token)
    assert session.get(WorkplaceInvitation, invitation.id).status == InvitationStatus.EXPIRED


def test_cancelled_invitation_cannot_be_used(workplaces, workplace, owner):
    invitation = _invite(workplaces, workplace, owner)
    workplaces.cancel_invitation(invitation.id, owner.id)

    assert invitation.status == InvitationStatus.REJECTED
    with pytest.raises(ConflictError):
        workplaces.check_invitation(invitation.token)


class FailingInviteMailer(CapturingMailer):
    def send(self, template, to, data):
        if template == "workplace_invitation":
            raise ServiceUnavailableError("Email service is unavailable")
        return super().send(template, to, data)


def test_failed_invitation_email_stores_nothing(
    session, settings, mailer, workplaces, workplace, owner
):
    broken = WorkplaceService(session, settings, FailingInviteMailer(settings))

    with pytest.raises(ServiceUnavailableError):
        _invite(broken, workplace, owner)
    assert workplaces.list_invitations(workplace.id, owner.id) == []

    retried = _invite(workplaces, workplace, owner)
    assert retried.status == InvitationStatus.PENDING
    assert mailer.last("workplace_invitation")["to"] == "new@example.com"


def test_only_owner_can_invite_as_owner(session, settings, owner, workplace, workplaces, roles):
    admin_user = make_user(session, settings, "admin@example.com")
    UserService(session, settings).add_to_workplace(
        admin_user.id, workplace.id, roles.get_role_by_name(workplace.id, "admin").id
    )
    owner_role = roles.get_role_by_name(workplace.id, "owner")
    request = schemas.InvitationCreateRequest(email="boss@example.com", role_id=owner_role.id)

    with pytest.raises(ForbiddenError):
        workplaces.create_invitation(workplace.id, request, admin_user)
    assert workplaces.list_invitations(workplace.id, owner.id) == []

    invitation = workplaces.create_invitation(workplace.id, request, owner)
    assert invitation.role.name == "owner"


def test_accept_invitation_creates_member(session, settings, mailer, workplaces, workplace, owner):
    invitation = _invite(workplaces, workplace, owner)
    auth = AuthService(session, settings, mailer)

    result = auth.accept_invitation(
        schemas.InvitationAcceptRequest(token=invitation.token, email="new@example.com")
    )

    assert result.workplace_id == workplace.id
    assert result.needs_onboarding is True
    assert result.user.current_workplace_id == workplace.id
    assert RoleService(session, settings).get_user_role(result.user.id, workplace.id).name == "member"
    assert PrivateGroupService(session, settings).get_private_group(result.user.id, workplace.id)
    assert invitation.status == InvitationStatus.ACCEPTED
    assert auth.is_logged_in(result.user.id)


def test_accept_invitation_rejects_other_email(session, settings, mailer, workplaces, workplace, owner):
    invitation = _invite(workplaces, workplace, owner)

    with pytest.raises(ForbiddenError):
        AuthService(session, settings, mailer).accept_invitation(
            schemas.InvitationAcceptRequest(token=invitation.token, email="intruder@example.com")
        )
