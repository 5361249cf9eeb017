import pytest

from conftest import make_user, make_workplace
from octonius import schemas
from octonius.errors import ConflictError, ForbiddenError, NotFoundError
from octonius.services import PrivateGroupService, RoleService, UserService


@pytest.fixture()
def users(session, settings) -> UserService:
    return UserService(session, settings)


@pytest.fixture()
def roles(session, settings) -> RoleService:
    return RoleService(session, settings)


@pytest.fixture()
def admin(session, settings, users, roles, workplace):
    user = make_user(session, settings, "admin@example.com", "Ada")
    users.add_to_workplace(user.id, workplace.id, roles.get_role_by_name(workplace.id, "admin").id)
    return user


def test_emails_are_normalised_and_unique(session, settings, users, owner):
    assert users.get_user_by_email("  OWNER@Example.com ").id == owner.id

    with pytest.raises(ConflictError):
        make_user(session, settings, "Owner@example.com")
    with pytest.raises(NotFoundError):
        users.get_user_by_email("nobody@example.com")


def test_page_counts_and_searches(session, settings, users, owner):
    make_user(session, settings, "alice@example.com", "Alice")
    make_user(session, settings, "bob@example.com", "Bob")
    make_user(session, settings, "carol@example.com", "Carol")

    first = users.page(page=1, limit=3)
    assert (first.total, first.pages, first.has_more, len(first.items)) == (4, 2, True, 3)
    second = users.page(page=2, limit=3)
    assert (second.has_more, len(second.items)) == (False, 1)

    found = users.page(search="CAR")
    assert [u.email for u in found.items] == ["carol@example.com"]
    assert found.total == 1


def test_update_user_is_limited_to_self(session, settings, users, owner):
    other = make_user(session, settings, "other@example.com")
    request = schemas.UserUpdateRequest(job_title="CEO")

    with pytest.raises(ForbiddenError):
        users.update_user(owner.id, request, actor_id=other.id)
    with pytest.raises(ForbiddenError):
        users.delete_user(owner.id, actor_id=other.id)

    assert users.update_user(owner.id, request, actor_id=owner.id).job_title == "CEO"


def test_owner_role_reports_wildcard(roles, workplace, owner):
    assert roles.role_permissions(roles.get_user_role(owner.id, workplace.id)) == ["*"]
    assert "*" not in roles.role_permissions(roles.get_role_by_name(workplace.id, "member"))


# ========================================================================
# 워크플레이스 멤버십
# ========================================================================


def test_add_to_workplace_defaults_to_member(session, settings, users, roles, workplace):
    user = make_user(session, settings, "new@example.com", "Nia")

    membership = users.add_to_workplace(user.id, workplace.id)

    assert membership.role.name == "member"
    assert PrivateGroupService(session, settings).get_private_group(user.id, workplace.id)
    with pytest.raises(ConflictError):
        users.add_to_workplace(user.id, workplace.id)


def test_add_to_workplace_rejects_foreign_role(session, settings, users, roles, owner, workplace):
    other = make_user(session, settings, "other@example.com")
    elsewhere = make_workplace(session, settings, other, name="Elsewhere")
    admin_here = roles.get_role_by_name(workplace.id, "admin")

    with pytest.raises(NotFoundError):
        users.add_to_workplace(owner.id, elsewhere.id, admin_here.id)
    assert roles.get_user_role(owner.id, elsewhere.id) is None


def test_remove_from_workplace_clears_current_workplace(users, roles, owner, workplace):
    assert owner.current_workplace_id == workplace.id

    users.remove_from_workplace(owner.id, workplace.id)

    assert owner.current_workplace_id is None
    assert roles.get_user_role(owner.id, workplace.id) is None
    with pytest.raises(NotFoundError):
        users.remove_from_workplace(owner.id, workplace.id)


# ========================================================================
# 권한 체크가 포함된 멤버 관리
# ========================================================================


def test_add_member_needs_invite_permission(session, settings, users, roles, owner, workplace):
    member = make_user(session, settings, "member@example.com")
    users.add_to_workplace(member.id, workplace.id)
    newcomer = make_user(session, settings, "newcomer@example.com")
    outsider = make_user(session, settings, "outsider@example.com")

    with pytest.raises(ForbiddenError):
        users.add_member(newcomer.id, workplace.id, None, member.id)
    with pytest.raises(ForbiddenError):
        users.add_member(outsider.id, workplace.id, None, outsider.id)

    membership = users.add_member(newcomer.id, workplace.id, None, owner.id)
    assert membership.role.name == "member"


def test_only_owner_can_add_owners(session, settings, users, roles, owner, admin, workplace):
    newcomer = make_user(session, settings, "newcomer@example.com")
    owner_role = roles.get_role_by_name(workplace.id, "owner")

    with pytest.raises(ForbiddenError):
        users.add_member(newcomer.id, workplace.id, owner_role.id, admin.id)
    assert roles.get_user_role(newcomer.id, workplace.id) is None

    users.add_member(newcomer.id, workplace.id, owner_role.id, owner.id)
    assert roles.get_user_role(newcomer.id, workplace.id).name == "owner"


def test_remove_member_rules(session, settings, users, roles, owner, admin, workplace):
    member = make_user(session, settings, "member@example.com")
    users.add_to_workplace(member.id, workplace.id)

    with pytest.raises(ForbiddenError):
        users.remove_member(admin.id, workplace.id, member.id)
    with pytest.raises(ForbiddenError):
        users.remove_member(owner.id, workplace.id, admin.id)

    users.remove_member(member.id, workplace.id, member.id)
    assert roles.get_user_role(member.id, workplace.id) is None

    users.remove_member(admin.id, workplace.id, owner.id)
    assert roles.get_user_role(admin.id, workplace.id) is None
