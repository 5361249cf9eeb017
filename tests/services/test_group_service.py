import pytest
from sqlalchemy import select

from conftest import make_user
from octonius import schemas
from octonius.errors import ConflictError, ForbiddenError, NotFoundError
from octonius.models import Group, Task
from octonius.schema.enums import GroupRole, MembershipStatus
from octonius.services import GroupService, PrivateGroupService, TaskService, UserService


@pytest.fixture()
def groups(session, settings) -> GroupService:
    return GroupService(session, settings)


@pytest.fixture()
def group(groups, owner, workplace):
    return groups.create_group(workplace.id, schemas.GroupCreateRequest(name="Design"), owner.id)


@pytest.fixture()
def colleague(session, settings, workplace):
    user = make_user(session, settings, "colleague@example.com", "Cole")
    UserService(session, settings).add_to_workplace(user.id, workplace.id)
    return user


def _add(groups, group, owner, user, role=GroupRole.MEMBER):
    return groups.add_member(
        group.id, schemas.GroupMemberAddRequest(user_id=user.id, role=role), owner.id
    )


def test_creator_is_group_admin(groups, group, owner):
    [membership] = groups.list_members(group.id, owner.id)

    assert membership.user_id == owner.id
    assert membership.role == GroupRole.ADMIN
    assert membership.can("can_edit_group")


def test_group_names_are_unique_per_workplace(groups, group, owner, workplace):
    with pytest.raises(ConflictError):
        groups.create_group(workplace.id, schemas.GroupCreateRequest(name="Design"), owner.id)

    other = groups.create_group(workplace.id, schemas.GroupCreateRequest(name="Ops"), owner.id)
    with pytest.raises(ConflictError):
        groups.update_group(other.id, schemas.GroupUpdateRequest(name="Design"), owner.id)


def test_search_groups_matches_case_insensitively(groups, group, owner, workplace):
    groups.create_group(workplace.id, schemas.GroupCreateRequest(name="Backend"), owner.id)

    assert [g.name for g in groups.search_groups(workplace.id, "DES", owner.id)] == ["Design"]


# ========================================================================
# 멤버
# ========================================================================


def test_add_member_twice_conflicts(groups, group, owner, colleague):
    _add(groups, group, owner, colleague)

    with pytest.raises(ConflictError):
        _add(groups, group, owner, colleague)


def test_removed_member_is_reactivated(groups, group, owner, colleague):
    first = _add(groups, group, owner, colleague)
    groups.remove_member(group.id, colleague.id, owner.id)
    assert first.status == MembershipStatus.INACTIVE
    assert [m.user_id for m in groups.list_members(group.id, owner.id)] == [owner.id]

    again = _add(groups, group, owner, colleague, role=GroupRole.VIEWER)

    assert again.id == first.id
    assert again.status == MembershipStatus.ACTIVE
    assert again.role == GroupRole.VIEWER


def test_add_member_requires_workplace_membership(session, settings, groups, group, owner):
    outsider = make_user(session, settings, "outsider@example.com")

    with pytest.raises(ValueError):
        _add(groups, group, owner, outsider)


def test_private_group_rejects_other_members(session, settings, groups, owner, workplace, colleague):
    private = PrivateGroupService(session, settings).get_private_group(owner.id, workplace.id)

    with pytest.raises(ValueError):
        _add(groups, private, owner, colleague)


def test_last_admin_cannot_be_removed(groups, group, owner, colleague):
    _add(groups, group, owner, colleague)

    with pytest.raises(ValueError):
        groups.remove_member(group.id, owner.id, owner.id)

    groups.remove_member(group.id, colleague.id, owner.id)
    with pytest.raises(NotFoundError):
        groups.remove_member(group.id, colleague.id, owner.id)


def test_member_can_leave_but_not_remove_others(session, settings, groups, group, owner, colleague):
    third = make_user(session, settings, "third@example.com")
    UserService(session, settings).add_to_workplace(third.id, group.workplace_id)
    _add(groups, group, owner, colleague)
    _add(groups, group, owner, third)

    with pytest.raises(ForbiddenError):
        groups.remove_member(group.id, third.id, colleague.id)

    groups.remove_member(group.id, colleague.id, colleague.id)
    with pytest.raises(ForbiddenError):
        groups.list_members(group.id, colleague.id)


def test_second_admin_allows_first_to_leave(groups, group, owner, colleague):
    _add(groups, group, owner, colleague, role=GroupRole.ADMIN)

    groups.remove_member(group.id, owner.id, owner.id)

    assert [m.user_id for m in groups.list_members(group.id, colleague.id)] == [colleague.id]


# ========================================================================
# 수정 / 삭제
# ========================================================================


def test_update_group_requires_edit_permission(groups, group, owner, colleague):
    _add(groups, group, owner, colleague)

    with pytest.raises(ForbiddenError):
        groups.update_group(group.id, schemas.GroupUpdateRequest(name="Mine"), colleague.id)

    updated = groups.update_group(
        group.id, schemas.GroupUpdateRequest(description="Brand and UI"), owner.id
    )
    assert updated.description == "Brand and UI"
    assert updated.name == "Design"


def test_delete_group_is_soft_and_admin_only(groups, group, owner, colleague, workplace):
    _add(groups, group, owner, colleague)

    with pytest.raises(ForbiddenError):
        groups.delete_group(group.id, colleague.id)

    deleted = groups.delete_group(group.id, owner.id)

    assert deleted.is_active is False
    with pytest.raises(NotFoundError):
        groups.get_group(group.id, owner.id)
    assert group.id not in {g.id for g in groups.list_groups(workplace.id, owner.id)}


def test_private_group_cannot_be_deleted(session, settings, groups, owner, workplace):
    private = PrivateGroupService(session, settings).get_private_group(owner.id, workplace.id)

    with pytest.raises(ValueError):
        groups.delete_group(private.id, owner.id)


def test_removing_group_row_removes_its_tasks(session, settings, group, owner):
    tasks = TaskService(session, settings)
    column = tasks.get_board(group.id, owner.id)[0]
    for title in ("a", "b"):
        tasks.create_task(
            group.id, schemas.TaskCreateRequest(title=title, column_id=column.id), owner.id
        )
    group_id = group.id

    session.delete(session.get(Group, group_id))
    session.commit()

    assert session.execute(select(Task).where(Task.group_id == group_id)).first() is None
