import uuid

import pytest

from conftest import make_user
from octonius import schemas
from octonius.errors import ForbiddenError, NotFoundError
from octonius.schema.enums import GroupRole, TaskStatus
from octonius.services import GroupService, TaskService, UserService


@pytest.fixture()
def group(session, settings, owner, workplace):
    return GroupService(session, settings).create_group(
        workplace.id, schemas.GroupCreateRequest(name="Design"), owner.id
    )


@pytest.fixture()
def tasks(session, settings) -> TaskService:
    return TaskService(session, settings)


def _columns(tasks, group, owner):
    return {column.name: column for column in tasks.get_board(group.id, owner.id)}


def _create(tasks, group, owner, column, title, **kwargs):
    return tasks.create_task(
        group.id,
        schemas.TaskCreateRequest(title=title, column_id=column.id, **kwargs),
        owner.id,
    )


def _positions(tasks, group, owner, column_name):
    column = _columns(tasks, group, owner)[column_name]
    return [(task.title, task.position) for task in column.tasks]


def test_new_group_gets_default_columns(tasks, group, owner):
    board = tasks.get_board(group.id, owner.id)

    assert [(c.name, c.position, c.is_default) for c in board] == [
        ("To Do", 1, True),
        ("In Progress", 2, True),
        ("Done", 3, True),
    ]


def test_tasks_are_appended_to_column(tasks, group, owner):
    todo = _columns(tasks, group, owner)["To Do"]
    for title in ("a", "b", "c"):
        _create(tasks, group, owner, todo, title)

    assert _positions(tasks, group, owner, "To Do") == [("a", 1), ("b", 2), ("c", 3)]


def test_move_task_across_columns_closes_and_opens_gaps(tasks, session, group, owner):
    columns = _columns(tasks, group, owner)
    todo, doing = columns["To Do"], columns["In Progress"]
    a = _create(tasks, group, owner, todo, "a")
    _create(tasks, group, owner, todo, "b")
    _create(tasks, group, owner, todo, "c")
    _create(tasks, group, owner, doing, "x")
    _create(tasks, group, owner, doing, "y")

    moved = tasks.move_task(
        group.id, a.id, schemas.TaskMoveRequest(column_id=doing.id, position=2), owner.id
    )

    assert moved.column_id == doing.id
    assert moved.position == 2
    session.expire_all()
    assert _positions(tasks, group, owner, "To Do") == [("b", 1), ("c", 2)]
    assert _positions(tasks, group, owner, "In Progress") == [("x", 1), ("a", 2), ("y", 3)]


def test_move_task_within_column(tasks, session, group, owner):
    todo = _columns(tasks, group, owner)["To Do"]
    _create(tasks, group, owner, todo, "a")
    _create(tasks, group, owner, todo, "b")
    c = _create(tasks, group, owner, todo, "c")

    tasks.move_task(group.id, c.id, schemas.TaskMoveRequest(column_id=todo.id, position=1), owner.id)

    session.expire_all()
    assert _positions(tasks, group, owner, "To Do") == [("c", 1), ("a", 2), ("b", 3)]


def test_move_position_past_end_is_clamped(tasks, group, owner):
    columns = _columns(tasks, group, owner)
    a = _create(tasks, group, owner, columns["To Do"], "a")
    _create(tasks, group, owner, columns["Done"], "z")

    moved = tasks.move_task(
        group.id, a.id, schemas.TaskMoveRequest(column_id=columns["Done"].id, position=50), owner.id
    )

    assert moved.position == 2


def test_delete_task_shifts_followers(tasks, session, group, owner):
    todo = _columns(tasks, group, owner)["To Do"]
    _create(tasks, group, owner, todo, "a")
    b = _create(tasks, group, owner, todo, "b")
    _create(tasks, group, owner, todo, "c")

    tasks.delete_task(group.id, b.id, owner.id)

    session.expire_all()
    assert _positions(tasks, group, owner, "To Do") == [("a", 1), ("c", 2)]


def test_column_insert_and_delete_keep_positions_contiguous(tasks, session, group, owner):
    review = tasks.create_column(
        group.id, schemas.ColumnCreateRequest(name="Review", position=2), owner.id
    )
    session.expire_all()
    assert [(c.name, c.position) for c in tasks.get_board(group.id, owner.id)] == [
        ("To Do", 1),
        ("Review", 2),
        ("In Progress", 3),
        ("Done", 4),
    ]

    tasks.delete_column(group.id, review.id, owner.id)

    assert [c.position for c in tasks.get_board(group.id, owner.id)] == [1, 2, 3]


def test_default_or_nonempty_columns_cannot_be_deleted(tasks, group, owner):
    columns = _columns(tasks, group, owner)
    with pytest.raises(ValueError):
        tasks.delete_column(group.id, columns["To Do"].id, owner.id)

    extra = tasks.create_column(group.id, schemas.ColumnCreateRequest(name="Extra"), owner.id)
    _create(tasks, group, owner, extra, "busy")
    with pytest.raises(ValueError):
        tasks.delete_column(group.id, extra.id, owner.id)


def test_done_status_stamps_completion(tasks, group, owner):
    todo = _columns(tasks, group, owner)["To Do"]
    task = _create(tasks, group, owner, todo, "ship it")

    done = tasks.update_task(
        group.id, task.id, schemas.TaskUpdateRequest(status=TaskStatus.DONE), owner.id
    )
    assert done.completed_at is not None
    assert done.completed_by == owner.id

    reopened = tasks.update_task(
        group.id, task.id, schemas.TaskUpdateRequest(status=TaskStatus.IN_PROGRESS), owner.id
    )
    assert reopened.completed_at is None
    assert reopened.completed_by is None


def test_update_merges_metadata(tasks, group, owner):
    todo = _columns(tasks, group, owner)["To Do"]
    task = _create(tasks, group, owner, todo, "meta", metadata={"estimated_hours": 3})

    updated = tasks.update_task(
        group.id, task.id, schemas.TaskUpdateRequest(metadata={"story_points": 5}), owner.id
    )

    assert updated.meta == {"estimated_hours": 3, "story_points": 5}


def test_assignees_must_be_group_members(tasks, session, settings, group, owner, workplace):
    todo = _columns(tasks, group, owner)["To Do"]
    outsider = make_user(session, settings, "outsider@example.com")

    with pytest.raises(ValueError):
        _create(tasks, group, owner, todo, "nope", assignee_ids=[outsider.id])

    UserService(session, settings).add_to_workplace(outsider.id, workplace.id)
    GroupService(session, settings).add_member(
        group.id, schemas.GroupMemberAddRequest(user_id=outsider.id, role=GroupRole.MEMBER), owner.id
    )
    task = _create(tasks, group, owner, todo, "yes", assignee_ids=[outsider.id, owner.id])
    assert {a.user_id for a in task.assignees} == {outsider.id, owner.id}

    task = tasks.set_assignees(
        group.id, task.id, schemas.AssigneesRequest(user_ids=[owner.id]), owner.id
    )
    assert [a.user_id for a in task.assignees] == [owner.id]


def test_time_entries_accumulate_actual_hours(tasks, group, owner):
    todo = _columns(tasks, group, owner)["To Do"]
    task = _create(tasks, group, owner, todo, "timed")

    tasks.add_time_entry(group.id, task.id, schemas.TimeEntryRequest(hours=1.5), owner.id)
    task = tasks.add_time_entry(
        group.id, task.id, schemas.TimeEntryRequest(hours=2.25, description="review"), owner.id
    )

    assert task.meta["actual_hours"] == 3.75
    assert len(task.meta["time_entries"]) == 2
    assert task.meta["time_entries"][1]["description"] == "review"


def test_comments_are_author_only(tasks, session, settings, group, owner, workplace):
    todo = _columns(tasks, group, owner)["To Do"]
    task = _create(tasks, group, owner, todo, "discuss")
    comment = tasks.create_comment(group.id, task.id, schemas.CommentRequest(content="hi"), owner.id)

    peer = make_user(session, settings, "peer@example.com")
    UserService(session, settings).add_to_workplace(peer.id, workplace.id)
    GroupService(session, settings).add_member(
        group.id, schemas.GroupMemberAddRequest(user_id=peer.id), owner.id
    )

    with pytest.raises(ForbiddenError):
        tasks.update_comment(
            group.id, task.id, comment.id, schemas.CommentRequest(content="hijack"), peer.id
        )
    tasks.delete_comment(group.id, task.id, comment.id, owner.id)
    assert tasks.list_comments(group.id, task.id, owner.id) == []


def test_non_members_cannot_read_board(tasks, session, settings, group):
    stranger = make_user(session, settings, "stranger@example.com")

    with pytest.raises(ForbiddenError):
        tasks.get_board(group.id, stranger.id)
    with pytest.raises(NotFoundError):
        tasks.get_board(uuid.uuid4(), stranger.id)
