"""Group task board: columns, tasks, comments, assignees and time entries."""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, status

from ... import schemas
from ...models import User
from ...services import TaskService
from ..deps import get_task_service, ok, require_logged_in

router = APIRouter(prefix="/v1/groups/{group_id}/tasks", tags=["tasks"])


def _task(task) -> schemas.TaskResponse:
    return schemas.TaskResponse.model_validate(task)


@router.get("/board", response_model=schemas.Envelope[schemas.BoardResponse])
def board(
    group_id: uuid.UUID,
    tasks: TaskService = Depends(get_task_service),
    user: User = Depends(require_logged_in),
):
    columns = tasks.get_board(group_id, user.id)
    return ok(tasks.board_response(group_id, columns))


@router.get("/members", response_model=schemas.Envelope[list[schemas.GroupMemberResponse]])
def members(
    group_id: uuid.UUID,
    tasks: TaskService = Depends(get_task_service),
    user: User = Depends(require_logged_in),
):
    return ok(
        [schemas.GroupMemberResponse.model_validate(m) for m in tasks.list_members(group_id, user.id)]
    )


# ========================================================================
# 컬럼
# ========================================================================


@router.post(
    "/columns",
    response_model=schemas.Envelope[schemas.ColumnResponse],
    status_code=status.HTTP_201_CREATED,
)
def create_column(
    group_id: uuid.UUID,
    request: schemas.ColumnCreateRequest,
    tasks: TaskService = Depends(get_task_service),
    user: User = Depends(require_logged_in),
):
    column = tasks.create_column(group_id, request, user.id)
    return ok(schemas.ColumnResponse.model_validate(column), "Column created")


@router.put("/columns/{column_id}", response_model=schemas.Envelope[schemas.ColumnResponse])
def update_column(
    group_id: uuid.UUID,
    column_id: uuid.UUID,
    request: schemas.ColumnUpdateRequest,
    tasks: TaskService = Depends(get_task_service),
    user: User = Depends(require_logged_in),
):
    column = tasks.update_column(group_id, column_id, request, user.id)
    return ok(schemas.ColumnResponse.model_validate(column), "Column updated")


@router.delete("/columns/{column_id}", response_model=schemas.Envelope[None])
def delete_column(
    group_id: uuid.UUID,
    column_id: uuid.UUID,
    tasks: TaskService = Depends(get_task_service),
    user: User = Depends(require_logged_in),
):
    tasks.delete_column(group_id, column_id, user.id)
    return ok(None, "Column deleted")


# ========================================================================
# 태스크
# ========================================================================


@router.post(
    "/",
    response_model=schemas.Envelope[schemas.TaskResponse],
    status_code=status.HTTP_201_CREATED,
)
def create_task(
    group_id: uuid.UUID,
    request: schemas.TaskCreateRequest,
    tasks: TaskService = Depends(get_task_service),
    user: User = Depends(require_logged_in),
):
    return ok(_task(tasks.create_task(group_id, request, user.id)), "Task created")


@router.get("/{task_id}", response_model=schemas.Envelope[schemas.TaskResponse])
def get_task(
    group_id: uuid.UUID,
    task_id: uuid.UUID,
    tasks: TaskService = Depends(get_task_service),
    user: User = Depends(require_logged_in),
):
    return ok(_task(tasks.get_task(group_id, task_id, user.id)))


@router.put("/{task_id}", response_model=schemas.Envelope[schemas.TaskResponse])
def update_task(
    group_id: uuid.UUID,
    task_id: uuid.UUID,
    request: schemas.TaskUpdateRequest,
    tasks: TaskService = Depends(get_task_service),
    user: User = Depends(require_logged_in),
):
    return ok(_task(tasks.update_task(group_id, task_id, request, user.id)), "Task updated")


@router.delete("/{task_id}", response_model=schemas.Envelope[None])
def delete_task(
    group_id: uuid.UUID,
    task_id: uuid.UUID,
    tasks: TaskService = Depends(get_task_service),
    user: User = Depends(require_logged_in),
):
    tasks.delete_task(group_id, task_id, user.id)
    return ok(None, "Task deleted")


@router.post("/{task_id}/move", response_model=schemas.Envelope[schemas.TaskResponse])
def move_task(
    group_id: uuid.UUID,
    task_id: uuid.UUID,
    request: schemas.TaskMoveRequest,
    tasks: TaskService = Depends(get_task_service),
    user: User = Depends(require_logged_in),
):
    return ok(_task(tasks.move_task(group_id, task_id, request, user.id)), "Task moved")


# ========================================================================
# 댓글
# ========================================================================


@router.get(
    "/{task_id}/comments",
    response_model=schemas.Envelope[list[schemas.CommentResponse]],
)
def list_comments(
    group_id: uuid.UUID,
    task_id: uuid.UUID,
    tasks: TaskService = Depends(get_task_service),
    user: User = Depends(require_logged_in),
):
    comments = tasks.list_comments(group_id, task_id, user.id)
    return ok([schemas.CommentResponse.model_validate(c) for c in comments])


@router.post(
    "/{task_id}/comments",
    response_model=schemas.Envelope[schemas.CommentResponse],
    status_code=status.HTTP_201_CREATED,
)
def create_comment(
    group_id: uuid.UUID,
    task_id: uuid.UUID,
    request: schemas.CommentRequest,
    tasks: TaskService = Depends(get_task_service),
    user: User = Depends(require_logged_in),
):
    comment = tasks.create_comment(group_id, task_id, request, user.id)
    return ok(schemas.CommentResponse.model_validate(comment), "Comment added")


@router.put(
    "/{task_id}/comments/{comment_id}",
    response_model=schemas.Envelope[schemas.CommentResponse],
)
def update_comment(
    group_id: uuid.UUID,
    task_id: uuid.UUID,
    comment_id: uuid.UUID,
    request: schemas.CommentRequest,
    tasks: TaskService = Depends(get_task_service),
    user: User = Depends(require_logged_in),
):
    comment = tasks.update_comment(group_id, task_id, comment_id, request, user.id)
    return ok(schemas.CommentResponse.model_validate(comment), "Comment updated")


@router.delete("/{task_id}/comments/{comment_id}", response_model=schemas.Envelope[None])
def delete_comment(
    group_id: uuid.UUID,
    task_id: uuid.UUID,
    comment_id: uuid.UUID,
    tasks: TaskService = Depends(get_task_service),
    user: User = Depends(require_logged_in),
):
    tasks.delete_comment(group_id, task_id, comment_id, user.id)
    return ok(None, "Comment deleted")


# ========================================================================
# 시간 기록 / 담당자 / 커스텀 필드
# ========================================================================


@router.post(
    "/{task_id}/time-entries",
    response_model=schemas.Envelope[schemas.TaskResponse],
    status_code=status.HTTP_201_CREATED,
)
def add_time_entry(
    group_id: uuid.UUID,
    task_id: uuid.UUID,
    request: schemas.TimeEntryRequest,
    tasks: TaskService = Depends(get_task_service),
    user: User = Depends(require_logged_in),
):
    return ok(_task(tasks.add_time_entry(group_id, task_id, request, user.id)), "Time logged")


@router.post("/{task_id}/assignees", response_model=schemas.Envelope[schemas.TaskResponse])
def set_assignees(
    group_id: uuid.UUID,
    task_id: uuid.UUID,
    request: schemas.AssigneesRequest,
    tasks: TaskService = Depends(get_task_service),
    user: User = Depends(require_logged_in),
):
    return ok(_task(tasks.set_assignees(group_id, task_id, request, user.id)), "Assignees updated")


@router.put(
    "/{task_id}/custom-fields",
    response_model=schemas.Envelope[list[schemas.TaskFieldResponse]],
)
def set_custom_fields(
    group_id: uuid.UUID,
    task_id: uuid.UUID,
    request: schemas.TaskFieldsMapRequest,
    tasks: TaskService = Depends(get_task_service),
    user: User = Depends(require_logged_in),
):
    task = tasks.set_custom_field_values(group_id, task_id, request.custom_fields, user.id)
    return ok(
        [schemas.TaskFieldResponse.model_validate(f) for f in task.custom_fields],
        "Custom fields updated",
    )
