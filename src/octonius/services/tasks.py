"""Task board: columns, task ordering, comments, assignees and time entries."""

from __future__ import annotations

import uuid
from typing import Optional

import structlog
from sqlalchemy import func, select, update

from .. import schemas
from ..errors import ForbiddenError, NotFoundError
from ..models import (
    GroupMembership,
    Task,
    TaskAssignee,
    TaskColumn,
    TaskComment,
    TaskCustomField,
    utcnow,
)
from ..models.tasks import DEFAULT_COLUMNS, DEFAULT_TASK_COLOR
from ..schema.enums import FieldType, MembershipStatus, TaskStatus
from .custom_fields import validate_field_value
from .groups import GroupAccess

__all__ = ["TaskService"]

logger = structlog.get_logger(__name__)


class TaskService(GroupAccess):
    """Group-scoped task board operations.

    Positions are 1-based and contiguous within a column (tasks) or a group
    (columns); every mutation that removes or inserts an item shifts its
    neighbours so the sequence stays gap-free.
    """

    # ========================================================================
    # 컬럼
    # ========================================================================

    def create_default_columns(self, group_id: uuid.UUID, user_id: uuid.UUID) -> list[TaskColumn]:
        columns = [
            TaskColumn(
                group_id=group_id,
                name=name,
                color=color,
                position=index,
                is_default=True,
                created_by=user_id,
            )
            for index, (name, color) in enumerate(DEFAULT_COLUMNS, start=1)
        ]
        self.session.add_all(columns)
        self.session.flush()
        return columns

    def _get_column(self, group_id: uuid.UUID, column_id: uuid.UUID) -> TaskColumn:
        column = self.session.get(TaskColumn, column_id)
        if column is None or column.group_id != group_id:
            raise NotFoundError("Column not found")
        return column

    def _next_column_position(self, group_id: uuid.UUID) -> int:
        current = self.session.execute(
            select(func.max(TaskColumn.position)).where(TaskColumn.group_id == group_id)
        ).scalar()
        return (current or 0) + 1

    def get_board(self, group_id: uuid.UUID, user_id: uuid.UUID) -> list[TaskColumn]:
        self.require_member(group_id, user_id)
        return list(
            self.session.execute(
                select(TaskColumn)
                .where(TaskColumn.group_id == group_id)
                .order_by(TaskColumn.position)
            ).scalars()
        )

    def create_column(
        self, group_id: uuid.UUID, request: schemas.ColumnCreateRequest, user_id: uuid.UUID
    ) -> TaskColumn:
        self.require_member(group_id, user_id)
        next_position = self._next_column_position(group_id)
        position = request.position or next_position
        if position < next_position:
            self.session.execute(
                update(TaskColumn)
                .where(TaskColumn.group_id == group_id, TaskColumn.position >= position)
                .values(position=TaskColumn.position + 1)
                .execution_options(synchronize_session=False)
            )
        else:
            position = next_position

        column = TaskColumn(
            group_id=group_id,
            name=request.name.strip(),
            color=request.color or DEFAULT_TASK_COLOR,
            position=position,
            is_default=False,
            created_by=user_id,
        )
        self.session.add(column)
        self._commit()
        self.session.expire_all()
        logger.info("column.created", group_id=str(group_id), column_id=str(column.id))
        return column

    def update_column(
        self,
        group_id: uuid.UUID,
        column_id: uuid.UUID,
        request: schemas.ColumnUpdateRequest,
        user_id: uuid.UUID,
    ) -> TaskColumn:
        self.require_member(group_id, user_id)
        column = self._get_column(group_id, column_id)
        if request.name is not None:
            column.name = request.name.strip()
        if request.color is not None:
            column.color = request.color
        self._commit()
        return column

    def delete_column(self, group_id: uuid.UUID, column_id: uuid.UUID, user_id: uuid.UUID) -> None:
        self.require_member(group_id, user_id)
        column = self._get_column(group_id, column_id)
        if column.is_default:
            raise ValueError("Default columns cannot be deleted")
        task_count = self.session.execute(
            select(func.count(Task.id)).where(Task.column_id == column.id)
        ).scalar_one()
        if task_count:
            raise ValueError("Move or delete the tasks in this column first")

        position = column.position
        self.session.delete(column)
        self.session.flush()
        self.session.execute(
            update(TaskColumn)
            .where(TaskColumn.group_id == group_id, TaskColumn.position > position)
            .values(position=TaskColumn.position - 1)
            .execution_options(synchronize_session=False)
        )
        self._commit()
        self.session.expire_all()
        logger.info("column.deleted", group_id=str(group_id), column_id=str(column_id))

    # ========================================================================
    # 태스크
    # ========================================================================

    def _get_task(self, group_id: uuid.UUID, task_id: uuid.UUID) -> Task:
        task = self.session.get(Task, task_id)
        if task is None or task.group_id != group_id:
            raise NotFoundError("Task not found")
        return task

    def _next_task_position(self, column_id: uuid.UUID) -> int:
        current = self.session.execute(
            select(func.max(Task.position)).where(Task.column_id == column_id)
        ).scalar()
        return (current or 0) + 1

    def _active_member_ids(self, group_id: uuid.UUID, user_ids: list[uuid.UUID]) -> set[uuid.UUID]:
        if not user_ids:
            return set()
        return set(
            self.session.execute(
                select(GroupMembership.user_id).where(
                    GroupMembership.group_id == group_id,
                    GroupMembership.user_id.in_(user_ids),
                    GroupMembership.status == MembershipStatus.ACTIVE,
                )
            ).scalars()
        )

    def _apply_status(self, task: Task, status: TaskStatus, user_id: uuid.UUID) -> None:
        if status == TaskStatus.DONE and task.status != TaskStatus.DONE:
            task.completed_at = utcnow()
            task.completed_by = user_id
        elif status != TaskStatus.DONE:
            task.completed_at = None
            task.completed_by = None
        task.status = status

    def create_task(
        self, group_id: uuid.UUID, request: schemas.TaskCreateRequest, user_id: uuid.UUID
    ) -> Task:
        self.require_member(group_id, user_id)
        column = self._get_column(group_id, request.column_id)

        assignee_ids = list(dict.fromkeys(request.assignee_ids))
        missing = set(assignee_ids) - self._active_member_ids(group_id, assignee_ids)
        if missing:
            raise ValueError("Assignees must be active members of the group")

        task = Task(
            group_id=group_id,
            column_id=column.id,
            title=request.title.strip(),
            description=request.description,
            status=TaskStatus.TODO,
            priority=request.priority,
            color=request.color or DEFAULT_TASK_COLOR,
            position=self._next_task_position(column.id),
            due_date=request.due_date,
            start_date=request.start_date,
            created_by=user_id,
            labels=[label.model_dump() for label in request.labels],
            attachments=[],
            meta=dict(request.metadata),
        )
        self._apply_status(task, request.status, user_id)
        self.session.add(task)
        self.session.flush()
        for assignee_id in assignee_ids:
            task.assignees.append(TaskAssignee(user_id=assignee_id, assigned_by=user_id))
        self._commit()
        logger.info("task.created", group_id=str(group_id), task_id=str(task.id))
        return task

    def get_task(self, group_id: uuid.UUID, task_id: uuid.UUID, user_id: uuid.UUID) -> Task:
        self.require_member(group_id, user_id)
        return self._get_task(group_id, task_id)

    def update_task(
        self,
        group_id: uuid.UUID,
        task_id: uuid.UUID,
        request: schemas.TaskUpdateRequest,
        user_id: uuid.UUID,
    ) -> Task:
        self.require_member(group_id, user_id)
        task = self._get_task(group_id, task_id)
        changes = request.model_dump(exclude_unset=True)

        if "status" in changes and request.status is not None:
            self._apply_status(task, request.status, user_id)
        for key in ("title", "description", "priority", "color", "due_date", "start_date"):
            if key in changes:
                value = changes[key]
                if key in ("title", "priority", "color") and value is None:
                    continue
                setattr(task, key, value.strip() if key == "title" else value)
        if request.labels is not None:
            task.labels = [label.model_dump() for label in request.labels]
        if request.metadata is not None:
            task.meta = {**(task.meta or {}), **request.metadata}

        self._commit()
        logger.info("task.updated", task_id=str(task.id), fields=sorted(changes))
        return task

    def move_task(
        self,
        group_id: uuid.UUID,
        task_id: uuid.UUID,
        request: schemas.TaskMoveRequest,
        user_id: uuid.UUID,
    ) -> Task:
        self.require_member(group_id, user_id)
        task = self._get_task(group_id, task_id)
        target = self._get_column(group_id, request.column_id)
        source_column_id = task.column_id
        old_position = task.position

        # take the task out of its column first
        task.position = 0
        self.session.flush()
        self.session.execute(
            update(Task)
            .where(
                Task.column_id == source_column_id,
                Task.position > old_position,
                Task.id != task.id,
            )
            .values(position=Task.position - 1)
            .execution_options(synchronize_session=False)
        )

        max_position = self.session.execute(
            select(func.max(Task.position)).where(
                Task.column_id == target.id, Task.id != task.id
            )
        ).scalar() or 0
        position = min(request.position, max_position + 1)

        self.session.execute(
            update(Task)
            .where(
                Task.column_id == target.id,
                Task.position >= position,
                Task.id != task.id,
            )
            .values(position=Task.position + 1)
            .execution_options(synchronize_session=False)
        )
        task.column_id = target.id
        task.position = position
        self._commit()
        self.session.expire_all()
        task = self._get_task(group_id, task_id)
        logger.info(
            "task.moved",
            task_id=str(task.id),
            from_column=str(source_column_id),
            to_column=str(target.id),
            position=position,
        )
        return task

    def delete_task(self, group_id: uuid.UUID, task_id: uuid.UUID, user_id: uuid.UUID) -> None:
        self.require_member(group_id, user_id)
        task = self._get_task(group_id, task_id)
        column_id, position = task.column_id, task.position
        self.session.delete(task)
        self.session.flush()
        self.session.execute(
            update(Task)
            .where(Task.column_id == column_id, Task.position > position)
            .values(position=Task.position - 1)
            .execution_options(synchronize_session=False)
        )
        self._commit()
        self.session.expire_all()
        logger.info("task.deleted", group_id=str(group_id), task_id=str(task_id))

    # ========================================================================
    # 댓글
    # ========================================================================

    def list_comments(
        self, group_id: uuid.UUID, task_id: uuid.UUID, user_id: uuid.UUID
    ) -> list[TaskComment]:
        self.require_member(group_id, user_id)
        self._get_task(group_id, task_id)
        return list(
            self.session.execute(
                select(TaskComment)
                .where(TaskComment.task_id == task_id)
                .order_by(TaskComment.created_at)
            ).scalars()
        )

    def create_comment(
        self,
        group_id: uuid.UUID,
        task_id: uuid.UUID,
        request: schemas.CommentRequest,
        user_id: uuid.UUID,
    ) -> TaskComment:
        self.require_member(group_id, user_id)
        task = self._get_task(group_id, task_id)
        comment = TaskComment(task_id=task.id, user_id=user_id, content=request.content)
        self.session.add(comment)
        self._commit()
        return comment

    def _own_comment(
        self, group_id: uuid.UUID, task_id: uuid.UUID, comment_id: uuid.UUID, user_id: uuid.UUID
    ) -> TaskComment:
        self.require_member(group_id, user_id)
        self._get_task(group_id, task_id)
        comment = self.session.get(TaskComment, comment_id)
        if comment is None or comment.task_id != task_id:
            raise NotFoundError("Comment not found")
        if comment.user_id != user_id:
            raise ForbiddenError("Only the author can change this comment")
        return comment

    def update_comment(
        self,
        group_id: uuid.UUID,
        task_id: uuid.UUID,
        comment_id: uuid.UUID,
        request: schemas.CommentRequest,
        user_id: uuid.UUID,
    ) -> TaskComment:
        comment = self._own_comment(group_id, task_id, comment_id, user_id)
        comment.content = request.content
        self._commit()
        return comment

    def delete_comment(
        self, group_id: uuid.UUID, task_id: uuid.UUID, comment_id: uuid.UUID, user_id: uuid.UUID
    ) -> None:
        comment = self._own_comment(group_id, task_id, comment_id, user_id)
        self.session.delete(comment)
        self._commit()

    # ========================================================================
    # 시간 기록 / 담당자 / 커스텀 필드
    # ========================================================================

    def add_time_entry(
        self,
        group_id: uuid.UUID,
        task_id: uuid.UUID,
        request: schemas.TimeEntryRequest,
        user_id: uuid.UUID,
    ) -> Task:
        self.require_member(group_id, user_id)
        task = self._get_task(group_id, task_id)
        meta = dict(task.meta or {})
        entries = list(meta.get("time_entries", []))
        entries.append(
            {
                "user_id": str(user_id),
                "hours": request.hours,
                "description": request.description,
                "date": (request.date or utcnow().date()).isoformat(),
            }
        )
        meta["time_entries"] = entries
        meta["actual_hours"] = round(float(meta.get("actual_hours") or 0) + request.hours, 2)
        # reassign so the JSON column is flagged dirty
        task.meta = meta
        self._commit()
        logger.info("task.time_logged", task_id=str(task.id), hours=request.hours)
        return task

    def set_assignees(
        self,
        group_id: uuid.UUID,
        task_id: uuid.UUID,
        request: schemas.AssigneesRequest,
        user_id: uuid.UUID,
    ) -> Task:
        self.require_member(group_id, user_id)
        task = self._get_task(group_id, task_id)
        wanted = list(dict.fromkeys(request.user_ids))
        if set(wanted) - self._active_member_ids(group_id, wanted):
            raise ValueError("Assignees must be active members of the group")

        current = {assignee.user_id: assignee for assignee in task.assignees}
        for assignee_user_id, assignee in current.items():
            if assignee_user_id not in wanted:
                task.assignees.remove(assignee)
        for assignee_user_id in wanted:
            if assignee_user_id not in current:
                task.assignees.append(
                    TaskAssignee(user_id=assignee_user_id, assigned_by=user_id)
                )
        self._commit()
        logger.info("task.assignees_set", task_id=str(task.id), count=len(wanted))
        return task

    def set_custom_field_values(
        self,
        group_id: uuid.UUID,
        task_id: uuid.UUID,
        values: dict[str, str],
        user_id: uuid.UUID,
    ) -> Task:
        """Upsert ad-hoc ``{name: value}`` fields on a task."""
        self.require_member(group_id, user_id)
        task = self._get_task(group_id, task_id)
        by_name = {field.field_name: field for field in task.custom_fields}
        next_order = max((f.display_order for f in task.custom_fields), default=-1) + 1
        for name, value in values.items():
            name = name.strip()
            if not name:
                raise ValueError("Field name is required")
            field = by_name.get(name)
            if field is not None:
                if field.definition is not None:
                    field.field_value = validate_field_value(
                        field.field_type, value, field.definition.options
                    )
                else:
                    field.field_value = str(value)
                continue
            task.custom_fields.append(
                TaskCustomField(
                    field_name=name,
                    field_value=str(value),
                    field_type=FieldType.TEXT,
                    is_group_field=False,
                    display_order=next_order,
                    created_by=user_id,
                )
            )
            next_order += 1
        self._commit()
        return task

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

    def board_response(self, group_id: uuid.UUID, columns: list[TaskColumn]) -> schemas.BoardResponse:
        return schemas.BoardResponse(
            group_id=group_id,
            columns=[schemas.BoardColumn.model_validate(column) for column in columns],
        )

    def find_task(self, task_id: uuid.UUID) -> Optional[Task]:
        return self.session.get(Task, task_id)
