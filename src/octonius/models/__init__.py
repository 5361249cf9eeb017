"""Octonius SQLAlchemy models organized by domain."""

from .base import Base, TimestampMixin, ensure_utc, utcnow
from .users import User
from .auth import AuthSession, AuthToken, OtpCode
from .workplaces import Workplace, WorkplaceInvitation, WorkplaceMembership
from .roles import Permission, Role, RolePermission
from .groups import Group, GroupMembership
from .tasks import Task, TaskAssignee, TaskColumn, TaskComment
from .custom_fields import GroupCustomFieldDefinition, TaskCustomField
from .activity import GroupPost, GroupPostComment, GroupPostLike
from .lounge import LoungeStory
from .files import File

__all__ = [
    "Base",
    "TimestampMixin",
    "ensure_utc",
    "utcnow",
    "User",
    "AuthSession",
    "AuthToken",
    "OtpCode",
    "Workplace",
    "WorkplaceMembership",
    "WorkplaceInvitation",
    "Role",
    "Permission",
    "RolePermission",
    "Group",
    "GroupMembership",
    "TaskColumn",
    "Task",
    "TaskAssignee",
    "TaskComment",
    "GroupCustomFieldDefinition",
    "TaskCustomField",
    "GroupPost",
    "GroupPostLike",
    "GroupPostComment",
    "LoungeStory",
    "File",
]
