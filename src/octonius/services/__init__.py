"""Service layer: one class per domain, each owning its unit of work."""

from .activity import ActivityService
from .auth import AuthService
from .custom_fields import CustomFieldService
from .files import FileService
from .groups import GroupService, PrivateGroupService
from .lounge import LoungeService
from .notifications import Mailer
from .roles import RoleService
from .storage import S3Storage
from .tasks import TaskService
from .users import UserService
from .workload import WorkloadService
from .workplaces import WorkplaceService

__all__ = [
    "ActivityService",
    "AuthService",
    "CustomFieldService",
    "FileService",
    "GroupService",
    "PrivateGroupService",
    "LoungeService",
    "Mailer",
    "RoleService",
    "S3Storage",
    "TaskService",
    "UserService",
    "WorkloadService",
    "WorkplaceService",
]
