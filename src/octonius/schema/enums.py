"""Canonical enum definitions shared by models and API schemas."""

from __future__ import annotations

from enum import Enum

from sqlalchemy import Enum as SAEnum

__all__ = [
    "OctoniusEnum",
    "TokenType",
    "WorkplaceSize",
    "MembershipStatus",
    "InvitationStatus",
    "GroupType",
    "GroupRole",
    "TaskStatus",
    "TaskPriority",
    "FieldType",
    "StoryType",
    "FileType",
    "ENUMS",
    "enum_column",
]


class OctoniusEnum(str, Enum):
    """Base class for enums persisted as constrained strings."""

    @classmethod
    def values(cls) -> tuple[str, ...]:
        return tuple(item.value for item in cls)


class TokenType(OctoniusEnum):
    ACCESS = "access"
    REFRESH = "refresh"


class WorkplaceSize(OctoniusEnum):
    SIZE_1_10 = "1-10"
    SIZE_11_50 = "11-50"
    SIZE_51_200 = "51-200"
    SIZE_201_500 = "201-500"
    SIZE_501_1000 = "501-1000"
    SIZE_1000_PLUS = "1000+"


class MembershipStatus(OctoniusEnum):
    ACTIVE = "active"
    PENDING = "pending"
    INACTIVE = "inactive"


class InvitationStatus(OctoniusEnum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    EXPIRED = "expired"


class GroupType(OctoniusEnum):
    REGULAR = "regular"
    PRIVATE = "private"


class GroupRole(OctoniusEnum):
    ADMIN = "admin"
    MEMBER = "member"
    VIEWER = "viewer"


class TaskStatus(OctoniusEnum):
    TODO = "todo"
    IN_PROGRESS = "in_progress"
    REVIEW = "review"
    DONE = "done"


class TaskPriority(OctoniusEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class FieldType(OctoniusEnum):
    TEXT = "text"
    NUMBER = "number"
    DROPDOWN = "dropdown"
    DATE = "date"
    BOOLEAN = "boolean"


class StoryType(OctoniusEnum):
    NEWS = "news"
    EVENT = "event"
    UPDATE = "update"


class FileType(OctoniusEnum):
    NOTE = "note"
    FILE = "file"


ENUMS: tuple[type[OctoniusEnum], ...] = (
    TokenType,
    WorkplaceSize,
    MembershipStatus,
    InvitationStatus,
    GroupType,
    GroupRole,
    TaskStatus,
    TaskPriority,
    FieldType,
    StoryType,
    FileType,
)


def _snake_case(name: str) -> str:
    out = []
    for index, char in enumerate(name):
        if char.isupper() and index:
            out.append("_")
        out.append(char.lower())
    return "".join(out)


def enum_column(enum_cls: type[OctoniusEnum]) -> SAEnum:
    """Return a portable string-backed column type for *enum_cls*.

    Values are stored (not member names) and checked with a CHECK constraint,
    so the same schema works on PostgreSQL and SQLite without enum migrations.
    """

    return SAEnum(
        enum_cls,
        name=_snake_case(enum_cls.__name__),
        native_enum=False,
        create_constraint=True,
        length=max(len(v) for v in enum_cls.values()) + 8,
        values_callable=lambda cls: [item.value for item in cls],
        validate_strings=True,
    )
