"""Enum definitions for Octonius models."""

from .enums import (
    ENUMS,
    FieldType,
    FileType,
    GroupRole,
    GroupType,
    InvitationStatus,
    MembershipStatus,
    OctoniusEnum,
    StoryType,
    TaskPriority,
    TaskStatus,
    TokenType,
    WorkplaceSize,
    enum_column,
)

__all__ = [
    "ENUMS",
    "FieldType",
    "FileType",
    "GroupRole",
    "GroupType",
    "InvitationStatus",
    "MembershipStatus",
    "OctoniusEnum",
    "StoryType",
    "TaskPriority",
    "TaskStatus",
    "TokenType",
    "WorkplaceSize",
    "enum_column",
]
