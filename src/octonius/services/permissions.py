"""Permission catalogue and default workplace roles."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

__all__ = [
    "PermissionSpec",
    "PERMISSIONS",
    "PERMISSION_NAMES",
    "DEFAULT_ROLES",
    "WILDCARD",
    "grants",
]

WILDCARD = "*"


@dataclass(frozen=True)
class PermissionSpec:
    module: str
    action: str
    description: str

    @property
    def name(self) -> str:
        return f"{self.module}.{self.action}"

    @property
    def category(self) -> str:
        return self.module


def _specs(module: str, actions: Iterable[tuple[str, str]]) -> list[PermissionSpec]:
    return [PermissionSpec(module, action, description) for action, description in actions]


PERMISSIONS: tuple[PermissionSpec, ...] = tuple(
    _specs(
        "workplace",
        [
            ("view", "View workplace details"),
            ("update", "Update workplace settings"),
            ("delete", "Delete the workplace"),
            ("manage", "Full control over the workplace"),
        ],
    )
    + _specs(
        "user",
        [
            ("view", "View workplace members"),
            ("invite", "Invite people to the workplace"),
            ("update", "Update member profiles"),
            ("delete", "Remove members from the workplace"),
            ("manage", "Full control over members"),
        ],
    )
    + _specs(
        "role",
        [
            ("view", "View roles"),
            ("create", "Create custom roles"),
            ("update", "Edit custom roles"),
            ("delete", "Delete custom roles"),
            ("assign", "Assign roles to members"),
            ("manage", "Full control over roles"),
        ],
    )
    + _specs(
        "group",
        [
            ("view", "View groups"),
            ("create", "Create groups"),
            ("update", "Edit groups"),
            ("delete", "Delete groups"),
            ("manage", "Full control over groups"),
        ],
    )
    + _specs(
        "task",
        [
            ("view", "View tasks"),
            ("create", "Create tasks"),
            ("update", "Edit tasks"),
            ("delete", "Delete tasks"),
            ("assign", "Assign tasks"),
            ("manage", "Full control over tasks"),
        ],
    )
    + _specs(
        "file",
        [
            ("view", "View files"),
            ("create", "Upload files and create notes"),
            ("update", "Edit files"),
            ("delete", "Delete files"),
            ("manage", "Full control over files"),
        ],
    )
)

PERMISSION_NAMES: frozenset[str] = frozenset(spec.name for spec in PERMISSIONS)

# name -> (description, permission names)
DEFAULT_ROLES: dict[str, tuple[str, tuple[str, ...]]] = {
    "owner": ("Workplace owner with full access", (WILDCARD,)),
    "admin": (
        "Administrator managing members, groups, tasks and files",
        (
            "workplace.view",
            "workplace.update",
            "user.view",
            "user.invite",
            "user.update",
            "user.delete",
            "role.view",
            "role.assign",
            "group.manage",
            "task.manage",
            "file.manage",
        ),
    ),
    "member": (
        "Regular workplace member",
        (
            "workplace.view",
            "user.view",
            "group.view",
            "group.create",
            "task.view",
            "task.create",
            "task.update",
            "file.view",
            "file.create",
            "file.update",
        ),
    ),
}


def grants(granted: Iterable[str], required: str) -> bool:
    """Return True when *granted* covers *required*.

    ``*`` covers everything and ``<module>.manage`` covers every action of
    that module.
    """

    granted = set(granted)
    if WILDCARD in granted or required in granted:
        return True
    module = required.split(".", 1)[0]
    return f"{module}.manage" in granted
