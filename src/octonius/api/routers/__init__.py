"""API routers, in mount order."""

from __future__ import annotations

from . import (
    activity,
    auths,
    custom_fields,
    files,
    groups,
    health,
    lounges,
    notifications,
    roles,
    tasks,
    users,
    workload,
    workplaces,
)

__all__ = ["ROUTERS"]

ROUTERS = (
    health.router,
    auths.router,
    users.router,
    workplaces.router,
    roles.router,
    tasks.router,
    activity.router,
    custom_fields.router,
    groups.router,
    lounges.router,
    files.router,
    workload.router,
    notifications.router,
)
