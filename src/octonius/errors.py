"""Domain exceptions raised by the service layer.

Services raise these (or the builtin ``PermissionError`` / ``ValueError`` and
SQLAlchemy's ``NoResultFound``); the API layer maps them onto HTTP status
codes in :mod:`octonius.api.errors`.
"""

from __future__ import annotations

from typing import Any

__all__ = [
    "ServiceError",
    "NotFoundError",
    "ConflictError",
    "GoneError",
    "ForbiddenError",
    "AuthenticationError",
    "ServiceUnavailableError",
]


class ServiceError(Exception):
    """Base class for errors that carry an HTTP status code."""

    status_code: int = 500

    def __init__(self, message: str, details: Any = None):
        super().__init__(message)
        self.message = message
        self.details = details


class NotFoundError(ServiceError):
    status_code = 404


class ConflictError(ServiceError):
    status_code = 409


class GoneError(ServiceError):
    status_code = 410


class ForbiddenError(ServiceError):
    status_code = 403


class AuthenticationError(ServiceError):
    status_code = 401


class ServiceUnavailableError(ServiceError):
    status_code = 503
