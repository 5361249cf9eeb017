"""Request-scoped dependencies: session, services and the current user."""

from __future__ import annotations

import uuid
from typing import Any, Generator, Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from ..config import Settings
from ..errors import AuthenticationError
from ..models import User
from ..services import (
    ActivityService,
    AuthService,
    CustomFieldService,
    FileService,
    GroupService,
    LoungeService,
    Mailer,
    RoleService,
    TaskService,
    UserService,
    WorkloadService,
    WorkplaceService,
)

__all__ = [
    "ok",
    "client_ip",
    "get_settings",
    "get_session",
    "get_mailer",
    "get_bearer_token",
    "get_current_user",
    "get_optional_user",
    "require_logged_in",
    "require_workplace",
]

bearer_scheme = HTTPBearer(auto_error=False)


def ok(data: Any = None, message: str = "OK") -> dict:
    """Build the success envelope."""
    return {"success": True, "message": message, "data": data}


def client_ip(request: Request) -> Optional[str]:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else None


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_mailer(request: Request) -> Mailer:
    return request.app.state.mailer


def get_session(request: Request) -> Generator[Session, None, None]:
    session = request.app.state.database.session()
    request.state.db_session = session
    try:
        yield session
    finally:
        session.close()


# ========================================================================
# 서비스 팩토리
# ========================================================================


def get_auth_service(
    request: Request, session: Session = Depends(get_session)
) -> AuthService:
    return AuthService(session, get_settings(request), get_mailer(request))


def get_user_service(request: Request, session: Session = Depends(get_session)) -> UserService:
    return UserService(session, get_settings(request))


def get_workplace_service(
    request: Request, session: Session = Depends(get_session)
) -> WorkplaceService:
    return WorkplaceService(session, get_settings(request), get_mailer(request))


def get_role_service(request: Request, session: Session = Depends(get_session)) -> RoleService:
    return RoleService(session, get_settings(request))


def get_group_service(request: Request, session: Session = Depends(get_session)) -> GroupService:
    return GroupService(session, get_settings(request))


def get_task_service(request: Request, session: Session = Depends(get_session)) -> TaskService:
    return TaskService(session, get_settings(request))


def get_custom_field_service(
    request: Request, session: Session = Depends(get_session)
) -> CustomFieldService:
    return CustomFieldService(session, get_settings(request))


def get_activity_service(
    request: Request, session: Session = Depends(get_session)
) -> ActivityService:
    return ActivityService(session, get_settings(request))


def get_lounge_service(request: Request, session: Session = Depends(get_session)) -> LoungeService:
    return LoungeService(session, get_settings(request))


def get_file_service(request: Request, session: Session = Depends(get_session)) -> FileService:
    return FileService(session, get_settings(request), request.app.state.storage)


def get_workload_service(
    request: Request, session: Session = Depends(get_session)
) -> WorkloadService:
    return WorkloadService(session, get_settings(request))


# ========================================================================
# 인증
# ========================================================================


def get_bearer_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> str:
    if credentials is None or credentials.scheme.lower() != "bearer" or not credentials.credentials:
        raise AuthenticationError("Authorization header with a Bearer token is required")
    return credentials.credentials


def get_current_user(
    token: str = Depends(get_bearer_token),
    auth: AuthService = Depends(get_auth_service),
) -> User:
    return auth.authenticate(token)


def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    auth: AuthService = Depends(get_auth_service),
) -> Optional[User]:
    """The signed-in user when a bearer token is sent, else ``None``."""
    if credentials is None:
        return None
    user = auth.authenticate(get_bearer_token(credentials))
    if not auth.is_logged_in(user.id):
        raise AuthenticationError("Session has been logged out")
    return user


def require_logged_in(
    user: User = Depends(get_current_user),
    auth: AuthService = Depends(get_auth_service),
) -> User:
    if not auth.is_logged_in(user.id):
        raise AuthenticationError("Session has been logged out")
    return user


def require_workplace(user: User = Depends(require_logged_in)) -> uuid.UUID:
    if user.current_workplace_id is None:
        raise ValueError("No workplace selected; select a workplace first")
    return user.current_workplace_id
