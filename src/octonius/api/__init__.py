"""FastAPI application for the Octonius workplace API.

워크플레이스 협업 API:
- 패스워드리스(OTP) 인증 및 토큰 관리
- 워크플레이스/역할/그룹 관리
- 태스크 보드, 커스텀 필드, 활동 피드, 라운지, 파일
"""

from __future__ import annotations

import time
from typing import Optional

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from ..config import Settings
from ..db import Database, init_engine
from ..logs import configure_logging
from ..services import Mailer, RoleService, S3Storage
from .errors import register_error_handlers
from .routers import ROUTERS

__all__ = ["create_app"]

logger = structlog.get_logger(__name__)


def create_app(
    settings: Settings | None = None,
    *,
    mailer: Optional[Mailer] = None,
    storage: Optional[S3Storage] = None,
) -> FastAPI:
    """Create and configure the FastAPI application."""

    settings = settings or Settings.from_env()
    configure_logging(settings.log_level)

    engine = init_engine(settings)
    database = Database(engine=engine)
    database.create_all()
    with database.session() as session:
        RoleService(session, settings).initialize_system_permissions()

    if storage is None and settings.storage is not None:
        storage = S3Storage(settings.storage)

    app = FastAPI(
        title="Octonius API",
        version=settings.version,
        description="워크플레이스 협업 REST API",
    )
    app.state.settings = settings
    app.state.database = database
    app.state.mailer = mailer or Mailer(settings)
    app.state.storage = storage

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def _log_requests(request: Request, call_next):
        started = time.perf_counter()
        response = await call_next(request)
        logger.info(
            "request.completed",
            method=request.method,
            path=request.url.path,
            status=response.status_code,
            duration_ms=round((time.perf_counter() - started) * 1000, 2),
        )
        return response

    register_error_handlers(app)
    for router in ROUTERS:
        app.include_router(router)

    logger.info(
        "app.created",
        environment=settings.environment,
        storage=storage is not None,
        email=app.state.mailer.enabled,
    )
    return app
