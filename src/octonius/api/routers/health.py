"""Liveness, readiness and version probes."""

from __future__ import annotations

import datetime as dt

import structlog
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..deps import get_session, get_settings, ok

router = APIRouter(tags=["health"])

logger = structlog.get_logger(__name__)


def _now() -> str:
    return dt.datetime.now(dt.timezone.utc).isoformat()


@router.get("/")
def root(request: Request):
    settings = get_settings(request)
    return ok({"name": "Octonius API", "version": settings.version, "docs": "/docs"})


@router.get("/health")
def health(request: Request, session: Session = Depends(get_session)):
    """DB 연결 확인 포함 헬스 체크."""
    settings = get_settings(request)
    try:
        session.execute(select(1))
        database = "ok"
    except SQLAlchemyError as exc:
        logger.error("health.database_failed", error=str(exc))
        database = "unavailable"

    body = {
        "status": "ok" if database == "ok" else "degraded",
        "database": database,
        "environment": settings.environment,
        "timestamp": _now(),
    }
    if database != "ok":
        return JSONResponse(status_code=503, content={"success": False, "data": body})
    return ok(body)


@router.get("/api/health")
def api_health():
    return ok({"status": "ok", "timestamp": _now()})


@router.get("/version")
def version(request: Request):
    settings = get_settings(request)
    return ok({"version": settings.version, "environment": settings.environment})
