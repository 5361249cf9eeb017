"""Exception → error envelope mapping registered on the FastAPI app."""

from __future__ import annotations

import datetime as dt
from typing import Any

import structlog
from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import NoResultFound, SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from ..errors import ServiceError

__all__ = ["error_response", "register_error_handlers"]

logger = structlog.get_logger(__name__)


def error_response(status_code: int, message: str, details: Any = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "success": False,
            "error": {
                "code": status_code,
                "message": message,
                "details": jsonable_encoder(details),
                "timestamp": dt.datetime.now(dt.timezone.utc).isoformat(),
            },
        },
    )


def _rollback(request: Request) -> None:
    session = getattr(request.state, "db_session", None)
    if session is not None:
        session.rollback()


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(ServiceError)
    async def _service_error(request: Request, exc: ServiceError):
        logger.info(
            "request.rejected",
            path=request.url.path,
            status=exc.status_code,
            reason=exc.message,
        )
        return error_response(exc.status_code, exc.message, exc.details)

    @app.exception_handler(NoResultFound)
    async def _not_found(request: Request, exc: NoResultFound):
        return error_response(status.HTTP_404_NOT_FOUND, "Resource not found")

    @app.exception_handler(PermissionError)
    async def _forbidden(request: Request, exc: PermissionError):
        return error_response(status.HTTP_403_FORBIDDEN, str(exc) or "Forbidden")

    @app.exception_handler(ValueError)
    async def _bad_request(request: Request, exc: ValueError):
        return error_response(status.HTTP_400_BAD_REQUEST, str(exc) or "Bad request")

    @app.exception_handler(RequestValidationError)
    async def _invalid_request(request: Request, exc: RequestValidationError):
        return error_response(
            status.HTTP_422_UNPROCESSABLE_ENTITY, "Validation failed", exc.errors()
        )

    @app.exception_handler(StarletteHTTPException)
    async def _http_error(request: Request, exc: StarletteHTTPException):
        return error_response(exc.status_code, str(exc.detail))

    @app.exception_handler(SQLAlchemyError)
    async def _database_error(request: Request, exc: SQLAlchemyError):
        _rollback(request)
        logger.exception("request.database_error", path=request.url.path)
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Database error")

    @app.exception_handler(Exception)
    async def _unhandled(request: Request, exc: Exception):
        _rollback(request)
        logger.exception("request.unhandled_error", path=request.url.path)
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")
