"""Render domain and database errors as JSON responses."""

from __future__ import annotations

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from project_library_service.errors import DomainError, ServerError

log = structlog.get_logger(__name__)


def _error_response(status_code: int, detail: str, code: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"detail": detail, "code": code})


async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    if exc.status_code >= 500:
        log.error(
            "request_failed",
            method=request.method,
            path=request.url.path,
            error=exc.message,
        )
        return _error_response(500, ServerError.default_message, ServerError.code)
    return _error_response(exc.status_code, exc.message, exc.code)


async def database_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    log.error(
        "database_error",
        method=request.method,
        path=request.url.path,
        error_type=type(exc).__name__,
        exc_info=exc,
    )
    return _error_response(500, ServerError.default_message, ServerError.code)


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(DomainError, domain_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(SQLAlchemyError, database_error_handler)  # type: ignore[arg-type]
