# src/ejournal/errors.py
"""Exception to JSON mapping. Every error body carries a ``message`` field."""
from __future__ import annotations

from asyncpg.exceptions import (
    CheckViolationError,
    ForeignKeyViolationError,
    NotNullViolationError,
    UniqueViolationError,
)
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from sqlalchemy.exc import DBAPIError, IntegrityError, OperationalError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.responses import JSONResponse

from ejournal.app_logger import get_logger
from ejournal.auth.deps import StaleSessionError

log = get_logger("errors")

STALE_SESSION_MESSAGE = "Session expired or user no longer exists. Please login again."
DB_UNAVAILABLE_MESSAGE = "Database temporarily unavailable. Please try again in a few moments."

_TRANSIENT_MARKERS = (
    "57p01",
    "terminating connection due to administrator command",
    "connection was closed",
    "connection is closed",
    "could not connect",
    "connection refused",
)


def integrity_status(exc: IntegrityError) -> tuple[int, str]:
    """Map a DB integrity error to an HTTP status and a short reason.

    - Unique constraint -> 409 Conflict
    - Not-null / FK / Check -> 422 Unprocessable Entity
    - Otherwise -> 400 Bad Request
    """
    orig = getattr(exc, "orig", None)
    # SQLAlchemy's asyncpg adapter keeps the driver exception on __cause__
    driver_exc = getattr(orig, "__cause__", None) or orig

    if driver_exc is not None:
        if isinstance(driver_exc, UniqueViolationError):
            return 409, "Unique constraint violation"
        if isinstance(driver_exc, ForeignKeyViolationError):
            return 422, "Foreign key constraint failed"
        if isinstance(driver_exc, NotNullViolationError):
            return 422, "Missing required field (NOT NULL violation)"
        if isinstance(driver_exc, CheckViolationError):
            return 422, "Check constraint failed"

    # Generic string heuristics (works across DBs/drivers)
    low = str(orig or exc).lower()
    if "unique constraint" in low or "duplicate key" in low:
        return 409, "Unique constraint violation"
    if "foreign key" in low:
        return 422, "Foreign key constraint failed"
    if "not null" in low or "null value in column" in low:
        return 422, "Missing required field (NOT NULL violation)"
    if "check constraint" in low:
        return 422, "Check constraint failed"
    return 400, "Integrity error"


def is_transient_db_error(exc: BaseException) -> bool:
    if isinstance(exc, DBAPIError) and exc.connection_invalidated:
        return True
    code = getattr(getattr(exc, "orig", None), "sqlstate", None) or getattr(exc, "code", None)
    if code == "57P01":
        return True
    low = str(exc).lower()
    return any(marker in low for marker in _TRANSIENT_MARKERS)


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"message": exc.detail},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        errors = jsonable_encoder(exc.errors())
        first = errors[0] if errors else {}
        where = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
        message = f"{where}: {first.get('msg')}" if where else str(first.get("msg", "Invalid request"))
        return JSONResponse(status_code=400, content={"message": message, "errors": errors})

    @app.exception_handler(StaleSessionError)
    async def stale_session_handler(request: Request, exc: StaleSessionError):
        log.warning("session references missing user %s; clearing session", exc.user_id)
        request.session.clear()
        return JSONResponse(status_code=401, content={"message": STALE_SESSION_MESSAGE})

    @app.exception_handler(IntegrityError)
    async def integrity_error_handler(request: Request, exc: IntegrityError):
        status_code, reason = integrity_status(exc)
        # Log once with context; don't leak values to the client
        log.exception(
            "IntegrityError on %s %s -> %s: %s",
            request.method, request.url.path, status_code, exc.orig,
        )
        return JSONResponse(status_code=status_code, content={"message": reason})

    async def _db_error(request: Request, exc: Exception):
        if is_transient_db_error(exc):
            log.error("database unavailable on %s %s: %s", request.method, request.url.path, exc)
            monitor = getattr(request.app.state, "db_monitor", None)
            if monitor is not None:
                monitor.schedule_recheck()
            return JSONResponse(status_code=503, content={"message": DB_UNAVAILABLE_MESSAGE})
        log.exception("database error on %s %s", request.method, request.url.path)
        return JSONResponse(status_code=500, content={"message": "Internal Server Error"})

    app.add_exception_handler(OperationalError, _db_error)
    app.add_exception_handler(DBAPIError, _db_error)
    app.add_exception_handler(OSError, _db_error)

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        log.exception("unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(status_code=500, content={"message": "Internal Server Error"})
