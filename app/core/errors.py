# app/core/errors.py
import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import DBAPIError, IntegrityError
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class AppError(Exception):
    """Base for every error a service may raise.

    Each subclass fixes a ``kind`` and an HTTP status; handlers render all of
    them the same way: ``{"error": message, "kind": kind}``.
    """
    kind = "error"
    status_code = 500

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code

    def to_dict(self) -> dict:
        return {"error": self.message, "kind": self.kind}


class ValidationError(AppError):
    """Missing or malformed input."""
    kind = "validation"
    status_code = 400


class InvalidSlot(ValidationError):
    kind = "invalid_slot"

    def __init__(self, message: str = "Invalid slot"):
        super().__init__(message)


class AuthenticationError(AppError):
    kind = "unauthenticated"
    status_code = 401


class AccessDenied(AppError):
    kind = "access_denied"
    status_code = 403

    def __init__(self, message: str = "Access denied"):
        super().__init__(message)


class NotFound(AppError):
    kind = "not_found"
    status_code = 404


class Conflict(AppError):
    """Slot already booked, duplicate slot definition, duplicate email."""
    kind = "conflict"
    status_code = 400


class UpstreamUnavailable(AppError):
    """The data store failed or did not answer in time."""
    kind = "upstream_unavailable"
    status_code = 503

    @classmethod
    def timed_out(cls, message: str = "Request timed out. Please try again.") -> "UpstreamUnavailable":
        return cls(message, status_code=504)


def _validation_message(errors: list[dict]) -> str:
    parts = []
    for e in errors:
        loc = [str(x) for x in e.get("loc", ()) if x not in ("body", "query", "path")]
        field = ".".join(loc)
        msg = str(e.get("msg", "invalid value"))
        if e.get("type") == "json_invalid":
            msg = "Request body is not valid JSON"
        parts.append(f"{field}: {msg}" if field else msg)
    return "; ".join(parts) or "Invalid request"


def register_exception_handlers(app: FastAPI) -> None:
    """Render every failure as a single ``{error, kind}`` payload."""

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        if exc.status_code >= 500:
            logger.error("%s %s -> %s: %s", request.method, request.url.path, exc.kind, exc.message)
        else:
            logger.info("%s %s -> %s: %s", request.method, request.url.path, exc.kind, exc.message)
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        err = ValidationError(_validation_message(exc.errors()))
        logger.info("Validation error on %s: %s", request.url.path, err.message)
        return JSONResponse(status_code=err.status_code, content=err.to_dict())

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        kind = {401: "unauthenticated", 403: "access_denied", 404: "not_found"}.get(exc.status_code, "http")
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": str(exc.detail), "kind": kind},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(IntegrityError)
    async def integrity_error_handler(request: Request, exc: IntegrityError):
        logger.warning("Integrity error on %s %s: %s", request.method, request.url.path, exc.orig)
        err = Conflict(str(exc.orig))
        return JSONResponse(status_code=err.status_code, content=err.to_dict())

    @app.exception_handler(DBAPIError)
    async def database_error_handler(request: Request, exc: DBAPIError):
        logger.error("Database error on %s %s: %s", request.method, request.url.path, exc)
        err = UpstreamUnavailable(str(exc.orig) if exc.orig is not None else str(exc))
        return JSONResponse(status_code=err.status_code, content=err.to_dict())
