# File: app/core/errors.py
"""
Typed domain errors and their mapping to HTTP responses.

Services raise one of the AppError subclasses below; the handlers registered by
register_exception_handlers() turn them into {"detail": ..., "error": ...} bodies
with the matching status code. Anything else becomes a generic 500.
"""
import logging
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class AppError(Exception):
    status_code = status.HTTP_400_BAD_REQUEST
    kind = "error"
    default_message = "Request failed"

    def __init__(self, message: Optional[str] = None, hint: Optional[str] = None):
        self.message = message or self.default_message
        self.hint = hint
        super().__init__(self.message)


class ValidationError(AppError):
    kind = "validation_error"
    default_message = "Invalid input"


class InvalidCredentials(ValidationError):
    kind = "invalid_credentials"
    default_message = "Invalid credentials"


class InvalidOrExpiredToken(ValidationError):
    kind = "invalid_or_expired_token"
    default_message = "Invalid or expired reset token"


class ConflictError(AppError):
    # 400 rather than 409: the register contract reports duplicates as 400
    kind = "conflict"
    default_message = "Resource already exists"


class UnauthenticatedError(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    kind = "unauthenticated"
    default_message = "Not authenticated"


class InvalidToken(UnauthenticatedError):
    kind = "invalid_token"
    default_message = "Invalid token"


class ForbiddenError(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    kind = "forbidden"
    default_message = "Not authorized for this action"


class NotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    kind = "not_found"
    default_message = "Not found"


class InvalidStateError(AppError):
    kind = "invalid_state"
    default_message = "Operation not allowed in the current state"


class ServerError(AppError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    kind = "server_error"
    default_message = "Internal server error"


def _error_body(exc: AppError) -> dict:
    body = {"detail": exc.message, "error": exc.kind}
    if exc.hint:
        body["hint"] = exc.hint
    return body


def _validation_message(exc: RequestValidationError) -> str:
    parts = []
    for err in exc.errors():
        field = ".".join(str(p) for p in err.get("loc", ()) if p not in ("body", "query", "path"))
        parts.append(f"{field}: {err.get('msg')}" if field else str(err.get("msg")))
    return "; ".join(parts) or ValidationError.default_message


def register_exception_handlers(app: FastAPI):
    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        if exc.status_code >= 500:
            logger.error(f"{exc.kind} on {request.method} {request.url.path}: {exc.message}")
        return JSONResponse(status_code=exc.status_code, content=_error_body(exc))

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        # malformed input is a 400 like every other ValidationError
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"detail": _validation_message(exc), "error": ValidationError.kind},
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.error(f"Unhandled error on {request.method} {request.url.path}", exc_info=exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": "Internal server error", "error": ServerError.kind},
        )
