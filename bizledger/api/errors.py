"""
Error Types

Typed application errors and their translation to JSON responses.
"""

import logging
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class AppError(Exception):
    """Base class for errors that map onto an HTTP status."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, details: Any = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict:
        body: dict[str, Any] = {"success": False, "error": self.message}
        if self.details is not None:
            body["details"] = self.details
        return body


class ValidationError(AppError):
    """Malformed, missing or out-of-range input."""

    status_code = status.HTTP_400_BAD_REQUEST


class AuthError(AppError):
    """Missing, invalid or expired credentials."""

    status_code = status.HTTP_401_UNAUTHORIZED


class PermissionDenied(AppError):
    """Caller's role lacks the rights for this action."""

    status_code = status.HTTP_403_FORBIDDEN

    def __init__(
        self,
        message: str,
        denied_fields: list[str] | None = None,
        allowed_fields: list[str] | None = None,
    ):
        details = None
        if denied_fields is not None:
            details = {"deniedFields": denied_fields, "allowedFields": allowed_fields or []}
        super().__init__(message, details)
        self.denied_fields = denied_fields or []


class NotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND


class ConflictError(AppError):
    """Duplicate unique value or a delete blocked by references."""

    status_code = status.HTTP_409_CONFLICT


class StoreError(AppError):
    """Underlying database failure."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


def register_error_handlers(app: FastAPI, expose_store_errors: bool = False) -> None:
    """Install handlers that render AppError subclasses as JSON.

    Args:
        app: FastAPI application
        expose_store_errors: Include database messages in 500 responses
    """

    @app.exception_handler(AppError)
    async def handle_app_error(request: Request, exc: AppError) -> JSONResponse:
        if isinstance(exc, StoreError):
            logger.error("Store error on %s %s: %s", request.method, request.url.path, exc.message)
            body = {"success": False, "error": "Internal server error"}
            if expose_store_errors:
                body["details"] = exc.message
            return JSONResponse(status_code=exc.status_code, content=body)

        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
        details = [
            {
                "field": ".".join(str(part) for part in err.get("loc", ())[1:]),
                "message": err.get("msg", ""),
            }
            for err in exc.errors()
        ]
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"success": False, "error": "Validation failed", "details": details},
        )
