# =============================================================================
# app/exceptions.py - Custom Exceptions and Handlers
# =============================================================================
# Centralized exception handling for the API.
# Errors carry a machine-readable code and, where useful, a suggestion on
# how to fix the request.
#
# Taxonomy:
#   ValidationError  -> 400  (payload failed schema checks)
#   ForbiddenError   -> 403  (caller may not touch this entity)
#   NotFoundError    -> 404  (referenced entity does not exist)
#   StorageError     -> 500  (database call failed; detail logged only)
# =============================================================================

import logging
from typing import Any

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)

GENERIC_ERROR_MESSAGE = "An unexpected error occurred"


class GlassException(Exception):
    """
    Base exception for the Glass API.

    All custom exceptions inherit from this class.
    Provides structured error responses with actionable suggestions.
    """

    def __init__(
        self,
        message: str,
        code: str = "GLASS_ERROR",
        status_code: int = 500,
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.suggestion = suggestion
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to API response dict."""
        result = {
            "detail": self.message,
            "code": self.code,
        }
        if self.suggestion:
            result["suggestion"] = self.suggestion
        if self.details:
            result["details"] = self.details
        return result


# =============================================================================
# Request Exceptions
# =============================================================================

class ValidationError(GlassException):
    """
    Raised when a payload fails schema validation.

    Only the first failing field is reported, as `field: message`.
    """

    def __init__(self, message: str, field: str | None = None):
        super().__init__(
            message=f"{field}: {message}" if field else message,
            code="VALIDATION_ERROR",
            status_code=400,
            details={"field": field} if field else None,
        )
        self.field = field


class NotFoundError(GlassException):
    """Raised when an entity id doesn't exist."""

    def __init__(self, entity: str, entity_id: int | str):
        super().__init__(
            message=f"{entity} not found",
            code=f"{entity.upper().replace(' ', '_')}_NOT_FOUND",
            status_code=404,
            suggestion=f"Check that the {entity.lower()} id is correct",
            details={"id": entity_id},
        )
        self.entity = entity
        self.entity_id = entity_id


class ForbiddenError(GlassException):
    """Raised when the caller is authenticated but may not act on an entity."""

    def __init__(self, message: str = "You do not have access to this resource"):
        super().__init__(
            message=message,
            code="FORBIDDEN",
            status_code=403,
        )


# =============================================================================
# Storage Exceptions
# =============================================================================

class StorageError(GlassException):
    """
    Raised when a database call fails.

    The original error text is kept in `details` for logging; clients only
    ever see the generic message.
    """

    def __init__(self, action: str, error: str, details: dict[str, Any] | None = None):
        super().__init__(
            message=f"Failed to {action}: {error}",
            code="STORAGE_ERROR",
            status_code=500,
            suggestion="Try again later or contact support if the issue persists",
            details={"action": action, "error": error, **(details or {})},
        )
        self.action = action


class RowMappingError(StorageError):
    """Raised when a stored row can't be normalized into an API entity."""

    def __init__(self, table: str, row_id: Any, error: str):
        super().__init__(
            action=f"map {table} row",
            error=error,
            details={"table": table, "row_id": row_id},
        )


# =============================================================================
# Exception Handlers
# =============================================================================

async def glass_exception_handler(
    request: Request,
    exc: GlassException
) -> JSONResponse:
    """
    Convert GlassException to JSON response.

    Server-side failures are logged with their details and answered with a
    generic message so internal errors never reach the client.
    """
    if exc.status_code >= 500:
        logger.error(
            f"{exc.code} on {request.method} {request.url.path}: {exc.message}",
            extra={"details": exc.details},
        )
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": GENERIC_ERROR_MESSAGE, "code": exc.code},
        )

    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict()
    )


async def validation_exception_handler(
    request: Request,
    exc: RequestValidationError
) -> JSONResponse:
    """
    Handle FastAPI request validation errors (path params, malformed bodies).

    Reports the first issue only, matching ValidationError.
    """
    errors = exc.errors()
    message = "Invalid request"
    field = None
    if errors:
        first = errors[0]
        message = first.get("msg", message)
        loc = [str(part) for part in first.get("loc", ()) if part != "body"]
        field = ".".join(loc) or None

    return JSONResponse(
        status_code=400,
        content=ValidationError(message, field=field).to_dict(),
    )
