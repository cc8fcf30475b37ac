"""Translation of tenancy errors into HTTP responses.

Route handlers catch ``TenancyError`` and raise the result of
``to_http_exception``. The application registers ``tenancy_error_handler``
so the structured details travel next to the message in the body.
"""

from __future__ import annotations

from typing import Any

from fastapi import HTTPException, Request, status
from fastapi.responses import JSONResponse

from tenancy.domain.exceptions import (
    AuthorizationError,
    ConflictError,
    ForbiddenFieldError,
    NotFoundError,
    TenancyError,
    ValidationError,
)
from tenancy.ports.exceptions import DuplicateRoomNumberError


class TenancyHTTPException(HTTPException):
    """HTTPException that also carries the domain error's details."""

    def __init__(
        self,
        status_code: int,
        detail: str,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(status_code=status_code, detail=detail)
        self.details = details or {}


def status_for(error: TenancyError) -> int:
    """HTTP status code for a domain error.

    Order matters: a duplicate room number is both a validation error and
    a conflict, and is reported as a conflict.
    """
    if isinstance(error, ForbiddenFieldError):
        return status.HTTP_400_BAD_REQUEST
    if isinstance(error, DuplicateRoomNumberError):
        return status.HTTP_409_CONFLICT
    if isinstance(error, ValidationError):
        return status.HTTP_422_UNPROCESSABLE_ENTITY
    if isinstance(error, NotFoundError):
        return status.HTTP_404_NOT_FOUND
    if isinstance(error, AuthorizationError):
        return status.HTTP_403_FORBIDDEN
    if isinstance(error, ConflictError):
        return status.HTTP_409_CONFLICT
    return status.HTTP_400_BAD_REQUEST


def to_http_exception(error: TenancyError) -> TenancyHTTPException:
    return TenancyHTTPException(
        status_code=status_for(error),
        detail=error.message,
        details=error.details,
    )


def invalid_id(kind: str) -> HTTPException:
    """400 response for a path or body id that is not a valid ULID."""
    return HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail=f"Invalid {kind} ID format",
    )


async def tenancy_error_handler(
    request: Request, exc: TenancyHTTPException
) -> JSONResponse:
    """Render ``{"detail": message, "details": {...}}``."""
    body: dict[str, Any] = {"detail": exc.detail}
    if exc.details:
        body["details"] = exc.details
    return JSONResponse(status_code=exc.status_code, content=body)
