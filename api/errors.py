"""
Module 07 - API Error Handling

Standardized error handling for the API.
"""

from typing import Any

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from api.models.responses import ErrorResponse, ErrorDetail
from core.schemas.errors import AllowlistError, ErrorCodes


class APIError(Exception):
    """Base API error with structured response."""

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = 400,
        details: dict[str, Any] | None = None,
    ):
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(message)

    def to_response(self) -> ErrorResponse:
        return ErrorResponse(
            ok=False,
            error=ErrorDetail(
                code=self.code,
                message=self.message,
                details=self.details,
            ),
        )


class InvalidRequestError(APIError):
    """Invalid request parameters or leaf values."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
        code: str = "INVALID_REQUEST",
    ):
        super().__init__(
            code=code,
            message=message,
            status_code=400,
            details=details,
        )


class LeafNotFoundError(APIError):
    """Requested value is not in the tree."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(
            code=ErrorCodes.LEAF_NOT_FOUND,
            message=message,
            status_code=404,
            details=details,
        )


class IndexOutOfRangeError(APIError):
    """Requested index is outside the stored values."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(
            code=ErrorCodes.INDEX_OUT_OF_RANGE,
            message=message,
            status_code=422,
            details=details,
        )


class TreeUnavailableError(APIError):
    """No tree dump could be loaded."""

    def __init__(self, message: str = "No tree is loaded", details: dict[str, Any] | None = None):
        super().__init__(
            code="TREE_UNAVAILABLE",
            message=message,
            status_code=503,
            details=details,
        )


class InternalError(APIError):
    """Internal server error."""

    def __init__(self, message: str = "Internal server error", details: dict[str, Any] | None = None):
        super().__init__(
            code="INTERNAL_ERROR",
            message=message,
            status_code=500,
            details=details,
        )


def from_allowlist_error(error: AllowlistError) -> APIError:
    """Map an error carried in an OperationResult to its HTTP error."""
    if error.code == ErrorCodes.LEAF_NOT_FOUND:
        return LeafNotFoundError(error.message, details=error.details)
    if error.code == ErrorCodes.INDEX_OUT_OF_RANGE:
        return IndexOutOfRangeError(error.message, details=error.details)
    return InvalidRequestError(error.message, details=error.details, code=error.code)


async def api_error_handler(request: Request, exc: APIError) -> JSONResponse:
    """Handle APIError exceptions."""
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_response().model_dump(mode="json"),
    )


async def request_validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report malformed request bodies with the standard error shape."""
    errors = [
        {"loc": [str(part) for part in err.get("loc", ())], "msg": err.get("msg", "")}
        for err in exc.errors()
    ]
    return JSONResponse(
        status_code=400,
        content=ErrorResponse(
            ok=False,
            error=ErrorDetail(
                code="INVALID_REQUEST",
                message="Request validation failed",
                details={"errors": errors},
            ),
        ).model_dump(mode="json"),
    )


async def generic_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions."""
    return JSONResponse(
        status_code=500,
        content=ErrorResponse(
            ok=False,
            error=ErrorDetail(
                code="INTERNAL_ERROR",
                message="An unexpected error occurred",
                details={"type": type(exc).__name__},
            ),
        ).model_dump(mode="json"),
    )
