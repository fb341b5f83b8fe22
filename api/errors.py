"""
Module 09D - API Error Handling

Standardized error handling for the API.
"""

from typing import Any

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from api.models.responses import ErrorResponse, ErrorDetail
from core.schemas import ErrorCodes, InvalidRequestException, SwarmProofException, VerificationNotFound


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
    """Invalid request parameters."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
        code: str = ErrorCodes.INVALID_REQUEST,
    ):
        super().__init__(
            code=code,
            message=message,
            status_code=400,
            details=details,
        )


class NotFoundError(APIError):
    """Requested record does not exist."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(
            code=ErrorCodes.VERIFICATION_NOT_FOUND,
            message=message,
            status_code=404,
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


def from_domain_error(exc: SwarmProofException) -> APIError:
    """Map a domain exception onto its HTTP classification."""
    if isinstance(exc, VerificationNotFound):
        return NotFoundError(exc.message, details=exc.details)
    if isinstance(exc, InvalidRequestException):
        return InvalidRequestError(exc.message, details=exc.details, code=exc.code)
    return InternalError(details={"type": type(exc).__name__})


async def api_error_handler(request: Request, exc: APIError) -> JSONResponse:
    """Handle APIError exceptions."""
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_response().model_dump(),
    )


async def domain_error_handler(request: Request, exc: SwarmProofException) -> JSONResponse:
    """Handle domain exceptions that escaped a route."""
    return await api_error_handler(request, from_domain_error(exc))


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report request body/query validation failures as INVALID_REQUEST."""
    errors = [
        {"loc": [str(part) for part in err.get("loc", ())], "msg": err.get("msg", "")}
        for err in exc.errors()
    ]
    return await api_error_handler(
        request,
        InvalidRequestError("Request validation failed", details={"errors": errors}),
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
        ).model_dump(),
    )
