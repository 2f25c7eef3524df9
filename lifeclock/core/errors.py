"""
Custom exception hierarchy for LifeClock.

Rule: every error has a machine-readable `code` string so clients
can branch on it without parsing English messages.

Storage errors (StoreUnavailableError, TransactionFailureError) are raised
by the durable backend only and are always absorbed by the PersistentStore
adapter. They never reach an HTTP client.
"""
from __future__ import annotations

from typing import Any

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette import status


# ---------------------------------------------------------------------------
# Exception classes
# ---------------------------------------------------------------------------

class LifeClockException(Exception):
    """Base class for all application-level errors."""
    http_status: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    code: str = "INTERNAL_ERROR"

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict:
        payload: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.details:
            payload["details"] = self.details
        return payload


class StoreUnavailableError(LifeClockException):
    http_status = status.HTTP_503_SERVICE_UNAVAILABLE
    code = "STORE_UNAVAILABLE"

    def __init__(self, reason: str):
        super().__init__(
            message=f"Persistent store unavailable: {reason}",
            details={"reason": reason},
        )


class TransactionFailureError(LifeClockException):
    http_status = status.HTTP_500_INTERNAL_SERVER_ERROR
    code = "TRANSACTION_FAILURE"

    def __init__(self, operation: str, reason: str):
        super().__init__(
            message=f"Store operation '{operation}' failed: {reason}",
            details={"operation": operation, "reason": reason},
        )


class LifeParametersValidationError(LifeClockException):
    http_status = status.HTTP_422_UNPROCESSABLE_ENTITY
    code = "INVALID_LIFE_PARAMETERS"

    def __init__(self, message: str, field: str):
        super().__init__(message=message, details={"field": field})


class LifeParametersMissingError(LifeClockException):
    http_status = status.HTTP_409_CONFLICT
    code = "LIFE_PARAMETERS_MISSING"

    def __init__(self):
        super().__init__(
            message="Life parameters are not set. PUT /parameters first.",
        )


class UnknownChoiceError(LifeClockException):
    http_status = status.HTTP_422_UNPROCESSABLE_ENTITY
    code = "UNKNOWN_CHOICE"

    def __init__(self, category: str, value: str):
        super().__init__(
            message=f"No catalog choice '{value}' for category '{category}'.",
            details={"category": category, "value": value},
        )


class ImportParseError(LifeClockException):
    http_status = status.HTTP_422_UNPROCESSABLE_ENTITY
    code = "IMPORT_PARSE_ERROR"

    def __init__(self, message: str, line: int | None = None, imported: int = 0):
        details: dict[str, Any] = {"imported_before_failure": imported}
        if line is not None:
            details["line"] = line
        super().__init__(message=f"Error importing data: {message}", details=details)


# ---------------------------------------------------------------------------
# FastAPI exception handlers
# ---------------------------------------------------------------------------

async def lifeclock_exception_handler(request: Request, exc: LifeClockException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.http_status,
        content=exc.to_dict(),
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Return structured 422 with machine-readable field errors."""
    field_errors = []
    for error in exc.errors():
        field_errors.append({
            "field": ".".join(str(loc) for loc in error["loc"] if loc != "body"),
            "message": error["msg"],
            "type": error["type"],
        })
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "code": "VALIDATION_ERROR",
            "message": "Request validation failed.",
            "details": {"errors": field_errors},
        },
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "code": "INTERNAL_ERROR",
            "message": "An unexpected error occurred.",
        },
    )
