from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Standard error response schema."""

    error: str
    detail: str | None = None
    status_code: int


class AppError(Exception):
    """Base application exception."""

    def __init__(self, message: str, status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR) -> None:
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)


# ---------------------------------------------------------------------------
# Validation errors
# ---------------------------------------------------------------------------


class InvalidRange(AppError):
    """Bad date range or half-day shape."""

    def __init__(self, message: str) -> None:
        super().__init__(message, status_code=status.HTTP_422_UNPROCESSABLE_ENTITY)


# ---------------------------------------------------------------------------
# Business-rule errors
# ---------------------------------------------------------------------------


class InsufficientBalance(AppError):
    def __init__(self, message: str = "Insufficient leave balance") -> None:
        super().__init__(message, status_code=status.HTTP_400_BAD_REQUEST)


class NoAllocation(AppError):
    def __init__(self, message: str = "No leave allocation found for this leave type") -> None:
        super().__init__(message, status_code=status.HTTP_400_BAD_REQUEST)


class OverlappingRequest(AppError):
    def __init__(self, message: str = "You already have a leave request for these dates") -> None:
        super().__init__(message, status_code=status.HTTP_409_CONFLICT)


# ---------------------------------------------------------------------------
# Authorization and lookup errors
# ---------------------------------------------------------------------------


class Unauthenticated(AppError):
    def __init__(self, message: str = "Unauthorized") -> None:
        super().__init__(message, status_code=status.HTTP_401_UNAUTHORIZED)


class Forbidden(AppError):
    def __init__(self, message: str = "Not permitted") -> None:
        super().__init__(message, status_code=status.HTTP_403_FORBIDDEN)


class NotFound(AppError):
    def __init__(self, message: str = "Not found") -> None:
        super().__init__(message, status_code=status.HTTP_404_NOT_FOUND)


# ---------------------------------------------------------------------------
# State and consistency errors
# ---------------------------------------------------------------------------


class InvalidTransition(AppError):
    def __init__(self, message: str) -> None:
        super().__init__(message, status_code=status.HTTP_409_CONFLICT)


class ConflictRetryable(AppError):
    """The ledger changed underneath a transition; the caller may retry."""

    def __init__(self, message: str = "Leave account changed concurrently, please retry") -> None:
        super().__init__(message, status_code=status.HTTP_409_CONFLICT)


async def _app_exception_handler(request: Request, exc: AppError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(
            error=type(exc).__name__,
            detail=exc.message,
            status_code=exc.status_code,
        ).model_dump(),
    )


async def _validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=ErrorResponse(
            error="ValidationError",
            detail=str(exc.errors()),
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        ).model_dump(),
    )


def setup_exception_handlers(app: FastAPI) -> None:
    """Register exception handlers on the application."""
    app.add_exception_handler(AppError, _app_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, _validation_exception_handler)  # type: ignore[arg-type]
