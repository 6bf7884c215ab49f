from __future__ import annotations

import uuid
from datetime import date
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Standard error response schema."""

    error: str
    detail: str | None = None
    status_code: int
    context: dict[str, Any] | None = None


class AppError(Exception):
    """Base application exception."""

    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        context: dict[str, Any] | None = None,
    ) -> None:
        self.message = message
        self.status_code = status_code
        self.context = context
        super().__init__(self.message)


class NotFound(AppError):
    def __init__(self, message: str) -> None:
        super().__init__(message, status_code=status.HTTP_404_NOT_FOUND)


class RequestNotFound(NotFound):
    def __init__(self, kind: str, request_id: uuid.UUID) -> None:
        self.kind = kind
        self.request_id = request_id
        super().__init__(f"{kind.capitalize()} request {request_id} not found")


class Forbidden(AppError):
    def __init__(self, message: str) -> None:
        super().__init__(message, status_code=status.HTTP_403_FORBIDDEN)


# ---------------------------------------------------------------------------
# Creation-time validation failures
# ---------------------------------------------------------------------------


class InvalidRange(AppError):
    """The date range is inverted or contains no business day."""

    def __init__(self, start_date: date, end_date: date) -> None:
        self.start_date = start_date
        self.end_date = end_date
        super().__init__(
            "Date range must include at least one business day",
            status_code=status.HTTP_400_BAD_REQUEST,
            context={"start_date": start_date.isoformat(), "end_date": end_date.isoformat()},
        )


class UnknownLeaveType(AppError):
    def __init__(self, leave_type: str, reason: str = "no leave balance found") -> None:
        self.leave_type = leave_type
        super().__init__(
            f"Unknown leave type {leave_type}: {reason}",
            status_code=status.HTTP_400_BAD_REQUEST,
            context={"leave_type": leave_type},
        )


class InsufficientBalance(AppError):
    """Soft failure: callers may store the request as auto-denied instead."""

    def __init__(self, leave_type: str, requested: int, available: float) -> None:
        self.leave_type = leave_type
        self.requested = requested
        self.available = available
        super().__init__(
            f"Insufficient {leave_type} leave balance. Requested: {requested} days, Available: {available} days",
            status_code=status.HTTP_400_BAD_REQUEST,
            context={"requested": requested, "available": available},
        )


class OverlappingRequest(AppError):
    def __init__(self, conflicting_id: uuid.UUID, conflicting_status: str, start_date: date, end_date: date) -> None:
        self.conflicting_id = conflicting_id
        self.conflicting_status = conflicting_status
        super().__init__(
            f"Leave request overlaps with existing {conflicting_status} request "
            f"from {start_date.isoformat()} to {end_date.isoformat()}",
            status_code=status.HTTP_409_CONFLICT,
            context={"conflicting_id": str(conflicting_id), "status": conflicting_status},
        )


# ---------------------------------------------------------------------------
# Lifecycle failures
# ---------------------------------------------------------------------------


class InvalidTransition(AppError):
    def __init__(self, kind: str, current_status: str, action: str, reason: str | None = None) -> None:
        self.kind = kind
        self.current_status = current_status
        self.action = action
        message = f"Cannot {action} a {kind} request in status '{current_status}'"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(
            message,
            status_code=status.HTTP_400_BAD_REQUEST,
            context={"kind": kind, "status": current_status, "action": action},
        )


class ConcurrencyConflict(AppError):
    """The record changed since the caller fetched it. Refresh and retry."""

    def __init__(self, kind: str, request_id: uuid.UUID, expected: str, actual: str) -> None:
        self.kind = kind
        self.request_id = request_id
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Concurrency conflict for {kind} request {request_id}: "
            f"expected state '{expected}' but found '{actual}'. Refresh and retry.",
            status_code=status.HTTP_409_CONFLICT,
            context={"expected": expected, "actual": actual},
        )


class SwapExecutionError(AppError):
    """The shift exchange could not be applied; the approval did not complete."""

    def __init__(self, swap_id: uuid.UUID, reason: str, details: dict[str, Any] | None = None) -> None:
        self.swap_id = swap_id
        self.reason = reason
        super().__init__(
            f"Failed to execute swap {swap_id}: {reason}",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            context={"swap_id": str(swap_id), "reason": reason, **(details or {})},
        )


class SystemCommentProtected(AppError):
    def __init__(self, operation: str) -> None:
        self.operation = operation
        super().__init__(
            f"Cannot {operation} system-generated comments",
            status_code=status.HTTP_403_FORBIDDEN,
            context={"operation": operation},
        )


async def _app_exception_handler(request: Request, exc: AppError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(
            error=type(exc).__name__,
            detail=exc.message,
            status_code=exc.status_code,
            context=exc.context,
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
