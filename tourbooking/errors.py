"""
Domain exceptions for the booking service.

Services raise these; the handlers registered in ``tourbooking.main``
render them as ``{"success": false, "error": ...}`` with the status code
carried by the exception class.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from fastapi import status

if TYPE_CHECKING:
    from tourbooking.models import ValidationResult


class DomainError(Exception):
    """Base exception for all domain-specific errors."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(
        self,
        message: str,
        *,
        validation_type: str | None = None,
        details: Any = None,
    ) -> None:
        self.message = message
        self.validation_type = validation_type
        self.details = details or {}
        super().__init__(message)

    def to_body(self) -> dict[str, Any]:
        body: dict[str, Any] = {"success": False, "error": self.message}
        if self.validation_type:
            body["validation_type"] = self.validation_type
        if self.details:
            body["details"] = self.details
        return body


class ValidationFailedError(DomainError):
    """Raised when input breaks a static rule (format, bounds, state)."""

    status_code = status.HTTP_400_BAD_REQUEST


class InvalidDateError(ValidationFailedError, ValueError):
    """Raised for dates that are not strict ``YYYY-MM-DD`` calendar dates."""


class DuplicateDateError(ValidationFailedError):
    """Raised when a blackout date is already registered."""


class InvalidStatusTransitionError(ValidationFailedError):
    """Raised when a booking status change is not allowed."""


class NotFoundError(DomainError):
    """Raised when a requested entity does not exist."""

    status_code = status.HTTP_404_NOT_FOUND


class DateNotFoundError(NotFoundError):
    """Raised when removing a blackout date that is not registered."""


class ConflictError(DomainError):
    """Raised when a write collides with existing data."""

    status_code = status.HTTP_409_CONFLICT


class BookingRejectedError(DomainError):
    """Raised when the booking validator rejects a create or update."""

    def __init__(self, result: ValidationResult) -> None:
        super().__init__(
            result.error or "Booking validation failed",
            validation_type=result.validation_type,
        )
        self.result = result
        self.status_code = result.http_status


def format_validation_errors(errors: list[dict[str, Any]]) -> list[dict[str, str]]:
    """Flatten pydantic error dicts into JSON-safe ``{field, message}`` pairs."""
    return [
        {
            "field": ".".join(str(part) for part in err.get("loc", ()) if part != "body"),
            "message": err.get("msg", "Invalid value"),
        }
        for err in errors
    ]
