"""
Custom exception classes for the application.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from contactbook.contacts.validation import FieldViolation


class AppException(Exception):
    """Base exception for application errors."""

    def __init__(
        self,
        message: str,
        code: str = "APP_ERROR",
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize application exception.

        Args:
            message: Human-readable error message.
            code: Machine-readable error code.
            details: Additional error details.
        """
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}


class NotFoundError(AppException):
    """Raised when a referenced record does not exist."""

    def __init__(
        self,
        message: str = "Not found",
        code: str = "NOT_FOUND",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, code, details)


class ValidationError(AppException):
    """Raised when business validation fails (distinct from pydantic ValidationError)."""

    def __init__(
        self,
        message: str,
        code: str = "VALIDATION_ERROR",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, code, details)


# =============================================================================
# Contact domain exceptions
# =============================================================================


class ContactNotFoundError(NotFoundError):
    """Raised when an operation references a contact id that is not stored."""

    def __init__(self, contact_id: int | str, message: str | None = None) -> None:
        self.contact_id = contact_id
        super().__init__(
            message or "Contact not found",
            "CONTACT_NOT_FOUND",
            {"contact_id": contact_id},
        )


class ContactValidationError(ValidationError):
    """Raised when submitted contact fields break one or more field rules.

    Every violation found on the field set is carried, not just the first.
    """

    def __init__(self, violations: list[FieldViolation]) -> None:
        self.violations = list(violations)
        message = "Validation error: " + "; ".join(v.message for v in self.violations)
        super().__init__(
            message,
            "VALIDATION_ERROR",
            {"errors": [v.as_dict() for v in self.violations]},
        )

    @property
    def fields(self) -> list[str]:
        """Distinct violated field names, in report order."""
        return list(dict.fromkeys(v.field for v in self.violations))


class UniquenessViolationError(AppException):
    """Raised when another contact already holds the same email or phone."""

    MESSAGES = {
        "email": "This email is already registered",
        "phone": "This phone number is already registered",
    }

    def __init__(self, field: str, message: str | None = None) -> None:
        self.field = field
        super().__init__(
            message or self.MESSAGES.get(field, f"This {field} is already registered"),
            "UNIQUENESS_VIOLATION",
            {"field": field},
        )


class StoreUnavailableError(AppException):
    """Raised when the underlying storage fails."""

    def __init__(
        self,
        message: str = "Contact store unavailable",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, "STORE_UNAVAILABLE", details)
