# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Error taxonomy shared by the assessment and roster services.

This module defines the exception hierarchy raised by every domain service:
- EduPracticeError: Base exception for all service errors
- ValidationError: Malformed or empty input, nothing written
- NotFoundError: Referenced question set, class, subject or student is missing
- ConflictError: Uniqueness or single-assignment invariant violated
- CapacityError: Class is already at its maximum number of students
- PersistenceError: Underlying storage failure, never retried here

The HTTP layer maps each class to a status code through ``http_status``.
"""

from typing import Any


class EduPracticeError(Exception):
    """Base exception for all service errors.

    Attributes:
        message: Human-readable error description.
        details: Optional dictionary with additional error context.
    """

    code = "error"
    http_status = 500

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        """Initialize service error.

        Args:
            message: Human-readable error description.
            details: Optional dictionary with additional error context.
        """
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        """Return string representation with details if available."""
        if self.details:
            return f"{self.message} - Details: {self.details}"
        return self.message

    def to_dict(self) -> dict[str, Any]:
        """Serialize the error for API responses."""
        return {
            "success": False,
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


class ValidationError(EduPracticeError):
    """Submission or mutation input is malformed."""

    code = "validation_error"
    http_status = 422


class NotFoundError(EduPracticeError):
    """A referenced entity does not exist."""

    code = "not_found"
    http_status = 404


class ConflictError(EduPracticeError):
    """A uniqueness or single-assignment invariant would be violated."""

    code = "conflict"
    http_status = 409


class CapacityError(EduPracticeError):
    """The class already holds its maximum number of active students.

    Attributes:
        max_students: Capacity of the class.
    """

    code = "capacity_exceeded"
    http_status = 409

    def __init__(
        self,
        message: str,
        max_students: int | None = None,
        details: dict[str, Any] | None = None,
    ):
        self.max_students = max_students
        details = dict(details or {})
        if max_students is not None:
            details.setdefault("max_students", max_students)
        super().__init__(message, details)


class PersistenceError(EduPracticeError):
    """Storage failure.

    Attributes:
        original_error: The underlying SQLAlchemy or driver error.
    """

    code = "persistence_error"
    http_status = 503

    def __init__(
        self,
        message: str,
        original_error: Exception | None = None,
        details: dict[str, Any] | None = None,
    ):
        self.original_error = original_error
        super().__init__(message, details)

    def __str__(self) -> str:
        """Return string representation including the underlying error."""
        base = super().__str__()
        if self.original_error:
            return f"{base}: {self.original_error}"
        return base
