"""
Custom exceptions and error codes for the CookPlan application.

This module provides:
- Structured error codes for categorized error handling
- Custom exception classes for specific failure scenarios
- Error response schema for consistent CLI/JSON output

Most of the cooking engine never raises: out-of-range inputs are clamped,
empty inputs produce empty plans and misuse of the execution state machine
is a logged no-op. Exceptions are reserved for the storage boundary and
for malformed input files.
"""
from enum import Enum
from typing import Optional, Dict, Any
from pydantic import BaseModel, ConfigDict


class ErrorCode(str, Enum):
    """
    Application-wide error codes for categorized error handling.

    Format: CATEGORY_SPECIFIC_ERROR
    Categories:
    - SESSION_*: Cooking session related errors
    - VALIDATION_*: Input validation errors
    - NOTIFICATION_*: Best-effort notification channels
    - DATABASE_*: Database operation errors
    """

    # Session-related errors
    SESSION_NOT_FOUND = "SESSION_NOT_FOUND"

    # Validation errors
    VALIDATION_INVALID_FORMAT = "VALIDATION_INVALID_FORMAT"

    # Notification errors (never surfaced to callers of the executor)
    NOTIFICATION_UNAVAILABLE = "NOTIFICATION_UNAVAILABLE"

    # Database errors
    DATABASE_QUERY_ERROR = "DATABASE_QUERY_ERROR"
    DATABASE_INTEGRITY_ERROR = "DATABASE_INTEGRITY_ERROR"

    # General errors
    INTERNAL_ERROR = "INTERNAL_ERROR"


class ErrorResponse(BaseModel):
    """Structured error response for CLI and JSON output."""
    error_code: ErrorCode
    message: str
    details: Optional[Dict[str, Any]] = None

    model_config = ConfigDict(use_enum_values=True)


class CookPlanError(Exception):
    """
    Base exception for all CookPlan application errors.

    Provides structured error information for consistent error handling.
    """

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        details: Optional[Dict[str, Any]] = None,
        exit_code: int = 1,
    ):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        self.exit_code = exit_code
        super().__init__(self.message)

    def to_response(self) -> ErrorResponse:
        """Convert exception to ErrorResponse for output."""
        return ErrorResponse(
            error_code=self.error_code,
            message=self.message,
            details=self.details if self.details else None,
        )


# Session-related exceptions

class SessionNotFoundError(CookPlanError):
    """Raised when a stored cooking session is not found."""

    def __init__(self, session_id: str, message: str = None):
        super().__init__(
            message=message or f"Cooking session '{session_id}' not found",
            error_code=ErrorCode.SESSION_NOT_FOUND,
            details={"session_id": session_id},
        )


# Input-related exceptions

class InvalidItemsFileError(CookPlanError):
    """Raised when an items or batches file cannot be parsed."""

    def __init__(self, path: str, reason: str):
        super().__init__(
            message=f"Could not read '{path}': {reason}",
            error_code=ErrorCode.VALIDATION_INVALID_FORMAT,
            details={"path": path, "reason": reason},
            exit_code=2,
        )


# Notification-related exceptions

class NotificationUnavailableError(CookPlanError):
    """Raised by a notification channel that cannot fire on this host."""

    def __init__(self, channel: str, reason: str = "not supported"):
        super().__init__(
            message=f"Notification channel '{channel}' unavailable: {reason}",
            error_code=ErrorCode.NOTIFICATION_UNAVAILABLE,
            details={"channel": channel, "reason": reason},
        )


# Database-related exceptions

class DatabaseError(CookPlanError):
    """Base exception for database-related errors."""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.DATABASE_QUERY_ERROR,
        details: Dict[str, Any] = None,
    ):
        super().__init__(
            message=message,
            error_code=error_code,
            details=details,
        )


class DatabaseIntegrityError(DatabaseError):
    """Raised when a database integrity constraint is violated."""

    def __init__(self, constraint: str, details: Dict[str, Any] = None):
        super().__init__(
            message=f"Database integrity error: {constraint}",
            error_code=ErrorCode.DATABASE_INTEGRITY_ERROR,
            details=details,
        )
