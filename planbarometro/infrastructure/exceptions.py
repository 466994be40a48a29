"""
Custom exception classes for the Planbarómetro service.

Provides structured error handling with user-friendly messages. The scoring
and alert functions are total and never raise these; they belong to the
persistence, configuration and web layers around them.
"""

from __future__ import annotations

from typing import Any


class PlanbarometroError(Exception):
    """Base exception for all application errors."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
        user_message: str | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.user_message = user_message or self._get_default_user_message()

    def _get_default_user_message(self) -> str:
        return "An unexpected error occurred. Please try again."

    def __str__(self) -> str:
        return f"{self.__class__.__name__}: {self.message}"


class ValidationError(PlanbarometroError):
    """Raised when input validation fails."""

    def __init__(
        self, field: str, message: str, value: Any = None, details: dict[str, Any] | None = None
    ):
        self.field = field
        self.value = value
        super().__init__(
            message=f"Validation failed for field '{field}': {message}",
            details=details or {"field": field, "value": value},
            user_message=f"Invalid {field.replace('_', ' ')}: {message}",
        )


class MultipleValidationError(PlanbarometroError):
    """Raised when several fields fail validation at once."""

    def __init__(self, errors: list[ValidationError]):
        self.validation_errors = errors
        messages = [f"{e.field}: {e.message}" for e in errors]
        super().__init__(
            message=f"Multiple validation errors: {'; '.join(messages)}",
            details={
                "errors": [
                    {"field": e.field, "message": e.message, "value": e.value} for e in errors
                ]
            },
            user_message="Please correct the following errors and try again.",
        )


class DatabaseError(PlanbarometroError):
    """Raised when database operations fail."""

    def __init__(self, message: str, operation: str, details: dict[str, Any] | None = None):
        self.operation = operation
        super().__init__(
            message=f"Database error during {operation}: {message}",
            details=details or {"operation": operation},
            user_message="A database error occurred. Please try again in a moment.",
        )


class ConnectionError(DatabaseError):
    """Raised when the database cannot be reached."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message=message, operation="connection", details=details)


class IntegrityError(DatabaseError):
    """Raised when database integrity constraints are violated."""

    def __init__(
        self,
        message: str,
        constraint: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        self.constraint = constraint
        super().__init__(
            message=message,
            operation="integrity_check",
            details=details or {"constraint": constraint},
        )


class EvaluationNotFoundError(PlanbarometroError):
    """Raised when a stored evaluation does not exist."""

    def __init__(self, evaluation_id: int):
        self.evaluation_id = evaluation_id
        super().__init__(
            message=f"Evaluation with ID {evaluation_id} not found",
            details={"evaluation_id": evaluation_id},
            user_message="The selected evaluation could not be found.",
        )


class BestPracticeNotFoundError(PlanbarometroError):
    """Raised when a best practice does not exist or has been retired."""

    def __init__(self, practice_id: int):
        self.practice_id = practice_id
        super().__init__(
            message=f"Best practice with ID {practice_id} not found",
            details={"practice_id": practice_id},
            user_message="The selected best practice could not be found.",
        )


class ModelNotFoundError(PlanbarometroError):
    """Raised when an unknown capability model id is requested."""

    def __init__(self, model_id: str):
        self.model_id = model_id
        super().__init__(
            message=f"Capability model '{model_id}' not found",
            details={"model_id": model_id},
            user_message=f"Unknown evaluation model '{model_id}'.",
        )


class ConfigurationError(PlanbarometroError):
    """Raised when configuration is invalid."""

    def __init__(
        self,
        message: str,
        config_key: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        self.config_key = config_key
        super().__init__(
            message=message,
            details=details or {"config_key": config_key},
            user_message="Configuration error. Please check your settings.",
        )


class ExportError(PlanbarometroError):
    """Raised when an evaluation export fails."""

    def __init__(
        self,
        message: str,
        export_format: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        self.export_format = export_format
        super().__init__(
            message=message,
            details=details or {"export_format": export_format},
            user_message="Export failed. Please try again or choose a different format.",
        )


def handle_database_error(e: Exception, operation: str = "database operation") -> DatabaseError:
    """
    Convert generic database exceptions to the matching application error.

    Example:
        >>> try:
        ...     session.commit()
        >>> except Exception as e:
        ...     raise handle_database_error(e, "commit transaction")
    """
    error_msg = str(e).lower()

    if "connection" in error_msg or "timeout" in error_msg:
        return ConnectionError(str(e))
    elif "unique constraint" in error_msg or "duplicate" in error_msg:
        return IntegrityError(str(e), constraint="unique")
    elif "foreign key" in error_msg or "foreign_key" in error_msg:
        return IntegrityError(str(e), constraint="foreign_key")
    elif "check constraint" in error_msg:
        return IntegrityError(str(e), constraint="check")
    else:
        return DatabaseError(str(e), operation)


def create_user_friendly_error_message(error: Exception) -> str:
    if isinstance(error, PlanbarometroError):
        return error.user_message

    messages = {
        "ValueError": "Invalid input provided. Please check your data and try again.",
        "KeyError": "Required information is missing. Please check your input.",
        "TypeError": "Incorrect data type provided. Please check your input format.",
    }
    return messages.get(
        type(error).__name__, "An unexpected error occurred. Please try again or contact support."
    )


def log_error_details(error: Exception, context: dict[str, Any] | None = None) -> dict[str, Any]:
    """
    Create structured error details for logging.

    Example:
        >>> details = log_error_details(EvaluationNotFoundError(7), {"lang": "es"})
        >>> details["error_type"]
        'EvaluationNotFoundError'
    """
    details = {
        "error_type": type(error).__name__,
        "error_message": str(error),
        "context": context or {},
    }

    if isinstance(error, PlanbarometroError):
        details.update({"user_message": error.user_message, "error_details": error.details})

    return details
