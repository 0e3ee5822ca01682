"""
Custom exception classes for the governance scoring core.

The scoring engines degrade through clamping and sentinel values instead of
raising on numeric extremes. The exceptions below cover the remaining failure
scenarios: malformed content files, invalid configuration and lookups that
the caller requires to succeed.
"""

from __future__ import annotations

from typing import Any


class GovScoreError(Exception):
    """Base exception for all scoring-core errors."""

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
        """Provide a user-friendly version of the error message."""
        return "An unexpected error occurred. Please try again."

    def __str__(self) -> str:
        return f"{self.__class__.__name__}: {self.message}"


class ValidationError(GovScoreError):
    """Raised when an input record cannot be used by an engine."""

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

    def _get_default_user_message(self) -> str:
        return f"Please check your input for {self.field.replace('_', ' ')} and try again."


class ConfigurationError(GovScoreError):
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


class ContentError(GovScoreError):
    """Raised when a question bank or template file is missing or malformed."""

    def __init__(
        self,
        message: str,
        file_path: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        self.file_path = file_path
        super().__init__(
            message=message,
            details=details or {"file_path": file_path},
            user_message="Assessment content could not be loaded. Please check the data files.",
        )


class QuestionNotFoundError(GovScoreError):
    """Raised when a question id is not part of the question bank."""

    def __init__(self, question_id: str):
        self.question_id = question_id
        super().__init__(
            message=f"Question with ID {question_id} not found",
            details={"question_id": question_id},
        )

    def _get_default_user_message(self) -> str:
        return "The selected question could not be found. Please refresh and try again."


def create_user_friendly_error_message(error: Exception) -> str:
    """
    Create a user-friendly error message from any exception.

    Args:
        error: The exception to convert

    Returns:
        User-friendly error message

    Example:
        >>> error = ValidationError("team_size", "must not be negative")
        >>> message = create_user_friendly_error_message(error)
        >>> print(message)  # "Invalid team size: must not be negative"
    """
    if isinstance(error, GovScoreError):
        return error.user_message

    error_type = type(error).__name__
    messages = {
        "ValueError": "Invalid input provided. Please check your data and try again.",
        "KeyError": "Required information is missing. Please check your input.",
        "TypeError": "Incorrect data type provided. Please check your input format.",
    }
    return messages.get(
        error_type, "An unexpected error occurred. Please try again or contact support."
    )


def log_error_details(error: Exception, context: dict[str, Any] | None = None) -> dict[str, Any]:
    """
    Create structured error details for logging.

    Args:
        error: The exception to log
        context: Additional context information

    Returns:
        Dictionary with structured error details

    Example:
        >>> error = ContentError("File not found", file_path="questions.json")
        >>> details = log_error_details(error, {"project_id": "p-1"})
        >>> print(details["error_type"])  # "ContentError"
    """
    details = {
        "error_type": type(error).__name__,
        "error_message": str(error),
        "context": context or {},
    }

    if isinstance(error, GovScoreError):
        details.update({"user_message": error.user_message, "error_details": error.details})

    return details
