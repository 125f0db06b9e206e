"""Errors raised by the program engine.

Each class carries the HTTP status it maps to and a ``details`` dict that
`core.error_handlers` copies into the response envelope. Quiz scoring and
dietary substitution accept any answers or ingredients; they raise only
`InvalidChoiceError`, when a category, level, location or dietary
preference is outside its closed set.
"""

from typing import Any, Dict, Iterable, Optional


class AppException(Exception):
    """Base class for errors that are reported to API clients.

    Attributes:
        message: Human-readable error message.
        status_code: HTTP status code of the response.
        details: Extra context for the client (field names, keys looked up).
    """

    status_code = 500

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.details = dict(details or {})

    def to_dict(self) -> Dict[str, Any]:
        """The ``error`` object of the response envelope."""
        body = {"message": self.message, "status_code": self.status_code}
        if self.details:
            body["details"] = self.details
        return body


class NotFoundError(AppException):
    """No record exists for the key a client asked about."""

    status_code = 404

    def __init__(self, resource: str, identifier: Any):
        """
        Args:
            resource: Kind of record ('Program', 'QuizResult', 'MealSubstitute').
            identifier: The key that was looked up, usually an email.
        """
        super().__init__(
            f"{resource} not found for '{identifier}'",
            details={"resource": resource, "id": identifier},
        )


class ConflictError(AppException):
    """The record already exists and may not be written twice."""

    status_code = 409

    def __init__(self, message: str, **keys: Any):
        super().__init__(message, details=keys)


class ValidationError(AppException):
    status_code = 400

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message, details={"field": field} if field else None)


class InvalidChoiceError(ValidationError):
    """A category, level, location or preference outside its closed set."""

    def __init__(self, field: str, value: Any, allowed: Iterable[str]):
        allowed = list(allowed)
        super().__init__(f"Invalid {field}: {value!r}. Must be one of: {', '.join(allowed)}", field=field)
        self.details["allowed"] = allowed


class DatabaseError(AppException):
    """The record store could not be reached or refused an operation."""

    def __init__(self, message: str, operation: Optional[str] = None):
        super().__init__(message, details={"operation": operation} if operation else None)


class InsufficientDataError(AppException):
    """The static content has no rows for a program combination.

    The keyword arguments (category, level, location, ...) name the
    combination that came up empty.
    """

    status_code = 400

    def __init__(self, message: str, **context: Any):
        super().__init__(message, details=context)


class ConfigurationError(AppException):
    """An environment setting holds a value the engine cannot use."""

    def __init__(self, message: str, config_key: Optional[str] = None):
        super().__init__(message, details={"config_key": config_key} if config_key else None)
