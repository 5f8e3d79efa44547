"""Domain exceptions for the Guildhall application.

Defines domain-level exceptions that represent business rule violations.
These exceptions are independent of infrastructure concerns. Presentation
layer maps them to HTTP responses in exception handlers.
"""

from typing import Any


class GuildhallException(Exception):
    """Base exception for all Guildhall application errors.

    All custom exceptions should inherit from this class to allow
    consistent error handling and logging. Presentation layer maps
    these to HTTP responses using message, error_code, and details.

    Attributes:
        message: Human-readable error description.
        error_code: Machine-readable error code.
        details: Additional error context (e.g. field, resource_id).
    """

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error description.
            error_code: Optional machine-readable code; defaults to class name.
            details: Optional dict of extra context.
        """
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON body used by the API exception handler."""
        body: dict[str, Any] = {"error": self.error_code, "message": self.message}
        if self.details:
            body["details"] = self.details
        return body


class ValidationException(GuildhallException):
    """Raised when input validation fails (e.g. malformed automation definition)."""

    def __init__(self, message: str, field: str | None = None) -> None:
        """Initialize with message and optional field name.

        Args:
            message: Description of the validation failure.
            field: Optional field or attribute that failed validation.
        """
        details = {"field": field} if field else {}
        super().__init__(message, "VALIDATION_ERROR", details)


class AuthenticationException(GuildhallException):
    """Raised when a caller presents a missing or wrong secret."""

    def __init__(self, message: str = "Authentication failed") -> None:
        super().__init__(message, "AUTHENTICATION_ERROR")


class ResourceNotFoundException(GuildhallException):
    """Raised when a requested resource is not found."""

    def __init__(self, resource_type: str, resource_id: str) -> None:
        """Initialize with resource type and id.

        Args:
            resource_type: Type of resource (e.g. 'automation', 'member').
            resource_id: The ID that was not found.
        """
        super().__init__(
            f"{resource_type} not found: {resource_id}",
            "RESOURCE_NOT_FOUND",
            {"resource_type": resource_type, "resource_id": resource_id},
        )


class ActionExecutionException(GuildhallException):
    """Raised when one action's side effect fails.

    The action executor catches it and turns it into a failed ActionResult;
    it never escapes a run.
    """

    def __init__(self, action_type: str, cause: str) -> None:
        """Initialize with the failing action type and its cause.

        Args:
            action_type: Action type that failed (e.g. 'send_email').
            cause: Human-readable reason.
        """
        super().__init__(
            f"{action_type} failed: {cause}",
            "ACTION_EXECUTION_ERROR",
            {"action_type": action_type, "cause": cause},
        )
        self.action_type = action_type
        self.cause = cause


class ConfigurationException(GuildhallException):
    """Raised for unknown condition keys, operators or action types."""

    def __init__(self, message: str, key: str | None = None) -> None:
        details = {"key": key} if key else {}
        super().__init__(message, "CONFIGURATION_ERROR", details)


class SqlNotConfiguredException(GuildhallException):
    """Raised when an operation requires the database but DATABASE_URL is not set."""

    def __init__(self) -> None:
        super().__init__(
            message="This operation requires a SQL database that is not configured.",
            error_code="SERVICE_UNAVAILABLE",
        )
