"""Domain exceptions for the task visibility service.

Business rule violations and collaborator failures, independent of the
transport. The presentation layer maps error_code to an HTTP status in
app.core.exception_handlers.
"""

from typing import Any


class TaskVisibilityException(Exception):
    """Base exception for all service errors.

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
        """Serialize for an error response body."""
        return {
            "error": self.error_code,
            "message": self.message,
            "details": self.details,
        }


class ValidationException(TaskVisibilityException):
    """Raised when input fails validation before any read or write."""

    def __init__(self, message: str, field: str | None = None) -> None:
        """Initialize with message and optional field name.

        Args:
            message: Description of the validation failure.
            field: Optional field that failed validation.
        """
        details = {"field": field} if field else {}
        super().__init__(message, "VALIDATION_ERROR", details)


class AuthenticationException(TaskVisibilityException):
    """Raised when the caller's identity cannot be established."""

    def __init__(self, message: str = "Authentication failed") -> None:
        super().__init__(message, "AUTHENTICATION_ERROR")


class AuthorizationException(TaskVisibilityException):
    """Raised when the caller lacks a role required for the operation."""

    def __init__(
        self,
        required_roles: list[str] | None = None,
        message: str = "Permission denied",
    ) -> None:
        """Initialize with the roles that would have been accepted.

        Args:
            required_roles: Roles any one of which grants access.
            message: Human-readable message.
        """
        details: dict[str, Any] = {}
        if required_roles:
            details["required_roles"] = required_roles
        super().__init__(message, "PERMISSION_DENIED", details)


class ResourceNotFoundException(TaskVisibilityException):
    """Raised when a requested resource is not found."""

    def __init__(self, resource_type: str, resource_id: str) -> None:
        """Initialize with resource type and id.

        Args:
            resource_type: Type of resource (e.g. 'task', 'student').
            resource_id: The ID that was not found.
        """
        super().__init__(
            f"{resource_type} not found: {resource_id}",
            "RESOURCE_NOT_FOUND",
            {"resource_type": resource_type, "resource_id": resource_id},
        )


class ImmutableFieldException(TaskVisibilityException):
    """Raised when an update tries to change a field fixed at creation."""

    def __init__(self, field: str) -> None:
        super().__init__(
            f"{field} cannot be changed after creation",
            "IMMUTABLE_FIELD",
            {"field": field},
        )


class UpstreamServiceException(TaskVisibilityException):
    """Raised when a collaborator service (e.g. student directory) is unavailable.

    Resolution cannot proceed without the collaborator, so this surfaces as
    its own failure instead of a "not visible" verdict. Callers may retry.
    """

    def __init__(
        self,
        service: str,
        message: str | None = None,
        status_code: int | None = None,
    ) -> None:
        """Initialize with the failing service name.

        Args:
            service: Logical name of the collaborator (e.g. 'student_directory').
            message: Optional human-readable message.
            status_code: Upstream HTTP status, when one was received.
        """
        details: dict[str, Any] = {"service": service}
        if status_code is not None:
            details["upstream_status"] = status_code
        super().__init__(
            message or f"Upstream service unavailable: {service}",
            "UPSTREAM_ERROR",
            details,
        )


class SqlNotConfiguredException(TaskVisibilityException):
    """Raised when an operation requires Postgres but DATABASE_URL is not set."""

    def __init__(self) -> None:
        super().__init__(
            message="This operation requires a SQL database that is not configured.",
            error_code="SERVICE_UNAVAILABLE",
        )
