"""Domain exceptions for Control+ Oficina.

Defines domain-level exceptions that represent business rule violations.
These exceptions are independent of infrastructure concerns. Presentation
layer maps them to HTTP responses in exception handlers.
"""

from typing import Any


class ControlPlusException(Exception):
    """Base exception for all Control+ application errors.

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
        """Return the JSON body used by the exception handlers."""
        return {
            "error": self.error_code,
            "message": self.message,
            "details": self.details,
        }


class ValidationException(ControlPlusException):
    """Raised when input validation fails (e.g. passwords do not match)."""

    def __init__(self, message: str, field: str | None = None) -> None:
        """Initialize with message and optional field name.

        Args:
            message: Description of the validation failure.
            field: Optional field or attribute that failed validation.
        """
        details = {"field": field} if field else {}
        super().__init__(message, "VALIDATION_ERROR", details)


class AuthenticationException(ControlPlusException):
    """Raised when authentication fails (invalid credentials or token)."""

    def __init__(
        self,
        message: str = "Authentication failed",
        provider_code: str | None = None,
    ) -> None:
        """Initialize with optional message and the provider's error code.

        Args:
            message: User-facing description of the failure.
            provider_code: Optional auth provider code (e.g. 'auth/wrong-password').
        """
        details = {"code": provider_code} if provider_code else {}
        super().__init__(message, "AUTHENTICATION_ERROR", details)


class AuthorizationException(ControlPlusException):
    """Raised when the actor lacks the permission or role for the operation."""

    def __init__(
        self,
        resource: str | None = None,
        action: str | None = None,
        message: str = "Permission denied",
    ) -> None:
        """Initialize with optional resource, action, and message.

        Args:
            resource: Optional resource (e.g. 'clients', 'technicians').
            action: Optional action that was attempted (e.g. 'write').
            message: Human-readable message; default used when resource/action omitted.
        """
        if resource and action:
            message = f"Permission denied: {action} on {resource}"
        details: dict[str, Any] = {}
        if resource:
            details["resource"] = resource
        if action:
            details["action"] = action
        super().__init__(message, "PERMISSION_DENIED", details)


class ResourceNotFoundException(ControlPlusException):
    """Raised when a requested resource is not found."""

    def __init__(self, resource_type: str, resource_id: str) -> None:
        super().__init__(
            f"{resource_type} not found: {resource_id}",
            "RESOURCE_NOT_FOUND",
            {"resource_type": resource_type, "resource_id": resource_id},
        )


class DataAccessDeniedException(ControlPlusException):
    """Raised when the document store rejects a read or write (security rules)."""

    def __init__(self, path: str) -> None:
        super().__init__(
            f"Access denied by document store: {path}",
            "DATA_ACCESS_DENIED",
            {"path": path},
        )


class TenantScopeUnavailableException(ControlPlusException):
    """Raised when no owner scope can be derived for the signed-in actor.

    Happens when the actor has no resolvable profile, or is an employee whose
    record carries no adminId.
    """

    def __init__(self, uid: str) -> None:
        super().__init__(
            "No tenant scope available for this account",
            "TENANT_SCOPE_UNAVAILABLE",
            {"uid": uid},
        )


class SubscriptionInactiveException(ControlPlusException):
    """Raised when a feature is used while the tenant subscription is not active."""

    def __init__(self, status: str) -> None:
        super().__init__(
            "Assinatura inativa. Regularize o plano para continuar usando o sistema.",
            "SUBSCRIPTION_INACTIVE",
            {"subscription_status": status},
        )


class AuthProviderException(ControlPlusException):
    """Raised by the authentication provider client with a normalized code.

    The code uses the provider's public naming (e.g. 'auth/email-already-in-use')
    so the application layer can map it to a localized message.
    """

    def __init__(self, code: str, message: str | None = None) -> None:
        self.code = code
        super().__init__(
            message or f"Authentication provider error: {code}",
            "AUTH_PROVIDER_ERROR",
            {"code": code},
        )
