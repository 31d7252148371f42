"""Domain layer: entities, enums, and exceptions.

No dependencies on infrastructure or presentation. Used by application
and infrastructure layers.
"""

from controlplus.domain.entities import (
    PERMISSION_CATALOG,
    AuthIdentity,
    EmployeePermissions,
    EmployeeRecord,
    PermissionCatalogEntry,
    SubscriptionSnapshot,
    UserProfile,
)
from controlplus.domain.enums import Role, SubscriptionStatus
from controlplus.domain.exceptions import (
    AuthenticationException,
    AuthorizationException,
    AuthProviderException,
    ControlPlusException,
    DataAccessDeniedException,
    ResourceNotFoundException,
    SubscriptionInactiveException,
    TenantScopeUnavailableException,
    ValidationException,
)

__all__ = [
    # Entities
    "PERMISSION_CATALOG",
    "AuthIdentity",
    "EmployeePermissions",
    "EmployeeRecord",
    "PermissionCatalogEntry",
    "SubscriptionSnapshot",
    "UserProfile",
    # Enums
    "Role",
    "SubscriptionStatus",
    # Exceptions
    "AuthenticationException",
    "AuthorizationException",
    "AuthProviderException",
    "ControlPlusException",
    "DataAccessDeniedException",
    "ResourceNotFoundException",
    "SubscriptionInactiveException",
    "TenantScopeUnavailableException",
    "ValidationException",
]
