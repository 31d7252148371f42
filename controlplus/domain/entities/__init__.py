"""Domain entities.

Pure domain models; no persistence concerns beyond the stored field names.
"""

from controlplus.domain.entities.identity import AuthIdentity
from controlplus.domain.entities.permissions import (
    PERMISSION_CATALOG,
    PERMISSION_KEYS,
    EmployeePermissions,
    PermissionCatalogEntry,
    get_catalog_entry,
)
from controlplus.domain.entities.profile import (
    EmployeeRecord,
    SubscriptionSnapshot,
    UserProfile,
)

__all__ = [
    "PERMISSION_CATALOG",
    "PERMISSION_KEYS",
    "AuthIdentity",
    "EmployeePermissions",
    "EmployeeRecord",
    "PermissionCatalogEntry",
    "SubscriptionSnapshot",
    "UserProfile",
    "get_catalog_entry",
]
