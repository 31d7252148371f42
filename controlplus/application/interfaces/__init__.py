"""Application ports (Protocols) implemented by the infrastructure layer."""

from controlplus.application.interfaces.repositories import (
    IEmployeeRepository,
    IMigrationStore,
    IProfileRepository,
    ITenantRecordRepository,
)
from controlplus.application.interfaces.services import (
    IAuthProvider,
    IAuthTokens,
    IListenerFactory,
    IListenerRegistration,
)

__all__ = [
    "IAuthProvider",
    "IAuthTokens",
    "IEmployeeRepository",
    "IListenerFactory",
    "IListenerRegistration",
    "IMigrationStore",
    "IProfileRepository",
    "ITenantRecordRepository",
]
