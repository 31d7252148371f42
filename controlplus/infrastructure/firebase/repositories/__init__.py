"""Firestore-backed repository implementations."""

from controlplus.infrastructure.firebase.repositories.employee_repo_firestore import (
    FirestoreEmployeeRepository,
)
from controlplus.infrastructure.firebase.repositories.migration_repo_firestore import (
    FirestoreMigrationStore,
)
from controlplus.infrastructure.firebase.repositories.profile_repo_firestore import (
    FirestoreProfileRepository,
)
from controlplus.infrastructure.firebase.repositories.tenant_record_repo_firestore import (
    FirestoreTenantRecordRepository,
)

__all__ = [
    "FirestoreEmployeeRepository",
    "FirestoreMigrationStore",
    "FirestoreProfileRepository",
    "FirestoreTenantRecordRepository",
]
