"""AccessContext: the explicitly constructed client context for the access layer.

Built once in the lifespan (or by tests) and injected through FastAPI
dependencies. Holds the document store client, the auth client, settings and
the listener factory; repositories and services are created from it per use.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from controlplus.application.interfaces.services import IAuthProvider, IListenerFactory
from controlplus.application.services.account_service import AccountService
from controlplus.application.services.dashboard_service import DashboardService
from controlplus.application.services.legacy_migration_service import LegacyMigrationService
from controlplus.application.services.role_resolver import RoleResolver
from controlplus.application.services.technician_service import TechnicianService
from controlplus.application.services.tenant_records_service import TenantRecordsService
from controlplus.core.config import Settings
from controlplus.infrastructure.firebase.repositories import (
    FirestoreEmployeeRepository,
    FirestoreMigrationStore,
    FirestoreProfileRepository,
    FirestoreTenantRecordRepository,
)


@dataclass
class AccessContext:
    """Document store + auth provider + settings, with service factories."""

    store: Any
    auth: IAuthProvider
    settings: Settings
    listeners: IListenerFactory

    def profiles(self) -> FirestoreProfileRepository:
        return FirestoreProfileRepository(self.store)

    def employees(self) -> FirestoreEmployeeRepository:
        return FirestoreEmployeeRepository(self.store)

    def records(self) -> FirestoreTenantRecordRepository:
        return FirestoreTenantRecordRepository(self.store)

    def role_resolver(self) -> RoleResolver:
        return RoleResolver.default(self.profiles(), self.employees())

    def migration_service(self) -> LegacyMigrationService:
        return LegacyMigrationService(
            FirestoreMigrationStore(self.store),
            self.records(),
            self.settings.legacy_migration_id,
        )

    def account_service(self) -> AccountService:
        return AccountService(
            self.auth,
            self.profiles(),
            self.employees(),
            self.role_resolver(),
            trial_duration_days=self.settings.trial_duration_days,
            migration=self.migration_service() if self.settings.legacy_migration_on_login else None,
            migration_owner_uid=self.settings.legacy_migration_owner_uid,
        )

    def technician_service(self) -> TechnicianService:
        return TechnicianService(self.auth, self.employees())

    def tenant_records_service(self) -> TenantRecordsService:
        return TenantRecordsService(self.records())

    def dashboard_service(self) -> DashboardService:
        return DashboardService(self.tenant_records_service(), self.settings.dashboard_timezone)
