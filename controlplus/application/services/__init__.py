"""Application services: role resolution, scoping, gates, sessions and use cases."""

from controlplus.application.services.access_session import AccessSession
from controlplus.application.services.account_service import AccountService, localize_auth_error
from controlplus.application.services.dashboard_service import DashboardService, compute_dashboard
from controlplus.application.services.legacy_migration_service import LegacyMigrationService
from controlplus.application.services.permission_gate import (
    PageAccessGuard,
    nav_items_for,
    toggle_permission,
)
from controlplus.application.services.role_resolver import RoleResolver
from controlplus.application.services.scope_provider import ScopeProvider, TenantScope
from controlplus.application.services.subscription_gate import (
    evaluate_subscription,
    is_page_blocked,
    subscription_for,
)
from controlplus.application.services.technician_service import TechnicianService
from controlplus.application.services.tenant_records_service import TenantRecordsService

__all__ = [
    "AccessSession",
    "AccountService",
    "DashboardService",
    "LegacyMigrationService",
    "PageAccessGuard",
    "RoleResolver",
    "ScopeProvider",
    "TechnicianService",
    "TenantRecordsService",
    "TenantScope",
    "compute_dashboard",
    "evaluate_subscription",
    "is_page_blocked",
    "localize_auth_error",
    "nav_items_for",
    "subscription_for",
    "toggle_permission",
]
