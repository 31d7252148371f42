"""Application DTOs."""

from controlplus.application.dtos.access import (
    NavItem,
    PageAccessDecision,
    ResolvedIdentity,
    SubscriptionState,
)
from controlplus.application.dtos.account import (
    AuthSession,
    OwnerRegistration,
    PersonalDataUpdate,
    TechnicianProvisioning,
)
from controlplus.application.dtos.dashboard import (
    DashboardStats,
    RevenueBucket,
    TechnicianRanking,
)
from controlplus.application.dtos.migration import MigrationReport

__all__ = [
    "AuthSession",
    "DashboardStats",
    "MigrationReport",
    "NavItem",
    "OwnerRegistration",
    "PageAccessDecision",
    "PersonalDataUpdate",
    "ResolvedIdentity",
    "RevenueBucket",
    "SubscriptionState",
    "TechnicianProvisioning",
    "TechnicianRanking",
]
