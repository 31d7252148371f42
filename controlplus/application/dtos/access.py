"""DTOs for role resolution, navigation and gating."""

from __future__ import annotations

from dataclasses import dataclass

from controlplus.domain.entities.profile import EmployeeRecord, UserProfile
from controlplus.domain.enums import Role


@dataclass(frozen=True)
class ResolvedIdentity:
    """Result of role resolution for one signed-in account.

    owner_uid is the tenant root every business path is built from; it is None
    for an employee whose record carries no adminId.
    source names the strategy that matched (for logs).
    """

    uid: str
    role: Role
    owner_uid: str | None
    profile: UserProfile | None = None
    employee: EmployeeRecord | None = None
    source: str = ""

    @property
    def is_employee(self) -> bool:
        return self.role is Role.EMPLOYEE

    @property
    def is_owner(self) -> bool:
        return self.role is Role.ADMIN


@dataclass(frozen=True)
class NavItem:
    """Navigation entry shown to the actor."""

    id: str
    label: str
    permission: str | None = None


@dataclass(frozen=True)
class PageAccessDecision:
    """Outcome of a page-access check.

    page is where the actor ends up (the requested page or the redirect target).
    warning is set only the first time a given denial is seen.
    """

    requested: str
    page: str
    allowed: bool
    permission: str | None = None
    warning: str | None = None

    @property
    def redirected(self) -> bool:
        return self.page != self.requested


@dataclass(frozen=True)
class SubscriptionState:
    """Derived subscription gate state."""

    status: str
    plan: str
    is_active: bool
    is_trialing: bool
    trial_days_left: int | None = None
