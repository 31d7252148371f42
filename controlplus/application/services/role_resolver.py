"""Role resolution for a signed-in account.

Strategies run in priority order and the first one returning a result wins:

1. DirectProfileStrategy: users/{uid}. role "employee" makes an employee,
   anything else an owner.
2. LegacyFlatEmployeeStrategy: employees/{uid}.
3. EmployeeGroupSearchStrategy: collection group search over
   users/*/employees; the owner comes from the matching path and a normalized
   profile is written back so the next sign-in hits strategy 1.

Security rules may legitimately deny cross-tenant reads, so access-denied and
not-found during a lookup are logged and treated as "no match".
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol

from controlplus.application.dtos.access import ResolvedIdentity
from controlplus.application.interfaces.repositories import (
    IEmployeeRepository,
    IProfileRepository,
)
from controlplus.application.services.scope_provider import owner_uid_for
from controlplus.domain.entities.identity import AuthIdentity
from controlplus.domain.entities.profile import EmployeeRecord
from controlplus.domain.enums import Role
from controlplus.domain.exceptions import (
    DataAccessDeniedException,
    ResourceNotFoundException,
)
from controlplus.shared.telemetry.logging import get_logger

logger = get_logger(__name__)


class RoleResolutionStrategy(Protocol):
    """One lookup step; returns None when it has no answer."""

    name: str

    async def resolve(self, identity: AuthIdentity) -> ResolvedIdentity | None: ...


def _employee_identity(uid: str, employee: EmployeeRecord, source: str, profile=None) -> ResolvedIdentity:
    return ResolvedIdentity(
        uid=uid,
        role=Role.EMPLOYEE,
        owner_uid=owner_uid_for(uid, Role.EMPLOYEE, employee),
        profile=profile,
        employee=employee,
        source=source,
    )


class DirectProfileStrategy:
    name = "profile"

    def __init__(self, profiles: IProfileRepository) -> None:
        self._profiles = profiles

    async def resolve(self, identity: AuthIdentity) -> ResolvedIdentity | None:
        profile = await self._profiles.get(identity.uid)
        if profile is None:
            return None
        if profile.role is Role.EMPLOYEE:
            return _employee_identity(
                identity.uid, EmployeeRecord.from_profile(profile), self.name, profile
            )
        return ResolvedIdentity(
            uid=identity.uid,
            role=Role.ADMIN,
            owner_uid=identity.uid,
            profile=profile,
            source=self.name,
        )


class LegacyFlatEmployeeStrategy:
    name = "flat-employee"

    def __init__(self, employees: IEmployeeRepository) -> None:
        self._employees = employees

    async def resolve(self, identity: AuthIdentity) -> ResolvedIdentity | None:
        employee = await self._employees.get_flat(identity.uid)
        if employee is None:
            return None
        return _employee_identity(identity.uid, employee, self.name)


class EmployeeGroupSearchStrategy:
    name = "employee-search"

    def __init__(self, employees: IEmployeeRepository, profiles: IProfileRepository) -> None:
        self._employees = employees
        self._profiles = profiles

    async def resolve(self, identity: AuthIdentity) -> ResolvedIdentity | None:
        employee = await self._employees.find_in_owner_namespaces(identity.uid)
        if employee is None:
            return None
        await self._backfill_profile(identity, employee)
        return _employee_identity(identity.uid, employee, self.name)

    async def _backfill_profile(self, identity: AuthIdentity, employee: EmployeeRecord) -> None:
        doc = employee.to_profile_document()
        doc["uid"] = identity.uid
        if identity.email and not doc.get("email"):
            doc["email"] = identity.email
        try:
            await self._profiles.merge(identity.uid, doc)
        except DataAccessDeniedException as e:
            logger.warning("Profile backfill denied for %s: %s", identity.uid, e.message)


class RoleResolver:
    """Runs strategies in order with first-success semantics."""

    def __init__(self, strategies: Sequence[RoleResolutionStrategy]) -> None:
        self._strategies = list(strategies)

    @classmethod
    def default(
        cls, profiles: IProfileRepository, employees: IEmployeeRepository
    ) -> RoleResolver:
        return cls(
            [
                DirectProfileStrategy(profiles),
                LegacyFlatEmployeeStrategy(employees),
                EmployeeGroupSearchStrategy(employees, profiles),
            ]
        )

    async def resolve(self, identity: AuthIdentity) -> ResolvedIdentity | None:
        """Return the first strategy result, or None when no profile exists."""
        for strategy in self._strategies:
            try:
                result = await strategy.resolve(identity)
            except (DataAccessDeniedException, ResourceNotFoundException) as e:
                logger.warning(
                    "Role lookup '%s' failed for %s: %s", strategy.name, identity.uid, e.message
                )
                continue
            if result is not None:
                logger.debug(
                    "Resolved %s as %s via %s (owner=%s)",
                    identity.uid,
                    result.role.value,
                    strategy.name,
                    result.owner_uid,
                )
                return result
        logger.info("No profile could be resolved for %s", identity.uid)
        return None
