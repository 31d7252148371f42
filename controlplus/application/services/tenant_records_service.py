"""Tenant-scoped CRUD over the business collections.

Every call derives the TenantScope from the resolved identity, then checks the
subscription gate and the collection's access policy before touching data.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

from controlplus.application.dtos.access import ResolvedIdentity
from controlplus.application.interfaces.repositories import ITenantRecordRepository
from controlplus.application.services.scope_provider import ScopeProvider, TenantScope
from controlplus.application.services.subscription_gate import (
    ensure_active,
    evaluate_subscription,
    subscription_for,
)
from controlplus.core.constants import (
    COLLECTION_APPOINTMENTS,
    COLLECTION_BUDGETS,
    COLLECTION_CLIENTS,
    COLLECTION_PROFESSIONALS,
    COLLECTION_SERVICES,
    COLLECTION_STOCK,
    COLLECTION_TRANSACTIONS,
    COLLECTION_WORK_ORDERS,
    COLLECTION_YARD,
)
from controlplus.domain.entities.permissions import EmployeePermissions
from controlplus.domain.exceptions import AuthorizationException, ResourceNotFoundException
from controlplus.shared.telemetry.logging import get_logger
from controlplus.shared.utils.datetime import utc_now

logger = get_logger(__name__)

OWNER_ONLY = "__owner__"


@dataclass(frozen=True)
class CollectionPolicy:
    """Permission key technicians need to read / write; OWNER_ONLY blocks them."""

    read: str
    write: str


ACCESS_POLICIES: dict[str, CollectionPolicy] = {
    COLLECTION_CLIENTS: CollectionPolicy("clientes", "clientes"),
    COLLECTION_APPOINTMENTS: CollectionPolicy("agenda", "agenda"),
    COLLECTION_SERVICES: CollectionPolicy("agenda", OWNER_ONLY),
    COLLECTION_PROFESSIONALS: CollectionPolicy("agenda", OWNER_ONLY),
    COLLECTION_YARD: CollectionPolicy("patio", "patio_edit"),
    COLLECTION_TRANSACTIONS: CollectionPolicy("financeiro", "financeiro"),
    COLLECTION_BUDGETS: CollectionPolicy(OWNER_ONLY, OWNER_ONLY),
    COLLECTION_STOCK: CollectionPolicy(OWNER_ONLY, OWNER_ONLY),
    COLLECTION_WORK_ORDERS: CollectionPolicy(OWNER_ONLY, OWNER_ONLY),
}


def _permissions(identity: ResolvedIdentity) -> EmployeePermissions:
    return identity.employee.permissions if identity.employee else EmployeePermissions()


def _policy_allows(identity: ResolvedIdentity, requirement: str) -> bool:
    if not identity.is_employee:
        return True
    if requirement == OWNER_ONLY:
        return False
    return _permissions(identity).allows(requirement)


def can_read(identity: ResolvedIdentity, collection: str) -> bool:
    policy = ACCESS_POLICIES.get(collection)
    return policy is not None and _policy_allows(identity, policy.read)


def can_write(identity: ResolvedIdentity, collection: str) -> bool:
    policy = ACCESS_POLICIES.get(collection)
    return policy is not None and _policy_allows(identity, policy.write)


def readable_collections(identity: ResolvedIdentity) -> list[str]:
    return [name for name in ACCESS_POLICIES if can_read(identity, name)]


def _clean(data: dict[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in data.items() if k != "id"}


class TenantRecordsService:
    """CRUD on users/{ownerUid}/{collection} with permission and subscription checks."""

    def __init__(
        self,
        records: ITenantRecordRepository,
        scope_provider: ScopeProvider | None = None,
    ) -> None:
        self._records = records
        self._scopes = scope_provider or ScopeProvider()

    def _authorize(self, identity: ResolvedIdentity, collection: str, action: str) -> TenantScope:
        scope = self._scopes.scope_for(identity)
        TenantScope.check_collection(collection)
        ensure_active(evaluate_subscription(subscription_for(identity)))
        allowed = can_read(identity, collection) if action == "read" else can_write(identity, collection)
        if not allowed:
            raise AuthorizationException(resource=collection, action=action)
        return scope

    async def list(self, identity: ResolvedIdentity, collection: str) -> list[dict[str, Any]]:
        scope = self._authorize(identity, collection, "read")
        return await self._records.list(scope.collection_path(collection))

    async def get(self, identity: ResolvedIdentity, collection: str, record_id: str) -> dict[str, Any]:
        scope = self._authorize(identity, collection, "read")
        record = await self._records.get(scope.document_path(collection, record_id))
        if record is None:
            raise ResourceNotFoundException(collection, record_id)
        return record

    async def create(
        self, identity: ResolvedIdentity, collection: str, data: dict[str, Any]
    ) -> dict[str, Any]:
        scope = self._authorize(identity, collection, "write")
        payload = _clean(data)
        payload.setdefault("createdAt", utc_now())
        record_id = await self._records.add(scope.collection_path(collection), payload)
        logger.info("Created %s/%s for owner %s", collection, record_id, scope.owner_uid)
        return {"id": record_id, **payload}

    async def update(
        self, identity: ResolvedIdentity, collection: str, record_id: str, data: dict[str, Any]
    ) -> None:
        scope = self._authorize(identity, collection, "write")
        payload = _clean(data)
        payload["updatedAt"] = utc_now()
        await self._records.update(scope.document_path(collection, record_id), payload)

    async def delete(self, identity: ResolvedIdentity, collection: str, record_id: str) -> None:
        scope = self._authorize(identity, collection, "write")
        await self._records.delete(scope.document_path(collection, record_id))
        logger.info("Deleted %s/%s for owner %s", collection, record_id, scope.owner_uid)

    async def snapshot(
        self, identity: ResolvedIdentity, collections: Iterable[str] | None = None
    ) -> dict[str, list[dict[str, Any]]]:
        """Readable collections of the tenant (all, or the requested subset).

        Collections the actor cannot read are left out rather than rejected.
        """
        scope = self._scopes.scope_for(identity)
        ensure_active(evaluate_subscription(subscription_for(identity)))
        wanted = set(collections) if collections is not None else None
        return {
            name: await self._records.list(scope.collection_path(name))
            for name in readable_collections(identity)
            if wanted is None or name in wanted
        }
