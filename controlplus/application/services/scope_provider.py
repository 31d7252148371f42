"""Tenant scope derivation.

Every business path is built from the owner uid through a TenantScope, so no
caller can address another tenant's data or fall back to an employee's own uid.
"""

from __future__ import annotations

from dataclasses import dataclass

from controlplus.application.dtos.access import ResolvedIdentity
from controlplus.core.constants import COLLECTION_USERS, TENANT_COLLECTIONS
from controlplus.domain.entities.profile import EmployeeRecord
from controlplus.domain.enums import Role
from controlplus.domain.exceptions import TenantScopeUnavailableException, ValidationException


def owner_uid_for(uid: str, role: Role, employee: EmployeeRecord | None) -> str | None:
    """Owner uid for an account: adminId for employees, the uid itself for owners.

    An employee without adminId has no scope (None).
    """
    if role is Role.EMPLOYEE:
        if employee is None or not employee.admin_id:
            return None
        return employee.admin_id
    return uid


@dataclass(frozen=True)
class TenantScope:
    """Builds users/{ownerUid}/... paths for the tenant collections."""

    owner_uid: str

    def __post_init__(self) -> None:
        if not self.owner_uid or "/" in self.owner_uid:
            raise ValueError(f"Invalid owner uid: {self.owner_uid!r}")

    @staticmethod
    def check_collection(collection: str) -> str:
        if collection not in TENANT_COLLECTIONS:
            raise ValidationException(f"Unknown collection: {collection}", field="collection")
        return collection

    def collection_path(self, collection: str) -> str:
        return f"{COLLECTION_USERS}/{self.owner_uid}/{self.check_collection(collection)}"

    def document_path(self, collection: str, record_id: str) -> str:
        if not record_id or "/" in record_id:
            raise ValidationException(f"Invalid record id: {record_id!r}", field="id")
        return f"{self.collection_path(collection)}/{record_id}"

    def all_collection_paths(self) -> dict[str, str]:
        return {name: self.collection_path(name) for name in TENANT_COLLECTIONS}


class ScopeProvider:
    """Turns a resolved identity into a TenantScope."""

    def scope_for(self, identity: ResolvedIdentity | None, uid: str = "") -> TenantScope:
        """Return the scope or raise TenantScopeUnavailableException."""
        if identity is None or not identity.owner_uid:
            raise TenantScopeUnavailableException(identity.uid if identity else uid)
        return TenantScope(identity.owner_uid)
