"""Tenant-scoped record access with permission and subscription checks."""

import pytest

from controlplus.application.dtos.access import ResolvedIdentity
from controlplus.application.services.tenant_records_service import (
    TenantRecordsService,
    can_read,
    can_write,
    readable_collections,
)
from controlplus.domain.entities.permissions import EmployeePermissions
from controlplus.domain.entities.profile import EmployeeRecord, UserProfile
from controlplus.domain.enums import Role
from controlplus.domain.exceptions import (
    AuthorizationException,
    DataAccessDeniedException,
    ResourceNotFoundException,
    SubscriptionInactiveException,
    TenantScopeUnavailableException,
    ValidationException,
)
from controlplus.infrastructure.firebase.repositories import FirestoreTenantRecordRepository


def _owner(status: str = "active") -> ResolvedIdentity:
    profile = UserProfile.from_document("o1", {"role": "admin", "subscriptionStatus": status})
    return ResolvedIdentity("o1", Role.ADMIN, "o1", profile=profile)


def _tech(admin_id: str | None = "o1", status: str = "active", **perms: bool) -> ResolvedIdentity:
    employee = EmployeeRecord.from_document(
        "t1",
        {"adminId": admin_id, "permissions": perms, "parentSubscriptionStatus": status},
    )
    return ResolvedIdentity("t1", Role.EMPLOYEE, admin_id, employee=employee)


@pytest.fixture
def service(store) -> TenantRecordsService:
    return TenantRecordsService(FirestoreTenantRecordRepository(store))


def test_policies() -> None:
    tech = _tech(patio=True, agenda=True)
    assert can_read(tech, "yard")
    assert not can_write(tech, "yard")
    assert can_read(tech, "services")
    assert not can_write(tech, "services")
    assert not can_read(tech, "budgets")
    assert readable_collections(tech) == ["appointments", "services", "professionals", "yard"]
    assert len(readable_collections(_owner())) == 9
    assert not can_read(_owner(), "unknown")


async def test_owner_create_strips_id_and_stamps_created_at(service, store) -> None:
    created = await service.create(_owner(), "clients", {"id": "spoof", "name": "João"})
    stored = store.docs[f"users/o1/clients/{created['id']}"]
    assert created["id"] != "spoof"
    assert stored["name"] == "João"
    assert "id" not in stored
    assert "createdAt" in stored


async def test_employee_reads_owner_namespace(service, store) -> None:
    store.seed("users/o1/clients/c1", {"name": "João"})
    store.seed("users/t1/clients/c9", {"name": "never"})
    items = await service.list(_tech(clientes=True), "clients")
    assert items == [{"id": "c1", "name": "João"}]


async def test_employee_without_permission_is_denied(service) -> None:
    with pytest.raises(AuthorizationException):
        await service.list(_tech(agenda=True), "transactions")


async def test_patio_read_without_edit(service, store) -> None:
    store.seed("users/o1/yard/y1", {"plate": "ABC"})
    tech = _tech(patio=True)
    assert await service.get(tech, "yard", "y1") == {"id": "y1", "plate": "ABC"}
    with pytest.raises(AuthorizationException):
        await service.update(tech, "yard", "y1", {"status": "pronto"})
    await service.update(_tech(patio=True, patio_edit=True), "yard", "y1", {"status": "pronto"})
    assert store.docs["users/o1/yard/y1"]["status"] == "pronto"
    assert "updatedAt" in store.docs["users/o1/yard/y1"]


async def test_inactive_subscription_blocks(service) -> None:
    with pytest.raises(SubscriptionInactiveException):
        await service.list(_owner("canceled"), "clients")
    with pytest.raises(SubscriptionInactiveException):
        await service.list(_tech(status="past_due", clientes=True), "clients")


async def test_employee_without_owner_has_no_scope(service) -> None:
    with pytest.raises(TenantScopeUnavailableException):
        await service.list(_tech(admin_id=None, clientes=True), "clients")


async def test_unknown_collection(service) -> None:
    with pytest.raises(ValidationException):
        await service.list(_owner(), "employees")


async def test_missing_records(service) -> None:
    with pytest.raises(ResourceNotFoundException):
        await service.get(_owner(), "clients", "nope")
    with pytest.raises(ResourceNotFoundException):
        await service.update(_owner(), "clients", "nope", {"name": "x"})


async def test_delete(service, store) -> None:
    store.seed("users/o1/budgets/b1", {"total": 10})
    await service.delete(_owner(), "budgets", "b1")
    assert "users/o1/budgets/b1" not in store.docs


async def test_store_denial_surfaces(service, store) -> None:
    store.denied_prefixes.add("users/o1/clients")
    with pytest.raises(DataAccessDeniedException):
        await service.list(_owner(), "clients")


async def test_snapshot_only_readable(service, store) -> None:
    store.seed("users/o1/clients/c1", {"name": "João"})
    store.seed("users/o1/transactions/x1", {"totalAmount": 1})
    snapshot = await service.snapshot(_tech(clientes=True))
    assert snapshot == {"clients": [{"id": "c1", "name": "João"}]}
    subset = await service.snapshot(_owner(), ["transactions"])
    assert list(subset) == ["transactions"]
