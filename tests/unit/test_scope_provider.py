"""Tenant scope derivation from the resolved identity."""

import pytest

from controlplus.application.dtos.access import ResolvedIdentity
from controlplus.application.services.scope_provider import ScopeProvider, TenantScope, owner_uid_for
from controlplus.domain.entities.profile import EmployeeRecord
from controlplus.domain.enums import Role
from controlplus.domain.exceptions import TenantScopeUnavailableException, ValidationException


def test_owner_uid_for_owner_is_own_uid() -> None:
    assert owner_uid_for("o1", Role.ADMIN, None) == "o1"


def test_owner_uid_for_employee_is_admin_id() -> None:
    employee = EmployeeRecord(uid="t1", admin_id="o1")
    assert owner_uid_for("t1", Role.EMPLOYEE, employee) == "o1"


def test_employee_without_admin_id_has_no_scope() -> None:
    assert owner_uid_for("t1", Role.EMPLOYEE, EmployeeRecord(uid="t1", admin_id=None)) is None
    assert owner_uid_for("t1", Role.EMPLOYEE, None) is None


def test_scope_paths() -> None:
    scope = TenantScope("o1")
    assert scope.collection_path("clients") == "users/o1/clients"
    assert scope.document_path("appointments", "a1") == "users/o1/appointments/a1"
    assert scope.all_collection_paths()["estoque"] == "users/o1/estoque"


@pytest.mark.parametrize("collection", ["employees", "migrations", "../x", ""])
def test_unknown_collection_rejected(collection: str) -> None:
    with pytest.raises(ValidationException):
        TenantScope("o1").collection_path(collection)


@pytest.mark.parametrize("record_id", ["", "a/b"])
def test_invalid_record_id_rejected(record_id: str) -> None:
    with pytest.raises(ValidationException):
        TenantScope("o1").document_path("clients", record_id)


@pytest.mark.parametrize("owner", ["", "a/b"])
def test_invalid_owner_uid(owner: str) -> None:
    with pytest.raises(ValueError):
        TenantScope(owner)


def test_scope_provider_never_falls_back_to_own_uid() -> None:
    provider = ScopeProvider()
    orphan = ResolvedIdentity("t1", Role.EMPLOYEE, None, employee=EmployeeRecord("t1", None))
    with pytest.raises(TenantScopeUnavailableException) as exc:
        provider.scope_for(orphan)
    assert exc.value.details == {"uid": "t1"}
    with pytest.raises(TenantScopeUnavailableException):
        provider.scope_for(None, "u9")
    assert provider.scope_for(ResolvedIdentity("t1", Role.EMPLOYEE, "o1")).owner_uid == "o1"
