"""TechnicianService: provisioning, permission updates and removal."""

from datetime import UTC, datetime

import pytest

from controlplus.application.dtos.access import ResolvedIdentity
from controlplus.application.dtos.account import TechnicianProvisioning
from controlplus.application.services.role_resolver import RoleResolver
from controlplus.application.services.technician_service import TechnicianService
from controlplus.domain.entities.identity import AuthIdentity
from controlplus.domain.entities.profile import EmployeeRecord, UserProfile
from controlplus.domain.enums import Role
from controlplus.domain.exceptions import (
    AuthenticationException,
    AuthorizationException,
    ResourceNotFoundException,
    ValidationException,
)
from controlplus.infrastructure.firebase._rest_client import FirestoreError
from controlplus.infrastructure.firebase.repositories import (
    FirestoreEmployeeRepository,
    FirestoreProfileRepository,
)
from tests.fakes import FakeAuthProvider, InMemoryFirestore, seed_technician

TRIAL_END = datetime(2030, 1, 1, tzinfo=UTC)


def _owner(**fields) -> ResolvedIdentity:
    data = {
        "role": "admin",
        "subscriptionStatus": "trialing",
        "subscriptionPlan": "trial",
        "trialEndsAt": TRIAL_END,
        **fields,
    }
    return ResolvedIdentity("o1", Role.ADMIN, "o1", profile=UserProfile.from_document("o1", data))


def _request(**overrides) -> TechnicianProvisioning:
    values = {
        "name": " Carlos Souza ",
        "email": "Carlos@Oficina.com",
        "password": "segredo1",
        "specialty": "Elétrica",
        "permissions": {"agenda": True, "patio_edit": True, "bogus": True},
    }
    values.update(overrides)
    return TechnicianProvisioning(**values)


@pytest.fixture
def service(store: InMemoryFirestore, auth: FakeAuthProvider) -> TechnicianService:
    return TechnicianService(auth, FirestoreEmployeeRepository(store))


async def test_provision_writes_all_copies(service, store, auth) -> None:
    record = await service.provision(_owner(), _request())
    uid = record.uid

    owner_copy = store.docs[f"users/o1/employees/{uid}"]
    flat = store.docs[f"employees/{uid}"]
    profile = store.docs[f"users/{uid}"]

    assert owner_copy["initialPassword"] == "segredo1"
    assert "initialPassword" not in flat
    assert "initialPassword" not in profile
    for doc in (owner_copy, flat, profile):
        assert doc["adminId"] == "o1"
        assert doc["mustChangePassword"] is True
        assert doc["email"] == "carlos@oficina.com"
        assert doc["name"] == "Carlos Souza"
        assert doc["permissions"] == {
            "agenda": True,
            "clientes": False,
            "patio": False,
            "patio_edit": False,
            "financeiro": False,
        }
        assert doc["parentSubscriptionStatus"] == "trialing"
        assert doc["parentSubscriptionPlan"] == "trial"
        assert doc["parentTrialEndsAt"] == TRIAL_END
    assert profile["role"] == "employee"
    assert auth.isolated_sessions == 1
    assert auth.accounts["carlos@oficina.com"].display_name == "Carlos Souza"
    assert len(store.commits) == 1


async def test_only_owners_provision(service) -> None:
    tech = ResolvedIdentity("t1", Role.EMPLOYEE, "o1", employee=EmployeeRecord("t1", "o1"))
    with pytest.raises(AuthorizationException):
        await service.provision(tech, _request())


@pytest.mark.parametrize(
    ("overrides", "field"),
    [({"name": "  "}, "name"), ({"password": "123"}, "password")],
)
async def test_provision_validates_input(service, store, overrides, field) -> None:
    with pytest.raises(ValidationException) as exc:
        await service.provision(_owner(), _request(**overrides))
    assert exc.value.details == {"field": field}
    assert store.docs == {}


async def test_email_in_use_persists_nothing(service, store, auth) -> None:
    auth.add_account("existing", "carlos@oficina.com", "whatever")
    with pytest.raises(AuthenticationException) as exc:
        await service.provision(_owner(), _request())
    assert exc.value.message == "Este e-mail já está cadastrado. Tente fazer login."
    assert store.docs == {}


async def test_failed_persist_deletes_new_account(service, store, auth) -> None:
    store.fail_next_commit = FirestoreError("commit failed")
    with pytest.raises(FirestoreError):
        await service.provision(_owner(), _request())
    assert auth.deleted == ["uid-carlos"]
    assert "carlos@oficina.com" not in auth.accounts
    assert store.docs == {}


async def test_failed_profile_update_deletes_new_account(service, store, auth) -> None:
    auth.fail_update_profile = RuntimeError("provider down")
    with pytest.raises(RuntimeError):
        await service.provision(_owner(), _request())
    assert auth.deleted == ["uid-carlos"]
    assert store.docs == {}


async def test_update_permissions_normalizes_every_copy(service, store) -> None:
    seed_technician(store, "o1", "t1", {"agenda": True}, parentSubscriptionStatus="active")
    record = await service.update_permissions(
        _owner(), "t1", {"patio": True, "patio_edit": True, "extra": True}
    )
    expected = {"agenda": False, "clientes": False, "patio": True, "patio_edit": True, "financeiro": False}
    assert record.permissions.to_dict() == expected
    for path in ("users/o1/employees/t1", "employees/t1", "users/t1"):
        assert store.docs[path]["permissions"] == expected
        assert store.docs[path]["parentSubscriptionStatus"] == "trialing"
    assert store.docs["users/o1/employees/t1"]["initialPassword"] == "segredo1"

    reread = await FirestoreEmployeeRepository(store).get_for_owner("o1", "t1")
    assert reread.permissions.to_dict() == expected


async def test_update_permissions_keeps_profileless_technician_an_employee(service, store) -> None:
    seed_technician(store, "o1", "t1", {"agenda": True}, profile=False)
    resolver = RoleResolver.default(
        FirestoreProfileRepository(store), FirestoreEmployeeRepository(store)
    )
    before = await resolver.resolve(AuthIdentity("t1"))
    assert (before.role, before.owner_uid) == (Role.EMPLOYEE, "o1")

    await service.update_permissions(_owner(), "t1", {"clientes": True})

    profile = store.docs["users/t1"]
    assert (profile["role"], profile["adminId"]) == ("employee", "o1")
    assert "initialPassword" not in profile
    after = await resolver.resolve(AuthIdentity("t1"))
    assert (after.role, after.owner_uid) == (Role.EMPLOYEE, "o1")
    assert after.employee.permissions.clientes is True


async def test_toggle_patio_off_clears_patio_edit(service, store) -> None:
    seed_technician(store, "o1", "t1", {"patio": True, "patio_edit": True})
    permissions = await service.toggle_permission(_owner(), "t1", "patio", False)
    assert permissions.patio is False
    assert permissions.patio_edit is False
    assert store.docs["employees/t1"]["permissions"]["patio_edit"] is False


async def test_toggle_unknown_key(service, store) -> None:
    seed_technician(store, "o1", "t1")
    with pytest.raises(ValidationException):
        await service.toggle_permission(_owner(), "t1", "estoque", True)


async def test_missing_technician(service) -> None:
    with pytest.raises(ResourceNotFoundException):
        await service.update_permissions(_owner(), "nobody", {})


async def test_list_returns_owner_technicians(service, store) -> None:
    seed_technician(store, "o1", "t1")
    seed_technician(store, "o1", "t2")
    seed_technician(store, "other", "t3")
    assert [r.uid for r in await service.list(_owner())] == ["t1", "t2"]


async def test_delete_removes_account_and_records(service, store, auth) -> None:
    seed_technician(store, "o1", "t1")
    auth.add_account("t1", "t1@oficina.com", "segredo1")
    await service.delete(_owner(), "t1")
    assert auth.deleted == ["t1"]
    assert not any(path.endswith("t1") for path in store.docs)


async def test_delete_after_password_change_keeps_account(service, store, auth) -> None:
    seed_technician(store, "o1", "t1")
    auth.add_account("t1", "t1@oficina.com", "nova-senha")
    await service.delete(_owner(), "t1")
    assert auth.deleted == []
    assert not any(path.endswith("t1") for path in store.docs)
