"""AccountService: owner sign-up, sign-in and password changes."""

from datetime import date, timedelta
from unittest.mock import AsyncMock

import pytest

from controlplus.application.dtos.account import OwnerRegistration, PersonalDataUpdate
from controlplus.application.services.account_service import (
    DEFAULT_AUTH_ERROR,
    PASSWORD_MISMATCH,
    WRONG_CURRENT_PASSWORD,
    AccountService,
    localize_auth_error,
)
from controlplus.application.services.legacy_migration_service import LegacyMigrationService
from controlplus.application.services.role_resolver import RoleResolver
from controlplus.domain.entities.identity import AuthIdentity
from controlplus.domain.enums import Role
from controlplus.domain.exceptions import (
    AuthenticationException,
    DataAccessDeniedException,
    ValidationException,
)
from controlplus.infrastructure.firebase.repositories import (
    FirestoreEmployeeRepository,
    FirestoreMigrationStore,
    FirestoreProfileRepository,
    FirestoreTenantRecordRepository,
)
from tests.fakes import seed_owner, seed_technician


@pytest.fixture
def resolver(store) -> RoleResolver:
    return RoleResolver.default(FirestoreProfileRepository(store), FirestoreEmployeeRepository(store))


@pytest.fixture
def service(store, auth, resolver) -> AccountService:
    return AccountService(
        auth,
        FirestoreProfileRepository(store),
        FirestoreEmployeeRepository(store),
        resolver,
    )


def _registration(**overrides) -> OwnerRegistration:
    values = {
        "full_name": "Ana Lima",
        "email": "Ana@Oficina.com",
        "password": "segredo1",
        "confirm_password": "segredo1",
        "birth_date": date(1990, 5, 1),
        "cpf_cnpj": "123.456.789-00",
        "phone": "11 99999-0000",
    }
    values.update(overrides)
    return OwnerRegistration(**values)


def test_localize_known_and_unknown_codes() -> None:
    assert localize_auth_error("auth/wrong-password") == "Senha incorreta. Tente novamente."
    assert localize_auth_error("auth/something-new") == DEFAULT_AUTH_ERROR
    assert localize_auth_error(None) == DEFAULT_AUTH_ERROR


async def test_register_owner_starts_trial(service, store, auth) -> None:
    session = await service.register_owner(_registration())
    profile = store.docs[f"users/{session.uid}"]
    assert profile["role"] == "admin"
    assert profile["email"] == "ana@oficina.com"
    assert profile["subscriptionStatus"] == "trialing"
    assert profile["subscriptionPlan"] == "trial"
    assert profile["trialEndsAt"] - profile["trialStartsAt"] == timedelta(days=14)
    assert profile["birthDate"] == "1990-05-01"
    assert auth.accounts["ana@oficina.com"].display_name == "Ana Lima"


async def test_register_password_mismatch(service, store) -> None:
    with pytest.raises(ValidationException) as exc:
        await service.register_owner(_registration(confirm_password="outra"))
    assert exc.value.message == PASSWORD_MISMATCH
    assert store.docs == {}


async def test_register_existing_email_is_localized(service, auth) -> None:
    auth.add_account("x", "ana@oficina.com", "segredo1")
    with pytest.raises(AuthenticationException) as exc:
        await service.register_owner(_registration())
    assert exc.value.message == "Este e-mail já está cadastrado. Tente fazer login."
    assert exc.value.details == {"code": "auth/email-already-in-use"}


async def test_sign_in_flags_first_login(service, store, auth) -> None:
    seed_technician(store, "o1", "t1", mustChangePassword=True)
    auth.add_account("t1", "t1@oficina.com", "segredo1")
    session = await service.sign_in("t1@oficina.com", "segredo1")
    assert session.uid == "t1"
    assert session.must_change_password is True


async def test_sign_in_wrong_password(service, auth) -> None:
    auth.add_account("o1", "o1@oficina.com", "segredo1")
    with pytest.raises(AuthenticationException) as exc:
        await service.sign_in("o1@oficina.com", "errada")
    assert exc.value.message == "Senha incorreta. Tente novamente."


async def test_sign_in_runs_migration_for_owner_and_ignores_failures(store, auth, resolver) -> None:
    seed_owner(store, "o1")
    auth.add_account("o1", "o1@oficina.com", "segredo1")
    migration = AsyncMock()
    migration.migrate.side_effect = DataAccessDeniedException("demo_clients")
    service = AccountService(
        auth,
        FirestoreProfileRepository(store),
        FirestoreEmployeeRepository(store),
        resolver,
        migration=migration,
        migration_owner_uid="o1",
    )
    session = await service.sign_in("o1@oficina.com", "segredo1")
    assert session.uid == "o1"
    migration.migrate.assert_awaited_once_with("o1")


async def test_legacy_data_only_reaches_its_owner(store, auth, resolver) -> None:
    seed_owner(store, "o1")
    seed_owner(store, "o2")
    store.seed("demo_clients/c1", {"name": "João"})
    auth.add_account("o1", "o1@oficina.com", "segredo1")
    auth.add_account("o2", "o2@oficina.com", "segredo1")
    service = AccountService(
        auth,
        FirestoreProfileRepository(store),
        FirestoreEmployeeRepository(store),
        resolver,
        migration=LegacyMigrationService(
            FirestoreMigrationStore(store),
            FirestoreTenantRecordRepository(store),
            "legacy-demo-collections-v1",
        ),
        migration_owner_uid="o1",
    )

    await service.sign_in("o2@oficina.com", "segredo1")
    assert not any(path.startswith("users/o2/") for path in store.docs)

    await service.sign_in("o1@oficina.com", "segredo1")
    assert store.docs["users/o1/clients/c1"]["name"] == "João"


async def test_change_password_reauthenticates(service, auth) -> None:
    auth.add_account("o1", "o1@oficina.com", "segredo1")
    await service.change_password("o1@oficina.com", "segredo1", "nova-senha", "nova-senha")
    assert auth.accounts["o1@oficina.com"].password == "nova-senha"


async def test_change_password_wrong_current(service, auth) -> None:
    auth.add_account("o1", "o1@oficina.com", "segredo1")
    with pytest.raises(AuthenticationException) as exc:
        await service.change_password("o1@oficina.com", "errada", "nova-senha", "nova-senha")
    assert exc.value.message == WRONG_CURRENT_PASSWORD
    assert auth.accounts["o1@oficina.com"].password == "segredo1"


@pytest.mark.parametrize(
    ("new", "confirm"),
    [("nova-senha", "outra-senha"), ("123", "123")],
)
async def test_change_password_validation(service, auth, new, confirm) -> None:
    auth.add_account("o1", "o1@oficina.com", "segredo1")
    with pytest.raises(ValidationException):
        await service.change_password("o1@oficina.com", "segredo1", new, confirm)


async def test_first_password_clears_flag_everywhere(service, store, auth, resolver) -> None:
    seed_technician(store, "o1", "t1", mustChangePassword=True)
    auth.add_account("t1", "t1@oficina.com", "segredo1")
    resolved = await resolver.resolve(AuthIdentity("t1"))
    await service.complete_first_password(resolved, "token-t1", "nova-senha", "nova-senha")
    for path in ("users/o1/employees/t1", "employees/t1", "users/t1"):
        assert store.docs[path]["mustChangePassword"] is False
    assert auth.accounts["t1@oficina.com"].password == "nova-senha"


async def test_update_personal_data_mirrors_to_owner_copy(service, store, auth, resolver) -> None:
    seed_technician(store, "o1", "t1")
    auth.add_account("t1", "t1@oficina.com", "segredo1")
    resolved = await resolver.resolve(AuthIdentity("t1"))
    changed = await service.update_personal_data(
        resolved, "token-t1", PersonalDataUpdate(full_name=" Carlos S ", phone="1199")
    )
    assert changed["fullName"] == "Carlos S"
    assert store.docs["users/t1"]["phone"] == "1199"
    assert store.docs["users/o1/employees/t1"]["fullName"] == "Carlos S"
    assert "phone" not in store.docs["employees/t1"]
    assert auth.accounts["t1@oficina.com"].display_name == "Carlos S"


async def test_self_service_writes_keep_profileless_technician_an_employee(
    service, store, auth, resolver
) -> None:
    seed_technician(store, "o1", "t1", profile=False, mustChangePassword=True)
    auth.add_account("t1", "t1@oficina.com", "segredo1")
    resolved = await resolver.resolve(AuthIdentity("t1"))
    assert resolved.owner_uid == "o1"

    await service.update_personal_data(resolved, "token-t1", PersonalDataUpdate(phone="1199"))
    await service.complete_first_password(resolved, "token-t1", "nova-senha", "nova-senha")

    profile = store.docs["users/t1"]
    assert (profile["role"], profile["adminId"], profile["phone"]) == ("employee", "o1", "1199")
    again = await resolver.resolve(AuthIdentity("t1"))
    assert (again.role, again.owner_uid) == (Role.EMPLOYEE, "o1")


async def test_update_personal_data_requires_a_field(service, store, resolver) -> None:
    seed_owner(store, "o1")
    resolved = await resolver.resolve(AuthIdentity("o1"))
    with pytest.raises(ValidationException):
        await service.update_personal_data(resolved, "token-o1", PersonalDataUpdate())
