"""Account use cases: owner sign-up, sign-in, password changes, personal data.

Provider errors are translated to the pt-BR messages shown by the web client.
"""

from __future__ import annotations

from datetime import timedelta
from typing import TYPE_CHECKING, Any

from controlplus.application.dtos.access import ResolvedIdentity
from controlplus.application.dtos.account import AuthSession, OwnerRegistration, PersonalDataUpdate
from controlplus.application.interfaces.repositories import IEmployeeRepository, IProfileRepository
from controlplus.application.interfaces.services import IAuthProvider, IAuthTokens
from controlplus.application.services.role_resolver import RoleResolver
from controlplus.domain.entities.identity import AuthIdentity
from controlplus.domain.enums import Role, SubscriptionStatus
from controlplus.domain.exceptions import (
    AuthenticationException,
    AuthProviderException,
    ControlPlusException,
    ValidationException,
)
from controlplus.shared.telemetry.logging import get_logger
from controlplus.shared.utils.datetime import utc_now

if TYPE_CHECKING:
    from controlplus.application.services.legacy_migration_service import LegacyMigrationService

logger = get_logger(__name__)

MIN_PASSWORD_LENGTH = 6
TRIAL_PLAN = "trial"

AUTH_ERROR_MESSAGES: dict[str, str] = {
    "auth/email-already-in-use": "Este e-mail já está cadastrado. Tente fazer login.",
    "auth/invalid-email": "Informe um e-mail válido.",
    "auth/invalid-password": "A senha precisa ter pelo menos 6 caracteres.",
    "auth/user-not-found": "Usuário não encontrado. Verifique o e-mail digitado.",
    "auth/wrong-password": "Senha incorreta. Tente novamente.",
    "auth/weak-password": "A senha precisa ter pelo menos 6 caracteres.",
    "auth/too-many-requests": "Muitas tentativas realizadas. Aguarde alguns instantes e tente novamente.",
}
DEFAULT_AUTH_ERROR = "Não foi possível concluir a operação. Tente novamente em instantes."
PASSWORD_MISMATCH = "As senhas informadas não coincidem."
WRONG_CURRENT_PASSWORD = "A senha atual informada esta incorreta."


def localize_auth_error(code: str | None) -> str:
    return AUTH_ERROR_MESSAGES.get(code or "", DEFAULT_AUTH_ERROR)


def _check_new_password(password: str, confirm: str) -> None:
    if password != confirm:
        raise ValidationException(PASSWORD_MISMATCH, field="confirm_password")
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationException(AUTH_ERROR_MESSAGES["auth/weak-password"], field="password")


def _session(tokens: IAuthTokens, must_change_password: bool = False) -> AuthSession:
    return AuthSession(
        uid=tokens.uid,
        email=tokens.email,
        id_token=tokens.id_token,
        refresh_token=tokens.refresh_token,
        expires_in=tokens.expires_in,
        must_change_password=must_change_password,
    )


class AccountService:
    """Sign-up, sign-in and self-service account changes."""

    def __init__(
        self,
        auth: IAuthProvider,
        profiles: IProfileRepository,
        employees: IEmployeeRepository,
        resolver: RoleResolver,
        *,
        trial_duration_days: int = 14,
        migration: LegacyMigrationService | None = None,
        migration_owner_uid: str | None = None,
    ) -> None:
        self._auth = auth
        self._profiles = profiles
        self._employees = employees
        self._resolver = resolver
        self._trial_days = trial_duration_days
        self._migration = migration
        self._migration_owner_uid = migration_owner_uid

    async def _provider_call(self, coro):
        try:
            return await coro
        except AuthProviderException as e:
            raise AuthenticationException(localize_auth_error(e.code), e.code) from e

    async def register_owner(self, form: OwnerRegistration) -> AuthSession:
        """Create the owner account and its profile with a trial subscription."""
        if form.password != form.confirm_password:
            raise ValidationException(PASSWORD_MISMATCH, field="confirm_password")
        email = form.email.strip().lower()
        tokens = await self._provider_call(self._auth.sign_up(email, form.password))
        full_name = form.full_name.strip()
        if full_name:
            await self._provider_call(self._auth.update_profile(tokens.id_token, display_name=full_name))
        now = utc_now()
        await self._profiles.merge(
            tokens.uid,
            {
                "uid": tokens.uid,
                "role": Role.ADMIN.value,
                "fullName": full_name,
                "email": email,
                "birthDate": form.birth_date.isoformat() if form.birth_date else "",
                "cpfCnpj": form.cpf_cnpj.strip(),
                "phone": form.phone.strip(),
                "subscriptionPlan": TRIAL_PLAN,
                "subscriptionStatus": SubscriptionStatus.TRIALING.value,
                "trialStartsAt": now,
                "trialEndsAt": now + timedelta(days=self._trial_days),
                "subscriptionUpdatedAt": now,
                "createdAt": now,
            },
        )
        logger.info("Registered owner %s with %d-day trial", tokens.uid, self._trial_days)
        return _session(tokens)

    async def sign_in(self, email: str, password: str) -> AuthSession:
        tokens = await self._provider_call(self._auth.sign_in(email.strip(), password))
        resolved = await self._resolver.resolve(AuthIdentity(uid=tokens.uid, email=tokens.email))
        must_change = bool(
            resolved and resolved.employee and resolved.employee.must_change_password
        )
        if self._should_migrate(resolved):
            await self._migrate_quietly(resolved.uid)
        return _session(tokens, must_change)

    def _should_migrate(self, resolved: ResolvedIdentity | None) -> bool:
        """Only the owner the legacy data belonged to receives it."""
        return (
            self._migration is not None
            and resolved is not None
            and resolved.is_owner
            and bool(self._migration_owner_uid)
            and resolved.uid == self._migration_owner_uid
        )

    async def _migrate_quietly(self, owner_uid: str) -> None:
        # Sign-in must not fail because of the legacy copy; the marker keeps retries cheap.
        try:
            await self._migration.migrate(owner_uid)
        except ControlPlusException as e:
            logger.error("Legacy migration failed for %s: %s", owner_uid, e.message)

    async def change_password(
        self, email: str, current_password: str, new_password: str, confirm_password: str
    ) -> AuthSession:
        """Re-authenticate with the current password, then set the new one."""
        _check_new_password(new_password, confirm_password)
        try:
            tokens = await self._auth.sign_in(email, current_password)
        except AuthProviderException as e:
            if e.code == "auth/wrong-password":
                raise AuthenticationException(WRONG_CURRENT_PASSWORD, e.code) from e
            raise AuthenticationException(localize_auth_error(e.code), e.code) from e
        updated = await self._provider_call(self._auth.update_password(tokens.id_token, new_password))
        return _session(updated)

    async def complete_first_password(
        self,
        resolved: ResolvedIdentity,
        id_token: str,
        new_password: str,
        confirm_password: str,
    ) -> AuthSession:
        """Forced first-login change: set the password and clear mustChangePassword."""
        _check_new_password(new_password, confirm_password)
        tokens = await self._provider_call(self._auth.update_password(id_token, new_password))
        fields = {"mustChangePassword": False, "updatedAt": utc_now()}
        employee = resolved.employee
        if resolved.is_employee and employee is not None and employee.admin_id:
            await self._employees.update_everywhere(employee.admin_id, resolved.uid, fields)
        elif resolved.is_employee:
            await self._employees.merge_profile(resolved.uid, fields)
        else:
            await self._profiles.merge(resolved.uid, fields)
        return _session(tokens)

    async def update_personal_data(
        self, resolved: ResolvedIdentity, id_token: str, update: PersonalDataUpdate
    ) -> dict[str, Any]:
        """Merge personal data into the profile and the owner's copy of the employee record."""
        payload: dict[str, Any] = {}
        if update.full_name is not None:
            payload["fullName"] = update.full_name.strip()
        if update.email is not None:
            payload["email"] = update.email.strip().lower()
        if update.phone is not None:
            payload["phone"] = update.phone.strip()
        if update.cpf_cnpj is not None:
            payload["cpfCnpj"] = update.cpf_cnpj.strip()
        if update.birth_date is not None:
            payload["birthDate"] = update.birth_date.isoformat()
        if update.avatar_url is not None:
            payload["avatarUrl"] = update.avatar_url
        if not payload:
            raise ValidationException("Nenhum dado informado para atualizar.")
        payload["updatedAt"] = utc_now()

        employee = resolved.employee
        admin_id = employee.admin_id if employee is not None else None
        if resolved.is_employee:
            await self._employees.merge_profile(resolved.uid, payload, admin_id)
        else:
            await self._profiles.merge(resolved.uid, payload)
        if admin_id:
            await self._employees.merge_owner_copy(admin_id, resolved.uid, payload)

        if payload.get("fullName") or "avatarUrl" in payload:
            await self._provider_call(
                self._auth.update_profile(
                    id_token,
                    display_name=payload.get("fullName") or None,
                    photo_url=payload.get("avatarUrl"),
                )
            )
        return payload
