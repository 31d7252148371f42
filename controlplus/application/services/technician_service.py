"""Technician provisioning, permission updates and removal (owner only).

Technician credentials are created and deleted through an isolated auth
session so the owner's own session is never replaced.
"""

from __future__ import annotations

from dataclasses import replace

from controlplus.application.dtos.access import ResolvedIdentity
from controlplus.application.dtos.account import TechnicianProvisioning
from controlplus.application.interfaces.repositories import IEmployeeRepository
from controlplus.application.interfaces.services import IAuthProvider
from controlplus.application.services.account_service import MIN_PASSWORD_LENGTH, localize_auth_error
from controlplus.application.services.subscription_gate import subscription_for
from controlplus.domain.entities.permissions import EmployeePermissions
from controlplus.domain.entities.profile import EmployeeRecord
from controlplus.domain.exceptions import (
    AuthenticationException,
    AuthorizationException,
    AuthProviderException,
    ResourceNotFoundException,
    ValidationException,
)
from controlplus.shared.telemetry.logging import get_logger
from controlplus.shared.utils.datetime import utc_now

logger = get_logger(__name__)


def _owner_uid(identity: ResolvedIdentity | None) -> str:
    if identity is None or not identity.is_owner or not identity.owner_uid:
        raise AuthorizationException(resource="technicians", action="manage")
    return identity.owner_uid


class TechnicianService:
    """Owner-side management of technician accounts and permissions."""

    def __init__(self, auth: IAuthProvider, employees: IEmployeeRepository) -> None:
        self._auth = auth
        self._employees = employees

    async def provision(
        self, owner: ResolvedIdentity, request: TechnicianProvisioning
    ) -> EmployeeRecord:
        """Create the technician's account and persist all record copies.

        Nothing is persisted when account creation fails. When persisting fails
        after the account exists, the account is deleted again.
        """
        admin_id = _owner_uid(owner)
        email = request.email.strip().lower()
        name = request.name.strip()
        if not name:
            raise ValidationException("Informe o nome do técnico.", field="name")
        if len(request.password) < MIN_PASSWORD_LENGTH:
            raise ValidationException(localize_auth_error("auth/weak-password"), field="password")
        permissions = EmployeePermissions.from_untrusted(request.permissions).enforce_dependencies()
        now = utc_now()

        async with self._auth.isolated_session() as secondary:
            try:
                tokens = await secondary.sign_up(email, request.password)
            except AuthProviderException as e:
                raise AuthenticationException(localize_auth_error(e.code), e.code) from e
            record = EmployeeRecord(
                uid=tokens.uid,
                admin_id=admin_id,
                permissions=permissions,
                must_change_password=True,
                name=name,
                email=email,
                specialty=request.specialty.strip(),
                parent_subscription=subscription_for(owner),
                data={"initialPassword": request.password, "createdAt": now, "updatedAt": now},
            )
            try:
                await secondary.update_profile(tokens.id_token, display_name=name)
                await self._employees.save_provisioned(record)
            except Exception:
                logger.exception("Persisting technician %s failed; removing the new account", tokens.uid)
                try:
                    await secondary.delete_account(tokens.id_token)
                except AuthProviderException as e:
                    logger.error("Rollback of account %s failed: %s", tokens.uid, e.code)
                raise
        logger.info("Provisioned technician %s for owner %s", record.uid, admin_id)
        return record

    async def list(self, owner: ResolvedIdentity) -> list[EmployeeRecord]:
        return await self._employees.list_for_owner(_owner_uid(owner))

    async def _get(self, admin_id: str, uid: str) -> EmployeeRecord:
        record = await self._employees.get_for_owner(admin_id, uid)
        if record is None:
            raise ResourceNotFoundException("technician", uid)
        return record

    async def update_permissions(
        self, owner: ResolvedIdentity, uid: str, raw_permissions: object
    ) -> EmployeeRecord:
        """Normalize and persist a full permission map on every copy.

        The owner's current subscription is copied onto the record in the same write.
        """
        admin_id = _owner_uid(owner)
        record = await self._get(admin_id, uid)
        permissions = EmployeePermissions.from_untrusted(raw_permissions).enforce_dependencies()
        return await self._store_permissions(owner, admin_id, record, permissions)

    async def toggle_permission(
        self, owner: ResolvedIdentity, uid: str, key: str, enabled: bool
    ) -> EmployeePermissions:
        admin_id = _owner_uid(owner)
        record = await self._get(admin_id, uid)
        try:
            permissions = record.permissions.with_toggle(key, enabled)
        except KeyError as e:
            raise ValidationException(f"Unknown permission: {key}", field="key") from e
        updated = await self._store_permissions(owner, admin_id, record, permissions)
        return updated.permissions

    async def _store_permissions(
        self,
        owner: ResolvedIdentity,
        admin_id: str,
        record: EmployeeRecord,
        permissions: EmployeePermissions,
    ) -> EmployeeRecord:
        parent = subscription_for(owner)
        fields = {
            "permissions": permissions.to_dict(),
            "updatedAt": utc_now(),
            **parent.to_parent_fields(),
        }
        await self._employees.update_everywhere(admin_id, record.uid, fields)
        return replace(record, permissions=permissions, parent_subscription=parent)

    async def delete(self, owner: ResolvedIdentity, uid: str) -> None:
        """Delete the technician's account (when its stored credential still works) and records."""
        admin_id = _owner_uid(owner)
        record = await self._get(admin_id, uid)
        if record.email and record.initial_password:
            try:
                async with self._auth.isolated_session() as secondary:
                    tokens = await secondary.sign_in(record.email, record.initial_password)
                    await secondary.delete_account(tokens.id_token)
            except AuthProviderException as e:
                logger.warning(
                    "Could not delete auth account of technician %s (%s); removing records only",
                    uid,
                    e.code,
                )
        else:
            logger.warning("Technician %s has no stored credential; removing records only", uid)
        await self._employees.delete_everywhere(admin_id, uid)
        logger.info("Deleted technician %s of owner %s", uid, admin_id)
