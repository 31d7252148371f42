"""One-time copy of the legacy demo_* root collections into an owner's namespace.

Idempotency comes from a persisted marker document: once written, later runs
return the recorded counts without reading the legacy data again. The marker
is written only after every collection was copied, so a failed run is retried
in full (writes are merges keyed by the legacy id).
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from controlplus.application.dtos.migration import MigrationReport
from controlplus.application.interfaces.repositories import IMigrationStore, ITenantRecordRepository
from controlplus.application.services.scope_provider import TenantScope
from controlplus.core.constants import (
    COLLECTION_APPOINTMENTS,
    COLLECTION_CLIENTS,
    COLLECTION_PROFESSIONALS,
    COLLECTION_SERVICES,
    COLLECTION_TRANSACTIONS,
    COLLECTION_YARD,
    LEGACY_COLLECTION_PAIRS,
)
from controlplus.shared.telemetry.logging import get_logger
from controlplus.shared.utils.datetime import utc_now

logger = get_logger(__name__)


def _number(value: Any, default: float = 0) -> Any:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return default
    return value


def normalize_client(data: dict[str, Any]) -> dict[str, Any]:
    fields = ("name", "cpf", "phone", "email", "vehicleBrand", "vehicleModel", "vehicleYear", "vehiclePlate")
    doc: dict[str, Any] = {key: data.get(key) or "" for key in fields}
    doc["createdAt"] = data.get("createdAt") or utc_now()
    return doc


def normalize_professional(data: dict[str, Any]) -> dict[str, Any]:
    return {key: data.get(key) or "" for key in ("name", "email", "specialty")}


def normalize_service(data: dict[str, Any]) -> dict[str, Any]:
    return {
        "name": data.get("name") or "",
        "price": _number(data.get("price")),
        "duration": _number(data.get("duration"), 60),
        "commissionType": data.get("commissionType") or "percentage",
        "commissionValue": _number(data.get("commissionValue")),
    }


def normalize_appointment(data: dict[str, Any]) -> dict[str, Any]:
    return {
        **data,
        "status": data.get("status") or "agendado",
        "vehicleBrand": data.get("vehicleBrand") or "",
        "vehicleModel": data.get("vehicleModel") or "",
        "vehiclePlate": data.get("vehiclePlate") or "",
        "partsCost": _number(data.get("partsCost")),
        "paymentMethod": data.get("paymentMethod") or "pix",
    }


def normalize_transaction(data: dict[str, Any]) -> dict[str, Any]:
    total = _number(data.get("totalAmount"), _number(data.get("amount")))
    return {
        **data,
        "totalAmount": total,
        "serviceAmount": _number(data.get("serviceAmount"), total),
        "partsCost": _number(data.get("partsCost")),
        "commission": _number(data.get("commission")),
    }


def normalize_yard_entry(data: dict[str, Any]) -> dict[str, Any]:
    return {
        **data,
        "status": data.get("status") or "recebido",
        "priority": data.get("priority") or "normal",
    }


NORMALIZERS: dict[str, Callable[[dict[str, Any]], dict[str, Any]]] = {
    COLLECTION_CLIENTS: normalize_client,
    COLLECTION_PROFESSIONALS: normalize_professional,
    COLLECTION_SERVICES: normalize_service,
    COLLECTION_APPOINTMENTS: normalize_appointment,
    COLLECTION_TRANSACTIONS: normalize_transaction,
    COLLECTION_YARD: normalize_yard_entry,
}


class LegacyMigrationService:
    """Copies legacy collections once per owner, guarded by a marker document."""

    def __init__(
        self,
        store: IMigrationStore,
        records: ITenantRecordRepository,
        migration_id: str,
    ) -> None:
        self._store = store
        self._records = records
        self._migration_id = migration_id

    async def migrate(self, owner_uid: str, force: bool = False) -> MigrationReport:
        marker = await self._store.get_marker(owner_uid, self._migration_id)
        if marker is not None and not force:
            return MigrationReport(
                migration_id=self._migration_id,
                owner_uid=owner_uid,
                already_completed=True,
                copied=dict(marker.get("collections") or {}),
            )

        scope = TenantScope(owner_uid)
        copied: dict[str, int] = {}
        for source, target in LEGACY_COLLECTION_PAIRS:
            documents = await self._store.list_legacy(source)
            normalize = NORMALIZERS[target]
            for doc_id, data in documents:
                await self._records.set(
                    scope.document_path(target, doc_id), normalize(data), merge=True
                )
            copied[source] = len(documents)
            if documents:
                logger.info("Migrated %s -> %s (%d documents)", source, target, len(documents))

        await self._store.save_marker(
            owner_uid,
            self._migration_id,
            {"migrationId": self._migration_id, "completedAt": utc_now(), "collections": copied},
        )
        return MigrationReport(
            migration_id=self._migration_id,
            owner_uid=owner_uid,
            already_completed=False,
            copied=copied,
        )
