"""Firestore access for the one-time legacy collection migration."""

from __future__ import annotations

from typing import Any

from controlplus.infrastructure.firebase._rest_client import FirestoreRESTClient
from controlplus.infrastructure.firebase.collections import migration_marker_path
from controlplus.infrastructure.firebase.repositories._access import store_access


class FirestoreMigrationStore:
    """Reads legacy root collections and the persisted completion markers."""

    def __init__(self, client: FirestoreRESTClient) -> None:
        self._client = client

    async def list_legacy(self, source: str) -> list[tuple[str, dict[str, Any]]]:
        """Return (id, data) for every document of a legacy root collection."""
        with store_access(source):
            return [
                (doc.id, doc.to_dict())
                async for doc in self._client.collection(source).stream()
            ]

    async def get_marker(self, owner_uid: str, migration_id: str) -> dict[str, Any] | None:
        path = migration_marker_path(owner_uid, migration_id)
        with store_access(path):
            doc = await self._client.document(path).get()
        return doc.to_dict() if doc else None

    async def save_marker(self, owner_uid: str, migration_id: str, data: dict[str, Any]) -> None:
        path = migration_marker_path(owner_uid, migration_id)
        with store_access(path):
            await self._client.document(path).set(data)
