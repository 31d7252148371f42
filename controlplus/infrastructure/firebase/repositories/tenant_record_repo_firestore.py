"""Firestore-backed repository for tenant business records.

Paths come from a TenantScope; this class never builds a tenant path itself.
"""

from __future__ import annotations

from typing import Any

from controlplus.domain.exceptions import ResourceNotFoundException
from controlplus.infrastructure.firebase._rest_client import (
    DocumentMissingError,
    FirestoreRESTClient,
)
from controlplus.infrastructure.firebase.repositories._access import store_access


class FirestoreTenantRecordRepository:
    """CRUD over users/{ownerUid}/{collection}/{id} documents."""

    def __init__(self, client: FirestoreRESTClient) -> None:
        self._client = client

    async def list(self, collection_path: str) -> list[dict[str, Any]]:
        """Return every document as data plus "id"."""
        with store_access(collection_path):
            return [
                {"id": doc.id, **doc.to_dict()}
                async for doc in self._client.collection(collection_path).stream()
            ]

    async def get(self, document_path: str) -> dict[str, Any] | None:
        with store_access(document_path):
            doc = await self._client.document(document_path).get()
        if not doc:
            return None
        return {"id": doc.id, **doc.to_dict()}

    async def add(self, collection_path: str, data: dict[str, Any]) -> str:
        """Create a document under a generated id; return the id."""
        with store_access(collection_path):
            ref = await self._client.collection(collection_path).add(data)
        return ref.id

    async def set(self, document_path: str, data: dict[str, Any], merge: bool = False) -> None:
        with store_access(document_path):
            await self._client.document(document_path).set(data, merge=merge)

    async def update(self, document_path: str, data: dict[str, Any]) -> None:
        """Update fields of an existing document (ResourceNotFoundException if missing)."""
        try:
            with store_access(document_path):
                await self._client.document(document_path).update(data)
        except DocumentMissingError as e:
            collection, _, record_id = document_path.rpartition("/")
            raise ResourceNotFoundException(collection.rsplit("/", 1)[-1], record_id) from e

    async def delete(self, document_path: str) -> None:
        with store_access(document_path):
            await self._client.document(document_path).delete()
