"""Firestore-backed profile repository (users/{uid})."""

from __future__ import annotations

from typing import Any

from controlplus.domain.entities.profile import UserProfile
from controlplus.infrastructure.firebase._rest_client import FirestoreRESTClient
from controlplus.infrastructure.firebase.collections import profile_path
from controlplus.infrastructure.firebase.repositories._access import store_access


class FirestoreProfileRepository:
    """Reads and merges the per-account profile document."""

    def __init__(self, client: FirestoreRESTClient) -> None:
        self._client = client

    async def get(self, uid: str) -> UserProfile | None:
        """Return the profile for uid, or None when the document is missing."""
        path = profile_path(uid)
        with store_access(path):
            doc = await self._client.document(path).get()
        if not doc:
            return None
        return UserProfile.from_document(doc.id, doc.to_dict())

    async def merge(self, uid: str, data: dict[str, Any]) -> None:
        """Write the given top-level fields, keeping the rest of the document."""
        path = profile_path(uid)
        with store_access(path):
            await self._client.document(path).set(data, merge=True)

    async def delete(self, uid: str) -> None:
        path = profile_path(uid)
        with store_access(path):
            await self._client.document(path).delete()
