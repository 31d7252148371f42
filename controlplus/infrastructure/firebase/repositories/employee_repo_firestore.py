"""Firestore-backed technician repository.

Every technician exists in up to three places:

- users/{adminId}/employees/{uid}: owner-namespace record (only copy holding
  initialPassword)
- employees/{uid}: flat mirror for direct uid lookup
- users/{uid}: the technician's own profile (role "employee")

Writes that touch more than one copy go through a single batch commit.
"""

from __future__ import annotations

from contextlib import aclosing
from typing import Any

from controlplus.domain.entities.profile import SENSITIVE_EMPLOYEE_FIELDS, EmployeeRecord
from controlplus.domain.enums import Role
from controlplus.infrastructure.firebase._rest_client import FirestoreRESTClient
from controlplus.infrastructure.firebase.collections import (
    COLLECTION_EMPLOYEES,
    admin_id_from_employee_path,
    flat_employee_path,
    owner_employee_path,
    owner_employees_collection,
    profile_path,
)
from controlplus.infrastructure.firebase.repositories._access import store_access


def _employee_profile_fields(uid: str, fields: dict[str, Any], admin_id: str | None) -> dict[str, Any]:
    data = {k: v for k, v in fields.items() if k not in SENSITIVE_EMPLOYEE_FIELDS}
    data.update({"uid": uid, "role": Role.EMPLOYEE.value})
    if admin_id:
        data["adminId"] = admin_id
    return data

class FirestoreEmployeeRepository:
    """Technician records across the owner namespace, flat mirror and profile."""

    def __init__(self, client: FirestoreRESTClient) -> None:
        self._client = client

    async def get_flat(self, uid: str) -> EmployeeRecord | None:
        """Legacy flat lookup at employees/{uid}."""
        path = flat_employee_path(uid)
        with store_access(path):
            doc = await self._client.document(path).get()
        if not doc:
            return None
        return EmployeeRecord.from_document(doc.id, doc.to_dict())

    async def find_in_owner_namespaces(self, uid: str) -> EmployeeRecord | None:
        """Collection group search over every owner's employees sub-collection.

        Returns the first record whose uid field matches and whose path is an
        owner namespace; the adminId is taken from that path.
        """
        query = self._client.collection_group(COLLECTION_EMPLOYEES).where("uid", "==", uid).limit(10)
        with store_access(f"**/{COLLECTION_EMPLOYEES}"):
            async with aclosing(query.stream()) as snapshots:
                async for snapshot in snapshots:
                    admin_id = admin_id_from_employee_path(snapshot.path)
                    if admin_id is None:
                        continue
                    return EmployeeRecord.from_document(snapshot.id, snapshot.to_dict(), admin_id=admin_id)
        return None

    async def get_for_owner(self, admin_id: str, uid: str) -> EmployeeRecord | None:
        path = owner_employee_path(admin_id, uid)
        with store_access(path):
            doc = await self._client.document(path).get()
        if not doc:
            return None
        return EmployeeRecord.from_document(doc.id, doc.to_dict(), admin_id=admin_id)

    async def list_for_owner(self, admin_id: str) -> list[EmployeeRecord]:
        path = owner_employees_collection(admin_id)
        with store_access(path):
            return [
                EmployeeRecord.from_document(doc.id, doc.to_dict(), admin_id=admin_id)
                async for doc in self._client.collection(path).stream()
            ]

    async def save_provisioned(self, record: EmployeeRecord) -> None:
        """Write all three copies of a newly provisioned technician."""
        if not record.admin_id:
            raise ValueError("Technician record requires admin_id")
        owner_doc = record.to_employee_document()
        if record.initial_password:
            owner_doc["initialPassword"] = record.initial_password
        writes = [
            {"path": owner_employee_path(record.admin_id, record.uid), "data": owner_doc},
            {"path": flat_employee_path(record.uid), "data": record.to_employee_document()},
            {"path": profile_path(record.uid), "data": record.to_profile_document(), "merge": True},
        ]
        with store_access(owner_employee_path(record.admin_id, record.uid)):
            await self._client.batch_write(writes)

    async def update_everywhere(self, admin_id: str, uid: str, fields: dict[str, Any]) -> None:
        """Merge fields into every copy. Sensitive fields only reach the owner copy.

        A merge creates a missing copy, so each write also carries the fields
        that link it to the owner; the profile keeps role "employee".
        """
        link = {"uid": uid, "adminId": admin_id}
        shared = {k: v for k, v in fields.items() if k not in SENSITIVE_EMPLOYEE_FIELDS}
        writes = [
            {"path": owner_employee_path(admin_id, uid), "data": {**fields, **link}, "merge": True},
            {"path": flat_employee_path(uid), "data": {**shared, **link}, "merge": True},
            {"path": profile_path(uid), "data": _employee_profile_fields(uid, shared, admin_id), "merge": True},
        ]
        with store_access(owner_employee_path(admin_id, uid)):
            await self._client.batch_write(writes)

    async def merge_owner_copy(self, admin_id: str, uid: str, fields: dict[str, Any]) -> None:
        """Merge fields into the owner-namespace record only."""
        path = owner_employee_path(admin_id, uid)
        with store_access(path):
            await self._client.document(path).set(fields, merge=True)

    async def merge_profile(self, uid: str, fields: dict[str, Any], admin_id: str | None = None) -> None:
        """Merge fields into users/{uid} as an employee profile."""
        path = profile_path(uid)
        with store_access(path):
            await self._client.document(path).set(_employee_profile_fields(uid, fields, admin_id), merge=True)

    async def delete_everywhere(self, admin_id: str, uid: str) -> None:
        writes = [
            {"path": owner_employee_path(admin_id, uid), "delete": True},
            {"path": flat_employee_path(uid), "delete": True},
            {"path": profile_path(uid), "delete": True},
        ]
        with store_access(owner_employee_path(admin_id, uid)):
            await self._client.batch_write(writes)
