"""Repository interfaces (ports) for the application layer.

Protocols define contracts that infrastructure implementations must fulfill (DIP).
All types reference domain entities or application DTOs only; no infrastructure imports.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from controlplus.domain.entities.profile import EmployeeRecord, UserProfile


class IProfileRepository(Protocol):
    """Protocol for the users/{uid} profile store."""

    async def get(self, uid: str) -> UserProfile | None:
        """Return the profile, or None when missing."""

    async def merge(self, uid: str, data: dict[str, Any]) -> None:
        """Write the given top-level fields, keeping the others."""

    async def delete(self, uid: str) -> None:
        """Delete the profile document."""


class IEmployeeRepository(Protocol):
    """Protocol for technician records (owner namespace, flat mirror, profile)."""

    async def get_flat(self, uid: str) -> EmployeeRecord | None:
        """Legacy flat lookup by uid."""

    async def find_in_owner_namespaces(self, uid: str) -> EmployeeRecord | None:
        """Search every owner's employees sub-collection for uid."""

    async def get_for_owner(self, admin_id: str, uid: str) -> EmployeeRecord | None:
        """Return the owner-namespace record (includes initialPassword)."""

    async def list_for_owner(self, admin_id: str) -> list[EmployeeRecord]:
        """Return every technician of an owner."""

    async def save_provisioned(self, record: EmployeeRecord) -> None:
        """Write owner copy, flat mirror and profile of a new technician."""

    async def update_everywhere(self, admin_id: str, uid: str, fields: dict[str, Any]) -> None:
        """Merge fields into every copy of the technician."""

    async def merge_owner_copy(self, admin_id: str, uid: str, fields: dict[str, Any]) -> None:
        """Merge fields into the owner-namespace record only."""

    async def merge_profile(self, uid: str, fields: dict[str, Any], admin_id: str | None = None) -> None:
        """Merge fields into the technician's own profile, keeping it an employee profile."""

    async def delete_everywhere(self, admin_id: str, uid: str) -> None:
        """Delete every copy of the technician."""


class ITenantRecordRepository(Protocol):
    """Protocol for tenant business records addressed by scoped paths."""

    async def list(self, collection_path: str) -> list[dict[str, Any]]:
        """Return every document (data plus id)."""

    async def get(self, document_path: str) -> dict[str, Any] | None:
        """Return one document (data plus id) or None."""

    async def add(self, collection_path: str, data: dict[str, Any]) -> str:
        """Create under a generated id; return the id."""

    async def set(self, document_path: str, data: dict[str, Any], merge: bool = False) -> None:
        """Create or overwrite (merge keeps unspecified fields)."""

    async def update(self, document_path: str, data: dict[str, Any]) -> None:
        """Update an existing document."""

    async def delete(self, document_path: str) -> None:
        """Delete a document."""


class IMigrationStore(Protocol):
    """Protocol for legacy collections and migration markers."""

    async def list_legacy(self, source: str) -> list[tuple[str, dict[str, Any]]]:
        """Return (id, data) pairs of a legacy root collection."""

    async def get_marker(self, owner_uid: str, migration_id: str) -> dict[str, Any] | None:
        """Return the completion marker, if any."""

    async def save_marker(self, owner_uid: str, migration_id: str, data: dict[str, Any]) -> None:
        """Persist the completion marker."""
