"""Firestore path builders (schema-in-code).

Firestore has no DDL. Collections are created on first write; names live in
core/constants.py and the layout is:

    users/{uid}                              profile
    users/{ownerUid}/employees/{uid}         technician record (owner namespace)
    employees/{uid}                          flat mirror for direct uid lookup
    users/{ownerUid}/{collection}/{id}       tenant business records
    users/{ownerUid}/migrations/{id}         one-time migration markers
"""

from controlplus.core.constants import (
    COLLECTION_EMPLOYEES,
    COLLECTION_MIGRATIONS,
    COLLECTION_USERS,
)


def profile_path(uid: str) -> str:
    return f"{COLLECTION_USERS}/{uid}"


def owner_employee_path(admin_id: str, uid: str) -> str:
    return f"{COLLECTION_USERS}/{admin_id}/{COLLECTION_EMPLOYEES}/{uid}"


def owner_employees_collection(admin_id: str) -> str:
    return f"{COLLECTION_USERS}/{admin_id}/{COLLECTION_EMPLOYEES}"


def flat_employee_path(uid: str) -> str:
    return f"{COLLECTION_EMPLOYEES}/{uid}"


def migration_marker_path(owner_uid: str, migration_id: str) -> str:
    return f"{COLLECTION_USERS}/{owner_uid}/{COLLECTION_MIGRATIONS}/{migration_id}"


def admin_id_from_employee_path(path: str) -> str | None:
    """Extract adminId from users/{adminId}/employees/{uid}; None for other paths."""
    parts = path.strip("/").split("/")
    if (
        len(parts) == 4
        and parts[0] == COLLECTION_USERS
        and parts[2] == COLLECTION_EMPLOYEES
        and parts[1]
    ):
        return parts[1]
    return None
