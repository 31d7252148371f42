"""In-memory doubles for the document store, auth provider and realtime listeners.

InMemoryFirestore mirrors the surface of FirestoreRESTClient used by the
repositories (document/collection/collection_group/batch_write), so the real
repositories run against it unchanged.
"""

from __future__ import annotations

import copy
import itertools
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Any

from controlplus.domain.entities.identity import AuthIdentity
from controlplus.domain.exceptions import AuthenticationException, AuthProviderException
from controlplus.infrastructure.firebase._rest_client import (
    DocumentMissingError,
    DocumentSnapshot,
    FirestorePermissionDeniedError,
)

_ids = itertools.count(1)


class InMemoryFirestore:
    """Dict-backed store keyed by document path (users/u1/clients/c1)."""

    project_id = "test-project"

    def __init__(self) -> None:
        self.docs: dict[str, dict[str, Any]] = {}
        self.denied_prefixes: set[str] = set()
        self.denied_groups: set[str] = set()
        self.commits: list[list[dict[str, Any]]] = []
        self.fail_next_commit: Exception | None = None
        self.open_streams = 0

    def check(self, path: str) -> None:
        if any(path == p or path.startswith(p + "/") for p in self.denied_prefixes):
            raise FirestorePermissionDeniedError(path)

    def seed(self, path: str, data: dict[str, Any]) -> None:
        self.docs[path] = copy.deepcopy(data)

    def document(self, path: str) -> FakeDocumentReference:
        return FakeDocumentReference(self, path.strip("/"))

    def collection(self, path: str) -> FakeCollectionReference:
        return FakeCollectionReference(self, path.strip("/"))

    def collection_group(self, collection_id: str) -> FakeQuery:
        return FakeQuery(self, None, collection_id)

    async def batch_write(self, writes: list[dict[str, Any]]) -> None:
        if self.fail_next_commit is not None:
            error, self.fail_next_commit = self.fail_next_commit, None
            raise error
        for write in writes:
            self.check(write["path"])
        self.commits.append(copy.deepcopy(writes))
        for write in writes:
            path = write["path"]
            if write.get("delete"):
                self.docs.pop(path, None)
            elif write.get("merge"):
                self.docs.setdefault(path, {}).update(copy.deepcopy(write["data"]))
            else:
                self.docs[path] = copy.deepcopy(write["data"])

    def children(self, collection_path: str) -> list[DocumentSnapshot]:
        depth = collection_path.count("/") + 1
        return [
            DocumentSnapshot(path.rsplit("/", 1)[-1], copy.deepcopy(data), path)
            for path, data in sorted(self.docs.items())
            if path.startswith(collection_path + "/") and path.count("/") == depth
        ]


class FakeDocumentReference:
    def __init__(self, store: InMemoryFirestore, path: str) -> None:
        self._store = store
        self.path = path

    @property
    def id(self) -> str:
        return self.path.rsplit("/", 1)[-1]

    async def get(self) -> DocumentSnapshot | None:
        self._store.check(self.path)
        data = self._store.docs.get(self.path)
        if data is None:
            return None
        return DocumentSnapshot(self.id, copy.deepcopy(data), self.path)

    async def set(self, data: dict[str, Any], merge: bool = False) -> None:
        self._store.check(self.path)
        if merge:
            self._store.docs.setdefault(self.path, {}).update(copy.deepcopy(data))
        else:
            self._store.docs[self.path] = copy.deepcopy(data)

    async def update(self, data: dict[str, Any]) -> None:
        self._store.check(self.path)
        if self.path not in self._store.docs:
            raise DocumentMissingError(self.path)
        self._store.docs[self.path].update(copy.deepcopy(data))

    async def delete(self) -> None:
        self._store.check(self.path)
        self._store.docs.pop(self.path, None)


class FakeQuery:
    def __init__(self, store: InMemoryFirestore, parent: str | None, collection_id: str) -> None:
        self._store = store
        self._parent = parent
        self._collection_id = collection_id
        self._filters: list[tuple[str, Any]] = []
        self._limit: int | None = None

    def where(self, field_name: str, op: str, value: Any) -> FakeQuery:
        assert op == "=="
        self._filters.append((field_name, value))
        return self

    def limit(self, n: int) -> FakeQuery:
        self._limit = n
        return self

    async def stream(self) -> AsyncIterator[DocumentSnapshot]:
        self._store.open_streams += 1
        try:
            for snap in self._matches()[: self._limit]:
                yield snap
        finally:
            self._store.open_streams -= 1

    def _matches(self) -> list[DocumentSnapshot]:
        if self._parent is None:
            if self._collection_id in self._store.denied_groups:
                raise FirestorePermissionDeniedError(f"**/{self._collection_id}")
            candidates = [
                DocumentSnapshot(path.rsplit("/", 1)[-1], copy.deepcopy(data), path)
                for path, data in sorted(self._store.docs.items())
                if path.split("/")[-2] == self._collection_id
            ]
        else:
            collection_path = f"{self._parent}/{self._collection_id}".strip("/")
            self._store.check(collection_path)
            candidates = self._store.children(collection_path)
        return [
            snap
            for snap in candidates
            if all(snap.to_dict().get(f) == v for f, v in self._filters)
        ]


class FakeCollectionReference:
    def __init__(self, store: InMemoryFirestore, path: str) -> None:
        self._store = store
        self.path = path

    @property
    def id(self) -> str:
        return self.path.rsplit("/", 1)[-1]

    def document(self, document_id: str | None = None) -> FakeDocumentReference:
        return FakeDocumentReference(self._store, f"{self.path}/{document_id or f'gen{next(_ids)}'}")

    async def add(self, data: dict[str, Any]) -> FakeDocumentReference:
        ref = self.document()
        await ref.set(data)
        return ref

    def where(self, field_name: str, op: str, value: Any) -> FakeQuery:
        parent, _, collection_id = self.path.rpartition("/")
        return FakeQuery(self._store, parent, collection_id).where(field_name, op, value)

    async def stream(self) -> AsyncIterator[DocumentSnapshot]:
        self._store.check(self.path)
        for snap in self._store.children(self.path):
            yield snap


@dataclass
class FakeTokens:
    uid: str
    email: str
    id_token: str
    refresh_token: str = "refresh"
    expires_in: int = 3600


@dataclass
class FakeAccount:
    uid: str
    email: str
    password: str
    display_name: str = ""
    photo_url: str = ""


@dataclass
class FakeAuthProvider:
    """Auth provider double: accounts by email, ID tokens 'token-{uid}'."""

    accounts: dict[str, FakeAccount] = field(default_factory=dict)
    isolated_sessions: int = 0
    deleted: list[str] = field(default_factory=list)
    fail_update_profile: Exception | None = None

    def add_account(self, uid: str, email: str, password: str) -> FakeAccount:
        account = FakeAccount(uid, email, password)
        self.accounts[email] = account
        return account

    def _tokens(self, account: FakeAccount) -> FakeTokens:
        return FakeTokens(uid=account.uid, email=account.email, id_token=f"token-{account.uid}")

    def _by_token(self, id_token: str) -> FakeAccount:
        for account in self.accounts.values():
            if id_token == f"token-{account.uid}":
                return account
        raise AuthProviderException("auth/invalid-id-token")

    async def sign_up(self, email: str, password: str) -> FakeTokens:
        if email in self.accounts:
            raise AuthProviderException("auth/email-already-in-use")
        if len(password) < 6:
            raise AuthProviderException("auth/weak-password")
        account = self.add_account(f"uid-{email.split('@')[0]}", email, password)
        return self._tokens(account)

    async def sign_in(self, email: str, password: str) -> FakeTokens:
        account = self.accounts.get(email)
        if account is None:
            raise AuthProviderException("auth/user-not-found")
        if account.password != password:
            raise AuthProviderException("auth/wrong-password")
        return self._tokens(account)

    async def delete_account(self, id_token: str) -> None:
        account = self._by_token(id_token)
        del self.accounts[account.email]
        self.deleted.append(account.uid)

    async def update_password(self, id_token: str, new_password: str) -> FakeTokens:
        account = self._by_token(id_token)
        account.password = new_password
        return self._tokens(account)

    async def update_profile(
        self, id_token: str, display_name: str | None = None, photo_url: str | None = None
    ) -> None:
        if self.fail_update_profile is not None:
            raise self.fail_update_profile
        account = self._by_token(id_token)
        if display_name is not None:
            account.display_name = display_name
        if photo_url is not None:
            account.photo_url = photo_url

    async def verify_id_token(self, id_token: str) -> AuthIdentity:
        try:
            account = self._by_token(id_token)
        except AuthProviderException as e:
            raise AuthenticationException("Invalid or expired token") from e
        return AuthIdentity(uid=account.uid, email=account.email, display_name=account.display_name)

    @asynccontextmanager
    async def isolated_session(self):
        self.isolated_sessions += 1
        yield self


@dataclass
class FakeRegistration:
    path: str
    kind: str
    on_snapshot: Any
    active: bool = True

    def unsubscribe(self) -> None:
        self.active = False


class FakeListenerFactory:
    """Records every listener; tests fire snapshots by hand."""

    def __init__(self) -> None:
        self.registrations: list[FakeRegistration] = []

    def watch_collection(self, path, on_snapshot, on_error=None) -> FakeRegistration:
        reg = FakeRegistration(path, "collection", on_snapshot)
        self.registrations.append(reg)
        return reg

    def watch_document(self, path, on_snapshot, on_error=None) -> FakeRegistration:
        reg = FakeRegistration(path, "document", on_snapshot)
        self.registrations.append(reg)
        return reg

    @property
    def active(self) -> list[FakeRegistration]:
        return [r for r in self.registrations if r.active]

    def active_paths(self, kind: str = "collection") -> list[str]:
        return [r.path for r in self.active if r.kind == kind]


def seed_owner(store: InMemoryFirestore, uid: str = "owner1", **fields: Any) -> None:
    """Owner profile at users/{uid} (active subscription unless overridden)."""
    store.seed(
        f"users/{uid}",
        {"uid": uid, "role": "admin", "email": f"{uid}@oficina.com", "subscriptionStatus": "active", **fields},
    )


def seed_technician(
    store: InMemoryFirestore,
    admin_id: str = "owner1",
    uid: str = "tech1",
    permissions: dict[str, bool] | None = None,
    *,
    profile: bool = True,
    flat: bool = True,
    **fields: Any,
) -> dict[str, Any]:
    """Technician copies: owner namespace (with initialPassword), flat mirror and profile."""
    doc = {
        "uid": uid,
        "adminId": admin_id,
        "name": "Carlos",
        "email": f"{uid}@oficina.com",
        "permissions": permissions or {},
        "mustChangePassword": False,
        "parentSubscriptionStatus": "active",
        "parentSubscriptionPlan": "starter",
        **fields,
    }
    store.seed(f"users/{admin_id}/employees/{uid}", {**doc, "initialPassword": "segredo1"})
    if flat:
        store.seed(f"employees/{uid}", doc)
    if profile:
        store.seed(f"users/{uid}", {**doc, "role": "employee", "fullName": doc["name"]})
    return doc


def bearer(uid: str) -> dict[str, str]:
    """Authorization header accepted by FakeAuthProvider for uid."""
    return {"Authorization": f"Bearer token-{uid}"}
