"""Thin Firestore REST API client (no firebase-admin).

Uses google-auth for service account tokens and Firestore REST v1.
Keeps the deployment small (avoids grpcio / firebase-admin).
All HTTP calls use httpx.AsyncClient so they do not block the event loop.

Paths passed to collection()/document() are relative to the database root,
e.g. ``users/{ownerUid}/clients`` or ``users/{ownerUid}/employees/{uid}``.
"""

from __future__ import annotations

import asyncio
import json
import re
from collections.abc import AsyncIterator
from typing import Any

import httpx

from controlplus.infrastructure.firebase._rest_encoding import (
    _encode_value,
    decode_fields,
    encode_document,
)
from controlplus.shared.utils.generators import generate_cuid

_FIRESTORE_SCOPE = "https://www.googleapis.com/auth/datastore"
_BASE = "https://firestore.googleapis.com/v1"
_LIST_PAGE_SIZE = 300
_SIMPLE_FIELD = re.compile(r"^[A-Za-z_][A-Za-z_0-9]*$")


def _get_credentials(key_dict: dict):
    """Return google.oauth2.service_account.Credentials for Firestore."""
    from google.oauth2 import service_account

    return service_account.Credentials.from_service_account_info(
        key_dict, scopes=[_FIRESTORE_SCOPE]
    )


def _get_access_token(credentials) -> str:
    from google.auth.transport.requests import Request

    if not credentials.valid:
        credentials.refresh(Request())
    return credentials.token


class FirestoreError(Exception):
    """Base error for Firestore REST failures that callers may handle."""


class FirestorePermissionDeniedError(FirestoreError):
    """Raised on 403 (security rules or IAM rejected the request)."""

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"Permission denied: {path}")


class DocumentExistsError(FirestoreError):
    """Raised when createDocument returns 409 (document ID already exists)."""


class DocumentMissingError(FirestoreError):
    """Raised when update() targets a document that does not exist."""

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"Document not found: {path}")


def _quote_field_path(field: str) -> str:
    """Backtick-quote field names that are not simple identifiers."""
    if _SIMPLE_FIELD.match(field):
        return field
    return "`" + field.replace("\\", "\\\\").replace("`", "\\`") + "`"


def _mask_params(fields: list[str]) -> list[tuple[str, str]]:
    return [("updateMask.fieldPaths", _quote_field_path(f)) for f in fields]


async def _request_async(
    client: httpx.AsyncClient,
    url: str,
    method: str = "GET",
    body: dict | None = None,
    access_token: str | None = None,
    params: list[tuple[str, str]] | None = None,
) -> Any:
    """Perform async HTTP request to Firestore REST API. 404 returns None."""
    headers = {"Content-Type": "application/json"}
    if access_token:
        headers["Authorization"] = f"Bearer {access_token}"
    if method == "GET":
        resp = await client.get(url, headers=headers, params=params)
    elif method == "PATCH":
        resp = await client.patch(url, headers=headers, json=body, params=params)
    elif method == "POST":
        resp = await client.post(url, headers=headers, json=body, params=params)
    elif method == "DELETE":
        resp = await client.delete(url, headers=headers)
    else:
        raise ValueError(f"Unsupported method: {method!r}")
    if resp.status_code == 404:
        return None
    if resp.status_code == 403:
        raise FirestorePermissionDeniedError(url)
    if resp.status_code == 409:
        raise DocumentExistsError("Document already exists")
    if resp.status_code not in (200, 204):
        resp.raise_for_status()
    if method == "DELETE":
        return {}
    raw = resp.content
    return json.loads(raw.decode()) if raw else {}


class DocumentSnapshot:
    """Snapshot of a document (id + data + path relative to the database root)."""

    def __init__(self, id_: str, data: dict, path: str = ""):
        self.id = id_
        self.path = path
        self._data = data

    def to_dict(self) -> dict:
        return self._data


class DocumentReference:
    """Reference to a single document; matches firestore API style."""

    def __init__(self, client: "FirestoreRESTClient", path: str):
        self._client = client
        self._path = path

    @property
    def id(self) -> str:
        return self._path.rsplit("/", 1)[-1]

    @property
    def path(self) -> str:
        """Path relative to the database root (e.g. users/abc/clients/xyz)."""
        return self._client.relative_path(self._path)

    def collection(self, collection_id: str) -> "CollectionReference":
        return CollectionReference(self._client, f"{self._path}/{collection_id}")

    async def set(self, data: dict[str, Any], merge: bool = False) -> None:
        """Create or overwrite the document.

        With merge=True only the given top-level fields are written (update mask);
        other fields of an existing document are kept.
        """
        params = _mask_params(list(data)) if merge else None
        await _request_async(
            self._client._http,
            f"{_BASE}/{self._path}",
            method="PATCH",
            body=encode_document(data),
            access_token=await self._client.get_token(),
            params=params,
        )

    async def update(self, data: dict[str, Any]) -> None:
        """Update the given top-level fields; fail if the document does not exist."""
        params = _mask_params(list(data))
        params.append(("currentDocument.exists", "true"))
        out = await _request_async(
            self._client._http,
            f"{_BASE}/{self._path}",
            method="PATCH",
            body=encode_document(data),
            access_token=await self._client.get_token(),
            params=params,
        )
        if out is None:
            raise DocumentMissingError(self.path)

    async def get(self) -> DocumentSnapshot | None:
        """Fetch the document; returns None if not found."""
        out = await _request_async(
            self._client._http,
            f"{_BASE}/{self._path}",
            access_token=await self._client.get_token(),
        )
        if not out:
            return None
        return DocumentSnapshot(self.id, decode_fields(out.get("fields")), self.path)

    async def delete(self) -> None:
        """Delete the document. Idempotent if document is already missing (404)."""
        await _request_async(
            self._client._http,
            f"{_BASE}/{self._path}",
            method="DELETE",
            access_token=await self._client.get_token(),
        )


_OP_MAP: dict[str, str] = {
    "==": "EQUAL",
    "!=": "NOT_EQUAL",
    "<": "LESS_THAN",
    "<=": "LESS_THAN_OR_EQUAL",
    ">": "GREATER_THAN",
    ">=": "GREATER_THAN_OR_EQUAL",
    "in": "IN",
    "not-in": "NOT_IN",
    "array_contains": "ARRAY_CONTAINS",
    "array-contains": "ARRAY_CONTAINS",
    "array_contains_any": "ARRAY_CONTAINS_ANY",
    "array-contains-any": "ARRAY_CONTAINS_ANY",
}


class _Query:
    """Fluent query builder; runs via runQuery (filter/order/offset/limit on server).

    With all_descendants=True the query is a collection group query over every
    collection named collection_id under parent.
    """

    def __init__(
        self,
        client: "FirestoreRESTClient",
        parent: str,
        collection_id: str,
        *,
        all_descendants: bool = False,
    ):
        self._client = client
        self._parent = parent
        self._collection_id = collection_id
        self._all_descendants = all_descendants
        self._filters: list[tuple[str, str, Any]] = []
        self._order_by_field: str | None = None
        self._order_direction: str = "ASCENDING"
        self._offset: int = 0
        self._limit: int = 100

    def where(self, field: str, op: str, value: Any) -> "_Query":
        self._filters.append((field, _OP_MAP.get(op, op), value))
        return self

    def order_by(self, field: str, direction: str = "ASCENDING") -> "_Query":
        self._order_by_field = field
        self._order_direction = direction
        return self

    def offset(self, n: int) -> "_Query":
        self._offset = n
        return self

    def limit(self, n: int) -> "_Query":
        self._limit = n
        return self

    def _structured_query(self) -> dict[str, Any]:
        source: dict[str, Any] = {"collectionId": self._collection_id}
        if self._all_descendants:
            source["allDescendants"] = True
        structured: dict[str, Any] = {"from": [source]}
        field_filters = [
            {
                "fieldFilter": {
                    "field": {"fieldPath": field},
                    "op": op,
                    "value": _encode_value(value),
                }
            }
            for field, op, value in self._filters
        ]
        if len(field_filters) == 1:
            structured["where"] = field_filters[0]
        elif field_filters:
            structured["where"] = {
                "compositeFilter": {"op": "AND", "filters": field_filters}
            }
        if self._order_by_field is not None:
            structured["orderBy"] = [
                {
                    "field": {"fieldPath": self._order_by_field},
                    "direction": self._order_direction,
                }
            ]
        if self._offset:
            structured["offset"] = self._offset
        if self._limit:
            structured["limit"] = self._limit
        return structured

    async def stream(self) -> AsyncIterator[DocumentSnapshot]:
        """Execute the query and yield document snapshots."""
        url = f"{_BASE}/{self._parent}:runQuery"
        body = {"structuredQuery": self._structured_query()}
        resp = await _request_async(
            self._client._http,
            url,
            method="POST",
            body=body,
            access_token=await self._client.get_token(),
        )
        items = resp if isinstance(resp, list) else ([resp] if resp else [])
        for item in items:
            if "document" not in item:
                continue
            yield self._client._snapshot_from_document(item["document"])


class CollectionReference:
    """Reference to a collection; matches firestore API style."""

    def __init__(self, client: "FirestoreRESTClient", path: str):
        self._client = client
        self._path = path.rstrip("/")

    @property
    def id(self) -> str:
        return self._path.rsplit("/", 1)[-1]

    @property
    def path(self) -> str:
        return self._client.relative_path(self._path)

    def document(self, document_id: str | None = None) -> DocumentReference:
        """Reference a document; a new CUID is used when document_id is omitted."""
        return DocumentReference(
            self._client, f"{self._path}/{document_id or generate_cuid()}"
        )

    async def create(self, document_id: str, data: dict[str, Any]) -> None:
        """Create a document with the given ID (DocumentExistsError if it exists)."""
        parent, collection_id = self._path.rsplit("/", 1)
        await _request_async(
            self._client._http,
            f"{_BASE}/{parent}/{collection_id}",
            method="POST",
            body=encode_document(data),
            access_token=await self._client.get_token(),
            params=[("documentId", document_id)],
        )

    async def add(self, data: dict[str, Any]) -> DocumentReference:
        """Create a document under a generated ID and return its reference."""
        ref = self.document()
        await self.create(ref.id, data)
        return ref

    def where(self, field: str, op: str, value: Any) -> _Query:
        """Start a query with a filter. Use .order_by(), .offset(), .limit(), then .stream()."""
        parent, collection_id = self._path.rsplit("/", 1)
        return _Query(self._client, parent, collection_id).where(field, op, value)

    async def stream(self) -> AsyncIterator[DocumentSnapshot]:
        """List every document in the collection (shallow, follows page tokens)."""
        url = f"{_BASE}/{self._path}"
        page_token: str | None = None
        while True:
            params = [("pageSize", str(_LIST_PAGE_SIZE))]
            if page_token:
                params.append(("pageToken", page_token))
            out = await _request_async(
                self._client._http,
                url,
                access_token=await self._client.get_token(),
                params=params,
            )
            if not out:
                return
            for doc in out.get("documents", []):
                yield self._client._snapshot_from_document(doc)
            page_token = out.get("nextPageToken")
            if not page_token:
                return


class FirestoreRESTClient:
    """Lightweight Firestore client using REST API (no firebase-admin)."""

    def __init__(
        self,
        project_id: str,
        credentials,
        *,
        http_client: httpx.AsyncClient | None = None,
        timeout: float = 30.0,
    ) -> None:
        self._project_id = project_id
        self._credentials = credentials
        self._database = f"projects/{project_id}/databases/(default)"
        self._prefix = f"{self._database}/documents"
        self._http = http_client if http_client is not None else httpx.AsyncClient(timeout=timeout)
        self._owns_http = http_client is None

    @property
    def project_id(self) -> str:
        return self._project_id

    async def aclose(self) -> None:
        """Close the HTTP client only if we created it (do not close injected client)."""
        if self._owns_http:
            await self._http.aclose()

    async def get_token(self) -> str:
        """Return a valid access token; refreshes in thread pool to avoid blocking."""
        return await asyncio.to_thread(_get_access_token, self._credentials)

    def relative_path(self, full_path: str) -> str:
        """Strip the projects/.../documents/ prefix from a resource name."""
        marker = f"{self._prefix}/"
        return full_path[len(marker):] if full_path.startswith(marker) else full_path

    def _snapshot_from_document(self, doc: dict) -> DocumentSnapshot:
        name = doc.get("name", "")
        doc_id = name.split("/")[-1] if name else ""
        return DocumentSnapshot(
            doc_id, decode_fields(doc.get("fields")), self.relative_path(name)
        )

    def collection(self, path: str) -> CollectionReference:
        return CollectionReference(self, f"{self._prefix}/{path.strip('/')}")

    def document(self, path: str) -> DocumentReference:
        return DocumentReference(self, f"{self._prefix}/{path.strip('/')}")

    def collection_group(self, collection_id: str) -> _Query:
        """Query every collection named collection_id, at any depth."""
        return _Query(self, self._prefix, collection_id, all_descendants=True)

    async def batch_write(self, writes: list[dict[str, Any]]) -> None:
        """Apply writes atomically via :commit.

        Each write is {"path": relative_path, "data": {...}, "merge": bool}
        or {"path": relative_path, "delete": True}.
        """
        encoded: list[dict[str, Any]] = []
        for write in writes:
            name = f"{self._prefix}/{write['path'].strip('/')}"
            if write.get("delete"):
                encoded.append({"delete": name})
                continue
            entry: dict[str, Any] = {"update": {"name": name, **encode_document(write["data"])}}
            if write.get("merge"):
                entry["updateMask"] = {
                    "fieldPaths": [_quote_field_path(f) for f in write["data"]]
                }
            encoded.append(entry)
        if not encoded:
            return
        await _request_async(
            self._http,
            f"{_BASE}/{self._prefix}:commit",
            method="POST",
            body={"writes": encoded},
            access_token=await self.get_token(),
        )
