"""Firestore client (REST-based, no firebase-admin).

Initialized at app startup using either FIREBASE_SERVICE_ACCOUNT_KEY (JSON string)
or FIREBASE_SERVICE_ACCOUNT_PATH (file path). The client is handed to the
AccessContext built in the lifespan; request code never reaches for this module.
"""

import json
import logging
from pathlib import Path

from controlplus.core.config import Settings, get_settings
from controlplus.infrastructure.firebase._rest_client import (
    FirestoreRESTClient,
    _get_credentials,
)

logger = logging.getLogger(__name__)

_firestore_client: FirestoreRESTClient | None = None


def load_service_account(settings: Settings) -> dict | None:
    """Return service account dict from env key or file path."""
    key_json = (
        settings.firebase_service_account_key.get_secret_value()
        if settings.firebase_service_account_key
        else None
    )
    if key_json:
        try:
            return json.loads(key_json)
        except json.JSONDecodeError as e:
            raise ValueError("FIREBASE_SERVICE_ACCOUNT_KEY is not valid JSON") from e
    path = settings.firebase_service_account_path
    if path:
        resolved = Path(path).expanduser().resolve()
        if not resolved.is_file():
            logger.warning(
                "FIREBASE_SERVICE_ACCOUNT_PATH set but file not found: %s (resolved: %s)",
                path,
                resolved,
            )
            return None
        with open(resolved, encoding="utf-8") as f:
            return json.load(f)
    return None


def resolve_project_id(settings: Settings, key_dict: dict | None) -> str | None:
    """FIREBASE_PROJECT_ID wins; otherwise the service account's project_id."""
    if settings.firebase_project_id:
        return settings.firebase_project_id
    if key_dict:
        return key_dict.get("project_id")
    return None


def init_firebase(settings: Settings | None = None) -> bool:
    """Initialize the Firestore client (REST API + google-auth).

    Idempotent if already initialized. On invalid/malformed credentials or any
    initialization error, logs the exception and returns False; the lifespan
    refuses to start without a client.

    Returns:
        True if Firestore was initialized, False on error.
    """
    global _firestore_client
    if _firestore_client is not None:
        return True
    settings = settings or get_settings()
    try:
        key_dict = load_service_account(settings)
        if not key_dict:
            return False

        project_id = resolve_project_id(settings, key_dict)
        if not project_id:
            logger.error("Firebase service account JSON missing 'project_id'")
            return False

        cred = _get_credentials(key_dict)
        _firestore_client = FirestoreRESTClient(
            project_id, cred, timeout=settings.firestore_timeout_seconds
        )
        logger.info("Firestore REST client initialized for project %s", project_id)
        return True
    except Exception:
        logger.exception("Firebase initialization failed")
        return False


def get_firestore_client() -> FirestoreRESTClient | None:
    """Return the Firestore client, or None if not initialized.

    Operations used by the repositories (all async):
    - await db.document(path).get() -> DocumentSnapshot | None
    - await db.document(path).set(data, merge=True) / .update(data) / .delete()
    - async for doc in db.collection(path).stream()
    - async for doc in db.collection_group("employees").where(...).stream()
    - await db.batch_write([...])
    """
    return _firestore_client


async def close_firebase() -> None:
    """Close the Firestore client's HTTP connection pool. Call from app shutdown."""
    global _firestore_client
    if _firestore_client is not None:
        await _firestore_client.aclose()
        _firestore_client = None
        logger.info("Firestore HTTP client closed")
