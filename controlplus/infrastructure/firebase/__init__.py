"""Firestore (REST) and Firebase Auth (Identity Toolkit) integration."""

from controlplus.infrastructure.firebase.auth import AuthTokens, IdentityToolkitClient
from controlplus.infrastructure.firebase.client import (
    close_firebase,
    get_firestore_client,
    init_firebase,
)
from controlplus.infrastructure.firebase.listeners import ListenerRegistration, PollingWatcher

__all__ = [
    "AuthTokens",
    "IdentityToolkitClient",
    "ListenerRegistration",
    "PollingWatcher",
    "close_firebase",
    "get_firestore_client",
    "init_firebase",
]
