"""Application lifespan: startup and shutdown.

Single place for startup/shutdown wiring; no business logic here. Startup
order: Firestore client, auth HTTP client, AccessContext, WebSocket manager.
Shutdown runs in reverse.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

import httpx
from fastapi import FastAPI

from controlplus.core.config import get_settings
from controlplus.core.context import AccessContext

logger = logging.getLogger(__name__)


@asynccontextmanager
async def create_lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Run startup then yield; on exit run shutdown."""
    from controlplus.api.websocket import ConnectionManager
    from controlplus.infrastructure.firebase import (
        IdentityToolkitClient,
        PollingWatcher,
        close_firebase,
        get_firestore_client,
        init_firebase,
    )

    settings = get_settings()

    # ---- Startup ----
    if not init_firebase(settings):
        raise RuntimeError(
            "Firestore client could not be initialized; check FIREBASE_SERVICE_ACCOUNT_KEY / _PATH"
        )
    store = get_firestore_client()

    # Shared HTTP client for Identity Toolkit calls (connection reuse).
    app.state.auth_http_client = httpx.AsyncClient(timeout=settings.firestore_timeout_seconds)
    auth = IdentityToolkitClient(
        settings.firebase_web_api_key.get_secret_value(),
        store.project_id,
        http_client=app.state.auth_http_client,
        timeout=settings.firestore_timeout_seconds,
    )
    app.state.access_context = AccessContext(
        store=store,
        auth=auth,
        settings=settings,
        listeners=PollingWatcher(store, settings.realtime_poll_interval_seconds),
    )
    app.state.ws_manager = ConnectionManager()
    logger.info("%s %s started", settings.app_name, settings.app_version)

    yield

    # ---- Shutdown ----
    await app.state.ws_manager.close_all()
    logger.info("Realtime sessions closed")

    if getattr(app.state, "auth_http_client", None) is not None:
        await app.state.auth_http_client.aclose()
        app.state.auth_http_client = None
        logger.info("Auth HTTP client closed")

    await close_firebase()
