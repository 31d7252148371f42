"""Pytest configuration and fixtures for Control+ Oficina.

Settings require Firebase credentials, so fake values are put in the
environment before controlplus.main is imported. HTTP tests build a fresh app
and assign an AccessContext backed by in-memory doubles to app.state (httpx's
ASGITransport does not run the lifespan).
"""

import json
import os

os.environ.setdefault(
    "FIREBASE_SERVICE_ACCOUNT_KEY",
    json.dumps({"type": "service_account", "project_id": "test-project"}),
)
os.environ.setdefault("FIREBASE_WEB_API_KEY", "test-web-api-key")

import pytest
from httpx import ASGITransport, AsyncClient

from controlplus.api.websocket import ConnectionManager
from controlplus.core.config import get_settings
from controlplus.core.context import AccessContext
from controlplus.core.limiter import limiter
from controlplus.main import create_app
from tests.fakes import FakeAuthProvider, FakeListenerFactory, InMemoryFirestore


@pytest.fixture
def store() -> InMemoryFirestore:
    return InMemoryFirestore()


@pytest.fixture
def auth() -> FakeAuthProvider:
    return FakeAuthProvider()


@pytest.fixture
def listeners() -> FakeListenerFactory:
    return FakeListenerFactory()


@pytest.fixture
def access_context(store, auth, listeners) -> AccessContext:
    """AccessContext over the in-memory store and fake auth provider."""
    return AccessContext(store=store, auth=auth, settings=get_settings(), listeners=listeners)


@pytest.fixture
def app(access_context):
    """Fresh FastAPI app wired to the in-memory context; rate limits off."""
    application = create_app()
    application.state.access_context = access_context
    application.state.ws_manager = ConnectionManager()
    limiter.enabled = False
    yield application
    limiter.enabled = True


@pytest.fixture
async def client(app) -> AsyncClient:
    """Async HTTP client against the FastAPI app (ASGI)."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
