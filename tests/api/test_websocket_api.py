"""Realtime WebSocket: session push, page checks and rejections."""

import pytest
from fastapi.testclient import TestClient
from httpx import AsyncClient
from starlette.websockets import WebSocketDisconnect

from tests.fakes import seed_owner, seed_technician

WS = "/api/v1/ws"


@pytest.fixture
def ws_client(app) -> TestClient:
    # No context manager: the lifespan would try to reach Firebase.
    return TestClient(app)


def test_owner_receives_session_and_binds_listeners(ws_client, store, auth, listeners) -> None:
    seed_owner(store)
    auth.add_account("owner1", "owner1@oficina.com", "segredo1")

    with ws_client.websocket_connect(f"{WS}?token=token-owner1") as ws:
        message = ws.receive_json()
        assert message["type"] == "session"
        assert message["session"]["owner_uid"] == "owner1"
        paths = listeners.active_paths()
        assert len(paths) == 9
        assert all(path.startswith("users/owner1/") for path in paths)

        ws.send_json({"type": "navigate", "page": "estoque"})
        page = ws.receive_json()
        assert page["type"] == "page"
        assert page["allowed"] is True
        assert page["page"] == "estoque"


def test_technician_denied_page_gets_single_warning(ws_client, store, auth, listeners) -> None:
    seed_owner(store)
    seed_technician(store, permissions={"agenda": True})
    auth.add_account("tech1", "tech1@oficina.com", "segredo1")

    with ws_client.websocket_connect(f"{WS}?token=token-tech1") as ws:
        assert ws.receive_json()["type"] == "session"
        assert sorted(listeners.active_paths()) == [
            "users/owner1/appointments",
            "users/owner1/professionals",
            "users/owner1/services",
        ]

        ws.send_json({"type": "navigate", "page": "financeiro"})
        page = ws.receive_json()
        assert page["page"] == "dashboard"
        assert page["redirected"] is True
        warning = ws.receive_json()
        assert warning["type"] == "warning"
        assert "Financeiro" in warning["message"]

        ws.send_json({"type": "navigate", "page": "financeiro"})
        assert ws.receive_json()["warning"] is None

        ws.send_json({"type": "navigate", "page": "agenda"})
        assert ws.receive_json()["allowed"] is True


def test_refresh_picks_up_new_permissions(ws_client, store, auth, listeners) -> None:
    seed_owner(store)
    seed_technician(store, permissions={"agenda": True})
    auth.add_account("tech1", "tech1@oficina.com", "segredo1")

    with ws_client.websocket_connect(f"{WS}?token=token-tech1") as ws:
        ws.receive_json()
        store.docs["users/tech1"]["permissions"] = {"agenda": True, "clientes": True}
        ws.send_json({"type": "refresh"})
        message = ws.receive_json()
        assert message["type"] == "session"
        assert message["session"]["permissions"]["clientes"] is True
        assert "users/owner1/clients" in listeners.active_paths()


def test_inactive_subscription_redirects_to_account(ws_client, store, auth) -> None:
    seed_owner(store, subscriptionStatus="canceled")
    auth.add_account("owner1", "owner1@oficina.com", "segredo1")

    with ws_client.websocket_connect(f"{WS}?token=token-owner1") as ws:
        session = ws.receive_json()["session"]
        assert session["subscription"]["is_active"] is False
        ws.send_json({"type": "navigate", "page": "agenda"})
        page = ws.receive_json()
        assert page["page"] == "conta"
        assert page["blocked_by_subscription"] is True


def test_invalid_message(ws_client, store, auth) -> None:
    seed_owner(store)
    auth.add_account("owner1", "owner1@oficina.com", "segredo1")

    with ws_client.websocket_connect(f"{WS}?token=token-owner1") as ws:
        ws.receive_json()
        ws.send_json({"type": "subscribe", "collection": "clients"})
        assert ws.receive_json() == {"type": "error", "error": "INVALID_MESSAGE"}


def test_account_without_scope_is_closed(ws_client, auth) -> None:
    auth.add_account("ghost", "ghost@oficina.com", "segredo1")

    with ws_client.websocket_connect(f"{WS}?token=token-ghost") as ws:
        assert ws.receive_json() == {"type": "error", "error": "TENANT_SCOPE_UNAVAILABLE"}
        with pytest.raises(WebSocketDisconnect) as exc:
            ws.receive_json()
    assert exc.value.code == 4403


@pytest.mark.parametrize(("query", "reason"), [("", "Missing token"), ("?token=bogus", "Invalid token")])
def test_rejects_bad_tokens(ws_client, query: str, reason: str) -> None:
    with ws_client.websocket_connect(f"{WS}{query}") as ws:
        with pytest.raises(WebSocketDisconnect) as exc:
            ws.receive_json()
    assert exc.value.code == 1008
    assert exc.value.reason == reason


def test_rejects_when_not_initialized(app, ws_client) -> None:
    app.state.access_context = None
    with ws_client.websocket_connect(f"{WS}?token=token-owner1") as ws:
        with pytest.raises(WebSocketDisconnect) as exc:
            ws.receive_json()
    assert exc.value.code == 1011


async def test_status_without_connections(client: AsyncClient) -> None:
    response = await client.get(f"{WS}/status")
    assert response.status_code == 200
    assert response.json() == {"total_connections": 0}
