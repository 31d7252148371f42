"""Realtime WebSocket: /ws?token=<id token>.

The connection owns one AccessSession. Role resolution finishes before any
tenant listener exists; snapshots of the readable collections are pushed as
they change, and a change to the actor's profile re-resolves the session.
"""

from typing import Annotated, Any, Union

from fastapi import APIRouter, Request, WebSocket, WebSocketDisconnect
from pydantic import Field, TypeAdapter, ValidationError

from controlplus.api.v1.presenters import gated_page_response, session_response
from controlplus.application.dtos.access import ResolvedIdentity
from controlplus.application.services.access_session import AccessSession
from controlplus.application.services.subscription_gate import (
    evaluate_subscription,
    subscription_for,
)
from controlplus.domain.exceptions import AuthenticationException
from controlplus.schemas.websocket import (
    NavigateMessage,
    RefreshMessage,
    SnapshotMessage,
    WebSocketStatusResponse,
)
from controlplus.shared.telemetry.logging import get_logger

logger = get_logger(__name__)

router = APIRouter()

NO_SCOPE_CLOSE_CODE = 4403

_client_message = TypeAdapter(
    Annotated[Union[NavigateMessage, RefreshMessage], Field(discriminator="type")]
)


async def _reject_websocket(websocket: WebSocket, reason: str, code: int = 1008) -> None:
    """Accept then immediately close with code/reason so client gets a proper close frame."""
    await websocket.accept()
    await websocket.close(code=code, reason=reason)


def _is_active(resolved: ResolvedIdentity | None) -> bool:
    return resolved is not None and evaluate_subscription(subscription_for(resolved)).is_active


@router.websocket("")
async def websocket_endpoint(websocket: WebSocket):
    """Verify the token, start the access session and serve navigate/refresh messages."""
    manager = websocket.app.state.ws_manager
    ctx = getattr(websocket.app.state, "access_context", None)
    token = websocket.query_params.get("token")
    if ctx is None:
        await _reject_websocket(websocket, "Service not initialized", code=1011)
        return
    if not token:
        await _reject_websocket(websocket, "Missing token")
        return
    try:
        identity = await ctx.auth.verify_id_token(token)
    except AuthenticationException:
        await _reject_websocket(websocket, "Invalid token")
        return

    await websocket.accept()

    async def push_snapshot(collection: str, items: list[dict[str, Any]]) -> None:
        if not _is_active(session.resolved):
            return
        message = SnapshotMessage(collection=collection, items=items)
        await manager.send(websocket, message.model_dump())

    async def push_session(resolved: ResolvedIdentity | None) -> None:
        if resolved is None:
            await manager.send(
                websocket, {"type": "error", "error": "TENANT_SCOPE_UNAVAILABLE"}
            )
            return
        await manager.send(
            websocket, {"type": "session", "session": session_response(resolved).model_dump()}
        )

    session = AccessSession(
        identity,
        ctx.role_resolver(),
        ctx.listeners,
        on_collection=push_snapshot,
        on_session_change=push_session,
        default_page=ctx.settings.default_page,
    )
    await manager.register(websocket, session)
    try:
        if await session.start() is None:
            logger.warning("No access scope for %s; closing realtime session", identity.uid)
            await websocket.close(code=NO_SCOPE_CLOSE_CODE, reason="No access scope")
            return
        while True:
            raw = await websocket.receive_json()
            try:
                message = _client_message.validate_python(raw)
            except ValidationError:
                await manager.send(websocket, {"type": "error", "error": "INVALID_MESSAGE"})
                continue
            if isinstance(message, RefreshMessage):
                await session.refresh()
                continue
            if session.resolved is None:
                await manager.send(
                    websocket, {"type": "error", "error": "TENANT_SCOPE_UNAVAILABLE"}
                )
                continue
            response = gated_page_response(session.check_page(message.page), session.resolved)
            await manager.send(websocket, {"type": "page", **response.model_dump()})
            if response.warning:
                await manager.send(websocket, {"type": "warning", "message": response.warning})
    except WebSocketDisconnect:
        pass
    finally:
        await manager.unregister(websocket)


@router.get("/status", response_model=WebSocketStatusResponse)
async def websocket_status(request: Request) -> WebSocketStatusResponse:
    """Number of open realtime connections."""
    manager = request.app.state.ws_manager
    return WebSocketStatusResponse(total_connections=await manager.get_connection_count())
