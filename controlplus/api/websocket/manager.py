"""WebSocket connection manager.

Tracks each realtime connection together with its AccessSession, indexed by
account uid so sign-out can close every session of that account. Use via
app.state.ws_manager (set in lifespan).
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from fastapi import WebSocket
from fastapi.encoders import jsonable_encoder
from starlette.websockets import WebSocketState

from controlplus.application.services.access_session import AccessSession

logger = logging.getLogger(__name__)

SIGNED_OUT_CLOSE_CODE = 4001
SHUTDOWN_CLOSE_CODE = 1001


class ConnectionManager:
    """Manages WebSocket connections and their access sessions.

    - register() ties a connection to its session; unregister() closes the
      session (releasing its listeners).
    - close_user() ends every connection of one account.
    - All bookkeeping is lock-protected for concurrent access.
    """

    def __init__(self) -> None:
        self._sessions: dict[WebSocket, AccessSession] = {}
        self._by_uid: dict[str, set[WebSocket]] = {}
        self._lock = asyncio.Lock()

    async def register(self, websocket: WebSocket, session: AccessSession) -> None:
        async with self._lock:
            self._sessions[websocket] = session
            self._by_uid.setdefault(session.identity.uid, set()).add(websocket)

    async def unregister(self, websocket: WebSocket) -> None:
        """Remove a connection and close its session. Safe to call twice."""
        async with self._lock:
            session = self._sessions.pop(websocket, None)
            if session is not None:
                conns = self._by_uid.get(session.identity.uid)
                if conns is not None:
                    conns.discard(websocket)
                    if not conns:
                        del self._by_uid[session.identity.uid]
        if session is not None:
            session.close()

    async def send(self, websocket: WebSocket, message: dict[str, Any]) -> bool:
        """Send JSON to one connection; returns False when the connection is gone."""
        if websocket.client_state is not WebSocketState.CONNECTED:
            return False
        try:
            await websocket.send_json(jsonable_encoder(message))
        except (RuntimeError, ConnectionError) as e:
            logger.info("Dropping WebSocket after failed send: %s", e)
            await self.unregister(websocket)
            return False
        return True

    async def close_user(self, uid: str) -> int:
        """Close every connection of uid (sign-out). Returns how many were closed."""
        async with self._lock:
            targets = list(self._by_uid.get(uid, set()))
        for websocket in targets:
            await self._close(websocket, SIGNED_OUT_CLOSE_CODE, "Signed out")
        return len(targets)

    async def close_all(self) -> None:
        async with self._lock:
            targets = list(self._sessions)
        for websocket in targets:
            await self._close(websocket, SHUTDOWN_CLOSE_CODE, "Server shutdown")

    async def _close(self, websocket: WebSocket, code: int, reason: str) -> None:
        await self.unregister(websocket)
        if websocket.client_state is WebSocketState.CONNECTED:
            try:
                await websocket.close(code=code, reason=reason)
            except RuntimeError as e:
                logger.debug("WebSocket already closing: %s", e)

    async def get_connection_count(self) -> int:
        """Return the total number of active connections (lock-safe)."""
        async with self._lock:
            return len(self._sessions)
