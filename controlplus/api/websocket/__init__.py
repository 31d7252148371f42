"""WebSocket connection manager used by the realtime endpoint."""

from controlplus.api.websocket.manager import ConnectionManager

__all__ = ["ConnectionManager"]
