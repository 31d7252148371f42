"""WebSocket message schemas.

Server -> client: session, snapshot, page, warning, error.
Client -> server: navigate, refresh.
"""

from typing import Any, Literal

from pydantic import BaseModel, Field


class NavigateMessage(BaseModel):
    type: Literal["navigate"]
    page: str = Field(..., min_length=1)


class RefreshMessage(BaseModel):
    type: Literal["refresh"]


class SnapshotMessage(BaseModel):
    type: Literal["snapshot"] = "snapshot"
    collection: str
    items: list[dict[str, Any]]


class WebSocketStatusResponse(BaseModel):
    """Response for GET /ws/status (connection count)."""

    total_connections: int = Field(..., description="Number of active WebSocket connections")
