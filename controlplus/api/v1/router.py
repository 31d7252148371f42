"""API v1 router aggregation.

Includes all endpoint modules with consistent prefix and tags. All routes
use dependencies from controlplus.api.v1.dependencies (no manual service construction).
"""

from fastapi import APIRouter

from controlplus.api.v1.endpoints import (
    auth,
    dashboard,
    health,
    records,
    session,
    technicians,
    websocket as ws_endpoint,
)

api_router = APIRouter()

api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(session.router, prefix="/session", tags=["session"])
api_router.include_router(technicians.router, prefix="/technicians", tags=["technicians"])
api_router.include_router(records.router, prefix="/records", tags=["records"])
api_router.include_router(dashboard.router, prefix="/dashboard", tags=["dashboard"])
api_router.include_router(ws_endpoint.router, prefix="/ws", tags=["websocket"])
