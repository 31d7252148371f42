"""Pydantic request/response schemas for the HTTP and WebSocket API."""
