"""Tenant record API schemas.

Business records are schemaless documents shared with the web client; the API
passes their fields through as JSON objects.
"""

from typing import Any

from pydantic import BaseModel, Field


class RecordListResponse(BaseModel):
    collection: str
    items: list[dict[str, Any]] = Field(default_factory=list)


class RecordWriteRequest(BaseModel):
    data: dict[str, Any]
