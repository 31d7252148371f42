"""Technician management API schemas."""

from pydantic import BaseModel, EmailStr, Field


class TechnicianCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    email: EmailStr
    password: str = Field(..., min_length=1)
    specialty: str = Field(default="", max_length=200)
    permissions: dict[str, bool] = Field(default_factory=dict)


class PermissionsUpdateRequest(BaseModel):
    """Full permission map; unknown keys are dropped, missing keys become false."""

    permissions: dict[str, bool]


class PermissionToggleRequest(BaseModel):
    key: str = Field(..., min_length=1)
    enabled: bool


class TechnicianResponse(BaseModel):
    """Technician as seen by the owner (initial password never returned)."""

    uid: str
    admin_id: str | None
    name: str
    email: str
    specialty: str = ""
    must_change_password: bool = False
    permissions: dict[str, bool]


class PermissionCatalogEntryResponse(BaseModel):
    key: str
    label: str
    description: str
    depends_on: str | None = None
