"""Technician API: owner-only provisioning, permissions and removal."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request, Response

from controlplus.api.v1.dependencies import get_resolved_identity, get_technician_service
from controlplus.api.v1.presenters import technician_response
from controlplus.application.dtos.access import ResolvedIdentity
from controlplus.application.dtos.account import TechnicianProvisioning
from controlplus.application.services.technician_service import TechnicianService
from controlplus.core.limiter import limit_provision, limit_writes
from controlplus.domain.entities.permissions import PERMISSION_CATALOG
from controlplus.schemas.technician import (
    PermissionCatalogEntryResponse,
    PermissionsUpdateRequest,
    PermissionToggleRequest,
    TechnicianCreateRequest,
    TechnicianResponse,
)

router = APIRouter()

Owner = Annotated[ResolvedIdentity, Depends(get_resolved_identity)]


@router.get("", response_model=list[TechnicianResponse])
async def list_technicians(
    owner: Owner,
    technicians: TechnicianService = Depends(get_technician_service),
):
    return [technician_response(r) for r in await technicians.list(owner)]


@router.post("", response_model=TechnicianResponse, status_code=201)
@limit_provision
async def create_technician(
    request: Request,
    body: TechnicianCreateRequest,
    owner: Owner,
    technicians: TechnicianService = Depends(get_technician_service),
):
    """Create the technician's account and records; the owner's session is untouched."""
    record = await technicians.provision(
        owner,
        TechnicianProvisioning(
            name=body.name,
            email=body.email,
            password=body.password,
            specialty=body.specialty,
            permissions=body.permissions,
        ),
    )
    return technician_response(record)


@router.get("/permission-catalog", response_model=list[PermissionCatalogEntryResponse])
def permission_catalog():
    """The permissions an owner can grant, in display order."""
    return [
        PermissionCatalogEntryResponse(
            key=e.key, label=e.label, description=e.description, depends_on=e.depends_on
        )
        for e in PERMISSION_CATALOG
    ]


@router.put("/{uid}/permissions", response_model=TechnicianResponse)
@limit_writes
async def update_permissions(
    request: Request,
    uid: str,
    body: PermissionsUpdateRequest,
    owner: Owner,
    technicians: TechnicianService = Depends(get_technician_service),
):
    record = await technicians.update_permissions(owner, uid, body.permissions)
    return technician_response(record)


@router.patch("/{uid}/permissions", response_model=dict[str, bool])
@limit_writes
async def toggle_permission(
    request: Request,
    uid: str,
    body: PermissionToggleRequest,
    owner: Owner,
    technicians: TechnicianService = Depends(get_technician_service),
):
    """Flip one permission; turning patio off also turns patio_edit off."""
    permissions = await technicians.toggle_permission(owner, uid, body.key, body.enabled)
    return permissions.to_dict()


@router.delete("/{uid}", status_code=204)
@limit_writes
async def delete_technician(
    request: Request,
    uid: str,
    owner: Owner,
    technicians: TechnicianService = Depends(get_technician_service),
):
    await technicians.delete(owner, uid)
    return Response(status_code=204)
