"""Tenant records API: CRUD on the owner's business collections.

Every path is derived from the resolved owner uid; technicians are limited by
their permissions and everyone by the subscription state.
"""

from typing import Annotated, Any

from fastapi import APIRouter, Depends, Request, Response

from controlplus.api.v1.dependencies import get_resolved_identity, get_tenant_records_service
from controlplus.application.dtos.access import ResolvedIdentity
from controlplus.application.services.tenant_records_service import TenantRecordsService
from controlplus.core.limiter import limit_writes
from controlplus.schemas.record import RecordListResponse, RecordWriteRequest

router = APIRouter()

Actor = Annotated[ResolvedIdentity, Depends(get_resolved_identity)]


@router.get("/{collection}", response_model=RecordListResponse)
async def list_records(
    collection: str,
    actor: Actor,
    records: TenantRecordsService = Depends(get_tenant_records_service),
):
    items = await records.list(actor, collection)
    return RecordListResponse(collection=collection, items=items)


@router.post("/{collection}", status_code=201)
@limit_writes
async def create_record(
    request: Request,
    collection: str,
    body: RecordWriteRequest,
    actor: Actor,
    records: TenantRecordsService = Depends(get_tenant_records_service),
) -> dict[str, Any]:
    return await records.create(actor, collection, body.data)


@router.get("/{collection}/{record_id}")
async def get_record(
    collection: str,
    record_id: str,
    actor: Actor,
    records: TenantRecordsService = Depends(get_tenant_records_service),
) -> dict[str, Any]:
    return await records.get(actor, collection, record_id)


@router.put("/{collection}/{record_id}", status_code=204)
@limit_writes
async def update_record(
    request: Request,
    collection: str,
    record_id: str,
    body: RecordWriteRequest,
    actor: Actor,
    records: TenantRecordsService = Depends(get_tenant_records_service),
):
    """Partial update; 404 when the record does not exist."""
    await records.update(actor, collection, record_id, body.data)
    return Response(status_code=204)


@router.delete("/{collection}/{record_id}", status_code=204)
@limit_writes
async def delete_record(
    request: Request,
    collection: str,
    record_id: str,
    actor: Actor,
    records: TenantRecordsService = Depends(get_tenant_records_service),
):
    await records.delete(actor, collection, record_id)
    return Response(status_code=204)
