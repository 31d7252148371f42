"""Dashboard API: aggregates over the tenant's readable collections."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query

from controlplus.api.v1.dependencies import get_dashboard_service, get_resolved_identity
from controlplus.api.v1.presenters import dashboard_response
from controlplus.application.dtos.access import ResolvedIdentity
from controlplus.application.services.dashboard_service import DashboardService
from controlplus.schemas.dashboard import DashboardResponse

router = APIRouter()


@router.get("", response_model=DashboardResponse)
async def get_dashboard(
    actor: Annotated[ResolvedIdentity, Depends(get_resolved_identity)],
    professional_id: str | None = Query(default=None, max_length=128),
    dashboard: DashboardService = Depends(get_dashboard_service),
):
    """Today's revenue and appointments, 7-day revenue, ranking; optionally one technician."""
    return dashboard_response(await dashboard.stats(actor, professional_id or None))
