"""Dashboard API schemas."""

from typing import Any

from pydantic import BaseModel, Field


class RevenueBucketResponse(BaseModel):
    label: str
    total: float


class TechnicianRankingResponse(BaseModel):
    key: str
    name: str
    total: float
    orders: int


class DashboardResponse(BaseModel):
    revenue_today: float
    appointments_today: int
    new_clients_this_month: int
    pending_commissions: float
    weekly_revenue: list[RevenueBucketResponse] = Field(default_factory=list)
    upcoming_appointments: list[dict[str, Any]] = Field(default_factory=list)
    technician_ranking: list[TechnicianRankingResponse] = Field(default_factory=list)
    vehicles_in_yard: int = 0
    professional_id: str | None = None
