"""DTOs for dashboard aggregation."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class RevenueBucket:
    """One day of the rolling revenue chart (label is dd/mm)."""

    label: str
    total: float


@dataclass(frozen=True)
class TechnicianRanking:
    key: str
    name: str
    total: float
    orders: int


@dataclass(frozen=True)
class DashboardStats:
    """Aggregates computed over tenant-scoped records."""

    revenue_today: float
    appointments_today: int
    new_clients_this_month: int
    pending_commissions: float
    weekly_revenue: list[RevenueBucket] = field(default_factory=list)
    upcoming_appointments: list[dict[str, Any]] = field(default_factory=list)
    technician_ranking: list[TechnicianRanking] = field(default_factory=list)
    vehicles_in_yard: int = 0
    professional_id: str | None = None
