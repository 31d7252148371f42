"""Dashboard aggregation over tenant-scoped records.

Calendar boundaries (today, this month, the 7-day window) use the shop's
timezone; timestamps stored without an offset are read in that zone too.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date, datetime, timedelta
from typing import Any
from zoneinfo import ZoneInfo

from controlplus.application.dtos.access import ResolvedIdentity
from controlplus.application.dtos.dashboard import DashboardStats, RevenueBucket, TechnicianRanking
from controlplus.application.services.tenant_records_service import TenantRecordsService
from controlplus.core.constants import (
    COLLECTION_APPOINTMENTS,
    COLLECTION_CLIENTS,
    COLLECTION_TRANSACTIONS,
    COLLECTION_YARD,
)
from controlplus.shared.utils.datetime import coerce_datetime, utc_now

REVENUE = "receita"
DEFAULT_TEAM_KEY = "equipe"
DEFAULT_TEAM_NAME = "Equipe da oficina"
UPCOMING_LIMIT = 5
RANKING_LIMIT = 5
WINDOW_DAYS = 7
DASHBOARD_COLLECTIONS = (
    COLLECTION_APPOINTMENTS,
    COLLECTION_CLIENTS,
    COLLECTION_TRANSACTIONS,
    COLLECTION_YARD,
)


def _to_local(value: Any, tz: ZoneInfo) -> datetime | None:
    if isinstance(value, str) and value:
        try:
            parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None
        if parsed.tzinfo is None:
            return parsed.replace(tzinfo=tz)
        return parsed.astimezone(tz)
    parsed = coerce_datetime(value)
    return parsed.astimezone(tz) if parsed else None


def _amount(value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0.0
    return float(value)


def _by_professional(records: Iterable[dict[str, Any]], professional_id: str | None) -> list[dict[str, Any]]:
    if not professional_id:
        return list(records)
    return [r for r in records if r.get("professionalId") == professional_id]


def compute_dashboard(
    records: dict[str, list[dict[str, Any]]],
    *,
    now: datetime | None = None,
    tz: ZoneInfo | None = None,
    professional_id: str | None = None,
) -> DashboardStats:
    """Aggregate dashboard numbers. Missing collections count as empty."""
    tz = tz or ZoneInfo("UTC")
    local_now = (now or utc_now()).astimezone(tz)
    today: date = local_now.date()
    start_of_today = datetime(today.year, today.month, today.day, tzinfo=tz)

    transactions = _by_professional(records.get(COLLECTION_TRANSACTIONS, []), professional_id)
    appointments = _by_professional(records.get(COLLECTION_APPOINTMENTS, []), professional_id)
    yard = _by_professional(records.get(COLLECTION_YARD, []), professional_id)
    clients = records.get(COLLECTION_CLIENTS, [])

    revenue = [t for t in transactions if t.get("type") == REVENUE]

    revenue_by_day: dict[date, float] = {}
    for transaction in revenue:
        when = _to_local(transaction.get("date"), tz)
        if when is None:
            continue
        day = when.date()
        revenue_by_day[day] = revenue_by_day.get(day, 0.0) + _amount(transaction.get("totalAmount"))

    weekly = []
    for offset in range(WINDOW_DAYS - 1, -1, -1):
        day = today - timedelta(days=offset)
        weekly.append(RevenueBucket(day.strftime("%d/%m"), revenue_by_day.get(day, 0.0)))

    appointments_today = 0
    upcoming: list[tuple[datetime, dict[str, Any]]] = []
    for appointment in appointments:
        when = _to_local(appointment.get("date"), tz)
        if when is None:
            continue
        if when.date() == today:
            appointments_today += 1
        if when >= start_of_today:
            upcoming.append((when, appointment))
    upcoming.sort(key=lambda item: item[0])

    new_clients = 0
    for client in clients:
        created = _to_local(client.get("createdAt"), tz)
        if created and created.year == today.year and created.month == today.month:
            new_clients += 1

    ranking: dict[str, TechnicianRanking] = {}
    for transaction in revenue:
        key = transaction.get("professionalId") or transaction.get("professionalName") or DEFAULT_TEAM_KEY
        current = ranking.get(key) or TechnicianRanking(
            key=transaction.get("professionalId") or key,
            name=transaction.get("professionalName") or DEFAULT_TEAM_NAME,
            total=0.0,
            orders=0,
        )
        ranking[key] = TechnicianRanking(
            key=current.key,
            name=current.name,
            total=current.total + _amount(transaction.get("totalAmount")),
            orders=current.orders + 1,
        )

    return DashboardStats(
        revenue_today=revenue_by_day.get(today, 0.0),
        appointments_today=appointments_today,
        new_clients_this_month=new_clients,
        pending_commissions=sum(_amount(t.get("commission")) for t in revenue),
        weekly_revenue=weekly,
        upcoming_appointments=[
            {
                "id": appointment.get("id"),
                "clientName": appointment.get("clientName"),
                "date": when.isoformat(),
                "services": appointment.get("services") or [],
                "vehiclePlate": appointment.get("vehiclePlate") or "",
            }
            for when, appointment in upcoming[:UPCOMING_LIMIT]
        ],
        technician_ranking=sorted(ranking.values(), key=lambda r: r.total, reverse=True)[:RANKING_LIMIT],
        vehicles_in_yard=sum(1 for vehicle in yard if not vehicle.get("exitTime")),
        professional_id=professional_id,
    )


class DashboardService:
    """Loads the readable tenant collections and aggregates them."""

    def __init__(self, records: TenantRecordsService, timezone: str = "UTC") -> None:
        self._records = records
        self._tz = ZoneInfo(timezone)

    async def stats(
        self, identity: ResolvedIdentity, professional_id: str | None = None
    ) -> DashboardStats:
        snapshot = await self._records.snapshot(identity, DASHBOARD_COLLECTIONS)
        return compute_dashboard(snapshot, tz=self._tz, professional_id=professional_id)
