"""Build API response models from application results."""

from __future__ import annotations

from dataclasses import replace

from controlplus.application.dtos.access import PageAccessDecision, ResolvedIdentity
from controlplus.application.dtos.account import AuthSession
from controlplus.application.dtos.dashboard import DashboardStats
from controlplus.application.services.permission_gate import nav_items_for
from controlplus.application.services.subscription_gate import (
    evaluate_subscription,
    is_page_blocked,
    subscription_for,
)
from controlplus.core.constants import PAGE_ACCOUNT
from controlplus.domain.entities.permissions import EmployeePermissions
from controlplus.domain.entities.profile import EmployeeRecord
from controlplus.schemas.auth import TokenResponse
from controlplus.schemas.dashboard import (
    DashboardResponse,
    RevenueBucketResponse,
    TechnicianRankingResponse,
)
from controlplus.schemas.session import (
    NavItemResponse,
    PageAccessResponse,
    SessionResponse,
    SubscriptionResponse,
)
from controlplus.schemas.technician import TechnicianResponse


def token_response(session: AuthSession) -> TokenResponse:
    return TokenResponse(
        uid=session.uid,
        email=session.email,
        id_token=session.id_token,
        refresh_token=session.refresh_token,
        expires_in=session.expires_in,
        must_change_password=session.must_change_password,
    )


def subscription_response(identity: ResolvedIdentity) -> SubscriptionResponse:
    state = evaluate_subscription(subscription_for(identity))
    return SubscriptionResponse(
        status=state.status,
        plan=state.plan,
        is_active=state.is_active,
        is_trialing=state.is_trialing,
        trial_days_left=state.trial_days_left,
    )


def session_response(identity: ResolvedIdentity) -> SessionResponse:
    """Role, navigation and subscription state for the resolved actor.

    Owners get no permission map: every page is theirs.
    """
    employee = identity.employee
    permissions: dict[str, bool] = {}
    if identity.is_employee:
        permissions = (employee.permissions if employee else EmployeePermissions()).to_dict()
    return SessionResponse(
        uid=identity.uid,
        role=identity.role.value,
        owner_uid=identity.owner_uid,
        source=identity.source,
        must_change_password=bool(employee and employee.must_change_password),
        permissions=permissions,
        navigation=[
            NavItemResponse(id=item.id, label=item.label, permission=item.permission)
            for item in nav_items_for(identity)
        ],
        subscription=subscription_response(identity),
    )


def page_response(
    decision: PageAccessDecision, blocked_by_subscription: bool = False
) -> PageAccessResponse:
    return PageAccessResponse(
        requested=decision.requested,
        page=decision.page,
        allowed=decision.allowed and not blocked_by_subscription,
        redirected=decision.redirected,
        blocked_by_subscription=blocked_by_subscription,
        permission=decision.permission,
        warning=decision.warning,
    )


def technician_response(record: EmployeeRecord) -> TechnicianResponse:
    return TechnicianResponse(
        uid=record.uid,
        admin_id=record.admin_id,
        name=record.name,
        email=record.email,
        specialty=record.specialty,
        must_change_password=record.must_change_password,
        permissions=record.permissions.to_dict(),
    )


def dashboard_response(stats: DashboardStats) -> DashboardResponse:
    return DashboardResponse(
        revenue_today=stats.revenue_today,
        appointments_today=stats.appointments_today,
        new_clients_this_month=stats.new_clients_this_month,
        pending_commissions=stats.pending_commissions,
        weekly_revenue=[
            RevenueBucketResponse(label=b.label, total=b.total) for b in stats.weekly_revenue
        ],
        upcoming_appointments=stats.upcoming_appointments,
        technician_ranking=[
            TechnicianRankingResponse(key=r.key, name=r.name, total=r.total, orders=r.orders)
            for r in stats.technician_ranking
        ],
        vehicles_in_yard=stats.vehicles_in_yard,
        professional_id=stats.professional_id,
    )


def gated_page_response(decision: PageAccessDecision, identity: ResolvedIdentity) -> PageAccessResponse:
    """Page response with the subscription gate applied.

    With an inactive subscription every page outside the account area redirects
    to the account page.
    """
    state = evaluate_subscription(subscription_for(identity))
    if decision.allowed and is_page_blocked(state, decision.page):
        return page_response(replace(decision, page=PAGE_ACCOUNT), blocked_by_subscription=True)
    return page_response(decision)
