"""Subscription gate: active / trial / inactive from stored billing fields."""

from __future__ import annotations

import math
from datetime import datetime, timedelta

from controlplus.application.dtos.access import ResolvedIdentity, SubscriptionState
from controlplus.core.constants import PAGE_ACCOUNT, PAGE_SETTINGS
from controlplus.domain.entities.profile import SubscriptionSnapshot
from controlplus.domain.enums import SubscriptionStatus
from controlplus.domain.exceptions import SubscriptionInactiveException
from controlplus.shared.utils.datetime import ensure_utc, utc_now

# Reachable while the subscription is inactive
ACCOUNT_PAGES: frozenset[str] = frozenset({PAGE_ACCOUNT, PAGE_SETTINGS})

_DAY = timedelta(days=1)


def evaluate_subscription(
    snapshot: SubscriptionSnapshot, now: datetime | None = None
) -> SubscriptionState:
    """Derive gate state.

    trialing holds while there is no trialEndsAt or it is still in the future;
    days left is the ceiling of the remaining time in days, never negative.
    """
    now = ensure_utc(now) if now else utc_now()
    trial_ends_at = ensure_utc(snapshot.trial_ends_at)
    is_trialing = snapshot.status == SubscriptionStatus.TRIALING.value and (
        trial_ends_at is None or trial_ends_at > now
    )
    is_active = snapshot.status == SubscriptionStatus.ACTIVE.value or is_trialing
    days_left = None
    if is_trialing and trial_ends_at is not None:
        days_left = max(0, math.ceil((trial_ends_at - now) / _DAY))
    return SubscriptionState(
        status=snapshot.status,
        plan=snapshot.plan,
        is_active=is_active,
        is_trialing=is_trialing,
        trial_days_left=days_left,
    )


def subscription_for(identity: ResolvedIdentity) -> SubscriptionSnapshot:
    """Owners read their own fields; employees read the parent snapshot copied at sync time."""
    if identity.is_employee:
        employee = identity.employee
        if employee is not None and employee.parent_subscription is not None:
            return employee.parent_subscription
        return SubscriptionSnapshot()
    if identity.profile is not None:
        return identity.profile.subscription
    return SubscriptionSnapshot()


def is_page_blocked(state: SubscriptionState, page_id: str) -> bool:
    return not state.is_active and page_id not in ACCOUNT_PAGES


def ensure_active(state: SubscriptionState) -> None:
    """Raise SubscriptionInactiveException when feature access must be blocked."""
    if not state.is_active:
        raise SubscriptionInactiveException(state.status)
