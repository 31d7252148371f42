"""User profile, employee record, and subscription snapshot entities.

Field names in the `from_document` / `to_*_document` helpers are the persisted
Firestore field names shared with the web client; keep them exactly.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from controlplus.domain.entities.permissions import EmployeePermissions
from controlplus.domain.enums import Role
from controlplus.shared.utils.datetime import coerce_datetime

DEFAULT_SUBSCRIPTION_STATUS = "active"
DEFAULT_SUBSCRIPTION_PLAN = "starter"

# Stored on the owner-namespace employee copy only; never copied elsewhere.
SENSITIVE_EMPLOYEE_FIELDS = frozenset({"initialPassword"})


@dataclass(frozen=True)
class SubscriptionSnapshot:
    """Billing fields used by the subscription gate."""

    status: str = DEFAULT_SUBSCRIPTION_STATUS
    plan: str = DEFAULT_SUBSCRIPTION_PLAN
    trial_ends_at: datetime | None = None

    @classmethod
    def from_owner_fields(cls, data: dict[str, Any]) -> SubscriptionSnapshot:
        """Read subscriptionStatus / subscriptionPlan / trialEndsAt (owner profile)."""
        return cls(
            status=data.get("subscriptionStatus") or DEFAULT_SUBSCRIPTION_STATUS,
            plan=data.get("subscriptionPlan") or DEFAULT_SUBSCRIPTION_PLAN,
            trial_ends_at=coerce_datetime(data.get("trialEndsAt")),
        )

    @classmethod
    def from_parent_fields(cls, data: dict[str, Any]) -> SubscriptionSnapshot | None:
        """Read the parent* snapshot copied onto an employee record, if any."""
        if not any(
            key in data
            for key in ("parentSubscriptionStatus", "parentSubscriptionPlan", "parentTrialEndsAt")
        ):
            return None
        return cls(
            status=data.get("parentSubscriptionStatus") or DEFAULT_SUBSCRIPTION_STATUS,
            plan=data.get("parentSubscriptionPlan") or DEFAULT_SUBSCRIPTION_PLAN,
            trial_ends_at=coerce_datetime(data.get("parentTrialEndsAt")),
        )

    def to_parent_fields(self) -> dict[str, Any]:
        """Return the parent* fields written onto employee records."""
        return {
            "parentSubscriptionStatus": self.status,
            "parentSubscriptionPlan": self.plan,
            "parentTrialEndsAt": self.trial_ends_at,
        }


@dataclass(frozen=True)
class UserProfile:
    """Profile document at users/{uid}; one per signed-in account."""

    uid: str
    role: Role
    subscription: SubscriptionSnapshot = field(default_factory=SubscriptionSnapshot)
    admin_id: str | None = None
    permissions: EmployeePermissions = field(default_factory=EmployeePermissions)
    must_change_password: bool = False
    full_name: str = ""
    email: str = ""
    data: dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @classmethod
    def from_document(cls, uid: str, data: dict[str, Any]) -> UserProfile:
        return cls(
            uid=data.get("uid") or uid,
            role=Role.from_value(data.get("role")),
            subscription=SubscriptionSnapshot.from_owner_fields(data),
            admin_id=data.get("adminId") or None,
            permissions=EmployeePermissions.from_untrusted(data.get("permissions")),
            must_change_password=bool(data.get("mustChangePassword")),
            full_name=data.get("fullName") or "",
            email=data.get("email") or "",
            data=dict(data),
        )


@dataclass(frozen=True)
class EmployeeRecord:
    """Technician record linking an account to its owner (adminId)."""

    uid: str
    admin_id: str | None
    permissions: EmployeePermissions = field(default_factory=EmployeePermissions)
    must_change_password: bool = False
    name: str = ""
    email: str = ""
    specialty: str = ""
    parent_subscription: SubscriptionSnapshot | None = None
    data: dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @classmethod
    def from_document(
        cls, uid: str, data: dict[str, Any], admin_id: str | None = None
    ) -> EmployeeRecord:
        """Build from an employee or employee-profile document.

        admin_id, when given, comes from the containment path and wins over the
        stored field (older records were written without adminId).
        """
        return cls(
            uid=data.get("uid") or uid,
            admin_id=admin_id or data.get("adminId") or None,
            permissions=EmployeePermissions.from_untrusted(data.get("permissions")),
            must_change_password=bool(data.get("mustChangePassword")),
            name=data.get("name") or data.get("fullName") or "",
            email=data.get("email") or "",
            specialty=data.get("specialty") or "",
            parent_subscription=SubscriptionSnapshot.from_parent_fields(data),
            data=dict(data),
        )

    @classmethod
    def from_profile(cls, profile: UserProfile) -> EmployeeRecord:
        return cls.from_document(profile.uid, profile.data)

    @property
    def initial_password(self) -> str | None:
        return self.data.get("initialPassword") or None

    def to_employee_document(self) -> dict[str, Any]:
        """Fields shared by the owner-namespace copy and the flat mirror."""
        doc: dict[str, Any] = {
            key: value
            for key, value in self.data.items()
            if key not in SENSITIVE_EMPLOYEE_FIELDS
        }
        doc.update(
            {
                "uid": self.uid,
                "adminId": self.admin_id,
                "name": self.name,
                "email": self.email,
                "specialty": self.specialty,
                "permissions": self.permissions.to_dict(),
                "mustChangePassword": self.must_change_password,
            }
        )
        if self.parent_subscription is not None:
            doc.update(self.parent_subscription.to_parent_fields())
        return doc

    def to_profile_document(self) -> dict[str, Any]:
        """Normalized users/{uid} profile for this employee (no initial password)."""
        doc = self.to_employee_document()
        doc["role"] = Role.EMPLOYEE.value
        doc.setdefault("fullName", self.name)
        return doc
