"""Domain enumerations for Control+ Oficina.

Values are persisted as-is in user profiles; do not rename them.
"""

from enum import Enum


class Role(str, Enum):
    """Account role stored on the user profile (`role` field)."""

    ADMIN = "admin"
    EMPLOYEE = "employee"

    @classmethod
    def from_value(cls, value: object) -> "Role":
        """Return EMPLOYEE only for the exact stored value; anything else is an owner."""
        if value == cls.EMPLOYEE.value:
            return cls.EMPLOYEE
        return cls.ADMIN


class SubscriptionStatus(str, Enum):
    """Billing status stored on the owner profile (`subscriptionStatus` field)."""

    ACTIVE = "active"
    TRIALING = "trialing"
    PAST_DUE = "past_due"
    CANCELED = "canceled"

    @classmethod
    def values(cls) -> list[str]:
        """Return all known status values as strings."""
        return [status.value for status in cls]
