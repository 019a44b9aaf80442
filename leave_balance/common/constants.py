"""Enums and constants for the leave balance service — matching PostgreSQL ENUM types."""

from __future__ import annotations

import enum
from decimal import Decimal


# ── Auth / Roles ────────────────────────────────────────────────────

class UserRole(str, enum.Enum):
    employee = "employee"
    manager = "manager"
    hr_admin = "hr_admin"
    system_admin = "system_admin"


# ── Leave ───────────────────────────────────────────────────────────

class LeaveStatus(str, enum.Enum):
    pending = "pending"
    approved = "approved"
    rejected = "rejected"
    cancelled = "cancelled"
    revoked = "revoked"


class LeaveDayType(str, enum.Enum):
    full_day = "full_day"
    first_half = "first_half"
    second_half = "second_half"


class LeaveDayStatus(str, enum.Enum):
    """Classification of a single day inside an applied leave range."""

    normal = "normal"
    weekend = "weekend"
    holiday = "holiday"


class PartialDayOption(str, enum.Enum):
    """Which days of a multi-day request take the partial durations."""

    none = "none"
    all = "all"
    start = "start"
    end = "end"
    start_end = "start_end"


# Statuses that never consume entitlement
NON_DEDUCTING_STATUSES = frozenset({LeaveDayStatus.weekend, LeaveDayStatus.holiday})

LEAVE_DAY_STATUS_NAMES: dict[LeaveDayStatus, str] = {
    LeaveDayStatus.weekend: "Weekend",
    LeaveDayStatus.holiday: "Holiday",
}

# Day lengths in days for each requested duration
LEAVE_DAY_LENGTHS: dict[LeaveDayType, Decimal] = {
    LeaveDayType.full_day: Decimal("1"),
    LeaveDayType.first_half: Decimal("0.5"),
    LeaveDayType.second_half: Decimal("0.5"),
}

# Roles that may read any employee's balance
BALANCE_READ_ALL_ROLES = frozenset({UserRole.hr_admin, UserRole.system_admin})

# ── Misc constants ──────────────────────────────────────────────────

HALF_DAY = Decimal("0.5")
