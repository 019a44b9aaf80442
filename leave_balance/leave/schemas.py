"""Leave balance Pydantic v2 schemas — breakdown domain and response shapes.

Naming conventions:
  - *Out    → response bodies (read)
  - *Brief  → compact embedded representations
  - bare names (LeaveDay, LeavePeriod, ...) are the values the breakdown
    core computes with; they are serialised as-is inside the *Out shapes.
"""

from __future__ import annotations

import uuid
from datetime import date
from decimal import Decimal
from typing import Annotated, Any, Optional

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer, model_validator

from leave_balance.common.constants import (
    LEAVE_DAY_STATUS_NAMES,
    NON_DEDUCTING_STATUSES,
    LeaveDayStatus,
    LeaveDayType,
    PartialDayOption,
)

# Decimal that goes over the wire as a JSON number; arithmetic stays Decimal
SerializedDecimal = Annotated[
    Decimal, PlainSerializer(lambda x: float(x), return_type=float, when_used="json")
]


# ═════════════════════════════════════════════════════════════════════
# Leave period
# ═════════════════════════════════════════════════════════════════════


class LeavePeriod(BaseModel):
    """One entitlement cycle, both ends inclusive."""

    model_config = ConfigDict(frozen=True)

    start_date: date
    end_date: date

    @model_validator(mode="after")
    def validate_bounds(self) -> "LeavePeriod":
        if self.start_date > self.end_date:
            raise ValueError("start_date must be on or before end_date.")
        return self

    def contains(self, target: date) -> bool:
        return self.start_date <= target <= self.end_date


# ═════════════════════════════════════════════════════════════════════
# Applied leave days
# ═════════════════════════════════════════════════════════════════════


class LeaveDay(BaseModel):
    """A single applied leave day as produced by the leave day source."""

    model_config = ConfigDict(frozen=True)

    date: date
    length: Decimal = Field(default=Decimal("0"), ge=0)
    status: LeaveDayStatus = LeaveDayStatus.normal
    status_name: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def zero_length_when_non_deducting(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        status = LeaveDayStatus(data.get("status", LeaveDayStatus.normal))
        if status in NON_DEDUCTING_STATUSES:
            data = {**data, "length": Decimal("0")}
            if data.get("status_name") is None:
                data["status_name"] = LEAVE_DAY_STATUS_NAMES[status]
        return data

    @property
    def is_deducting(self) -> bool:
        return self.status not in NON_DEDUCTING_STATUSES


class LeaveDayStatusBrief(BaseModel):
    """Status marker attached to weekend / holiday entries."""

    model_config = ConfigDict(frozen=True)

    key: LeaveDayStatus
    name: str


# ═════════════════════════════════════════════════════════════════════
# Entitlement snapshot
# ═════════════════════════════════════════════════════════════════════


class EntitlementSnapshot(BaseModel):
    """Aggregate entitlement and usage for a window.

    ``balance`` is the starting point of a breakdown walk; it does not yet
    account for the days being applied.
    """

    model_config = ConfigDict(frozen=True)

    entitled: SerializedDecimal = Field(default=Decimal("0"), ge=0)
    used: SerializedDecimal = Field(default=Decimal("0"), ge=0)
    scheduled: SerializedDecimal = Field(default=Decimal("0"), ge=0)
    pending: SerializedDecimal = Field(default=Decimal("0"), ge=0)
    taken: SerializedDecimal = Field(default=Decimal("0"), ge=0)
    balance: SerializedDecimal = Decimal("0")
    as_at_date: date
    end_date: date


# ═════════════════════════════════════════════════════════════════════
# Breakdown
# ═════════════════════════════════════════════════════════════════════


class LeaveEntry(BaseModel):
    """One day of a breakdown with the balance left after it."""

    model_config = ConfigDict(frozen=True)

    date: date
    length: SerializedDecimal
    status: Optional[LeaveDayStatusBrief] = None
    running_balance: SerializedDecimal


class PeriodBreakdown(BaseModel):
    model_config = ConfigDict(frozen=True)

    period: LeavePeriod
    balance: EntitlementSnapshot
    leaves: list[LeaveEntry] = Field(default_factory=list)


class BreakdownResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    negative: bool = False
    breakdown: list[PeriodBreakdown] = Field(default_factory=list)


# ═════════════════════════════════════════════════════════════════════
# Responses
# ═════════════════════════════════════════════════════════════════════


class LeaveBreakdownOut(BreakdownResult):
    """Per-period breakdown of an applied date range."""

    employee_id: uuid.UUID


class LeavePointBalanceOut(BaseModel):
    """Balance as at a single date (no applied range)."""

    employee_id: uuid.UUID
    balance: EntitlementSnapshot


# ═════════════════════════════════════════════════════════════════════
# Applied range options
# ═════════════════════════════════════════════════════════════════════


class AppliedLeaveDurations(BaseModel):
    """Requested part-day durations for an applied range.

    A single-day range uses ``duration``; longer ranges apply
    ``start_duration`` / ``end_duration`` according to ``partial_option``.
    """

    duration: LeaveDayType = LeaveDayType.full_day
    partial_option: PartialDayOption = PartialDayOption.none
    start_duration: Optional[LeaveDayType] = None
    end_duration: Optional[LeaveDayType] = None

    def day_type_for(self, index: int, count: int) -> LeaveDayType:
        """Requested duration of the ``index``-th of ``count`` calendar days."""
        if count == 1:
            return self.duration

        option = self.partial_option
        if option == PartialDayOption.all:
            return self.start_duration or LeaveDayType.full_day
        if index == 0 and option in (PartialDayOption.start, PartialDayOption.start_end):
            return self.start_duration or LeaveDayType.full_day
        if index == count - 1 and option in (PartialDayOption.end, PartialDayOption.start_end):
            return self.end_duration or LeaveDayType.full_day
        return LeaveDayType.full_day
