"""Entitlement calculator — aggregate entitlement and usage for a date window."""

from __future__ import annotations

import uuid
from datetime import date
from decimal import Decimal
from typing import Iterable, Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from leave_balance.common.constants import (
    LEAVE_DAY_LENGTHS,
    LeaveDayType,
    LeaveStatus,
)
from leave_balance.leave.models import LeaveEntitlement, LeaveRequest
from leave_balance.leave.periods import LeavePeriodResolver
from leave_balance.leave.schemas import EntitlementSnapshot


def day_details_length(day_value: str) -> Decimal:
    """Length in days of one ``day_details`` value; weekends/holidays are 0."""
    try:
        return LEAVE_DAY_LENGTHS[LeaveDayType(day_value)]
    except ValueError:
        return Decimal("0")


def sum_request_days(
    requests: Iterable[LeaveRequest],
    from_date: date,
    to_date: date,
) -> dict[str, Decimal]:
    """Sum request day lengths in ``[from_date, to_date]`` keyed by ISO date."""

    totals: dict[str, Decimal] = {}
    for req in requests:
        for date_str, day_value in (req.day_details or {}).items():
            day = date.fromisoformat(date_str)
            if from_date <= day <= to_date:
                totals[date_str] = totals.get(date_str, Decimal("0")) + day_details_length(day_value)
    return totals


class EntitlementCalculator:
    """Compute :class:`EntitlementSnapshot` values from entitlements and requests.

    Usage is counted from the start of the leave period that contains the
    as-at date, so a mid-period query still sees days already consumed.
    Approved days before ``today`` are *taken*, the rest *scheduled*.
    """

    def __init__(
        self,
        db: AsyncSession,
        resolver: LeavePeriodResolver,
        *,
        today: date,
        include_pending: bool = True,
    ) -> None:
        self.db = db
        self.resolver = resolver
        self.today = today
        self.include_pending = include_pending

    async def _entitled(
        self,
        employee_id: uuid.UUID,
        leave_type_id: uuid.UUID,
        from_date: date,
        to_date: date,
    ) -> Decimal:
        result = await self.db.execute(
            select(func.coalesce(func.sum(LeaveEntitlement.no_of_days), 0)).where(
                LeaveEntitlement.employee_id == employee_id,
                LeaveEntitlement.leave_type_id == leave_type_id,
                LeaveEntitlement.is_deleted.is_(False),
                LeaveEntitlement.from_date <= to_date,
                LeaveEntitlement.to_date >= from_date,
            )
        )
        return Decimal(str(result.scalar_one()))

    async def _requests(
        self,
        employee_id: uuid.UUID,
        leave_type_id: uuid.UUID,
        from_date: date,
        to_date: date,
    ) -> list[LeaveRequest]:
        result = await self.db.execute(
            select(LeaveRequest).where(
                LeaveRequest.employee_id == employee_id,
                LeaveRequest.leave_type_id == leave_type_id,
                LeaveRequest.status.in_([LeaveStatus.pending, LeaveStatus.approved]),
                LeaveRequest.start_date <= to_date,
                LeaveRequest.end_date >= from_date,
            )
        )
        return list(result.scalars().all())

    async def compute(
        self,
        employee_id: uuid.UUID,
        leave_type_id: uuid.UUID,
        as_at_date: date,
        end_date: Optional[date] = None,
    ) -> EntitlementSnapshot:
        period = self.resolver.resolve(as_at_date, employee_id, leave_type_id)
        if end_date is None:
            end_date = period.end_date if period else as_at_date
        usage_from = min(period.start_date, as_at_date) if period else as_at_date

        entitled = await self._entitled(employee_id, leave_type_id, as_at_date, end_date)
        requests = await self._requests(employee_id, leave_type_id, usage_from, end_date)

        pending = sum(
            sum_request_days(
                (r for r in requests if r.status == LeaveStatus.pending),
                usage_from, end_date,
            ).values(),
            Decimal("0"),
        )
        taken = Decimal("0")
        scheduled = Decimal("0")
        approved_days = sum_request_days(
            (r for r in requests if r.status == LeaveStatus.approved),
            usage_from, end_date,
        )
        for date_str, length in approved_days.items():
            if date.fromisoformat(date_str) < self.today:
                taken += length
            else:
                scheduled += length

        used = taken + scheduled
        if self.include_pending:
            used += pending

        return EntitlementSnapshot(
            entitled=entitled,
            used=used,
            scheduled=scheduled,
            pending=pending,
            taken=taken,
            balance=entitled - used,
            as_at_date=as_at_date,
            end_date=end_date,
        )
