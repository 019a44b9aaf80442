"""Leave balance breakdown — split applied days by leave period and walk the balance.

Flow:
  1. segment_by_period   — group ascending leave days into consecutive periods
  2. walk_balance        — per period, decrement a running balance day by day
  3. BreakdownAssembler  — fetch each period's entitlement snapshot, walk it,
                           and flag whether any running balance went negative
"""

from __future__ import annotations

import logging
import uuid
from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING, Callable, Optional, Sequence

from leave_balance.common.exceptions import (
    NoPeriodFoundException,
    UnsortedInputException,
)
from leave_balance.leave.schemas import (
    BreakdownResult,
    LeaveDay,
    LeaveDayStatusBrief,
    LeaveEntry,
    LeavePeriod,
    PeriodBreakdown,
)

if TYPE_CHECKING:
    from leave_balance.leave.entitlements import EntitlementCalculator
    from leave_balance.leave.periods import LeavePeriodResolver

logger = logging.getLogger(__name__)

Segment = tuple[LeavePeriod, list[LeaveDay]]


# ─────────────────────────────────────────────────────────────────────
# Segmentation
# ─────────────────────────────────────────────────────────────────────


def segment_by_period(
    days: Sequence[LeaveDay],
    initial_period: LeavePeriod,
    resolve_period: Callable[[date], Optional[LeavePeriod]],
) -> list[Segment]:
    """Group ``days`` into the leave periods they fall in.

    The initial period is always emitted, even when no day lands in it.
    A new period is resolved only when a day falls after the current
    period's end, so the output is chronological.

    Raises:
        UnsortedInputException: a day is not strictly after the previous
            one, or precedes the initial period.
        NoPeriodFoundException: no period (or a period not containing the
            day) is returned for a day past the current period.
    """

    segments: list[Segment] = []
    current_period = initial_period
    current_days: list[LeaveDay] = []
    previous: Optional[date] = None

    for day in days:
        if previous is not None and day.date <= previous:
            raise UnsortedInputException(day.date, previous)
        if day.date < current_period.start_date:
            raise UnsortedInputException(day.date, period_start=current_period.start_date)
        previous = day.date

        if day.date > current_period.end_date:
            segments.append((current_period, current_days))
            next_period = resolve_period(day.date)
            if next_period is None or not next_period.contains(day.date):
                raise NoPeriodFoundException(day.date)
            current_period = next_period
            current_days = []

        current_days.append(day)

    segments.append((current_period, current_days))
    return segments


# ─────────────────────────────────────────────────────────────────────
# Balance walk
# ─────────────────────────────────────────────────────────────────────


def walk_balance(
    starting_balance: Decimal,
    days: Sequence[LeaveDay],
) -> list[LeaveEntry]:
    """Return one entry per day carrying the balance left after that day.

    Weekends and holidays keep the balance and report a zero length.
    """

    running = Decimal(starting_balance)
    entries: list[LeaveEntry] = []

    for day in days:
        if not day.is_deducting:
            entries.append(
                LeaveEntry(
                    date=day.date,
                    length=Decimal("0"),
                    status=LeaveDayStatusBrief(key=day.status, name=day.status_name),
                    running_balance=running,
                )
            )
            continue

        if day.length > 0:
            running -= day.length
        entries.append(
            LeaveEntry(
                date=day.date,
                length=day.length,
                status=None,
                running_balance=running,
            )
        )

    return entries


# ─────────────────────────────────────────────────────────────────────
# Assembly
# ─────────────────────────────────────────────────────────────────────


def _snapshot_window(period: LeavePeriod, days: Sequence[LeaveDay]) -> tuple[date, date]:
    """Entitlement query window: the period, widened to cover the group's days."""
    if not days:
        return period.start_date, period.end_date
    return (
        min(period.start_date, days[0].date),
        max(period.end_date, days[-1].date),
    )


class BreakdownAssembler:
    """Combine segmentation, entitlement snapshots and balance walks."""

    def __init__(
        self,
        resolver: LeavePeriodResolver,
        calculator: EntitlementCalculator,
    ) -> None:
        self.resolver = resolver
        self.calculator = calculator

    async def assemble(
        self,
        employee_id: uuid.UUID,
        leave_type_id: uuid.UUID,
        days: Sequence[LeaveDay],
        initial_start_date: date,
    ) -> BreakdownResult:
        initial_period = self.resolver.resolve(
            initial_start_date, employee_id, leave_type_id,
        )
        if initial_period is None:
            raise NoPeriodFoundException(initial_start_date)

        segments = segment_by_period(
            days,
            initial_period,
            lambda target: self.resolver.resolve(target, employee_id, leave_type_id),
        )

        breakdown: list[PeriodBreakdown] = []
        for period, group in segments:
            window_start, window_end = _snapshot_window(period, group)
            snapshot = await self.calculator.compute(
                employee_id, leave_type_id, window_start, window_end,
            )
            entries = walk_balance(snapshot.balance, group)
            logger.debug(
                "Period %s..%s: %d day(s), starting balance %s",
                period.start_date, period.end_date, len(entries), snapshot.balance,
            )
            breakdown.append(
                PeriodBreakdown(period=period, balance=snapshot, leaves=entries)
            )

        negative = any(
            entry.running_balance < 0
            for item in breakdown
            for entry in item.leaves
        )
        if negative:
            logger.info(
                "Leave breakdown for employee %s / leave type %s goes negative",
                employee_id, leave_type_id,
            )
        return BreakdownResult(negative=negative, breakdown=breakdown)
