"""Leave period resolution — map a date onto its entitlement cycle.

Periods are company-wide: the employee and leave type arguments are accepted
so the resolver can stand in anywhere a per-employee strategy is expected,
but they do not change the result.
"""

from __future__ import annotations

import calendar
import logging
import uuid
from datetime import date, timedelta
from typing import Optional, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from leave_balance.leave.models import LeavePeriodHistory
from leave_balance.leave.schemas import LeavePeriod

logger = logging.getLogger(__name__)


def _anchor(year: int, month: int, day: int) -> date:
    """Build ``year-month-day``, clamping the day to the month length."""
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(day, last_day))


def period_containing(target: date, start_month: int, start_day: int) -> LeavePeriod:
    """Return the yearly period anchored on ``start_month``/``start_day``
    that contains ``target``."""

    start = _anchor(target.year, start_month, start_day)
    if start > target:
        start = _anchor(target.year - 1, start_month, start_day)
    next_start = _anchor(start.year + 1, start_month, start_day)
    return LeavePeriod(start_date=start, end_date=next_start - timedelta(days=1))


class LeavePeriodResolver:
    """Resolve dates against the leave-period configuration history.

    The configuration in force for a date is the latest history row whose
    ``effective_from`` is on or before it. Dates before the first row have
    no leave period. A configuration change ends the running cycle the day
    before it takes effect.
    """

    def __init__(self, history: Sequence[LeavePeriodHistory]) -> None:
        self._history = sorted(history, key=lambda row: row.effective_from)

    def _config_index(self, target: date) -> Optional[int]:
        current = None
        for index, row in enumerate(self._history):
            if row.effective_from > target:
                break
            current = index
        return current

    def resolve(
        self,
        target: date,
        employee_id: Optional[uuid.UUID] = None,
        leave_type_id: Optional[uuid.UUID] = None,
    ) -> Optional[LeavePeriod]:
        index = self._config_index(target)
        if index is None:
            logger.debug("No leave period configured for %s", target)
            return None

        config = self._history[index]
        period = period_containing(target, config.start_month, config.start_day)
        start, end = period.start_date, period.end_date

        # A configuration change cuts the cycles on either side of it
        if index > 0:
            start = max(start, config.effective_from)
        if index + 1 < len(self._history):
            end = min(end, self._history[index + 1].effective_from - timedelta(days=1))
        return LeavePeriod(start_date=start, end_date=end)


async def load_period_resolver(db: AsyncSession) -> LeavePeriodResolver:
    """Load the leave-period history and build a resolver over it."""

    result = await db.execute(
        select(LeavePeriodHistory).order_by(LeavePeriodHistory.effective_from)
    )
    return LeavePeriodResolver(result.scalars().all())
