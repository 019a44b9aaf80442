"""Leave day source — expand an applied date range into classified leave days.

Each calendar day in the range becomes one LeaveDay:
  - full-day public holiday                            → holiday, length 0
  - weekly off (per the employee's weekly-off policy)  → weekend, length 0
  - half-day public holiday                            → normal, at most 0.5
  - anything else                                      → normal, requested length
"""

from __future__ import annotations

import uuid
from datetime import date, timedelta
from typing import Optional

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from leave_balance.attendance.models import (
    EmployeeWeeklyOff,
    Holiday,
    HolidayCalendar,
    WeeklyOffPolicy,
)
from leave_balance.common.constants import (
    HALF_DAY,
    LEAVE_DAY_LENGTHS,
    LeaveDayStatus,
)
from leave_balance.core_hr.models import Employee
from leave_balance.leave.schemas import AppliedLeaveDurations, LeaveDay

_DAY_NAMES = {
    "monday": 0, "tuesday": 1, "wednesday": 2, "thursday": 3,
    "friday": 4, "saturday": 5, "sunday": 6,
}


def parse_weekly_off_days(days_data: object, default: set[int]) -> set[int]:
    """Read a weekly-off policy's ``days`` JSON.

    Accepts a list of weekday ints (0=Mon … 6=Sun) or a mapping of day
    names to booleans; anything else yields ``default``.
    """
    if isinstance(days_data, list):
        return {int(d) for d in days_data}
    if isinstance(days_data, dict):
        return {
            _DAY_NAMES[k.lower()]
            for k, v in days_data.items()
            if v and k.lower() in _DAY_NAMES
        }
    return set(default)


class LeaveDaySource:
    """Build the ordered leave-day list for an employee's applied range."""

    def __init__(self, db: AsyncSession, *, default_weekly_offs: set[int]) -> None:
        self.db = db
        self.default_weekly_offs = default_weekly_offs

    async def _get_weekly_offs(
        self,
        employee_id: uuid.UUID,
        target_date: date,
    ) -> set[int]:
        """Weekday numbers that are weekly offs for the employee on ``target_date``."""

        result = await self.db.execute(
            select(EmployeeWeeklyOff)
            .where(
                EmployeeWeeklyOff.employee_id == employee_id,
                EmployeeWeeklyOff.effective_from <= target_date,
                (
                    EmployeeWeeklyOff.effective_to.is_(None)
                    | (EmployeeWeeklyOff.effective_to >= target_date)
                ),
            )
            .options(selectinload(EmployeeWeeklyOff.weekly_off_policy))
            .order_by(EmployeeWeeklyOff.effective_from.desc())
            .limit(1)
        )
        assignment = result.scalars().first()
        if assignment is None or assignment.weekly_off_policy is None:
            return set(self.default_weekly_offs)

        policy: WeeklyOffPolicy = assignment.weekly_off_policy
        return parse_weekly_off_days(policy.days, self.default_weekly_offs)

    async def _get_holidays(
        self,
        employee_id: uuid.UUID,
        from_date: date,
        to_date: date,
    ) -> dict[date, Holiday]:
        """Mandatory holidays in range from global and location calendars."""

        emp_result = await self.db.execute(
            select(Employee.location_id).where(Employee.id == employee_id)
        )
        location_id = emp_result.scalar()

        query = (
            select(Holiday)
            .join(HolidayCalendar, Holiday.calendar_id == HolidayCalendar.id)
            .where(
                HolidayCalendar.is_active.is_(True),
                Holiday.date >= from_date,
                Holiday.date <= to_date,
                Holiday.is_optional.is_(False),
            )
            .order_by(Holiday.date)
        )

        if location_id:
            query = query.where(
                or_(
                    HolidayCalendar.location_id == location_id,
                    HolidayCalendar.location_id.is_(None),
                )
            )
        else:
            query = query.where(HolidayCalendar.location_id.is_(None))

        result = await self.db.execute(query)
        holidays: dict[date, Holiday] = {}
        for holiday in result.scalars().all():
            # A full-day entry wins over a half-day one on the same date
            existing = holidays.get(holiday.date)
            if existing is None or (existing.is_half_day and not holiday.is_half_day):
                holidays[holiday.date] = holiday
        return holidays

    async def fetch(
        self,
        employee_id: uuid.UUID,
        leave_type_id: uuid.UUID,
        from_date: date,
        to_date: date,
        durations: Optional[AppliedLeaveDurations] = None,
    ) -> list[LeaveDay]:
        """Return one LeaveDay per calendar date in ``[from_date, to_date]``."""

        if to_date < from_date:
            return []
        durations = durations or AppliedLeaveDurations()

        weekly_offs = await self._get_weekly_offs(employee_id, from_date)
        holidays = await self._get_holidays(employee_id, from_date, to_date)

        count = (to_date - from_date).days + 1
        days: list[LeaveDay] = []
        for index in range(count):
            current = from_date + timedelta(days=index)
            holiday = holidays.get(current)

            if holiday is not None and not holiday.is_half_day:
                days.append(LeaveDay(date=current, status=LeaveDayStatus.holiday))
                continue
            if current.weekday() in weekly_offs:
                days.append(LeaveDay(date=current, status=LeaveDayStatus.weekend))
                continue

            length = LEAVE_DAY_LENGTHS[durations.day_type_for(index, count)]
            if holiday is not None:
                length = min(length, HALF_DAY)
            days.append(LeaveDay(date=current, length=length))

        return days
