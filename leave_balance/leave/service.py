"""Leave balance service layer — breakdown of an applied range or a point balance.

Business logic:
  - Access control: self, direct reports (managers), everyone (HR/system admins)
  - Query validation: ordered, bounded span, part-day options
  - Breakdown mode: expand the applied range, split it by leave period and
    walk each period's balance
  - Point mode: entitlement snapshot as at a single date
"""

from __future__ import annotations

import logging
import uuid
from datetime import date, datetime, timezone
from typing import Optional, Union

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from leave_balance.common.constants import (
    BALANCE_READ_ALL_ROLES,
    LeaveDayType,
    PartialDayOption,
    UserRole,
)
from leave_balance.common.exceptions import (
    ForbiddenException,
    NotFoundException,
    ValidationException,
)
from leave_balance.config import settings
from leave_balance.core_hr.models import Employee
from leave_balance.leave.breakdown import BreakdownAssembler
from leave_balance.leave.days import LeaveDaySource
from leave_balance.leave.entitlements import EntitlementCalculator
from leave_balance.leave.models import LeaveType
from leave_balance.leave.periods import load_period_resolver
from leave_balance.leave.schemas import (
    AppliedLeaveDurations,
    BreakdownResult,
    EntitlementSnapshot,
    LeaveBreakdownOut,
    LeavePointBalanceOut,
)

logger = logging.getLogger(__name__)

_START_PARTIALS = (PartialDayOption.all, PartialDayOption.start, PartialDayOption.start_end)
_END_PARTIALS = (PartialDayOption.end, PartialDayOption.start_end)


# ═════════════════════════════════════════════════════════════════════
# LeaveBalanceService
# ═════════════════════════════════════════════════════════════════════


class LeaveBalanceService:
    """Async leave balance queries: per-period breakdowns and point balances."""

    # ─────────────────────────────────────────────────────────────────
    # Helpers
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    async def _ensure_accessible(
        db: AsyncSession,
        requestor: Employee,
        role: UserRole,
        employee_id: uuid.UUID,
    ) -> Employee:
        """Load the target employee, enforcing who may read whose balance."""

        result = await db.execute(
            select(Employee).where(Employee.id == employee_id, Employee.is_active.is_(True))
        )
        employee = result.scalars().first()
        if employee is None:
            raise NotFoundException("Employee", str(employee_id))

        if employee.id == requestor.id or role in BALANCE_READ_ALL_ROLES:
            return employee
        if role == UserRole.manager and employee.reporting_manager_id == requestor.id:
            return employee
        raise ForbiddenException(
            detail="You are not allowed to view this employee's leave balance.",
        )

    @staticmethod
    async def _get_leave_type(db: AsyncSession, leave_type_id: uuid.UUID) -> LeaveType:
        result = await db.execute(
            select(LeaveType).where(
                LeaveType.id == leave_type_id,
                LeaveType.is_active.is_(True),
            )
        )
        leave_type = result.scalars().first()
        if leave_type is None:
            raise NotFoundException("LeaveType", str(leave_type_id))
        return leave_type

    @staticmethod
    def _validate_query(
        from_date: Optional[date],
        to_date: Optional[date],
        durations: AppliedLeaveDurations,
    ) -> None:
        """Ordered and bounded range; part-day options complete.

        A single date (or none) is a point-balance query and needs no range
        checks.
        """

        errors: dict[str, list[str]] = {}
        if from_date is not None and to_date is not None:
            if to_date < from_date:
                errors["to_date"] = ["to_date must be on or after from_date."]
            elif (to_date - from_date).days + 1 > settings.MAX_BREAKDOWN_DAYS:
                errors["dates"] = [
                    f"Applied range cannot span more than "
                    f"{settings.MAX_BREAKDOWN_DAYS} days."
                ]

        if durations.partial_option in _START_PARTIALS and durations.start_duration in (
            None, LeaveDayType.full_day,
        ):
            errors["start_duration"] = [
                f"A half-day start_duration is required for partial_option "
                f"'{durations.partial_option.value}'."
            ]
        if durations.partial_option in _END_PARTIALS and durations.end_duration in (
            None, LeaveDayType.full_day,
        ):
            errors["end_duration"] = [
                f"A half-day end_duration is required for partial_option "
                f"'{durations.partial_option.value}'."
            ]

        if errors:
            raise ValidationException(errors)

    # ─────────────────────────────────────────────────────────────────
    # Balance
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    async def point_balance(
        calculator: EntitlementCalculator,
        employee_id: uuid.UUID,
        leave_type_id: uuid.UUID,
        as_at_date: date,
        end_date: Optional[date] = None,
    ) -> EntitlementSnapshot:
        """Entitlement snapshot as at a single date."""
        return await calculator.compute(employee_id, leave_type_id, as_at_date, end_date)

    @staticmethod
    async def get_breakdown_or_balance(
        db: AsyncSession,
        employee_id: uuid.UUID,
        leave_type_id: uuid.UUID,
        from_date: Optional[date] = None,
        to_date: Optional[date] = None,
        durations: Optional[AppliedLeaveDurations] = None,
        *,
        today: Optional[date] = None,
    ) -> Union[BreakdownResult, EntitlementSnapshot]:
        """Breakdown of the applied range when both dates are given and the
        range holds at least one day; otherwise the balance as at
        ``from_date`` (today when absent)."""

        today = today or datetime.now(timezone.utc).date()
        resolver = await load_period_resolver(db)
        calculator = EntitlementCalculator(
            db,
            resolver,
            today=today,
            include_pending=settings.INCLUDE_PENDING_LEAVE_IN_BALANCE,
        )

        if from_date is not None and to_date is not None:
            source = LeaveDaySource(db, default_weekly_offs=settings.default_weekly_offs)
            days = await source.fetch(
                employee_id, leave_type_id, from_date, to_date, durations,
            )
            if days:
                logger.debug(
                    "Breaking down %d applied day(s) for employee %s",
                    len(days), employee_id,
                )
                assembler = BreakdownAssembler(resolver, calculator)
                return await assembler.assemble(
                    employee_id, leave_type_id, days, from_date,
                )

        as_at_date = from_date or today
        logger.debug("Point balance for employee %s as at %s", employee_id, as_at_date)
        return await LeaveBalanceService.point_balance(
            calculator, employee_id, leave_type_id, as_at_date, to_date,
        )

    @staticmethod
    async def get_leave_balance(
        db: AsyncSession,
        requestor: Employee,
        role: UserRole,
        leave_type_id: uuid.UUID,
        *,
        employee_id: Optional[uuid.UUID] = None,
        from_date: Optional[date] = None,
        to_date: Optional[date] = None,
        durations: Optional[AppliedLeaveDurations] = None,
        today: Optional[date] = None,
    ) -> Union[LeaveBreakdownOut, LeavePointBalanceOut]:
        """Validate and authorise a balance query, then shape the response."""

        durations = durations or AppliedLeaveDurations()
        LeaveBalanceService._validate_query(from_date, to_date, durations)

        target_id = employee_id or requestor.id
        await LeaveBalanceService._ensure_accessible(db, requestor, role, target_id)
        await LeaveBalanceService._get_leave_type(db, leave_type_id)

        result = await LeaveBalanceService.get_breakdown_or_balance(
            db,
            target_id,
            leave_type_id,
            from_date,
            to_date,
            durations,
            today=today,
        )
        if isinstance(result, BreakdownResult):
            return LeaveBreakdownOut(
                employee_id=target_id,
                negative=result.negative,
                breakdown=result.breakdown,
            )
        return LeavePointBalanceOut(employee_id=target_id, balance=result)
