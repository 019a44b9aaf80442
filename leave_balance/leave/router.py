"""Leave balance router — per-period breakdown or point-in-time balance.

All endpoints require authentication; reading another employee's balance
is limited to their manager and HR/system admins.
"""


import uuid
from datetime import date
from typing import Optional, Union

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from leave_balance.auth.dependencies import get_current_role, get_current_user
from leave_balance.common.constants import LeaveDayType, PartialDayOption, UserRole
from leave_balance.core_hr.models import Employee
from leave_balance.database import get_db
from leave_balance.leave.schemas import (
    AppliedLeaveDurations,
    LeaveBreakdownOut,
    LeavePointBalanceOut,
)
from leave_balance.leave.service import LeaveBalanceService

router = APIRouter(prefix="", tags=["leave"])


# ── GET /leave-balance/leave-type/{leave_type_id} ───────────────────

@router.get(
    "/leave-balance/leave-type/{leave_type_id}",
    response_model=Union[LeavePointBalanceOut, LeaveBreakdownOut],
)
async def get_leave_balance(
    leave_type_id: uuid.UUID,
    employee_id: Optional[uuid.UUID] = Query(
        None, description="Employee to query; defaults to the caller"
    ),
    from_date: Optional[date] = Query(None, description="Applied range start (inclusive)"),
    to_date: Optional[date] = Query(None, description="Applied range end (inclusive)"),
    duration: LeaveDayType = Query(
        LeaveDayType.full_day, description="Duration of a single-day range"
    ),
    partial_option: PartialDayOption = Query(
        PartialDayOption.none, description="Which days of a longer range are partial"
    ),
    start_duration: Optional[LeaveDayType] = Query(None),
    end_duration: Optional[LeaveDayType] = Query(None),
    employee: Employee = Depends(get_current_user),
    role: UserRole = Depends(get_current_role),
    db: AsyncSession = Depends(get_db),
):
    """Leave balance for a leave type.

    With both ``from_date`` and ``to_date`` the applied range is broken down
    per leave period with a running balance per day; otherwise the balance
    as at ``from_date`` (or today) is returned.
    """
    return await LeaveBalanceService.get_leave_balance(
        db,
        employee,
        role,
        leave_type_id,
        employee_id=employee_id,
        from_date=from_date,
        to_date=to_date,
        durations=AppliedLeaveDurations(
            duration=duration,
            partial_option=partial_option,
            start_duration=start_duration,
            end_duration=end_duration,
        ),
    )
