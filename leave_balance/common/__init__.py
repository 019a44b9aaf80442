"""Common module — shared constants, exceptions and rate limiting."""

from leave_balance.common.constants import (
    BALANCE_READ_ALL_ROLES,
    HALF_DAY,
    LEAVE_DAY_LENGTHS,
    LEAVE_DAY_STATUS_NAMES,
    NON_DEDUCTING_STATUSES,
    LeaveDayStatus,
    LeaveDayType,
    LeaveStatus,
    PartialDayOption,
    UserRole,
)
from leave_balance.common.exceptions import (
    AppException,
    ForbiddenException,
    NoPeriodFoundException,
    NotFoundException,
    UnsortedInputException,
    ValidationException,
    register_exception_handlers,
)
from leave_balance.common.rate_limit import limiter

__all__ = [
    # Constants / Enums
    "LeaveDayStatus",
    "LeaveDayType",
    "LeaveStatus",
    "PartialDayOption",
    "UserRole",
    "BALANCE_READ_ALL_ROLES",
    "HALF_DAY",
    "LEAVE_DAY_LENGTHS",
    "LEAVE_DAY_STATUS_NAMES",
    "NON_DEDUCTING_STATUSES",
    # Exceptions
    "AppException",
    "ForbiddenException",
    "NoPeriodFoundException",
    "NotFoundException",
    "UnsortedInputException",
    "ValidationException",
    "register_exception_handlers",
    # Rate limiting
    "limiter",
]
