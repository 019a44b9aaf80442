"""Core HR ORM models: Location, Employee.

Only the columns the balance service reads are mapped; the full employee
master lives with the HR platform that owns these tables.
"""

from __future__ import annotations

import uuid
from datetime import date, datetime, timezone
from typing import TYPE_CHECKING, Optional

import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from leave_balance.database import Base

if TYPE_CHECKING:
    from leave_balance.attendance.models import EmployeeWeeklyOff
    from leave_balance.auth.models import UserSession
    from leave_balance.leave.models import LeaveEntitlement, LeaveRequest


# ═════════════════════════════════════════════════════════════════════
# Location
# ═════════════════════════════════════════════════════════════════════


class Location(Base):
    """Office location / work-site."""

    __tablename__ = "locations"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    name: Mapped[str] = mapped_column(sa.String(100), unique=True, nullable=False)
    timezone: Mapped[str] = mapped_column(sa.String(50), default="Asia/Kolkata")
    is_active: Mapped[bool] = mapped_column(sa.Boolean, default=True)
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )

    # Relationships
    employees: Mapped[list[Employee]] = relationship(back_populates="location")

    def __repr__(self) -> str:
        return f"<Location {self.name!r}>"


# ═════════════════════════════════════════════════════════════════════
# Employee
# ═════════════════════════════════════════════════════════════════════


class Employee(Base):
    """Employee record — the owner of entitlements and leave requests."""

    __tablename__ = "employees"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    employee_code: Mapped[str] = mapped_column(
        sa.String(20), unique=True, nullable=False,
    )
    first_name: Mapped[str] = mapped_column(sa.String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(sa.String(100), nullable=False)
    email: Mapped[str] = mapped_column(
        sa.String(255), unique=True, nullable=False,
    )

    # ── Org hierarchy ───────────────────────────────────────────────
    location_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True), sa.ForeignKey("locations.id"),
    )
    reporting_manager_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True), sa.ForeignKey("employees.id"),
    )

    date_of_joining: Mapped[date] = mapped_column(sa.Date, nullable=False)
    is_active: Mapped[bool] = mapped_column(sa.Boolean, default=True)
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )

    # ── Relationships ───────────────────────────────────────────────
    location: Mapped[Optional[Location]] = relationship(
        back_populates="employees", foreign_keys=[location_id],
    )
    reporting_manager: Mapped[Optional[Employee]] = relationship(
        remote_side=[id], foreign_keys=[reporting_manager_id],
        back_populates="direct_reports",
    )
    direct_reports: Mapped[list[Employee]] = relationship(
        back_populates="reporting_manager",
        foreign_keys=[reporting_manager_id],
    )
    sessions: Mapped[list["UserSession"]] = relationship(
        back_populates="employee",
    )
    weekly_offs: Mapped[list["EmployeeWeeklyOff"]] = relationship(
        back_populates="employee",
    )
    leave_entitlements: Mapped[list["LeaveEntitlement"]] = relationship(
        back_populates="employee",
    )
    leave_requests: Mapped[list["LeaveRequest"]] = relationship(
        back_populates="employee",
    )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def __repr__(self) -> str:
        return f"<Employee {self.employee_code} {self.full_name}>"
