"""Leave ORM models: LeaveType, LeavePeriodHistory, LeaveEntitlement, LeaveRequest."""

from __future__ import annotations

import uuid
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Optional

import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from leave_balance.common.constants import LeaveStatus
from leave_balance.database import Base


class LeaveType(Base):
    __tablename__ = "leave_types"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    code: Mapped[str] = mapped_column(sa.String(10), unique=True, nullable=False)
    name: Mapped[str] = mapped_column(sa.String(100), nullable=False)
    is_paid: Mapped[bool] = mapped_column(sa.Boolean, default=True)
    is_active: Mapped[bool] = mapped_column(sa.Boolean, default=True)
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )

    # Relationships
    entitlements: Mapped[list[LeaveEntitlement]] = relationship(
        back_populates="leave_type"
    )
    requests: Mapped[list[LeaveRequest]] = relationship(back_populates="leave_type")


class LeavePeriodHistory(Base):
    """Company leave-period configuration.

    Each row anchors the yearly leave cycle on ``start_month``/``start_day``
    for dates on or after ``effective_from``.
    """

    __tablename__ = "leave_period_history"
    __table_args__ = (
        sa.CheckConstraint("start_month BETWEEN 1 AND 12", name="ck_lph_month"),
        sa.CheckConstraint("start_day BETWEEN 1 AND 31", name="ck_lph_day"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    start_month: Mapped[int] = mapped_column(sa.Integer, nullable=False)
    start_day: Mapped[int] = mapped_column(sa.Integer, nullable=False)
    effective_from: Mapped[date] = mapped_column(sa.Date, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )


class LeaveEntitlement(Base):
    __tablename__ = "leave_entitlements"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    employee_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), sa.ForeignKey("employees.id"), nullable=False
    )
    leave_type_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), sa.ForeignKey("leave_types.id"), nullable=False
    )
    from_date: Mapped[date] = mapped_column(sa.Date, nullable=False)
    to_date: Mapped[date] = mapped_column(sa.Date, nullable=False)
    no_of_days: Mapped[Decimal] = mapped_column(sa.Numeric(6, 2), nullable=False)
    note: Mapped[Optional[str]] = mapped_column(sa.Text)
    is_deleted: Mapped[bool] = mapped_column(sa.Boolean, default=False)
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )

    # Relationships
    employee: Mapped["Employee"] = relationship(back_populates="leave_entitlements")
    leave_type: Mapped[LeaveType] = relationship(back_populates="entitlements")


class LeaveRequest(Base):
    __tablename__ = "leave_requests"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    employee_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), sa.ForeignKey("employees.id"), nullable=False
    )
    leave_type_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), sa.ForeignKey("leave_types.id"), nullable=False
    )
    start_date: Mapped[date] = mapped_column(sa.Date, nullable=False)
    end_date: Mapped[date] = mapped_column(sa.Date, nullable=False)
    # ISO date → full_day | first_half | second_half | weekend | holiday
    day_details: Mapped[dict] = mapped_column(JSONB, nullable=False)
    total_days: Mapped[Decimal] = mapped_column(sa.Numeric(6, 2), nullable=False)
    status: Mapped[LeaveStatus] = mapped_column(
        sa.Enum(LeaveStatus, name="leave_status"),
        default=LeaveStatus.pending,
    )
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )

    # Relationships
    employee: Mapped["Employee"] = relationship(back_populates="leave_requests")
    leave_type: Mapped[LeaveType] = relationship(back_populates="requests")
