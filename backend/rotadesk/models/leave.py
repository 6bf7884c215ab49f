# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import date, datetime

import sqlalchemy as sa
from sqlmodel import Field

from rotadesk.models.base import TimestampMixin, UpdatedAtMixin, UUIDBase
from rotadesk.models.enums import LeaveStatus


class LeaveTypeConfig(UUIDBase, TimestampMixin, table=True):
    """One entry of the configurable leave-type catalogue."""

    __tablename__ = "leave_type"

    code: str = Field(max_length=50, unique=True, index=True)
    label: str = Field(max_length=100)
    is_active: bool = Field(default=True)


class LeaveRequest(UUIDBase, TimestampMixin, table=True):
    """A paid-leave request moving through the TL/WFM approval chain."""

    __tablename__ = "leave_request"
    __table_args__ = (
        sa.Index("ix_leave_request_user_dates", "user_id", "start_date", "end_date"),
        sa.CheckConstraint("start_date <= end_date", name="ck_leave_request_range"),
    )

    user_id: uuid.UUID = Field(index=True)
    leave_type: str = Field(max_length=50)
    start_date: date
    end_date: date
    requested_days: int = Field(default=0)
    status: str = Field(
        default=LeaveStatus.PENDING_TL, max_length=30, index=True, sa_column_kwargs={"server_default": "pending_tl"}
    )
    tl_approved_at: datetime | None = Field(default=None, sa_type=sa.DateTime(timezone=True))  # ty: ignore[invalid-argument-type]
    wfm_approved_at: datetime | None = Field(default=None, sa_type=sa.DateTime(timezone=True))  # ty: ignore[invalid-argument-type]
    notes: str | None = Field(default=None, max_length=1000)


class LeaveBalance(UpdatedAtMixin, table=True):
    """Remaining days per (user, leave type)."""

    __tablename__ = "leave_balance"

    user_id: uuid.UUID = Field(primary_key=True)
    leave_type: str = Field(primary_key=True, max_length=50)
    balance: float = Field(default=0.0, sa_column_kwargs={"server_default": "0"})


class LeaveBalanceHistory(UUIDBase, TimestampMixin, table=True):
    """Append-only record of every balance change made by the system."""

    __tablename__ = "leave_balance_history"

    user_id: uuid.UUID = Field(index=True)
    leave_type: str = Field(max_length=50)
    previous_balance: float
    new_balance: float
    change_reason: str = Field(max_length=500)
    leave_request_id: uuid.UUID | None = None
    actor_id: uuid.UUID | None = None
