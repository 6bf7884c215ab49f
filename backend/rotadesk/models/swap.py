# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import date, datetime

import sqlalchemy as sa
from sqlmodel import Field

from rotadesk.models.base import TimestampMixin, UUIDBase
from rotadesk.models.enums import SwapStatus


class SwapRequest(UUIDBase, TimestampMixin, table=True):
    """A request to exchange shift assignments between two users.

    The ``*_original_*`` columns are a snapshot taken at creation time and are
    never updated afterwards. Swap execution derives its writes from them.
    """

    __tablename__ = "swap_request"
    __table_args__ = (
        sa.CheckConstraint("requester_shift_id <> target_shift_id", name="ck_swap_distinct_shifts"),
        sa.Index("ix_swap_request_parties", "requester_id", "target_user_id"),
    )

    requester_id: uuid.UUID = Field(index=True)
    target_user_id: uuid.UUID = Field(index=True)
    requester_shift_id: uuid.UUID = Field(
        sa_column=sa.Column(sa.Uuid, sa.ForeignKey("shift.id", ondelete="CASCADE"), nullable=False),
    )
    target_shift_id: uuid.UUID = Field(
        sa_column=sa.Column(sa.Uuid, sa.ForeignKey("shift.id", ondelete="CASCADE"), nullable=False),
    )
    status: str = Field(
        default=SwapStatus.PENDING_ACCEPTANCE,
        max_length=30,
        index=True,
        sa_column_kwargs={"server_default": "pending_acceptance"},
    )

    requester_original_date: date
    requester_original_shift_type: str = Field(max_length=10)
    target_original_date: date
    target_original_shift_type: str = Field(max_length=10)
    requester_original_shift_type_on_target_date: str | None = Field(default=None, max_length=10)
    target_original_shift_type_on_requester_date: str | None = Field(default=None, max_length=10)

    tl_approved_at: datetime | None = Field(default=None, sa_type=sa.DateTime(timezone=True))  # ty: ignore[invalid-argument-type]
    wfm_approved_at: datetime | None = Field(default=None, sa_type=sa.DateTime(timezone=True))  # ty: ignore[invalid-argument-type]
    executed_at: datetime | None = Field(default=None, sa_type=sa.DateTime(timezone=True))  # ty: ignore[invalid-argument-type]
