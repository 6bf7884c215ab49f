# ruff: noqa: TC003
from __future__ import annotations

import datetime
import uuid

import sqlalchemy as sa
from sqlmodel import Field

from rotadesk.models.base import TimestampMixin, UpdatedAtMixin, UUIDBase


class Shift(UUIDBase, TimestampMixin, UpdatedAtMixin, table=True):
    """One user's shift assignment on one date."""

    __tablename__ = "shift"
    __table_args__ = (sa.UniqueConstraint("user_id", "date", name="uq_shift_user_date"),)

    user_id: uuid.UUID = Field(index=True)
    date: datetime.date = Field(index=True)
    shift_type: str = Field(max_length=10)
    # Display/audit only. Never used to reconstruct a swap.
    swapped_with_user_id: uuid.UUID | None = None
