# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel, Field


class BalanceResponse(BaseModel):
    """Remaining days for one leave type."""

    user_id: uuid.UUID
    leave_type: str
    balance: float
    updated_at: datetime


class BalanceListResponse(BaseModel):
    items: list[BalanceResponse]


class CreateAdjustmentRequest(BaseModel):
    """Request body for a manual WFM balance adjustment."""

    user_id: uuid.UUID
    leave_type: str = Field(min_length=1, max_length=50)
    amount_days: float = Field(description="Positive to credit, negative to debit")
    reason: str = Field(min_length=1, max_length=500)


class BalanceHistoryEntryResponse(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID
    leave_type: str
    previous_balance: float
    new_balance: float
    change_reason: str
    leave_request_id: uuid.UUID | None
    actor_id: uuid.UUID | None
    created_at: datetime


class BalanceHistoryListResponse(BaseModel):
    items: list[BalanceHistoryEntryResponse]
    total: int
