# ruff: noqa: TC001, TC003
from __future__ import annotations

import uuid
from datetime import date, datetime
from typing import Self

from pydantic import BaseModel, model_validator

from rotadesk.models.enums import ShiftType, SwapStatus


class CreateSwapRequestPayload(BaseModel):
    """Request body for proposing a shift swap to another user."""

    target_user_id: uuid.UUID
    requester_shift_id: uuid.UUID
    target_shift_id: uuid.UUID

    @model_validator(mode="after")
    def _validate_shifts(self) -> Self:
        if self.requester_shift_id == self.target_shift_id:
            msg = "requester_shift_id and target_shift_id must differ"
            raise ValueError(msg)
        return self


class SwapTransitionPayload(BaseModel):
    """Request body for every swap status transition."""

    expected_status: SwapStatus


class SwapRequestResponse(BaseModel):
    """Response schema for a single swap request."""

    id: uuid.UUID
    requester_id: uuid.UUID
    target_user_id: uuid.UUID
    requester_shift_id: uuid.UUID
    target_shift_id: uuid.UUID
    status: SwapStatus
    requester_original_date: date
    requester_original_shift_type: ShiftType
    target_original_date: date
    target_original_shift_type: ShiftType
    requester_original_shift_type_on_target_date: ShiftType | None
    target_original_shift_type_on_requester_date: ShiftType | None
    tl_approved_at: datetime | None
    wfm_approved_at: datetime | None
    executed_at: datetime | None
    created_at: datetime


class SwapRequestListResponse(BaseModel):
    """Paginated list of swap requests."""

    items: list[SwapRequestResponse]
    total: int


class ShiftChange(BaseModel):
    """One row written by a swap execution."""

    shift_id: uuid.UUID
    user_id: uuid.UUID
    shift_date: date
    old_shift_type: ShiftType
    new_shift_type: ShiftType


class SwapExecutionResponse(BaseModel):
    """Outcome of (re-)executing an approved swap."""

    swap_id: uuid.UUID
    applied: bool
    updated_shifts: list[ShiftChange]
