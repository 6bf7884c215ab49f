# ruff: noqa: TC001, TC003
from __future__ import annotations

import uuid
from datetime import date, datetime
from typing import Self

from pydantic import BaseModel, Field, model_validator

from rotadesk.models.enums import LeaveStatus

# ---------------------------------------------------------------------------
# Request payloads
# ---------------------------------------------------------------------------


class CreateLeaveRequestPayload(BaseModel):
    """Request body for filing a new leave request."""

    user_id: uuid.UUID | None = Field(default=None, description="Defaults to the acting user")
    leave_type: str = Field(min_length=1, max_length=50)
    start_date: date
    end_date: date
    notes: str | None = Field(default=None, max_length=1000)

    @model_validator(mode="after")
    def _validate_dates(self) -> Self:
        if self.end_date < self.start_date:
            msg = "end_date must not be before start_date"
            raise ValueError(msg)
        return self


class UpdateLeaveRequestPayload(BaseModel):
    """Request body for editing a leave request still awaiting the team lead."""

    expected_status: LeaveStatus = LeaveStatus.PENDING_TL
    leave_type: str | None = Field(default=None, min_length=1, max_length=50)
    start_date: date | None = None
    end_date: date | None = None
    notes: str | None = Field(default=None, max_length=1000)


class LeaveTransitionPayload(BaseModel):
    """Request body for every leave status transition.

    ``expected_status`` is the status the caller saw when it last fetched the
    request; the transition is refused if the record has moved on since.
    """

    expected_status: LeaveStatus


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class LeaveRequestResponse(BaseModel):
    """Response schema for a single leave request."""

    id: uuid.UUID
    user_id: uuid.UUID
    leave_type: str
    start_date: date
    end_date: date
    requested_days: int
    status: LeaveStatus
    tl_approved_at: datetime | None
    wfm_approved_at: datetime | None
    notes: str | None
    created_at: datetime


class LeaveRequestListResponse(BaseModel):
    """Paginated list of leave requests."""

    items: list[LeaveRequestResponse]
    total: int


class LeaveTypeResponse(BaseModel):
    id: uuid.UUID
    code: str
    label: str
    is_active: bool


class CreateLeaveTypePayload(BaseModel):
    code: str = Field(min_length=1, max_length=50, pattern=r"^[a-z][a-z0-9_]*$")
    label: str = Field(min_length=1, max_length=100)
    is_active: bool = True
