# ruff: noqa: TC003
"""Balance and overlap validation for leave requests.

``evaluate_leave_request`` is a pure function over already-loaded records;
``validate_leave_request`` loads those records from the session and delegates.
Neither writes anything.
"""

from __future__ import annotations

import uuid
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date
from typing import TYPE_CHECKING

from sqlalchemy import select
from sqlmodel import col

from rotadesk.exceptions import InsufficientBalance, InvalidRange, OverlappingRequest, UnknownLeaveType
from rotadesk.models.enums import ACTIVE_LEAVE_STATUSES
from rotadesk.models.leave import LeaveBalance, LeaveRequest, LeaveTypeConfig
from rotadesk.services.duration import count_business_days, ranges_overlap

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession


@dataclass(frozen=True)
class LeaveCheck:
    """Successful validation result."""

    requested_days: int
    available_balance: float


@dataclass(frozen=True)
class ExistingLeave:
    """The fields of a stored request that the overlap test needs."""

    id: uuid.UUID
    status: str
    start_date: date
    end_date: date


def find_overlap(
    existing: Iterable[ExistingLeave],
    start_date: date,
    end_date: date,
    exclude_request_id: uuid.UUID | None = None,
) -> ExistingLeave | None:
    """Return the first active request intersecting ``[start_date, end_date]``."""
    for request in existing:
        if exclude_request_id is not None and request.id == exclude_request_id:
            continue
        if request.status not in ACTIVE_LEAVE_STATUSES:
            continue
        if ranges_overlap(request.start_date, request.end_date, start_date, end_date):
            return request
    return None


def evaluate_leave_request(
    *,
    leave_type: str,
    start_date: date,
    end_date: date,
    balance: float | None,
    existing: Iterable[ExistingLeave],
    exclude_request_id: uuid.UUID | None = None,
    leave_type_active: bool = True,
) -> LeaveCheck:
    """Validate a prospective leave request.

    Checks run in a fixed order: range, leave type, balance, overlap.

    Raises:
        InvalidRange: the range is inverted or has no business day.
        UnknownLeaveType: the leave type is not an active catalogue entry, or
            ``balance`` is None (no record for this leave type).
        InsufficientBalance: fewer days available than requested.
        OverlappingRequest: an approved or pending request intersects the range.
    """
    requested_days = count_business_days(start_date, end_date)
    if requested_days <= 0:
        raise InvalidRange(start_date, end_date)

    if not leave_type_active:
        raise UnknownLeaveType(leave_type, "not an active leave type")

    if balance is None:
        raise UnknownLeaveType(leave_type)

    if balance < requested_days:
        raise InsufficientBalance(leave_type, requested_days, balance)

    conflict = find_overlap(existing, start_date, end_date, exclude_request_id)
    if conflict is not None:
        raise OverlappingRequest(conflict.id, conflict.status, conflict.start_date, conflict.end_date)

    return LeaveCheck(requested_days=requested_days, available_balance=balance)


async def get_balance_value(session: AsyncSession, user_id: uuid.UUID, leave_type: str) -> float | None:
    """Read the current balance for (user, leave type), or None if absent."""
    result = await session.execute(
        select(col(LeaveBalance.balance)).where(
            col(LeaveBalance.user_id) == user_id,
            col(LeaveBalance.leave_type) == leave_type,
        )
    )
    return result.scalar_one_or_none()


async def is_active_leave_type(session: AsyncSession, leave_type: str) -> bool:
    """True if ``leave_type`` is a catalogue code that is still active."""
    result = await session.execute(
        select(col(LeaveTypeConfig.id)).where(
            col(LeaveTypeConfig.code) == leave_type,
            col(LeaveTypeConfig.is_active).is_(True),
        )
    )
    return result.first() is not None


async def load_active_leave(
    session: AsyncSession,
    user_id: uuid.UUID,
    start_date: date,
    end_date: date,
) -> list[ExistingLeave]:
    """Range query: the user's active requests intersecting the interval."""
    result = await session.execute(
        select(LeaveRequest).where(
            col(LeaveRequest.user_id) == user_id,
            col(LeaveRequest.status).in_([s.value for s in ACTIVE_LEAVE_STATUSES]),
            col(LeaveRequest.start_date) <= end_date,
            col(LeaveRequest.end_date) >= start_date,
        )
        .order_by(col(LeaveRequest.start_date))
    )
    return [
        ExistingLeave(id=r.id, status=r.status, start_date=r.start_date, end_date=r.end_date)
        for r in result.scalars().all()
    ]


async def validate_leave_request(
    session: AsyncSession,
    user_id: uuid.UUID,
    leave_type: str,
    start_date: date,
    end_date: date,
    exclude_request_id: uuid.UUID | None = None,
) -> LeaveCheck:
    """Load the catalogue entry, balance and overlapping history, then run ``evaluate_leave_request``."""
    active = await is_active_leave_type(session, leave_type)
    balance = await get_balance_value(session, user_id, leave_type)
    existing = await load_active_leave(session, user_id, start_date, end_date)
    return evaluate_leave_request(
        leave_type=leave_type,
        start_date=start_date,
        end_date=end_date,
        balance=balance,
        existing=existing,
        exclude_request_id=exclude_request_id,
        leave_type_active=active,
    )
