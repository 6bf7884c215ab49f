from __future__ import annotations

import logging
import uuid
from typing import TYPE_CHECKING

from sqlalchemy import func, select
from sqlmodel import col

from rotadesk.exceptions import AppError, UnknownLeaveType
from rotadesk.models.base import now_utc
from rotadesk.models.leave import LeaveBalance, LeaveBalanceHistory, LeaveRequest
from rotadesk.schemas.balance import (
    BalanceHistoryEntryResponse,
    BalanceHistoryListResponse,
    BalanceListResponse,
    BalanceResponse,
)
from rotadesk.services.validation import is_active_leave_type

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from rotadesk.schemas.auth import AuthContext
    from rotadesk.schemas.balance import CreateAdjustmentRequest

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _build_balance_response(balance: LeaveBalance) -> BalanceResponse:
    return BalanceResponse(
        user_id=balance.user_id,
        leave_type=balance.leave_type,
        balance=balance.balance,
        updated_at=balance.updated_at,
    )


def _build_history_response(entry: LeaveBalanceHistory) -> BalanceHistoryEntryResponse:
    return BalanceHistoryEntryResponse(
        id=entry.id,
        user_id=entry.user_id,
        leave_type=entry.leave_type,
        previous_balance=entry.previous_balance,
        new_balance=entry.new_balance,
        change_reason=entry.change_reason,
        leave_request_id=entry.leave_request_id,
        actor_id=entry.actor_id,
        created_at=entry.created_at,
    )


async def _get_balance_for_update(
    session: AsyncSession,
    user_id: uuid.UUID,
    leave_type: str,
) -> LeaveBalance | None:
    """Get the balance row with a FOR UPDATE lock."""
    result = await session.execute(
        select(LeaveBalance)
        .where(
            col(LeaveBalance.user_id) == user_id,
            col(LeaveBalance.leave_type) == leave_type,
        )
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def _apply_change(
    session: AsyncSession,
    balance: LeaveBalance,
    new_value: float,
    *,
    reason: str,
    actor_id: uuid.UUID | None,
    leave_request_id: uuid.UUID | None = None,
) -> LeaveBalanceHistory:
    entry = LeaveBalanceHistory(
        user_id=balance.user_id,
        leave_type=balance.leave_type,
        previous_balance=balance.balance,
        new_balance=new_value,
        change_reason=reason,
        leave_request_id=leave_request_id,
        actor_id=actor_id,
    )
    session.add(entry)
    balance.balance = new_value
    balance.updated_at = now_utc()
    await session.flush()
    return entry


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


async def deduct_for_approved_leave(
    session: AsyncSession,
    leave: LeaveRequest,
    actor_id: uuid.UUID,
) -> LeaveBalanceHistory:
    """Consume the request's business days from the balance.

    Runs inside the approving transaction. The result may go below zero when
    an exception request is approved; that is allowed and logged.
    """
    balance = await _get_balance_for_update(session, leave.user_id, leave.leave_type)
    if balance is None:
        raise UnknownLeaveType(leave.leave_type)

    new_value = balance.balance - leave.requested_days
    if new_value < 0:
        logger.warning(
            "Approving leave request %s takes %s balance of user %s below zero (%.2f)",
            leave.id,
            leave.leave_type,
            leave.user_id,
            new_value,
        )
    return await _apply_change(
        session,
        balance,
        new_value,
        reason=f"Leave request approved ({leave.start_date.isoformat()} to {leave.end_date.isoformat()})",
        actor_id=actor_id,
        leave_request_id=leave.id,
    )


async def create_adjustment(
    session: AsyncSession,
    auth: AuthContext,
    payload: CreateAdjustmentRequest,
) -> BalanceHistoryEntryResponse:
    """Manual WFM adjustment. Creates the balance row on first credit.

    Only active catalogue leave types can be adjusted.
    """
    if not await is_active_leave_type(session, payload.leave_type):
        raise UnknownLeaveType(payload.leave_type, "not an active leave type")

    balance = await _get_balance_for_update(session, payload.user_id, payload.leave_type)
    if balance is None:
        if payload.amount_days < 0:
            raise AppError("Cannot debit a leave type with no balance", status_code=400)
        balance = LeaveBalance(user_id=payload.user_id, leave_type=payload.leave_type, balance=0.0)
        session.add(balance)
        await session.flush()

    new_value = balance.balance + payload.amount_days
    if new_value < 0:
        raise AppError("Adjustment would make the balance negative", status_code=400)

    entry = await _apply_change(session, balance, new_value, reason=payload.reason, actor_id=auth.user_id)
    await session.commit()
    await session.refresh(entry)
    return _build_history_response(entry)


async def get_user_balances(session: AsyncSession, user_id: uuid.UUID) -> BalanceListResponse:
    result = await session.execute(
        select(LeaveBalance).where(col(LeaveBalance.user_id) == user_id).order_by(col(LeaveBalance.leave_type))
    )
    return BalanceListResponse(items=[_build_balance_response(b) for b in result.scalars().all()])


async def get_balance_history(
    session: AsyncSession,
    user_id: uuid.UUID,
    offset: int = 0,
    limit: int = 50,
) -> BalanceHistoryListResponse:
    base_filter = col(LeaveBalanceHistory.user_id) == user_id
    count_result = await session.execute(select(func.count()).select_from(LeaveBalanceHistory).where(base_filter))
    total = count_result.scalar_one()

    result = await session.execute(
        select(LeaveBalanceHistory)
        .where(base_filter)
        .order_by(col(LeaveBalanceHistory.created_at).desc())
        .offset(offset)
        .limit(limit)
    )
    return BalanceHistoryListResponse(
        items=[_build_history_response(e) for e in result.scalars().all()],
        total=total,
    )
