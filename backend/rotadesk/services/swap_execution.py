"""Atomic shift exchange for approved swap requests.

The exchange plan is derived only from the snapshot columns captured when the
swap was filed. Live shift rows are compared against that plan before any
write: rows still at their original values are exchanged, rows already at
their exchanged values are left alone (a repeated run is a no-op), and any
other state aborts the whole exchange.
"""

# ruff: noqa: TC003
from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import date
from typing import TYPE_CHECKING

from sqlalchemy import and_, or_, select
from sqlmodel import col

from rotadesk.exceptions import SwapExecutionError
from rotadesk.models.base import now_utc
from rotadesk.models.shift import Shift

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from rotadesk.models.swap import SwapRequest

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PlannedWrite:
    """One shift row the exchange touches."""

    user_id: uuid.UUID
    shift_date: date
    before: str
    after: str
    counterpart_id: uuid.UUID


@dataclass(frozen=True)
class AppliedWrite:
    shift_id: uuid.UUID
    user_id: uuid.UUID
    shift_date: date
    old_shift_type: str
    new_shift_type: str


@dataclass(frozen=True)
class SwapExecutionResult:
    swap_id: uuid.UUID
    applied: bool
    writes: list[AppliedWrite]


def plan_exchange(swap: SwapRequest) -> list[PlannedWrite]:
    """Build the list of row writes for ``swap`` from its snapshot.

    When both parties held a shift on both dates at filing time, each party
    receives the other party's original type on each date (four rows).
    Otherwise only the two offered shifts are exchanged: the requester's row
    receives the target's original type and the target's row receives the
    requester's.
    """
    requester, target = swap.requester_id, swap.target_user_id
    r_date, t_date = swap.requester_original_date, swap.target_original_date
    r_own, t_own = swap.requester_original_shift_type, swap.target_original_shift_type
    own_pair = [
        PlannedWrite(requester, r_date, r_own, t_own, target),
        PlannedWrite(target, t_date, t_own, r_own, requester),
    ]

    target_on_r_date = swap.target_original_shift_type_on_requester_date
    requester_on_t_date = swap.requester_original_shift_type_on_target_date
    if r_date == t_date or target_on_r_date is None or requester_on_t_date is None:
        return own_pair

    return [
        PlannedWrite(requester, r_date, r_own, target_on_r_date, target),
        PlannedWrite(target, r_date, target_on_r_date, r_own, requester),
        PlannedWrite(target, t_date, t_own, requester_on_t_date, requester),
        PlannedWrite(requester, t_date, requester_on_t_date, t_own, target),
    ]


async def _lock_rows(session: AsyncSession, plan: list[PlannedWrite]) -> dict[tuple[uuid.UUID, date], Shift]:
    """SELECT ... FOR UPDATE every row in the plan, keyed by (user, date)."""
    conditions = [
        and_(col(Shift.user_id) == write.user_id, col(Shift.date) == write.shift_date) for write in plan
    ]
    result = await session.execute(
        select(Shift)
        .where(or_(*conditions))
        .order_by(col(Shift.id))
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    return {(row.user_id, row.date): row for row in result.scalars().all()}


async def execute_swap(session: AsyncSession, swap: SwapRequest) -> SwapExecutionResult:
    """Apply the exchange for an approved swap within the caller's transaction.

    Nothing is committed here. On SwapExecutionError no row has been modified
    and the caller must roll back.
    """
    if swap.status != "approved":
        raise SwapExecutionError(swap.id, "swap request must be approved before execution", {"status": swap.status})

    plan = plan_exchange(swap)
    rows = await _lock_rows(session, plan)

    missing = [w for w in plan if (w.user_id, w.shift_date) not in rows]
    if missing:
        first = missing[0]
        raise SwapExecutionError(
            swap.id,
            f"shift not found for user {first.user_id} on {first.shift_date.isoformat()}",
            {"user_id": str(first.user_id), "date": first.shift_date.isoformat()},
        )

    live = [rows[(w.user_id, w.shift_date)].shift_type for w in plan]
    if all(current == w.before for current, w in zip(live, plan, strict=True)):
        applied = True
    elif all(current == w.after for current, w in zip(live, plan, strict=True)):
        applied = False
    else:
        stale = [
            {"user_id": str(w.user_id), "date": w.shift_date.isoformat(), "expected": w.before, "found": current}
            for current, w in zip(live, plan, strict=True)
            if current not in (w.before, w.after)
        ]
        logger.error("Swap %s not executed: shifts changed since the request was filed: %s", swap.id, stale)
        raise SwapExecutionError(swap.id, "shifts changed since the swap was requested", {"stale": stale})

    now = now_utc()
    writes: list[AppliedWrite] = []
    for w in plan:
        row = rows[(w.user_id, w.shift_date)]
        old_type = row.shift_type
        if applied:
            row.shift_type = w.after
            row.updated_at = now
        row.swapped_with_user_id = w.counterpart_id
        writes.append(AppliedWrite(row.id, row.user_id, row.date, old_type if applied else w.before, w.after))

    if swap.executed_at is None:
        swap.executed_at = now
    await session.flush()

    if applied:
        logger.info("Swap %s executed: %d shifts exchanged", swap.id, len(writes))
    else:
        logger.info("Swap %s already executed; no shift changed", swap.id)
    return SwapExecutionResult(swap_id=swap.id, applied=applied, writes=writes)
