# ruff: noqa: TC003
from __future__ import annotations

import logging
import uuid
from datetime import date
from typing import TYPE_CHECKING

from sqlalchemy import func, select
from sqlmodel import col

from rotadesk.exceptions import AppError
from rotadesk.models.base import now_utc
from rotadesk.models.enums import ShiftType
from rotadesk.models.shift import Shift
from rotadesk.schemas.shift import ShiftImportResult, ShiftListResponse, ShiftResponse

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from rotadesk.schemas.shift import ShiftImportPayload

logger = logging.getLogger(__name__)


def _build_shift_response(shift: Shift) -> ShiftResponse:
    return ShiftResponse(
        id=shift.id,
        user_id=shift.user_id,
        date=shift.date,
        shift_type=ShiftType(shift.shift_type),
        swapped_with_user_id=shift.swapped_with_user_id,
    )


async def list_shifts(
    session: AsyncSession,
    start_date: date,
    end_date: date,
    user_id: uuid.UUID | None = None,
) -> ShiftListResponse:
    """Shifts in ``[start_date, end_date]``, ordered by date then user."""
    if end_date < start_date:
        raise AppError("end_date must not be before start_date", status_code=400)

    filters = [col(Shift.date) >= start_date, col(Shift.date) <= end_date]
    if user_id is not None:
        filters.append(col(Shift.user_id) == user_id)

    count_result = await session.execute(select(func.count()).select_from(Shift).where(*filters))
    total = count_result.scalar_one()

    result = await session.execute(select(Shift).where(*filters).order_by(col(Shift.date), col(Shift.user_id)))
    return ShiftListResponse(items=[_build_shift_response(s) for s in result.scalars().all()], total=total)


async def import_shifts(session: AsyncSession, payload: ShiftImportPayload) -> ShiftImportResult:
    """Upsert roster rows keyed by (user_id, date).

    A row without a shift type is skipped: an existing shift stays as it is
    and no new shift is created. ``swapped_with_user_id`` is never touched.
    When the same (user, date) appears more than once the last row wins.
    """
    rows: dict[tuple[uuid.UUID, date], ShiftType] = {}
    skipped = 0
    for row in payload.rows:
        if row.shift_type is None:
            skipped += 1
            continue
        rows[(row.user_id, row.date)] = row.shift_type

    if not rows:
        return ShiftImportResult(created=0, updated=0, skipped=skipped)

    user_ids = list({u for (u, _d) in rows})
    dates = [d for (_u, d) in rows]
    result = await session.execute(
        select(Shift)
        .where(
            col(Shift.user_id).in_(user_ids),
            col(Shift.date) >= min(dates),
            col(Shift.date) <= max(dates),
        )
        .with_for_update()
    )
    existing = {(s.user_id, s.date): s for s in result.scalars().all() if (s.user_id, s.date) in rows}

    created = 0
    updated = 0
    now = now_utc()
    for (user_id, shift_date), shift_type in rows.items():
        shift = existing.get((user_id, shift_date))
        if shift is None:
            session.add(Shift(user_id=user_id, date=shift_date, shift_type=shift_type.value))
            created += 1
        elif shift.shift_type != shift_type.value:
            shift.shift_type = shift_type.value
            shift.updated_at = now
            updated += 1

    await session.commit()
    logger.info("Shift import: %d created, %d updated, %d skipped", created, updated, skipped)
    return ShiftImportResult(created=created, updated=updated, skipped=skipped)
