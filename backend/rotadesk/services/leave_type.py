from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlmodel import col

from rotadesk.exceptions import AppError
from rotadesk.models.leave import LeaveTypeConfig
from rotadesk.schemas.leave import LeaveTypeResponse

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from rotadesk.schemas.leave import CreateLeaveTypePayload


def _build_leave_type_response(leave_type: LeaveTypeConfig) -> LeaveTypeResponse:
    return LeaveTypeResponse(
        id=leave_type.id,
        code=leave_type.code,
        label=leave_type.label,
        is_active=leave_type.is_active,
    )


async def list_leave_types(session: AsyncSession, include_inactive: bool = False) -> list[LeaveTypeResponse]:
    query = select(LeaveTypeConfig).order_by(col(LeaveTypeConfig.label))
    if not include_inactive:
        query = query.where(col(LeaveTypeConfig.is_active).is_(True))
    result = await session.execute(query)
    return [_build_leave_type_response(t) for t in result.scalars().all()]


async def create_leave_type(session: AsyncSession, payload: CreateLeaveTypePayload) -> LeaveTypeResponse:
    leave_type = LeaveTypeConfig(code=payload.code, label=payload.label, is_active=payload.is_active)
    session.add(leave_type)
    try:
        await session.commit()
    except IntegrityError:
        await session.rollback()
        raise AppError(f"Leave type '{payload.code}' already exists", status_code=409) from None
    await session.refresh(leave_type)
    return _build_leave_type_response(leave_type)
