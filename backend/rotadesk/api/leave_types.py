# ruff: noqa: B008, TC001
from __future__ import annotations

from fastapi import APIRouter, Query, status

from rotadesk.api.deps import AuthDep, WfmDep
from rotadesk.db import SessionDep
from rotadesk.schemas.leave import CreateLeaveTypePayload, LeaveTypeResponse
from rotadesk.services import leave_type as leave_type_service

leave_types_router = APIRouter(prefix="/leave-types", tags=["leave-types"])


@leave_types_router.get("", response_model=list[LeaveTypeResponse])
async def list_leave_types(
    session: SessionDep,
    auth: AuthDep,
    include_inactive: bool = Query(default=False),
) -> list[LeaveTypeResponse]:
    return await leave_type_service.list_leave_types(session, include_inactive)


@leave_types_router.post("", response_model=LeaveTypeResponse, status_code=status.HTTP_201_CREATED)
async def create_leave_type(
    payload: CreateLeaveTypePayload,
    session: SessionDep,
    auth: WfmDep,
) -> LeaveTypeResponse:
    """Add a leave type to the catalogue (WFM only)."""
    return await leave_type_service.create_leave_type(session, payload)
