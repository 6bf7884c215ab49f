# ruff: noqa: B008, TC001, TC003
from __future__ import annotations

import uuid
from datetime import date

from fastapi import APIRouter, Query

from rotadesk.api.deps import AuthDep, WfmDep
from rotadesk.db import SessionDep
from rotadesk.schemas.shift import ShiftImportPayload, ShiftImportResult, ShiftListResponse
from rotadesk.services import shift as shift_service

shifts_router = APIRouter(prefix="/shifts", tags=["shifts"])


@shifts_router.get("", response_model=ShiftListResponse)
async def list_shifts(
    session: SessionDep,
    auth: AuthDep,
    start_date: date = Query(),
    end_date: date = Query(),
    user_id: uuid.UUID | None = Query(default=None),
) -> ShiftListResponse:
    """List shifts in a date range, optionally for one user."""
    return await shift_service.list_shifts(session, start_date, end_date, user_id)


@shifts_router.put("/import", response_model=ShiftImportResult)
async def import_shifts(
    payload: ShiftImportPayload,
    session: SessionDep,
    auth: WfmDep,
) -> ShiftImportResult:
    """Merge parsed roster rows into the shift store (WFM only)."""
    return await shift_service.import_shifts(session, payload)
