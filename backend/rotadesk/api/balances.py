# ruff: noqa: B008, TC001, TC003
from __future__ import annotations

import uuid

from fastapi import APIRouter, Query, status

from rotadesk.api.deps import AuthDep, WfmDep
from rotadesk.db import SessionDep
from rotadesk.exceptions import Forbidden
from rotadesk.schemas.auth import AuthContext
from rotadesk.schemas.balance import (
    BalanceHistoryEntryResponse,
    BalanceHistoryListResponse,
    BalanceListResponse,
    CreateAdjustmentRequest,
)
from rotadesk.services import balance as balance_service

user_balance_router = APIRouter(prefix="/users/{user_id}", tags=["balances"])

adjustment_router = APIRouter(prefix="/balances/adjustments", tags=["balances"])


def _check_visibility(auth: AuthContext, user_id: uuid.UUID) -> None:
    if not auth.is_approver and auth.user_id != user_id:
        raise Forbidden("Not authorized to view another user's balances")


@user_balance_router.get("/balances", response_model=BalanceListResponse)
async def get_user_balances(
    user_id: uuid.UUID,
    session: SessionDep,
    auth: AuthDep,
) -> BalanceListResponse:
    """Get every leave balance of a user."""
    _check_visibility(auth, user_id)
    return await balance_service.get_user_balances(session, user_id)


@user_balance_router.get("/balance-history", response_model=BalanceHistoryListResponse)
async def get_balance_history(
    user_id: uuid.UUID,
    session: SessionDep,
    auth: AuthDep,
    offset: int = Query(default=0, ge=0),
    limit: int = Query(default=50, ge=1, le=100),
) -> BalanceHistoryListResponse:
    """Get paginated balance changes for a user, newest first."""
    _check_visibility(auth, user_id)
    return await balance_service.get_balance_history(session, user_id, offset, limit)


@adjustment_router.post("", response_model=BalanceHistoryEntryResponse, status_code=status.HTTP_201_CREATED)
async def create_adjustment(
    payload: CreateAdjustmentRequest,
    session: SessionDep,
    auth: WfmDep,
) -> BalanceHistoryEntryResponse:
    """Create a manual balance adjustment (WFM only)."""
    return await balance_service.create_adjustment(session, auth, payload)
