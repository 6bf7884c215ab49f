# ruff: noqa: B008, TC001, TC003
from __future__ import annotations

import uuid

from fastapi import APIRouter, Query, status

from rotadesk.api.deps import ApproverDep, AuthDep, WfmDep
from rotadesk.db import SessionDep
from rotadesk.models.enums import SwapStatus
from rotadesk.schemas.swap import (
    CreateSwapRequestPayload,
    SwapExecutionResponse,
    SwapRequestListResponse,
    SwapRequestResponse,
    SwapTransitionPayload,
)
from rotadesk.services import swap as swap_service

swap_requests_router = APIRouter(prefix="/swap-requests", tags=["swap-requests"])


@swap_requests_router.post("", response_model=SwapRequestResponse, status_code=status.HTTP_201_CREATED)
async def create_swap_request(
    payload: CreateSwapRequestPayload,
    session: SessionDep,
    auth: AuthDep,
) -> SwapRequestResponse:
    """Propose a shift swap to another user."""
    return await swap_service.create_swap_request(session, auth, payload)


@swap_requests_router.get("", response_model=SwapRequestListResponse)
async def list_swap_requests(
    session: SessionDep,
    auth: AuthDep,
    status_filter: SwapStatus | None = Query(default=None, alias="status"),
    user_id: uuid.UUID | None = Query(default=None),
    offset: int = Query(default=0, ge=0),
    limit: int = Query(default=50, ge=1, le=100),
) -> SwapRequestListResponse:
    """List swap requests; ``user_id`` matches requester or target."""
    return await swap_service.list_swap_requests(session, auth, status_filter, user_id, offset, limit)


@swap_requests_router.get("/{swap_id}", response_model=SwapRequestResponse)
async def get_swap_request(
    swap_id: uuid.UUID,
    session: SessionDep,
    auth: AuthDep,
) -> SwapRequestResponse:
    return await swap_service.get_swap_request(session, auth, swap_id)


@swap_requests_router.post("/{swap_id}/accept", response_model=SwapRequestResponse)
async def accept_swap_request(
    swap_id: uuid.UUID,
    payload: SwapTransitionPayload,
    session: SessionDep,
    auth: AuthDep,
) -> SwapRequestResponse:
    """Accept a swap proposed to the acting user."""
    return await swap_service.accept_swap_request(session, auth, swap_id, payload.expected_status)


@swap_requests_router.post("/{swap_id}/decline", response_model=SwapRequestResponse)
async def decline_swap_request(
    swap_id: uuid.UUID,
    payload: SwapTransitionPayload,
    session: SessionDep,
    auth: AuthDep,
) -> SwapRequestResponse:
    """Decline a swap proposed to the acting user."""
    return await swap_service.decline_swap_request(session, auth, swap_id, payload.expected_status)


@swap_requests_router.post("/{swap_id}/approve", response_model=SwapRequestResponse)
async def approve_swap_request(
    swap_id: uuid.UUID,
    payload: SwapTransitionPayload,
    session: SessionDep,
    auth: ApproverDep,
) -> SwapRequestResponse:
    """Approve a swap (team lead or WFM). Final approval exchanges the shifts."""
    return await swap_service.approve_swap_request(session, auth, swap_id, payload.expected_status)


@swap_requests_router.post("/{swap_id}/reject", response_model=SwapRequestResponse)
async def reject_swap_request(
    swap_id: uuid.UUID,
    payload: SwapTransitionPayload,
    session: SessionDep,
    auth: ApproverDep,
) -> SwapRequestResponse:
    return await swap_service.reject_swap_request(session, auth, swap_id, payload.expected_status)


@swap_requests_router.post("/{swap_id}/cancel", response_model=SwapRequestResponse)
async def cancel_swap_request(
    swap_id: uuid.UUID,
    payload: SwapTransitionPayload,
    session: SessionDep,
    auth: AuthDep,
) -> SwapRequestResponse:
    """Withdraw a pending swap (requester only)."""
    return await swap_service.cancel_swap_request(session, auth, swap_id, payload.expected_status)


@swap_requests_router.post("/{swap_id}/execute", response_model=SwapExecutionResponse)
async def execute_swap(
    swap_id: uuid.UUID,
    session: SessionDep,
    auth: WfmDep,
) -> SwapExecutionResponse:
    """Re-run the shift exchange of an approved swap (WFM only, idempotent)."""
    return await swap_service.reexecute_swap(session, auth, swap_id)
