# ruff: noqa: B008, TC001, TC003
from __future__ import annotations

import uuid

from fastapi import APIRouter, Query, status

from rotadesk.api.deps import ApproverDep, AuthDep
from rotadesk.db import SessionDep
from rotadesk.models.enums import LeaveStatus
from rotadesk.schemas.leave import (
    CreateLeaveRequestPayload,
    LeaveRequestListResponse,
    LeaveRequestResponse,
    LeaveTransitionPayload,
    UpdateLeaveRequestPayload,
)
from rotadesk.services import leave as leave_service

leave_requests_router = APIRouter(prefix="/leave-requests", tags=["leave-requests"])


@leave_requests_router.post("", response_model=LeaveRequestResponse, status_code=status.HTTP_201_CREATED)
async def create_leave_request(
    payload: CreateLeaveRequestPayload,
    session: SessionDep,
    auth: AuthDep,
) -> LeaveRequestResponse:
    """File a leave request. Insufficient balance may yield a denied request."""
    return await leave_service.create_leave_request(session, auth, payload)


@leave_requests_router.get("", response_model=LeaveRequestListResponse)
async def list_leave_requests(
    session: SessionDep,
    auth: AuthDep,
    status_filter: LeaveStatus | None = Query(default=None, alias="status"),
    user_id: uuid.UUID | None = Query(default=None),
    offset: int = Query(default=0, ge=0),
    limit: int = Query(default=50, ge=1, le=100),
) -> LeaveRequestListResponse:
    """List leave requests with optional filters."""
    return await leave_service.list_leave_requests(session, auth, status_filter, user_id, offset, limit)


@leave_requests_router.get("/{request_id}", response_model=LeaveRequestResponse)
async def get_leave_request(
    request_id: uuid.UUID,
    session: SessionDep,
    auth: AuthDep,
) -> LeaveRequestResponse:
    return await leave_service.get_leave_request(session, auth, request_id)


@leave_requests_router.patch("/{request_id}", response_model=LeaveRequestResponse)
async def update_leave_request(
    request_id: uuid.UUID,
    payload: UpdateLeaveRequestPayload,
    session: SessionDep,
    auth: AuthDep,
) -> LeaveRequestResponse:
    """Edit a request still pending team lead approval (requester only)."""
    return await leave_service.update_leave_request(session, auth, request_id, payload)


@leave_requests_router.post("/{request_id}/approve", response_model=LeaveRequestResponse)
async def approve_leave_request(
    request_id: uuid.UUID,
    payload: LeaveTransitionPayload,
    session: SessionDep,
    auth: ApproverDep,
) -> LeaveRequestResponse:
    """Approve a leave request (team lead or WFM)."""
    return await leave_service.approve_leave_request(session, auth, request_id, payload.expected_status)


@leave_requests_router.post("/{request_id}/reject", response_model=LeaveRequestResponse)
async def reject_leave_request(
    request_id: uuid.UUID,
    payload: LeaveTransitionPayload,
    session: SessionDep,
    auth: ApproverDep,
) -> LeaveRequestResponse:
    """Reject a pending leave request (team lead or WFM)."""
    return await leave_service.reject_leave_request(session, auth, request_id, payload.expected_status)


@leave_requests_router.post("/{request_id}/cancel", response_model=LeaveRequestResponse)
async def cancel_leave_request(
    request_id: uuid.UUID,
    payload: LeaveTransitionPayload,
    session: SessionDep,
    auth: AuthDep,
) -> LeaveRequestResponse:
    """Withdraw a pending leave request (requester only)."""
    return await leave_service.cancel_leave_request(session, auth, request_id, payload.expected_status)


@leave_requests_router.post("/{request_id}/exception", response_model=LeaveRequestResponse)
async def ask_exception(
    request_id: uuid.UUID,
    payload: LeaveTransitionPayload,
    session: SessionDep,
    auth: AuthDep,
) -> LeaveRequestResponse:
    """Ask for an exception on an auto-denied request."""
    return await leave_service.ask_exception(session, auth, request_id, payload.expected_status)
