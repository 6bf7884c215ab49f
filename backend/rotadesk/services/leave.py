# ruff: noqa: TC003
from __future__ import annotations

import logging
import uuid
from typing import TYPE_CHECKING

from sqlalchemy import func, select, update
from sqlmodel import col

from rotadesk.config import get_settings
from rotadesk.exceptions import (
    AppError,
    ConcurrencyConflict,
    Forbidden,
    InsufficientBalance,
    InvalidTransition,
    OverlappingRequest,
    RequestNotFound,
)
from rotadesk.models.enums import LeaveStatus, RequestKind, TransitionAction
from rotadesk.models.leave import LeaveRequest
from rotadesk.schemas.leave import LeaveRequestListResponse, LeaveRequestResponse
from rotadesk.services.audit import record_creation, write_system_comment
from rotadesk.services.concurrency import read_status, transition
from rotadesk.services.directory import display_name
from rotadesk.services.settings import DatabaseSettingsProvider
from rotadesk.services.validation import find_overlap, load_active_leave, validate_leave_request

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from rotadesk.schemas.auth import AuthContext
    from rotadesk.schemas.leave import CreateLeaveRequestPayload, UpdateLeaveRequestPayload
    from rotadesk.services.settings import SettingsProvider

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _build_leave_response(request: LeaveRequest) -> LeaveRequestResponse:
    """Map a leave request model to its response schema."""
    return LeaveRequestResponse(
        id=request.id,
        user_id=request.user_id,
        leave_type=request.leave_type,
        start_date=request.start_date,
        end_date=request.end_date,
        requested_days=request.requested_days,
        status=LeaveStatus(request.status),
        tl_approved_at=request.tl_approved_at,
        wfm_approved_at=request.wfm_approved_at,
        notes=request.notes,
        created_at=request.created_at,
    )


async def _get_leave_or_404(session: AsyncSession, request_id: uuid.UUID) -> LeaveRequest:
    request = await session.get(LeaveRequest, request_id)
    if request is None:
        raise RequestNotFound(RequestKind.LEAVE, request_id)
    return request


def _check_notes(notes: str | None) -> None:
    limit = get_settings().notes_max_length
    if notes is not None and len(notes) > limit:
        raise AppError(f"Notes must be at most {limit} characters", status_code=400)


async def _run_transition(
    session: AsyncSession,
    auth: AuthContext,
    request_id: uuid.UUID,
    expected_status: str,
    action: TransitionAction,
    settings_provider: SettingsProvider | None,
) -> LeaveRequestResponse:
    provider = settings_provider or DatabaseSettingsProvider(session)
    outcome = await transition(session, RequestKind.LEAVE, request_id, expected_status, action, auth, provider)
    return _build_leave_response(outcome.request)  # type: ignore[arg-type]


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


async def create_leave_request(
    session: AsyncSession,
    auth: AuthContext,
    payload: CreateLeaveRequestPayload,
) -> LeaveRequestResponse:
    """File a leave request.

    Flow:
    1. Resolve the requesting user (approvers may file on behalf of others)
    2. Validate range, leave type, balance and overlap
    3. On insufficient balance, store the request as ``denied`` when
       auto-denial is enabled; otherwise reject it outright
    4. Insert the request and its creation note
    5. Commit
    """
    user_id = payload.user_id or auth.user_id
    if user_id != auth.user_id and not auth.is_approver:
        raise Forbidden("Only team leads and WFM can file leave for another user")
    _check_notes(payload.notes)

    denial_reason: str | None = None
    try:
        check = await validate_leave_request(session, user_id, payload.leave_type, payload.start_date, payload.end_date)
        status = LeaveStatus.PENDING_TL
        requested_days = check.requested_days
    except InsufficientBalance as exc:
        if not get_settings().auto_deny_on_insufficient_balance:
            raise
        status = LeaveStatus.DENIED
        requested_days = exc.requested
        denial_reason = f"auto-denied: requested {exc.requested} days, available {exc.available} days"

    leave = LeaveRequest(
        user_id=user_id,
        leave_type=payload.leave_type,
        start_date=payload.start_date,
        end_date=payload.end_date,
        requested_days=requested_days,
        status=status.value,
        notes=payload.notes,
    )
    session.add(leave)
    await session.flush()

    await record_creation(
        session,
        kind=RequestKind.LEAVE,
        request_id=leave.id,
        actor_id=auth.user_id,
        status=leave.status,
        reason=denial_reason,
    )

    await session.commit()
    await session.refresh(leave)
    logger.info(
        "Leave request %s filed for user %s (%s, %d days): %s",
        leave.id,
        user_id,
        leave.leave_type,
        requested_days,
        leave.status,
    )
    return _build_leave_response(leave)


async def update_leave_request(
    session: AsyncSession,
    auth: AuthContext,
    request_id: uuid.UUID,
    payload: UpdateLeaveRequestPayload,
) -> LeaveRequestResponse:
    """Edit a request that is still awaiting the team lead.

    The new values are re-validated with the request itself excluded from the
    overlap check, and written with the same compare-and-set guard as a
    status transition.
    """
    leave = await _get_leave_or_404(session, request_id)
    if leave.user_id != auth.user_id:
        raise Forbidden("Only the requester can edit a leave request")
    if payload.expected_status != LeaveStatus.PENDING_TL:
        raise InvalidTransition(
            RequestKind.LEAVE, payload.expected_status, "edit", "only requests pending team lead approval can be edited"
        )

    leave_type = payload.leave_type or leave.leave_type
    start_date = payload.start_date or leave.start_date
    end_date = payload.end_date or leave.end_date
    notes = payload.notes if payload.notes is not None else leave.notes
    _check_notes(notes)

    check = await validate_leave_request(
        session, leave.user_id, leave_type, start_date, end_date, exclude_request_id=leave.id
    )

    result = await session.execute(
        update(LeaveRequest)
        .where(col(LeaveRequest.id) == request_id, col(LeaveRequest.status) == LeaveStatus.PENDING_TL.value)
        .values(
            leave_type=leave_type,
            start_date=start_date,
            end_date=end_date,
            requested_days=check.requested_days,
            notes=notes,
        )
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:  # type: ignore[attr-defined]
        await session.rollback()
        actual = await read_status(session, RequestKind.LEAVE, request_id)
        if actual is None:
            raise RequestNotFound(RequestKind.LEAVE, request_id)
        raise ConcurrencyConflict(RequestKind.LEAVE, request_id, LeaveStatus.PENDING_TL, actual)

    await write_system_comment(
        session,
        kind=RequestKind.LEAVE,
        request_id=request_id,
        actor_id=auth.user_id,
        content=(
            f"{await display_name(auth.user_id)} edited the request: {leave_type}, "
            f"{start_date.isoformat()} to {end_date.isoformat()} ({check.requested_days} days)"
        ),
    )
    await session.commit()

    refreshed = await session.get(LeaveRequest, request_id, populate_existing=True)
    if refreshed is None:
        raise RequestNotFound(RequestKind.LEAVE, request_id)
    return _build_leave_response(refreshed)


async def approve_leave_request(
    session: AsyncSession,
    auth: AuthContext,
    request_id: uuid.UUID,
    expected_status: str,
    settings_provider: SettingsProvider | None = None,
) -> LeaveRequestResponse:
    """TL approval moves to pending_wfm (or approved with auto-approve); WFM approval is final."""
    return await _run_transition(
        session, auth, request_id, expected_status, TransitionAction.APPROVE, settings_provider
    )


async def reject_leave_request(
    session: AsyncSession,
    auth: AuthContext,
    request_id: uuid.UUID,
    expected_status: str,
    settings_provider: SettingsProvider | None = None,
) -> LeaveRequestResponse:
    return await _run_transition(session, auth, request_id, expected_status, TransitionAction.REJECT, settings_provider)


async def cancel_leave_request(
    session: AsyncSession,
    auth: AuthContext,
    request_id: uuid.UUID,
    expected_status: str,
    settings_provider: SettingsProvider | None = None,
) -> LeaveRequestResponse:
    return await _run_transition(session, auth, request_id, expected_status, TransitionAction.CANCEL, settings_provider)


async def ask_exception(
    session: AsyncSession,
    auth: AuthContext,
    request_id: uuid.UUID,
    expected_status: str,
    settings_provider: SettingsProvider | None = None,
) -> LeaveRequestResponse:
    """Send an auto-denied request back to the team lead.

    The balance is not re-checked (that is the point of an exception), but the
    range must still not collide with another active request of the user.
    """
    leave = await _get_leave_or_404(session, request_id)
    existing = await load_active_leave(session, leave.user_id, leave.start_date, leave.end_date)
    conflict = find_overlap(existing, leave.start_date, leave.end_date, exclude_request_id=leave.id)
    if conflict is not None:
        raise OverlappingRequest(conflict.id, conflict.status, conflict.start_date, conflict.end_date)

    return await _run_transition(
        session, auth, request_id, expected_status, TransitionAction.ASK_EXCEPTION, settings_provider
    )


async def get_leave_request(
    session: AsyncSession,
    auth: AuthContext,
    request_id: uuid.UUID,
) -> LeaveRequestResponse:
    """Get a single leave request. Agents may only read their own."""
    leave = await _get_leave_or_404(session, request_id)
    if not auth.is_approver and leave.user_id != auth.user_id:
        raise Forbidden("Not authorized to view this leave request")
    return _build_leave_response(leave)


async def list_leave_requests(
    session: AsyncSession,
    auth: AuthContext,
    status_filter: str | None = None,
    user_id: uuid.UUID | None = None,
    offset: int = 0,
    limit: int = 50,
) -> LeaveRequestListResponse:
    """List leave requests, newest first. Agents only see their own."""
    if not auth.is_approver:
        user_id = auth.user_id

    base_filters = []
    if status_filter is not None:
        base_filters.append(col(LeaveRequest.status) == status_filter)
    if user_id is not None:
        base_filters.append(col(LeaveRequest.user_id) == user_id)

    count_result = await session.execute(select(func.count()).select_from(LeaveRequest).where(*base_filters))
    total = count_result.scalar_one()

    result = await session.execute(
        select(LeaveRequest)
        .where(*base_filters)
        .order_by(col(LeaveRequest.created_at).desc())
        .offset(offset)
        .limit(limit)
    )
    return LeaveRequestListResponse(
        items=[_build_leave_response(r) for r in result.scalars().all()],
        total=total,
    )
