# ruff: noqa: TC003
from __future__ import annotations

import logging
import uuid
from datetime import date
from typing import TYPE_CHECKING

from sqlalchemy import func, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import col

from rotadesk.exceptions import AppError, Forbidden, InvalidTransition, NotFound, RequestNotFound
from rotadesk.models.enums import RequestKind, ShiftType, SwapStatus, TransitionAction, UserRole
from rotadesk.models.shift import Shift
from rotadesk.models.swap import SwapRequest
from rotadesk.schemas.swap import (
    ShiftChange,
    SwapExecutionResponse,
    SwapRequestListResponse,
    SwapRequestResponse,
)
from rotadesk.services.audit import record_creation, write_system_comment
from rotadesk.services.concurrency import transition
from rotadesk.services.directory import display_name
from rotadesk.services.settings import DatabaseSettingsProvider
from rotadesk.services.swap_execution import SwapExecutionResult, execute_swap

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from rotadesk.schemas.auth import AuthContext
    from rotadesk.schemas.swap import CreateSwapRequestPayload
    from rotadesk.services.settings import SettingsProvider

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _optional_type(value: str | None) -> ShiftType | None:
    return ShiftType(value) if value is not None else None


def _build_swap_response(swap: SwapRequest) -> SwapRequestResponse:
    """Map a swap request model to its response schema."""
    return SwapRequestResponse(
        id=swap.id,
        requester_id=swap.requester_id,
        target_user_id=swap.target_user_id,
        requester_shift_id=swap.requester_shift_id,
        target_shift_id=swap.target_shift_id,
        status=SwapStatus(swap.status),
        requester_original_date=swap.requester_original_date,
        requester_original_shift_type=ShiftType(swap.requester_original_shift_type),
        target_original_date=swap.target_original_date,
        target_original_shift_type=ShiftType(swap.target_original_shift_type),
        requester_original_shift_type_on_target_date=_optional_type(
            swap.requester_original_shift_type_on_target_date
        ),
        target_original_shift_type_on_requester_date=_optional_type(
            swap.target_original_shift_type_on_requester_date
        ),
        tl_approved_at=swap.tl_approved_at,
        wfm_approved_at=swap.wfm_approved_at,
        executed_at=swap.executed_at,
        created_at=swap.created_at,
    )


def _build_execution_response(result: SwapExecutionResult) -> SwapExecutionResponse:
    return SwapExecutionResponse(
        swap_id=result.swap_id,
        applied=result.applied,
        updated_shifts=[
            ShiftChange(
                shift_id=w.shift_id,
                user_id=w.user_id,
                shift_date=w.shift_date,
                old_shift_type=ShiftType(w.old_shift_type),
                new_shift_type=ShiftType(w.new_shift_type),
            )
            for w in result.writes
        ],
    )


async def _get_swap_or_404(session: AsyncSession, swap_id: uuid.UUID) -> SwapRequest:
    swap = await session.get(SwapRequest, swap_id)
    if swap is None:
        raise RequestNotFound(RequestKind.SWAP, swap_id)
    return swap


async def _get_shift_or_404(session: AsyncSession, shift_id: uuid.UUID) -> Shift:
    shift = await session.get(Shift, shift_id)
    if shift is None:
        raise NotFound(f"Shift {shift_id} not found")
    return shift


async def _shift_type_on(session: AsyncSession, user_id: uuid.UUID, on_date: date) -> str | None:
    result = await session.execute(
        select(col(Shift.shift_type)).where(col(Shift.user_id) == user_id, col(Shift.date) == on_date)
    )
    return result.scalar_one_or_none()


async def _run_transition(
    session: AsyncSession,
    auth: AuthContext,
    swap_id: uuid.UUID,
    expected_status: str,
    action: TransitionAction,
    settings_provider: SettingsProvider | None,
) -> SwapRequestResponse:
    provider = settings_provider or DatabaseSettingsProvider(session)
    outcome = await transition(session, RequestKind.SWAP, swap_id, expected_status, action, auth, provider)
    return _build_swap_response(outcome.request)  # type: ignore[arg-type]


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


async def create_swap_request(
    session: AsyncSession,
    auth: AuthContext,
    payload: CreateSwapRequestPayload,
) -> SwapRequestResponse:
    """Propose a swap of the acting user's shift with the target's shift.

    Flow:
    1. Verify both shifts exist and belong to requester and target
    2. Snapshot the original shift types on both dates
    3. Insert the request (pending_acceptance) and its creation note
    4. Commit
    """
    if payload.target_user_id == auth.user_id:
        raise AppError("Cannot swap shifts with yourself", status_code=400)

    requester_shift = await _get_shift_or_404(session, payload.requester_shift_id)
    target_shift = await _get_shift_or_404(session, payload.target_shift_id)
    if requester_shift.user_id != auth.user_id:
        raise Forbidden("The requester shift does not belong to the acting user")
    if target_shift.user_id != payload.target_user_id:
        raise AppError("The target shift does not belong to the target user", status_code=400)

    requester_on_target_date: str | None = None
    target_on_requester_date: str | None = None
    if requester_shift.date != target_shift.date:
        requester_on_target_date = await _shift_type_on(session, auth.user_id, target_shift.date)
        target_on_requester_date = await _shift_type_on(session, payload.target_user_id, requester_shift.date)

    swap = SwapRequest(
        requester_id=auth.user_id,
        target_user_id=payload.target_user_id,
        requester_shift_id=requester_shift.id,
        target_shift_id=target_shift.id,
        status=SwapStatus.PENDING_ACCEPTANCE.value,
        requester_original_date=requester_shift.date,
        requester_original_shift_type=requester_shift.shift_type,
        target_original_date=target_shift.date,
        target_original_shift_type=target_shift.shift_type,
        requester_original_shift_type_on_target_date=requester_on_target_date,
        target_original_shift_type_on_requester_date=target_on_requester_date,
    )
    session.add(swap)
    await session.flush()

    await record_creation(
        session,
        kind=RequestKind.SWAP,
        request_id=swap.id,
        actor_id=auth.user_id,
        status=swap.status,
    )

    await session.commit()
    await session.refresh(swap)
    logger.info(
        "Swap request %s filed: %s (%s %s) with %s (%s %s)",
        swap.id,
        swap.requester_id,
        swap.requester_original_date.isoformat(),
        swap.requester_original_shift_type,
        swap.target_user_id,
        swap.target_original_date.isoformat(),
        swap.target_original_shift_type,
    )
    return _build_swap_response(swap)


async def accept_swap_request(
    session: AsyncSession,
    auth: AuthContext,
    swap_id: uuid.UUID,
    expected_status: str,
    settings_provider: SettingsProvider | None = None,
) -> SwapRequestResponse:
    return await _run_transition(session, auth, swap_id, expected_status, TransitionAction.ACCEPT, settings_provider)


async def decline_swap_request(
    session: AsyncSession,
    auth: AuthContext,
    swap_id: uuid.UUID,
    expected_status: str,
    settings_provider: SettingsProvider | None = None,
) -> SwapRequestResponse:
    return await _run_transition(session, auth, swap_id, expected_status, TransitionAction.DECLINE, settings_provider)


async def approve_swap_request(
    session: AsyncSession,
    auth: AuthContext,
    swap_id: uuid.UUID,
    expected_status: str,
    settings_provider: SettingsProvider | None = None,
) -> SwapRequestResponse:
    """Approve a swap. The final approval exchanges the shifts atomically."""
    return await _run_transition(session, auth, swap_id, expected_status, TransitionAction.APPROVE, settings_provider)


async def reject_swap_request(
    session: AsyncSession,
    auth: AuthContext,
    swap_id: uuid.UUID,
    expected_status: str,
    settings_provider: SettingsProvider | None = None,
) -> SwapRequestResponse:
    return await _run_transition(session, auth, swap_id, expected_status, TransitionAction.REJECT, settings_provider)


async def cancel_swap_request(
    session: AsyncSession,
    auth: AuthContext,
    swap_id: uuid.UUID,
    expected_status: str,
    settings_provider: SettingsProvider | None = None,
) -> SwapRequestResponse:
    return await _run_transition(session, auth, swap_id, expected_status, TransitionAction.CANCEL, settings_provider)


async def reexecute_swap(
    session: AsyncSession,
    auth: AuthContext,
    swap_id: uuid.UUID,
) -> SwapExecutionResponse:
    """Run the exchange again for an approved swap.

    Safe to repeat: when the shifts already hold their exchanged values
    nothing is written.
    """
    if auth.role != UserRole.WFM:
        raise Forbidden("Only WFM can re-execute a swap")

    swap = await _get_swap_or_404(session, swap_id)
    if swap.status != SwapStatus.APPROVED.value:
        raise InvalidTransition(RequestKind.SWAP, swap.status, "execute", "only approved swaps can be executed")

    try:
        result = await execute_swap(session, swap)
        if result.applied:
            await write_system_comment(
                session,
                kind=RequestKind.SWAP,
                request_id=swap.id,
                actor_id=auth.user_id,
                content=f"{await display_name(auth.user_id)} re-executed the swap",
            )
        await session.commit()
    except (AppError, SQLAlchemyError):
        await session.rollback()
        raise
    return _build_execution_response(result)


async def get_swap_request(
    session: AsyncSession,
    auth: AuthContext,
    swap_id: uuid.UUID,
) -> SwapRequestResponse:
    """Get a single swap request. Agents may only read swaps they are party to."""
    swap = await _get_swap_or_404(session, swap_id)
    if not auth.is_approver and auth.user_id not in (swap.requester_id, swap.target_user_id):
        raise Forbidden("Not authorized to view this swap request")
    return _build_swap_response(swap)


async def list_swap_requests(
    session: AsyncSession,
    auth: AuthContext,
    status_filter: str | None = None,
    user_id: uuid.UUID | None = None,
    offset: int = 0,
    limit: int = 50,
) -> SwapRequestListResponse:
    """List swap requests, newest first.

    ``user_id`` matches either side of the swap. Agents only see swaps they
    are party to.
    """
    if not auth.is_approver:
        user_id = auth.user_id

    base_filters = []
    if status_filter is not None:
        base_filters.append(col(SwapRequest.status) == status_filter)
    if user_id is not None:
        base_filters.append(or_(col(SwapRequest.requester_id) == user_id, col(SwapRequest.target_user_id) == user_id))

    count_result = await session.execute(select(func.count()).select_from(SwapRequest).where(*base_filters))
    total = count_result.scalar_one()

    result = await session.execute(
        select(SwapRequest)
        .where(*base_filters)
        .order_by(col(SwapRequest.created_at).desc())
        .offset(offset)
        .limit(limit)
    )
    return SwapRequestListResponse(
        items=[_build_swap_response(s) for s in result.scalars().all()],
        total=total,
    )
