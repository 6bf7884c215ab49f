"""Optimistic concurrency for request status changes.

Every status change is a single conditional UPDATE guarded by the status the
caller last saw. Exactly one of any number of concurrent callers holding the
same expected status succeeds; the rest receive ConcurrencyConflict carrying
the status actually found.
"""

# ruff: noqa: TC003
from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import col

from rotadesk.config import get_settings
from rotadesk.exceptions import AppError, ConcurrencyConflict, RequestNotFound
from rotadesk.models.base import now_utc
from rotadesk.models.enums import RequestKind, TransitionAction
from rotadesk.models.leave import LeaveRequest
from rotadesk.models.swap import SwapRequest
from rotadesk.services.audit import record_transition
from rotadesk.services.balance import deduct_for_approved_leave
from rotadesk.services.swap_execution import SwapExecutionResult, execute_swap
from rotadesk.services.workflow import Parties, ResolvedTransition, resolve_transition

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from rotadesk.schemas.auth import AuthContext
    from rotadesk.schemas.settings import WorkflowSettings
    from rotadesk.services.settings import SettingsProvider

logger = logging.getLogger(__name__)

_MODELS: dict[RequestKind, type[LeaveRequest] | type[SwapRequest]] = {
    RequestKind.LEAVE: LeaveRequest,
    RequestKind.SWAP: SwapRequest,
}


@dataclass
class TransitionOutcome:
    """The updated row plus what happened to it."""

    request: LeaveRequest | SwapRequest
    transition: ResolvedTransition
    execution: SwapExecutionResult | None = None


# ---------------------------------------------------------------------------
# Primitives
# ---------------------------------------------------------------------------


async def load_parties(session: AsyncSession, kind: RequestKind, request_id: uuid.UUID) -> Parties:
    """Read the requester (and swap target) of a request."""
    if kind == RequestKind.LEAVE:
        result = await session.execute(select(col(LeaveRequest.user_id)).where(col(LeaveRequest.id) == request_id))
        row = result.one_or_none()
        if row is None:
            raise RequestNotFound(kind, request_id)
        return Parties(requester_id=row[0])

    result = await session.execute(
        select(col(SwapRequest.requester_id), col(SwapRequest.target_user_id)).where(
            col(SwapRequest.id) == request_id
        )
    )
    row = result.one_or_none()
    if row is None:
        raise RequestNotFound(kind, request_id)
    return Parties(requester_id=row[0], target_id=row[1])


async def read_status(session: AsyncSession, kind: RequestKind, request_id: uuid.UUID) -> str | None:
    model = _MODELS[kind]
    result = await session.execute(select(col(model.status)).where(col(model.id) == request_id))
    return result.scalar_one_or_none()


async def compare_and_set(
    session: AsyncSession,
    kind: RequestKind,
    request_id: uuid.UUID,
    expected_status: str,
    values: dict[str, Any],
) -> bool:
    """UPDATE ... WHERE id = :id AND status = :expected. True iff one row changed."""
    model = _MODELS[kind]
    result = await session.execute(
        update(model)
        .where(col(model.id) == request_id, col(model.status) == expected_status)
        .values(**values)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1  # type: ignore[attr-defined]


async def apply_transition(
    session: AsyncSession,
    kind: RequestKind,
    request_id: uuid.UUID,
    expected_status: str,
    action: TransitionAction,
    auth: AuthContext,
    settings: WorkflowSettings,
) -> TransitionOutcome:
    """Resolve and conditionally write one transition. Does not commit.

    Raises:
        RequestNotFound: no such request.
        InvalidTransition: ``action`` is not legal from ``expected_status``.
        ConcurrencyConflict: the stored status is no longer ``expected_status``.
    """
    parties = await load_parties(session, kind, request_id)
    transition = resolve_transition(
        kind,
        expected_status,
        action,
        user_id=auth.user_id,
        role=auth.role,
        parties=parties,
        settings=settings,
    )

    values: dict[str, Any] = {"status": transition.to_status, **transition.timestamp_updates(now_utc())}
    if not await compare_and_set(session, kind, request_id, expected_status, values):
        await session.rollback()
        actual = await read_status(session, kind, request_id)
        if actual is None:
            raise RequestNotFound(kind, request_id)
        logger.warning(
            "Concurrency conflict on %s request %s: expected %s, found %s (action %s by %s)",
            kind.value,
            request_id,
            expected_status,
            actual,
            action.value,
            auth.user_id,
        )
        raise ConcurrencyConflict(kind, request_id, expected_status, actual)

    model = _MODELS[kind]
    request = await session.get(model, request_id, populate_existing=True)
    if request is None:
        raise RequestNotFound(kind, request_id)
    return TransitionOutcome(request=request, transition=transition)


# ---------------------------------------------------------------------------
# Orchestration
# ---------------------------------------------------------------------------


async def transition(
    session: AsyncSession,
    kind: RequestKind,
    request_id: uuid.UUID,
    expected_status: str,
    action: TransitionAction,
    auth: AuthContext,
    settings_provider: SettingsProvider,
) -> TransitionOutcome:
    """Apply ``action`` and every side effect it implies, then commit.

    A final approval of a swap executes the shift exchange; a final approval
    of a leave request consumes the balance. Both happen in the same
    transaction as the status change, so a failure leaves the request in its
    previous status.
    """
    settings = await settings_provider.get_workflow_settings()
    try:
        outcome = await apply_transition(session, kind, request_id, expected_status, action, auth, settings)
        if outcome.transition.is_final_approval:
            if isinstance(outcome.request, SwapRequest):
                outcome.execution = await execute_swap(session, outcome.request)
            elif get_settings().deduct_balance_on_approval:
                await deduct_for_approved_leave(session, outcome.request, auth.user_id)
        await record_transition(
            session,
            request_id=request_id,
            actor_id=auth.user_id,
            transition=outcome.transition,
        )
        await session.commit()
    except (AppError, SQLAlchemyError):
        await session.rollback()
        raise

    await session.refresh(outcome.request)
    logger.info(
        "%s request %s: %s -> %s by %s (%s)",
        kind.value.capitalize(),
        request_id,
        outcome.transition.from_status,
        outcome.transition.to_status,
        auth.user_id,
        outcome.transition.capacity.value,
    )
    return outcome
