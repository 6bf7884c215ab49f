"""Shared approval state machine for leave and swap requests.

The transition table is plain data keyed by
``(kind, from_status, action, capacity)``. ``resolve_transition`` is the one
evaluator for both request kinds; it performs no I/O.
"""

# ruff: noqa: TC003
from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime

from rotadesk.exceptions import InvalidTransition
from rotadesk.models.enums import (
    TERMINAL_STATUSES,
    ActorCapacity,
    LeaveStatus,
    RequestKind,
    SwapStatus,
    TransitionAction,
    UserRole,
)
from rotadesk.schemas.settings import WorkflowSettings

_L = RequestKind.LEAVE
_S = RequestKind.SWAP
_A = TransitionAction
_C = ActorCapacity

TRANSITIONS: dict[tuple[RequestKind, str, TransitionAction, ActorCapacity], str] = {
    # Leave
    (_L, LeaveStatus.PENDING_TL, _A.APPROVE, _C.TL): LeaveStatus.PENDING_WFM,
    (_L, LeaveStatus.PENDING_TL, _A.APPROVE, _C.WFM): LeaveStatus.APPROVED,
    (_L, LeaveStatus.PENDING_WFM, _A.APPROVE, _C.WFM): LeaveStatus.APPROVED,
    (_L, LeaveStatus.PENDING_TL, _A.REJECT, _C.TL): LeaveStatus.REJECTED,
    (_L, LeaveStatus.PENDING_TL, _A.REJECT, _C.WFM): LeaveStatus.REJECTED,
    (_L, LeaveStatus.PENDING_WFM, _A.REJECT, _C.TL): LeaveStatus.REJECTED,
    (_L, LeaveStatus.PENDING_WFM, _A.REJECT, _C.WFM): LeaveStatus.REJECTED,
    (_L, LeaveStatus.PENDING_TL, _A.CANCEL, _C.REQUESTER): LeaveStatus.REJECTED,
    (_L, LeaveStatus.PENDING_WFM, _A.CANCEL, _C.REQUESTER): LeaveStatus.REJECTED,
    (_L, LeaveStatus.DENIED, _A.ASK_EXCEPTION, _C.REQUESTER): LeaveStatus.PENDING_TL,
    # Swap
    (_S, SwapStatus.PENDING_ACCEPTANCE, _A.ACCEPT, _C.TARGET): SwapStatus.PENDING_TL,
    (_S, SwapStatus.PENDING_ACCEPTANCE, _A.DECLINE, _C.TARGET): SwapStatus.REJECTED,
    (_S, SwapStatus.PENDING_TL, _A.APPROVE, _C.TL): SwapStatus.PENDING_WFM,
    (_S, SwapStatus.PENDING_TL, _A.APPROVE, _C.WFM): SwapStatus.APPROVED,
    (_S, SwapStatus.PENDING_WFM, _A.APPROVE, _C.WFM): SwapStatus.APPROVED,
    (_S, SwapStatus.PENDING_TL, _A.REJECT, _C.TL): SwapStatus.REJECTED,
    (_S, SwapStatus.PENDING_TL, _A.REJECT, _C.WFM): SwapStatus.REJECTED,
    (_S, SwapStatus.PENDING_WFM, _A.REJECT, _C.TL): SwapStatus.REJECTED,
    (_S, SwapStatus.PENDING_WFM, _A.REJECT, _C.WFM): SwapStatus.REJECTED,
    (_S, SwapStatus.PENDING_ACCEPTANCE, _A.CANCEL, _C.REQUESTER): SwapStatus.REJECTED,
    (_S, SwapStatus.PENDING_TL, _A.CANCEL, _C.REQUESTER): SwapStatus.REJECTED,
    (_S, SwapStatus.PENDING_WFM, _A.CANCEL, _C.REQUESTER): SwapStatus.REJECTED,
}

# Capacities are tried in this order; manager authority wins over ownership.
_CAPACITY_PRIORITY = (_C.WFM, _C.TL, _C.TARGET, _C.REQUESTER)

_STATUS_LABELS = {
    "pending_acceptance": "Pending Acceptance",
    "pending_tl": "Pending TL Approval",
    "pending_wfm": "Pending WFM Approval",
    "approved": "Approved",
    "rejected": "Rejected",
    "denied": "Denied",
}


@dataclass(frozen=True)
class Parties:
    """The immutable people attached to a request."""

    requester_id: uuid.UUID
    target_id: uuid.UUID | None = None


@dataclass(frozen=True)
class ResolvedTransition:
    """The outcome of evaluating one action against the table."""

    kind: RequestKind
    action: TransitionAction
    capacity: ActorCapacity
    from_status: str
    to_status: str
    set_tl_approved: bool
    set_wfm_approved: bool
    auto_approved: bool = False

    @property
    def is_final_approval(self) -> bool:
        return self.to_status == "approved"

    def timestamp_updates(self, now: datetime) -> dict[str, datetime]:
        updates: dict[str, datetime] = {}
        if self.set_tl_approved:
            updates["tl_approved_at"] = now
        if self.set_wfm_approved:
            updates["wfm_approved_at"] = now
        return updates


def status_label(status: str) -> str:
    return _STATUS_LABELS.get(status, status)


def statuses_for(kind: RequestKind) -> tuple[str, ...]:
    enum_type = LeaveStatus if kind == RequestKind.LEAVE else SwapStatus
    return tuple(s.value for s in enum_type)


def actor_capacities(user_id: uuid.UUID, role: UserRole, parties: Parties) -> list[ActorCapacity]:
    """Every capacity the actor holds on this request, highest authority first."""
    held: set[ActorCapacity] = set()
    if role == UserRole.WFM:
        held.add(_C.WFM)
    if role == UserRole.TL:
        held.add(_C.TL)
    if parties.target_id is not None and user_id == parties.target_id:
        held.add(_C.TARGET)
    if user_id == parties.requester_id:
        held.add(_C.REQUESTER)
    return [c for c in _CAPACITY_PRIORITY if c in held]


def allowed_actions(kind: RequestKind, status: str) -> set[TransitionAction]:
    return {action for (k, s, action, _cap) in TRANSITIONS if k == kind and s == status}


def resolve_transition(
    kind: RequestKind,
    current_status: str,
    action: TransitionAction,
    *,
    user_id: uuid.UUID,
    role: UserRole,
    parties: Parties,
    settings: WorkflowSettings,
) -> ResolvedTransition:
    """Compute the next status for ``action`` applied in ``current_status``.

    Raises InvalidTransition when the status is terminal, when the action does
    not exist for the status, when the actor holds no capacity that may take
    it, or when a settings gate (exceptions) is closed.
    """
    if current_status in TERMINAL_STATUSES:
        raise InvalidTransition(kind, current_status, action, "request is already final")
    if current_status not in statuses_for(kind):
        raise InvalidTransition(kind, current_status, action, "unknown status")
    if action not in allowed_actions(kind, current_status):
        raise InvalidTransition(kind, current_status, action)

    for capacity in actor_capacities(user_id, role, parties):
        to_status = TRANSITIONS.get((kind, current_status, action, capacity))
        if to_status is not None:
            break
    else:
        raise InvalidTransition(kind, current_status, action, "actor is not permitted to take this action")

    if action == TransitionAction.ASK_EXCEPTION and not settings.allow_leave_exceptions:
        raise InvalidTransition(kind, current_status, action, "leave exceptions are disabled")

    auto_approved = False
    if action == TransitionAction.APPROVE and capacity == _C.TL and settings.auto_approve_on_tl:
        to_status = "approved"
        auto_approved = True

    is_approval = action == TransitionAction.APPROVE
    return ResolvedTransition(
        kind=kind,
        action=action,
        capacity=capacity,
        from_status=current_status,
        to_status=str(to_status),
        set_tl_approved=is_approval and current_status == "pending_tl",
        set_wfm_approved=is_approval and to_status == "approved",
        auto_approved=auto_approved,
    )
