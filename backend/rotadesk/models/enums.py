from __future__ import annotations

import enum


class UserRole(enum.StrEnum):
    """Role of the acting user."""

    AGENT = "agent"
    TL = "tl"
    WFM = "wfm"


class ShiftType(enum.StrEnum):
    """Shift assignment for one user on one date."""

    AM = "AM"
    PM = "PM"
    BET = "BET"
    OFF = "OFF"


class RequestKind(enum.StrEnum):
    """The two request types sharing the approval state machine."""

    LEAVE = "leave"
    SWAP = "swap"


class LeaveStatus(enum.StrEnum):
    """State machine for leave requests."""

    PENDING_TL = "pending_tl"
    PENDING_WFM = "pending_wfm"
    APPROVED = "approved"
    REJECTED = "rejected"
    DENIED = "denied"


class SwapStatus(enum.StrEnum):
    """State machine for shift-swap requests."""

    PENDING_ACCEPTANCE = "pending_acceptance"
    PENDING_TL = "pending_tl"
    PENDING_WFM = "pending_wfm"
    APPROVED = "approved"
    REJECTED = "rejected"


class TransitionAction(enum.StrEnum):
    """Actions a caller can apply to an existing request."""

    ACCEPT = "accept"
    DECLINE = "decline"
    APPROVE = "approve"
    REJECT = "reject"
    CANCEL = "cancel"
    ASK_EXCEPTION = "ask_exception"


class ActorCapacity(enum.StrEnum):
    """Capacity in which an actor may invoke a transition."""

    WFM = "wfm"
    TL = "tl"
    TARGET = "target"
    REQUESTER = "requester"


# Statuses that occupy the requester's calendar for overlap checks.
ACTIVE_LEAVE_STATUSES = frozenset({LeaveStatus.APPROVED, LeaveStatus.PENDING_TL, LeaveStatus.PENDING_WFM})

TERMINAL_STATUSES = frozenset({"approved", "rejected"})
