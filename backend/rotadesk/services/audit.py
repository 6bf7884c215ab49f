from __future__ import annotations

import logging
import uuid
from typing import TYPE_CHECKING

from sqlalchemy.exc import SQLAlchemyError

from rotadesk.models.comment import RequestComment
from rotadesk.models.enums import TransitionAction
from rotadesk.services.directory import display_name
from rotadesk.services.workflow import status_label

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from rotadesk.models.enums import RequestKind
    from rotadesk.services.workflow import ResolvedTransition

logger = logging.getLogger(__name__)

_VERBS = {
    TransitionAction.ACCEPT: "accepted the swap request",
    TransitionAction.DECLINE: "declined the swap request",
    TransitionAction.APPROVE: "approved",
    TransitionAction.REJECT: "rejected",
    TransitionAction.CANCEL: "cancelled the request",
    TransitionAction.ASK_EXCEPTION: "asked for an exception",
}


def describe_transition(actor_name: str, transition: ResolvedTransition) -> str:
    """Human-readable note: who did what, and the old and new status."""
    verb = _VERBS[transition.action]
    if transition.auto_approved:
        verb = "approved (auto-approved by system)"
    return (
        f"{actor_name} {verb}. Status changed from "
        f"{status_label(transition.from_status)} to {status_label(transition.to_status)}"
    )


async def write_system_comment(
    session: AsyncSession,
    *,
    kind: RequestKind,
    request_id: uuid.UUID,
    actor_id: uuid.UUID,
    content: str,
) -> RequestComment | None:
    """Append an immutable system note inside a SAVEPOINT.

    A failure is logged and swallowed: the surrounding transaction, and the
    status change it carries, proceed without the note.
    """
    entry = RequestComment(
        request_id=request_id,
        request_type=kind.value,
        user_id=actor_id,
        content=content,
        is_system=True,
    )
    try:
        async with session.begin_nested():
            session.add(entry)
    except SQLAlchemyError:
        logger.exception("Failed to record system comment for %s request %s", kind.value, request_id)
        return None
    return entry


async def record_transition(
    session: AsyncSession,
    *,
    request_id: uuid.UUID,
    actor_id: uuid.UUID,
    transition: ResolvedTransition,
) -> RequestComment | None:
    """Write the audit note for one accepted transition."""
    content = describe_transition(await display_name(actor_id), transition)
    return await write_system_comment(
        session,
        kind=transition.kind,
        request_id=request_id,
        actor_id=actor_id,
        content=content,
    )


async def record_creation(
    session: AsyncSession,
    *,
    kind: RequestKind,
    request_id: uuid.UUID,
    actor_id: uuid.UUID,
    status: str,
    reason: str | None = None,
) -> RequestComment | None:
    """Write the audit note for a newly filed request."""
    content = f"{await display_name(actor_id)} submitted the request. Status: {status_label(status)}"
    if reason:
        content = f"{content} ({reason})"
    return await write_system_comment(
        session,
        kind=kind,
        request_id=request_id,
        actor_id=actor_id,
        content=content,
    )
