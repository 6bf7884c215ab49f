# ruff: noqa: TC003
from __future__ import annotations

import uuid
from typing import TYPE_CHECKING

from sqlalchemy import select
from sqlmodel import col

from rotadesk.exceptions import Forbidden, NotFound, RequestNotFound, SystemCommentProtected
from rotadesk.models.comment import RequestComment
from rotadesk.models.enums import RequestKind
from rotadesk.models.leave import LeaveRequest
from rotadesk.models.swap import SwapRequest
from rotadesk.schemas.comment import CommentListResponse, CommentResponse

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from rotadesk.schemas.auth import AuthContext
    from rotadesk.schemas.comment import CreateCommentPayload, UpdateCommentPayload


def _build_comment_response(comment: RequestComment) -> CommentResponse:
    return CommentResponse(
        id=comment.id,
        request_id=comment.request_id,
        request_type=RequestKind(comment.request_type),
        user_id=comment.user_id,
        content=comment.content,
        is_system=comment.is_system,
        created_at=comment.created_at,
    )


async def _ensure_request_exists(session: AsyncSession, kind: RequestKind, request_id: uuid.UUID) -> None:
    model = LeaveRequest if kind == RequestKind.LEAVE else SwapRequest
    if await session.get(model, request_id) is None:
        raise RequestNotFound(kind, request_id)


async def _get_editable_comment(
    session: AsyncSession,
    auth: AuthContext,
    comment_id: uuid.UUID,
    operation: str,
) -> RequestComment:
    """Fetch a comment the acting user may change. System notes are immutable."""
    comment = await session.get(RequestComment, comment_id)
    if comment is None:
        raise NotFound(f"Comment {comment_id} not found")
    if comment.is_system:
        raise SystemCommentProtected(operation)
    if comment.user_id != auth.user_id:
        raise Forbidden(f"Only the author can {operation} this comment")
    return comment


async def list_comments(session: AsyncSession, kind: RequestKind, request_id: uuid.UUID) -> CommentListResponse:
    """All comments on a request, oldest first, system notes included."""
    await _ensure_request_exists(session, kind, request_id)
    result = await session.execute(
        select(RequestComment)
        .where(col(RequestComment.request_type) == kind.value, col(RequestComment.request_id) == request_id)
        .order_by(col(RequestComment.created_at), col(RequestComment.id))
    )
    items = [_build_comment_response(c) for c in result.scalars().all()]
    return CommentListResponse(items=items, total=len(items))


async def add_comment(
    session: AsyncSession,
    auth: AuthContext,
    kind: RequestKind,
    request_id: uuid.UUID,
    payload: CreateCommentPayload,
) -> CommentResponse:
    await _ensure_request_exists(session, kind, request_id)
    comment = RequestComment(
        request_id=request_id,
        request_type=kind.value,
        user_id=auth.user_id,
        content=payload.content,
        is_system=False,
    )
    session.add(comment)
    await session.commit()
    await session.refresh(comment)
    return _build_comment_response(comment)


async def update_comment(
    session: AsyncSession,
    auth: AuthContext,
    comment_id: uuid.UUID,
    payload: UpdateCommentPayload,
) -> CommentResponse:
    comment = await _get_editable_comment(session, auth, comment_id, "edit")
    comment.content = payload.content
    await session.commit()
    await session.refresh(comment)
    return _build_comment_response(comment)


async def delete_comment(session: AsyncSession, auth: AuthContext, comment_id: uuid.UUID) -> None:
    comment = await _get_editable_comment(session, auth, comment_id, "delete")
    await session.delete(comment)
    await session.commit()
