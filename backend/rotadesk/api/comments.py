# ruff: noqa: TC001, TC003
from __future__ import annotations

import uuid

from fastapi import APIRouter, status

from rotadesk.api.deps import AuthDep
from rotadesk.db import SessionDep
from rotadesk.models.enums import RequestKind
from rotadesk.schemas.comment import (
    CommentListResponse,
    CommentResponse,
    CreateCommentPayload,
    UpdateCommentPayload,
)
from rotadesk.services import comment as comment_service

leave_comments_router = APIRouter(prefix="/leave-requests/{request_id}/comments", tags=["comments"])
swap_comments_router = APIRouter(prefix="/swap-requests/{request_id}/comments", tags=["comments"])
comments_router = APIRouter(prefix="/comments", tags=["comments"])


@leave_comments_router.get("", response_model=CommentListResponse)
async def list_leave_comments(request_id: uuid.UUID, session: SessionDep, auth: AuthDep) -> CommentListResponse:
    return await comment_service.list_comments(session, RequestKind.LEAVE, request_id)


@leave_comments_router.post("", response_model=CommentResponse, status_code=status.HTTP_201_CREATED)
async def add_leave_comment(
    request_id: uuid.UUID,
    payload: CreateCommentPayload,
    session: SessionDep,
    auth: AuthDep,
) -> CommentResponse:
    return await comment_service.add_comment(session, auth, RequestKind.LEAVE, request_id, payload)


@swap_comments_router.get("", response_model=CommentListResponse)
async def list_swap_comments(request_id: uuid.UUID, session: SessionDep, auth: AuthDep) -> CommentListResponse:
    return await comment_service.list_comments(session, RequestKind.SWAP, request_id)


@swap_comments_router.post("", response_model=CommentResponse, status_code=status.HTTP_201_CREATED)
async def add_swap_comment(
    request_id: uuid.UUID,
    payload: CreateCommentPayload,
    session: SessionDep,
    auth: AuthDep,
) -> CommentResponse:
    return await comment_service.add_comment(session, auth, RequestKind.SWAP, request_id, payload)


@comments_router.patch("/{comment_id}", response_model=CommentResponse)
async def update_comment(
    comment_id: uuid.UUID,
    payload: UpdateCommentPayload,
    session: SessionDep,
    auth: AuthDep,
) -> CommentResponse:
    """Edit one of the acting user's own comments. System notes are immutable."""
    return await comment_service.update_comment(session, auth, comment_id, payload)


@comments_router.delete(
    "/{comment_id}",
    status_code=204,
)
async def delete_comment(comment_id: uuid.UUID, session: SessionDep, auth: AuthDep) -> None:
    """Delete one of the acting user's own comments."""
    await comment_service.delete_comment(session, auth, comment_id)
