# ruff: noqa: TC001, TC003
from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel, Field

from rotadesk.models.enums import RequestKind


class CreateCommentPayload(BaseModel):
    content: str = Field(min_length=1, max_length=2000)


class UpdateCommentPayload(BaseModel):
    content: str = Field(min_length=1, max_length=2000)


class CommentResponse(BaseModel):
    id: uuid.UUID
    request_id: uuid.UUID
    request_type: RequestKind
    user_id: uuid.UUID
    content: str
    is_system: bool
    created_at: datetime


class CommentListResponse(BaseModel):
    items: list[CommentResponse]
    total: int
