# ruff: noqa: TC003
from __future__ import annotations

import uuid

import sqlalchemy as sa
from sqlmodel import Field

from rotadesk.models.base import TimestampMixin, UUIDBase


class RequestComment(UUIDBase, TimestampMixin, table=True):
    """A note on a leave or swap request.

    System comments (``is_system``) are written by the audit recorder on every
    status transition and are immutable.
    """

    __tablename__ = "request_comment"
    __table_args__ = (sa.Index("ix_comment_request", "request_type", "request_id"),)

    request_id: uuid.UUID
    request_type: str = Field(max_length=10)
    user_id: uuid.UUID
    content: str = Field(max_length=2000)
    is_system: bool = Field(default=False, sa_column_kwargs={"server_default": sa.false()})
