# ruff: noqa: TC003
from __future__ import annotations

import uuid

from pydantic import BaseModel

from rotadesk.models.enums import UserRole


class AuthContext(BaseModel):
    """Dev auth context extracted from request headers."""

    user_id: uuid.UUID
    role: UserRole = UserRole.AGENT

    @property
    def is_approver(self) -> bool:
        return self.role in (UserRole.TL, UserRole.WFM)
