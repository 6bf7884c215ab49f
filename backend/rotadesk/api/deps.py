# ruff: noqa: B008, TC003
from __future__ import annotations

import uuid
from typing import Annotated

from fastapi import Depends, Header, status

from rotadesk.exceptions import AppError
from rotadesk.models.enums import UserRole
from rotadesk.schemas.auth import AuthContext


async def get_auth_context(
    x_user_id: uuid.UUID = Header(),
    x_role: UserRole = Header(default=UserRole.AGENT),
) -> AuthContext:
    """Extract dev auth context from request headers."""
    return AuthContext(user_id=x_user_id, role=x_role)


AuthDep = Annotated[AuthContext, Depends(get_auth_context)]


async def require_wfm(
    auth: AuthDep,
) -> AuthContext:
    """Require the WFM role for the request."""
    if auth.role != UserRole.WFM:
        raise AppError("WFM access required", status_code=status.HTTP_403_FORBIDDEN)
    return auth


WfmDep = Annotated[AuthContext, Depends(require_wfm)]


async def require_approver(
    auth: AuthDep,
) -> AuthContext:
    """Require a team lead or WFM."""
    if not auth.is_approver:
        raise AppError("Team lead or WFM access required", status_code=status.HTTP_403_FORBIDDEN)
    return auth


ApproverDep = Annotated[AuthContext, Depends(require_approver)]
