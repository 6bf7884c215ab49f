from __future__ import annotations

from pydantic import BaseModel


class WorkflowSettings(BaseModel):
    """Approval-chain flags read once per decision."""

    auto_approve_on_tl: bool = False
    allow_leave_exceptions: bool = False


class UpdateWorkflowSettings(BaseModel):
    auto_approve_on_tl: bool | None = None
    allow_leave_exceptions: bool | None = None
