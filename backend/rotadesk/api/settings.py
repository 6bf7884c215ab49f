# ruff: noqa: TC001
from __future__ import annotations

from fastapi import APIRouter

from rotadesk.api.deps import AuthDep, WfmDep
from rotadesk.db import SessionDep
from rotadesk.schemas.settings import UpdateWorkflowSettings, WorkflowSettings
from rotadesk.services import settings as settings_service

settings_router = APIRouter(prefix="/settings", tags=["settings"])


@settings_router.get("", response_model=WorkflowSettings)
async def get_workflow_settings(session: SessionDep, auth: AuthDep) -> WorkflowSettings:
    """Current approval-chain flags."""
    return await settings_service.DatabaseSettingsProvider(session).get_workflow_settings()


@settings_router.put("", response_model=WorkflowSettings)
async def update_workflow_settings(
    payload: UpdateWorkflowSettings,
    session: SessionDep,
    auth: WfmDep,
) -> WorkflowSettings:
    """Change approval-chain flags (WFM only). Takes effect on the next decision."""
    return await settings_service.update_workflow_settings(session, payload)
