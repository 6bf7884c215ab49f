from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

from sqlalchemy import select
from sqlmodel import col

from rotadesk.models.base import now_utc
from rotadesk.models.setting import AppSetting
from rotadesk.schemas.settings import UpdateWorkflowSettings, WorkflowSettings

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

AUTO_APPROVE_KEY = "wfm_auto_approve"
ALLOW_EXCEPTIONS_KEY = "allow_leave_exceptions"


def _as_flag(value: str | None) -> bool:
    return value is not None and value.strip().lower() == "true"


@runtime_checkable
class SettingsProvider(Protocol):
    """Read-only source of the approval-chain flags."""

    async def get_workflow_settings(self) -> WorkflowSettings:
        """Fetch the current flags. Called once per decision, never cached."""
        ...


class DatabaseSettingsProvider:
    """Reads flags from the ``app_setting`` table in the caller's session."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_workflow_settings(self) -> WorkflowSettings:
        result = await self._session.execute(
            select(AppSetting).where(col(AppSetting.key).in_([AUTO_APPROVE_KEY, ALLOW_EXCEPTIONS_KEY]))
        )
        values = {row.key: row.value for row in result.scalars().all()}
        return WorkflowSettings(
            auto_approve_on_tl=_as_flag(values.get(AUTO_APPROVE_KEY)),
            allow_leave_exceptions=_as_flag(values.get(ALLOW_EXCEPTIONS_KEY)),
        )


class StaticSettingsProvider:
    """Fixed flags, for tests and scripted callers."""

    def __init__(self, settings: WorkflowSettings | None = None) -> None:
        self._settings = settings or WorkflowSettings()

    async def get_workflow_settings(self) -> WorkflowSettings:
        return self._settings


async def update_workflow_settings(session: AsyncSession, payload: UpdateWorkflowSettings) -> WorkflowSettings:
    """Upsert the flags supplied in ``payload`` and return the stored state."""
    changes = {
        AUTO_APPROVE_KEY: payload.auto_approve_on_tl,
        ALLOW_EXCEPTIONS_KEY: payload.allow_leave_exceptions,
    }
    for key, flag in changes.items():
        if flag is None:
            continue
        existing = await session.get(AppSetting, key)
        value = "true" if flag else "false"
        if existing is None:
            session.add(AppSetting(key=key, value=value))
        else:
            existing.value = value
            existing.updated_at = now_utc()
    await session.commit()
    return await DatabaseSettingsProvider(session).get_workflow_settings()
