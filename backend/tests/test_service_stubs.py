"""Tests for the user directory stub, the settings providers, and audit wording."""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING

from rotadesk.models.enums import LeaveStatus, RequestKind, SwapStatus, TransitionAction, UserRole
from rotadesk.schemas.settings import UpdateWorkflowSettings, WorkflowSettings
from rotadesk.services.audit import describe_transition
from rotadesk.services.directory import (
    InMemoryUserDirectory,
    UserDirectory,
    UserInfo,
    display_name,
    get_user_directory,
    set_user_directory,
)
from rotadesk.services.settings import (
    DatabaseSettingsProvider,
    SettingsProvider,
    StaticSettingsProvider,
    update_workflow_settings,
)
from rotadesk.services.workflow import Parties, resolve_transition

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from sqlalchemy.ext.asyncio import AsyncSession


def _make_user(name: str = "Alice", role: UserRole = UserRole.AGENT) -> UserInfo:
    return UserInfo(id=uuid.uuid4(), name=name, email=f"{name.lower()}@example.com", role=role)


# ---------------------------------------------------------------------------
# InMemoryUserDirectory
# ---------------------------------------------------------------------------


async def test_directory_get_not_found() -> None:
    directory = InMemoryUserDirectory()
    assert await directory.get_user(uuid.uuid4()) is None


async def test_directory_seed_and_list_sorted_by_name() -> None:
    directory = InMemoryUserDirectory()
    bob = _make_user("Bob")
    alice = _make_user("Alice", UserRole.TL)
    directory.seed(bob)
    directory.seed(alice)

    assert await directory.get_user(alice.id) == alice
    assert [u.name for u in await directory.list_users()] == ["Alice", "Bob"]


async def test_display_name_falls_back_to_id() -> None:
    directory = InMemoryUserDirectory()
    alice = _make_user()
    directory.seed(alice)
    set_user_directory(directory)

    assert get_user_directory() is directory
    assert isinstance(directory, UserDirectory)
    assert await display_name(alice.id) == "Alice"

    unknown = uuid.uuid4()
    assert await display_name(unknown) == str(unknown)


# ---------------------------------------------------------------------------
# Settings providers
# ---------------------------------------------------------------------------


async def test_static_provider_defaults() -> None:
    provider = StaticSettingsProvider()
    assert isinstance(provider, SettingsProvider)
    assert await provider.get_workflow_settings() == WorkflowSettings()


async def test_database_provider_defaults_to_false(db_session: AsyncSession) -> None:
    settings = await DatabaseSettingsProvider(db_session).get_workflow_settings()
    assert settings.auto_approve_on_tl is False
    assert settings.allow_leave_exceptions is False


async def test_database_provider_reads_each_time(
    db_session: AsyncSession,
    set_workflow: Callable[..., Awaitable[None]],
) -> None:
    provider = DatabaseSettingsProvider(db_session)
    await set_workflow(auto_approve=True)
    assert (await provider.get_workflow_settings()).auto_approve_on_tl is True

    await set_workflow(auto_approve=False, allow_exceptions=True)
    latest = await provider.get_workflow_settings()
    assert latest.auto_approve_on_tl is False
    assert latest.allow_leave_exceptions is True


async def test_partial_update_keeps_other_flag(db_session: AsyncSession) -> None:
    await update_workflow_settings(db_session, UpdateWorkflowSettings(allow_leave_exceptions=True))
    result = await update_workflow_settings(db_session, UpdateWorkflowSettings(auto_approve_on_tl=True))
    assert result == WorkflowSettings(auto_approve_on_tl=True, allow_leave_exceptions=True)


# ---------------------------------------------------------------------------
# Audit wording
# ---------------------------------------------------------------------------


def test_describe_tl_approval() -> None:
    transition = resolve_transition(
        RequestKind.LEAVE,
        LeaveStatus.PENDING_TL,
        TransitionAction.APPROVE,
        user_id=uuid.uuid4(),
        role=UserRole.TL,
        parties=Parties(requester_id=uuid.uuid4()),
        settings=WorkflowSettings(),
    )
    assert describe_transition("Tina", transition) == (
        "Tina approved. Status changed from Pending TL Approval to Pending WFM Approval"
    )


def test_describe_auto_approval() -> None:
    transition = resolve_transition(
        RequestKind.LEAVE,
        LeaveStatus.PENDING_TL,
        TransitionAction.APPROVE,
        user_id=uuid.uuid4(),
        role=UserRole.TL,
        parties=Parties(requester_id=uuid.uuid4()),
        settings=WorkflowSettings(auto_approve_on_tl=True),
    )
    assert describe_transition("Tina", transition) == (
        "Tina approved (auto-approved by system). Status changed from Pending TL Approval to Approved"
    )


def test_describe_swap_acceptance() -> None:
    target = uuid.uuid4()
    transition = resolve_transition(
        RequestKind.SWAP,
        SwapStatus.PENDING_ACCEPTANCE,
        TransitionAction.ACCEPT,
        user_id=target,
        role=UserRole.AGENT,
        parties=Parties(requester_id=uuid.uuid4(), target_id=target),
        settings=WorkflowSettings(),
    )
    assert describe_transition("Bob", transition) == (
        "Bob accepted the swap request. Status changed from Pending Acceptance to Pending TL Approval"
    )
