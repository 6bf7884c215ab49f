from __future__ import annotations

import datetime
import uuid
from typing import TYPE_CHECKING

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool
from sqlmodel import col

from rotadesk.db import get_session
from rotadesk.main import app
from rotadesk.models import SQLModel
from rotadesk.models.leave import LeaveBalance, LeaveTypeConfig
from rotadesk.models.setting import AppSetting
from rotadesk.models.shift import Shift
from rotadesk.services.directory import InMemoryUserDirectory, set_user_directory
from rotadesk.services.settings import ALLOW_EXCEPTIONS_KEY, AUTO_APPROVE_KEY

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Awaitable, Callable, Iterator
    from pathlib import Path

    from sqlalchemy.ext.asyncio import AsyncEngine


@pytest.fixture
async def engine() -> AsyncIterator[AsyncEngine]:
    """In-memory SQLite engine with a fresh schema per test.

    StaticPool keeps the single in-memory connection alive across sessions.
    """
    _engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with _engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield _engine
    await _engine.dispose()


@pytest.fixture
async def file_engine(tmp_path: Path) -> AsyncIterator[AsyncEngine]:
    """File-backed SQLite engine: every session gets its own connection.

    Used where two sessions must race against each other.
    """
    _engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'rotadesk.db'}")
    async with _engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield _engine
    await _engine.dispose()


@pytest.fixture
async def db_session(engine: AsyncEngine) -> AsyncIterator[AsyncSession]:
    factory = async_sessionmaker(engine, expire_on_commit=False)
    async with factory() as session:
        yield session


@pytest.fixture
async def async_client(db_session: AsyncSession) -> AsyncIterator[AsyncClient]:
    """Async HTTP client with the database session dependency overridden."""

    async def _override_get_session() -> AsyncIterator[AsyncSession]:
        yield db_session

    app.dependency_overrides[get_session] = _override_get_session
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture(autouse=True)
def _reset_user_directory() -> Iterator[None]:
    """Every test starts with an empty directory (names fall back to ids)."""
    set_user_directory(InMemoryUserDirectory())
    yield
    set_user_directory(InMemoryUserDirectory())


# ---------------------------------------------------------------------------
# Data helpers
# ---------------------------------------------------------------------------


@pytest.fixture
def add_balance(db_session: AsyncSession) -> Callable[..., Awaitable[LeaveBalance]]:
    """Insert a balance row (and its leave type, if not catalogued yet) and commit."""

    async def _add(user_id: uuid.UUID, leave_type: str = "annual", days: float = 10.0) -> LeaveBalance:
        if await db_session.get(LeaveBalance, (user_id, leave_type)) is not None:
            msg = f"balance for {leave_type} already seeded"
            raise ValueError(msg)
        catalogued = await db_session.execute(select(LeaveTypeConfig).where(col(LeaveTypeConfig.code) == leave_type))
        if catalogued.first() is None:
            db_session.add(LeaveTypeConfig(code=leave_type, label=leave_type.title()))
        balance = LeaveBalance(user_id=user_id, leave_type=leave_type, balance=days)
        db_session.add(balance)
        await db_session.commit()
        return balance

    return _add


@pytest.fixture
def add_leave_type(db_session: AsyncSession) -> Callable[..., Awaitable[LeaveTypeConfig]]:
    async def _add(code: str = "annual", label: str = "Annual Leave", is_active: bool = True) -> LeaveTypeConfig:
        leave_type = LeaveTypeConfig(code=code, label=label, is_active=is_active)
        db_session.add(leave_type)
        await db_session.commit()
        return leave_type

    return _add


@pytest.fixture
def add_shift(db_session: AsyncSession) -> Callable[..., Awaitable[Shift]]:
    async def _add(user_id: uuid.UUID, on_date: datetime.date, shift_type: str) -> Shift:
        shift = Shift(user_id=user_id, date=on_date, shift_type=shift_type)
        db_session.add(shift)
        await db_session.commit()
        return shift

    return _add


@pytest.fixture
def set_workflow(db_session: AsyncSession) -> Callable[..., Awaitable[None]]:
    """Write the approval-chain flags straight into ``app_setting``."""

    async def _set(*, auto_approve: bool = False, allow_exceptions: bool = False) -> None:
        for key, flag in ((AUTO_APPROVE_KEY, auto_approve), (ALLOW_EXCEPTIONS_KEY, allow_exceptions)):
            value = "true" if flag else "false"
            existing = await db_session.get(AppSetting, key)
            if existing is None:
                db_session.add(AppSetting(key=key, value=value))
            else:
                existing.value = value
        await db_session.commit()

    return _set
