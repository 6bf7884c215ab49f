# ruff: noqa: TC003
from __future__ import annotations

import uuid
from typing import Protocol, runtime_checkable

from pydantic import BaseModel

from rotadesk.models.enums import UserRole


class UserInfo(BaseModel):
    """User metadata from the identity provider."""

    id: uuid.UUID
    name: str
    email: str
    role: UserRole = UserRole.AGENT


@runtime_checkable
class UserDirectory(Protocol):
    """Interface for the identity/role provider."""

    async def get_user(self, user_id: uuid.UUID) -> UserInfo | None:
        """Fetch user metadata. Returns None if not found."""
        ...

    async def list_users(self) -> list[UserInfo]:
        """List all known users."""
        ...


class InMemoryUserDirectory:
    """In-memory stub implementation for development."""

    def __init__(self) -> None:
        self._users: dict[uuid.UUID, UserInfo] = {}

    def seed(self, user: UserInfo) -> None:
        """Seed a user for testing."""
        self._users[user.id] = user

    async def get_user(self, user_id: uuid.UUID) -> UserInfo | None:
        return self._users.get(user_id)

    async def list_users(self) -> list[UserInfo]:
        return sorted(self._users.values(), key=lambda u: u.name)


_user_directory: UserDirectory = InMemoryUserDirectory()


def get_user_directory() -> UserDirectory:
    """FastAPI dependency for the user directory."""
    return _user_directory


def set_user_directory(directory: UserDirectory) -> None:
    """Override the directory (for testing or production wiring)."""
    global _user_directory
    _user_directory = directory


async def display_name(user_id: uuid.UUID) -> str:
    """Name used in system comments; falls back to the raw id."""
    user = await get_user_directory().get_user(user_id)
    return user.name if user is not None else str(user_id)
