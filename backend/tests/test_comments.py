"""Tests for request comments and the immutability of system notes."""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from httpx import AsyncClient

    from rotadesk.models.leave import LeaveBalance

AGENT_ID = uuid.uuid4()
TL_ID = uuid.uuid4()

AGENT_HEADERS = {"X-User-Id": str(AGENT_ID), "X-Role": "agent"}
TL_HEADERS = {"X-User-Id": str(TL_ID), "X-Role": "tl"}


async def _leave_request(
    client: AsyncClient,
    add_balance: Callable[..., Awaitable[LeaveBalance]],
) -> str:
    await add_balance(AGENT_ID, "annual", 10)
    resp = await client.post(
        "/leave-requests",
        json={"leave_type": "annual", "start_date": "2024-01-08", "end_date": "2024-01-09"},
        headers=AGENT_HEADERS,
    )
    assert resp.status_code == 201
    result: str = resp.json()["id"]
    return result


async def _comments(client: AsyncClient, request_id: str) -> list[dict[str, Any]]:
    resp = await client.get(f"/leave-requests/{request_id}/comments", headers=AGENT_HEADERS)
    assert resp.status_code == 200
    items: list[dict[str, Any]] = resp.json()["items"]
    return items


async def test_add_and_list_comments(
    async_client: AsyncClient,
    add_balance: Callable[..., Awaitable[LeaveBalance]],
) -> None:
    request_id = await _leave_request(async_client, add_balance)

    resp = await async_client.post(
        f"/leave-requests/{request_id}/comments",
        json={"content": "Covering with Bob"},
        headers=TL_HEADERS,
    )
    assert resp.status_code == 201
    assert resp.json()["is_system"] is False
    assert resp.json()["request_type"] == "leave"

    items = await _comments(async_client, request_id)
    assert [item["is_system"] for item in items] == [True, False]
    assert items[1]["content"] == "Covering with Bob"
    assert items[1]["user_id"] == str(TL_ID)


async def test_author_edits_and_deletes(
    async_client: AsyncClient,
    add_balance: Callable[..., Awaitable[LeaveBalance]],
) -> None:
    request_id = await _leave_request(async_client, add_balance)
    created = await async_client.post(
        f"/leave-requests/{request_id}/comments", json={"content": "draft"}, headers=AGENT_HEADERS
    )
    comment_id = created.json()["id"]

    edited = await async_client.patch(f"/comments/{comment_id}", json={"content": "final"}, headers=AGENT_HEADERS)
    assert edited.status_code == 200
    assert edited.json()["content"] == "final"

    deleted = await async_client.delete(f"/comments/{comment_id}", headers=AGENT_HEADERS)
    assert deleted.status_code == 204
    assert len(await _comments(async_client, request_id)) == 1


async def test_system_comment_is_immutable(
    async_client: AsyncClient,
    add_balance: Callable[..., Awaitable[LeaveBalance]],
) -> None:
    request_id = await _leave_request(async_client, add_balance)
    system_note = (await _comments(async_client, request_id))[0]

    edit = await async_client.patch(f"/comments/{system_note['id']}", json={"content": "x"}, headers=AGENT_HEADERS)
    assert edit.status_code == 403
    assert edit.json()["error"] == "SystemCommentProtected"

    delete = await async_client.delete(f"/comments/{system_note['id']}", headers=AGENT_HEADERS)
    assert delete.status_code == 403
    assert delete.json()["context"] == {"operation": "delete"}

    assert (await _comments(async_client, request_id))[0]["content"] == system_note["content"]


async def test_only_author_can_edit(
    async_client: AsyncClient,
    add_balance: Callable[..., Awaitable[LeaveBalance]],
) -> None:
    request_id = await _leave_request(async_client, add_balance)
    created = await async_client.post(
        f"/leave-requests/{request_id}/comments", json={"content": "mine"}, headers=AGENT_HEADERS
    )

    resp = await async_client.patch(f"/comments/{created.json()['id']}", json={"content": "x"}, headers=TL_HEADERS)
    assert resp.status_code == 403
    assert resp.json()["error"] == "Forbidden"


async def test_comment_on_unknown_request(async_client: AsyncClient) -> None:
    resp = await async_client.post(
        f"/swap-requests/{uuid.uuid4()}/comments", json={"content": "hello"}, headers=AGENT_HEADERS
    )
    assert resp.status_code == 404


async def test_unknown_comment(async_client: AsyncClient) -> None:
    resp = await async_client.delete(f"/comments/{uuid.uuid4()}", headers=AGENT_HEADERS)
    assert resp.status_code == 404


async def test_empty_comment_rejected(
    async_client: AsyncClient,
    add_balance: Callable[..., Awaitable[LeaveBalance]],
) -> None:
    request_id = await _leave_request(async_client, add_balance)
    resp = await async_client.post(
        f"/leave-requests/{request_id}/comments", json={"content": ""}, headers=AGENT_HEADERS
    )
    assert resp.status_code == 422
