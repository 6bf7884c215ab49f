"""End-to-end tests for the leave request lifecycle over HTTP."""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING, Any

import pytest
from sqlalchemy import select
from sqlmodel import col

from rotadesk.config import Settings
from rotadesk.models.leave import LeaveBalance, LeaveBalanceHistory, LeaveTypeConfig

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from httpx import AsyncClient
    from sqlalchemy.ext.asyncio import AsyncSession

AGENT_ID = uuid.uuid4()
OTHER_AGENT_ID = uuid.uuid4()
TL_ID = uuid.uuid4()
WFM_ID = uuid.uuid4()

AGENT_HEADERS = {"X-User-Id": str(AGENT_ID), "X-Role": "agent"}
OTHER_AGENT_HEADERS = {"X-User-Id": str(OTHER_AGENT_ID), "X-Role": "agent"}
TL_HEADERS = {"X-User-Id": str(TL_ID), "X-Role": "tl"}
WFM_HEADERS = {"X-User-Id": str(WFM_ID), "X-Role": "wfm"}

LEAVE_URL = "/leave-requests"
WEEK = {"leave_type": "annual", "start_date": "2024-01-08", "end_date": "2024-01-12"}


# ---------------------------------------------------------------------------
# Test helpers
# ---------------------------------------------------------------------------


async def _create(
    client: AsyncClient,
    body: dict[str, Any] | None = None,
    headers: dict[str, str] | None = None,
) -> dict[str, Any]:
    resp = await client.post(LEAVE_URL, json=body or WEEK, headers=headers or AGENT_HEADERS)
    assert resp.status_code == 201, resp.text
    result: dict[str, Any] = resp.json()
    return result


async def _act(
    client: AsyncClient,
    request_id: str,
    action: str,
    expected_status: str,
    headers: dict[str, str],
) -> Any:
    return await client.post(
        f"{LEAVE_URL}/{request_id}/{action}",
        json={"expected_status": expected_status},
        headers=headers,
    )


async def _balance(db_session: AsyncSession) -> float:
    result = await db_session.execute(
        select(col(LeaveBalance.balance))
        .where(col(LeaveBalance.user_id) == AGENT_ID)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one()


# ---------------------------------------------------------------------------
# Creation
# ---------------------------------------------------------------------------


async def test_create_leave_request(
    async_client: AsyncClient,
    add_balance: Callable[..., Awaitable[LeaveBalance]],
) -> None:
    await add_balance(AGENT_ID, "annual", 10)

    data = await _create(async_client, {**WEEK, "notes": "family trip"})

    assert data["status"] == "pending_tl"
    assert data["requested_days"] == 5
    assert data["user_id"] == str(AGENT_ID)
    assert data["notes"] == "family trip"
    assert data["tl_approved_at"] is None

    comments = await async_client.get(f"{LEAVE_URL}/{data['id']}/comments", headers=AGENT_HEADERS)
    items = comments.json()["items"]
    assert len(items) == 1
    assert items[0]["is_system"] is True
    assert "Pending TL Approval" in items[0]["content"]


async def test_insufficient_balance_is_auto_denied(
    async_client: AsyncClient,
    add_balance: Callable[..., Awaitable[LeaveBalance]],
) -> None:
    await add_balance(AGENT_ID, "annual", 3)

    data = await _create(async_client)

    assert data["status"] == "denied"
    assert data["requested_days"] == 5
    comments = await async_client.get(f"{LEAVE_URL}/{data['id']}/comments", headers=AGENT_HEADERS)
    assert "requested 5 days, available 3.0 days" in comments.json()["items"][0]["content"]


async def test_insufficient_balance_rejected_when_auto_deny_off(
    async_client: AsyncClient,
    add_balance: Callable[..., Awaitable[LeaveBalance]],
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    await add_balance(AGENT_ID, "annual", 3)
    monkeypatch.setattr(
        "rotadesk.services.leave.get_settings",
        lambda: Settings(auto_deny_on_insufficient_balance=False),
    )

    resp = await async_client.post(LEAVE_URL, json=WEEK, headers=AGENT_HEADERS)

    assert resp.status_code == 400
    body = resp.json()
    assert body["error"] == "InsufficientBalance"
    assert body["context"] == {"requested": 5, "available": 3.0}


async def test_overlapping_request_conflicts(
    async_client: AsyncClient,
    add_balance: Callable[..., Awaitable[LeaveBalance]],
) -> None:
    await add_balance(AGENT_ID, "annual", 20)
    first = await _create(async_client)

    resp = await async_client.post(
        LEAVE_URL,
        json={"leave_type": "annual", "start_date": "2024-01-12", "end_date": "2024-01-16"},
        headers=AGENT_HEADERS,
    )

    assert resp.status_code == 409
    body = resp.json()
    assert body["error"] == "OverlappingRequest"
    assert body["context"] == {"conflicting_id": first["id"], "status": "pending_tl"}


async def test_denied_request_does_not_block_new_one(
    async_client: AsyncClient,
    add_balance: Callable[..., Awaitable[LeaveBalance]],
) -> None:
    await add_balance(AGENT_ID, "annual", 3)
    denied = await _create(async_client)
    assert denied["status"] == "denied"

    data = await _create(async_client, {"leave_type": "annual", "start_date": "2024-01-08", "end_date": "2024-01-10"})
    assert data["status"] == "pending_tl"


async def test_unknown_leave_type(async_client: AsyncClient) -> None:
    resp = await async_client.post(LEAVE_URL, json={**WEEK, "leave_type": "sabbatical"}, headers=AGENT_HEADERS)
    assert resp.status_code == 400
    assert resp.json()["error"] == "UnknownLeaveType"


async def test_inactive_leave_type_is_rejected(
    async_client: AsyncClient,
    db_session: AsyncSession,
    add_balance: Callable[..., Awaitable[LeaveBalance]],
) -> None:
    await add_balance(AGENT_ID, "annual", 10)
    result = await db_session.execute(select(LeaveTypeConfig).where(col(LeaveTypeConfig.code) == "annual"))
    result.scalar_one().is_active = False
    await db_session.commit()

    resp = await async_client.post(LEAVE_URL, json=WEEK, headers=AGENT_HEADERS)
    assert resp.status_code == 400
    assert resp.json()["error"] == "UnknownLeaveType"
    assert resp.json()["context"] == {"leave_type": "annual"}


async def test_weekend_only_range(
    async_client: AsyncClient,
    add_balance: Callable[..., Awaitable[LeaveBalance]],
) -> None:
    await add_balance(AGENT_ID, "annual", 10)
    resp = await async_client.post(
        LEAVE_URL,
        json={"leave_type": "annual", "start_date": "2024-01-13", "end_date": "2024-01-14"},
        headers=AGENT_HEADERS,
    )
    assert resp.status_code == 400
    assert resp.json()["error"] == "InvalidRange"


async def test_inverted_range_fails_validation(async_client: AsyncClient) -> None:
    resp = await async_client.post(
        LEAVE_URL,
        json={"leave_type": "annual", "start_date": "2024-01-12", "end_date": "2024-01-08"},
        headers=AGENT_HEADERS,
    )
    assert resp.status_code == 422


async def test_missing_user_header(async_client: AsyncClient) -> None:
    resp = await async_client.post(LEAVE_URL, json=WEEK)
    assert resp.status_code == 422


async def test_agent_cannot_file_for_someone_else(async_client: AsyncClient) -> None:
    resp = await async_client.post(LEAVE_URL, json={**WEEK, "user_id": str(OTHER_AGENT_ID)}, headers=AGENT_HEADERS)
    assert resp.status_code == 403


async def test_team_lead_files_on_behalf(
    async_client: AsyncClient,
    add_balance: Callable[..., Awaitable[LeaveBalance]],
) -> None:
    await add_balance(AGENT_ID, "annual", 10)
    data = await _create(async_client, {**WEEK, "user_id": str(AGENT_ID)}, headers=TL_HEADERS)
    assert data["user_id"] == str(AGENT_ID)
    assert data["status"] == "pending_tl"


# ---------------------------------------------------------------------------
# Approval chain
# ---------------------------------------------------------------------------


async def test_two_step_approval_deducts_balance(
    async_client: AsyncClient,
    db_session: AsyncSession,
    add_balance: Callable[..., Awaitable[LeaveBalance]],
) -> None:
    await add_balance(AGENT_ID, "annual", 10)
    data = await _create(async_client)

    tl_resp = await _act(async_client, data["id"], "approve", "pending_tl", TL_HEADERS)
    assert tl_resp.status_code == 200
    assert tl_resp.json()["status"] == "pending_wfm"
    assert tl_resp.json()["tl_approved_at"] is not None
    assert await _balance(db_session) == 10

    wfm_resp = await _act(async_client, data["id"], "approve", "pending_wfm", WFM_HEADERS)
    assert wfm_resp.status_code == 200
    assert wfm_resp.json()["status"] == "approved"
    assert wfm_resp.json()["wfm_approved_at"] is not None
    assert await _balance(db_session) == 5

    history = await async_client.get(f"/users/{AGENT_ID}/balance-history", headers=AGENT_HEADERS)
    entries = history.json()["items"]
    assert len(entries) == 1
    assert entries[0]["previous_balance"] == 10
    assert entries[0]["new_balance"] == 5
    assert entries[0]["leave_request_id"] == data["id"]


async def test_auto_approve_on_team_lead(
    async_client: AsyncClient,
    db_session: AsyncSession,
    add_balance: Callable[..., Awaitable[LeaveBalance]],
    set_workflow: Callable[..., Awaitable[None]],
) -> None:
    await add_balance(AGENT_ID, "annual", 10)
    await set_workflow(auto_approve=True)
    data = await _create(async_client)

    resp = await _act(async_client, data["id"], "approve", "pending_tl", TL_HEADERS)

    assert resp.json()["status"] == "approved"
    assert await _balance(db_session) == 5


async def test_agent_cannot_approve(
    async_client: AsyncClient,
    add_balance: Callable[..., Awaitable[LeaveBalance]],
) -> None:
    await add_balance(AGENT_ID, "annual", 10)
    data = await _create(async_client)

    resp = await _act(async_client, data["id"], "approve", "pending_tl", AGENT_HEADERS)
    assert resp.status_code == 403


async def test_team_lead_cannot_give_final_approval(
    async_client: AsyncClient,
    add_balance: Callable[..., Awaitable[LeaveBalance]],
) -> None:
    await add_balance(AGENT_ID, "annual", 10)
    data = await _create(async_client)
    await _act(async_client, data["id"], "approve", "pending_tl", TL_HEADERS)

    resp = await _act(async_client, data["id"], "approve", "pending_wfm", TL_HEADERS)
    assert resp.status_code == 400
    assert resp.json()["error"] == "InvalidTransition"


async def test_stale_expected_status_conflicts(
    async_client: AsyncClient,
    add_balance: Callable[..., Awaitable[LeaveBalance]],
) -> None:
    await add_balance(AGENT_ID, "annual", 10)
    data = await _create(async_client)
    await _act(async_client, data["id"], "approve", "pending_tl", TL_HEADERS)

    # A second team lead still looking at the pending_tl version.
    resp = await _act(async_client, data["id"], "reject", "pending_tl", TL_HEADERS)

    assert resp.status_code == 409
    body = resp.json()
    assert body["error"] == "ConcurrencyConflict"
    assert body["context"] == {"expected": "pending_tl", "actual": "pending_wfm"}


async def test_reject_is_final(
    async_client: AsyncClient,
    db_session: AsyncSession,
    add_balance: Callable[..., Awaitable[LeaveBalance]],
) -> None:
    await add_balance(AGENT_ID, "annual", 10)
    data = await _create(async_client)

    resp = await _act(async_client, data["id"], "reject", "pending_tl", WFM_HEADERS)
    assert resp.json()["status"] == "rejected"

    again = await _act(async_client, data["id"], "approve", "rejected", WFM_HEADERS)
    assert again.status_code == 400
    assert await _balance(db_session) == 10

    history = await db_session.execute(select(LeaveBalanceHistory))
    assert history.scalars().all() == []


# ---------------------------------------------------------------------------
# Cancel and exceptions
# ---------------------------------------------------------------------------


async def test_requester_cancels(
    async_client: AsyncClient,
    add_balance: Callable[..., Awaitable[LeaveBalance]],
) -> None:
    await add_balance(AGENT_ID, "annual", 10)
    data = await _create(async_client)

    resp = await _act(async_client, data["id"], "cancel", "pending_tl", AGENT_HEADERS)
    assert resp.status_code == 200
    assert resp.json()["status"] == "rejected"


async def test_other_agent_cannot_cancel(
    async_client: AsyncClient,
    add_balance: Callable[..., Awaitable[LeaveBalance]],
) -> None:
    await add_balance(AGENT_ID, "annual", 10)
    data = await _create(async_client)

    resp = await _act(async_client, data["id"], "cancel", "pending_tl", OTHER_AGENT_HEADERS)
    assert resp.status_code == 400


async def test_exception_disabled_by_default(
    async_client: AsyncClient,
    add_balance: Callable[..., Awaitable[LeaveBalance]],
) -> None:
    await add_balance(AGENT_ID, "annual", 3)
    data = await _create(async_client)

    resp = await _act(async_client, data["id"], "exception", "denied", AGENT_HEADERS)
    assert resp.status_code == 400
    assert "exceptions are disabled" in resp.json()["detail"]


async def test_exception_returns_request_to_team_lead(
    async_client: AsyncClient,
    db_session: AsyncSession,
    add_balance: Callable[..., Awaitable[LeaveBalance]],
    set_workflow: Callable[..., Awaitable[None]],
) -> None:
    await add_balance(AGENT_ID, "annual", 3)
    await set_workflow(allow_exceptions=True)
    data = await _create(async_client)

    resp = await _act(async_client, data["id"], "exception", "denied", AGENT_HEADERS)
    assert resp.status_code == 200
    assert resp.json()["status"] == "pending_tl"

    await _act(async_client, data["id"], "approve", "pending_tl", TL_HEADERS)
    final = await _act(async_client, data["id"], "approve", "pending_wfm", WFM_HEADERS)
    assert final.json()["status"] == "approved"
    assert await _balance(db_session) == -2


async def test_exception_blocked_by_overlap(
    async_client: AsyncClient,
    add_balance: Callable[..., Awaitable[LeaveBalance]],
    set_workflow: Callable[..., Awaitable[None]],
) -> None:
    await add_balance(AGENT_ID, "annual", 3)
    await set_workflow(allow_exceptions=True)
    denied = await _create(async_client)
    await _create(async_client, {"leave_type": "annual", "start_date": "2024-01-10", "end_date": "2024-01-11"})

    resp = await _act(async_client, denied["id"], "exception", "denied", AGENT_HEADERS)
    assert resp.status_code == 409


# ---------------------------------------------------------------------------
# Editing
# ---------------------------------------------------------------------------


async def test_edit_pending_request(
    async_client: AsyncClient,
    add_balance: Callable[..., Awaitable[LeaveBalance]],
) -> None:
    await add_balance(AGENT_ID, "annual", 10)
    data = await _create(async_client)

    # Overlaps only with itself.
    resp = await async_client.patch(
        f"{LEAVE_URL}/{data['id']}",
        json={"start_date": "2024-01-10", "notes": "shorter"},
        headers=AGENT_HEADERS,
    )

    assert resp.status_code == 200
    body = resp.json()
    assert body["start_date"] == "2024-01-10"
    assert body["requested_days"] == 3
    assert body["notes"] == "shorter"
    assert body["status"] == "pending_tl"


async def test_edit_after_team_lead_approval_conflicts(
    async_client: AsyncClient,
    add_balance: Callable[..., Awaitable[LeaveBalance]],
) -> None:
    await add_balance(AGENT_ID, "annual", 10)
    data = await _create(async_client)
    await _act(async_client, data["id"], "approve", "pending_tl", TL_HEADERS)

    resp = await async_client.patch(f"{LEAVE_URL}/{data['id']}", json={"notes": "late"}, headers=AGENT_HEADERS)
    assert resp.status_code == 409
    assert resp.json()["context"] == {"expected": "pending_tl", "actual": "pending_wfm"}


async def test_only_requester_can_edit(
    async_client: AsyncClient,
    add_balance: Callable[..., Awaitable[LeaveBalance]],
) -> None:
    await add_balance(AGENT_ID, "annual", 10)
    data = await _create(async_client)

    resp = await async_client.patch(f"{LEAVE_URL}/{data['id']}", json={"notes": "x"}, headers=TL_HEADERS)
    assert resp.status_code == 403


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------


async def test_list_and_filter(
    async_client: AsyncClient,
    add_balance: Callable[..., Awaitable[LeaveBalance]],
) -> None:
    await add_balance(AGENT_ID, "annual", 20)
    await add_balance(OTHER_AGENT_ID, "annual", 1)
    await _create(async_client)
    await _create(async_client, headers=OTHER_AGENT_HEADERS)

    everything = await async_client.get(LEAVE_URL, headers=WFM_HEADERS)
    assert everything.json()["total"] == 2

    denied = await async_client.get(LEAVE_URL, params={"status": "denied"}, headers=WFM_HEADERS)
    assert denied.json()["total"] == 1
    assert denied.json()["items"][0]["user_id"] == str(OTHER_AGENT_ID)

    by_user = await async_client.get(LEAVE_URL, params={"user_id": str(AGENT_ID)}, headers=TL_HEADERS)
    assert by_user.json()["total"] == 1


async def test_agents_only_see_their_own(
    async_client: AsyncClient,
    add_balance: Callable[..., Awaitable[LeaveBalance]],
) -> None:
    await add_balance(AGENT_ID, "annual", 20)
    await add_balance(OTHER_AGENT_ID, "annual", 20)
    mine = await _create(async_client)
    theirs = await _create(async_client, headers=OTHER_AGENT_HEADERS)

    listed = await async_client.get(LEAVE_URL, params={"user_id": str(OTHER_AGENT_ID)}, headers=AGENT_HEADERS)
    assert [item["id"] for item in listed.json()["items"]] == [mine["id"]]

    forbidden = await async_client.get(f"{LEAVE_URL}/{theirs['id']}", headers=AGENT_HEADERS)
    assert forbidden.status_code == 403


async def test_get_unknown_request(async_client: AsyncClient) -> None:
    resp = await async_client.get(f"{LEAVE_URL}/{uuid.uuid4()}", headers=WFM_HEADERS)
    assert resp.status_code == 404
