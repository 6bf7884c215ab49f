"""Seed script for development data.

Run with:  python -m rotadesk.seed
Drives the running API, so every row goes through the same validation as
real traffic. Safe to re-run: existing data is skipped.
"""

from __future__ import annotations

import asyncio
import sys
from datetime import date, timedelta

import httpx

BASE_URL = "http://localhost:8000"

# Well-known user UUIDs
WFM_ID = "00000000-0000-0000-0000-000000000001"
TL_ID = "00000000-0000-0000-0000-000000000002"
ALICE_ID = "00000000-0000-0000-0000-000000000003"
BOB_ID = "00000000-0000-0000-0000-000000000004"
CAROL_ID = "00000000-0000-0000-0000-000000000005"


def _headers(user_id: str, role: str) -> dict[str, str]:
    return {"Content-Type": "application/json", "X-User-Id": user_id, "X-Role": role}


WFM_HEADERS = _headers(WFM_ID, "wfm")

LEAVE_TYPES = [
    {"code": "annual", "label": "Annual Leave"},
    {"code": "sick", "label": "Sick Leave"},
    {"code": "casual", "label": "Casual Leave"},
]

# Opening balances: (user_id, leave_type, days)
BALANCES = [
    (ALICE_ID, "annual", 21.0),
    (ALICE_ID, "sick", 10.0),
    (BOB_ID, "annual", 21.0),
    (BOB_ID, "sick", 10.0),
    (CAROL_ID, "annual", 2.0),
    (CAROL_ID, "casual", 5.0),
]

# Weekly rota pattern per agent, Monday first.
ROTA = {
    ALICE_ID: ["AM", "AM", "PM", "PM", "BET", "OFF", "OFF"],
    BOB_ID: ["PM", "PM", "AM", "AM", "OFF", "BET", "OFF"],
    CAROL_ID: ["BET", "OFF", "AM", "PM", "AM", "OFF", "PM"],
}


async def _safe_post(client: httpx.AsyncClient, url: str, json: dict, label: str, headers: dict) -> dict | None:
    """POST with 409-conflict tolerance for re-runs."""
    resp = await client.post(url, json=json, headers=headers)
    if resp.status_code in (200, 201):
        print(f"  [OK] {label}")
        return resp.json()
    if resp.status_code == 409:
        print(f"  [SKIP] {label} (already exists)")
        return None
    print(f"  [ERROR] {label}: {resp.status_code} {resp.text[:200]}")
    return None


async def _safe_put(client: httpx.AsyncClient, url: str, json: dict, label: str) -> dict | None:
    """PUT (upsert), naturally idempotent."""
    resp = await client.put(url, json=json, headers=WFM_HEADERS)
    if resp.status_code in (200, 201):
        print(f"  [OK] {label}")
        return resp.json()
    print(f"  [ERROR] {label}: {resp.status_code} {resp.text[:200]}")
    return None


def _next_monday(today: date) -> date:
    return today + timedelta(days=7 - today.weekday())


async def seed_leave_types(client: httpx.AsyncClient) -> None:
    print("\n--- Seeding leave types ---")
    for leave_type in LEAVE_TYPES:
        await _safe_post(client, f"{BASE_URL}/leave-types", leave_type, leave_type["label"], WFM_HEADERS)


async def seed_settings(client: httpx.AsyncClient) -> None:
    print("\n--- Seeding workflow settings ---")
    await _safe_put(
        client,
        f"{BASE_URL}/settings",
        {"auto_approve_on_tl": False, "allow_leave_exceptions": True},
        "Exceptions enabled, two-step approval",
    )


async def _current_balance(client: httpx.AsyncClient, user_id: str, leave_type: str) -> float | None:
    resp = await client.get(f"{BASE_URL}/users/{user_id}/balances", headers=WFM_HEADERS)
    if resp.status_code != 200:
        return None
    for item in resp.json().get("items", []):
        if item["leave_type"] == leave_type:
            return item["balance"]
    return None


async def seed_balances(client: httpx.AsyncClient) -> None:
    """Credit opening balances (skip users that already have one)."""
    print("\n--- Seeding balances ---")
    for user_id, leave_type, days in BALANCES:
        existing = await _current_balance(client, user_id, leave_type)
        if existing is not None:
            print(f"  [SKIP] {user_id[-4:]} {leave_type} (balance already {existing})")
            continue
        await _safe_post(
            client,
            f"{BASE_URL}/balances/adjustments",
            {"user_id": user_id, "leave_type": leave_type, "amount_days": days, "reason": "Opening balance"},
            f"Credit {user_id[-4:]} {leave_type} +{days}",
            WFM_HEADERS,
        )


async def seed_shifts(client: httpx.AsyncClient, week_start: date) -> None:
    """Import two weeks of rota for every agent."""
    print("\n--- Seeding shifts ---")
    rows = [
        {"user_id": user_id, "date": (week_start + timedelta(days=offset)).isoformat(), "shift_type": pattern[offset % 7]}
        for user_id, pattern in ROTA.items()
        for offset in range(14)
    ]
    await _safe_put(client, f"{BASE_URL}/shifts/import", {"rows": rows}, f"{len(rows)} shift cells")


async def _shift_id(client: httpx.AsyncClient, user_id: str, on_date: date) -> str | None:
    resp = await client.get(
        f"{BASE_URL}/shifts",
        headers=WFM_HEADERS,
        params={"start_date": on_date.isoformat(), "end_date": on_date.isoformat(), "user_id": user_id},
    )
    items = resp.json().get("items", []) if resp.status_code == 200 else []
    return items[0]["id"] if items else None


async def seed_requests(client: httpx.AsyncClient, week_start: date) -> None:
    """File a few requests in different states."""
    print("\n--- Seeding requests ---")

    # Bob: 3 days annual in week two, approved by TL, waiting for WFM.
    result = await _safe_post(
        client,
        f"{BASE_URL}/leave-requests",
        {
            "leave_type": "annual",
            "start_date": (week_start + timedelta(days=7)).isoformat(),
            "end_date": (week_start + timedelta(days=9)).isoformat(),
            "notes": "Family visit",
        },
        "Leave: Bob 3 days annual",
        _headers(BOB_ID, "agent"),
    )
    if result:
        await _safe_post(
            client,
            f"{BASE_URL}/leave-requests/{result['id']}/approve",
            {"expected_status": "pending_tl"},
            "  TL approval of Bob's leave",
            _headers(TL_ID, "tl"),
        )

    # Carol: 5 days annual with only 2 available, auto-denied.
    await _safe_post(
        client,
        f"{BASE_URL}/leave-requests",
        {
            "leave_type": "annual",
            "start_date": (week_start + timedelta(days=7)).isoformat(),
            "end_date": (week_start + timedelta(days=11)).isoformat(),
        },
        "Leave: Carol 5 days annual (auto-denied)",
        _headers(CAROL_ID, "agent"),
    )

    # Alice asks Bob to swap Monday of week one.
    alice_shift = await _shift_id(client, ALICE_ID, week_start)
    bob_shift = await _shift_id(client, BOB_ID, week_start)
    if alice_shift and bob_shift:
        await _safe_post(
            client,
            f"{BASE_URL}/swap-requests",
            {"target_user_id": BOB_ID, "requester_shift_id": alice_shift, "target_shift_id": bob_shift},
            "Swap: Alice AM <-> Bob PM (pending acceptance)",
            _headers(ALICE_ID, "agent"),
        )


async def main() -> None:
    print("=" * 60)
    print("  RotaDesk - Development Seed Script")
    print("=" * 60)

    week_start = _next_monday(date.today())

    async with httpx.AsyncClient(timeout=30.0) as client:
        try:
            resp = await client.get(f"{BASE_URL}/health")
            if resp.status_code != 200:
                print(f"API health check failed: {resp.status_code}")
                sys.exit(1)
            print("\n[OK] API is healthy")
        except httpx.ConnectError:
            print("ERROR: Cannot connect to API at", BASE_URL)
            sys.exit(1)

        await seed_leave_types(client)
        await seed_settings(client)
        await seed_balances(client)
        await seed_shifts(client, week_start)
        await seed_requests(client, week_start)

    print("\n" + "=" * 60)
    print("  Seeding complete!")
    print("=" * 60)


if __name__ == "__main__":
    asyncio.run(main())
