"""Seed script for development data.

Run with:  python -m punchclock.seed
Requires the API to be running at BASE_URL.
"""

from __future__ import annotations

import asyncio
import sys
from datetime import date, datetime, time, timedelta
from zoneinfo import ZoneInfo

import httpx

BASE_URL = "http://localhost:8000"
COMPANY_ID = "00000000-0000-0000-0000-000000000001"
ADMIN_USER_ID = "00000000-0000-0000-0000-000000000001"

HEADERS = {
    "Content-Type": "application/json",
    "X-Company-Id": COMPANY_ID,
    "X-User-Id": ADMIN_USER_ID,
    "X-Role": "admin",
}

# Well-known employee UUIDs
MANAGER_ID = "00000000-0000-0000-0000-000000000002"
ASHA_ID = "00000000-0000-0000-0000-000000000003"
RAVI_ID = "00000000-0000-0000-0000-000000000004"
MEERA_ID = "00000000-0000-0000-0000-000000000005"

LOCAL_TZ = "Asia/Kolkata"

EMPLOYEES = [
    {"id": MANAGER_ID, "name": "Kiran Rao", "role": "operation_manager", "timezone": LOCAL_TZ},
    {
        "id": ASHA_ID,
        "name": "Asha Menon",
        "role": "developer",
        "timezone": LOCAL_TZ,
        "reporting_manager_id": MANAGER_ID,
    },
    {
        "id": RAVI_ID,
        "name": "Ravi Kumar",
        "role": "security_guard",
        "timezone": LOCAL_TZ,
        "reporting_manager_id": MANAGER_ID,
    },
    {
        "id": MEERA_ID,
        "name": "Meera Shetty",
        "role": "site_supervisor",
        "timezone": LOCAL_TZ,
        "reporting_manager_id": MANAGER_ID,
    },
]

THRESHOLDS = {
    "office": {
        "standard_daily_hours_max": 8,
        "monthly_floating_leave_allowance": 1,
        "monthly_target_hours": 208,
        "week_off_days": [0],
    },
    "field": {
        "standard_daily_hours_max": 9,
        "monthly_floating_leave_allowance": 1,
        "monthly_target_hours": 234,
        "week_off_days": [0],
    },
    "site": {
        "standard_daily_hours_max": 10,
        "monthly_floating_leave_allowance": 0,
        "monthly_target_hours": 260,
        "week_off_days": [0],
    },
}

FIXED_HOLIDAYS = [
    {"month": 1, "day": 1, "name": "New Year"},
    {"month": 1, "day": 26, "name": "Republic Day"},
    {"month": 5, "day": 1, "name": "May Day"},
    {"month": 8, "day": 15, "name": "Independence Day"},
    {"month": 10, "day": 2, "name": "Gandhi Jayanti"},
    {"month": 11, "day": 1, "name": "Karnataka Rajyotsava"},
]

# Opt-in pool; each employee picks from these per year.
SELECTABLE_HOLIDAYS = [
    {"month": 1, "day": 15, "name": "Makara Sankranti"},
    {"month": 3, "day": 19, "name": "Ugadi Festival"},
    {"month": 4, "day": 3, "name": "Good Friday"},
    {"month": 4, "day": 14, "name": "Dr. B.R. Ambedkar Jayanthi"},
    {"month": 9, "day": 14, "name": "Varasiddhi Vinayaka Vrata"},
    {"month": 10, "day": 21, "name": "Vijayadasami"},
    {"month": 11, "day": 10, "name": "Balipadyami, Deepavali"},
    {"month": 12, "day": 25, "name": "Christmas"},
]

# Third Saturday of every month, budgeted by the floating allowance.
RECURRING_RULES = [
    {"role_category": "office", "weekday": 6, "occurrence_index": 3},
    {"role_category": "field", "weekday": 6, "occurrence_index": 3},
]

# (employee_id, holiday name)
SELECTIONS = [
    (ASHA_ID, "Ugadi Festival"),
    (ASHA_ID, "Balipadyami, Deepavali"),
    (RAVI_ID, "Christmas"),
]


async def _safe_post(client: httpx.AsyncClient, url: str, json: dict, label: str) -> dict | None:
    """POST with 409-conflict tolerance for idempotency."""
    resp = await client.post(url, json=json, headers=HEADERS)
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
    resp = await client.put(url, json=json, headers=HEADERS)
    if resp.status_code in (200, 201):
        print(f"  [OK] {label}")
        return resp.json()
    print(f"  [ERROR] {label}: {resp.status_code} {resp.text[:200]}")
    return None


async def seed_employees(client: httpx.AsyncClient) -> None:
    """Seed employees via PUT (upsert)."""
    print("\n--- Seeding employees ---")
    for emp in EMPLOYEES:
        body = {k: v for k, v in emp.items() if k != "id"}
        await _safe_put(client, f"{BASE_URL}/companies/{COMPANY_ID}/employees/{emp['id']}", body, emp["name"])


async def seed_thresholds(client: httpx.AsyncClient) -> None:
    print("\n--- Seeding role thresholds ---")
    for category, body in THRESHOLDS.items():
        await _safe_put(
            client,
            f"{BASE_URL}/companies/{COMPANY_ID}/role-thresholds/{category}",
            body,
            f"Thresholds: {category}",
        )


async def seed_holidays(client: httpx.AsyncClient) -> dict[str, str]:
    """Seed fixed holidays, the selectable pool, and recurring rules; return name->id."""
    print("\n--- Seeding holidays ---")
    for holiday in FIXED_HOLIDAYS:
        await _safe_post(client, f"{BASE_URL}/companies/{COMPANY_ID}/holidays/fixed", holiday, holiday["name"])
    for holiday in SELECTABLE_HOLIDAYS:
        await _safe_post(
            client,
            f"{BASE_URL}/companies/{COMPANY_ID}/holidays/fixed",
            {**holiday, "employee_selectable": True},
            f"{holiday['name']} (selectable)",
        )
    for rule in RECURRING_RULES:
        await _safe_post(
            client,
            f"{BASE_URL}/companies/{COMPANY_ID}/holidays/recurring",
            rule,
            f"Recurring: {rule['role_category']} weekday={rule['weekday']} n={rule['occurrence_index']}",
        )

    resp = await client.get(f"{BASE_URL}/companies/{COMPANY_ID}/holidays/fixed", headers=HEADERS)
    if resp.status_code != 200:
        return {}
    return {item["name"]: item["id"] for item in resp.json()}


async def seed_selections(client: httpx.AsyncClient, holiday_ids: dict[str, str]) -> None:
    print("\n--- Seeding holiday selections ---")
    year = date.today().year
    for employee_id, name in SELECTIONS:
        holiday_id = holiday_ids.get(name)
        if not holiday_id:
            print(f"  [SKIP] {name} not found for selection")
            continue
        await _safe_post(
            client,
            f"{BASE_URL}/companies/{COMPANY_ID}/employees/{employee_id}/holiday-selections",
            {"holiday_id": holiday_id, "year": year},
            f"Select {name} for {employee_id[:12]}... ({year})",
        )


def _last_weekday(before: date) -> date:
    day = before - timedelta(days=1)
    while day.weekday() >= 5:
        day -= timedelta(days=1)
    return day


async def seed_attendance(client: httpx.AsyncClient) -> None:
    """A long day for Asha so the overtime bank is not empty."""
    print("\n--- Seeding attendance ---")
    tz = ZoneInfo(LOCAL_TZ)
    day = _last_weekday(date.today())
    sessions = [
        ("CHECK_IN", datetime.combine(day, time(9, 0), tzinfo=tz)),
        ("CHECK_OUT", datetime.combine(day, time(19, 30), tzinfo=tz)),
    ]

    resp = await client.get(
        f"{BASE_URL}/companies/{COMPANY_ID}/employees/{ASHA_ID}/attendance-events",
        headers=HEADERS,
        params={
            "start_at": sessions[0][1].isoformat(),
            "end_at": (sessions[1][1] + timedelta(minutes=1)).isoformat(),
        },
    )
    if resp.status_code == 200 and resp.json().get("total", 0) > 0:
        print(f"  [SKIP] Asha already has events on {day}")
        return

    for kind, timestamp in sessions:
        result = await _safe_post(
            client,
            f"{BASE_URL}/companies/{COMPANY_ID}/employees/{ASHA_ID}/attendance-events",
            {"kind": kind, "timestamp": timestamp.isoformat(), "location_label": "Head office"},
            f"Asha {kind} {timestamp:%Y-%m-%d %H:%M}",
        )
        if result and result.get("overtime"):
            print(f"        overtime: {result['overtime']['overtime_minutes']} minutes")


async def seed_tasks(client: httpx.AsyncClient) -> None:
    print("\n--- Seeding tasks ---")
    resp = await client.get(f"{BASE_URL}/companies/{COMPANY_ID}/tasks", headers=HEADERS)
    if resp.status_code == 200 and resp.json().get("total", 0) > 0:
        print("  [SKIP] tasks already exist")
        return

    today = date.today()
    await _safe_post(
        client,
        f"{BASE_URL}/companies/{COMPANY_ID}/tasks",
        {
            "title": "Verify site attendance devices",
            "assignee_id": MEERA_ID,
            "base_due_date": (today - timedelta(days=5)).isoformat(),
            "stage1_duration_days": 3,
            "stage2_duration_days": 2,
            "stage3_duration_days": 2,
        },
        "Task: Verify site attendance devices (overdue)",
    )
    await _safe_post(
        client,
        f"{BASE_URL}/companies/{COMPANY_ID}/tasks",
        {
            "title": "Submit monthly field report",
            "assignee_id": RAVI_ID,
            "base_due_date": (today + timedelta(days=7)).isoformat(),
            "stage1_duration_days": 2,
        },
        "Task: Submit monthly field report",
    )


async def main() -> None:
    print("=" * 60)
    print("  Punchclock - Development Seed Script")
    print("=" * 60)

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

        await seed_employees(client)
        await seed_thresholds(client)
        holiday_ids = await seed_holidays(client)
        await seed_selections(client, holiday_ids)
        await seed_attendance(client)
        await seed_tasks(client)

    print("\n" + "=" * 60)
    print("  Seeding complete!")
    print("=" * 60)


if __name__ == "__main__":
    asyncio.run(main())
