"""Integration tests for the attendance event log and the day-classification endpoint."""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING

import pytest

from punchclock.services.employee import EmployeeInfo

if TYPE_CHECKING:
    from httpx import AsyncClient

    from punchclock.services.employee import InMemoryEmployeeService

COMPANY_ID = uuid.uuid4()
EMPLOYEE_ID = uuid.uuid4()
EMPLOYEE_HEADERS = {
    "X-Company-Id": str(COMPANY_ID),
    "X-User-Id": str(EMPLOYEE_ID),
    "X-Role": "employee",
}
ADMIN_HEADERS = {
    "X-Company-Id": str(COMPANY_ID),
    "X-User-Id": str(uuid.uuid4()),
    "X-Role": "admin",
}
EVENTS_URL = f"/companies/{COMPANY_ID}/employees/{EMPLOYEE_ID}/attendance-events"
CLASSIFY_URL = f"/companies/{COMPANY_ID}/employees/{EMPLOYEE_ID}/day-classifications"


@pytest.fixture(autouse=True)
def employee(employee_service: InMemoryEmployeeService) -> EmployeeInfo:
    info = EmployeeInfo(
        id=EMPLOYEE_ID,
        company_id=COMPANY_ID,
        name="Ravi",
        role="security_guard",
        timezone="Asia/Kolkata",
    )
    employee_service.seed(info)
    return info


# ---------------------------------------------------------------------------
# Recording events
# ---------------------------------------------------------------------------


async def test_record_check_in(async_client: AsyncClient) -> None:
    resp = await async_client.post(
        EVENTS_URL,
        json={"kind": "CHECK_IN", "timestamp": "2026-03-02T09:00:00+05:30", "location_label": "Gate 2"},
        headers=EMPLOYEE_HEADERS,
    )
    assert resp.status_code == 201
    data = resp.json()
    assert data["event"]["kind"] == "CHECK_IN"
    assert data["event"]["location_label"] == "Gate 2"
    assert data["event"]["timestamp"].startswith("2026-03-02T03:30:00")
    assert data["overtime"] is None


async def test_record_requires_offset(async_client: AsyncClient) -> None:
    resp = await async_client.post(
        EVENTS_URL, json={"kind": "CHECK_IN", "timestamp": "2026-03-02T09:00:00"}, headers=EMPLOYEE_HEADERS
    )
    assert resp.status_code == 422


async def test_record_for_someone_else_forbidden(async_client: AsyncClient) -> None:
    headers = {**EMPLOYEE_HEADERS, "X-User-Id": str(uuid.uuid4())}
    resp = await async_client.post(
        EVENTS_URL, json={"kind": "CHECK_IN", "timestamp": "2026-03-02T09:00:00Z"}, headers=headers
    )
    assert resp.status_code == 403


async def test_admin_records_on_behalf(async_client: AsyncClient) -> None:
    resp = await async_client.post(
        EVENTS_URL, json={"kind": "CHECK_IN", "timestamp": "2026-03-02T09:00:00Z"}, headers=ADMIN_HEADERS
    )
    assert resp.status_code == 201


async def test_record_unknown_employee(async_client: AsyncClient) -> None:
    stranger = uuid.uuid4()
    resp = await async_client.post(
        f"/companies/{COMPANY_ID}/employees/{stranger}/attendance-events",
        json={"kind": "CHECK_IN", "timestamp": "2026-03-02T09:00:00Z"},
        headers=ADMIN_HEADERS,
    )
    assert resp.status_code == 404


# ---------------------------------------------------------------------------
# Listing events
# ---------------------------------------------------------------------------


async def test_list_events_in_time_order(async_client: AsyncClient) -> None:
    for kind, at in (
        ("CHECK_OUT", "2026-03-02T18:00:00Z"),
        ("CHECK_IN", "2026-03-02T09:00:00Z"),
        ("CHECK_IN", "2026-03-03T09:00:00Z"),
    ):
        resp = await async_client.post(EVENTS_URL, json={"kind": kind, "timestamp": at}, headers=EMPLOYEE_HEADERS)
        assert resp.status_code == 201

    resp = await async_client.get(EVENTS_URL, headers=EMPLOYEE_HEADERS)
    data = resp.json()
    assert data["total"] == 3
    assert [e["kind"] for e in data["items"]] == ["CHECK_IN", "CHECK_OUT", "CHECK_IN"]

    resp = await async_client.get(
        EVENTS_URL,
        params={"start_at": "2026-03-03T00:00:00Z", "end_at": "2026-03-04T00:00:00Z"},
        headers=EMPLOYEE_HEADERS,
    )
    assert resp.json()["total"] == 1


# ---------------------------------------------------------------------------
# Day classifications
# ---------------------------------------------------------------------------


async def test_day_classifications(async_client: AsyncClient) -> None:
    await async_client.post(
        EVENTS_URL, json={"kind": "CHECK_IN", "timestamp": "2026-03-02T09:00:00+05:30"}, headers=EMPLOYEE_HEADERS
    )

    resp = await async_client.get(
        CLASSIFY_URL, params={"start_date": "2026-03-01", "end_date": "2026-03-07"}, headers=EMPLOYEE_HEADERS
    )
    assert resp.status_code == 200
    data = resp.json()
    assert data["role_category"] == "field"
    categories = {d["date"]: d["category"] for d in data["days"]}
    assert len(categories) == 7
    assert categories["2026-03-01"] == "WEEK_OFF"
    assert categories["2026-03-02"] == "WORKED"
    assert categories["2026-03-03"] == "UNPAID"


async def test_day_classifications_inverted_range(async_client: AsyncClient) -> None:
    resp = await async_client.get(
        CLASSIFY_URL, params={"start_date": "2026-03-07", "end_date": "2026-03-01"}, headers=EMPLOYEE_HEADERS
    )
    assert resp.status_code == 400


@pytest.mark.parametrize(
    ("week_off_days", "off", "working"),
    [
        # 2026-03-01 is a Sunday, 2026-03-02 a Monday, 2026-03-07 a Saturday.
        ([0], ["2026-03-01"], ["2026-03-02", "2026-03-07"]),
        ([6], ["2026-03-01", "2026-03-07"], ["2026-03-02", "2026-03-06"]),
    ],
)
async def test_week_off_days_count_from_sunday(
    async_client: AsyncClient, week_off_days: list[int], off: list[str], working: list[str]
) -> None:
    resp = await async_client.put(
        f"/companies/{COMPANY_ID}/role-thresholds/field",
        json={
            "standard_daily_hours_max": 8,
            "monthly_floating_leave_allowance": 0,
            "monthly_target_hours": 208,
            "week_off_days": week_off_days,
        },
        headers=ADMIN_HEADERS,
    )
    assert resp.status_code == 200

    resp = await async_client.get(
        CLASSIFY_URL, params={"start_date": "2026-03-01", "end_date": "2026-03-07"}, headers=EMPLOYEE_HEADERS
    )
    categories = {d["date"]: d["category"] for d in resp.json()["days"]}
    for day in off:
        assert categories[day] == "WEEK_OFF"
    for day in working:
        assert categories[day] == "UNPAID"
