"""Integration tests for the holiday rule API, employee selections, authorization, and audit."""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING

from sqlalchemy import select
from sqlmodel import col

from punchclock.models.audit import AuditLog
from punchclock.models.holiday import FixedHolidaySelection

if TYPE_CHECKING:
    from httpx import AsyncClient
    from sqlalchemy.ext.asyncio import AsyncSession

COMPANY_ID = uuid.uuid4()
USER_ID = uuid.uuid4()
EMPLOYEE_ID = uuid.uuid4()
AUTH_HEADERS = {
    "X-Company-Id": str(COMPANY_ID),
    "X-User-Id": str(USER_ID),
    "X-Role": "admin",
}
EMPLOYEE_HEADERS = {
    "X-Company-Id": str(COMPANY_ID),
    "X-User-Id": str(EMPLOYEE_ID),
    "X-Role": "employee",
}
BASE_URL = f"/companies/{COMPANY_ID}/holidays"
SELECTIONS_URL = f"/companies/{COMPANY_ID}/employees/{EMPLOYEE_ID}/holiday-selections"


async def _create_fixed(
    client: AsyncClient,
    month: int = 1,
    day: int = 26,
    name: str = "Republic Day",
    employee_selectable: bool = False,
) -> dict:
    resp = await client.post(
        f"{BASE_URL}/fixed",
        json={"month": month, "day": day, "name": name, "employee_selectable": employee_selectable},
        headers=AUTH_HEADERS,
    )
    assert resp.status_code == 201
    return resp.json()


# ---------------------------------------------------------------------------
# Fixed holidays
# ---------------------------------------------------------------------------


async def test_create_fixed_holiday(async_client: AsyncClient) -> None:
    data = await _create_fixed(async_client)
    assert data["month"] == 1
    assert data["day"] == 26
    assert data["name"] == "Republic Day"
    assert data["employee_selectable"] is False


async def test_create_fixed_holiday_duplicate_day(async_client: AsyncClient) -> None:
    await _create_fixed(async_client)
    resp = await async_client.post(
        f"{BASE_URL}/fixed",
        json={"month": 1, "day": 26, "name": "Again"},
        headers=AUTH_HEADERS,
    )
    assert resp.status_code == 409


async def test_create_fixed_holiday_invalid_day(async_client: AsyncClient) -> None:
    resp = await async_client.post(
        f"{BASE_URL}/fixed",
        json={"month": 4, "day": 31, "name": "Nope"},
        headers=AUTH_HEADERS,
    )
    assert resp.status_code == 422


async def test_create_fixed_holiday_allows_leap_day(async_client: AsyncClient) -> None:
    data = await _create_fixed(async_client, month=2, day=29, name="Leap Day")
    assert data["day"] == 29


async def test_list_fixed_holidays_sorted(async_client: AsyncClient) -> None:
    await _create_fixed(async_client, month=10, day=2, name="Gandhi Jayanti")
    await _create_fixed(async_client, month=1, day=1, name="New Year")

    resp = await async_client.get(f"{BASE_URL}/fixed", headers=EMPLOYEE_HEADERS)
    assert resp.status_code == 200
    assert [h["name"] for h in resp.json()] == ["New Year", "Gandhi Jayanti"]


async def test_create_fixed_holiday_requires_admin(async_client: AsyncClient) -> None:
    resp = await async_client.post(
        f"{BASE_URL}/fixed",
        json={"month": 1, "day": 1, "name": "New Year"},
        headers=EMPLOYEE_HEADERS,
    )
    assert resp.status_code == 403


async def test_create_fixed_holiday_writes_audit(async_client: AsyncClient, db_session: AsyncSession) -> None:
    data = await _create_fixed(async_client)

    result = await db_session.execute(
        select(AuditLog).where(
            col(AuditLog.entity_type) == "FIXED_HOLIDAY",
            col(AuditLog.action) == "CREATE",
            col(AuditLog.company_id) == COMPANY_ID,
        )
    )
    audit = result.scalar_one()
    assert audit.actor_id == USER_ID
    assert str(audit.entity_id) == data["id"]
    assert audit.before_json is None
    assert audit.after_json["name"] == "Republic Day"


async def test_delete_fixed_holiday_removes_selections(async_client: AsyncClient, db_session: AsyncSession) -> None:
    holiday = await _create_fixed(async_client, month=3, day=14, name="Holi", employee_selectable=True)
    resp = await async_client.post(
        SELECTIONS_URL, json={"holiday_id": holiday["id"], "year": 2026}, headers=EMPLOYEE_HEADERS
    )
    assert resp.status_code == 201

    resp = await async_client.delete(f"{BASE_URL}/fixed/{holiday['id']}", headers=AUTH_HEADERS)
    assert resp.status_code == 204

    result = await db_session.execute(select(FixedHolidaySelection))
    assert result.scalars().all() == []

    resp = await async_client.get(f"{BASE_URL}/fixed", headers=AUTH_HEADERS)
    assert resp.json() == []


async def test_delete_fixed_holiday_not_found(async_client: AsyncClient) -> None:
    resp = await async_client.delete(f"{BASE_URL}/fixed/{uuid.uuid4()}", headers=AUTH_HEADERS)
    assert resp.status_code == 404


# ---------------------------------------------------------------------------
# Recurring rules
# ---------------------------------------------------------------------------


async def test_create_recurring_rule(async_client: AsyncClient) -> None:
    resp = await async_client.post(
        f"{BASE_URL}/recurring",
        json={"role_category": "office", "weekday": 6, "occurrence_index": 3},
        headers=AUTH_HEADERS,
    )
    assert resp.status_code == 201
    data = resp.json()
    assert data["role_category"] == "office"
    assert data["weekday"] == 6
    assert data["occurrence_index"] == 3


async def test_create_recurring_rule_duplicate(async_client: AsyncClient) -> None:
    payload = {"role_category": "office", "weekday": 6, "occurrence_index": 3}
    assert (await async_client.post(f"{BASE_URL}/recurring", json=payload, headers=AUTH_HEADERS)).status_code == 201
    resp = await async_client.post(f"{BASE_URL}/recurring", json=payload, headers=AUTH_HEADERS)
    assert resp.status_code == 409


async def test_create_recurring_rule_rejects_sixth_occurrence(async_client: AsyncClient) -> None:
    resp = await async_client.post(
        f"{BASE_URL}/recurring",
        json={"role_category": "office", "weekday": 6, "occurrence_index": 6},
        headers=AUTH_HEADERS,
    )
    assert resp.status_code == 422


async def test_list_recurring_rules_by_category(async_client: AsyncClient) -> None:
    for category in ("office", "field"):
        resp = await async_client.post(
            f"{BASE_URL}/recurring",
            json={"role_category": category, "weekday": 6, "occurrence_index": 3},
            headers=AUTH_HEADERS,
        )
        assert resp.status_code == 201

    resp = await async_client.get(f"{BASE_URL}/recurring", headers=AUTH_HEADERS)
    assert len(resp.json()) == 2

    resp = await async_client.get(f"{BASE_URL}/recurring", params={"role_category": "field"}, headers=AUTH_HEADERS)
    assert [r["role_category"] for r in resp.json()] == ["field"]


async def test_delete_recurring_rule(async_client: AsyncClient) -> None:
    resp = await async_client.post(
        f"{BASE_URL}/recurring",
        json={"role_category": "site", "weekday": 6, "occurrence_index": 2},
        headers=AUTH_HEADERS,
    )
    rule_id = resp.json()["id"]

    resp = await async_client.delete(f"{BASE_URL}/recurring/{rule_id}", headers=AUTH_HEADERS)
    assert resp.status_code == 204
    resp = await async_client.delete(f"{BASE_URL}/recurring/{rule_id}", headers=AUTH_HEADERS)
    assert resp.status_code == 404


# ---------------------------------------------------------------------------
# Exact-date company holidays
# ---------------------------------------------------------------------------


async def test_create_company_holiday(async_client: AsyncClient) -> None:
    resp = await async_client.post(
        f"{BASE_URL}/dates", json={"date": "2026-03-10", "name": "Foundation Day"}, headers=AUTH_HEADERS
    )
    assert resp.status_code == 201
    data = resp.json()
    assert data["date"] == "2026-03-10"
    assert data["name"] == "Foundation Day"


async def test_create_company_holiday_duplicate(async_client: AsyncClient) -> None:
    payload = {"date": "2026-03-10", "name": "Foundation Day"}
    assert (await async_client.post(f"{BASE_URL}/dates", json=payload, headers=AUTH_HEADERS)).status_code == 201
    resp = await async_client.post(f"{BASE_URL}/dates", json=payload, headers=AUTH_HEADERS)
    assert resp.status_code == 409


async def test_list_company_holidays_by_year(async_client: AsyncClient) -> None:
    for day in ("2025-12-31", "2026-03-10", "2026-08-01"):
        resp = await async_client.post(f"{BASE_URL}/dates", json={"date": day, "name": day}, headers=AUTH_HEADERS)
        assert resp.status_code == 201

    resp = await async_client.get(f"{BASE_URL}/dates", params={"year": 2026}, headers=AUTH_HEADERS)
    assert [h["date"] for h in resp.json()] == ["2026-03-10", "2026-08-01"]


async def test_delete_company_holiday_writes_audit(async_client: AsyncClient, db_session: AsyncSession) -> None:
    resp = await async_client.post(
        f"{BASE_URL}/dates", json={"date": "2026-03-10", "name": "Foundation Day"}, headers=AUTH_HEADERS
    )
    holiday_id = resp.json()["id"]

    resp = await async_client.delete(f"{BASE_URL}/dates/{holiday_id}", headers=AUTH_HEADERS)
    assert resp.status_code == 204

    result = await db_session.execute(
        select(AuditLog).where(col(AuditLog.entity_type) == "COMPANY_HOLIDAY", col(AuditLog.action) == "DELETE")
    )
    audit = result.scalar_one()
    assert audit.before_json["name"] == "Foundation Day"
    assert audit.after_json is None


# ---------------------------------------------------------------------------
# Calendar
# ---------------------------------------------------------------------------


async def test_calendar_combines_all_rules(async_client: AsyncClient) -> None:
    await _create_fixed(async_client)
    await async_client.post(
        f"{BASE_URL}/recurring",
        json={"role_category": "office", "weekday": 6, "occurrence_index": 3},
        headers=AUTH_HEADERS,
    )
    await async_client.post(
        f"{BASE_URL}/dates", json={"date": "2026-03-10", "name": "Foundation Day"}, headers=AUTH_HEADERS
    )

    resp = await async_client.get(BASE_URL, headers=EMPLOYEE_HEADERS)
    assert resp.status_code == 200
    data = resp.json()
    assert len(data["fixed"]) == 1
    assert len(data["recurring"]) == 1
    assert len(data["dates"]) == 1


async def test_calendar_company_mismatch(async_client: AsyncClient) -> None:
    resp = await async_client.get(f"/companies/{uuid.uuid4()}/holidays", headers=AUTH_HEADERS)
    assert resp.status_code == 403


# ---------------------------------------------------------------------------
# Selections
# ---------------------------------------------------------------------------


async def test_select_holiday(async_client: AsyncClient) -> None:
    holiday = await _create_fixed(async_client, month=3, day=14, name="Holi", employee_selectable=True)

    resp = await async_client.post(
        SELECTIONS_URL, json={"holiday_id": holiday["id"], "year": 2026}, headers=EMPLOYEE_HEADERS
    )
    assert resp.status_code == 201
    data = resp.json()
    assert data["employee_id"] == str(EMPLOYEE_ID)
    assert data["year"] == 2026

    resp = await async_client.get(SELECTIONS_URL, params={"year": 2026}, headers=EMPLOYEE_HEADERS)
    assert [s["holiday_id"] for s in resp.json()] == [holiday["id"]]


async def test_select_holiday_twice_conflicts(async_client: AsyncClient) -> None:
    holiday = await _create_fixed(async_client, month=3, day=14, name="Holi", employee_selectable=True)
    payload = {"holiday_id": holiday["id"], "year": 2026}

    assert (await async_client.post(SELECTIONS_URL, json=payload, headers=EMPLOYEE_HEADERS)).status_code == 201
    resp = await async_client.post(SELECTIONS_URL, json=payload, headers=EMPLOYEE_HEADERS)
    assert resp.status_code == 409

    # Another year is a separate choice.
    payload["year"] = 2027
    assert (await async_client.post(SELECTIONS_URL, json=payload, headers=EMPLOYEE_HEADERS)).status_code == 201


async def test_select_non_selectable_holiday(async_client: AsyncClient) -> None:
    holiday = await _create_fixed(async_client)
    resp = await async_client.post(
        SELECTIONS_URL, json={"holiday_id": holiday["id"], "year": 2026}, headers=EMPLOYEE_HEADERS
    )
    assert resp.status_code == 400


async def test_select_unknown_holiday(async_client: AsyncClient) -> None:
    resp = await async_client.post(
        SELECTIONS_URL, json={"holiday_id": str(uuid.uuid4()), "year": 2026}, headers=EMPLOYEE_HEADERS
    )
    assert resp.status_code == 404


async def test_select_for_someone_else_forbidden(async_client: AsyncClient) -> None:
    holiday = await _create_fixed(async_client, month=3, day=14, name="Holi", employee_selectable=True)
    other_headers = {**EMPLOYEE_HEADERS, "X-User-Id": str(uuid.uuid4())}

    resp = await async_client.post(
        SELECTIONS_URL, json={"holiday_id": holiday["id"], "year": 2026}, headers=other_headers
    )
    assert resp.status_code == 403


async def test_admin_selects_on_behalf(async_client: AsyncClient) -> None:
    holiday = await _create_fixed(async_client, month=3, day=14, name="Holi", employee_selectable=True)
    resp = await async_client.post(
        SELECTIONS_URL, json={"holiday_id": holiday["id"], "year": 2026}, headers=AUTH_HEADERS
    )
    assert resp.status_code == 201
