"""Integration tests for the task API and the escalation scan endpoint."""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING

from sqlalchemy import select
from sqlmodel import col

from punchclock.models.audit import AuditLog
from punchclock.services.notifications import TaskEscalationDue

if TYPE_CHECKING:
    from httpx import AsyncClient
    from sqlalchemy.ext.asyncio import AsyncSession

    from punchclock.services.notifications import InMemoryNotificationPublisher

COMPANY_ID = uuid.uuid4()
USER_ID = uuid.uuid4()
ASSIGNEE_ID = uuid.uuid4()
AUTH_HEADERS = {
    "X-Company-Id": str(COMPANY_ID),
    "X-User-Id": str(USER_ID),
    "X-Role": "admin",
}
EMPLOYEE_HEADERS = {
    "X-Company-Id": str(COMPANY_ID),
    "X-User-Id": str(USER_ID),
    "X-Role": "employee",
}
TASKS_URL = f"/companies/{COMPANY_ID}/tasks"
SCAN_URL = f"/companies/{COMPANY_ID}/escalations/scan"


def _task_payload(**overrides: object) -> dict:
    payload: dict = {
        "title": "Replace site camera",
        "assignee_id": str(ASSIGNEE_ID),
        "base_due_date": "2026-01-10",
        "stage1_duration_days": 3,
        "stage2_duration_days": 2,
        "stage3_duration_days": 4,
    }
    payload.update(overrides)
    return payload


async def _create_task(client: AsyncClient, **overrides: object) -> dict:
    resp = await client.post(TASKS_URL, json=_task_payload(**overrides), headers=EMPLOYEE_HEADERS)
    assert resp.status_code == 201
    return resp.json()


# ---------------------------------------------------------------------------
# Create / get
# ---------------------------------------------------------------------------


async def test_create_task(async_client: AsyncClient) -> None:
    data = await _create_task(async_client)
    assert data["title"] == "Replace site camera"
    assert data["status"] == "TODO"
    assert data["escalation_stage"] == "NONE"
    assert data["next_due_date"] == "2026-01-13"
    assert data["next_due_display"] == "13 Jan, 2026"


async def test_create_task_writes_audit(async_client: AsyncClient, db_session: AsyncSession) -> None:
    data = await _create_task(async_client)

    result = await db_session.execute(
        select(AuditLog).where(
            col(AuditLog.entity_type) == "TASK",
            col(AuditLog.action) == "CREATE",
        )
    )
    audit = result.scalar_one()
    assert str(audit.entity_id) == data["id"]
    assert audit.actor_id == USER_ID


async def test_create_task_rejects_negative_duration(async_client: AsyncClient) -> None:
    resp = await async_client.post(TASKS_URL, json=_task_payload(stage1_duration_days=-1), headers=AUTH_HEADERS)
    assert resp.status_code == 422


async def test_get_task_with_reference_date(async_client: AsyncClient) -> None:
    data = await _create_task(async_client)

    resp = await async_client.get(f"{TASKS_URL}/{data['id']}", params={"today": "2026-01-15"}, headers=AUTH_HEADERS)
    assert resp.status_code == 200
    body = resp.json()
    assert body["next_due_date"] == "2026-01-13"
    assert body["is_overdue"] is True

    resp = await async_client.get(f"{TASKS_URL}/{data['id']}", params={"today": "2026-01-12"}, headers=AUTH_HEADERS)
    assert resp.json()["is_overdue"] is False


async def test_get_task_not_found(async_client: AsyncClient) -> None:
    resp = await async_client.get(f"{TASKS_URL}/{uuid.uuid4()}", headers=AUTH_HEADERS)
    assert resp.status_code == 404


async def test_task_without_due_date(async_client: AsyncClient) -> None:
    data = await _create_task(async_client, base_due_date=None)
    assert data["next_due_date"] is None
    assert data["next_due_display"] == "none"
    assert data["is_overdue"] is False


# ---------------------------------------------------------------------------
# Update
# ---------------------------------------------------------------------------


async def test_advance_stage_moves_due_date(async_client: AsyncClient) -> None:
    data = await _create_task(async_client)

    resp = await async_client.patch(
        f"{TASKS_URL}/{data['id']}", json={"escalation_stage": "STAGE1"}, headers=AUTH_HEADERS
    )
    assert resp.status_code == 200
    assert resp.json()["next_due_date"] == "2026-01-15"

    resp = await async_client.patch(
        f"{TASKS_URL}/{data['id']}", json={"escalation_stage": "STAGE2"}, headers=AUTH_HEADERS
    )
    assert resp.json()["next_due_date"] == "2026-01-19"


async def test_clearing_duration_falls_back_to_base(async_client: AsyncClient) -> None:
    data = await _create_task(async_client)

    resp = await async_client.patch(
        f"{TASKS_URL}/{data['id']}",
        json={"escalation_stage": "STAGE1", "stage2_duration_days": None},
        headers=AUTH_HEADERS,
    )
    body = resp.json()
    assert body["stage2_duration_days"] is None
    assert body["next_due_date"] == "2026-01-10"


async def test_done_task_not_overdue(async_client: AsyncClient) -> None:
    data = await _create_task(async_client)

    resp = await async_client.patch(f"{TASKS_URL}/{data['id']}", json={"status": "DONE"}, headers=AUTH_HEADERS)
    body = resp.json()
    assert body["status"] == "DONE"
    assert body["is_overdue"] is False
    # Untouched fields stay as they were.
    assert body["stage1_duration_days"] == 3


async def test_update_writes_audit_with_before(async_client: AsyncClient, db_session: AsyncSession) -> None:
    data = await _create_task(async_client)
    await async_client.patch(f"{TASKS_URL}/{data['id']}", json={"status": "IN_PROGRESS"}, headers=AUTH_HEADERS)

    result = await db_session.execute(
        select(AuditLog).where(col(AuditLog.entity_type) == "TASK", col(AuditLog.action) == "UPDATE")
    )
    audit = result.scalar_one()
    assert audit.before_json["status"] == "TODO"
    assert audit.after_json["status"] == "IN_PROGRESS"


# ---------------------------------------------------------------------------
# List
# ---------------------------------------------------------------------------


async def test_list_tasks_filters(async_client: AsyncClient) -> None:
    first = await _create_task(async_client)
    await _create_task(async_client, title="Audit payroll", assignee_id=str(uuid.uuid4()))
    await async_client.patch(f"{TASKS_URL}/{first['id']}", json={"status": "DONE"}, headers=AUTH_HEADERS)

    resp = await async_client.get(TASKS_URL, headers=AUTH_HEADERS)
    assert resp.json()["total"] == 2

    resp = await async_client.get(TASKS_URL, params={"status": "DONE"}, headers=AUTH_HEADERS)
    data = resp.json()
    assert data["total"] == 1
    assert data["items"][0]["id"] == first["id"]

    resp = await async_client.get(TASKS_URL, params={"assignee_id": str(ASSIGNEE_ID)}, headers=AUTH_HEADERS)
    assert resp.json()["total"] == 1


async def test_list_tasks_overdue_only(async_client: AsyncClient) -> None:
    await _create_task(async_client)
    await _create_task(async_client, title="Far future", base_due_date="2999-01-01")

    resp = await async_client.get(TASKS_URL, params={"overdue_only": True}, headers=AUTH_HEADERS)
    data = resp.json()
    assert data["total"] == 1
    assert data["items"][0]["title"] == "Replace site camera"


async def test_list_tasks_overdue_only_pages_after_filtering(async_client: AsyncClient) -> None:
    await _create_task(async_client, title="Far future", base_due_date="2999-01-01")
    for title in ("First", "Second", "Third"):
        await _create_task(async_client, title=title)

    resp = await async_client.get(
        TASKS_URL, params={"overdue_only": True, "offset": 1, "limit": 1}, headers=AUTH_HEADERS
    )
    data = resp.json()
    assert data["total"] == 3
    assert [t["title"] for t in data["items"]] == ["Second"]


async def test_list_tasks_company_mismatch(async_client: AsyncClient) -> None:
    resp = await async_client.get(f"/companies/{uuid.uuid4()}/tasks", headers=AUTH_HEADERS)
    assert resp.status_code == 403


# ---------------------------------------------------------------------------
# Escalation scan
# ---------------------------------------------------------------------------


async def test_scan_requires_admin(async_client: AsyncClient) -> None:
    resp = await async_client.post(SCAN_URL, params={"target_date": "2026-01-15"}, headers=EMPLOYEE_HEADERS)
    assert resp.status_code == 403


async def test_scan_publishes_overdue(
    async_client: AsyncClient,
    notifications: InMemoryNotificationPublisher,
) -> None:
    data = await _create_task(async_client)
    await _create_task(async_client, title="Later", base_due_date="2026-02-01")

    resp = await async_client.post(SCAN_URL, params={"target_date": "2026-01-15"}, headers=AUTH_HEADERS)
    assert resp.status_code == 200
    body = resp.json()
    assert body == {"target_date": "2026-01-15", "scanned": 2, "overdue": 1, "notified": 1}

    [event] = notifications.events
    assert isinstance(event, TaskEscalationDue)
    assert str(event.task_id) == data["id"]
    assert event.due_date.isoformat() == "2026-01-13"

    resp = await async_client.post(SCAN_URL, params={"target_date": "2026-01-16"}, headers=AUTH_HEADERS)
    assert resp.json() == {"target_date": "2026-01-16", "scanned": 2, "overdue": 1, "notified": 0}
    assert len(notifications.events) == 1
