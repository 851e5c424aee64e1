# ruff: noqa: B008, TC001, TC003
from __future__ import annotations

import uuid
from datetime import date

from fastapi import APIRouter, Depends, Query, status

from punchclock.api.deps import AdminDep, AuthDep, validate_company_scope
from punchclock.db import SessionDep
from punchclock.models.enums import TaskStatus
from punchclock.schemas.task import (
    CreateTaskRequest,
    EscalationScanResponse,
    TaskListResponse,
    TaskResponse,
    UpdateTaskRequest,
)
from punchclock.services import task as task_service
from punchclock.services.escalation import scan_escalations

tasks_router = APIRouter(
    prefix="/companies/{company_id}/tasks",
    tags=["tasks"],
    dependencies=[Depends(validate_company_scope)],
)

escalations_router = APIRouter(
    prefix="/companies/{company_id}/escalations",
    tags=["tasks"],
    dependencies=[Depends(validate_company_scope)],
)


@tasks_router.post("", response_model=TaskResponse, status_code=status.HTTP_201_CREATED)
async def create_task(payload: CreateTaskRequest, session: SessionDep, auth: AuthDep) -> TaskResponse:
    return await task_service.create_task(session, auth, payload)


@tasks_router.get("", response_model=TaskListResponse)
async def list_tasks(
    session: SessionDep,
    auth: AuthDep,
    status_filter: TaskStatus | None = Query(default=None, alias="status"),
    assignee_id: uuid.UUID | None = Query(default=None),
    overdue_only: bool = Query(default=False),
    offset: int = Query(default=0, ge=0),
    limit: int = Query(default=50, ge=1, le=100),
) -> TaskListResponse:
    """List tasks with their computed next due dates."""
    return await task_service.list_tasks(
        session, auth.company_id, status_filter, assignee_id, overdue_only, offset, limit
    )


@tasks_router.get("/{task_id}", response_model=TaskResponse)
async def get_task(
    task_id: uuid.UUID,
    session: SessionDep,
    auth: AuthDep,
    today: date | None = Query(default=None),
) -> TaskResponse:
    """Get a task; ``today`` overrides the reference date for the overdue check."""
    task = await task_service.get_task(session, auth.company_id, task_id)
    return task_service.build_task_response(task, today)


@tasks_router.patch("/{task_id}", response_model=TaskResponse)
async def update_task(
    task_id: uuid.UUID,
    payload: UpdateTaskRequest,
    session: SessionDep,
    auth: AuthDep,
) -> TaskResponse:
    return await task_service.update_task(session, auth, task_id, payload)


@escalations_router.post("/scan", response_model=EscalationScanResponse)
async def trigger_escalation_scan(
    session: SessionDep,
    auth: AdminDep,
    target_date: date | None = Query(default=None),
) -> EscalationScanResponse:
    """Publish escalation notices for every overdue open task (admin only)."""
    result = await scan_escalations(session, target_date, company_id=auth.company_id)
    return EscalationScanResponse(
        target_date=result.target_date,
        scanned=result.scanned,
        overdue=result.overdue,
        notified=result.notified,
    )
