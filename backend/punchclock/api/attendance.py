# ruff: noqa: B008, TC001, TC003
from __future__ import annotations

import uuid
from datetime import date, datetime

from fastapi import APIRouter, Depends, Query, status

from punchclock.api.deps import AuthDep, validate_company_scope
from punchclock.db import SessionDep
from punchclock.schemas.attendance import AttendanceEventListResponse, RecordEventRequest, RecordEventResponse
from punchclock.schemas.classification import ClassificationResponse, DayClassificationResponse
from punchclock.services import attendance as attendance_service
from punchclock.services.classifier import classify_range

attendance_router = APIRouter(
    prefix="/companies/{company_id}/employees/{employee_id}/attendance-events",
    tags=["attendance"],
    dependencies=[Depends(validate_company_scope)],
)

classification_router = APIRouter(
    prefix="/companies/{company_id}/employees/{employee_id}/day-classifications",
    tags=["attendance"],
    dependencies=[Depends(validate_company_scope)],
)


@attendance_router.post("", response_model=RecordEventResponse, status_code=status.HTTP_201_CREATED)
async def record_event(
    employee_id: uuid.UUID,
    payload: RecordEventRequest,
    session: SessionDep,
    auth: AuthDep,
) -> RecordEventResponse:
    """Record an attendance event. A check-out also settles overtime for the session."""
    return await attendance_service.record_event(session, auth, employee_id, payload)


@attendance_router.get("", response_model=AttendanceEventListResponse)
async def list_events(
    employee_id: uuid.UUID,
    session: SessionDep,
    auth: AuthDep,
    start_at: datetime | None = Query(default=None),
    end_at: datetime | None = Query(default=None),
    offset: int = Query(default=0, ge=0),
    limit: int = Query(default=100, ge=1, le=500),
) -> AttendanceEventListResponse:
    """List an employee's attendance events in time order."""
    return await attendance_service.list_events(
        session, auth.company_id, employee_id, start_at, end_at, offset, limit
    )


@classification_router.get("", response_model=ClassificationResponse)
async def get_day_classifications(
    employee_id: uuid.UUID,
    session: SessionDep,
    auth: AuthDep,
    start_date: date = Query(),
    end_date: date = Query(),
) -> ClassificationResponse:
    """Classify every day in ``[start_date, end_date]`` for payroll."""
    summary = await classify_range(session, auth.company_id, employee_id, start_date, end_date)
    return ClassificationResponse(
        employee_id=summary.employee_id,
        role_category=summary.role_category,
        start_date=summary.start_date,
        end_date=summary.end_date,
        days=[DayClassificationResponse(date=d.date, category=d.category) for d in summary.days],
        counts=summary.counts,
        paid_days=summary.paid_days,
        monthly_target_hours=summary.monthly_target_hours,
    )
