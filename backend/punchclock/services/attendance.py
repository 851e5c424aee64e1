from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING

from sqlalchemy import func, select
from sqlmodel import col

from punchclock.exceptions import AppError, NotFoundError
from punchclock.models.attendance import AttendanceEvent
from punchclock.models.base import as_utc
from punchclock.models.enums import EventKind
from punchclock.schemas.attendance import (
    AttendanceEventListResponse,
    AttendanceEventResponse,
    OvertimeOutcomeResponse,
    RecordEventResponse,
)
from punchclock.services.employee import get_employee_service
from punchclock.services.notifications import publish_safely
from punchclock.services.overtime import process_checkout, reverse_corrected_overtime

if TYPE_CHECKING:
    import uuid

    from sqlalchemy.ext.asyncio import AsyncSession

    from punchclock.schemas.attendance import RecordEventRequest
    from punchclock.schemas.auth import AuthContext
    from punchclock.services.notifications import CompOffEarned
    from punchclock.services.overtime import CheckoutOutcome


def _build_event_response(event: AttendanceEvent) -> AttendanceEventResponse:
    return AttendanceEventResponse(
        id=event.id,
        employee_id=event.employee_id,
        timestamp=as_utc(event.timestamp),
        kind=EventKind(event.kind),
        location_label=event.location_label,
        corrects_event_id=event.corrects_event_id,
    )


def _build_outcome_response(outcome: CheckoutOutcome) -> OvertimeOutcomeResponse:
    t = outcome.transition
    return OvertimeOutcomeResponse(
        check_in_event_id=outcome.check_in_event_id,
        session_minutes=t.session_minutes,
        overtime_minutes=t.overtime_minutes,
        comp_off_units_earned=t.comp_off_units,
        banked_minutes=t.banked_minutes,
        month_to_date_minutes=t.month_to_date_minutes,
    )


async def _get_event(
    session: AsyncSession,
    company_id: uuid.UUID,
    employee_id: uuid.UUID,
    event_id: uuid.UUID,
) -> AttendanceEvent:
    result = await session.execute(
        select(AttendanceEvent).where(
            col(AttendanceEvent.id) == event_id,
            col(AttendanceEvent.company_id) == company_id,
            col(AttendanceEvent.employee_id) == employee_id,
        )
    )
    event = result.scalar_one_or_none()
    if event is None:
        raise NotFoundError("Attendance event not found")
    return event


async def record_event(
    session: AsyncSession,
    auth: AuthContext,
    employee_id: uuid.UUID,
    payload: RecordEventRequest,
) -> RecordEventResponse:
    """Append an attendance event; a check-out also runs the overtime transition.

    A correction first takes back the overtime credited through the event it
    replaces and settles the affected check-outs again. The event insert and
    every overtime write commit together. Comp-off notifications are
    published only after the commit.
    """
    if not auth.can_act_for(employee_id):
        raise AppError("Only the employee or an administrator may record events", status_code=403)

    employee = await get_employee_service().get_employee(auth.company_id, employee_id)
    if employee is None:
        raise NotFoundError("Employee not found")

    corrected = None
    if payload.corrects_event_id is not None:
        corrected = await _get_event(session, auth.company_id, employee_id, payload.corrects_event_id)

    event = AttendanceEvent(
        company_id=auth.company_id,
        employee_id=employee_id,
        timestamp=payload.timestamp.astimezone(UTC),
        kind=payload.kind.value,
        location_label=payload.location_label,
        corrects_event_id=payload.corrects_event_id,
        recorded_by=auth.user_id,
    )
    session.add(event)
    await session.flush()

    notifications: list[CompOffEarned] = []
    if corrected is not None:
        for checkout in await reverse_corrected_overtime(session, corrected, event, employee):
            resettled = await process_checkout(session, checkout, employee)
            if resettled is not None and resettled.notification is not None:
                notifications.append(resettled.notification)

    outcome = None
    if payload.kind == EventKind.CHECK_OUT:
        outcome = await process_checkout(session, event, employee)
        if outcome is not None and outcome.notification is not None:
            notifications.append(outcome.notification)

    await session.commit()

    for notification in notifications:
        await publish_safely(notification)

    return RecordEventResponse(
        event=_build_event_response(event),
        overtime=_build_outcome_response(outcome) if outcome is not None else None,
    )


async def list_events(
    session: AsyncSession,
    company_id: uuid.UUID,
    employee_id: uuid.UUID,
    start_at: datetime | None = None,
    end_at: datetime | None = None,
    offset: int = 0,
    limit: int = 100,
) -> AttendanceEventListResponse:
    """List an employee's events in timestamp order, corrections included."""
    base_filter = [
        col(AttendanceEvent.company_id) == company_id,
        col(AttendanceEvent.employee_id) == employee_id,
    ]
    if start_at is not None:
        base_filter.append(col(AttendanceEvent.timestamp) >= as_utc(start_at))
    if end_at is not None:
        base_filter.append(col(AttendanceEvent.timestamp) < as_utc(end_at))

    count_result = await session.execute(select(func.count()).select_from(AttendanceEvent).where(*base_filter))
    total = count_result.scalar_one()

    result = await session.execute(
        select(AttendanceEvent)
        .where(*base_filter)
        .order_by(col(AttendanceEvent.timestamp), col(AttendanceEvent.created_at))
        .offset(offset)
        .limit(limit)
    )
    return AttendanceEventListResponse(
        items=[_build_event_response(e) for e in result.scalars().all()],
        total=total,
    )
