# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from punchclock.models.enums import EventKind


class RecordEventRequest(BaseModel):
    """Request body for appending an attendance event."""

    timestamp: datetime
    kind: EventKind
    location_label: str | None = Field(default=None, max_length=255)
    corrects_event_id: uuid.UUID | None = None

    @field_validator("timestamp")
    @classmethod
    def _require_offset(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            raise ValueError("timestamp must include a UTC offset")
        return value


class AttendanceEventResponse(BaseModel):
    id: uuid.UUID
    employee_id: uuid.UUID
    timestamp: datetime
    kind: EventKind
    location_label: str | None
    corrects_event_id: uuid.UUID | None


class OvertimeOutcomeResponse(BaseModel):
    """Overtime effect of a check-out."""

    check_in_event_id: uuid.UUID
    session_minutes: int
    overtime_minutes: int
    comp_off_units_earned: int
    banked_minutes: int
    month_to_date_minutes: int


class RecordEventResponse(BaseModel):
    event: AttendanceEventResponse
    overtime: OvertimeOutcomeResponse | None = None


class AttendanceEventListResponse(BaseModel):
    items: list[AttendanceEventResponse]
    total: int
