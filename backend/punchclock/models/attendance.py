# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import datetime

import sqlalchemy as sa
from sqlmodel import Field

from punchclock.models.base import CompanyScoped, TimestampMixin


class AttendanceEvent(CompanyScoped, TimestampMixin, table=True):
    """Append-only punch captured for an employee.

    Rows are never edited. A correction is a new row that points at the event
    it supersedes through ``corrects_event_id``.
    """

    __tablename__ = "attendance_event"
    __table_args__ = (sa.Index("ix_attendance_employee_ts", "employee_id", "timestamp"),)

    employee_id: uuid.UUID = Field(index=True)
    timestamp: datetime = Field(sa_type=sa.DateTime(timezone=True))  # ty: ignore[invalid-argument-type]
    kind: str = Field(max_length=20)
    location_label: str | None = Field(default=None, max_length=255)
    corrects_event_id: uuid.UUID | None = Field(default=None, sa_type=sa.Uuid)
    recorded_by: uuid.UUID | None = Field(default=None, sa_type=sa.Uuid)
