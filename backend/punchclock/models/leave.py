# ruff: noqa: TC003
from __future__ import annotations

import datetime
import uuid

import sqlalchemy as sa
from sqlmodel import Field

from punchclock.models.base import CompanyScoped, TimestampMixin


class LeaveGrant(CompanyScoped, TimestampMixin, table=True):
    """Leave granted by the leave workflow; every date in [start_date, end_date] is a leave day."""

    __tablename__ = "leave_grant"
    __table_args__ = (sa.Index("ix_leave_employee_dates", "employee_id", "start_date", "end_date"),)

    employee_id: uuid.UUID = Field(index=True)
    start_date: datetime.date
    end_date: datetime.date
    leave_type: str = Field(max_length=50)
    status: str = Field(max_length=20)
