# ruff: noqa: TC003
from __future__ import annotations

import datetime
import uuid

import sqlalchemy as sa
from sqlmodel import Field

from punchclock.models.base import CompanyScoped


class FixedHoliday(CompanyScoped, table=True):
    """Holiday that recurs every year on the same month and day.

    When ``employee_selectable`` is set the holiday belongs to an opt-in pool
    and only applies to employees with a matching ``FixedHolidaySelection``.
    """

    __tablename__ = "fixed_holiday"
    __table_args__ = (sa.UniqueConstraint("company_id", "month", "day", name="uq_fixed_holiday_month_day"),)

    month: int = Field(ge=1, le=12)
    day: int = Field(ge=1, le=31)
    name: str = Field(max_length=255)
    employee_selectable: bool = Field(default=False)


class FixedHolidaySelection(CompanyScoped, table=True):
    """An employee's opt-in to a selectable fixed holiday for one year."""

    __tablename__ = "fixed_holiday_selection"
    __table_args__ = (
        sa.UniqueConstraint("employee_id", "holiday_id", "year", name="uq_holiday_selection"),
    )

    employee_id: uuid.UUID = Field(index=True)
    holiday_id: uuid.UUID = Field(
        sa_column=sa.Column(sa.Uuid, sa.ForeignKey("fixed_holiday.id", ondelete="CASCADE"), nullable=False),
    )
    year: int


class RecurringHolidayRule(CompanyScoped, table=True):
    """Nth-weekday-of-month holiday for a role category, e.g. the 3rd Saturday for office staff."""

    __tablename__ = "recurring_holiday_rule"
    __table_args__ = (
        sa.UniqueConstraint(
            "company_id", "role_category", "weekday", "occurrence_index", name="uq_recurring_rule"
        ),
    )

    role_category: str = Field(max_length=20)
    weekday: int = Field(ge=0, le=6)
    occurrence_index: int = Field(ge=1, le=5)


class CompanyHoliday(CompanyScoped, table=True):
    """Organization-level holiday on one exact date."""

    __tablename__ = "company_holiday"
    __table_args__ = (sa.UniqueConstraint("company_id", "date", name="uq_holiday_company_date"),)

    date: datetime.date
    name: str = Field(max_length=255)
