# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import date

from pydantic import BaseModel

from punchclock.models.enums import DayCategory, RoleCategory


class DayClassificationResponse(BaseModel):
    date: date
    category: DayCategory


class ClassificationResponse(BaseModel):
    """Per-day categories for a range, with the counts payroll aggregates."""

    employee_id: uuid.UUID
    role_category: RoleCategory
    start_date: date
    end_date: date
    days: list[DayClassificationResponse]
    counts: dict[DayCategory, int]
    paid_days: int
    monthly_target_hours: float | None = None
