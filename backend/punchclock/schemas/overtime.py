# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import date

from pydantic import BaseModel, computed_field


class OvertimeBalanceResponse(BaseModel):
    """Overtime bank of one employee. Hours are derived from stored minutes."""

    employee_id: uuid.UUID
    banked_minutes: int
    month_to_date_minutes: int
    month_to_date_period: date | None

    @computed_field  # type: ignore[prop-decorator]
    @property
    def banked_hours(self) -> float:
        return round(self.banked_minutes / 60, 2)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def month_to_date_hours(self) -> float:
        return round(self.month_to_date_minutes / 60, 2)


class CompOffUnitResponse(BaseModel):
    id: uuid.UUID
    employee_id: uuid.UUID
    earned_date: date
    reason: str


class CompOffListResponse(BaseModel):
    items: list[CompOffUnitResponse]
    total: int


class MonthlyResetResponse(BaseModel):
    # None when each balance rolled to its employee's own local month.
    period: date | None
    reset: int
