# ruff: noqa: TC003
from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from punchclock.models.enums import RoleCategory, Weekday


class UpsertThresholdsRequest(BaseModel):
    """Thresholds for one role category."""

    standard_daily_hours_max: float = Field(gt=0, le=24)
    monthly_floating_leave_allowance: int = Field(default=0, ge=0, le=31)
    monthly_target_hours: float | None = Field(default=None, ge=0)
    week_off_days: list[Weekday] = Field(default_factory=lambda: [Weekday.SUNDAY])


class ThresholdsResponse(BaseModel):
    role_category: RoleCategory
    standard_daily_hours_max: float
    monthly_floating_leave_allowance: int
    monthly_target_hours: float | None
    week_off_days: list[Weekday]
    updated_at: datetime | None = None


class ThresholdsListResponse(BaseModel):
    items: list[ThresholdsResponse]
    total: int
