# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import date

from pydantic import BaseModel, Field, model_validator

from punchclock.models.enums import RoleCategory, Weekday

# Longest month per calendar month; Feb 29 is allowed and only applies in leap years.
_MAX_DAY = {1: 31, 2: 29, 3: 31, 4: 30, 5: 31, 6: 30, 7: 31, 8: 31, 9: 30, 10: 31, 11: 30, 12: 31}


class CreateFixedHolidayRequest(BaseModel):
    """Holiday that falls on the same month and day every year."""

    month: int = Field(ge=1, le=12)
    day: int = Field(ge=1, le=31)
    name: str = Field(min_length=1, max_length=255)
    employee_selectable: bool = False

    @model_validator(mode="after")
    def _check_day_in_month(self) -> CreateFixedHolidayRequest:
        if self.day > _MAX_DAY[self.month]:
            raise ValueError(f"Month {self.month} has no day {self.day}")
        return self


class FixedHolidayResponse(BaseModel):
    id: uuid.UUID
    month: int
    day: int
    name: str
    employee_selectable: bool


class CreateRecurringRuleRequest(BaseModel):
    """Nth-weekday-of-month holiday for one role category."""

    role_category: RoleCategory
    weekday: Weekday
    occurrence_index: int = Field(ge=1, le=5)


class RecurringRuleResponse(BaseModel):
    id: uuid.UUID
    role_category: RoleCategory
    weekday: Weekday
    occurrence_index: int


class CreateCompanyHolidayRequest(BaseModel):
    """Organization-level holiday on an exact date."""

    date: date
    name: str = Field(min_length=1, max_length=255)


class CompanyHolidayResponse(BaseModel):
    id: uuid.UUID
    date: date
    name: str


class CreateHolidaySelectionRequest(BaseModel):
    """An employee opting into a selectable fixed holiday for a year."""

    holiday_id: uuid.UUID
    year: int = Field(ge=1970, le=9999)


class HolidaySelectionResponse(BaseModel):
    id: uuid.UUID
    employee_id: uuid.UUID
    holiday_id: uuid.UUID
    year: int


class HolidayCalendarResponse(BaseModel):
    """Every configured holiday for a company."""

    fixed: list[FixedHolidayResponse]
    recurring: list[RecurringRuleResponse]
    dates: list[CompanyHolidayResponse]
