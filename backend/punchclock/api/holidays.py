# ruff: noqa: B008, TC001, TC003
from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, Query, status

from punchclock.api.deps import AdminDep, AuthDep, validate_company_scope
from punchclock.db import SessionDep
from punchclock.models.enums import RoleCategory
from punchclock.schemas.holiday import (
    CompanyHolidayResponse,
    CreateCompanyHolidayRequest,
    CreateFixedHolidayRequest,
    CreateHolidaySelectionRequest,
    CreateRecurringRuleRequest,
    FixedHolidayResponse,
    HolidayCalendarResponse,
    HolidaySelectionResponse,
    RecurringRuleResponse,
)
from punchclock.services import holiday as holiday_service

holidays_router = APIRouter(
    prefix="/companies/{company_id}/holidays",
    tags=["holidays"],
    dependencies=[Depends(validate_company_scope)],
)

holiday_selection_router = APIRouter(
    prefix="/companies/{company_id}/employees/{employee_id}/holiday-selections",
    tags=["holidays"],
    dependencies=[Depends(validate_company_scope)],
)


@holidays_router.get("", response_model=HolidayCalendarResponse)
async def get_calendar(
    session: SessionDep,
    auth: AuthDep,
    year: int | None = Query(default=None),
) -> HolidayCalendarResponse:
    """Every holiday rule of the company; ``year`` narrows the exact-date holidays."""
    return await holiday_service.get_calendar(session, auth.company_id, year)


# ---------------------------------------------------------------------------
# Fixed holidays
# ---------------------------------------------------------------------------


@holidays_router.post("/fixed", response_model=FixedHolidayResponse, status_code=status.HTTP_201_CREATED)
async def create_fixed_holiday(
    payload: CreateFixedHolidayRequest,
    session: SessionDep,
    auth: AdminDep,
) -> FixedHolidayResponse:
    """Create a fixed month/day holiday (admin only)."""
    return await holiday_service.create_fixed_holiday(session, auth, payload)


@holidays_router.get("/fixed", response_model=list[FixedHolidayResponse])
async def list_fixed_holidays(session: SessionDep, auth: AuthDep) -> list[FixedHolidayResponse]:
    return await holiday_service.list_fixed_holidays(session, auth.company_id)


@holidays_router.delete("/fixed/{holiday_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_fixed_holiday(holiday_id: uuid.UUID, session: SessionDep, auth: AdminDep) -> None:
    """Delete a fixed holiday and its selections (admin only)."""
    await holiday_service.delete_fixed_holiday(session, auth, holiday_id)


# ---------------------------------------------------------------------------
# Recurring rules
# ---------------------------------------------------------------------------


@holidays_router.post("/recurring", response_model=RecurringRuleResponse, status_code=status.HTTP_201_CREATED)
async def create_recurring_rule(
    payload: CreateRecurringRuleRequest,
    session: SessionDep,
    auth: AdminDep,
) -> RecurringRuleResponse:
    """Create an Nth-weekday-of-month rule for a role category (admin only)."""
    return await holiday_service.create_recurring_rule(session, auth, payload)


@holidays_router.get("/recurring", response_model=list[RecurringRuleResponse])
async def list_recurring_rules(
    session: SessionDep,
    auth: AuthDep,
    role_category: RoleCategory | None = Query(default=None),
) -> list[RecurringRuleResponse]:
    return await holiday_service.list_recurring_rules(session, auth.company_id, role_category)


@holidays_router.delete("/recurring/{rule_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_recurring_rule(rule_id: uuid.UUID, session: SessionDep, auth: AdminDep) -> None:
    await holiday_service.delete_recurring_rule(session, auth, rule_id)


# ---------------------------------------------------------------------------
# Exact-date company holidays
# ---------------------------------------------------------------------------


@holidays_router.post("/dates", response_model=CompanyHolidayResponse, status_code=status.HTTP_201_CREATED)
async def create_company_holiday(
    payload: CreateCompanyHolidayRequest,
    session: SessionDep,
    auth: AdminDep,
) -> CompanyHolidayResponse:
    """Create a company holiday (admin only)."""
    return await holiday_service.create_company_holiday(session, auth, payload)


@holidays_router.get("/dates", response_model=list[CompanyHolidayResponse])
async def list_company_holidays(
    session: SessionDep,
    auth: AuthDep,
    year: int | None = Query(default=None),
) -> list[CompanyHolidayResponse]:
    """List company holidays with optional year filter."""
    return await holiday_service.list_company_holidays(session, auth.company_id, year)


@holidays_router.delete("/dates/{holiday_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_company_holiday(holiday_id: uuid.UUID, session: SessionDep, auth: AdminDep) -> None:
    """Delete a company holiday (admin only)."""
    await holiday_service.delete_company_holiday(session, auth, holiday_id)


# ---------------------------------------------------------------------------
# Employee selections
# ---------------------------------------------------------------------------


@holiday_selection_router.post("", response_model=HolidaySelectionResponse, status_code=status.HTTP_201_CREATED)
async def select_holiday(
    employee_id: uuid.UUID,
    payload: CreateHolidaySelectionRequest,
    session: SessionDep,
    auth: AuthDep,
) -> HolidaySelectionResponse:
    """Opt into a selectable fixed holiday for one year."""
    return await holiday_service.select_holiday(session, auth, employee_id, payload)


@holiday_selection_router.get("", response_model=list[HolidaySelectionResponse])
async def list_selections(
    employee_id: uuid.UUID,
    session: SessionDep,
    auth: AuthDep,
    year: int | None = Query(default=None),
) -> list[HolidaySelectionResponse]:
    return await holiday_service.list_selections(session, auth.company_id, employee_id, year)
