# ruff: noqa: B008, TC001, TC003
"""Overtime bank, comp-off units, and the monthly reset trigger."""

from __future__ import annotations

import uuid
from datetime import date

from fastapi import APIRouter, Depends, Query

from punchclock.api.deps import AdminDep, AuthDep, validate_company_scope
from punchclock.db import SessionDep
from punchclock.schemas.overtime import (
    CompOffListResponse,
    CompOffUnitResponse,
    MonthlyResetResponse,
    OvertimeBalanceResponse,
)
from punchclock.services import overtime as overtime_service

employee_overtime_router = APIRouter(
    prefix="/companies/{company_id}/employees/{employee_id}",
    tags=["overtime"],
    dependencies=[Depends(validate_company_scope)],
)

overtime_admin_router = APIRouter(
    prefix="/companies/{company_id}/overtime",
    tags=["overtime"],
    dependencies=[Depends(validate_company_scope)],
)


@employee_overtime_router.get("/overtime", response_model=OvertimeBalanceResponse)
async def get_overtime_balance(
    employee_id: uuid.UUID,
    session: SessionDep,
    auth: AuthDep,
) -> OvertimeBalanceResponse:
    """Current overtime bank. An employee with no check-outs yet has an empty bank."""
    balance = await overtime_service.get_balance(session, auth.company_id, employee_id)
    if balance is None:
        return OvertimeBalanceResponse(
            employee_id=employee_id,
            banked_minutes=0,
            month_to_date_minutes=0,
            month_to_date_period=None,
        )
    return OvertimeBalanceResponse(
        employee_id=balance.employee_id,
        banked_minutes=balance.banked_minutes,
        month_to_date_minutes=balance.month_to_date_minutes,
        month_to_date_period=balance.month_to_date_period,
    )


@employee_overtime_router.get("/comp-offs", response_model=CompOffListResponse)
async def list_comp_offs(
    employee_id: uuid.UUID,
    session: SessionDep,
    auth: AuthDep,
    offset: int = Query(default=0, ge=0),
    limit: int = Query(default=50, ge=1, le=100),
) -> CompOffListResponse:
    """Comp-off units earned by converting banked overtime."""
    units, total = await overtime_service.list_comp_off_units(session, auth.company_id, employee_id, offset, limit)
    return CompOffListResponse(
        items=[
            CompOffUnitResponse(id=u.id, employee_id=u.employee_id, earned_date=u.earned_date, reason=u.reason)
            for u in units
        ],
        total=total,
    )


@overtime_admin_router.post("/monthly-reset", response_model=MonthlyResetResponse)
async def trigger_monthly_reset(
    session: SessionDep,
    auth: AdminDep,
    as_of: date | None = Query(default=None),
) -> MonthlyResetResponse:
    """Manually zero month-to-date overtime (admin only).

    Rolls to the month of ``as_of`` when given, otherwise to each employee's
    current local month.
    """
    result = await overtime_service.reset_monthly_overtime(session, as_of, company_id=auth.company_id)
    return MonthlyResetResponse(period=result.period, reset=result.reset)
