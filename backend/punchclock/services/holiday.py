from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import delete, extract, select
from sqlmodel import col

from punchclock.exceptions import AppError, ConflictError, NotFoundError
from punchclock.models.enums import AuditAction, AuditEntityType, RoleCategory, Weekday
from punchclock.models.holiday import CompanyHoliday, FixedHoliday, FixedHolidaySelection, RecurringHolidayRule
from punchclock.schemas.holiday import (
    CompanyHolidayResponse,
    FixedHolidayResponse,
    HolidayCalendarResponse,
    HolidaySelectionResponse,
    RecurringRuleResponse,
)
from punchclock.services.audit import model_to_audit_dict, write_audit_log

if TYPE_CHECKING:
    import uuid

    from sqlalchemy.ext.asyncio import AsyncSession

    from punchclock.schemas.auth import AuthContext
    from punchclock.schemas.holiday import (
        CreateCompanyHolidayRequest,
        CreateFixedHolidayRequest,
        CreateHolidaySelectionRequest,
        CreateRecurringRuleRequest,
    )


def _build_fixed_response(holiday: FixedHoliday) -> FixedHolidayResponse:
    return FixedHolidayResponse(
        id=holiday.id,
        month=holiday.month,
        day=holiday.day,
        name=holiday.name,
        employee_selectable=holiday.employee_selectable,
    )


def _build_recurring_response(rule: RecurringHolidayRule) -> RecurringRuleResponse:
    return RecurringRuleResponse(
        id=rule.id,
        role_category=RoleCategory(rule.role_category),
        weekday=Weekday(rule.weekday),
        occurrence_index=rule.occurrence_index,
    )


def _build_company_holiday_response(holiday: CompanyHoliday) -> CompanyHolidayResponse:
    return CompanyHolidayResponse(id=holiday.id, date=holiday.date, name=holiday.name)


# ---------------------------------------------------------------------------
# Fixed (same month/day every year)
# ---------------------------------------------------------------------------


async def create_fixed_holiday(
    session: AsyncSession,
    auth: AuthContext,
    payload: CreateFixedHolidayRequest,
) -> FixedHolidayResponse:
    """Create a fixed holiday. One per month/day per company."""
    existing = await session.execute(
        select(FixedHoliday.id).where(
            col(FixedHoliday.company_id) == auth.company_id,
            col(FixedHoliday.month) == payload.month,
            col(FixedHoliday.day) == payload.day,
        )
    )
    if existing.scalar_one_or_none() is not None:
        raise ConflictError(f"A fixed holiday already exists on {payload.month:02d}-{payload.day:02d}")

    holiday = FixedHoliday(
        company_id=auth.company_id,
        month=payload.month,
        day=payload.day,
        name=payload.name,
        employee_selectable=payload.employee_selectable,
    )
    session.add(holiday)
    await session.flush()

    write_audit_log(
        session,
        company_id=auth.company_id,
        actor_id=auth.user_id,
        entity_type=AuditEntityType.FIXED_HOLIDAY,
        entity_id=holiday.id,
        action=AuditAction.CREATE,
        after_json=model_to_audit_dict(holiday),
    )

    await session.commit()
    return _build_fixed_response(holiday)


async def get_fixed_holiday(
    session: AsyncSession,
    company_id: uuid.UUID,
    holiday_id: uuid.UUID,
) -> FixedHoliday:
    """Get a single fixed holiday or raise 404."""
    result = await session.execute(
        select(FixedHoliday).where(
            col(FixedHoliday.id) == holiday_id,
            col(FixedHoliday.company_id) == company_id,
        )
    )
    holiday = result.scalar_one_or_none()
    if holiday is None:
        raise NotFoundError("Fixed holiday not found")
    return holiday


async def list_fixed_holidays(session: AsyncSession, company_id: uuid.UUID) -> list[FixedHolidayResponse]:
    result = await session.execute(
        select(FixedHoliday)
        .where(col(FixedHoliday.company_id) == company_id)
        .order_by(col(FixedHoliday.month), col(FixedHoliday.day))
    )
    return [_build_fixed_response(h) for h in result.scalars().all()]


async def delete_fixed_holiday(
    session: AsyncSession,
    auth: AuthContext,
    holiday_id: uuid.UUID,
) -> None:
    """Delete a fixed holiday together with every employee selection of it."""
    holiday = await get_fixed_holiday(session, auth.company_id, holiday_id)

    write_audit_log(
        session,
        company_id=auth.company_id,
        actor_id=auth.user_id,
        entity_type=AuditEntityType.FIXED_HOLIDAY,
        entity_id=holiday.id,
        action=AuditAction.DELETE,
        before_json=model_to_audit_dict(holiday),
    )

    # SQLite does not enforce the cascade unless foreign keys are switched on.
    await session.execute(delete(FixedHolidaySelection).where(col(FixedHolidaySelection.holiday_id) == holiday.id))
    await session.delete(holiday)
    await session.commit()


# ---------------------------------------------------------------------------
# Recurring (Nth weekday of the month, per role category)
# ---------------------------------------------------------------------------


async def create_recurring_rule(
    session: AsyncSession,
    auth: AuthContext,
    payload: CreateRecurringRuleRequest,
) -> RecurringRuleResponse:
    """Create a recurring holiday rule for a role category."""
    existing = await session.execute(
        select(RecurringHolidayRule.id).where(
            col(RecurringHolidayRule.company_id) == auth.company_id,
            col(RecurringHolidayRule.role_category) == payload.role_category.value,
            col(RecurringHolidayRule.weekday) == int(payload.weekday),
            col(RecurringHolidayRule.occurrence_index) == payload.occurrence_index,
        )
    )
    if existing.scalar_one_or_none() is not None:
        raise ConflictError("An identical recurring rule already exists")

    rule = RecurringHolidayRule(
        company_id=auth.company_id,
        role_category=payload.role_category.value,
        weekday=int(payload.weekday),
        occurrence_index=payload.occurrence_index,
    )
    session.add(rule)
    await session.flush()

    write_audit_log(
        session,
        company_id=auth.company_id,
        actor_id=auth.user_id,
        entity_type=AuditEntityType.RECURRING_RULE,
        entity_id=rule.id,
        action=AuditAction.CREATE,
        after_json=model_to_audit_dict(rule),
    )

    await session.commit()
    return _build_recurring_response(rule)


async def list_recurring_rules(
    session: AsyncSession,
    company_id: uuid.UUID,
    role_category: RoleCategory | None = None,
) -> list[RecurringRuleResponse]:
    base_filter = [col(RecurringHolidayRule.company_id) == company_id]
    if role_category is not None:
        base_filter.append(col(RecurringHolidayRule.role_category) == role_category.value)

    result = await session.execute(
        select(RecurringHolidayRule)
        .where(*base_filter)
        .order_by(
            col(RecurringHolidayRule.role_category),
            col(RecurringHolidayRule.occurrence_index),
            col(RecurringHolidayRule.weekday),
        )
    )
    return [_build_recurring_response(r) for r in result.scalars().all()]


async def delete_recurring_rule(
    session: AsyncSession,
    auth: AuthContext,
    rule_id: uuid.UUID,
) -> None:
    result = await session.execute(
        select(RecurringHolidayRule).where(
            col(RecurringHolidayRule.id) == rule_id,
            col(RecurringHolidayRule.company_id) == auth.company_id,
        )
    )
    rule = result.scalar_one_or_none()
    if rule is None:
        raise NotFoundError("Recurring rule not found")

    write_audit_log(
        session,
        company_id=auth.company_id,
        actor_id=auth.user_id,
        entity_type=AuditEntityType.RECURRING_RULE,
        entity_id=rule.id,
        action=AuditAction.DELETE,
        before_json=model_to_audit_dict(rule),
    )

    await session.delete(rule)
    await session.commit()


# ---------------------------------------------------------------------------
# Company holidays (exact dates)
# ---------------------------------------------------------------------------


async def create_company_holiday(
    session: AsyncSession,
    auth: AuthContext,
    payload: CreateCompanyHolidayRequest,
) -> CompanyHolidayResponse:
    """Create a company holiday."""
    existing = await session.execute(
        select(CompanyHoliday.id).where(
            col(CompanyHoliday.company_id) == auth.company_id,
            col(CompanyHoliday.date) == payload.date,
        )
    )
    if existing.scalar_one_or_none() is not None:
        raise ConflictError("Holiday already exists for this date")

    holiday = CompanyHoliday(company_id=auth.company_id, date=payload.date, name=payload.name)
    session.add(holiday)
    await session.flush()

    write_audit_log(
        session,
        company_id=auth.company_id,
        actor_id=auth.user_id,
        entity_type=AuditEntityType.COMPANY_HOLIDAY,
        entity_id=holiday.id,
        action=AuditAction.CREATE,
        after_json=model_to_audit_dict(holiday),
    )

    await session.commit()
    return _build_company_holiday_response(holiday)


async def list_company_holidays(
    session: AsyncSession,
    company_id: uuid.UUID,
    year: int | None = None,
) -> list[CompanyHolidayResponse]:
    """List company holidays with optional year filter."""
    base_filter = [col(CompanyHoliday.company_id) == company_id]
    if year is not None:
        base_filter.append(extract("year", col(CompanyHoliday.date)) == year)

    result = await session.execute(select(CompanyHoliday).where(*base_filter).order_by(col(CompanyHoliday.date)))
    return [_build_company_holiday_response(h) for h in result.scalars().all()]


async def delete_company_holiday(
    session: AsyncSession,
    auth: AuthContext,
    holiday_id: uuid.UUID,
) -> None:
    result = await session.execute(
        select(CompanyHoliday).where(
            col(CompanyHoliday.id) == holiday_id,
            col(CompanyHoliday.company_id) == auth.company_id,
        )
    )
    holiday = result.scalar_one_or_none()
    if holiday is None:
        raise NotFoundError("Holiday not found")

    write_audit_log(
        session,
        company_id=auth.company_id,
        actor_id=auth.user_id,
        entity_type=AuditEntityType.COMPANY_HOLIDAY,
        entity_id=holiday.id,
        action=AuditAction.DELETE,
        before_json=model_to_audit_dict(holiday),
    )

    await session.delete(holiday)
    await session.commit()


async def get_calendar(
    session: AsyncSession,
    company_id: uuid.UUID,
    year: int | None = None,
) -> HolidayCalendarResponse:
    """Every holiday rule of a company; ``year`` only narrows the exact dates."""
    return HolidayCalendarResponse(
        fixed=await list_fixed_holidays(session, company_id),
        recurring=await list_recurring_rules(session, company_id),
        dates=await list_company_holidays(session, company_id, year),
    )


# ---------------------------------------------------------------------------
# Employee selections of selectable fixed holidays
# ---------------------------------------------------------------------------


async def select_holiday(
    session: AsyncSession,
    auth: AuthContext,
    employee_id: uuid.UUID,
    payload: CreateHolidaySelectionRequest,
) -> HolidaySelectionResponse:
    """Opt an employee into a selectable fixed holiday for one year."""
    if not auth.can_act_for(employee_id):
        raise AppError("Only the employee or an administrator may select holidays", status_code=403)

    holiday = await get_fixed_holiday(session, auth.company_id, payload.holiday_id)
    if not holiday.employee_selectable:
        raise AppError("Holiday is not employee-selectable", status_code=400)

    existing = await session.execute(
        select(FixedHolidaySelection.id).where(
            col(FixedHolidaySelection.employee_id) == employee_id,
            col(FixedHolidaySelection.holiday_id) == holiday.id,
            col(FixedHolidaySelection.year) == payload.year,
        )
    )
    if existing.scalar_one_or_none() is not None:
        raise ConflictError("Holiday already selected for this year")

    selection = FixedHolidaySelection(
        company_id=auth.company_id,
        employee_id=employee_id,
        holiday_id=holiday.id,
        year=payload.year,
    )
    session.add(selection)
    await session.flush()

    write_audit_log(
        session,
        company_id=auth.company_id,
        actor_id=auth.user_id,
        entity_type=AuditEntityType.HOLIDAY_SELECTION,
        entity_id=selection.id,
        action=AuditAction.CREATE,
        after_json=model_to_audit_dict(selection),
    )

    await session.commit()
    return HolidaySelectionResponse(
        id=selection.id,
        employee_id=selection.employee_id,
        holiday_id=selection.holiday_id,
        year=selection.year,
    )


async def list_selections(
    session: AsyncSession,
    company_id: uuid.UUID,
    employee_id: uuid.UUID,
    year: int | None = None,
) -> list[HolidaySelectionResponse]:
    base_filter = [
        col(FixedHolidaySelection.company_id) == company_id,
        col(FixedHolidaySelection.employee_id) == employee_id,
    ]
    if year is not None:
        base_filter.append(col(FixedHolidaySelection.year) == year)

    result = await session.execute(
        select(FixedHolidaySelection).where(*base_filter).order_by(col(FixedHolidaySelection.year))
    )
    return [
        HolidaySelectionResponse(id=s.id, employee_id=s.employee_id, holiday_id=s.holiday_id, year=s.year)
        for s in result.scalars().all()
    ]
