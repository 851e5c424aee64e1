"""Day classifier: assigns exactly one category to every day of a range.

Categories are tried in the order of ``DAY_CLASSIFIERS`` and the first
predicate that holds wins. Anything left over is an unpaid absence.
"""

# ruff: noqa: TC003
from __future__ import annotations

import logging
import uuid
from collections import Counter
from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from datetime import UTC, date, datetime, time, timedelta
from typing import TYPE_CHECKING
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from sqlalchemy import Select, select
from sqlmodel import col

from punchclock.config import get_settings
from punchclock.exceptions import AppError
from punchclock.models.attendance import AttendanceEvent
from punchclock.models.base import as_utc
from punchclock.models.enums import DayCategory, EventKind, LeaveStatus, RoleCategory, Weekday
from punchclock.models.holiday import FixedHolidaySelection
from punchclock.models.leave import LeaveGrant
from punchclock.services.employee import get_employee_service
from punchclock.services.recurrence import FloatingBudget
from punchclock.services.rules import RuleSet, load_rule_set

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)

_ONE_DAY = timedelta(days=1)


# ---------------------------------------------------------------------------
# Pure classification
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class EmployeeDayFacts:
    """Per-employee inputs, already reduced to calendar days in the employee's timezone."""

    check_in_dates: frozenset[date] = frozenset()
    leave_intervals: tuple[tuple[date, date], ...] = ()
    selected_holidays: frozenset[tuple[uuid.UUID, int]] = frozenset()  # (fixed holiday id, year)


@dataclass
class ScanContext:
    facts: EmployeeDayFacts
    rules: RuleSet
    category: RoleCategory
    budget: FloatingBudget


@dataclass(frozen=True)
class DayClassification:
    date: date
    category: DayCategory


DayPredicate = Callable[[date, ScanContext], bool]


def _is_worked(day: date, ctx: ScanContext) -> bool:
    # A check-in alone is enough; a missing check-out does not demote the day.
    return day in ctx.facts.check_in_dates


def _is_on_leave(day: date, ctx: ScanContext) -> bool:
    return any(start <= day <= end for start, end in ctx.facts.leave_intervals)


def _is_fixed_holiday(day: date, ctx: ScanContext) -> bool:
    for holiday in ctx.rules.fixed_holidays:
        if not holiday.falls_on(day):
            continue
        if not holiday.employee_selectable or (holiday.id, day.year) in ctx.facts.selected_holidays:
            return True
    return False


def _is_recurring_holiday(day: date, ctx: ScanContext) -> bool:
    return any(ctx.budget.try_match(day, rule) for rule in ctx.rules.recurring_rules_for(ctx.category))


def _is_holiday(day: date, ctx: ScanContext) -> bool:
    # Recurring rules go last so the floating budget is only spent on days
    # no other holiday already covers.
    if _is_fixed_holiday(day, ctx) or day in ctx.rules.company_holidays:
        return True
    return _is_recurring_holiday(day, ctx)


def _is_week_off(day: date, ctx: ScanContext) -> bool:
    return Weekday.of(day) in ctx.rules.week_off_days_for(ctx.category)


DAY_CLASSIFIERS: tuple[tuple[DayCategory, DayPredicate], ...] = (
    (DayCategory.WORKED, _is_worked),
    (DayCategory.LEAVE, _is_on_leave),
    (DayCategory.HOLIDAY, _is_holiday),
    (DayCategory.WEEK_OFF, _is_week_off),
)


def classify_day(day: date, ctx: ScanContext) -> DayCategory:
    """Return the first category whose predicate holds, else UNPAID."""
    for category, predicate in DAY_CLASSIFIERS:
        if predicate(day, ctx):
            return category
    return DayCategory.UNPAID


def iter_days(start: date, end: date) -> Iterator[date]:
    current = start
    while current <= end:
        yield current
        current += _ONE_DAY


def classify_days(
    start: date,
    end: date,
    facts: EmployeeDayFacts,
    rules: RuleSet,
    category: RoleCategory,
) -> Iterator[DayClassification]:
    """Yield one classification per day in ``[start, end]``, in date order.

    The scan starts on the first of ``start``'s month so the floating budget
    is spent the same way no matter where the requested range begins.
    """
    ctx = ScanContext(
        facts=facts,
        rules=rules,
        category=category,
        budget=FloatingBudget(allowance=rules.floating_allowance_for(category)),
    )
    for day in iter_days(start.replace(day=1), end):
        result = classify_day(day, ctx)
        if day >= start:
            yield DayClassification(date=day, category=result)


@dataclass
class ClassificationSummary:
    """Range classification plus the aggregates payroll reads from it."""

    employee_id: uuid.UUID
    role_category: RoleCategory
    start_date: date
    end_date: date
    days: list[DayClassification] = field(default_factory=list)
    monthly_target_hours: float | None = None

    @property
    def counts(self) -> dict[DayCategory, int]:
        tally = Counter(d.category for d in self.days)
        return {category: tally.get(category, 0) for category in DayCategory}

    @property
    def paid_days(self) -> int:
        return sum(1 for d in self.days if d.category != DayCategory.UNPAID)


# ---------------------------------------------------------------------------
# DB-backed loading
# ---------------------------------------------------------------------------


def resolve_timezone(name: str | None) -> ZoneInfo:
    """Employee timezone, falling back to the configured default."""
    fallback = get_settings().default_timezone
    try:
        return ZoneInfo(name or fallback)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning("Unknown timezone %r, using %s", name, fallback)
        return ZoneInfo(fallback)


def superseded_event_ids(company_id: uuid.UUID, employee_id: uuid.UUID) -> Select[tuple[uuid.UUID | None]]:
    """Subquery of event ids that a later correction event replaced."""
    return select(col(AttendanceEvent.corrects_event_id)).where(
        col(AttendanceEvent.company_id) == company_id,
        col(AttendanceEvent.employee_id) == employee_id,
        col(AttendanceEvent.corrects_event_id).is_not(None),
    )


async def _load_check_in_dates(
    session: AsyncSession,
    company_id: uuid.UUID,
    employee_id: uuid.UUID,
    start: date,
    end: date,
    tz: ZoneInfo,
) -> frozenset[date]:
    window_start = datetime.combine(start, time.min, tzinfo=tz).astimezone(UTC)
    window_end = datetime.combine(end + _ONE_DAY, time.min, tzinfo=tz).astimezone(UTC)
    result = await session.execute(
        select(col(AttendanceEvent.timestamp)).where(
            col(AttendanceEvent.company_id) == company_id,
            col(AttendanceEvent.employee_id) == employee_id,
            col(AttendanceEvent.kind) == EventKind.CHECK_IN.value,
            col(AttendanceEvent.timestamp) >= window_start,
            col(AttendanceEvent.timestamp) < window_end,
            col(AttendanceEvent.id).not_in(superseded_event_ids(company_id, employee_id)),
        )
    )
    return frozenset(as_utc(row[0]).astimezone(tz).date() for row in result.all())


async def _load_leave_intervals(
    session: AsyncSession,
    company_id: uuid.UUID,
    employee_id: uuid.UUID,
    start: date,
    end: date,
) -> tuple[tuple[date, date], ...]:
    result = await session.execute(
        select(LeaveGrant).where(
            col(LeaveGrant.company_id) == company_id,
            col(LeaveGrant.employee_id) == employee_id,
            col(LeaveGrant.status) == LeaveStatus.APPROVED.value,
            col(LeaveGrant.start_date) <= end,
            col(LeaveGrant.end_date) >= start,
        )
    )
    intervals = []
    for grant in result.scalars().all():
        if grant.end_date < grant.start_date:
            logger.warning("Ignoring leave grant %s with inverted interval", grant.id)
            continue
        intervals.append((grant.start_date, grant.end_date))
    return tuple(intervals)


async def _load_selected_holidays(
    session: AsyncSession,
    company_id: uuid.UUID,
    employee_id: uuid.UUID,
    start: date,
    end: date,
) -> frozenset[tuple[uuid.UUID, int]]:
    result = await session.execute(
        select(col(FixedHolidaySelection.holiday_id), col(FixedHolidaySelection.year)).where(
            col(FixedHolidaySelection.company_id) == company_id,
            col(FixedHolidaySelection.employee_id) == employee_id,
            col(FixedHolidaySelection.year) >= start.year,
            col(FixedHolidaySelection.year) <= end.year,
        )
    )
    return frozenset((row[0], row[1]) for row in result.all())


async def classify_range(
    session: AsyncSession,
    company_id: uuid.UUID,
    employee_id: uuid.UUID,
    start_date: date,
    end_date: date,
) -> ClassificationSummary:
    """Classify every day of ``[start_date, end_date]`` for one employee."""
    if end_date < start_date:
        raise AppError("end_date must not be before start_date", status_code=400)
    span = (end_date - start_date).days + 1
    max_days = get_settings().max_classification_days
    if span > max_days:
        raise AppError(f"Range of {span} days exceeds the limit of {max_days}", status_code=400)

    employee = await get_employee_service().get_employee(company_id, employee_id)
    if employee is None:
        logger.warning("Employee %s not found; classifying with field defaults", employee_id)
        category = RoleCategory.FIELD
        tz = resolve_timezone(None)
    else:
        category = employee.category
        tz = resolve_timezone(employee.timezone)

    rules = await load_rule_set(session, company_id)
    scan_start = start_date.replace(day=1)
    facts = EmployeeDayFacts(
        check_in_dates=await _load_check_in_dates(session, company_id, employee_id, scan_start, end_date, tz),
        leave_intervals=await _load_leave_intervals(session, company_id, employee_id, scan_start, end_date),
        selected_holidays=await _load_selected_holidays(session, company_id, employee_id, scan_start, end_date),
    )

    thresholds = rules.thresholds_for(category)
    return ClassificationSummary(
        employee_id=employee_id,
        role_category=category,
        start_date=start_date,
        end_date=end_date,
        days=list(classify_days(start_date, end_date, facts, rules, category)),
        monthly_target_hours=thresholds.monthly_target_hours if thresholds else None,
    )
