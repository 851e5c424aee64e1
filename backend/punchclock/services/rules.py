"""Rule repository: read-only snapshot of holiday rules and role thresholds.

Configuration is hot-reloadable, so nothing is cached between calls; each
engine call loads one ``RuleSet`` and uses it for every day it evaluates.
"""

# ruff: noqa: TC003
from __future__ import annotations

import logging
import uuid
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import date
from typing import TYPE_CHECKING

from sqlalchemy import select
from sqlmodel import col

from punchclock.models.enums import RoleCategory, Weekday
from punchclock.models.holiday import CompanyHoliday, FixedHoliday, RecurringHolidayRule
from punchclock.models.thresholds import RoleThresholds

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)

# Sunday is a week-off for every category regardless of configuration.
DEFAULT_WEEK_OFF_DAYS: frozenset[int] = frozenset({Weekday.SUNDAY})


@dataclass(frozen=True)
class ThresholdValues:
    """Validated thresholds for one role category."""

    standard_daily_hours_max: float
    monthly_floating_leave_allowance: int = 0
    monthly_target_hours: float | None = None
    week_off_days: frozenset[int] = DEFAULT_WEEK_OFF_DAYS

    @property
    def standard_daily_minutes_max(self) -> int:
        return round(self.standard_daily_hours_max * 60)


@dataclass(frozen=True)
class FixedHolidayRule:
    id: uuid.UUID
    month: int
    day: int
    name: str
    employee_selectable: bool = False

    def falls_on(self, day: date) -> bool:
        return day.month == self.month and day.day == self.day


@dataclass(frozen=True)
class RecurringRule:
    weekday: int
    occurrence_index: int
    role_category: RoleCategory


@dataclass(frozen=True)
class RuleSet:
    """Immutable configuration snapshot used for a single engine call."""

    thresholds: Mapping[RoleCategory, ThresholdValues] = field(default_factory=dict)
    fixed_holidays: tuple[FixedHolidayRule, ...] = ()
    recurring_rules: tuple[RecurringRule, ...] = ()
    company_holidays: Mapping[date, str] = field(default_factory=dict)

    def thresholds_for(self, category: RoleCategory) -> ThresholdValues | None:
        return self.thresholds.get(category)

    def floating_allowance_for(self, category: RoleCategory) -> int:
        """Monthly floating-leave budget; 0 (no recurring holidays) when unconfigured."""
        thresholds = self.thresholds_for(category)
        if thresholds is None:
            return 0
        return thresholds.monthly_floating_leave_allowance

    def week_off_days_for(self, category: RoleCategory) -> frozenset[int]:
        thresholds = self.thresholds_for(category)
        if thresholds is None:
            return DEFAULT_WEEK_OFF_DAYS
        return thresholds.week_off_days | DEFAULT_WEEK_OFF_DAYS

    def recurring_rules_for(self, category: RoleCategory) -> tuple[RecurringRule, ...]:
        return tuple(rule for rule in self.recurring_rules if rule.role_category == category)


def to_threshold_values(row: RoleThresholds) -> ThresholdValues | None:
    """Convert a stored row, or None if it is unusable (treated as missing)."""
    if row.standard_daily_hours_max is None or row.standard_daily_hours_max <= 0:
        logger.warning(
            "Ignoring thresholds for company=%s category=%s: standard_daily_hours_max=%s",
            row.company_id,
            row.role_category,
            row.standard_daily_hours_max,
        )
        return None
    return ThresholdValues(
        standard_daily_hours_max=float(row.standard_daily_hours_max),
        monthly_floating_leave_allowance=max(0, row.monthly_floating_leave_allowance or 0),
        monthly_target_hours=row.monthly_target_hours,
        week_off_days=frozenset(d for d in (row.week_off_days or []) if 0 <= d <= 6) | DEFAULT_WEEK_OFF_DAYS,
    )


def _parse_category(value: str) -> RoleCategory | None:
    try:
        return RoleCategory(value)
    except ValueError:
        return None


async def load_rule_set(session: AsyncSession, company_id: uuid.UUID) -> RuleSet:
    """Read every rule for a company once and freeze it."""
    thresholds: dict[RoleCategory, ThresholdValues] = {}
    result = await session.execute(select(RoleThresholds).where(col(RoleThresholds.company_id) == company_id))
    for row in result.scalars().all():
        category = _parse_category(row.role_category)
        values = to_threshold_values(row)
        if category is not None and values is not None:
            thresholds[category] = values

    result = await session.execute(
        select(FixedHoliday)
        .where(col(FixedHoliday.company_id) == company_id)
        .order_by(col(FixedHoliday.month), col(FixedHoliday.day))
    )
    fixed = tuple(
        FixedHolidayRule(
            id=h.id,
            month=h.month,
            day=h.day,
            name=h.name,
            employee_selectable=h.employee_selectable,
        )
        for h in result.scalars().all()
    )

    recurring: list[RecurringRule] = []
    result = await session.execute(
        select(RecurringHolidayRule)
        .where(col(RecurringHolidayRule.company_id) == company_id)
        .order_by(col(RecurringHolidayRule.occurrence_index), col(RecurringHolidayRule.weekday))
    )
    for rule in result.scalars().all():
        category = _parse_category(rule.role_category)
        if category is None:
            logger.warning("Skipping recurring rule %s with unknown category %r", rule.id, rule.role_category)
            continue
        recurring.append(
            RecurringRule(weekday=rule.weekday, occurrence_index=rule.occurrence_index, role_category=category)
        )

    result = await session.execute(select(CompanyHoliday).where(col(CompanyHoliday.company_id) == company_id))
    company_holidays = {h.date: h.name for h in result.scalars().all()}

    return RuleSet(
        thresholds=thresholds,
        fixed_holidays=fixed,
        recurring_rules=tuple(recurring),
        company_holidays=company_holidays,
    )
