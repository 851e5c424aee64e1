"""Recurring rule evaluator for "Nth weekday of the month" holidays."""

from __future__ import annotations

from calendar import monthrange
from dataclasses import dataclass, field
from datetime import date
from typing import TYPE_CHECKING

from punchclock.models.enums import Weekday

if TYPE_CHECKING:
    from punchclock.services.rules import RecurringRule


def occurrence_index(day: date) -> int:
    """1-based position of ``day``'s weekday within its month (3 for the 3rd Saturday)."""
    return (day.day - 1) // 7 + 1


def nth_weekday_of_month(year: int, month: int, weekday: int, n: int) -> date | None:
    """Date of the ``n``-th ``weekday`` in the month, or None if the month has fewer."""
    first_weekday = Weekday.of(date(year, month, 1))
    days_in_month = monthrange(year, month)[1]
    day = 1 + (weekday - first_weekday) % 7 + (n - 1) * 7
    if day > days_in_month:
        return None
    return date(year, month, day)


def matches(day: date, rule: RecurringRule, consumed_in_month: int, monthly_allowance: int) -> bool:
    """True if ``day`` is the rule's Nth weekday and the month's budget is not spent.

    Stateless: on a match the caller consumes one unit of budget before
    evaluating the next day.
    """
    if Weekday.of(day) != rule.weekday:
        return False
    if occurrence_index(day) != rule.occurrence_index:
        return False
    return consumed_in_month < monthly_allowance


@dataclass
class FloatingBudget:
    """Per-month floating-leave counter threaded through one day scan."""

    allowance: int
    _consumed: dict[tuple[int, int], int] = field(default_factory=dict)

    def consumed(self, day: date) -> int:
        return self._consumed.get((day.year, day.month), 0)

    def consume(self, day: date) -> None:
        key = (day.year, day.month)
        self._consumed[key] = self._consumed.get(key, 0) + 1

    def try_match(self, day: date, rule: RecurringRule) -> bool:
        """Evaluate ``rule`` against the current budget and consume it on a match."""
        if not matches(day, rule, self.consumed(day), self.allowance):
            return False
        self.consume(day)
        return True
