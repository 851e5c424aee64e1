"""Tests for the Nth-weekday-of-month evaluator and the floating budget."""

from __future__ import annotations

from datetime import date, timedelta

import pytest

from punchclock.models.enums import RoleCategory, Weekday
from punchclock.services.recurrence import FloatingBudget, matches, nth_weekday_of_month, occurrence_index
from punchclock.services.rules import RecurringRule

THIRD_SATURDAY = RecurringRule(weekday=Weekday.SATURDAY, occurrence_index=3, role_category=RoleCategory.OFFICE)
FIRST_SATURDAY = RecurringRule(weekday=Weekday.SATURDAY, occurrence_index=1, role_category=RoleCategory.OFFICE)


# ---------------------------------------------------------------------------
# Calendar helpers
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    ("day", "expected"),
    [
        (date(2026, 3, 1), 1),
        (date(2026, 3, 7), 1),
        (date(2026, 3, 8), 2),
        (date(2026, 3, 21), 3),
        (date(2026, 3, 28), 4),
        (date(2026, 3, 29), 5),
    ],
)
def test_occurrence_index(day: date, expected: int) -> None:
    assert occurrence_index(day) == expected


@pytest.mark.parametrize(
    ("day", "expected"),
    [
        (date(2026, 3, 1), Weekday.SUNDAY),
        (date(2026, 3, 2), Weekday.MONDAY),
        (date(2026, 3, 7), Weekday.SATURDAY),
    ],
)
def test_weekday_counts_from_sunday(day: date, expected: Weekday) -> None:
    assert Weekday.of(day) == expected
    assert Weekday.SUNDAY == 0


def test_nth_weekday_of_month_third_saturday() -> None:
    assert nth_weekday_of_month(2026, 3, Weekday.SATURDAY, 3) == date(2026, 3, 21)
    assert nth_weekday_of_month(2026, 2, Weekday.SATURDAY, 3) == date(2026, 2, 21)


def test_nth_weekday_of_month_missing_fifth_occurrence() -> None:
    # March 2026 has four Saturdays and five Sundays.
    assert nth_weekday_of_month(2026, 3, Weekday.SATURDAY, 5) is None
    assert nth_weekday_of_month(2026, 3, Weekday.SUNDAY, 5) == date(2026, 3, 29)


# ---------------------------------------------------------------------------
# matches()
# ---------------------------------------------------------------------------


def test_matches_third_saturday_with_budget() -> None:
    assert matches(date(2026, 3, 21), THIRD_SATURDAY, consumed_in_month=0, monthly_allowance=1)


def test_matches_rejects_other_weekday() -> None:
    assert not matches(date(2026, 3, 20), THIRD_SATURDAY, consumed_in_month=0, monthly_allowance=1)


def test_matches_rejects_other_occurrence() -> None:
    assert not matches(date(2026, 3, 14), THIRD_SATURDAY, consumed_in_month=0, monthly_allowance=1)


def test_matches_rejects_exhausted_budget() -> None:
    assert not matches(date(2026, 3, 21), THIRD_SATURDAY, consumed_in_month=1, monthly_allowance=1)


def test_matches_zero_allowance_never_matches() -> None:
    assert not matches(date(2026, 3, 21), THIRD_SATURDAY, consumed_in_month=0, monthly_allowance=0)


def test_exactly_one_match_per_month_for_a_year() -> None:
    day = date(2026, 1, 1)
    hits: dict[int, list[date]] = {}
    while day.year == 2026:
        if matches(day, THIRD_SATURDAY, consumed_in_month=0, monthly_allowance=1):
            hits.setdefault(day.month, []).append(day)
        day += timedelta(days=1)

    assert sorted(hits) == list(range(1, 13))
    for month, days in hits.items():
        assert days == [nth_weekday_of_month(2026, month, Weekday.SATURDAY, 3)]


# ---------------------------------------------------------------------------
# FloatingBudget
# ---------------------------------------------------------------------------


def test_budget_consumed_on_match() -> None:
    budget = FloatingBudget(allowance=1)
    assert budget.try_match(date(2026, 3, 7), FIRST_SATURDAY)
    assert budget.consumed(date(2026, 3, 1)) == 1
    # Budget is spent, so the third Saturday no longer matches.
    assert not budget.try_match(date(2026, 3, 21), THIRD_SATURDAY)


def test_budget_not_consumed_without_match() -> None:
    budget = FloatingBudget(allowance=1)
    assert not budget.try_match(date(2026, 3, 14), THIRD_SATURDAY)
    assert budget.consumed(date(2026, 3, 14)) == 0


def test_budget_resets_each_month() -> None:
    budget = FloatingBudget(allowance=1)
    assert budget.try_match(date(2026, 3, 21), THIRD_SATURDAY)
    assert budget.try_match(date(2026, 4, 18), THIRD_SATURDAY)
    assert budget.consumed(date(2026, 3, 1)) == 1
    assert budget.consumed(date(2026, 4, 1)) == 1
