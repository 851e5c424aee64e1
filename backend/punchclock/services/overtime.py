"""Overtime accrual engine: session overtime, the overtime bank, and comp-off conversion.

Driven by check-out events. Each check-out is paired with the most recent
earlier check-in; the part of the session above the role's daily ceiling is
credited to the bank, and every full conversion unit in the bank becomes one
comp-off. The transition is not idempotent, so callers must serialize
check-outs per employee (the balance row is locked for the transaction).
"""

# ruff: noqa: TC003
from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import TYPE_CHECKING

from sqlalchemy import Select, func, or_, select
from sqlmodel import col

from punchclock.config import get_settings
from punchclock.models.attendance import AttendanceEvent
from punchclock.models.base import as_utc, now_utc
from punchclock.models.enums import AuditAction, AuditEntityType, EventKind, OvertimeEntryType
from punchclock.models.overtime import CompOffUnit, OvertimeBalance, OvertimeLedgerEntry
from punchclock.services.audit import model_to_audit_dict, write_audit_log
from punchclock.services.classifier import resolve_timezone, superseded_event_ids
from punchclock.services.employee import get_employee_service
from punchclock.services.notifications import CompOffEarned
from punchclock.services.rules import load_rule_set

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from punchclock.services.employee import EmployeeInfo

logger = logging.getLogger(__name__)

COMP_OFF_REASON = "Automatic OT conversion"
# Widest offset of any local clock ahead of UTC (UTC+14).
LOCAL_DAY_LEAD = timedelta(hours=14)


# ---------------------------------------------------------------------------
# Pure computation helpers (no DB)
# ---------------------------------------------------------------------------


def conversion_unit_minutes() -> int:
    """Banked minutes that buy one comp-off unit."""
    return get_settings().comp_off_threshold_hours * 60


def compute_session_minutes(check_in: datetime, check_out: datetime) -> int:
    """Minutes between a check-in and its check-out, rounded to the nearest minute."""
    seconds = (as_utc(check_out) - as_utc(check_in)).total_seconds()
    return max(0, int((seconds + 30) // 60))


def month_start(day: date) -> date:
    return day.replace(day=1)


@dataclass(frozen=True)
class CheckoutTransition:
    """Result of applying one check-out to an overtime bank."""

    session_minutes: int
    overtime_minutes: int
    comp_off_units: int
    banked_minutes: int
    month_to_date_minutes: int
    unit_minutes: int

    @property
    def converted_minutes(self) -> int:
        return self.comp_off_units * self.unit_minutes


def apply_checkout(
    *,
    banked_minutes: int,
    month_to_date_minutes: int,
    session_minutes: int,
    ceiling_minutes: int | None,
    unit_minutes: int,
) -> CheckoutTransition:
    """Credit session overtime to the bank, then convert every full unit.

    A ``ceiling_minutes`` of None means the role has no usable threshold and
    is not overtime-eligible. Conversion depends only on the resulting bank,
    so a bank fed by earlier sessions can yield several units at once.
    """
    overtime = 0
    if ceiling_minutes is not None and session_minutes > ceiling_minutes:
        overtime = session_minutes - ceiling_minutes

    banked = banked_minutes + overtime
    units = 0
    while banked >= unit_minutes:
        units += 1
        banked -= unit_minutes

    return CheckoutTransition(
        session_minutes=session_minutes,
        overtime_minutes=overtime,
        comp_off_units=units,
        banked_minutes=banked,
        month_to_date_minutes=month_to_date_minutes + overtime,
        unit_minutes=unit_minutes,
    )


# ---------------------------------------------------------------------------
# DB-backed helpers
# ---------------------------------------------------------------------------


@dataclass
class CheckoutOutcome:
    """What a processed check-out did, plus the notification to send after commit."""

    check_in_event_id: uuid.UUID
    transition: CheckoutTransition
    comp_off_units: list[CompOffUnit]
    notification: CompOffEarned | None = None


@dataclass
class MonthlyResetResult:
    period: date | None
    reset: int = 0


async def find_preceding_check_in(
    session: AsyncSession,
    company_id: uuid.UUID,
    employee_id: uuid.UUID,
    before: datetime,
) -> AttendanceEvent | None:
    """Most recent live CHECK_IN strictly before ``before``."""
    result = await session.execute(
        select(AttendanceEvent)
        .where(
            col(AttendanceEvent.company_id) == company_id,
            col(AttendanceEvent.employee_id) == employee_id,
            col(AttendanceEvent.kind) == EventKind.CHECK_IN.value,
            col(AttendanceEvent.timestamp) < as_utc(before),
            col(AttendanceEvent.id).not_in(superseded_event_ids(company_id, employee_id)),
        )
        .order_by(col(AttendanceEvent.timestamp).desc())
        .limit(1)
    )
    return result.scalar_one_or_none()


async def get_or_create_balance_for_update(
    session: AsyncSession,
    company_id: uuid.UUID,
    employee_id: uuid.UUID,
) -> OvertimeBalance:
    """Get the overtime balance with a FOR UPDATE lock, creating it if absent."""
    result = await session.execute(
        select(OvertimeBalance)
        .where(
            col(OvertimeBalance.company_id) == company_id,
            col(OvertimeBalance.employee_id) == employee_id,
        )
        .with_for_update()
    )
    balance = result.scalar_one_or_none()

    if balance is None:
        balance = OvertimeBalance(company_id=company_id, employee_id=employee_id)
        session.add(balance)
        await session.flush()

    return balance


def _roll_month_to_date(balance: OvertimeBalance, period: date) -> None:
    """Start a fresh month-to-date counter if the balance still holds an older month."""
    if balance.month_to_date_period is None or balance.month_to_date_period < period:
        balance.month_to_date_minutes = 0
        balance.month_to_date_period = period


async def process_checkout(
    session: AsyncSession,
    checkout: AttendanceEvent,
    employee: EmployeeInfo,
) -> CheckoutOutcome | None:
    """Apply one check-out to the employee's overtime bank inside the caller's transaction.

    Returns None when no earlier check-in exists: the session is malformed and
    nothing is credited. The caller commits and then publishes the outcome's
    notification.
    """
    company_id = checkout.company_id
    check_in = await find_preceding_check_in(session, company_id, checkout.employee_id, checkout.timestamp)
    if check_in is None:
        logger.debug("Check-out %s has no preceding check-in; skipping overtime", checkout.id)
        return None

    rules = await load_rule_set(session, company_id)
    thresholds = rules.thresholds_for(employee.category)
    ceiling = thresholds.standard_daily_minutes_max if thresholds else None
    if ceiling is None:
        logger.warning(
            "No thresholds for category=%s in company=%s; check-out %s is not overtime-eligible",
            employee.category,
            company_id,
            checkout.id,
        )

    tz = resolve_timezone(employee.timezone)
    local_day = as_utc(checkout.timestamp).astimezone(tz).date()
    unit_minutes = conversion_unit_minutes()

    balance = await get_or_create_balance_for_update(session, company_id, checkout.employee_id)
    _roll_month_to_date(balance, month_start(local_day))

    transition = apply_checkout(
        banked_minutes=balance.banked_minutes,
        month_to_date_minutes=balance.month_to_date_minutes,
        session_minutes=compute_session_minutes(check_in.timestamp, checkout.timestamp),
        ceiling_minutes=ceiling,
        unit_minutes=unit_minutes,
    )

    if transition.overtime_minutes > 0:
        session.add(
            OvertimeLedgerEntry(
                company_id=company_id,
                employee_id=checkout.employee_id,
                entry_type=OvertimeEntryType.OVERTIME.value,
                minutes=transition.overtime_minutes,
                session_minutes=transition.session_minutes,
                check_in_event_id=check_in.id,
                check_out_event_id=checkout.id,
            )
        )

    units: list[CompOffUnit] = []
    if transition.comp_off_units > 0:
        session.add(
            OvertimeLedgerEntry(
                company_id=company_id,
                employee_id=checkout.employee_id,
                entry_type=OvertimeEntryType.CONVERSION.value,
                minutes=-transition.converted_minutes,
                check_out_event_id=checkout.id,
            )
        )
        for _ in range(transition.comp_off_units):
            unit = CompOffUnit(
                company_id=company_id,
                employee_id=checkout.employee_id,
                earned_date=local_day,
                reason=COMP_OFF_REASON,
                source_event_id=checkout.id,
            )
            session.add(unit)
            units.append(unit)
        await session.flush()
        for unit in units:
            write_audit_log(
                session,
                company_id=company_id,
                entity_type=AuditEntityType.COMP_OFF,
                entity_id=unit.id,
                action=AuditAction.CREATE,
                after_json=model_to_audit_dict(unit),
            )
        logger.info(
            "Converted %d comp-off unit(s) for employee=%s; bank %d -> %d minutes",
            transition.comp_off_units,
            checkout.employee_id,
            transition.banked_minutes + transition.converted_minutes,
            transition.banked_minutes,
        )

    balance.banked_minutes = transition.banked_minutes
    balance.month_to_date_minutes = transition.month_to_date_minutes
    balance.version += 1
    await session.flush()

    notification = None
    if units:
        recipients = [employee.id]
        if employee.reporting_manager_id is not None:
            recipients.append(employee.reporting_manager_id)
        notification = CompOffEarned(
            company_id=company_id,
            employee_id=employee.id,
            employee_name=employee.name,
            unit_count=len(units),
            recipients=tuple(recipients),
        )

    return CheckoutOutcome(
        check_in_event_id=check_in.id,
        transition=transition,
        comp_off_units=units,
        notification=notification,
    )


def _reversed_entry_ids(company_id: uuid.UUID, employee_id: uuid.UUID) -> Select[tuple[uuid.UUID | None]]:
    """Subquery of OVERTIME ledger ids that a REVERSAL row already took back."""
    return select(col(OvertimeLedgerEntry.reversed_entry_id)).where(
        col(OvertimeLedgerEntry.company_id) == company_id,
        col(OvertimeLedgerEntry.employee_id) == employee_id,
        col(OvertimeLedgerEntry.reversed_entry_id).is_not(None),
    )


async def _next_check_out_pairing_with(session: AsyncSession, check_in: AttendanceEvent) -> AttendanceEvent | None:
    """First live CHECK_OUT after ``check_in`` whose preceding check-in is now ``check_in``."""
    result = await session.execute(
        select(AttendanceEvent)
        .where(
            col(AttendanceEvent.company_id) == check_in.company_id,
            col(AttendanceEvent.employee_id) == check_in.employee_id,
            col(AttendanceEvent.kind) == EventKind.CHECK_OUT.value,
            col(AttendanceEvent.timestamp) > as_utc(check_in.timestamp),
            col(AttendanceEvent.id).not_in(superseded_event_ids(check_in.company_id, check_in.employee_id)),
        )
        .order_by(col(AttendanceEvent.timestamp))
        .limit(1)
    )
    checkout = result.scalar_one_or_none()
    if checkout is None:
        return None
    preceding = await find_preceding_check_in(session, check_in.company_id, check_in.employee_id, checkout.timestamp)
    if preceding is None or preceding.id != check_in.id:
        return None
    return checkout


async def reverse_corrected_overtime(
    session: AsyncSession,
    corrected: AttendanceEvent,
    correction: AttendanceEvent,
    employee: EmployeeInfo,
) -> list[AttendanceEvent]:
    """Take back overtime that was credited through an event a correction replaced.

    Every unreversed OVERTIME row that paired with ``corrected`` gets a
    negating REVERSAL row, and so does the credit of the check-out that a
    correcting check-in now pairs with. The bank never drops below zero, so
    comp-off units already issued are kept and a reversal can take back less
    than the original credit. Month-to-date minutes shrink only when the
    reversed session falls in the month currently being counted.

    Returns the live check-outs whose sessions must be settled again, oldest
    first. Runs inside the caller's transaction.
    """
    company_id = correction.company_id
    employee_id = correction.employee_id
    links = [
        col(OvertimeLedgerEntry.check_in_event_id) == corrected.id,
        col(OvertimeLedgerEntry.check_out_event_id) == corrected.id,
    ]
    checkout_ids: set[uuid.UUID] = set()
    if correction.kind == EventKind.CHECK_IN.value:
        repaired = await _next_check_out_pairing_with(session, correction)
        if repaired is not None:
            links.append(col(OvertimeLedgerEntry.check_out_event_id) == repaired.id)
            checkout_ids.add(repaired.id)

    result = await session.execute(
        select(OvertimeLedgerEntry)
        .where(
            col(OvertimeLedgerEntry.company_id) == company_id,
            col(OvertimeLedgerEntry.employee_id) == employee_id,
            col(OvertimeLedgerEntry.entry_type) == OvertimeEntryType.OVERTIME.value,
            or_(*links),
            col(OvertimeLedgerEntry.id).not_in(_reversed_entry_ids(company_id, employee_id)),
        )
        .order_by(col(OvertimeLedgerEntry.created_at))
    )
    entries = result.scalars().all()

    if entries:
        tz = resolve_timezone(employee.timezone)
        balance = await get_or_create_balance_for_update(session, company_id, employee_id)
        for entry in entries:
            taken_back = min(entry.minutes, balance.banked_minutes)
            balance.banked_minutes -= taken_back

            checkout = None
            if entry.check_out_event_id is not None:
                checkout = await session.get(AttendanceEvent, entry.check_out_event_id)
            if checkout is not None:
                checkout_ids.add(checkout.id)
                period = month_start(as_utc(checkout.timestamp).astimezone(tz).date())
                if balance.month_to_date_period == period:
                    balance.month_to_date_minutes -= min(entry.minutes, balance.month_to_date_minutes)

            session.add(
                OvertimeLedgerEntry(
                    company_id=company_id,
                    employee_id=employee_id,
                    entry_type=OvertimeEntryType.REVERSAL.value,
                    minutes=-taken_back,
                    session_minutes=entry.session_minutes,
                    check_in_event_id=entry.check_in_event_id,
                    check_out_event_id=entry.check_out_event_id,
                    reversed_entry_id=entry.id,
                )
            )
            logger.info(
                "Reversed %d of %d overtime minutes for employee=%s after correction %s",
                taken_back,
                entry.minutes,
                employee_id,
                correction.id,
            )
        balance.version += 1
        await session.flush()

    if not checkout_ids:
        return []

    result = await session.execute(
        select(AttendanceEvent)
        .where(
            col(AttendanceEvent.id).in_(checkout_ids),
            col(AttendanceEvent.kind) == EventKind.CHECK_OUT.value,
            col(AttendanceEvent.id).not_in(superseded_event_ids(company_id, employee_id)),
        )
        .order_by(col(AttendanceEvent.timestamp))
    )
    return list(result.scalars().all())


async def reset_monthly_overtime(
    session: AsyncSession,
    as_of: date | None = None,
    *,
    company_id: uuid.UUID | None = None,
    now: datetime | None = None,
) -> MonthlyResetResult:
    """Zero month-to-date overtime for every balance still counting an earlier month.

    With ``as_of`` every balance rolls to that date's month. Without it each
    balance rolls to the month of the employee's local date at ``now``, the
    same local day a check-out uses to pick its month. Banked minutes are
    untouched. Safe to re-run within the same month.
    """
    clock = as_utc(now) if now is not None else now_utc()
    if as_of is not None:
        cutoff = month_start(as_of)
    else:
        cutoff = month_start((clock + LOCAL_DAY_LEAD).date())

    filters = [
        or_(
            col(OvertimeBalance.month_to_date_period).is_(None),
            col(OvertimeBalance.month_to_date_period) < cutoff,
        )
    ]
    if company_id is not None:
        filters.append(col(OvertimeBalance.company_id) == company_id)

    result = await session.execute(select(OvertimeBalance).where(*filters).with_for_update())
    reset = 0
    directory = get_employee_service()
    for balance in result.scalars().all():
        period = cutoff
        if as_of is None:
            employee = await directory.get_employee(balance.company_id, balance.employee_id)
            tz = resolve_timezone(employee.timezone if employee is not None else None)
            period = month_start(clock.astimezone(tz).date())
        if balance.month_to_date_period is not None and balance.month_to_date_period >= period:
            continue
        _roll_month_to_date(balance, period)
        balance.version += 1
        reset += 1

    await session.commit()
    if reset:
        logger.info("Reset month-to-date overtime for %d balance(s)", reset)
    return MonthlyResetResult(period=month_start(as_of) if as_of is not None else None, reset=reset)


async def get_balance(
    session: AsyncSession,
    company_id: uuid.UUID,
    employee_id: uuid.UUID,
) -> OvertimeBalance | None:
    result = await session.execute(
        select(OvertimeBalance).where(
            col(OvertimeBalance.company_id) == company_id,
            col(OvertimeBalance.employee_id) == employee_id,
        )
    )
    return result.scalar_one_or_none()


async def list_comp_off_units(
    session: AsyncSession,
    company_id: uuid.UUID,
    employee_id: uuid.UUID,
    offset: int = 0,
    limit: int = 50,
) -> tuple[list[CompOffUnit], int]:
    base_filter = [
        col(CompOffUnit.company_id) == company_id,
        col(CompOffUnit.employee_id) == employee_id,
    ]
    count_result = await session.execute(select(func.count()).select_from(CompOffUnit).where(*base_filter))
    total = count_result.scalar_one()
    result = await session.execute(
        select(CompOffUnit)
        .where(*base_filter)
        .order_by(col(CompOffUnit.earned_date), col(CompOffUnit.created_at))
        .offset(offset)
        .limit(limit)
    )
    return list(result.scalars().all()), total
