"""Escalation due-date calculator.

The next actionable date for a task is its base due date plus the durations
of every stage already passed or currently active. A stage whose chain is
not fully configured falls back to the base due date.
"""

# ruff: noqa: TC003
from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import date, timedelta
from typing import TYPE_CHECKING

from sqlalchemy import select
from sqlmodel import col

from punchclock.models.enums import EscalationStage, TaskStatus
from punchclock.models.task import Task
from punchclock.services.notifications import TaskEscalationDue, publish_safely

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)

DUE_DATE_FORMAT = "%d %b, %Y"
NO_DUE_DATE = "none"


@dataclass(frozen=True)
class DueDateInfo:
    """Next actionable due date of a task."""

    date: date | None
    is_overdue: bool

    @property
    def display(self) -> str:
        return format_due_date(self.date)


def format_due_date(value: date | None) -> str:
    """Render a due date as ``13 Jan, 2026``, or ``none`` when unset."""
    if value is None:
        return NO_DUE_DATE
    return value.strftime(DUE_DATE_FORMAT)


def _configured(*durations: int | None) -> bool:
    # Zero counts as unset, like a missing value.
    return all(durations)


def _stage_offset_days(task: Task, stage: EscalationStage) -> int | None:
    """Days past the base due date for ``stage``, or None if its chain is incomplete."""
    s1, s2, s3 = task.stage1_duration_days, task.stage2_duration_days, task.stage3_duration_days
    if stage == EscalationStage.NONE:
        return s1 if _configured(s1) else None
    if stage == EscalationStage.STAGE1:
        return s1 + s2 if _configured(s1, s2) else None  # type: ignore[operator]
    if stage == EscalationStage.STAGE2:
        return s1 + s2 + s3 if _configured(s1, s2, s3) else None  # type: ignore[operator]
    # NOTIFIED is terminal: no further escalation date beyond the base.
    return None


def next_due_date(task: Task, today: date | None = None) -> DueDateInfo:
    """Compute the task's next due date and whether it has lapsed.

    Done tasks and tasks without a base due date are never overdue.
    Comparison is by calendar day; ``today`` defaults to the local date.
    """
    if today is None:
        today = date.today()

    base = task.base_due_date
    if base is None or task.status == TaskStatus.DONE.value:
        return DueDateInfo(date=base, is_overdue=False)

    try:
        stage = EscalationStage(task.escalation_stage)
    except ValueError:
        logger.warning("Task %s has unknown escalation stage %r", task.id, task.escalation_stage)
        stage = EscalationStage.NONE

    offset = _stage_offset_days(task, stage)
    due = base + timedelta(days=offset) if offset is not None else base
    return DueDateInfo(date=due, is_overdue=due < today)


@dataclass
class EscalationScanResult:
    target_date: date
    scanned: int = 0
    overdue: int = 0
    notified: int = 0


async def scan_escalations(
    session: AsyncSession,
    today: date | None = None,
    *,
    company_id: uuid.UUID | None = None,
) -> EscalationScanResult:
    """Publish a "task escalation due" event for every open task whose next due date has lapsed.

    Each lapsed due date is announced once: the task remembers the last date
    it was announced for, so a new notice goes out only after its stage or
    base date moves the due date. The stage itself is never advanced here;
    that belongs to the task owner.
    """
    if today is None:
        today = date.today()

    filters = [
        col(Task.status) != TaskStatus.DONE.value,
        col(Task.base_due_date).is_not(None),
        col(Task.escalation_stage) != EscalationStage.NOTIFIED.value,
    ]
    if company_id is not None:
        filters.append(col(Task.company_id) == company_id)

    result = await session.execute(select(Task).where(*filters).order_by(col(Task.base_due_date)))
    scan = EscalationScanResult(target_date=today)

    for task in result.scalars().all():
        scan.scanned += 1
        info = next_due_date(task, today)
        if not info.is_overdue or info.date is None:
            continue
        scan.overdue += 1
        if task.last_notified_due_date == info.date:
            continue
        published = await publish_safely(
            TaskEscalationDue(company_id=task.company_id, task_id=task.id, due_date=info.date, is_overdue=True)
        )
        if published:
            task.last_notified_due_date = info.date
            scan.notified += 1

    if scan.notified:
        await session.commit()
    return scan
