# ruff: noqa: TC003
from __future__ import annotations

import datetime
import uuid

from sqlmodel import Field

from punchclock.models.base import CompanyScoped, TimestampMixin
from punchclock.models.enums import EscalationStage, TaskStatus


class Task(CompanyScoped, TimestampMixin, table=True):
    """Task with a base due date and a chain of escalation stage durations."""

    __tablename__ = "task"

    title: str = Field(max_length=255)
    assignee_id: uuid.UUID | None = Field(default=None, index=True)
    status: str = Field(default=TaskStatus.TODO.value, max_length=20)
    base_due_date: datetime.date | None = None
    escalation_stage: str = Field(default=EscalationStage.NONE.value, max_length=20)
    stage1_duration_days: int | None = None
    stage2_duration_days: int | None = None
    stage3_duration_days: int | None = None
    # Due date of the most recent escalation notice, so each one goes out once.
    last_notified_due_date: datetime.date | None = None
