# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import date

from pydantic import BaseModel, Field

from punchclock.models.enums import EscalationStage, TaskStatus


class CreateTaskRequest(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    assignee_id: uuid.UUID | None = None
    base_due_date: date | None = None
    stage1_duration_days: int | None = Field(default=None, ge=0)
    stage2_duration_days: int | None = Field(default=None, ge=0)
    stage3_duration_days: int | None = Field(default=None, ge=0)


class UpdateTaskRequest(BaseModel):
    """Fields an operator may change; unset fields are left alone."""

    status: TaskStatus | None = None
    escalation_stage: EscalationStage | None = None
    base_due_date: date | None = None
    stage1_duration_days: int | None = Field(default=None, ge=0)
    stage2_duration_days: int | None = Field(default=None, ge=0)
    stage3_duration_days: int | None = Field(default=None, ge=0)


class TaskResponse(BaseModel):
    id: uuid.UUID
    title: str
    assignee_id: uuid.UUID | None
    status: TaskStatus
    escalation_stage: EscalationStage
    base_due_date: date | None
    stage1_duration_days: int | None
    stage2_duration_days: int | None
    stage3_duration_days: int | None
    next_due_date: date | None
    next_due_display: str
    is_overdue: bool


class TaskListResponse(BaseModel):
    items: list[TaskResponse]
    total: int


class EscalationScanResponse(BaseModel):
    target_date: date
    scanned: int
    overdue: int
    notified: int
