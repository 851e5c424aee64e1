from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING

from sqlalchemy import func, select
from sqlmodel import col

from punchclock.exceptions import NotFoundError
from punchclock.models.enums import AuditAction, AuditEntityType, EscalationStage, TaskStatus
from punchclock.models.task import Task
from punchclock.schemas.task import TaskListResponse, TaskResponse
from punchclock.services.audit import model_to_audit_dict, write_audit_log
from punchclock.services.escalation import next_due_date

if TYPE_CHECKING:
    import uuid

    from sqlalchemy.ext.asyncio import AsyncSession

    from punchclock.schemas.auth import AuthContext
    from punchclock.schemas.task import CreateTaskRequest, UpdateTaskRequest


def build_task_response(task: Task, today: date | None = None) -> TaskResponse:
    """Build a TaskResponse, including the computed next due date."""
    due = next_due_date(task, today)
    return TaskResponse(
        id=task.id,
        title=task.title,
        assignee_id=task.assignee_id,
        status=TaskStatus(task.status),
        escalation_stage=EscalationStage(task.escalation_stage),
        base_due_date=task.base_due_date,
        stage1_duration_days=task.stage1_duration_days,
        stage2_duration_days=task.stage2_duration_days,
        stage3_duration_days=task.stage3_duration_days,
        next_due_date=due.date,
        next_due_display=due.display,
        is_overdue=due.is_overdue,
    )


async def create_task(
    session: AsyncSession,
    auth: AuthContext,
    payload: CreateTaskRequest,
) -> TaskResponse:
    task = Task(
        company_id=auth.company_id,
        title=payload.title,
        assignee_id=payload.assignee_id,
        base_due_date=payload.base_due_date,
        stage1_duration_days=payload.stage1_duration_days,
        stage2_duration_days=payload.stage2_duration_days,
        stage3_duration_days=payload.stage3_duration_days,
    )
    session.add(task)
    await session.flush()

    write_audit_log(
        session,
        company_id=auth.company_id,
        actor_id=auth.user_id,
        entity_type=AuditEntityType.TASK,
        entity_id=task.id,
        action=AuditAction.CREATE,
        after_json=model_to_audit_dict(task),
    )

    await session.commit()
    return build_task_response(task)


async def get_task(session: AsyncSession, company_id: uuid.UUID, task_id: uuid.UUID) -> Task:
    """Get a single task or raise 404."""
    result = await session.execute(
        select(Task).where(
            col(Task.id) == task_id,
            col(Task.company_id) == company_id,
        )
    )
    task = result.scalar_one_or_none()
    if task is None:
        raise NotFoundError("Task not found")
    return task


async def list_tasks(
    session: AsyncSession,
    company_id: uuid.UUID,
    status: TaskStatus | None = None,
    assignee_id: uuid.UUID | None = None,
    overdue_only: bool = False,
    offset: int = 0,
    limit: int = 50,
) -> TaskListResponse:
    """List tasks in creation order.

    The overdue state depends on the computed due date, so ``overdue_only``
    evaluates every candidate task before paging.
    """
    base_filter = [col(Task.company_id) == company_id]
    if status is not None:
        base_filter.append(col(Task.status) == status.value)
    if assignee_id is not None:
        base_filter.append(col(Task.assignee_id) == assignee_id)

    today = date.today()
    if overdue_only:
        # A task can only be overdue once its base due date has passed.
        base_filter.extend(
            [
                col(Task.status) != TaskStatus.DONE.value,
                col(Task.base_due_date).is_not(None),
                col(Task.base_due_date) < today,
            ]
        )
        result = await session.execute(select(Task).where(*base_filter).order_by(col(Task.created_at)))
        items = [build_task_response(t, today) for t in result.scalars().all()]
        overdue = [item for item in items if item.is_overdue]
        return TaskListResponse(items=overdue[offset : offset + limit], total=len(overdue))

    count_result = await session.execute(select(func.count()).select_from(Task).where(*base_filter))
    total = count_result.scalar_one()

    result = await session.execute(
        select(Task).where(*base_filter).order_by(col(Task.created_at)).offset(offset).limit(limit)
    )
    items = [build_task_response(t, today) for t in result.scalars().all()]
    return TaskListResponse(items=items, total=total)


async def update_task(
    session: AsyncSession,
    auth: AuthContext,
    task_id: uuid.UUID,
    payload: UpdateTaskRequest,
) -> TaskResponse:
    """Apply the fields present in ``payload``; an explicit null clears a duration."""
    task = await get_task(session, auth.company_id, task_id)
    before = model_to_audit_dict(task)

    for key, value in payload.model_dump(exclude_unset=True).items():
        if key in ("status", "escalation_stage"):
            if value is None:
                continue
            value = value.value
        setattr(task, key, value)

    session.add(task)
    await session.flush()

    write_audit_log(
        session,
        company_id=auth.company_id,
        actor_id=auth.user_id,
        entity_type=AuditEntityType.TASK,
        entity_id=task.id,
        action=AuditAction.UPDATE,
        before_json=before,
        after_json=model_to_audit_dict(task),
    )

    await session.commit()
    return build_task_response(task)
