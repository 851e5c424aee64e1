from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import func, select
from sqlmodel import col

from punchclock.exceptions import NotFoundError
from punchclock.models.enums import AuditAction, AuditEntityType, RoleCategory, Weekday
from punchclock.models.thresholds import RoleThresholds
from punchclock.schemas.thresholds import ThresholdsListResponse, ThresholdsResponse
from punchclock.services.audit import model_to_audit_dict, write_audit_log

if TYPE_CHECKING:
    import uuid

    from sqlalchemy.ext.asyncio import AsyncSession

    from punchclock.schemas.auth import AuthContext
    from punchclock.schemas.thresholds import UpsertThresholdsRequest


def _build_thresholds_response(row: RoleThresholds) -> ThresholdsResponse:
    return ThresholdsResponse(
        role_category=RoleCategory(row.role_category),
        standard_daily_hours_max=row.standard_daily_hours_max,
        monthly_floating_leave_allowance=row.monthly_floating_leave_allowance,
        monthly_target_hours=row.monthly_target_hours,
        week_off_days=[Weekday(d) for d in row.week_off_days or []],
        updated_at=row.updated_at,
    )


async def _get_row(
    session: AsyncSession,
    company_id: uuid.UUID,
    role_category: RoleCategory,
) -> RoleThresholds | None:
    result = await session.execute(
        select(RoleThresholds).where(
            col(RoleThresholds.company_id) == company_id,
            col(RoleThresholds.role_category) == role_category.value,
        )
    )
    return result.scalar_one_or_none()


async def upsert_thresholds(
    session: AsyncSession,
    auth: AuthContext,
    role_category: RoleCategory,
    payload: UpsertThresholdsRequest,
) -> ThresholdsResponse:
    """Create or replace the thresholds of one role category.

    Takes effect on the next engine call; nothing is cached.
    """
    row = await _get_row(session, auth.company_id, role_category)
    week_off_days = sorted({int(d) for d in payload.week_off_days})

    if row is None:
        row = RoleThresholds(
            company_id=auth.company_id,
            role_category=role_category.value,
            standard_daily_hours_max=payload.standard_daily_hours_max,
            monthly_floating_leave_allowance=payload.monthly_floating_leave_allowance,
            monthly_target_hours=payload.monthly_target_hours,
            week_off_days=week_off_days,
        )
        session.add(row)
        action = AuditAction.CREATE
        before = None
    else:
        before = model_to_audit_dict(row)
        row.standard_daily_hours_max = payload.standard_daily_hours_max
        row.monthly_floating_leave_allowance = payload.monthly_floating_leave_allowance
        row.monthly_target_hours = payload.monthly_target_hours
        row.week_off_days = week_off_days
        session.add(row)
        action = AuditAction.UPDATE

    await session.flush()
    await session.refresh(row)

    # Thresholds are keyed by category, so the audit row points at the company.
    write_audit_log(
        session,
        company_id=auth.company_id,
        actor_id=auth.user_id,
        entity_type=AuditEntityType.ROLE_THRESHOLDS,
        entity_id=auth.company_id,
        action=action,
        before_json=before,
        after_json=model_to_audit_dict(row),
    )

    await session.commit()
    return _build_thresholds_response(row)


async def get_thresholds(
    session: AsyncSession,
    company_id: uuid.UUID,
    role_category: RoleCategory,
) -> ThresholdsResponse:
    row = await _get_row(session, company_id, role_category)
    if row is None:
        raise NotFoundError(f"No thresholds configured for {role_category.value}")
    return _build_thresholds_response(row)


async def list_thresholds(session: AsyncSession, company_id: uuid.UUID) -> ThresholdsListResponse:
    base_filter = [col(RoleThresholds.company_id) == company_id]
    count_result = await session.execute(select(func.count()).select_from(RoleThresholds).where(*base_filter))
    result = await session.execute(
        select(RoleThresholds).where(*base_filter).order_by(col(RoleThresholds.role_category))
    )
    return ThresholdsListResponse(
        items=[_build_thresholds_response(r) for r in result.scalars().all()],
        total=count_result.scalar_one(),
    )
