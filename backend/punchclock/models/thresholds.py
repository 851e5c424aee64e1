# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import datetime

import sqlalchemy as sa
from sqlmodel import Field, SQLModel

from punchclock.models.base import now_utc


class RoleThresholds(SQLModel, table=True):
    """Per role category limits that drive overtime and floating holidays."""

    __tablename__ = "role_thresholds"
    __table_args__ = (
        sa.PrimaryKeyConstraint("company_id", "role_category"),
        sa.CheckConstraint("standard_daily_hours_max > 0", name="ck_thresholds_daily_hours_positive"),
        sa.CheckConstraint("monthly_floating_leave_allowance >= 0", name="ck_thresholds_allowance_non_negative"),
    )

    company_id: uuid.UUID
    role_category: str = Field(max_length=20)
    standard_daily_hours_max: float
    monthly_floating_leave_allowance: int = Field(default=0, sa_column_kwargs={"server_default": "0"})
    monthly_target_hours: float | None = None
    week_off_days: list[int] = Field(default_factory=lambda: [0], sa_type=sa.JSON)
    updated_at: datetime = Field(  # type: ignore[call-overload]
        default_factory=now_utc,
        sa_type=sa.DateTime(timezone=True),
        sa_column_kwargs={"server_default": sa.func.now(), "onupdate": sa.func.now()},
    )
