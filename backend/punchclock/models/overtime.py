# ruff: noqa: TC003
from __future__ import annotations

import datetime
import uuid

import sqlalchemy as sa
from sqlmodel import Field, SQLModel

from punchclock.models.base import CompanyScoped, TimestampMixin, now_utc


class OvertimeBalance(SQLModel, table=True):
    """Running overtime bank per employee, locked FOR UPDATE on every check-out."""

    __tablename__ = "overtime_balance"
    __table_args__ = (
        sa.PrimaryKeyConstraint("company_id", "employee_id"),
        sa.CheckConstraint("banked_minutes >= 0", name="ck_overtime_banked_non_negative"),
        sa.CheckConstraint("month_to_date_minutes >= 0", name="ck_overtime_mtd_non_negative"),
    )

    company_id: uuid.UUID
    employee_id: uuid.UUID = Field(index=True)
    banked_minutes: int = Field(default=0, sa_column_kwargs={"server_default": "0"})
    month_to_date_minutes: int = Field(default=0, sa_column_kwargs={"server_default": "0"})
    # First day of the month that month_to_date_minutes belongs to.
    month_to_date_period: datetime.date | None = None
    updated_at: datetime.datetime = Field(  # type: ignore[call-overload]
        default_factory=now_utc,
        sa_type=sa.DateTime(timezone=True),
        sa_column_kwargs={"server_default": sa.func.now(), "onupdate": sa.func.now()},
    )
    version: int = Field(default=1, sa_column_kwargs={"server_default": "1"})


class OvertimeLedgerEntry(CompanyScoped, TimestampMixin, table=True):
    """Append-only record of every change to an overtime bank.

    OVERTIME rows carry positive minutes credited by a check-out; CONVERSION
    rows carry the negative minutes deducted when comp-off units are issued.
    REVERSAL rows take back an OVERTIME credit whose session was corrected
    and point at it through ``reversed_entry_id``.
    """

    __tablename__ = "overtime_ledger_entry"
    __table_args__ = (sa.Index("ix_overtime_ledger_employee", "company_id", "employee_id"),)

    employee_id: uuid.UUID
    entry_type: str = Field(max_length=20)
    minutes: int
    session_minutes: int | None = None
    check_in_event_id: uuid.UUID | None = Field(default=None, sa_type=sa.Uuid)
    check_out_event_id: uuid.UUID | None = Field(default=None, sa_type=sa.Uuid)
    reversed_entry_id: uuid.UUID | None = Field(default=None, sa_type=sa.Uuid)


class CompOffUnit(CompanyScoped, TimestampMixin, table=True):
    """One paid day off earned by converting banked overtime. Never mutated."""

    __tablename__ = "comp_off_unit"

    employee_id: uuid.UUID = Field(index=True)
    earned_date: datetime.date
    reason: str = Field(max_length=255)
    source_event_id: uuid.UUID | None = Field(default=None, sa_type=sa.Uuid)
