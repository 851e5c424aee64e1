"""Initial punchclock schema

Revision ID: 0001_initial
Revises:
Create Date: 2026-03-01 00:00:00
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

revision: str = "0001_initial"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def _id() -> sa.Column:
    return sa.Column("id", sa.Uuid(), primary_key=True, nullable=False)


def _company_id() -> sa.Column:
    return sa.Column("company_id", sa.Uuid(), nullable=False)


def _created_at() -> sa.Column:
    return sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now())


def upgrade() -> None:
    op.create_table(
        "attendance_event",
        _id(),
        _company_id(),
        _created_at(),
        sa.Column("employee_id", sa.Uuid(), nullable=False),
        sa.Column("timestamp", sa.DateTime(timezone=True), nullable=False),
        sa.Column("kind", sa.String(length=20), nullable=False),
        sa.Column("location_label", sa.String(length=255), nullable=True),
        sa.Column("corrects_event_id", sa.Uuid(), nullable=True),
        sa.Column("recorded_by", sa.Uuid(), nullable=True),
    )
    op.create_index("ix_attendance_event_company_id", "attendance_event", ["company_id"])
    op.create_index("ix_attendance_event_employee_id", "attendance_event", ["employee_id"])
    op.create_index("ix_attendance_employee_ts", "attendance_event", ["employee_id", "timestamp"])

    op.create_table(
        "leave_grant",
        _id(),
        _company_id(),
        _created_at(),
        sa.Column("employee_id", sa.Uuid(), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        sa.Column("leave_type", sa.String(length=50), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False),
    )
    op.create_index("ix_leave_grant_company_id", "leave_grant", ["company_id"])
    op.create_index("ix_leave_grant_employee_id", "leave_grant", ["employee_id"])
    op.create_index("ix_leave_employee_dates", "leave_grant", ["employee_id", "start_date", "end_date"])

    op.create_table(
        "fixed_holiday",
        _id(),
        _company_id(),
        sa.Column("month", sa.Integer(), nullable=False),
        sa.Column("day", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("employee_selectable", sa.Boolean(), nullable=False),
        sa.UniqueConstraint("company_id", "month", "day", name="uq_fixed_holiday_month_day"),
    )
    op.create_index("ix_fixed_holiday_company_id", "fixed_holiday", ["company_id"])

    op.create_table(
        "fixed_holiday_selection",
        _id(),
        _company_id(),
        sa.Column("employee_id", sa.Uuid(), nullable=False),
        sa.Column("holiday_id", sa.Uuid(), nullable=False),
        sa.Column("year", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(["holiday_id"], ["fixed_holiday.id"], ondelete="CASCADE"),
        sa.UniqueConstraint("employee_id", "holiday_id", "year", name="uq_holiday_selection"),
    )
    op.create_index("ix_fixed_holiday_selection_company_id", "fixed_holiday_selection", ["company_id"])
    op.create_index("ix_fixed_holiday_selection_employee_id", "fixed_holiday_selection", ["employee_id"])

    op.create_table(
        "recurring_holiday_rule",
        _id(),
        _company_id(),
        sa.Column("role_category", sa.String(length=20), nullable=False),
        sa.Column("weekday", sa.Integer(), nullable=False),
        sa.Column("occurrence_index", sa.Integer(), nullable=False),
        sa.UniqueConstraint("company_id", "role_category", "weekday", "occurrence_index", name="uq_recurring_rule"),
    )
    op.create_index("ix_recurring_holiday_rule_company_id", "recurring_holiday_rule", ["company_id"])

    op.create_table(
        "company_holiday",
        _id(),
        _company_id(),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.UniqueConstraint("company_id", "date", name="uq_holiday_company_date"),
    )
    op.create_index("ix_company_holiday_company_id", "company_holiday", ["company_id"])

    op.create_table(
        "role_thresholds",
        sa.Column("company_id", sa.Uuid(), nullable=False),
        sa.Column("role_category", sa.String(length=20), nullable=False),
        sa.Column("standard_daily_hours_max", sa.Float(), nullable=False),
        sa.Column("monthly_floating_leave_allowance", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("monthly_target_hours", sa.Float(), nullable=True),
        sa.Column("week_off_days", sa.JSON(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("company_id", "role_category"),
        sa.CheckConstraint("standard_daily_hours_max > 0", name="ck_thresholds_daily_hours_positive"),
        sa.CheckConstraint("monthly_floating_leave_allowance >= 0", name="ck_thresholds_allowance_non_negative"),
    )

    op.create_table(
        "overtime_balance",
        sa.Column("company_id", sa.Uuid(), nullable=False),
        sa.Column("employee_id", sa.Uuid(), nullable=False),
        sa.Column("banked_minutes", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("month_to_date_minutes", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("month_to_date_period", sa.Date(), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("version", sa.Integer(), nullable=False, server_default="1"),
        sa.PrimaryKeyConstraint("company_id", "employee_id"),
        sa.CheckConstraint("banked_minutes >= 0", name="ck_overtime_banked_non_negative"),
        sa.CheckConstraint("month_to_date_minutes >= 0", name="ck_overtime_mtd_non_negative"),
    )
    op.create_index("ix_overtime_balance_employee_id", "overtime_balance", ["employee_id"])

    op.create_table(
        "overtime_ledger_entry",
        _id(),
        _company_id(),
        _created_at(),
        sa.Column("employee_id", sa.Uuid(), nullable=False),
        sa.Column("entry_type", sa.String(length=20), nullable=False),
        sa.Column("minutes", sa.Integer(), nullable=False),
        sa.Column("session_minutes", sa.Integer(), nullable=True),
        sa.Column("check_in_event_id", sa.Uuid(), nullable=True),
        sa.Column("check_out_event_id", sa.Uuid(), nullable=True),
        sa.Column("reversed_entry_id", sa.Uuid(), nullable=True),
    )
    op.create_index("ix_overtime_ledger_entry_company_id", "overtime_ledger_entry", ["company_id"])
    op.create_index("ix_overtime_ledger_employee", "overtime_ledger_entry", ["company_id", "employee_id"])

    op.create_table(
        "comp_off_unit",
        _id(),
        _company_id(),
        _created_at(),
        sa.Column("employee_id", sa.Uuid(), nullable=False),
        sa.Column("earned_date", sa.Date(), nullable=False),
        sa.Column("reason", sa.String(length=255), nullable=False),
        sa.Column("source_event_id", sa.Uuid(), nullable=True),
    )
    op.create_index("ix_comp_off_unit_company_id", "comp_off_unit", ["company_id"])
    op.create_index("ix_comp_off_unit_employee_id", "comp_off_unit", ["employee_id"])

    op.create_table(
        "task",
        _id(),
        _company_id(),
        _created_at(),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("assignee_id", sa.Uuid(), nullable=True),
        sa.Column("status", sa.String(length=20), nullable=False),
        sa.Column("base_due_date", sa.Date(), nullable=True),
        sa.Column("escalation_stage", sa.String(length=20), nullable=False),
        sa.Column("stage1_duration_days", sa.Integer(), nullable=True),
        sa.Column("stage2_duration_days", sa.Integer(), nullable=True),
        sa.Column("stage3_duration_days", sa.Integer(), nullable=True),
        sa.Column("last_notified_due_date", sa.Date(), nullable=True),
    )
    op.create_index("ix_task_company_id", "task", ["company_id"])
    op.create_index("ix_task_assignee_id", "task", ["assignee_id"])

    op.create_table(
        "audit_log",
        _id(),
        _company_id(),
        sa.Column("actor_id", sa.Uuid(), nullable=False),
        sa.Column("entity_type", sa.String(length=50), nullable=False),
        sa.Column("entity_id", sa.Uuid(), nullable=False),
        sa.Column("action", sa.String(length=50), nullable=False),
        sa.Column("before_json", sa.JSON(), nullable=True),
        sa.Column("after_json", sa.JSON(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_audit_log_company_id", "audit_log", ["company_id"])
    op.create_index("ix_audit_log_created_at", "audit_log", ["created_at"])
    op.create_index("ix_audit_entity", "audit_log", ["entity_type", "entity_id"])


def downgrade() -> None:
    for table in (
        "audit_log",
        "task",
        "comp_off_unit",
        "overtime_ledger_entry",
        "overtime_balance",
        "role_thresholds",
        "company_holiday",
        "recurring_holiday_rule",
        "fixed_holiday_selection",
        "fixed_holiday",
        "leave_grant",
        "attendance_event",
    ):
        op.drop_table(table)
