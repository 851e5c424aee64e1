from __future__ import annotations

import datetime
import enum


class EventKind(enum.StrEnum):
    """Kind of a captured attendance punch."""

    CHECK_IN = "CHECK_IN"
    CHECK_OUT = "CHECK_OUT"
    BREAK_IN = "BREAK_IN"
    BREAK_OUT = "BREAK_OUT"


class LeaveStatus(enum.StrEnum):
    """Workflow status of a leave grant. Only APPROVED grants count as leave days."""

    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class RoleCategory(enum.StrEnum):
    """Staff category that selects thresholds and recurring holiday rules."""

    OFFICE = "office"
    FIELD = "field"
    SITE = "site"


class Weekday(enum.IntEnum):
    """Day of week, Sunday first (0=Sunday .. 6=Saturday)."""

    SUNDAY = 0
    MONDAY = 1
    TUESDAY = 2
    WEDNESDAY = 3
    THURSDAY = 4
    FRIDAY = 5
    SATURDAY = 6

    @classmethod
    def of(cls, day: datetime.date) -> Weekday:
        """Weekday of a calendar date; ``date.weekday()`` counts from Monday."""
        return cls((day.weekday() + 1) % 7)


class DayCategory(enum.StrEnum):
    """The single category a calendar day is assigned for payroll."""

    WORKED = "WORKED"
    LEAVE = "LEAVE"
    HOLIDAY = "HOLIDAY"
    WEEK_OFF = "WEEK_OFF"
    UNPAID = "UNPAID"


class EscalationStage(enum.StrEnum):
    """Position of a task in its deadline-extension chain."""

    NONE = "NONE"
    STAGE1 = "STAGE1"
    STAGE2 = "STAGE2"
    NOTIFIED = "NOTIFIED"


class TaskStatus(enum.StrEnum):
    """Work status of a task."""

    TODO = "TODO"
    IN_PROGRESS = "IN_PROGRESS"
    DONE = "DONE"


class OvertimeEntryType(enum.StrEnum):
    """Type of an overtime ledger row."""

    OVERTIME = "OVERTIME"
    CONVERSION = "CONVERSION"
    REVERSAL = "REVERSAL"


class AuditEntityType(enum.StrEnum):
    """Entity type recorded in the audit log."""

    FIXED_HOLIDAY = "FIXED_HOLIDAY"
    RECURRING_RULE = "RECURRING_RULE"
    COMPANY_HOLIDAY = "COMPANY_HOLIDAY"
    HOLIDAY_SELECTION = "HOLIDAY_SELECTION"
    ROLE_THRESHOLDS = "ROLE_THRESHOLDS"
    COMP_OFF = "COMP_OFF"
    TASK = "TASK"


class AuditAction(enum.StrEnum):
    """Action recorded in the audit log."""

    CREATE = "CREATE"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
