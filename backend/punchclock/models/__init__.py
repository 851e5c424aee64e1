from sqlmodel import SQLModel

from punchclock.models.attendance import AttendanceEvent
from punchclock.models.audit import AuditLog
from punchclock.models.base import CompanyScoped, TimestampMixin, UUIDBase
from punchclock.models.enums import (
    AuditAction,
    AuditEntityType,
    DayCategory,
    EscalationStage,
    EventKind,
    LeaveStatus,
    OvertimeEntryType,
    RoleCategory,
    TaskStatus,
    Weekday,
)
from punchclock.models.holiday import CompanyHoliday, FixedHoliday, FixedHolidaySelection, RecurringHolidayRule
from punchclock.models.leave import LeaveGrant
from punchclock.models.overtime import CompOffUnit, OvertimeBalance, OvertimeLedgerEntry
from punchclock.models.task import Task
from punchclock.models.thresholds import RoleThresholds

__all__ = [
    "AttendanceEvent",
    "AuditAction",
    "AuditEntityType",
    "AuditLog",
    "CompOffUnit",
    "CompanyHoliday",
    "CompanyScoped",
    "DayCategory",
    "EscalationStage",
    "EventKind",
    "FixedHoliday",
    "FixedHolidaySelection",
    "LeaveGrant",
    "LeaveStatus",
    "OvertimeBalance",
    "OvertimeEntryType",
    "OvertimeLedgerEntry",
    "RecurringHolidayRule",
    "RoleCategory",
    "RoleThresholds",
    "SQLModel",
    "Task",
    "TaskStatus",
    "TimestampMixin",
    "UUIDBase",
    "Weekday",
]
