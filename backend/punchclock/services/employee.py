# ruff: noqa: TC003
from __future__ import annotations

import uuid
from typing import Protocol, runtime_checkable

from pydantic import BaseModel

from punchclock.models.enums import RoleCategory

# Role names (either spelling) that belong to the office staff category.
_OFFICE_ROLES = frozenset(
    {
        "admin",
        "hr",
        "finance",
        "developer",
        "management",
        "office_staff",
        "back_office_staff",
        "bd",
        "business developer",
        "operation_manager",
        "operation manager",
        "field_staff",
        "field staff",
        "finance_manager",
        "finance manager",
        "hr_ops",
        "hr ops",
        "unverified",
    }
)
_SITE_ROLES = frozenset({"site_manager", "site manager", "site_supervisor", "site supervisor"})


def resolve_role_category(role: str | None) -> RoleCategory:
    """Map a role name to its staff category; unknown roles are field staff."""
    name = (role or "").strip().lower()
    if name in _OFFICE_ROLES:
        return RoleCategory.OFFICE
    if name in _SITE_ROLES:
        return RoleCategory.SITE
    return RoleCategory.FIELD


class EmployeeInfo(BaseModel):
    """Employee metadata from the Employee Service."""

    id: uuid.UUID
    company_id: uuid.UUID
    name: str
    role: str
    role_category: RoleCategory | None = None  # explicit override of the role mapping
    timezone: str | None = None  # e.g. "Asia/Kolkata"
    reporting_manager_id: uuid.UUID | None = None

    @property
    def category(self) -> RoleCategory:
        """Effective role category."""
        return self.role_category or resolve_role_category(self.role)


@runtime_checkable
class EmployeeService(Protocol):
    """Interface for the Employee Service."""

    async def get_employee(self, company_id: uuid.UUID, employee_id: uuid.UUID) -> EmployeeInfo | None:
        """Fetch employee metadata. Returns None if not found."""
        ...

    async def list_employees(self, company_id: uuid.UUID) -> list[EmployeeInfo]:
        """List all employees for a company."""
        ...


class InMemoryEmployeeService:
    """In-memory stub implementation for development."""

    def __init__(self) -> None:
        self._employees: dict[tuple[uuid.UUID, uuid.UUID], EmployeeInfo] = {}

    def seed(self, employee: EmployeeInfo) -> None:
        """Seed an employee for testing."""
        self._employees[(employee.company_id, employee.id)] = employee

    async def get_employee(self, company_id: uuid.UUID, employee_id: uuid.UUID) -> EmployeeInfo | None:
        """Fetch employee metadata. Returns None if not found."""
        return self._employees.get((company_id, employee_id))

    async def list_employees(self, company_id: uuid.UUID) -> list[EmployeeInfo]:
        """List all employees for a company."""
        return [e for e in self._employees.values() if e.company_id == company_id]


_employee_service: EmployeeService = InMemoryEmployeeService()


def get_employee_service() -> EmployeeService:
    """FastAPI dependency for the Employee Service."""
    return _employee_service


def set_employee_service(service: EmployeeService) -> None:
    """Override the service (for testing or production wiring)."""
    global _employee_service
    _employee_service = service
