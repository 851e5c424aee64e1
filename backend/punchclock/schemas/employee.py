# ruff: noqa: TC003
from __future__ import annotations

import uuid

from pydantic import BaseModel, Field

from punchclock.models.enums import RoleCategory


class UpsertEmployeeRequest(BaseModel):
    """Request body for creating or updating an employee in the stub directory."""

    name: str = Field(min_length=1, max_length=255)
    role: str = Field(min_length=1, max_length=100)
    role_category: RoleCategory | None = None
    timezone: str | None = None
    reporting_manager_id: uuid.UUID | None = None


class EmployeeResponse(BaseModel):
    id: uuid.UUID
    company_id: uuid.UUID
    name: str
    role: str
    role_category: RoleCategory
    timezone: str | None
    reporting_manager_id: uuid.UUID | None


class EmployeeListResponse(BaseModel):
    items: list[EmployeeResponse]
    total: int
