# ruff: noqa: TC003
from __future__ import annotations

import uuid

from pydantic import BaseModel

ADMIN_ROLES = frozenset({"admin", "hr"})


class AuthContext(BaseModel):
    """Dev auth context extracted from request headers."""

    company_id: uuid.UUID
    user_id: uuid.UUID
    role: str = "employee"

    @property
    def is_admin(self) -> bool:
        return self.role.lower() in ADMIN_ROLES

    def can_act_for(self, employee_id: uuid.UUID) -> bool:
        """Employees act for themselves; admins act for anyone in the company."""
        return self.user_id == employee_id or self.is_admin
