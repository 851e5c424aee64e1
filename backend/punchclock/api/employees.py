# ruff: noqa: TC003
from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends

from punchclock.api.deps import AdminDep, AuthDep, validate_company_scope
from punchclock.exceptions import NotFoundError
from punchclock.schemas.employee import EmployeeListResponse, EmployeeResponse, UpsertEmployeeRequest
from punchclock.services.employee import EmployeeInfo, get_employee_service

employees_router = APIRouter(
    prefix="/companies/{company_id}/employees",
    tags=["employees"],
    dependencies=[Depends(validate_company_scope)],
)


def _to_response(employee: EmployeeInfo) -> EmployeeResponse:
    return EmployeeResponse(
        id=employee.id,
        company_id=employee.company_id,
        name=employee.name,
        role=employee.role,
        role_category=employee.category,
        timezone=employee.timezone,
        reporting_manager_id=employee.reporting_manager_id,
    )


@employees_router.put(
    "/{employee_id}",
    response_model=EmployeeResponse,
)
async def upsert_employee(
    company_id: uuid.UUID,
    employee_id: uuid.UUID,
    payload: UpsertEmployeeRequest,
    auth: AdminDep,
) -> EmployeeResponse:
    """Create or update an employee in the stub service (admin only)."""
    svc = get_employee_service()
    employee = EmployeeInfo(
        id=employee_id,
        company_id=company_id,
        name=payload.name,
        role=payload.role,
        role_category=payload.role_category,
        timezone=payload.timezone,
        reporting_manager_id=payload.reporting_manager_id,
    )
    svc.seed(employee)  # ty: ignore[unresolved-attribute]
    return _to_response(employee)


@employees_router.get(
    "/{employee_id}",
    response_model=EmployeeResponse,
)
async def get_employee(
    company_id: uuid.UUID,
    employee_id: uuid.UUID,
    auth: AuthDep,
) -> EmployeeResponse:
    """Get employee info from the stub service."""
    employee = await get_employee_service().get_employee(company_id, employee_id)
    if employee is None:
        raise NotFoundError("Employee not found")
    return _to_response(employee)


@employees_router.get(
    "",
    response_model=EmployeeListResponse,
)
async def list_employees(
    company_id: uuid.UUID,
    auth: AuthDep,
) -> EmployeeListResponse:
    """List all employees for a company from the stub service."""
    employees = await get_employee_service().list_employees(company_id)
    items = [_to_response(e) for e in employees]
    return EmployeeListResponse(items=items, total=len(items))
