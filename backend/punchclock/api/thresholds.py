# ruff: noqa: TC001, TC003
from __future__ import annotations

from fastapi import APIRouter, Depends

from punchclock.api.deps import AdminDep, AuthDep, validate_company_scope
from punchclock.db import SessionDep
from punchclock.models.enums import RoleCategory
from punchclock.schemas.thresholds import ThresholdsListResponse, ThresholdsResponse, UpsertThresholdsRequest
from punchclock.services import thresholds as thresholds_service

thresholds_router = APIRouter(
    prefix="/companies/{company_id}/role-thresholds",
    tags=["thresholds"],
    dependencies=[Depends(validate_company_scope)],
)


@thresholds_router.get("", response_model=ThresholdsListResponse)
async def list_thresholds(session: SessionDep, auth: AuthDep) -> ThresholdsListResponse:
    """Thresholds of every configured role category."""
    return await thresholds_service.list_thresholds(session, auth.company_id)


@thresholds_router.put("/{role_category}", response_model=ThresholdsResponse)
async def upsert_thresholds(
    role_category: RoleCategory,
    payload: UpsertThresholdsRequest,
    session: SessionDep,
    auth: AdminDep,
) -> ThresholdsResponse:
    """Create or replace a category's thresholds (admin only). Applies to the next calculation."""
    return await thresholds_service.upsert_thresholds(session, auth, role_category, payload)


@thresholds_router.get("/{role_category}", response_model=ThresholdsResponse)
async def get_thresholds(role_category: RoleCategory, session: SessionDep, auth: AuthDep) -> ThresholdsResponse:
    return await thresholds_service.get_thresholds(session, auth.company_id, role_category)
