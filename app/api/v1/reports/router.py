from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.rbac import require_roles
from app.auth.schemas import CurrentUser
from app.core.config import settings
from app.core.enums import UserRole
from app.db.session import get_db

from .schemas import AdminOverview, MyCSDSummary, StudentRecordItem
from . import service

router = APIRouter(prefix="/api/v1/reports", tags=["reports"])


@router.get("/me/summary", response_model=MyCSDSummary)
async def my_summary(
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_roles(UserRole.STUDENT)),
) -> MyCSDSummary:
    """MyCSD totals for the logged-in student."""
    return await service.summarize_for_user(db, current_user)


@router.get("/me/records", response_model=List[StudentRecordItem])
async def my_records(
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_roles(UserRole.STUDENT)),
) -> List[StudentRecordItem]:
    matric = current_user.matric_num or await service.resolve_matric(db, current_user.id)
    return await service.list_student_records(db, matric)


@router.get("/students/{matric_no}/summary", response_model=MyCSDSummary)
async def student_summary(
    matric_no: str,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_roles(UserRole.ADMIN)),
) -> MyCSDSummary:
    return await service.summarize(db, matric_no)


@router.get("/overview", response_model=AdminOverview)
async def overview(
    months: Optional[int] = Query(None, ge=1, le=60),
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_roles(UserRole.ADMIN)),
) -> AdminOverview:
    """Admin dashboard: claim counts, points awarded and a per-month series."""
    return await service.admin_overview(db, months=months or settings.overview_months)
