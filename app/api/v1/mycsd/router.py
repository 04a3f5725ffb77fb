from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.dependencies import get_current_user
from app.auth.rbac import require_roles
from app.auth.schemas import CurrentUser
from app.core.enums import ClaimStatus, UserRole
from app.core.exceptions import ServiceError
from app.db.session import get_db

from .points import points_for_level, resolve_level
from .schemas import ApprovalResult, ClaimListItem, ClaimReject, ClaimResponse, ClaimSubmit, PointsPreview
from . import service

router = APIRouter(prefix="/api/v1/mycsd", tags=["mycsd"])


@router.get("/points", response_model=PointsPreview)
async def preview_points(
    level: Optional[str] = None,
    current_user: CurrentUser = Depends(get_current_user),
) -> PointsPreview:
    """Points a participant would receive for an event at this level. Display only."""
    return PointsPreview(level=level, resolved_level=resolve_level(level).value, points=points_for_level(level))


@router.post(
    "/claims",
    response_model=ClaimResponse,
    status_code=status.HTTP_201_CREATED,
)
async def submit_claim(
    payload: ClaimSubmit,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_roles(UserRole.ORGANIZER, UserRole.ADMIN)),
) -> ClaimResponse:
    """Submit or resubmit the MyCSD claim (Laporan Kejayaan) for an event."""
    try:
        return await service.submit_claim(db, payload, current_user)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get("/claims", response_model=List[ClaimListItem])
async def list_claims(
    status_filter: Optional[ClaimStatus] = Query(None, alias="status"),
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_roles(UserRole.ADMIN)),
) -> List[ClaimListItem]:
    """All claims for admin review, optionally filtered by status."""
    return await service.list_claims(db, status_filter=status_filter)


@router.get("/claims/{claim_id}", response_model=ClaimResponse)
async def get_claim(
    claim_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_roles(UserRole.ADMIN, UserRole.ORGANIZER)),
) -> ClaimResponse:
    try:
        return await service.get_claim(db, claim_id, current_user)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.post("/claims/{claim_id}/approve", response_model=ApprovalResult)
async def approve_claim(
    claim_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_roles(UserRole.ADMIN)),
) -> ApprovalResult:
    """Approve a pending claim and distribute points to present attendees."""
    try:
        return await service.approve_claim(db, claim_id, current_user)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.post("/claims/{claim_id}/reject", response_model=ClaimResponse)
async def reject_claim(
    claim_id: UUID,
    payload: ClaimReject,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_roles(UserRole.ADMIN)),
) -> ClaimResponse:
    """Reject a pending claim. A reason is required."""
    try:
        return await service.reject_claim(db, claim_id, current_user, payload.reason)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
