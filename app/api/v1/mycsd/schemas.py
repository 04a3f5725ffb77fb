from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field

from app.core.enums import ClaimStatus


# ----- Submit -----
class ClaimSubmit(BaseModel):
    """Organizer's claim for an event. The event's level/category are overwritten with these values."""

    event_id: UUID
    document_url: str = Field(..., max_length=2000, description="Uploaded Laporan Kejayaan (proof document) URL or path")
    level: str = Field(..., max_length=100, description="Participation level label, e.g. 'Negeri / Universiti'")
    category: str = Field(..., max_length=100, description="One of the five MyCSD categories")


# ----- Review -----
class ClaimReject(BaseModel):
    reason: str = Field(..., max_length=2000)


# ----- Responses -----
class ClaimResponse(BaseModel):
    id: UUID
    event_id: UUID
    user_id: Optional[UUID] = None
    proposed_level: Optional[str] = None
    proposed_category: Optional[str] = None
    lk_document: str
    status: ClaimStatus
    rejection_reason: Optional[str] = None
    reviewed_by: Optional[UUID] = None
    reviewed_at: Optional[datetime] = None
    submitted_at: datetime
    updated_at: datetime
    # Awarded score once approved, otherwise a preview from the event's current level
    points: int

    class Config:
        from_attributes = True


class ApprovalResult(BaseModel):
    claim: ClaimResponse
    record_id: UUID
    score: int
    category: str
    level: str
    distributed_count: int


class ClaimListItem(BaseModel):
    """Row in the admin review table."""

    id: UUID
    event_id: UUID
    event_name: str
    organization_name: str
    user_id: Optional[UUID] = None
    user_name: str
    category: str
    level: str
    points: int
    status: ClaimStatus
    proof_document: str
    rejection_reason: Optional[str] = None
    participant_count: int = 0
    submitted_at: datetime


class PointsPreview(BaseModel):
    level: Optional[str] = None
    resolved_level: str
    points: int
