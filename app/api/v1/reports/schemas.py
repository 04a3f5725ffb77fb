from datetime import date, datetime
from typing import Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, Field


class MyCSDSummary(BaseModel):
    """Student totals. Every category and level bucket is always present."""

    matric_no: Optional[str] = None
    total_points: int = 0
    total_events: int = 0
    points_by_category: Dict[str, int] = Field(default_factory=dict)
    points_by_level: Dict[str, int] = Field(default_factory=dict)
    events_this_month: int = 0
    points_this_month: int = 0


class StudentRecordItem(BaseModel):
    record_id: UUID
    event_id: UUID
    event_name: str
    organization_name: str
    event_date: Optional[date] = None
    category: str
    level: str
    position: str
    points: int
    awarded_at: datetime


class MonthlyPoints(BaseModel):
    month: str  # YYYY-MM
    points: int
    delta: int  # vs previous month


class AdminOverview(BaseModel):
    claims_by_status: Dict[str, int]
    total_points_awarded: int
    total_distributions: int
    points_by_category: Dict[str, int]
    points_by_level: Dict[str, int]
    monthly: List[MonthlyPoints]
