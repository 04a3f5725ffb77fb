from datetime import date
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class EventMyCSDUpdate(BaseModel):
    """MyCSD metadata edit. mycsd_points is derived from level and cannot be sent."""

    model_config = ConfigDict(extra="forbid")

    level: Optional[str] = Field(None, max_length=100)
    category: Optional[str] = Field(None, max_length=100)
    has_mycsd: Optional[bool] = None


class EventMyCSDResponse(BaseModel):
    event_id: UUID
    title: str
    status: str
    event_date: Optional[date] = None
    level: Optional[str] = None
    category: Optional[str] = None
    has_mycsd: bool
    is_mycsd_claimed: bool
    # Frozen score once claimed, otherwise what the current level is worth
    points: int
