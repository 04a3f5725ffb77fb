from typing import Optional
from uuid import UUID

from pydantic import BaseModel


class CurrentUser(BaseModel):
    """Lightweight representation of the authenticated user for role and ownership checks."""

    id: UUID
    role: str
    organization_id: Optional[UUID] = None
    matric_num: Optional[str] = None  # Set for students with a student profile
