"""Events with their MyCSD metadata. mycsd_points is only written when a claim is approved."""

import uuid
from datetime import datetime

from sqlalchemy import Boolean, Column, Date, DateTime, ForeignKey, Integer, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from app.core.enums import EventStatus
from app.db.session import Base


class Event(Base):
    __tablename__ = "events"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    proposal_id = Column(UUID(as_uuid=True), ForeignKey("event_proposals.id", ondelete="SET NULL"), nullable=True, index=True)
    title = Column(String(255), nullable=False)
    category = Column(String(50), nullable=True)  # sport, academic, cultural, talk, workshop, ...
    event_date = Column(Date, nullable=True)
    status = Column(String(20), nullable=False, default=EventStatus.DRAFT.value)
    # Organizer-entered label, e.g. "Negeri / Universiti"; scored through the point scale
    mycsd_level = Column(String(100), nullable=True)
    mycsd_category = Column(String(100), nullable=True)
    has_mycsd = Column(Boolean, nullable=False, default=False)
    is_mycsd_claimed = Column(Boolean, nullable=False, default=False)
    # Frozen to the ledger score at approval
    mycsd_points = Column(Integer, nullable=True)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    proposal = relationship("EventProposal", foreign_keys=[proposal_id])
