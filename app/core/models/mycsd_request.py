"""MyCSD claim ("Laporan Kejayaan" submission): one row per event, upserted on resubmission."""

import uuid
from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from app.core.enums import ClaimStatus
from app.db.session import Base


class MyCSDRequest(Base):
    __tablename__ = "mycsd_requests"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    # Unique: at most one claim per event, rejected claims are reopened instead of duplicated
    event_id = Column(UUID(as_uuid=True), ForeignKey("events.id", ondelete="CASCADE"), nullable=False, unique=True)
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    proposed_level = Column(String(100), nullable=True)
    proposed_category = Column(String(100), nullable=True)
    lk_document = Column(Text, nullable=False)
    status = Column(String(20), nullable=False, default=ClaimStatus.pending.value, index=True)
    rejection_reason = Column(Text, nullable=True)
    reviewed_by = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    reviewed_at = Column(DateTime(timezone=True), nullable=True)
    submitted_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    event = relationship("Event", backref="mycsd_requests", foreign_keys=[event_id])
    submitter = relationship("User", foreign_keys=[user_id])
    reviewer = relationship("User", foreign_keys=[reviewed_by])
