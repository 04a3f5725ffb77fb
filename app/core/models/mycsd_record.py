"""Ledger entry: the score an approved claim is worth, fixed at approval time."""

import uuid
from datetime import datetime

from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from app.db.session import Base


class MyCSDRecord(Base):
    __tablename__ = "mycsd_records"
    __table_args__ = (CheckConstraint("mycsd_score > 0", name="ck_mycsd_record_score_positive"),)

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    request_id = Column(
        UUID(as_uuid=True),
        ForeignKey("mycsd_requests.id", ondelete="RESTRICT"),
        nullable=False,
        unique=True,
    )
    event_id = Column(UUID(as_uuid=True), ForeignKey("events.id", ondelete="RESTRICT"), nullable=False, index=True)
    mycsd_score = Column(Integer, nullable=False)
    mycsd_category = Column(String(100), nullable=False)
    event_level = Column(String(100), nullable=False)
    mycsd_type = Column(String(20), nullable=False, default="event")
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False, index=True)

    request = relationship("MyCSDRequest", backref="records", foreign_keys=[request_id])
    event = relationship("Event", foreign_keys=[event_id])
