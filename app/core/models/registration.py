import uuid
from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, String, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from app.core.enums import AttendanceStatus
from app.db.session import Base


class Registration(Base):
    """Student registration for an event. attendance is marked at check-in."""

    __tablename__ = "registrations"
    __table_args__ = (UniqueConstraint("event_id", "user_id", name="uq_registration_event_user"),)

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    event_id = Column(UUID(as_uuid=True), ForeignKey("events.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    attendance = Column(String(20), nullable=False, default=AttendanceStatus.PENDING.value)
    status = Column(String(20), nullable=False, default="confirmed")  # confirmed, cancelled
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)

    event = relationship("Event", backref="registrations", foreign_keys=[event_id])
    user = relationship("User", foreign_keys=[user_id])
