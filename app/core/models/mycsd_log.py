"""Distribution entry: points actually awarded to one student for one ledger entry."""

import uuid
from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from app.db.session import Base


POSITION_PARTICIPANT = "Participant"


class MyCSDLog(Base):
    __tablename__ = "mycsd_logs"
    __table_args__ = (UniqueConstraint("matric_no", "record_id", name="uq_mycsd_log_matric_record"),)

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    matric_no = Column(String(50), nullable=False, index=True)
    record_id = Column(UUID(as_uuid=True), ForeignKey("mycsd_records.id", ondelete="RESTRICT"), nullable=False, index=True)
    score = Column(Integer, nullable=False)
    position = Column(String(50), nullable=False, default=POSITION_PARTICIPANT)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)

    record = relationship("MyCSDRecord", backref="logs", foreign_keys=[record_id])
