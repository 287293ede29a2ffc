from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, func
from sqlalchemy.orm import relationship
from config.database import Base


class GuestAttendance(Base):
    __tablename__ = "guest_attendances"

    id            = Column(Integer, primary_key=True, index=True)
    event_id      = Column(Integer, ForeignKey("events.id"), nullable=False, index=True)
    guest_name    = Column(String(150), nullable=False)
    guest_phone   = Column(String(30), nullable=True)
    purpose       = Column(Text, nullable=True)
    checked_in_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    recorded_by   = Column(Integer, ForeignKey("members.id"), nullable=True)

    event = relationship("Event", back_populates="guest_attendances")
