# api/volunteers/event_volunteers_model.py
from sqlalchemy import Column, Integer, DateTime, ForeignKey, UniqueConstraint, func
from sqlalchemy.orm import relationship
from config.database import Base


class EventVolunteer(Base):
    __tablename__ = "event_volunteers"
    __table_args__ = (
        UniqueConstraint("event_id", "member_id", name="uq_event_volunteer"),
    )

    id          = Column(Integer, primary_key=True, index=True)
    event_id    = Column(Integer, ForeignKey("events.id"), nullable=False, index=True)
    member_id   = Column(Integer, ForeignKey("members.id"), nullable=False, index=True)
    assigned_by = Column(Integer, ForeignKey("members.id"), nullable=True)
    assigned_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    event  = relationship("Event", back_populates="volunteers")
    member = relationship("Member", foreign_keys=[member_id])
