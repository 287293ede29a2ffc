# api/events/events_model.py
from sqlalchemy import Column, Integer, String, Boolean, Enum, Date, DateTime, ForeignKey, func
from sqlalchemy.orm import relationship
from config.database import Base
import enum


class EventType(enum.Enum):
    tuesday_fellowship = 'TUESDAY_FELLOWSHIP'
    thursday_phaneroo  = 'THURSDAY_PHANEROO'


class Event(Base):
    __tablename__ = 'events'

    id                  = Column(Integer, primary_key=True, index=True)
    name                = Column(String(200), nullable=False)
    date                = Column(Date, nullable=False, index=True)
    start_time          = Column(String(5), nullable=False)     # "HH:MM", organisation local time
    end_time            = Column(String(5), nullable=False)
    type                = Column(Enum(EventType), nullable=False)
    venue               = Column(String(200), nullable=True)
    is_active           = Column(Boolean, nullable=False, default=False)
    allow_guest_checkin = Column(Boolean, nullable=False, default=False)
    is_recurring        = Column(Boolean, nullable=False, default=False)
    recurrence_rule     = Column(String(255), nullable=True)
    created_by          = Column(Integer, ForeignKey('members.id'), nullable=True)
    created_at          = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at          = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    attendances       = relationship("Attendance", back_populates="event", cascade="all, delete-orphan")
    guest_attendances = relationship("GuestAttendance", back_populates="event", cascade="all, delete-orphan")
    volunteers        = relationship("EventVolunteer", back_populates="event", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<Event(id={self.id}, name='{self.name}', date={self.date})>"
