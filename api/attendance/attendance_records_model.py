from sqlalchemy import (
    Column,
    Integer,
    Boolean,
    DateTime,
    Enum,
    ForeignKey,
    func,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
import enum
from config.database import Base


class AttendanceMethod(enum.Enum):
    qr                = "QR"
    fellowship_number = "FELLOWSHIP_NUMBER"
    manual            = "MANUAL"


class Attendance(Base):
    __tablename__ = "attendances"
    __table_args__ = (
        UniqueConstraint("member_id", "event_id", name="uq_attendance_member_event"),
    )

    id             = Column(Integer, primary_key=True, index=True)
    member_id      = Column(Integer, ForeignKey("members.id"), nullable=False, index=True)
    event_id       = Column(Integer, ForeignKey("events.id"), nullable=False, index=True)
    method         = Column(Enum(AttendanceMethod), nullable=False, default=AttendanceMethod.qr)
    checked_in_at  = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    recorded_by    = Column(Integer, ForeignKey("members.id"), nullable=True)
    synced_offline = Column(Boolean, nullable=False, default=False)
    created_at     = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    member = relationship("Member", back_populates="attendances", foreign_keys=[member_id])
    event  = relationship("Event", back_populates="attendances")
