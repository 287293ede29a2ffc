# api/profile_edits/profile_edit_requests_model.py
from sqlalchemy import Column, Integer, Text, Enum, DateTime, ForeignKey, JSON, func
from sqlalchemy.orm import relationship
from config.database import Base
import enum


class EditRequestStatus(enum.Enum):
    pending  = 'PENDING'
    approved = 'APPROVED'
    rejected = 'REJECTED'


class ProfileEditRequest(Base):
    __tablename__ = "profile_edit_requests"

    id          = Column(Integer, primary_key=True, index=True)
    member_id   = Column(Integer, ForeignKey("members.id"), nullable=False, index=True)
    changes     = Column(JSON, nullable=False)      # [{"field", "oldValue", "newValue"}]
    reason      = Column(Text, nullable=False)
    status      = Column(Enum(EditRequestStatus), nullable=False, default=EditRequestStatus.pending, index=True)
    reviewed_by = Column(Integer, ForeignKey("members.id"), nullable=True)
    reviewed_at = Column(DateTime(timezone=True), nullable=True)
    review_note = Column(Text, nullable=True)
    created_at  = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    member = relationship("Member", foreign_keys=[member_id])
