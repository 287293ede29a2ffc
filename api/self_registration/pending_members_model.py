# api/self_registration/pending_members_model.py
from sqlalchemy import Column, Integer, String, Text, Enum, DateTime, ForeignKey, JSON, func
from sqlalchemy.orm import relationship
from config.database import Base
from api.members.members_model import Gender, RegistrationMode
import enum


class PendingStatus(enum.Enum):
    pending  = 'PENDING'
    approved = 'APPROVED'
    rejected = 'REJECTED'


class PendingMember(Base):
    __tablename__ = "pending_members"

    id                    = Column(Integer, primary_key=True, index=True)
    token_id              = Column(Integer, ForeignKey("registration_tokens.id"), nullable=True)
    full_name             = Column(String(150), nullable=False)
    email                 = Column(String(255), nullable=False, index=True)
    phone_number          = Column(String(30), nullable=False)
    gender                = Column(Enum(Gender), nullable=False)
    registration_mode     = Column(Enum(RegistrationMode), nullable=False, default=RegistrationMode.new_member)
    course_id             = Column(Integer, ForeignKey("courses.id"), nullable=True)
    region_id             = Column(Integer, ForeignKey("regions.id"), nullable=False)
    residence_id          = Column(Integer, ForeignKey("residences.id"), nullable=True)
    hostel_name           = Column(String(150), nullable=True)
    initial_year_of_study = Column(Integer, nullable=True)
    initial_semester      = Column(Integer, nullable=True)
    tag_ids               = Column(JSON, nullable=True)     # opted-in registration tags

    status                = Column(Enum(PendingStatus), nullable=False, default=PendingStatus.pending, index=True)
    reviewed_by           = Column(Integer, ForeignKey("members.id"), nullable=True)
    reviewed_at           = Column(DateTime(timezone=True), nullable=True)
    review_note           = Column(Text, nullable=True)
    member_id             = Column(Integer, ForeignKey("members.id"), nullable=True)
    submitted_at          = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    token = relationship("RegistrationToken")
