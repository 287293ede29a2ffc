# api/families/families_model.py
from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, func
from sqlalchemy.orm import relationship
from config.database import Base


class FamilyGroup(Base):
    __tablename__ = "family_groups"

    id              = Column(Integer, primary_key=True, index=True)
    name            = Column(String(150), unique=True, nullable=False)
    region_id       = Column(Integer, ForeignKey("regions.id"), nullable=False)
    family_head_id  = Column(Integer, ForeignKey("members.id"), nullable=True)
    head_tag_name   = Column(String(120), nullable=False)
    member_tag_name = Column(String(120), nullable=False)
    is_active       = Column(Boolean, nullable=False, default=True)
    created_at      = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at      = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    region      = relationship("Region", back_populates="families")
    family_head = relationship("Member", foreign_keys=[family_head_id])
    members     = relationship("FamilyMember", back_populates="family", cascade="all, delete-orphan")
