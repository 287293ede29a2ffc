# api/teams/teams_model.py
from sqlalchemy import Column, Integer, String, Boolean, Text, DateTime, ForeignKey, func
from sqlalchemy.orm import relationship
from config.database import Base


class MinistryTeam(Base):
    __tablename__ = "ministry_teams"

    id              = Column(Integer, primary_key=True, index=True)
    name            = Column(String(150), unique=True, nullable=False)
    description     = Column(Text, nullable=True)
    leader_id       = Column(Integer, ForeignKey("members.id"), nullable=True)
    # generated tag names, renamed in place with the team
    leader_tag_name = Column(String(120), nullable=False)
    member_tag_name = Column(String(120), nullable=False)
    is_active       = Column(Boolean, nullable=False, default=True)
    created_at      = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at      = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    leader  = relationship("Member", foreign_keys=[leader_id])
    members = relationship("MinistryTeamMember", back_populates="team", cascade="all, delete-orphan")
