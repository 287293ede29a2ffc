# api/teams/team_members_model.py
from sqlalchemy import Column, Integer, Boolean, DateTime, ForeignKey, UniqueConstraint, func
from sqlalchemy.orm import relationship
from config.database import Base


class MinistryTeamMember(Base):
    __tablename__ = "ministry_team_members"
    __table_args__ = (
        UniqueConstraint("team_id", "member_id", name="uq_team_member"),
    )

    id        = Column(Integer, primary_key=True, index=True)
    team_id   = Column(Integer, ForeignKey("ministry_teams.id"), nullable=False, index=True)
    member_id = Column(Integer, ForeignKey("members.id"), nullable=False, index=True)
    is_active = Column(Boolean, nullable=False, default=True)
    joined_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    team   = relationship("MinistryTeam", back_populates="members")
    member = relationship("Member")
