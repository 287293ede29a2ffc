# api/tags/member_tags_model.py
from sqlalchemy import Column, Integer, String, Boolean, DateTime, Text, ForeignKey, Index, func
from sqlalchemy.orm import relationship
from config.database import Base


class MemberTag(Base):
    """
    One assignment of a tag to a member. Rows are deactivated, never deleted,
    so the table doubles as the assignment history. At most one active row per
    (member, tag) is kept by the tag service, not by a constraint.
    """
    __tablename__ = 'member_tags'
    __table_args__ = (
        Index('ix_member_tags_member_tag_active', 'member_id', 'tag_id', 'is_active'),
    )

    id          = Column(Integer, primary_key=True, index=True)
    member_id   = Column(Integer, ForeignKey('members.id'), nullable=False, index=True)
    tag_id      = Column(Integer, ForeignKey('tags.id'), nullable=False, index=True)
    assigned_by = Column(String(50), nullable=False)     # member id or "SYSTEM"
    assigned_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    removed_by  = Column(String(50), nullable=True)
    removed_at  = Column(DateTime(timezone=True), nullable=True)
    expires_at  = Column(DateTime(timezone=True), nullable=True)
    notes       = Column(Text, nullable=True)
    is_active   = Column(Boolean, nullable=False, default=True)

    member = relationship("Member", back_populates="member_tags", foreign_keys=[member_id])
    tag    = relationship("Tag", back_populates="member_tags")

    def __repr__(self):
        return f"<MemberTag(member_id={self.member_id}, tag_id={self.tag_id}, active={self.is_active})>"
