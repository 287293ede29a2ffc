# api/tags/tags_model.py
from sqlalchemy import Column, Integer, String, Boolean, Enum, DateTime, Text, func
from sqlalchemy.orm import relationship
from config.database import Base
import enum


class TagType(enum.Enum):
    system = 'SYSTEM'
    custom = 'CUSTOM'


class Tag(Base):
    __tablename__ = 'tags'

    id                   = Column(Integer, primary_key=True, index=True)
    name                 = Column(String(100), unique=True, nullable=False, index=True)
    description          = Column(Text, nullable=True)
    color                = Column(String(7), nullable=True)
    type                 = Column(Enum(TagType), nullable=False, default=TagType.custom)
    is_system            = Column(Boolean, nullable=False, default=False)
    show_on_registration = Column(Boolean, nullable=False, default=False)
    created_by           = Column(String(50), nullable=True)
    created_at           = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at           = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    member_tags = relationship("MemberTag", back_populates="tag", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<Tag(id={self.id}, name='{self.name}', system={self.is_system})>"
