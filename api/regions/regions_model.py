# api/regions/regions_model.py
from sqlalchemy import Column, Integer, String, DateTime, func
from sqlalchemy.orm import relationship
from config.database import Base


class Region(Base):
    __tablename__ = "regions"

    id         = Column(Integer, primary_key=True, autoincrement=True)
    name       = Column(String(100), unique=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    members  = relationship("Member", back_populates="region")
    families = relationship("FamilyGroup", back_populates="region")

    def __repr__(self):
        return f"<Region(id={self.id}, name='{self.name}')>"
