# api/regions/residences_model.py
from sqlalchemy import Column, Integer, String, DateTime, func
from sqlalchemy.orm import relationship
from config.database import Base


class Residence(Base):
    __tablename__ = "residences"

    id         = Column(Integer, primary_key=True, autoincrement=True)
    name       = Column(String(150), unique=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    members = relationship("Member", back_populates="residence")
