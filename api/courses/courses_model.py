# api/courses/courses_model.py
from sqlalchemy import Column, Integer, String, DateTime, func
from sqlalchemy.orm import relationship
from config.database import Base


class Course(Base):
    __tablename__ = "courses"

    id             = Column(Integer, primary_key=True, autoincrement=True)
    name           = Column(String(200), unique=True, nullable=False)
    code           = Column(String(20), unique=True, nullable=False)
    duration_years = Column(Integer, nullable=False, default=3)
    created_at     = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    members = relationship("Member", back_populates="course")

    def __repr__(self):
        return f"<Course(id={self.id}, code='{self.code}', duration_years={self.duration_years})>"
