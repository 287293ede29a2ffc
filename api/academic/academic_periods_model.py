# api/academic/academic_periods_model.py
from sqlalchemy import Column, Integer, String, DateTime, UniqueConstraint, Index, func
from config.database import Base


class AcademicPeriod(Base):
    __tablename__ = "academic_periods"
    __table_args__ = (
        UniqueConstraint("academic_year", "period_number", name="uq_academic_period_year_number"),
        Index("ix_academic_periods_start_end", "start_date", "end_date"),
    )

    id            = Column(Integer, primary_key=True, index=True)
    academic_year = Column(String(9), nullable=False)   # "2024/2025"
    period_number = Column(Integer, nullable=False)
    period_name   = Column(String(100), nullable=False)
    start_date    = Column(DateTime(timezone=True), nullable=False)
    end_date      = Column(DateTime(timezone=True), nullable=False)
    created_at    = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at    = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    def __repr__(self):
        return f"<AcademicPeriod({self.academic_year} #{self.period_number})>"
