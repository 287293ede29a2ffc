# api/academic/academic_schema.py

from datetime import datetime
from typing import Optional

from pydantic import Field

from config.settings import settings
from utils.schema_base import CamelModel


class AcademicPeriodCreate(CamelModel):
    academic_year: str = Field(..., pattern=r"^\d{4}/\d{4}$", description="Format YYYY/YYYY")
    period_number: int = Field(..., ge=1, le=settings.SEMESTERS_PER_YEAR)
    period_name: str = Field(..., min_length=1, max_length=100)
    start_date: datetime
    end_date: datetime


class AcademicPeriodUpdate(CamelModel):
    period_name: Optional[str] = Field(None, min_length=1, max_length=100)
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None


class AcademicPeriodOut(CamelModel):
    id: int
    academic_year: str
    period_number: int
    period_name: str
    start_date: datetime
    end_date: datetime


class CourseBrief(CamelModel):
    id: int
    name: str
    code: str
    duration_years: int


class AcademicStatusOut(CamelModel):
    current_year: Optional[int] = None
    current_semester: Optional[int] = None
    is_finalist: bool = False
    is_alumni: bool = False
    course: Optional[CourseBrief] = None
