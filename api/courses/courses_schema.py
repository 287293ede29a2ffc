# api/courses/courses_schema.py

from typing import Optional
from pydantic import Field

from utils.schema_base import CamelModel


class CourseCreate(CamelModel):
    name: str = Field(..., min_length=2, max_length=200)
    code: str = Field(..., min_length=1, max_length=20)
    duration_years: int = Field(3, ge=1, le=7)


class CourseUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=2, max_length=200)
    code: Optional[str] = Field(None, min_length=1, max_length=20)
    duration_years: Optional[int] = Field(None, ge=1, le=7)


class CourseOut(CamelModel):
    id: int
    name: str
    code: str
    duration_years: int
