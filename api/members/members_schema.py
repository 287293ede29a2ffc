# api/members/members_schema.py

from datetime import datetime
from typing import List, Optional

from pydantic import EmailStr, Field

from utils.schema_base import CamelModel
from api.members.members_model import Gender, MemberRole, RegistrationMode


class MemberBase(CamelModel):
    full_name: str = Field(..., min_length=2, max_length=150)
    email: EmailStr
    phone_number: str = Field(..., min_length=7, max_length=30)
    gender: Gender
    region_id: int
    residence_id: Optional[int] = None
    hostel_name: Optional[str] = Field(None, max_length=150)
    course_id: Optional[int] = None
    initial_year_of_study: Optional[int] = Field(None, ge=1, le=7)
    initial_semester: Optional[int] = Field(None, ge=1, le=3)
    registration_mode: RegistrationMode = RegistrationMode.new_member


class MemberCreate(MemberBase):
    role: MemberRole = MemberRole.member
    registration_date: Optional[datetime] = None


class MemberUpdate(CamelModel):
    full_name: Optional[str] = Field(None, min_length=2, max_length=150)
    email: Optional[EmailStr] = None
    phone_number: Optional[str] = Field(None, min_length=7, max_length=30)
    gender: Optional[Gender] = None
    region_id: Optional[int] = None
    residence_id: Optional[int] = None
    hostel_name: Optional[str] = Field(None, max_length=150)
    course_id: Optional[int] = None
    initial_year_of_study: Optional[int] = Field(None, ge=1, le=7)
    initial_semester: Optional[int] = Field(None, ge=1, le=3)
    registration_date: Optional[datetime] = None
    role: Optional[MemberRole] = None


class MemberOut(CamelModel):
    id: int
    full_name: str
    email: str
    phone_number: str
    gender: Gender
    fellowship_number: str
    qr_code: str
    role: MemberRole
    registration_mode: RegistrationMode
    registration_date: Optional[datetime] = None
    initial_year_of_study: Optional[int] = None
    initial_semester: Optional[int] = None
    course_id: Optional[int] = None
    region_id: int
    residence_id: Optional[int] = None
    hostel_name: Optional[str] = None


class MemberDetailOut(MemberOut):
    tags: List[str] = []


class MemberPage(CamelModel):
    items: List[MemberOut]
    page: int
    per_page: int
    total: int
    has_next: bool
    has_prev: bool
