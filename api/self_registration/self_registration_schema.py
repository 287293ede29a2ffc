# api/self_registration/self_registration_schema.py

from datetime import datetime
from typing import List, Optional

from pydantic import EmailStr, Field

from utils.schema_base import CamelModel
from api.members.members_model import Gender, RegistrationMode
from api.self_registration.pending_members_model import PendingStatus


# ─── Registration tokens ────────────────────────────────────────────────────
class RegTokenCreate(CamelModel):
    label: Optional[str] = Field(None, max_length=150)
    expires_at: datetime
    max_uses: Optional[int] = Field(None, gt=0)


class RegTokenOut(CamelModel):
    id: int
    token: str
    label: Optional[str] = None
    expires_at: Optional[datetime] = None
    max_uses: Optional[int] = None
    used_count: int
    is_active: bool
    created_at: Optional[datetime] = None
    url: str
    pending_count: int = 0


class TokenValidation(CamelModel):
    valid: bool
    label: Optional[str] = None
    reason: Optional[str] = None


# ─── Public submission ──────────────────────────────────────────────────────
class SelfRegistrationSubmit(CamelModel):
    token: str = Field(..., min_length=1)
    full_name: str = Field(..., min_length=2, max_length=150)
    email: EmailStr
    phone_number: str = Field(..., min_length=7, max_length=30)
    gender: Gender
    registration_mode: RegistrationMode = RegistrationMode.new_member
    region_id: int
    residence_id: Optional[int] = None
    hostel_name: Optional[str] = Field(None, max_length=150)
    course_id: Optional[int] = None
    initial_year_of_study: Optional[int] = Field(None, ge=1, le=7)
    initial_semester: Optional[int] = Field(None, ge=1, le=3)
    tag_ids: List[int] = []


class SubmissionReceived(CamelModel):
    message: str
    id: int


class RegistrationTagOut(CamelModel):
    id: int
    name: str
    description: Optional[str] = None
    color: Optional[str] = None


# ─── Manager review ─────────────────────────────────────────────────────────
class PendingMemberUpdate(CamelModel):
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


class PendingMemberOut(CamelModel):
    id: int
    token_id: Optional[int] = None
    full_name: str
    email: str
    phone_number: str
    gender: Gender
    registration_mode: RegistrationMode
    region_id: int
    residence_id: Optional[int] = None
    hostel_name: Optional[str] = None
    course_id: Optional[int] = None
    initial_year_of_study: Optional[int] = None
    initial_semester: Optional[int] = None
    tag_ids: Optional[List[int]] = None
    status: PendingStatus
    reviewed_by: Optional[int] = None
    reviewed_at: Optional[datetime] = None
    review_note: Optional[str] = None
    member_id: Optional[int] = None
    submitted_at: Optional[datetime] = None


class RejectRequest(CamelModel):
    review_note: Optional[str] = Field(None, max_length=1000)


class ApprovalResult(CamelModel):
    message: str
    member_id: int
    fellowship_number: str
