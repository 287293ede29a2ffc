# api/profile_edits/profile_edits_schema.py

import enum
from datetime import datetime
from typing import List, Literal, Optional

from pydantic import Field

from utils.schema_base import CamelModel
from api.profile_edits.profile_edit_requests_model import EditRequestStatus


class EditableField(str, enum.Enum):
    """Member fields a member may ask to change; values are the wire names."""
    full_name             = "fullName"
    email                 = "email"
    phone_number          = "phoneNumber"
    course_id             = "courseId"
    initial_year_of_study = "initialYearOfStudy"
    initial_semester      = "initialSemester"
    residence_id          = "residenceId"
    hostel_name           = "hostelName"


class FieldChange(CamelModel):
    field: EditableField
    new_value: str = Field(..., min_length=1, max_length=255)


class EditRequestSubmit(CamelModel):
    changes: List[FieldChange] = Field(..., min_length=1, max_length=len(EditableField))
    reason: str = Field(..., min_length=10, max_length=500)


class RecordedChange(CamelModel):
    field: str
    old_value: str
    new_value: str


class EditRequestOut(CamelModel):
    id: int
    member_id: int
    changes: List[RecordedChange]
    reason: str
    status: EditRequestStatus
    reviewed_by: Optional[int] = None
    reviewed_at: Optional[datetime] = None
    review_note: Optional[str] = None
    created_at: datetime


class EditRequestReview(CamelModel):
    status: Literal["APPROVED", "REJECTED"]
    review_note: Optional[str] = Field(None, max_length=500)
