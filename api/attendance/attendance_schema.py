# api/attendance/attendance_schema.py

from datetime import datetime
from typing import List, Optional

from pydantic import Field, field_validator, model_validator

from utils.schema_base import CamelModel
from api.attendance.attendance_records_model import AttendanceMethod


class CheckInRequest(CamelModel):
    """
    Payload for checking a member in. Exactly one of qrCode or
    fellowshipNumber identifies the member.
    """
    event_id: int
    qr_code: Optional[str] = None
    fellowship_number: Optional[str] = None
    method: AttendanceMethod = AttendanceMethod.qr

    @model_validator(mode="after")
    def require_identifier(self):
        if not (self.qr_code or self.fellowship_number):
            raise ValueError("qrCode or fellowshipNumber is required")
        return self


class CheckedInMember(CamelModel):
    id: int
    full_name: str
    fellowship_number: str


class AttendanceOut(CamelModel):
    id: int
    member_id: int
    event_id: int
    method: AttendanceMethod
    checked_in_at: datetime
    recorded_by: Optional[int] = None
    synced_offline: bool = False
    member: CheckedInMember


class CheckInResponse(CamelModel):
    message: str
    attendance: AttendanceOut
    first_attendance: bool = False


class GuestCheckInRequest(CamelModel):
    event_id: int
    guest_name: str = Field(..., min_length=2, max_length=150)
    guest_phone: Optional[str] = Field(None, max_length=30)
    purpose: Optional[str] = Field(None, max_length=500)


class GuestAttendanceOut(CamelModel):
    id: int
    event_id: int
    guest_name: str
    guest_phone: Optional[str] = None
    purpose: Optional[str] = None
    checked_in_at: datetime
    recorded_by: Optional[int] = None


class RosterEntry(CamelModel):
    id: int
    full_name: str
    fellowship_number: str
    phone_number: Optional[str] = None
    qr_code: str
    region_name: Optional[str] = None


class OfflineRecord(CamelModel):
    member_id: int
    event_id: int
    method: AttendanceMethod
    timestamp: datetime

    @field_validator("method", mode="before")
    @classmethod
    def _upper_method(cls, value):
        return value.strip().upper() if isinstance(value, str) else value


class SyncError(CamelModel):
    # None when the record itself could not be read
    member_id: Optional[int] = None
    event_id: Optional[int] = None
    error: str


class SyncResult(CamelModel):
    synced_count: int
    total_received: int
    errors: List[SyncError] = []
