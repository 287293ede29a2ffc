# api/events/events_schema.py

from datetime import date as date_type, datetime
from typing import Optional

from pydantic import Field, field_validator, model_validator

from utils.schema_base import CamelModel
from api.events.events_model import EventType

HHMM = r"^([01]\d|2[0-3]):([0-5]\d)$"


class EventCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=100)
    date: date_type
    start_time: str = Field(..., pattern=HHMM, description="HH:MM local time")
    end_time: str = Field(..., pattern=HHMM, description="HH:MM local time")
    type: EventType
    venue: Optional[str] = Field(None, max_length=200)
    is_recurring: bool = False
    recurrence_rule: Optional[str] = None
    allow_guest_checkin: bool = False

    @field_validator("venue", "recurrence_rule", mode="before")
    @classmethod
    def blank_to_none(cls, v):
        return None if v == "" else v

    @model_validator(mode="after")
    def check_times(self):
        if self.end_time <= self.start_time:
            raise ValueError("endTime must be after startTime")
        return self


class EventUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    date: Optional[date_type] = None
    start_time: Optional[str] = Field(None, pattern=HHMM)
    end_time: Optional[str] = Field(None, pattern=HHMM)
    type: Optional[EventType] = None
    venue: Optional[str] = Field(None, max_length=200)
    is_recurring: Optional[bool] = None
    recurrence_rule: Optional[str] = None
    allow_guest_checkin: Optional[bool] = None


class EventOut(CamelModel):
    id: int
    name: str
    date: date_type
    start_time: str
    end_time: str
    type: EventType
    venue: Optional[str] = None
    is_active: bool
    allow_guest_checkin: bool
    is_recurring: bool
    recurrence_rule: Optional[str] = None
    status: Optional[str] = None
    attendance_count: int = 0
    created_at: Optional[datetime] = None


class EventToggleOut(CamelModel):
    message: str
    event: EventOut
