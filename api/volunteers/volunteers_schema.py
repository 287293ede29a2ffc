# api/volunteers/volunteers_schema.py

from datetime import datetime
from typing import Optional

from utils.schema_base import CamelModel
from api.tags.tags_schema import MemberBrief


class VolunteerAssign(CamelModel):
    member_id: int


class VolunteerOut(CamelModel):
    id: int
    event_id: int
    member_id: int
    assigned_by: Optional[int] = None
    assigned_at: datetime
    member: MemberBrief


class PermissionOut(CamelModel):
    has_permission: bool
    role: Optional[str] = None
    reason: Optional[str] = None
