# api/tags/tags_schema.py

from datetime import datetime
from typing import List, Optional

from pydantic import Field

from utils.schema_base import CamelModel
from api.tags.tags_model import TagType


class TagCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    color: Optional[str] = Field(None, pattern=r"^#[0-9a-fA-F]{6}$")
    show_on_registration: bool = False


class TagVisibilityUpdate(CamelModel):
    show_on_registration: bool


class TagOut(CamelModel):
    id: int
    name: str
    description: Optional[str] = None
    type: TagType
    color: Optional[str] = None
    is_system: bool
    show_on_registration: bool
    created_at: Optional[datetime] = None


class TagWithCount(TagOut):
    member_count: int = 0


class TagAssign(CamelModel):
    tag_id: int
    notes: Optional[str] = Field(None, max_length=500)


class TagRemove(CamelModel):
    notes: Optional[str] = Field(None, max_length=500)


class BulkTagRequest(CamelModel):
    member_ids: List[int] = Field(..., min_length=1)
    tag_id: int
    notes: Optional[str] = Field(None, max_length=500)


class BulkAssignResult(CamelModel):
    message: str
    count: int
    skipped: int = 0


class BulkRemoveResult(CamelModel):
    message: str
    count: int


class MemberBrief(CamelModel):
    id: int
    full_name: str
    fellowship_number: str
    email: Optional[str] = None
    phone_number: Optional[str] = None


class MemberTagOut(CamelModel):
    id: int
    member_id: int
    tag: TagOut
    assigned_by: str
    assigned_at: datetime
    removed_by: Optional[str] = None
    removed_at: Optional[datetime] = None
    expires_at: Optional[datetime] = None
    notes: Optional[str] = None
    is_active: bool


class TaggedMemberOut(CamelModel):
    assignment_id: int
    assigned_at: datetime
    expires_at: Optional[datetime] = None
    notes: Optional[str] = None
    member: MemberBrief
