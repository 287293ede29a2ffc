# api/families/families_schema.py

from datetime import datetime
from typing import List, Optional

from pydantic import Field

from utils.schema_base import CamelModel
from api.tags.tags_schema import MemberBrief


class FamilyCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=100)
    region_id: int


class FamilyUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)


class FamilyHeadAssign(CamelModel):
    member_id: int


class FamilyMemberAdd(CamelModel):
    member_id: int


class FamilyOut(CamelModel):
    id: int
    name: str
    region_id: int
    region_name: Optional[str] = None
    family_head: Optional[MemberBrief] = None
    head_tag_name: str
    member_tag_name: str
    is_active: bool
    member_count: int = 0
    created_at: Optional[datetime] = None


class FamilyMemberOut(CamelModel):
    id: int
    member_id: int
    joined_at: datetime
    member: MemberBrief


class FamilyDetailOut(FamilyOut):
    members: List[FamilyMemberOut] = []
