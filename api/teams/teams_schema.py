# api/teams/teams_schema.py

from datetime import datetime
from typing import List, Optional

from pydantic import Field

from utils.schema_base import CamelModel
from api.tags.tags_schema import MemberBrief


class TeamCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=500)


class TeamUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=500)


class LeaderAssign(CamelModel):
    member_id: Optional[int] = None


class TeamMemberAdd(CamelModel):
    member_id: int


class TeamOut(CamelModel):
    id: int
    name: str
    description: Optional[str] = None
    leader: Optional[MemberBrief] = None
    leader_tag_name: str
    member_tag_name: str
    is_active: bool
    member_count: int = 0
    created_at: Optional[datetime] = None


class TeamMemberOut(CamelModel):
    id: int
    member_id: int
    joined_at: datetime
    member: MemberBrief


class TeamDetailOut(TeamOut):
    members: List[TeamMemberOut] = []
