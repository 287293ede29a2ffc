# api/teams/teams_service.py

import logging
from typing import List, Optional

from fastapi import HTTPException, status
from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from config.tag_config import LEADER_SUFFIX, MEMBER_SUFFIX, generate_tag_name
from utils.time_utils import Clock, system_clock
from utils.database_utils import get_member_or_404
from api.tags.tags_model import Tag
from api.tags.member_tags_model import MemberTag
from api.tags.tags_service import TagService
from api.teams.teams_model import MinistryTeam
from api.teams.team_members_model import MinistryTeamMember

logger = logging.getLogger(__name__)

LEADER_TAG_COLOR = "#10b981"
MEMBER_TAG_COLOR = "#3b82f6"


class TeamService:
    """
    Ministry teams. Each team owns a generated <NAME>_LEADER and <NAME>_MEMBER
    tag; creating, renaming and deleting a team changes those tags in the
    same commit.
    """

    def __init__(self, db: Session, clock: Clock = system_clock):
        self.db = db
        self.clock = clock
        self.tags = TagService(db, clock)

    def get_team(self, team_id: int) -> MinistryTeam:
        team = (
            self.db.query(MinistryTeam)
            .filter(MinistryTeam.id == team_id, MinistryTeam.is_active.is_(True))
            .first()
        )
        if not team:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Team not found")
        return team

    def _active_members(self, team_id: int) -> List[MinistryTeamMember]:
        return (
            self.db.query(MinistryTeamMember)
            .options(joinedload(MinistryTeamMember.member))
            .filter_by(team_id=team_id, is_active=True)
            .order_by(MinistryTeamMember.joined_at.asc())
            .all()
        )

    def to_out(self, team: MinistryTeam, with_members: bool = False) -> dict:
        members = self._active_members(team.id)
        out = {
            "id": team.id,
            "name": team.name,
            "description": team.description,
            "leader": team.leader,
            "leader_tag_name": team.leader_tag_name,
            "member_tag_name": team.member_tag_name,
            "is_active": team.is_active,
            "member_count": len(members),
            "created_at": team.created_at,
        }
        if with_members:
            out["members"] = members
        return out

    def list_teams(self) -> List[dict]:
        counts = dict(
            self.db.query(MinistryTeamMember.team_id, func.count(MinistryTeamMember.id))
            .filter(MinistryTeamMember.is_active.is_(True))
            .group_by(MinistryTeamMember.team_id)
            .all()
        )
        teams = (
            self.db.query(MinistryTeam)
            .filter(MinistryTeam.is_active.is_(True))
            .order_by(MinistryTeam.created_at.asc(), MinistryTeam.id.asc())
            .all()
        )
        out = []
        for team in teams:
            item = self.to_out(team)
            item["member_count"] = counts.get(team.id, 0)
            out.append(item)
        return out

    def _check_name_free(self, name: str, tag_names: List[str], team: Optional[MinistryTeam] = None):
        query = self.db.query(MinistryTeam).filter(func.lower(MinistryTeam.name) == name.lower())
        if team is not None:
            query = query.filter(MinistryTeam.id != team.id)
        if query.first():
            raise HTTPException(status_code=400, detail="Team with this name already exists")
        owned = {team.leader_tag_name, team.member_tag_name} if team else set()
        wanted = [n for n in tag_names if n not in owned]
        if wanted and self.db.query(Tag.id).filter(Tag.name.in_(wanted)).first():
            raise HTTPException(status_code=400, detail="A tag for this team name already exists")

    def create_team(self, data, actor_id: int) -> MinistryTeam:
        name = data.name.strip()
        leader_tag = generate_tag_name(name, LEADER_SUFFIX)
        member_tag = generate_tag_name(name, MEMBER_SUFFIX)
        self._check_name_free(name, [leader_tag, member_tag])

        try:
            team = MinistryTeam(
                name=name,
                description=data.description,
                leader_tag_name=leader_tag,
                member_tag_name=member_tag,
            )
            self.db.add(team)
            self.tags.ensure_tag(leader_tag, f"Leader of {name}", LEADER_TAG_COLOR)
            self.tags.ensure_tag(member_tag, f"Member of {name}", MEMBER_TAG_COLOR)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        self.db.refresh(team)
        logger.info(f"Ministry team '{name}' created by {actor_id} with tags {leader_tag}, {member_tag}")
        return team

    def update_team(self, team_id: int, data) -> MinistryTeam:
        team = self.get_team(team_id)
        try:
            if data.name and data.name.strip() != team.name:
                name = data.name.strip()
                leader_tag = generate_tag_name(name, LEADER_SUFFIX)
                member_tag = generate_tag_name(name, MEMBER_SUFFIX)
                self._check_name_free(name, [leader_tag, member_tag], team)

                self.tags.rename_tag(team.leader_tag_name, leader_tag)
                self.tags.rename_tag(team.member_tag_name, member_tag)
                for tag_name, text in ((leader_tag, "Leader"), (member_tag, "Member")):
                    tag = self.tags.get_tag_by_name(tag_name)
                    if tag:
                        tag.description = f"{text} of {name}"
                team.name = name
                team.leader_tag_name = leader_tag
                team.member_tag_name = member_tag
            if data.description is not None:
                team.description = data.description
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        self.db.refresh(team)
        return team

    def set_leader(self, team_id: int, member_id: Optional[int], actor_id: int) -> MinistryTeam:
        team = self.get_team(team_id)
        if member_id is not None:
            get_member_or_404(self.db, member_id)
        if team.leader_id == member_id:
            return team

        try:
            if team.leader_id is not None:
                self.tags.remove_role_tag(
                    team.leader_id, team.leader_tag_name, actor_id,
                    notes=f"Replaced as leader of {team.name}",
                )
            if member_id is not None:
                self.tags.assign_role_tag(
                    member_id, team.leader_tag_name, actor_id,
                    notes=f"Assigned as leader of {team.name}",
                )
            team.leader_id = member_id
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        self.db.refresh(team)
        logger.info(f"Team {team.id} leader set to {member_id} by {actor_id}")
        return team

    def add_member(self, team_id: int, member_id: int, actor_id: int) -> MinistryTeamMember:
        team = self.get_team(team_id)
        get_member_or_404(self.db, member_id)

        row = self.db.query(MinistryTeamMember).filter_by(team_id=team.id, member_id=member_id).first()
        if row and row.is_active:
            raise HTTPException(status_code=400, detail="Member is already in this team")

        try:
            if row:
                row.is_active = True
                row.joined_at = self.clock.now()
            else:
                row = MinistryTeamMember(team_id=team.id, member_id=member_id, joined_at=self.clock.now())
                self.db.add(row)
            self.tags.assign_role_tag(member_id, team.member_tag_name, actor_id, notes=f"Added to {team.name}")
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        self.db.refresh(row)
        return row

    def remove_member(self, team_id: int, member_id: int, actor_id: int) -> None:
        team = self.get_team(team_id)
        row = (
            self.db.query(MinistryTeamMember)
            .filter_by(team_id=team.id, member_id=member_id, is_active=True)
            .first()
        )
        if not row:
            raise HTTPException(status_code=404, detail="Member is not in this team")
        row.is_active = False
        self.tags.remove_role_tag(member_id, team.member_tag_name, actor_id, notes=f"Removed from {team.name}")
        self.db.commit()

    def delete_team(self, team_id: int, actor_id: int) -> None:
        """Soft delete: the team, its memberships and its tag assignments are deactivated."""
        team = self.get_team(team_id)
        now = self.clock.now()
        try:
            for row in team.members:
                row.is_active = False
            tag_ids = [
                t.id for t in self.db.query(Tag).filter(
                    Tag.name.in_([team.leader_tag_name, team.member_tag_name])
                )
            ]
            for assignment in (
                self.db.query(MemberTag)
                .filter(MemberTag.tag_id.in_(tag_ids), MemberTag.is_active.is_(True))
                .all()
            ):
                assignment.is_active = False
                assignment.removed_by = str(actor_id)
                assignment.removed_at = now
                assignment.notes = f"Team deleted: {team.name}"
            team.is_active = False
            team.leader_id = None
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        logger.info(f"Ministry team {team.id} '{team.name}' deleted by {actor_id}")
