# api/families/families_service.py

import logging
from typing import List, Optional

from fastapi import HTTPException, status
from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from config.tag_config import SystemTag, SYSTEM_TAG_DEFINITIONS, HEAD_SUFFIX, MEMBER_SUFFIX, generate_tag_name
from utils.time_utils import Clock, system_clock
from utils.database_utils import DatabaseUtils, get_member_or_404
from api.regions.regions_model import Region
from api.tags.tags_model import Tag
from api.tags.member_tags_model import MemberTag
from api.tags.tags_service import TagService
from api.families.families_model import FamilyGroup
from api.families.family_members_model import FamilyMember

logger = logging.getLogger(__name__)

HEAD_TAG_COLOR = "#22c55e"
MEMBER_TAG_COLOR = "#06b6d4"


class FamilyService:
    """
    Family groups within a region. A family owns a generated <NAME>_HEAD and
    <NAME>_MEMBER tag; its head also carries the global FAMILY_HEAD tag and
    may head only one active family.
    """

    def __init__(self, db: Session, clock: Clock = system_clock):
        self.db = db
        self.clock = clock
        self.tags = TagService(db, clock)

    def get_family(self, family_id: int) -> FamilyGroup:
        family = (
            self.db.query(FamilyGroup)
            .options(joinedload(FamilyGroup.region))
            .filter(FamilyGroup.id == family_id, FamilyGroup.is_active.is_(True))
            .first()
        )
        if not family:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Family not found")
        return family

    def _active_members(self, family_id: int) -> List[FamilyMember]:
        return (
            self.db.query(FamilyMember)
            .options(joinedload(FamilyMember.member))
            .filter_by(family_id=family_id, is_active=True)
            .order_by(FamilyMember.joined_at.asc())
            .all()
        )

    def to_out(self, family: FamilyGroup, with_members: bool = False) -> dict:
        members = self._active_members(family.id)
        out = {
            "id": family.id,
            "name": family.name,
            "region_id": family.region_id,
            "region_name": family.region.name if family.region else None,
            "family_head": family.family_head,
            "head_tag_name": family.head_tag_name,
            "member_tag_name": family.member_tag_name,
            "is_active": family.is_active,
            "member_count": len(members),
            "created_at": family.created_at,
        }
        if with_members:
            out["members"] = members
        return out

    def list_families(self, region_id: Optional[int] = None) -> List[dict]:
        query = self.db.query(FamilyGroup).filter(FamilyGroup.is_active.is_(True))
        if region_id:
            query = query.filter(FamilyGroup.region_id == region_id)
        counts = dict(
            self.db.query(FamilyMember.family_id, func.count(FamilyMember.id))
            .filter(FamilyMember.is_active.is_(True))
            .group_by(FamilyMember.family_id)
            .all()
        )
        out = []
        for family in query.order_by(FamilyGroup.name.asc()).all():
            item = self.to_out(family)
            item["member_count"] = counts.get(family.id, 0)
            out.append(item)
        return out

    def _check_name_free(self, name: str, tag_names: List[str], family: Optional[FamilyGroup] = None):
        query = self.db.query(FamilyGroup).filter(func.lower(FamilyGroup.name) == name.lower())
        if family is not None:
            query = query.filter(FamilyGroup.id != family.id)
        if query.first():
            raise HTTPException(status_code=400, detail="Family with this name already exists")
        owned = {family.head_tag_name, family.member_tag_name} if family else set()
        wanted = [n for n in tag_names if n not in owned]
        if wanted and self.db.query(Tag.id).filter(Tag.name.in_(wanted)).first():
            raise HTTPException(status_code=400, detail="A tag for this family name already exists")

    def create_family(self, data, actor_id: int) -> FamilyGroup:
        name = data.name.strip()
        DatabaseUtils.get_or_404(self.db, Region, detail="Region not found", id=data.region_id)
        head_tag = generate_tag_name(name, HEAD_SUFFIX)
        member_tag = generate_tag_name(name, MEMBER_SUFFIX)
        self._check_name_free(name, [head_tag, member_tag])

        try:
            family = FamilyGroup(
                name=name,
                region_id=data.region_id,
                head_tag_name=head_tag,
                member_tag_name=member_tag,
            )
            self.db.add(family)
            self.tags.ensure_tag(head_tag, f"Head of {name}", HEAD_TAG_COLOR)
            self.tags.ensure_tag(member_tag, f"Member of {name}", MEMBER_TAG_COLOR)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        self.db.refresh(family)
        logger.info(f"Family '{name}' created by {actor_id} in region {family.region_id}")
        return family

    def rename_family(self, family_id: int, data) -> FamilyGroup:
        family = self.get_family(family_id)
        if not data.name or data.name.strip() == family.name:
            return family

        name = data.name.strip()
        head_tag = generate_tag_name(name, HEAD_SUFFIX)
        member_tag = generate_tag_name(name, MEMBER_SUFFIX)
        self._check_name_free(name, [head_tag, member_tag], family)
        try:
            self.tags.rename_tag(family.head_tag_name, head_tag)
            self.tags.rename_tag(family.member_tag_name, member_tag)
            for tag_name, text in ((head_tag, "Head"), (member_tag, "Member")):
                tag = self.tags.get_tag_by_name(tag_name)
                if tag:
                    tag.description = f"{text} of {name}"
            family.name = name
            family.head_tag_name = head_tag
            family.member_tag_name = member_tag
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        self.db.refresh(family)
        return family

    def _region_member(self, family: FamilyGroup, member_id: int):
        member = get_member_or_404(self.db, member_id)
        if member.region_id != family.region_id:
            raise HTTPException(status_code=400, detail="Member must be in the same region as the family")
        return member

    def _join(self, family: FamilyGroup, member_id: int, actor_id: int) -> FamilyMember:
        row = self.db.query(FamilyMember).filter_by(family_id=family.id, member_id=member_id).first()
        if row and row.is_active:
            return row
        if row:
            row.is_active = True
            row.joined_at = self.clock.now()
        else:
            row = FamilyMember(family_id=family.id, member_id=member_id, joined_at=self.clock.now())
            self.db.add(row)
        self.tags.assign_role_tag(member_id, family.member_tag_name, actor_id, notes=f"Member of {family.name}")
        self.db.flush()
        return row

    def assign_head(self, family_id: int, member_id: int, actor_id: int) -> FamilyGroup:
        family = self.get_family(family_id)
        self._region_member(family, member_id)
        if family.family_head_id == member_id:
            return family

        other = (
            self.db.query(FamilyGroup)
            .filter(
                FamilyGroup.family_head_id == member_id,
                FamilyGroup.is_active.is_(True),
                FamilyGroup.id != family.id,
            )
            .first()
        )
        if other:
            raise HTTPException(status_code=400, detail=f"Member is already heading another family: {other.name}")

        try:
            if family.family_head_id is not None:
                self._release_head(family, actor_id, f"Replaced as head of {family.name}")
            description, color = SYSTEM_TAG_DEFINITIONS[SystemTag.family_head]
            self.tags.ensure_tag(SystemTag.family_head, description, color)
            note = f"Family Head of {family.name}"
            self.tags.assign_role_tag(member_id, SystemTag.family_head, actor_id, notes=note)
            self.tags.assign_role_tag(member_id, family.head_tag_name, actor_id, notes=note)
            self._join(family, member_id, actor_id)
            family.family_head_id = member_id
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        self.db.refresh(family)
        logger.info(f"Member {member_id} assigned as head of family {family.id} by {actor_id}")
        return family

    def _release_head(self, family: FamilyGroup, actor_id, note: str) -> None:
        head_id = family.family_head_id
        self.tags.remove_role_tag(head_id, family.head_tag_name, actor_id, notes=note)
        self.tags.remove_role_tag(head_id, SystemTag.family_head, actor_id, notes=note)
        family.family_head_id = None

    def remove_head(self, family_id: int, actor_id: int) -> FamilyGroup:
        family = self.get_family(family_id)
        if family.family_head_id is None:
            raise HTTPException(status_code=404, detail="Family head not found")
        self._release_head(family, actor_id, f"Removed as head of {family.name}")
        self.db.commit()
        self.db.refresh(family)
        return family

    def add_member(self, family_id: int, member_id: int, actor_id: int) -> FamilyMember:
        family = self.get_family(family_id)
        self._region_member(family, member_id)
        if self.db.query(FamilyMember).filter_by(family_id=family.id, member_id=member_id, is_active=True).first():
            raise HTTPException(status_code=400, detail="Member is already in this family")
        try:
            row = self._join(family, member_id, actor_id)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        self.db.refresh(row)
        return row

    def remove_member(self, family_id: int, member_id: int, actor_id: int) -> None:
        family = self.get_family(family_id)
        row = (
            self.db.query(FamilyMember)
            .filter_by(family_id=family.id, member_id=member_id, is_active=True)
            .first()
        )
        if not row:
            raise HTTPException(status_code=404, detail="Member is not in this family")
        row.is_active = False
        if family.family_head_id == member_id:
            self._release_head(family, actor_id, f"Left {family.name}")
        self.tags.remove_role_tag(member_id, family.member_tag_name, actor_id, notes=f"Removed from {family.name}")
        self.db.commit()

    def delete_family(self, family_id: int, actor_id: int) -> None:
        """Soft delete; memberships and generated tag assignments are deactivated."""
        family = self.get_family(family_id)
        now = self.clock.now()
        try:
            if family.family_head_id is not None:
                self._release_head(family, actor_id, f"Family deleted: {family.name}")
            for row in family.members:
                row.is_active = False
            tag_ids = [
                t.id for t in self.db.query(Tag).filter(
                    Tag.name.in_([family.head_tag_name, family.member_tag_name])
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
                assignment.notes = f"Family deleted: {family.name}"
            family.is_active = False
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        logger.info(f"Family {family.id} '{family.name}' deleted by {actor_id}")
