# api/tags/tags_service.py

import logging
from datetime import datetime
from typing import Dict, List, Optional, Union

from fastapi import HTTPException, status
from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from config.tag_config import (
    SystemTag,
    SYSTEM_TAG_DEFINITIONS,
    DEFAULT_CUSTOM_TAG_COLOR,
    SYSTEM_ACTOR,
)
from utils.time_utils import Clock, system_clock, as_utc
from utils.database_utils import DatabaseUtils, get_member_or_404
from api.academic.academic_service import AcademicService, AcademicStanding
from api.members.members_model import Member
from api.tags.tags_model import Tag, TagType
from api.tags.member_tags_model import MemberTag

logger = logging.getLogger(__name__)

TagName = Union[str, SystemTag]

_STANDING_TAG = {
    AcademicStanding.finalist: SystemTag.finalist.value,
    AcademicStanding.alumni:   SystemTag.alumni.value,
    AcademicStanding.none:     None,
}

_ASSIGN_NOTES = {
    SystemTag.finalist.value: "Auto-assigned: Final year student",
    SystemTag.alumni.value:   "Auto-assigned: Completed course",
}

# (new standing, tag being removed) -> note
_REMOVE_NOTES = {
    (AcademicStanding.finalist, SystemTag.alumni.value):   "Auto-removed: Now a finalist",
    (AcademicStanding.alumni, SystemTag.finalist.value):   "Auto-removed: Now alumni",
    (AcademicStanding.none, SystemTag.finalist.value):     "Auto-removed: No longer in final year",
    (AcademicStanding.none, SystemTag.alumni.value):       "Auto-removed: Year recalculated",
}

EXPIRED_SUFFIX = " [Auto-expired]"
EXPIRED_CLEANUP_NOTE = "Auto-deactivated (expired)"


def _name(tag_name: TagName) -> str:
    return tag_name.value if isinstance(tag_name, SystemTag) else tag_name


class TagService:
    """
    Keeps member_tags consistent with tag policy.

    Lifecycle operations (reconcile/assign/remove/has_active_tag) flush but do
    not commit, so they can be composed inside a caller's transaction. The
    manual CRUD operations used by the /tags routes commit.
    """

    def __init__(self, db: Session, clock: Clock = system_clock):
        self.db = db
        self.clock = clock

    # -- lookups ------------------------------------------------------------

    def get_tag_by_name(self, tag_name: TagName) -> Optional[Tag]:
        return self.db.query(Tag).filter(Tag.name == _name(tag_name)).first()

    def _active_row(self, member_id: int, tag_id: int) -> Optional[MemberTag]:
        return (
            self.db.query(MemberTag)
            .filter_by(member_id=member_id, tag_id=tag_id, is_active=True)
            .order_by(MemberTag.assigned_at.desc())
            .first()
        )

    def _is_expired(self, row: MemberTag, now: datetime) -> bool:
        # the expiry instant itself is still valid, matching the inclusive event window
        return row.expires_at is not None and as_utc(row.expires_at) < now

    def _create(
        self,
        member_id: int,
        tag_id: int,
        actor: str,
        expires_at: Optional[datetime] = None,
        notes: Optional[str] = None,
    ) -> MemberTag:
        row = MemberTag(
            member_id=member_id,
            tag_id=tag_id,
            assigned_by=actor,
            assigned_at=self.clock.now(),
            expires_at=as_utc(expires_at),
            notes=notes,
            is_active=True,
        )
        self.db.add(row)
        return row

    def _deactivate(self, row: MemberTag, actor: str, notes: Optional[str] = None) -> None:
        row.is_active = False
        row.removed_by = actor
        row.removed_at = self.clock.now()
        if notes is not None:
            row.notes = notes

    def _expire(self, row: MemberTag) -> None:
        self._deactivate(row, SYSTEM_ACTOR, (row.notes or "") + EXPIRED_SUFFIX)
        logger.info(f"MemberTag {row.id} (member {row.member_id}) auto-expired")

    # -- system tags --------------------------------------------------------

    def ensure_tag(
        self,
        tag_name: TagName,
        description: Optional[str] = None,
        color: Optional[str] = None,
        is_system: bool = True,
    ) -> Tag:
        name = _name(tag_name)
        tag = self.get_tag_by_name(name)
        if tag:
            return tag
        tag = Tag(
            name=name,
            description=description,
            color=color or DEFAULT_CUSTOM_TAG_COLOR,
            type=TagType.system if is_system else TagType.custom,
            is_system=is_system,
            created_by=SYSTEM_ACTOR,
        )
        self.db.add(tag)
        self.db.flush()
        return tag

    def ensure_system_tags(self) -> None:
        for tag_name, (description, color) in SYSTEM_TAG_DEFINITIONS.items():
            self.ensure_tag(tag_name, description, color)

    # -- lifecycle ----------------------------------------------------------

    def reconcile_academic_tags(self, member_id: int, actor_id=SYSTEM_ACTOR) -> Optional[AcademicStanding]:
        """
        Bring FINALIST/ALUMNI in line with the member's computed standing.
        The losing tag is always deactivated before the winning one is
        created, so the two are never active together. Safe to repeat.
        """
        member = (
            self.db.query(Member)
            .options(joinedload(Member.course))
            .filter(Member.id == member_id)
            .first()
        )
        if not member:
            logger.warning(f"Academic tag reconcile: member {member_id} not found")
            return None

        academic_names = [SystemTag.finalist.value, SystemTag.alumni.value]
        tags: Dict[str, Tag] = {
            t.name: t for t in self.db.query(Tag).filter(Tag.name.in_(academic_names)).all()
        }
        if len(tags) < len(academic_names):
            logger.warning("Academic tag reconcile: FINALIST/ALUMNI system tags not found")
            return None

        status_ = AcademicService(self.db, self.clock).member_status(member)
        standing = status_.standing if status_ else AcademicStanding.none
        wanted = _STANDING_TAG[standing]
        actor = str(actor_id)

        for tag_name in academic_names:
            if tag_name == wanted:
                continue
            row = self._active_row(member.id, tags[tag_name].id)
            if row:
                self._deactivate(row, actor, _REMOVE_NOTES[(standing, tag_name)])
                logger.info(f"[{tag_name}] Tag removed from member {member.id}")

        if wanted and not self._active_row(member.id, tags[wanted].id):
            self._create(member.id, tags[wanted].id, actor, notes=_ASSIGN_NOTES[wanted])
            logger.info(f"[{wanted}] Tag assigned to member {member.id}")

        self.db.flush()
        return standing

    def assign_role_tag(
        self,
        member_id: int,
        tag_name: TagName,
        actor_id,
        expires_at: Optional[datetime] = None,
        notes: Optional[str] = None,
    ) -> MemberTag:
        tag = self.get_tag_by_name(tag_name)
        if not tag:
            raise HTTPException(status_code=404, detail=f"Tag {_name(tag_name)} not found")

        row = self._active_row(member_id, tag.id)
        if row and not self._is_expired(row, self.clock.now()):
            return row
        if row:
            self._deactivate(row, SYSTEM_ACTOR, EXPIRED_CLEANUP_NOTE)

        row = self._create(member_id, tag.id, str(actor_id), expires_at, notes)
        self.db.flush()
        logger.info(f"Tag {tag.name} assigned to member {member_id} by {actor_id}")
        return row

    def remove_role_tag(self, member_id: int, tag_name: TagName, actor_id, notes: Optional[str] = None) -> bool:
        tag = self.get_tag_by_name(tag_name)
        if not tag:
            return False
        row = self._active_row(member_id, tag.id)
        if not row:
            return False
        self._deactivate(row, str(actor_id), notes)
        self.db.flush()
        logger.info(f"Tag {tag.name} removed from member {member_id} by {actor_id}")
        return True

    def has_active_tag(self, member_id: int, tag_name: TagName) -> bool:
        tag = self.get_tag_by_name(tag_name)
        if not tag:
            return False
        row = self._active_row(member_id, tag.id)
        if not row:
            return False
        if self._is_expired(row, self.clock.now()):
            self._expire(row)
            self.db.flush()
            return False
        return True

    def active_tag_names(self, member_id: int) -> List[str]:
        rows = (
            self.db.query(MemberTag)
            .options(joinedload(MemberTag.tag))
            .filter_by(member_id=member_id, is_active=True)
            .all()
        )
        now = self.clock.now()
        names = []
        for row in rows:
            if self._is_expired(row, now):
                self._expire(row)
            else:
                names.append(row.tag.name)
        self.db.flush()
        return names

    def rename_tag(self, old_name: str, new_name: str) -> Optional[Tag]:
        """Rename in place; assignments keep pointing at the same row."""
        tag = self.get_tag_by_name(old_name)
        if not tag or old_name == new_name:
            return tag
        if self.get_tag_by_name(new_name):
            raise HTTPException(status_code=400, detail=f"Tag {new_name} already exists")
        tag.name = new_name
        self.db.flush()
        return tag

    # -- manual tag management (/tags routes) -------------------------------

    def list_tags(self) -> List[dict]:
        counts = dict(
            self.db.query(MemberTag.tag_id, func.count(MemberTag.id))
            .filter(MemberTag.is_active.is_(True))
            .group_by(MemberTag.tag_id)
            .all()
        )
        tags = (
            self.db.query(Tag)
            .order_by(Tag.is_system.desc(), Tag.created_at.asc(), Tag.id.asc())
            .all()
        )
        return [
            {
                "id": t.id,
                "name": t.name,
                "description": t.description,
                "type": t.type,
                "color": t.color,
                "is_system": t.is_system,
                "show_on_registration": t.show_on_registration,
                "created_at": t.created_at,
                "member_count": counts.get(t.id, 0),
            }
            for t in tags
        ]

    def create_tag(self, data, actor_id) -> Tag:
        name = data.name.strip().upper()
        if self.get_tag_by_name(name):
            raise HTTPException(status_code=400, detail="Tag with this name already exists")
        tag = Tag(
            name=name,
            description=data.description,
            color=data.color or DEFAULT_CUSTOM_TAG_COLOR,
            type=TagType.custom,
            is_system=False,
            show_on_registration=data.show_on_registration,
            created_by=str(actor_id),
        )
        self.db.add(tag)
        self.db.commit()
        self.db.refresh(tag)
        return tag

    def delete_tag(self, tag_id: int) -> None:
        tag = DatabaseUtils.get_or_404(self.db, Tag, detail="Tag not found", id=tag_id)
        if tag.is_system:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Cannot delete system tags")
        self.db.delete(tag)
        self.db.commit()

    def set_registration_visibility(self, tag_id: int, show: bool) -> Tag:
        tag = DatabaseUtils.get_or_404(self.db, Tag, detail="Tag not found", id=tag_id)
        tag.show_on_registration = show
        self.db.commit()
        self.db.refresh(tag)
        return tag

    def members_with_tag(self, tag_id: int) -> List[MemberTag]:
        DatabaseUtils.get_or_404(self.db, Tag, detail="Tag not found", id=tag_id)
        return (
            self.db.query(MemberTag)
            .options(joinedload(MemberTag.member))
            .join(Member, Member.id == MemberTag.member_id)
            .filter(
                MemberTag.tag_id == tag_id,
                MemberTag.is_active.is_(True),
                Member.is_deleted.is_(False),
            )
            .order_by(Member.full_name.asc())
            .all()
        )

    def assign_tag(self, member_id: int, tag_id: int, actor_id, notes: Optional[str] = None) -> MemberTag:
        get_member_or_404(self.db, member_id)
        tag = DatabaseUtils.get_or_404(self.db, Tag, detail="Tag not found", id=tag_id)
        if self._active_row(member_id, tag.id):
            raise HTTPException(status_code=400, detail="Member already has this tag")
        row = self._create(member_id, tag.id, str(actor_id), notes=notes)
        self.db.commit()
        self.db.refresh(row)
        logger.info(f"Tag {tag.name} assigned to member {member_id} by {actor_id}")
        return row

    def remove_tag(self, member_id: int, tag_id: int, actor_id, notes: Optional[str] = None) -> None:
        row = self._active_row(member_id, tag_id)
        if not row:
            raise HTTPException(status_code=404, detail="Tag assignment not found")
        self._deactivate(row, str(actor_id), notes or row.notes)
        self.db.commit()

    def bulk_assign(self, member_ids: List[int], tag_id: int, actor_id, notes: Optional[str] = None) -> dict:
        tag = DatabaseUtils.get_or_404(self.db, Tag, detail="Tag not found", id=tag_id)
        unique_ids = list(dict.fromkeys(member_ids))
        existing = {
            r.member_id
            for r in self.db.query(MemberTag.member_id).filter(
                MemberTag.member_id.in_(unique_ids),
                MemberTag.tag_id == tag.id,
                MemberTag.is_active.is_(True),
            )
        }
        new_ids = [m for m in unique_ids if m not in existing]
        if not new_ids:
            raise HTTPException(status_code=400, detail="All selected members already have this tag")

        for member_id in new_ids:
            self._create(member_id, tag.id, str(actor_id), notes=notes)
        self.db.commit()
        return {
            "message": f"Tag assigned to {len(new_ids)} member(s)",
            "count": len(new_ids),
            "skipped": len(existing),
        }

    def bulk_remove(self, member_ids: List[int], tag_id: int, actor_id, notes: Optional[str] = None) -> dict:
        rows = (
            self.db.query(MemberTag)
            .filter(
                MemberTag.member_id.in_(member_ids),
                MemberTag.tag_id == tag_id,
                MemberTag.is_active.is_(True),
            )
            .all()
        )
        for row in rows:
            self._deactivate(row, str(actor_id), notes if notes is not None else row.notes)
        self.db.commit()
        return {"message": f"Tag removed from {len(rows)} member(s)", "count": len(rows)}

    def member_history(self, member_id: int) -> List[MemberTag]:
        return (
            self.db.query(MemberTag)
            .options(joinedload(MemberTag.tag))
            .filter(MemberTag.member_id == member_id)
            .order_by(MemberTag.assigned_at.desc(), MemberTag.id.desc())
            .all()
        )
