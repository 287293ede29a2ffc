# api/members/members_service.py

import logging
import uuid
from typing import Iterable, Optional

from fastapi import HTTPException, status
from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from config.tag_config import SystemTag, SYSTEM_ACTOR
from utils.time_utils import Clock, system_clock, as_utc
from utils.database_utils import DatabaseUtils, get_member_or_404
from utils.cache_utils import invalidate_roster_cache
from utils.fellowship_number import generate_fellowship_number
from api.auth.auth_service import hash_password
from api.academic.academic_service import AcademicService
from api.courses.courses_model import Course
from api.regions.regions_model import Region
from api.regions.residences_model import Residence
from api.members.members_model import Member, RegistrationMode
from api.tags.tags_model import Tag
from api.tags.tags_service import TagService

logger = logging.getLogger(__name__)

# Changing any of these can move a member between NONE/FINALIST/ALUMNI
ACADEMIC_FIELDS = {"course_id", "initial_year_of_study", "initial_semester", "registration_date"}


class MemberService:
    def __init__(self, db: Session, clock: Clock = system_clock):
        self.db = db
        self.clock = clock
        self.tags = TagService(db, clock)

    def _check_references(self, region_id=None, residence_id=None, course_id=None):
        if region_id is not None:
            DatabaseUtils.get_or_404(self.db, Region, detail="Region not found", id=region_id)
        if residence_id is not None:
            DatabaseUtils.get_or_404(self.db, Residence, detail="Residence not found", id=residence_id)
        if course_id is not None:
            DatabaseUtils.get_or_404(self.db, Course, detail="Course not found", id=course_id)

    def build_member(self, fields: dict, actor_id=SYSTEM_ACTOR, tag_ids: Optional[Iterable[int]] = None) -> Member:
        """
        Create a member and its initial tags without committing. New members
        carry PENDING_FIRST_ATTENDANCE until their first check-in. The
        fellowship number doubles as the initial password.
        """
        self._check_references(fields.get("region_id"), fields.get("residence_id"), fields.get("course_id"))

        fellowship_number = generate_fellowship_number(self.db)
        member = Member(
            **fields,
            fellowship_number=fellowship_number,
            password=hash_password(fellowship_number),
            qr_code=uuid.uuid4().hex,
        )
        if member.registration_date is None:
            member.registration_date = self.clock.now()
        else:
            member.registration_date = as_utc(member.registration_date)
        self.db.add(member)
        self.db.flush()

        if member.registration_mode == RegistrationMode.new_member:
            self.tags.ensure_tag(SystemTag.pending_first_attendance)
            self.tags.assign_role_tag(
                member.id,
                SystemTag.pending_first_attendance,
                SYSTEM_ACTOR,
                notes="Auto-assigned: New member",
            )

        for tag_id in tag_ids or []:
            tag = self.db.query(Tag).filter(Tag.id == tag_id, Tag.show_on_registration.is_(True)).first()
            if tag:
                self.tags.assign_role_tag(member.id, tag.name, actor_id, notes="Selected at registration")

        self.tags.reconcile_academic_tags(member.id, actor_id)
        logger.info(f"Member {member.fellowship_number} created")
        return member

    def create_member(self, data, actor_id) -> Member:
        try:
            member = self.build_member(data.model_dump(), actor_id)
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Email already registered")
        except Exception:
            self.db.rollback()
            raise
        self.db.refresh(member)
        invalidate_roster_cache()
        return member

    def get_member(self, member_id: int) -> Member:
        return get_member_or_404(self.db, member_id)

    def get_by_qr(self, qr_code: str) -> Member:
        return DatabaseUtils.get_or_404(self.db, Member, detail="Member not found", qr_code=qr_code, is_deleted=False)

    def list_members(self, search: Optional[str] = None, region_id: Optional[int] = None,
                     page: int = 1, per_page: int = 50) -> dict:
        query = self.db.query(Member).filter(Member.is_deleted.is_(False))
        if region_id:
            query = query.filter(Member.region_id == region_id)
        if search:
            like = f"%{search.strip().lower()}%"
            query = query.filter(or_(
                func.lower(Member.full_name).like(like),
                func.lower(Member.email).like(like),
                func.lower(Member.fellowship_number).like(like),
                Member.phone_number.like(like),
            ))
        return DatabaseUtils.paginate_query(query.order_by(Member.full_name.asc()), page, per_page)

    def update_member(self, member_id: int, data, actor_id) -> Member:
        member = self.get_member(member_id)
        changes = data.model_dump(exclude_unset=True)
        self._check_references(changes.get("region_id"), changes.get("residence_id"), changes.get("course_id"))

        if "registration_date" in changes and changes["registration_date"] is not None:
            changes["registration_date"] = as_utc(changes["registration_date"])
        for field, value in changes.items():
            setattr(member, field, value)

        try:
            self.db.flush()
            if ACADEMIC_FIELDS & changes.keys():
                self.tags.reconcile_academic_tags(member.id, actor_id)
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Email already registered")
        self.db.refresh(member)
        invalidate_roster_cache()
        return member

    def delete_member(self, member_id: int) -> None:
        member = self.get_member(member_id)
        member.is_deleted = True
        self.db.commit()
        invalidate_roster_cache()
        logger.info(f"Member {member.fellowship_number} soft-deleted")

    def academic_status(self, member_id: int) -> dict:
        member = (
            self.db.query(Member)
            .options(joinedload(Member.course))
            .filter(Member.id == member_id, Member.is_deleted.is_(False))
            .first()
        )
        if not member:
            raise HTTPException(status_code=404, detail="Member not found")

        result = AcademicService(self.db, self.clock).member_status(member)
        return {
            "current_year": result.current_year if result else None,
            "current_semester": result.current_semester if result else None,
            "is_finalist": bool(result and result.is_finalist),
            "is_alumni": bool(result and result.is_alumni),
            "course": member.course,
        }
