# api/self_registration/self_registration_service.py

import logging
import secrets
from typing import List, Optional

from fastapi import HTTPException, status
from sqlalchemy import func
from sqlalchemy.orm import Session

from config.settings import settings
from utils.time_utils import Clock, system_clock, as_utc
from utils.database_utils import DatabaseUtils
from utils.cache_utils import invalidate_roster_cache
from helpers.mail_helper import (
    queue_welcome_email,
    queue_registration_received_email,
    queue_rejection_email,
)
from api.members.members_model import Member
from api.members.members_service import MemberService
from api.tags.tags_model import Tag
from api.self_registration.registration_tokens_model import RegistrationToken
from api.self_registration.pending_members_model import PendingMember, PendingStatus

logger = logging.getLogger(__name__)

# copied from the submission onto the new member
MEMBER_FIELDS = (
    "full_name", "email", "phone_number", "gender", "registration_mode", "region_id",
    "residence_id", "hostel_name", "course_id", "initial_year_of_study", "initial_semester",
)


class SelfRegistrationService:
    def __init__(self, db: Session, clock: Clock = system_clock):
        self.db = db
        self.clock = clock

    # -- tokens -------------------------------------------------------------

    @staticmethod
    def registration_url(token: str) -> str:
        return f"{settings.FRONTEND_URL.rstrip('/')}/register?token={token}"

    def token_out(self, token: RegistrationToken, pending_count: int = 0) -> dict:
        return {
            "id": token.id,
            "token": token.token,
            "label": token.label,
            "expires_at": token.expires_at,
            "max_uses": token.max_uses,
            "used_count": token.used_count,
            "is_active": token.is_active,
            "created_at": token.created_at,
            "url": self.registration_url(token.token),
            "pending_count": pending_count,
        }

    def create_token(self, data, actor_id: int) -> dict:
        if as_utc(data.expires_at) <= self.clock.now():
            raise HTTPException(status_code=400, detail="Expiry must be in the future")
        token = RegistrationToken(
            token=secrets.token_hex(32),
            label=data.label,
            expires_at=as_utc(data.expires_at),
            max_uses=data.max_uses,
            used_count=0,
            is_active=True,
            created_by=actor_id,
        )
        self.db.add(token)
        self.db.commit()
        self.db.refresh(token)
        logger.info(f"Registration token {token.id} created by {actor_id}")
        return self.token_out(token)

    def list_tokens(self) -> List[dict]:
        counts = dict(
            self.db.query(PendingMember.token_id, func.count(PendingMember.id))
            .filter(PendingMember.status == PendingStatus.pending)
            .group_by(PendingMember.token_id)
            .all()
        )
        tokens = self.db.query(RegistrationToken).order_by(RegistrationToken.created_at.desc()).all()
        return [self.token_out(t, counts.get(t.id, 0)) for t in tokens]

    def revoke_token(self, token_id: int) -> dict:
        token = DatabaseUtils.get_or_404(self.db, RegistrationToken, detail="Registration token not found", id=token_id)
        token.is_active = False
        self.db.commit()
        self.db.refresh(token)
        return self.token_out(token)

    def _token_problem(self, token: Optional[RegistrationToken]) -> Optional[str]:
        if not token:
            return "Invalid registration link"
        if not token.is_active:
            return "This registration link has been deactivated"
        if token.expires_at is not None and as_utc(token.expires_at) < self.clock.now():
            return "This registration link has expired"
        if token.max_uses is not None and token.used_count >= token.max_uses:
            return "This registration link has reached its maximum uses"
        return None

    def validate_token(self, raw_token: str) -> dict:
        token = self.db.query(RegistrationToken).filter_by(token=raw_token).first()
        problem = self._token_problem(token)
        if problem:
            code = status.HTTP_404_NOT_FOUND if token is None else status.HTTP_410_GONE
            raise HTTPException(status_code=code, detail=problem)
        return {"valid": True, "label": token.label}

    def registration_tags(self) -> List[Tag]:
        return (
            self.db.query(Tag)
            .filter(Tag.show_on_registration.is_(True))
            .order_by(Tag.name.asc())
            .all()
        )

    # -- public submission --------------------------------------------------

    def submit(self, data) -> PendingMember:
        token = self.db.query(RegistrationToken).filter_by(token=data.token).first()
        problem = self._token_problem(token)
        if problem:
            raise HTTPException(status_code=status.HTTP_410_GONE, detail=problem)

        email = data.email.lower()
        if self.db.query(Member.id).filter(func.lower(Member.email) == email).first():
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="An account with this email is already registered. Please use the login page.",
            )
        if (
            self.db.query(PendingMember.id)
            .filter(func.lower(PendingMember.email) == email, PendingMember.status == PendingStatus.pending)
            .first()
        ):
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="A registration with this email is already pending review.",
            )

        fields = data.model_dump(exclude={"token"})
        fields["email"] = email
        try:
            pending = PendingMember(**fields, token_id=token.id, status=PendingStatus.pending)
            self.db.add(pending)
            token.used_count = (token.used_count or 0) + 1
            queue_registration_received_email(self.db, email, data.full_name)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        self.db.refresh(pending)
        logger.info(f"Self-registration {pending.id} submitted via token {token.id}")
        return pending

    # -- review -------------------------------------------------------------

    def list_pending(self, status_filter: Optional[PendingStatus] = PendingStatus.pending) -> List[PendingMember]:
        query = self.db.query(PendingMember)
        if status_filter:
            query = query.filter(PendingMember.status == status_filter)
        return query.order_by(PendingMember.submitted_at.desc(), PendingMember.id.desc()).all()

    def _get_pending(self, pending_id: int) -> PendingMember:
        pending = DatabaseUtils.get_or_404(
            self.db, PendingMember, detail="Pending registration not found", id=pending_id
        )
        if pending.status != PendingStatus.pending:
            raise HTTPException(status_code=400, detail="This registration has already been reviewed")
        return pending

    def update_pending(self, pending_id: int, data) -> PendingMember:
        pending = self._get_pending(pending_id)
        for field, value in data.model_dump(exclude_unset=True).items():
            setattr(pending, field, value)
        self.db.commit()
        self.db.refresh(pending)
        return pending

    def approve(self, pending_id: int, actor_id: int) -> dict:
        """
        Create the member, its initial tags and the welcome email, and mark
        the submission approved, all in one commit.
        """
        pending = self._get_pending(pending_id)
        if self.db.query(Member.id).filter(func.lower(Member.email) == pending.email.lower()).first():
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Email already registered")

        fields = {name: getattr(pending, name) for name in MEMBER_FIELDS}
        try:
            member = MemberService(self.db, self.clock).build_member(fields, actor_id, pending.tag_ids or [])
            queue_welcome_email(self.db, member.email, member.full_name, member.fellowship_number)
            pending.status = PendingStatus.approved
            pending.reviewed_by = actor_id
            pending.reviewed_at = self.clock.now()
            pending.member_id = member.id
            self.db.commit()
        except Exception:
            self.db.rollback()
            logger.exception(f"Approval of pending registration {pending_id} failed")
            raise

        invalidate_roster_cache()
        logger.info(f"Pending registration {pending_id} approved as {member.fellowship_number} by {actor_id}")
        return {
            "message": "Member approved and created successfully",
            "member_id": member.id,
            "fellowship_number": member.fellowship_number,
        }

    def reject(self, pending_id: int, actor_id: int, review_note: Optional[str] = None) -> PendingMember:
        pending = self._get_pending(pending_id)
        try:
            pending.status = PendingStatus.rejected
            pending.reviewed_by = actor_id
            pending.reviewed_at = self.clock.now()
            pending.review_note = review_note
            queue_rejection_email(self.db, pending.email, pending.full_name, review_note)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        self.db.refresh(pending)
        logger.info(f"Pending registration {pending_id} rejected by {actor_id}")
        return pending
