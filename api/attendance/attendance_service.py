# api/attendance/attendance_service.py

import logging
from dataclasses import dataclass
from typing import List, Optional

from fastapi import HTTPException, status
from pydantic import ValidationError
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from config.settings import settings
from config.tag_config import SystemTag
from utils.time_utils import Clock, system_clock, as_utc, is_within_event_window
from utils.database_utils import DatabaseUtils
from utils.cache_utils import cache_manager, roster_cache_key
from api.members.members_model import Member
from api.events.events_model import Event
from api.tags.tags_service import TagService
from api.volunteers.volunteers_service import VolunteerService, VOLUNTEER_TAG
from api.attendance.attendance_records_model import Attendance
from api.attendance.guest_attendance_model import GuestAttendance
from api.attendance.attendance_schema import OfflineRecord

logger = logging.getLogger(__name__)

MEMBER_NOT_FOUND = "Member not found"
EVENT_NOT_FOUND = "Event not found"
CHECKIN_NOT_OPEN = "Check-in not open"
NOT_AUTHORIZED = "Not authorized"
VOLUNTEER_EXPIRED = "Not authorized: check-in volunteer access has expired"
OUTSIDE_WINDOW = "Not within event window"
ALREADY_CHECKED_IN = "Already checked in"
FIRST_ATTENDANCE_NOTE = "Auto-removed: First attendance"


@dataclass
class CheckInDecision:
    allowed: bool
    reason: Optional[str] = None
    status_code: int = status.HTTP_200_OK
    member: Optional[Member] = None
    event: Optional[Event] = None


def _deny(reason: str, status_code: int, member=None, event=None) -> CheckInDecision:
    return CheckInDecision(False, reason, status_code, member, event)


class AttendanceService:
    def __init__(self, db: Session, clock: Clock = system_clock):
        self.db = db
        self.clock = clock
        self.tags = TagService(db, clock)

    # -- admission ----------------------------------------------------------

    def resolve_member(self, qr_code: Optional[str] = None, fellowship_number: Optional[str] = None) -> Optional[Member]:
        query = self.db.query(Member).filter(Member.is_deleted.is_(False))
        if qr_code:
            return query.filter(Member.qr_code == qr_code.strip()).first()
        if fellowship_number:
            return query.filter(Member.fellowship_number == fellowship_number.strip().upper()).first()
        return None

    def can_check_in(
        self,
        actor: dict,
        event_id: int,
        qr_code: Optional[str] = None,
        fellowship_number: Optional[str] = None,
    ) -> CheckInDecision:
        """
        Ordered admission checks; the first failure wins. Managers skip the
        volunteer and time-window checks. For volunteers the window is
        checked before tag validity, so a late scan reports the window.
        """
        member = self.resolve_member(qr_code, fellowship_number)
        if not member:
            return _deny(MEMBER_NOT_FOUND, status.HTTP_404_NOT_FOUND)

        event = self.db.query(Event).filter(Event.id == event_id).first()
        if not event:
            return _deny(EVENT_NOT_FOUND, status.HTTP_404_NOT_FOUND, member)

        if not event.is_active:
            return _deny(CHECKIN_NOT_OPEN, status.HTTP_403_FORBIDDEN, member, event)

        if not actor.get("is_manager"):
            volunteers = VolunteerService(self.db, self.clock)
            if not volunteers.get_assignment(event.id, actor["id"]):
                return _deny(NOT_AUTHORIZED, status.HTTP_403_FORBIDDEN, member, event)
            if not is_within_event_window(event, self.clock.now()):
                return _deny(OUTSIDE_WINDOW, status.HTTP_403_FORBIDDEN, member, event)
            if not self.tags.has_active_tag(actor["id"], VOLUNTEER_TAG):
                return _deny(VOLUNTEER_EXPIRED, status.HTTP_403_FORBIDDEN, member, event)

        if DatabaseUtils.exists(self.db, Attendance, member_id=member.id, event_id=event.id):
            return _deny(ALREADY_CHECKED_IN, status.HTTP_400_BAD_REQUEST, member, event)

        return CheckInDecision(True, member=member, event=event)

    def _clear_first_timer(self, member_id: int) -> bool:
        return self.tags.remove_role_tag(
            member_id,
            SystemTag.pending_first_attendance,
            member_id,
            notes=FIRST_ATTENDANCE_NOTE,
        )

    def check_in(self, actor: dict, payload) -> dict:
        decision = self.can_check_in(actor, payload.event_id, payload.qr_code, payload.fellowship_number)
        if not decision.allowed:
            # keep any lazily expired tag rows
            self.db.commit()
            logger.info(f"Check-in denied for event {payload.event_id}: {decision.reason}")
            raise HTTPException(status_code=decision.status_code, detail=decision.reason)

        member, event = decision.member, decision.event
        try:
            attendance = Attendance(
                member_id=member.id,
                event_id=event.id,
                method=payload.method,
                checked_in_at=self.clock.now(),
                recorded_by=actor["id"],
            )
            self.db.add(attendance)
            self.db.flush()
            first_attendance = self._clear_first_timer(member.id)
            self.db.commit()
        except IntegrityError:
            # lost a race with a concurrent check-in for the same member
            self.db.rollback()
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=ALREADY_CHECKED_IN)

        self.db.refresh(attendance)
        logger.info(f"Member {member.fellowship_number} checked in to event {event.id} via {payload.method.value}")
        return {
            "message": "Check-in successful",
            "attendance": attendance,
            "first_attendance": first_attendance,
        }

    # -- guests -------------------------------------------------------------

    def guest_check_in(self, actor: dict, payload) -> GuestAttendance:
        event = DatabaseUtils.get_or_404(self.db, Event, detail=EVENT_NOT_FOUND, id=payload.event_id)
        if not event.is_active:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=CHECKIN_NOT_OPEN)
        if not event.allow_guest_checkin:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Guest check-in is not enabled for this event",
            )

        guest = GuestAttendance(
            event_id=event.id,
            guest_name=payload.guest_name.strip(),
            guest_phone=payload.guest_phone,
            purpose=payload.purpose,
            checked_in_at=self.clock.now(),
            recorded_by=actor["id"],
        )
        self.db.add(guest)
        self.db.commit()
        self.db.refresh(guest)
        return guest

    # -- listings -----------------------------------------------------------

    def list_event_records(self, event_id: int) -> List[Attendance]:
        DatabaseUtils.get_or_404(self.db, Event, detail=EVENT_NOT_FOUND, id=event_id)
        return (
            self.db.query(Attendance)
            .options(joinedload(Attendance.member))
            .filter(Attendance.event_id == event_id)
            .order_by(Attendance.checked_in_at.asc())
            .all()
        )

    def list_event_guests(self, event_id: int) -> List[GuestAttendance]:
        DatabaseUtils.get_or_404(self.db, Event, detail=EVENT_NOT_FOUND, id=event_id)
        return (
            self.db.query(GuestAttendance)
            .filter(GuestAttendance.event_id == event_id)
            .order_by(GuestAttendance.checked_in_at.asc())
            .all()
        )

    def list_member_records(self, member_id: int) -> List[Attendance]:
        return (
            self.db.query(Attendance)
            .options(joinedload(Attendance.member))
            .filter(Attendance.member_id == member_id)
            .order_by(Attendance.checked_in_at.desc())
            .all()
        )

    # -- offline ------------------------------------------------------------

    def offline_roster(self, event_id: int, actor: dict) -> List[dict]:
        DatabaseUtils.get_or_404(self.db, Event, detail=EVENT_NOT_FOUND, id=event_id)
        if not actor.get("is_manager") and not VolunteerService(self.db, self.clock).get_assignment(event_id, actor["id"]):
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=NOT_AUTHORIZED)

        key = roster_cache_key(event_id)
        cached = cache_manager.get(key)
        if cached is not None:
            return cached

        members = (
            self.db.query(Member)
            .options(joinedload(Member.region))
            .filter(Member.is_deleted.is_(False))
            .order_by(Member.full_name.asc())
            .all()
        )
        roster = [
            {
                "id": m.id,
                "full_name": m.full_name,
                "fellowship_number": m.fellowship_number,
                "phone_number": m.phone_number,
                "qr_code": m.qr_code,
                "region_name": m.region.name if m.region else None,
            }
            for m in members
        ]
        cache_manager.set(key, roster, settings.CACHE_ROSTER_TTL)
        return roster

    def sync_offline_batch(self, records, actor: Optional[dict] = None) -> dict:
        """
        Replay check-ins captured offline, in order. Each record is validated
        and committed on its own; one bad record is reported and the rest
        continue. Existing attendance means the record was already synced and
        is skipped. The client timestamp is kept and the event window is not
        enforced.
        """
        synced = 0
        errors = []
        recorder_id = actor["id"] if actor else None

        for raw in records:
            try:
                record = OfflineRecord.model_validate(raw)
            except ValidationError as e:
                errors.append(self._invalid_record_error(raw, e))
                continue

            try:
                if DatabaseUtils.exists(self.db, Attendance, member_id=record.member_id, event_id=record.event_id):
                    continue

                member = (
                    self.db.query(Member)
                    .filter(Member.id == record.member_id, Member.is_deleted.is_(False))
                    .first()
                )
                if not member:
                    errors.append(self._sync_error(record, MEMBER_NOT_FOUND))
                    continue
                if not self.db.query(Event.id).filter(Event.id == record.event_id).first():
                    errors.append(self._sync_error(record, EVENT_NOT_FOUND))
                    continue

                self.db.add(Attendance(
                    member_id=member.id,
                    event_id=record.event_id,
                    method=record.method,
                    checked_in_at=as_utc(record.timestamp),
                    recorded_by=recorder_id,
                    synced_offline=True,
                ))
                self.db.flush()
                self._clear_first_timer(member.id)
                self.db.commit()
                synced += 1
            except IntegrityError:
                # inserted concurrently by another flush; already synced
                self.db.rollback()
            except SQLAlchemyError as e:
                self.db.rollback()
                logger.exception(f"Offline sync failed for member {record.member_id}, event {record.event_id}")
                errors.append(self._sync_error(record, str(e.__class__.__name__)))

        logger.info(f"Offline sync: {synced}/{len(records)} record(s) synced, {len(errors)} error(s)")
        return {"synced_count": synced, "total_received": len(records), "errors": errors}

    @staticmethod
    def _sync_error(record, message: str) -> dict:
        return {"member_id": record.member_id, "event_id": record.event_id, "error": message}

    @staticmethod
    def _invalid_record_error(raw, exc: ValidationError) -> dict:
        fields = raw if isinstance(raw, dict) else {}

        def _id(key):
            value = fields.get(key)
            return value if isinstance(value, int) and not isinstance(value, bool) else None

        first = exc.errors()[0]
        location = ".".join(str(part) for part in first["loc"]) or "record"
        return {
            "member_id": _id("memberId"),
            "event_id": _id("eventId"),
            "error": f"Invalid record: {location}: {first['msg']}",
        }
