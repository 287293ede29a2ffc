# api/volunteers/volunteers_service.py

import logging
from typing import List, Optional, Tuple

from fastapi import HTTPException, status
from sqlalchemy.orm import Session, joinedload

from config.tag_config import SystemTag, SYSTEM_TAG_DEFINITIONS
from utils.time_utils import Clock, system_clock, event_end_utc, as_utc
from utils.database_utils import DatabaseUtils, get_member_or_404
from api.events.events_model import Event
from api.tags.tags_service import TagService
from api.volunteers.event_volunteers_model import EventVolunteer

logger = logging.getLogger(__name__)

VOLUNTEER_TAG = SystemTag.check_in_volunteer


class VolunteerService:
    """
    Event volunteers and their CHECK_IN_VOLUNTEER tag. The tag is global, so
    its expiry tracks the latest end among the member's volunteer events that
    have not finished yet; it is removed once none remain.
    """

    def __init__(self, db: Session, clock: Clock = system_clock):
        self.db = db
        self.clock = clock
        self.tags = TagService(db, clock)

    def get_assignment(self, event_id: int, member_id: int) -> Optional[EventVolunteer]:
        return (
            self.db.query(EventVolunteer)
            .filter_by(event_id=event_id, member_id=member_id)
            .first()
        )

    def _sync_tag(self, member_id: int, actor_id, assign_note: str, removal_note: str) -> None:
        assignments = (
            self.db.query(EventVolunteer)
            .options(joinedload(EventVolunteer.event))
            .filter(EventVolunteer.member_id == member_id)
            .all()
        )
        now = self.clock.now()
        ends = [event_end_utc(a.event) for a in assignments]
        remaining = [end for end in ends if end > now]

        if not remaining:
            self.tags.remove_role_tag(member_id, VOLUNTEER_TAG, actor_id, notes=removal_note)
            return

        latest = max(remaining)
        description, color = SYSTEM_TAG_DEFINITIONS[VOLUNTEER_TAG]
        self.tags.ensure_tag(VOLUNTEER_TAG, description, color)
        row = self.tags.assign_role_tag(member_id, VOLUNTEER_TAG, actor_id, expires_at=latest, notes=assign_note)
        if as_utc(row.expires_at) != latest:
            row.expires_at = latest
        self.db.flush()

    def assign(self, event_id: int, member_id: int, actor_id: int) -> Tuple[EventVolunteer, bool]:
        """Returns (assignment, created). Re-assigning is not an error."""
        event = DatabaseUtils.get_or_404(self.db, Event, detail="Event not found", id=event_id)
        get_member_or_404(self.db, member_id)

        existing = self.get_assignment(event_id, member_id)
        if existing:
            return existing, False

        try:
            volunteer = EventVolunteer(
                event_id=event.id,
                member_id=member_id,
                assigned_by=actor_id,
                assigned_at=self.clock.now(),
            )
            self.db.add(volunteer)
            self.db.flush()
            self._sync_tag(
                member_id,
                actor_id,
                assign_note=f"Auto-assigned for event: {event.name}",
                removal_note="Event already ended",
            )
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        self.db.refresh(volunteer)
        logger.info(f"Member {member_id} assigned as check-in volunteer for event {event_id}")
        return volunteer, True

    def remove(self, event_id: int, member_id: int, actor_id: int) -> None:
        volunteer = self.get_assignment(event_id, member_id)
        if not volunteer:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Volunteer not found")
        try:
            self.db.delete(volunteer)
            self.db.flush()
            self._sync_tag(
                member_id,
                actor_id,
                assign_note="Volunteer assignments updated",
                removal_note="Removed from volunteer duty for event",
            )
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        logger.info(f"Member {member_id} removed as check-in volunteer for event {event_id}")

    def list_volunteers(self, event_id: int) -> List[EventVolunteer]:
        DatabaseUtils.get_or_404(self.db, Event, detail="Event not found", id=event_id)
        return (
            self.db.query(EventVolunteer)
            .options(joinedload(EventVolunteer.member))
            .filter(EventVolunteer.event_id == event_id)
            .order_by(EventVolunteer.assigned_at.desc())
            .all()
        )

    def sync_event(self, event: Event, actor_id) -> None:
        """Re-derive tag expiry for every volunteer after the event moved."""
        for volunteer in list(event.volunteers):
            self._sync_tag(
                volunteer.member_id,
                actor_id,
                assign_note=f"Event rescheduled: {event.name}",
                removal_note="Event rescheduled",
            )

    def release_event(self, event: Event, actor_id) -> None:
        """Drop every volunteer of an event that is about to be deleted."""
        member_ids = [v.member_id for v in event.volunteers]
        for volunteer in list(event.volunteers):
            self.db.delete(volunteer)
        self.db.flush()
        self.db.expire(event, ["volunteers"])
        for member_id in member_ids:
            self._sync_tag(
                member_id,
                actor_id,
                assign_note="Volunteer assignments updated",
                removal_note=f"Event deleted: {event.name}",
            )

    def check_permission(self, event_id: int, current_user: dict) -> dict:
        if current_user.get("is_manager"):
            return {"has_permission": True, "role": "MANAGER"}

        volunteer = self.get_assignment(event_id, current_user["id"])
        if not volunteer:
            return {"has_permission": False}

        if event_end_utc(volunteer.event) < self.clock.now():
            self.tags.has_active_tag(current_user["id"], VOLUNTEER_TAG)
            self.db.commit()
            return {"has_permission": False, "reason": "Event has ended"}

        if not self.tags.has_active_tag(current_user["id"], VOLUNTEER_TAG):
            self.db.commit()
            return {"has_permission": False, "reason": "Check-in volunteer access has expired"}

        return {"has_permission": True, "role": "VOLUNTEER"}
