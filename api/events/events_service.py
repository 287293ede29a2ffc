# api/events/events_service.py

import logging
from typing import List, Optional

from fastapi import HTTPException, status
from sqlalchemy import func
from sqlalchemy.orm import Session

from config.settings import settings
from utils.time_utils import Clock, system_clock, event_status
from utils.database_utils import DatabaseUtils
from api.events.events_model import Event, EventType
from api.attendance.attendance_records_model import Attendance
from api.volunteers.volunteers_service import VolunteerService

logger = logging.getLogger(__name__)


class EventService:
    def __init__(self, db: Session, clock: Clock = system_clock):
        self.db = db
        self.clock = clock

    def get_event(self, event_id: int) -> Event:
        return DatabaseUtils.get_or_404(self.db, Event, detail="Event not found", id=event_id)

    def to_out(self, event: Event, attendance_count: Optional[int] = None) -> dict:
        if attendance_count is None:
            attendance_count = self.db.query(func.count(Attendance.id)).filter_by(event_id=event.id).scalar()
        return {
            "id": event.id,
            "name": event.name,
            "date": event.date,
            "start_time": event.start_time,
            "end_time": event.end_time,
            "type": event.type,
            "venue": event.venue,
            "is_active": event.is_active,
            "allow_guest_checkin": event.allow_guest_checkin,
            "is_recurring": event.is_recurring,
            "recurrence_rule": event.recurrence_rule,
            "status": event_status(event, self.clock.now()),
            "attendance_count": attendance_count,
            "created_at": event.created_at,
        }

    def list_events(self, is_active: Optional[bool] = None, event_type: Optional[EventType] = None,
                    upcoming: bool = False) -> List[dict]:
        query = self.db.query(Event)
        if is_active is not None:
            query = query.filter(Event.is_active.is_(is_active))
        if event_type:
            query = query.filter(Event.type == event_type)
        if upcoming:
            today = self.clock.now().astimezone(settings.org_timezone).date()
            query = query.filter(Event.date >= today)
        events = query.order_by(Event.date.desc(), Event.start_time.desc()).all()

        counts = dict(
            self.db.query(Attendance.event_id, func.count(Attendance.id))
            .group_by(Attendance.event_id)
            .all()
        )
        return [self.to_out(e, counts.get(e.id, 0)) for e in events]

    def active_events(self) -> List[dict]:
        events = self.db.query(Event).filter(Event.is_active.is_(True)).order_by(Event.date.desc()).all()
        return [self.to_out(e) for e in events]

    def create_event(self, data, actor_id: int) -> Event:
        event = Event(
            **data.model_dump(),
            is_active=False,
            created_by=actor_id,
        )
        self.db.add(event)
        self.db.commit()
        self.db.refresh(event)
        logger.info(f"Event {event.id} '{event.name}' created for {event.date}")
        return event

    def update_event(self, event_id: int, data, actor_id) -> Event:
        event = self.get_event(event_id)
        changes = data.model_dump(exclude_unset=True)
        for field, value in changes.items():
            setattr(event, field, value)
        if event.end_time <= event.start_time:
            self.db.rollback()
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="endTime must be after startTime")

        self.db.flush()
        if {"date", "end_time"} & changes.keys():
            # volunteer tags expire with the event
            VolunteerService(self.db, self.clock).sync_event(event, actor_id)
        self.db.commit()
        self.db.refresh(event)
        return event

    def delete_event(self, event_id: int, actor_id) -> None:
        event = self.get_event(event_id)
        VolunteerService(self.db, self.clock).release_event(event, actor_id)
        self.db.delete(event)
        self.db.commit()
        logger.info(f"Event {event_id} deleted")

    def toggle_active(self, event_id: int) -> Event:
        event = self.get_event(event_id)
        event.is_active = not event.is_active
        self.db.commit()
        self.db.refresh(event)
        logger.info(f"Event {event.id} check-in {'opened' if event.is_active else 'closed'}")
        return event

    def toggle_guest_checkin(self, event_id: int) -> Event:
        event = self.get_event(event_id)
        event.allow_guest_checkin = not event.allow_guest_checkin
        self.db.commit()
        self.db.refresh(event)
        return event
