# api/events/events_routes.py

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from config.database import get_db
from middlewares.auth_middleware import auth_middleware
from middlewares.role_middleware import manager_only
from utils.schema_base import Message
from utils.time_utils import Clock, get_clock
from api.events.events_model import EventType
from api.events.events_schema import EventCreate, EventUpdate, EventOut, EventToggleOut
from api.events.events_service import EventService

router = APIRouter(prefix="/events", tags=["events"])


@router.get("", response_model=List[EventOut])
def list_events(
    is_active: Optional[bool] = Query(None, alias="isActive"),
    event_type: Optional[EventType] = Query(None, alias="type"),
    upcoming: bool = Query(False),
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    current_user: dict = Depends(auth_middleware),
):
    return EventService(db, clock).list_events(is_active, event_type, upcoming)


@router.get("/active", response_model=List[EventOut], summary="Events currently open for check-in")
def active_events(
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    current_user: dict = Depends(auth_middleware),
):
    return EventService(db, clock).active_events()


@router.get("/{event_id}", response_model=EventOut)
def get_event(
    event_id: int,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    current_user: dict = Depends(auth_middleware),
):
    svc = EventService(db, clock)
    return svc.to_out(svc.get_event(event_id))


@router.post("", response_model=EventOut, status_code=status.HTTP_201_CREATED)
def create_event(
    payload: EventCreate,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    current_user: dict = Depends(manager_only),
):
    svc = EventService(db, clock)
    return svc.to_out(svc.create_event(payload, current_user["id"]), 0)


@router.put("/{event_id}", response_model=EventOut)
def update_event(
    event_id: int,
    payload: EventUpdate,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    current_user: dict = Depends(manager_only),
):
    svc = EventService(db, clock)
    return svc.to_out(svc.update_event(event_id, payload, current_user["id"]))


@router.delete("/{event_id}", response_model=Message)
def delete_event(
    event_id: int,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    current_user: dict = Depends(manager_only),
):
    EventService(db, clock).delete_event(event_id, current_user["id"])
    return {"message": "Event deleted successfully"}


@router.patch("/{event_id}/toggle-active", response_model=EventToggleOut)
def toggle_active(
    event_id: int,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    current_user: dict = Depends(manager_only),
):
    svc = EventService(db, clock)
    event = svc.toggle_active(event_id)
    return {
        "message": f"Event {'activated' if event.is_active else 'deactivated'} successfully",
        "event": svc.to_out(event),
    }


@router.patch("/{event_id}/toggle-guest-checkin", response_model=EventToggleOut)
def toggle_guest_checkin(
    event_id: int,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    current_user: dict = Depends(manager_only),
):
    svc = EventService(db, clock)
    event = svc.toggle_guest_checkin(event_id)
    return {
        "message": f"Guest check-in {'enabled' if event.allow_guest_checkin else 'disabled'}",
        "event": svc.to_out(event),
    }
