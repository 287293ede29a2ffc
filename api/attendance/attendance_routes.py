# api/attendance/attendance_routes.py

from typing import Any, List, Optional

from fastapi import APIRouter, Body, Depends, status
from sqlalchemy.orm import Session

from config.database import get_db
from middlewares.auth_middleware import auth_middleware, optional_auth
from middlewares.role_middleware import manager_only
from utils.time_utils import Clock, get_clock
from api.attendance.attendance_schema import (
    CheckInRequest,
    CheckInResponse,
    AttendanceOut,
    GuestCheckInRequest,
    GuestAttendanceOut,
    RosterEntry,
    SyncResult,
)
from api.attendance.attendance_controller import AttendanceController

router = APIRouter(prefix="/attendance", tags=["attendance"])


@router.post(
    "/check-in",
    response_model=CheckInResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Check a member in by QR code or fellowship number",
)
def check_in(
    payload: CheckInRequest,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    current_user: dict = Depends(auth_middleware),
) -> CheckInResponse:
    return AttendanceController.check_in(payload, db, clock, current_user)


@router.post(
    "/guest-check-in",
    response_model=GuestAttendanceOut,
    status_code=status.HTTP_201_CREATED,
    summary="Record a guest at an event",
)
def guest_check_in(
    payload: GuestCheckInRequest,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    current_user: dict = Depends(manager_only),
) -> GuestAttendanceOut:
    return AttendanceController.guest_check_in(payload, db, clock, current_user)


@router.post(
    "/sync-batch",
    response_model=SyncResult,
    summary="Replay check-ins captured offline (idempotent)",
)
def sync_batch(
    records: List[Any] = Body(...),
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    current_user: Optional[dict] = Depends(optional_auth),
) -> SyncResult:
    return AttendanceController.sync_batch(records, db, clock, current_user)


@router.get(
    "/me",
    response_model=List[AttendanceOut],
    summary="List my own attendance records",
)
def list_my_records(
    db: Session = Depends(get_db),
    current_user: dict = Depends(auth_middleware),
) -> List[AttendanceOut]:
    return AttendanceController.list_my_records(db, current_user["id"])


@router.get(
    "/{event_id}/offline-roster",
    response_model=List[RosterEntry],
    summary="Member lookup table for offline check-in",
)
def offline_roster(
    event_id: int,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    current_user: dict = Depends(auth_middleware),
) -> List[RosterEntry]:
    return AttendanceController.offline_roster(event_id, db, clock, current_user)


@router.get(
    "/{event_id}/guests",
    response_model=List[GuestAttendanceOut],
    summary="List guests recorded at an event",
)
def list_event_guests(
    event_id: int,
    db: Session = Depends(get_db),
    current_user: dict = Depends(manager_only),
) -> List[GuestAttendanceOut]:
    return AttendanceController.list_event_guests(event_id, db)


@router.get(
    "/{event_id}",
    response_model=List[AttendanceOut],
    summary="List all attendance records for an event",
)
def list_event_records(
    event_id: int,
    db: Session = Depends(get_db),
    current_user: dict = Depends(manager_only),
) -> List[AttendanceOut]:
    return AttendanceController.list_event_records(event_id, db)
