# api/attendance/attendance_controller.py

from typing import Any, List, Optional

from sqlalchemy.orm import Session

from utils.time_utils import Clock
from api.attendance.attendance_service import AttendanceService
from api.attendance.attendance_schema import (
    CheckInRequest,
    CheckInResponse,
    AttendanceOut,
    GuestCheckInRequest,
    GuestAttendanceOut,
    RosterEntry,
    SyncResult,
)


class AttendanceController:
    @staticmethod
    def check_in(payload: CheckInRequest, db: Session, clock: Clock, current_user: dict) -> CheckInResponse:
        result = AttendanceService(db, clock).check_in(current_user, payload)
        return CheckInResponse.model_validate(result)

    @staticmethod
    def guest_check_in(payload: GuestCheckInRequest, db: Session, clock: Clock, current_user: dict) -> GuestAttendanceOut:
        guest = AttendanceService(db, clock).guest_check_in(current_user, payload)
        return GuestAttendanceOut.model_validate(guest)

    @staticmethod
    def offline_roster(event_id: int, db: Session, clock: Clock, current_user: dict) -> List[RosterEntry]:
        roster = AttendanceService(db, clock).offline_roster(event_id, current_user)
        return [RosterEntry.model_validate(entry) for entry in roster]

    @staticmethod
    def sync_batch(records: List[Any], db: Session, clock: Clock, current_user: Optional[dict]) -> SyncResult:
        result = AttendanceService(db, clock).sync_offline_batch(records, current_user)
        return SyncResult.model_validate(result)

    @staticmethod
    def list_event_records(event_id: int, db: Session) -> List[AttendanceOut]:
        return [AttendanceOut.model_validate(r) for r in AttendanceService(db).list_event_records(event_id)]

    @staticmethod
    def list_event_guests(event_id: int, db: Session) -> List[GuestAttendanceOut]:
        return [GuestAttendanceOut.model_validate(g) for g in AttendanceService(db).list_event_guests(event_id)]

    @staticmethod
    def list_my_records(db: Session, member_id: int) -> List[AttendanceOut]:
        return [AttendanceOut.model_validate(r) for r in AttendanceService(db).list_member_records(member_id)]
