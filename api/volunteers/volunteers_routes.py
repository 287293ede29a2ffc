# api/volunteers/volunteers_routes.py

from typing import List

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from config.database import get_db
from middlewares.auth_middleware import auth_middleware
from middlewares.role_middleware import manager_only
from utils.schema_base import Message
from utils.time_utils import Clock, get_clock
from api.volunteers.volunteers_schema import VolunteerAssign, VolunteerOut, PermissionOut
from api.volunteers.volunteers_service import VolunteerService

router = APIRouter(prefix="/volunteers", tags=["volunteers"])


@router.post(
    "/{event_id}/volunteers",
    response_model=VolunteerOut,
    status_code=status.HTTP_201_CREATED,
    summary="Assign a check-in volunteer (200 if already assigned)",
)
def assign_volunteer(
    event_id: int,
    payload: VolunteerAssign,
    response: Response,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    current_user: dict = Depends(manager_only),
):
    volunteer, created = VolunteerService(db, clock).assign(event_id, payload.member_id, current_user["id"])
    if not created:
        response.status_code = status.HTTP_200_OK
    return volunteer


@router.delete("/{event_id}/volunteers/{member_id}", response_model=Message)
def remove_volunteer(
    event_id: int,
    member_id: int,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    current_user: dict = Depends(manager_only),
):
    VolunteerService(db, clock).remove(event_id, member_id, current_user["id"])
    return {"message": "Volunteer removed successfully"}


@router.get("/{event_id}/volunteers", response_model=List[VolunteerOut])
def list_volunteers(event_id: int, db: Session = Depends(get_db), current_user: dict = Depends(manager_only)):
    return VolunteerService(db).list_volunteers(event_id)


@router.get("/{event_id}/check-permission", response_model=PermissionOut)
def check_permission(
    event_id: int,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    current_user: dict = Depends(auth_middleware),
):
    return VolunteerService(db, clock).check_permission(event_id, current_user)
