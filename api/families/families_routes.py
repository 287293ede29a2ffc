# api/families/families_routes.py

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from config.database import get_db
from middlewares.auth_middleware import auth_middleware
from middlewares.role_middleware import manager_only
from utils.schema_base import Message
from utils.time_utils import Clock, get_clock
from api.families.families_schema import (
    FamilyCreate,
    FamilyUpdate,
    FamilyHeadAssign,
    FamilyMemberAdd,
    FamilyOut,
    FamilyDetailOut,
    FamilyMemberOut,
)
from api.families.families_service import FamilyService

router = APIRouter(prefix="/families", tags=["families"])


@router.get("", response_model=List[FamilyOut])
def list_families(
    region_id: Optional[int] = Query(None, alias="regionId"),
    db: Session = Depends(get_db),
    current_user: dict = Depends(auth_middleware),
):
    return FamilyService(db).list_families(region_id)


@router.post("", response_model=FamilyOut, status_code=status.HTTP_201_CREATED)
def create_family(
    payload: FamilyCreate,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    current_user: dict = Depends(manager_only),
):
    service = FamilyService(db, clock)
    return service.to_out(service.create_family(payload, current_user["id"]))


@router.get("/{family_id}", response_model=FamilyDetailOut)
def get_family(family_id: int, db: Session = Depends(get_db), current_user: dict = Depends(auth_middleware)):
    service = FamilyService(db)
    return service.to_out(service.get_family(family_id), with_members=True)


@router.put("/{family_id}", response_model=FamilyOut, summary="Rename a family and its tags")
def rename_family(
    family_id: int,
    payload: FamilyUpdate,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    current_user: dict = Depends(manager_only),
):
    service = FamilyService(db, clock)
    return service.to_out(service.rename_family(family_id, payload))


@router.delete("/{family_id}", response_model=Message)
def delete_family(
    family_id: int,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    current_user: dict = Depends(manager_only),
):
    FamilyService(db, clock).delete_family(family_id, current_user["id"])
    return {"message": "Family deleted successfully"}


@router.put("/{family_id}/head", response_model=FamilyOut)
def assign_family_head(
    family_id: int,
    payload: FamilyHeadAssign,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    current_user: dict = Depends(manager_only),
):
    service = FamilyService(db, clock)
    return service.to_out(service.assign_head(family_id, payload.member_id, current_user["id"]))


@router.delete("/{family_id}/head", response_model=FamilyOut)
def remove_family_head(
    family_id: int,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    current_user: dict = Depends(manager_only),
):
    service = FamilyService(db, clock)
    return service.to_out(service.remove_head(family_id, current_user["id"]))


@router.post("/{family_id}/members", response_model=FamilyMemberOut, status_code=status.HTTP_201_CREATED)
def add_family_member(
    family_id: int,
    payload: FamilyMemberAdd,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    current_user: dict = Depends(manager_only),
):
    return FamilyService(db, clock).add_member(family_id, payload.member_id, current_user["id"])


@router.delete("/{family_id}/members/{member_id}", response_model=Message)
def remove_family_member(
    family_id: int,
    member_id: int,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    current_user: dict = Depends(manager_only),
):
    FamilyService(db, clock).remove_member(family_id, member_id, current_user["id"])
    return {"message": "Member removed from family"}
