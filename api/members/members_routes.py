# api/members/members_routes.py

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from config.database import get_db
from middlewares.auth_middleware import auth_middleware
from middlewares.role_middleware import manager_only
from utils.schema_base import Message
from utils.time_utils import Clock, get_clock
from api.academic.academic_schema import AcademicStatusOut
from api.members.members_schema import MemberCreate, MemberUpdate, MemberOut, MemberDetailOut, MemberPage
from api.members.members_service import MemberService
from api.tags.tags_service import TagService

router = APIRouter(prefix="/members", tags=["members"])


def _self_or_manager(member_id: int, current_user: dict):
    if current_user["id"] != member_id and not current_user.get("is_manager"):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")


@router.get("", response_model=MemberPage, summary="List members")
def list_members(
    search: Optional[str] = Query(None),
    region_id: Optional[int] = Query(None, alias="regionId"),
    page: int = Query(1, ge=1),
    per_page: int = Query(50, ge=1, le=200, alias="perPage"),
    db: Session = Depends(get_db),
    current_user: dict = Depends(manager_only),
):
    return MemberService(db).list_members(search, region_id, page, per_page)


@router.post("", response_model=MemberOut, status_code=status.HTTP_201_CREATED)
def create_member(
    payload: MemberCreate,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    current_user: dict = Depends(manager_only),
):
    return MemberService(db, clock).create_member(payload, current_user["id"])


@router.get("/qr/{qr_code}", response_model=MemberOut, summary="Resolve a member from a QR code")
def get_by_qr(qr_code: str, db: Session = Depends(get_db), current_user: dict = Depends(auth_middleware)):
    return MemberService(db).get_by_qr(qr_code)


@router.get("/{member_id}", response_model=MemberDetailOut)
def get_member(
    member_id: int,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    current_user: dict = Depends(auth_middleware),
):
    _self_or_manager(member_id, current_user)
    member = MemberService(db, clock).get_member(member_id)
    tags = TagService(db, clock).active_tag_names(member_id)
    db.commit()
    result = MemberDetailOut.model_validate(member)
    result.tags = tags
    return result


@router.put("/{member_id}", response_model=MemberOut)
def update_member(
    member_id: int,
    payload: MemberUpdate,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    current_user: dict = Depends(manager_only),
):
    return MemberService(db, clock).update_member(member_id, payload, current_user["id"])


@router.delete("/{member_id}", response_model=Message)
def delete_member(member_id: int, db: Session = Depends(get_db), current_user: dict = Depends(manager_only)):
    MemberService(db).delete_member(member_id)
    return {"message": "Member deleted successfully"}


@router.get("/{member_id}/academic-status", response_model=AcademicStatusOut)
def academic_status(
    member_id: int,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    current_user: dict = Depends(auth_middleware),
):
    _self_or_manager(member_id, current_user)
    return MemberService(db, clock).academic_status(member_id)


@router.get("/{member_id}/tags", response_model=List[str], summary="Active, non-expired tag names")
def active_tags(
    member_id: int,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    current_user: dict = Depends(auth_middleware),
):
    _self_or_manager(member_id, current_user)
    names = TagService(db, clock).active_tag_names(member_id)
    db.commit()
    return names
