# api/tags/tags_routes.py

from typing import List, Optional

from fastapi import APIRouter, Body, Depends, status
from sqlalchemy.orm import Session

from config.database import get_db
from middlewares.role_middleware import manager_only
from utils.schema_base import Message
from api.tags.tags_service import TagService
from api.tags.tags_controller import TagController
from api.tags.tags_schema import (
    TagCreate,
    TagOut,
    TagWithCount,
    TagVisibilityUpdate,
    TagAssign,
    TagRemove,
    BulkTagRequest,
    BulkAssignResult,
    BulkRemoveResult,
    MemberTagOut,
    TaggedMemberOut,
)

# All tag routes require the manager role
router = APIRouter(prefix="/tags", tags=["tags"])


@router.get("", response_model=List[TagWithCount], summary="List tags with active member counts")
def list_tags(db: Session = Depends(get_db), current_user: dict = Depends(manager_only)):
    return TagController.list_tags(db)


@router.post("", response_model=TagOut, status_code=status.HTTP_201_CREATED)
def create_tag(
    payload: TagCreate,
    db: Session = Depends(get_db),
    current_user: dict = Depends(manager_only),
):
    return TagController.create_tag(payload, db, current_user["id"])


@router.delete("/{tag_id}", response_model=Message)
def delete_tag(tag_id: int, db: Session = Depends(get_db), current_user: dict = Depends(manager_only)):
    TagService(db).delete_tag(tag_id)
    return {"message": "Tag deleted successfully"}


@router.patch("/{tag_id}/registration-visibility", response_model=TagOut)
def update_registration_visibility(
    tag_id: int,
    payload: TagVisibilityUpdate,
    db: Session = Depends(get_db),
    current_user: dict = Depends(manager_only),
):
    return TagService(db).set_registration_visibility(tag_id, payload.show_on_registration)


@router.get("/{tag_id}/members", response_model=List[TaggedMemberOut])
def members_with_tag(tag_id: int, db: Session = Depends(get_db), current_user: dict = Depends(manager_only)):
    return TagController.members_with_tag(tag_id, db)


@router.post("/members/bulk-assign", response_model=BulkAssignResult, status_code=status.HTTP_201_CREATED)
def bulk_assign(
    payload: BulkTagRequest,
    db: Session = Depends(get_db),
    current_user: dict = Depends(manager_only),
):
    return TagController.bulk_assign(payload, db, current_user["id"])


@router.post("/members/bulk-remove", response_model=BulkRemoveResult)
def bulk_remove(
    payload: BulkTagRequest,
    db: Session = Depends(get_db),
    current_user: dict = Depends(manager_only),
):
    return TagController.bulk_remove(payload, db, current_user["id"])


@router.post("/members/{member_id}/tags", response_model=MemberTagOut, status_code=status.HTTP_201_CREATED)
def assign_tag(
    member_id: int,
    payload: TagAssign,
    db: Session = Depends(get_db),
    current_user: dict = Depends(manager_only),
):
    return TagController.assign(member_id, payload, db, current_user["id"])


@router.delete("/members/{member_id}/tags/{tag_id}", response_model=Message)
def remove_tag(
    member_id: int,
    tag_id: int,
    payload: Optional[TagRemove] = Body(None),
    db: Session = Depends(get_db),
    current_user: dict = Depends(manager_only),
):
    notes = payload.notes if payload else None
    TagService(db).remove_tag(member_id, tag_id, current_user["id"], notes)
    return {"message": "Tag removed successfully"}


@router.get("/members/{member_id}/history", response_model=List[MemberTagOut])
def member_history(member_id: int, db: Session = Depends(get_db), current_user: dict = Depends(manager_only)):
    return TagController.history(member_id, db)
