# api/profile_edits/profile_edits_routes.py

from typing import List, Literal

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from config.database import get_db
from middlewares.auth_middleware import auth_middleware
from middlewares.role_middleware import manager_only
from utils.time_utils import Clock, get_clock
from api.profile_edits.profile_edit_requests_model import EditRequestStatus
from api.profile_edits.profile_edits_schema import EditRequestSubmit, EditRequestOut, EditRequestReview
from api.profile_edits.profile_edits_service import ProfileEditService

router = APIRouter(prefix="/profile-edits", tags=["profile-edits"])


@router.post("", response_model=EditRequestOut, status_code=status.HTTP_201_CREATED,
             summary="Ask for changes to my own profile")
def submit_edit_request(
    payload: EditRequestSubmit,
    db: Session = Depends(get_db),
    current_user: dict = Depends(auth_middleware),
):
    return ProfileEditService(db).submit(current_user["id"], payload)


@router.get("/me", response_model=List[EditRequestOut])
def list_my_edit_requests(db: Session = Depends(get_db), current_user: dict = Depends(auth_middleware)):
    return ProfileEditService(db).list_for_member(current_user["id"])


@router.get("", response_model=List[EditRequestOut])
def list_edit_requests(
    status_filter: Literal["PENDING", "APPROVED", "REJECTED", "ALL"] = Query("PENDING", alias="status"),
    db: Session = Depends(get_db),
    current_user: dict = Depends(manager_only),
):
    selected = None if status_filter == "ALL" else EditRequestStatus(status_filter)
    return ProfileEditService(db).list_requests(selected)


@router.patch("/{request_id}", response_model=EditRequestOut, summary="Approve or reject an edit request")
def review_edit_request(
    request_id: int,
    payload: EditRequestReview,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    current_user: dict = Depends(manager_only),
):
    return ProfileEditService(db, clock).review(request_id, current_user["id"], payload)
