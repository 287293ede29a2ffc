# api/self_registration/self_registration_routes.py

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from config.database import get_db
from middlewares.role_middleware import manager_only
from utils.time_utils import Clock, get_clock
from api.self_registration.pending_members_model import PendingStatus
from api.self_registration.self_registration_schema import (
    RegTokenCreate,
    RegTokenOut,
    TokenValidation,
    SelfRegistrationSubmit,
    SubmissionReceived,
    RegistrationTagOut,
    PendingMemberUpdate,
    PendingMemberOut,
    RejectRequest,
    ApprovalResult,
)
from api.self_registration.self_registration_service import SelfRegistrationService

router = APIRouter(tags=["self-registration"])


# ─── Registration tokens (manager) ──────────────────────────────────────────
@router.post("/reg-tokens", response_model=RegTokenOut, status_code=status.HTTP_201_CREATED)
def create_token(
    payload: RegTokenCreate,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    current_user: dict = Depends(manager_only),
):
    return SelfRegistrationService(db, clock).create_token(payload, current_user["id"])


@router.get("/reg-tokens", response_model=List[RegTokenOut])
def list_tokens(db: Session = Depends(get_db), current_user: dict = Depends(manager_only)):
    return SelfRegistrationService(db).list_tokens()


@router.patch("/reg-tokens/{token_id}/revoke", response_model=RegTokenOut)
def revoke_token(token_id: int, db: Session = Depends(get_db), current_user: dict = Depends(manager_only)):
    return SelfRegistrationService(db).revoke_token(token_id)


# ─── Public registration ────────────────────────────────────────────────────
@router.get("/register/validate", response_model=TokenValidation, summary="Check a registration link")
def validate_token(token: str = Query(..., min_length=1), db: Session = Depends(get_db), clock: Clock = Depends(get_clock)):
    return SelfRegistrationService(db, clock).validate_token(token)


@router.get("/register/tags", response_model=List[RegistrationTagOut], summary="Tags offered on the registration form")
def registration_tags(db: Session = Depends(get_db)):
    return SelfRegistrationService(db).registration_tags()


@router.post("/register", response_model=SubmissionReceived, status_code=status.HTTP_201_CREATED)
def submit_registration(
    payload: SelfRegistrationSubmit,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    pending = SelfRegistrationService(db, clock).submit(payload)
    return {
        "message": "Registration submitted successfully. We'll review your details and activate your account.",
        "id": pending.id,
    }


# ─── Pending approvals (manager) ────────────────────────────────────────────
@router.get("/pending-members", response_model=List[PendingMemberOut])
def list_pending_members(
    status_filter: Optional[PendingStatus] = Query(PendingStatus.pending, alias="status"),
    db: Session = Depends(get_db),
    current_user: dict = Depends(manager_only),
):
    return SelfRegistrationService(db).list_pending(status_filter)


@router.patch("/pending-members/{pending_id}", response_model=PendingMemberOut)
def update_pending_member(
    pending_id: int,
    payload: PendingMemberUpdate,
    db: Session = Depends(get_db),
    current_user: dict = Depends(manager_only),
):
    return SelfRegistrationService(db).update_pending(pending_id, payload)


@router.post("/pending-members/{pending_id}/approve", response_model=ApprovalResult)
def approve_pending_member(
    pending_id: int,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    current_user: dict = Depends(manager_only),
):
    return SelfRegistrationService(db, clock).approve(pending_id, current_user["id"])


@router.post("/pending-members/{pending_id}/reject", response_model=PendingMemberOut)
def reject_pending_member(
    pending_id: int,
    payload: RejectRequest,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    current_user: dict = Depends(manager_only),
):
    return SelfRegistrationService(db, clock).reject(pending_id, current_user["id"], payload.review_note)
