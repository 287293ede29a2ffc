# api/auth/auth_routes.py

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from config.database import get_db
from middlewares.auth_middleware import auth_middleware
from utils.schema_base import Message
from utils.time_utils import Clock, get_clock
from utils.database_utils import get_member_or_404
from api.auth.auth_schema import LoginRequest, TokenResponse, ChangePasswordRequest
from api.auth.auth_service import AuthService, hash_password, verify_password
from api.members.members_schema import MemberOut

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/login", response_model=TokenResponse)
def login(
    credentials: LoginRequest,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    return AuthService(db, clock).login(credentials.identifier, credentials.password)


@router.get("/me", response_model=MemberOut)
def me(db: Session = Depends(get_db), current_user: dict = Depends(auth_middleware)):
    return get_member_or_404(db, current_user["id"])


@router.post("/change-password", response_model=Message)
def change_password(
    payload: ChangePasswordRequest,
    db: Session = Depends(get_db),
    current_user: dict = Depends(auth_middleware),
):
    member = get_member_or_404(db, current_user["id"])
    if not verify_password(payload.current_password, member.password):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Current password is incorrect")
    member.password = hash_password(payload.new_password)
    db.commit()
    return {"message": "Password updated"}
