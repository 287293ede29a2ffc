# api/auth/auth_service.py

import logging
import math
from datetime import timedelta

from passlib.context import CryptContext
from fastapi import HTTPException, status
from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from config.settings import settings
from utils.time_utils import Clock, system_clock, as_utc
from helpers.token_helper import create_member_token
from api.members.members_model import Member

logger = logging.getLogger(__name__)

# Initialize password hashing context (bcrypt)
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def hash_password(password: str) -> str:
    """Hash the given password using bcrypt."""
    return pwd_context.hash(password)


def verify_password(plain: str, hashed: str) -> bool:
    """Verify that the plain password matches the hashed password."""
    return pwd_context.verify(plain, hashed)


class AuthService:
    def __init__(self, db: Session, clock: Clock = system_clock):
        self.db = db
        self.clock = clock

    def _find(self, identifier: str) -> Member:
        ident = identifier.strip()
        return (
            self.db.query(Member)
            .filter(
                Member.is_deleted.is_(False),
                or_(
                    func.lower(Member.email) == ident.lower(),
                    Member.fellowship_number == ident.upper(),
                ),
            )
            .first()
        )

    def authenticate(self, identifier: str, password: str) -> Member:
        """
        Login by email or fellowship number. Repeated failures lock the
        account for LOCKOUT_MINUTES.
        """
        member = self._find(identifier)
        if not member:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail={"code": "INVALID_CREDENTIALS", "message": "Invalid credentials"},
            )

        now = self.clock.now()
        locked_until = as_utc(member.locked_until)
        if locked_until and now < locked_until:
            minutes = math.ceil((locked_until - now).total_seconds() / 60)
            raise HTTPException(
                status_code=status.HTTP_423_LOCKED,
                detail={"code": "ACCOUNT_LOCKED", "message": f"Account locked. Try again in {minutes} minute(s)"},
            )

        if not verify_password(password, member.password):
            member.failed_login_attempts = (member.failed_login_attempts or 0) + 1
            if member.failed_login_attempts >= settings.MAX_FAILED_LOGINS:
                member.locked_until = now + timedelta(minutes=settings.LOCKOUT_MINUTES)
                member.failed_login_attempts = 0
                logger.warning(f"Account {member.fellowship_number} locked after repeated failures")
            self.db.commit()
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail={"code": "INVALID_CREDENTIALS", "message": "Invalid credentials"},
            )

        if member.failed_login_attempts or member.locked_until:
            member.failed_login_attempts = 0
            member.locked_until = None
            self.db.commit()
        return member

    def login(self, identifier: str, password: str) -> dict:
        member = self.authenticate(identifier, password)
        return {
            "access_token": create_member_token(member),
            "token_type": "bearer",
            "member": member,
        }
