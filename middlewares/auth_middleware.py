from typing import Optional

from fastapi import HTTPException, Depends, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
import jwt
from sqlalchemy.orm import Session

from config.database import get_db
from helpers.token_helper import decode_access_token
from api.members.members_model import Member

security          = HTTPBearer()
optional_security = HTTPBearer(auto_error=False)


def _resolve_member(token: str, db: Session) -> dict:
    try:
        decoded = decode_access_token(token)
    except jwt.ExpiredSignatureError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token has expired",
            headers={"WWW-Authenticate": "Bearer"},
        )
    except jwt.InvalidTokenError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    member_id = decoded.get("id")
    if not member_id:
        # token was structurally OK but payload missing
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token payload",
            headers={"WWW-Authenticate": "Bearer"},
        )

    member = db.query(Member).filter(Member.id == member_id).first()
    if not member or member.is_deleted:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Member not found"
        )

    return {
        "id": member.id,
        "name": member.full_name,
        "fellowship_number": member.fellowship_number,
        "roles": [member.role.value],
        "is_manager": member.is_manager,
    }


def auth_middleware(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: Session = Depends(get_db)
):
    return _resolve_member(credentials.credentials, db)


def optional_auth(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(optional_security),
    db: Session = Depends(get_db)
) -> Optional[dict]:
    """Like auth_middleware, but anonymous requests resolve to None."""
    if credentials is None:
        return None
    return _resolve_member(credentials.credentials, db)
