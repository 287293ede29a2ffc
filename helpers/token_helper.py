import jwt
import datetime
from typing import Any, Dict

from config.settings import settings


def create_access_token(
    payload: Dict[str, Any],
    expires_hours: int = None,
) -> str:
    """
    Generate a JWT access token with the given payload and expiration.
    """
    hours = expires_hours or settings.ACCESS_TOKEN_EXPIRE_HOURS
    expire = datetime.datetime.now(datetime.timezone.utc) + datetime.timedelta(hours=hours)
    to_encode = payload.copy()
    to_encode.update({"exp": expire})

    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def create_member_token(member, expires_hours: int = None) -> str:
    """
    Generate a JWT for a Member, embedding:
      - id
      - fellowship number
      - role
      - exp (handled by create_access_token)
    """
    token_payload: Dict[str, Any] = {
        "id":                member.id,
        "fellowship_number": member.fellowship_number,
        "role":              member.role.value,
    }
    return create_access_token(token_payload, expires_hours)


def decode_access_token(token: str) -> Dict[str, Any]:
    return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
