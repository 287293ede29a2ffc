# api/auth/auth_schema.py

from pydantic import Field

from utils.schema_base import CamelModel
from api.members.members_schema import MemberOut


class LoginRequest(CamelModel):
    identifier: str = Field(..., min_length=1, description="Email or fellowship number")
    password: str = Field(..., min_length=1)


class TokenResponse(CamelModel):
    access_token: str
    token_type: str = "bearer"
    member: MemberOut


class ChangePasswordRequest(CamelModel):
    current_password: str
    new_password: str = Field(..., min_length=8)
