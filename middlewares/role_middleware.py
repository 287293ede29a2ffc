from typing import Any, Dict

from fastapi import Depends, HTTPException, status

from middlewares.auth_middleware import auth_middleware

MANAGER_ROLE = "FELLOWSHIP_MANAGER"


def require_roles(*roles: str):
    """Dependency factory: the caller must hold at least one of `roles`."""

    def dependency(user: Dict[str, Any] = Depends(auth_middleware)) -> Dict[str, Any]:
        if roles and not set(roles) & set(user.get("roles", [])):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Fellowship manager access required",
            )
        return user

    return dependency


manager_only = require_roles(MANAGER_ROLE)
