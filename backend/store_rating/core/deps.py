"""Dependency injection: bearer-token principal and role enforcement."""

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError

from store_rating.core.security import decode_access_token
from store_rating.models.user import UserRole
from store_rating.schemas.auth import Principal

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login")


async def get_current_user(token: str = Depends(oauth2_scheme)) -> Principal:
    """Decode JWT and return the Principal. Raises 401 on invalid/expired token."""
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    try:
        payload = decode_access_token(token)
        user_id = payload.get("sub")
        if user_id is None:
            raise credentials_exception
        return Principal(id=int(user_id), role=UserRole(payload["role"]))
    except (JWTError, KeyError, ValueError):
        raise credentials_exception


def require_role(*allowed_roles: UserRole):
    """Dependency factory: checks the principal has one of the allowed roles."""

    async def checker(user: Principal = Depends(get_current_user)) -> Principal:
        if user.role not in allowed_roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Role '{user.role.value}' not allowed. Required: "
                + ", ".join(r.value for r in allowed_roles),
            )
        return user

    return checker


require_admin = require_role(UserRole.SYSTEM_ADMIN)
require_normal_user = require_role(UserRole.NORMAL_USER)
require_store_owner = require_role(UserRole.STORE_OWNER)
