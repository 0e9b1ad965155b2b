"""FastAPI dependencies for authentication and authorization."""

from typing import Optional
from fastapi import Depends, Header, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.database import get_db
from app.models.user import User, ROLE_ADMIN, STAFF_ROLES
from app.services.auth import decode_access_token

optional_security = HTTPBearer(auto_error=False)


async def _load_user(db: AsyncSession, raw_id) -> Optional[User]:
    try:
        user_id = int(raw_id)
    except (TypeError, ValueError):
        return None
    result = await db.execute(select(User).where(User.id == user_id))
    return result.scalar_one_or_none()


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(optional_security),
    x_user_id: Optional[str] = Header(None),
    x_user_role: Optional[str] = Header(None),
    db: AsyncSession = Depends(get_db),
) -> User:
    """Resolve the caller from a bearer token.

    The x-user-id / x-user-role headers are only consulted when
    ALLOW_HEADER_IDENTITY is enabled, and the role header must agree
    with the stored account.
    """
    if credentials:
        payload = decode_access_token(credentials.credentials)
        if not payload or not payload.get("sub"):
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Could not validate credentials",
                headers={"WWW-Authenticate": "Bearer"},
            )
        user = await _load_user(db, payload["sub"])
        if not user:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="User not found",
            )
        return user

    if settings.ALLOW_HEADER_IDENTITY and x_user_id:
        user = await _load_user(db, x_user_id)
        if not user:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="User not found",
            )
        if x_user_role and x_user_role != user.role:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Role header does not match account",
            )
        return user

    raise HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Not authenticated",
        headers={"WWW-Authenticate": "Bearer"},
    )


def require_role(*roles: str):
    """Dependency factory that checks if user has one of the required roles.

    Usage:
        require_admin = require_role("admin")

        @router.get("/admin-only")
        async def admin_route(user: User = Depends(require_admin)):
            ...
    """
    async def role_checker(current_user: User = Depends(get_current_user)) -> User:
        if current_user.role not in roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Access denied. Required role: {', '.join(roles)}"
            )
        return current_user

    return role_checker


# Pre-configured role dependencies
require_admin = require_role(ROLE_ADMIN)
require_staff = require_role(*STAFF_ROLES)
