import logging

from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import Settings
from app.core.db import get_db
from app.core.errors import AccessDenied, AuthenticationError
from app.core.security import decode_access_token
from app.models.user import User, RoleEnum

logger = logging.getLogger(__name__)

# auto_error=False: missing credentials are reported by us (401), and booking accepts anonymous calls
bearer = HTTPBearer(auto_error=False)


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


async def _user_from_token(token: str, db: AsyncSession, settings: Settings) -> User:
    payload = decode_access_token(token, settings)
    res = await db.execute(select(User).where(User.id == payload["sub"]))
    user = res.scalar_one_or_none()
    if not user:
        raise AuthenticationError("User not found")
    return user


async def get_current_user(
    creds: HTTPAuthorizationCredentials | None = Depends(bearer),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> User:
    if creds is None:
        raise AuthenticationError("Access token required")
    return await _user_from_token(creds.credentials, db, settings)


async def get_optional_user(
    creds: HTTPAuthorizationCredentials | None = Depends(bearer),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> User | None:
    """Like get_current_user, but an absent or bad token means anonymous."""
    if creds is None:
        return None
    try:
        return await _user_from_token(creds.credentials, db, settings)
    except AuthenticationError as e:
        logger.info("Ignoring bearer token on anonymous-capable endpoint: %s", e.message)
        return None


# --- Role-based dependency ---
def require_roles(*roles: RoleEnum):
    async def _guard(user: User = Depends(get_current_user)) -> User:
        if user.role not in roles:
            raise AccessDenied()
        return user
    return _guard
