from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import jwt, JWTError
from passlib.context import CryptContext

from app.core.config import Settings
from app.core.errors import AuthenticationError
from app.models.user import User


pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

def hash_password(plain: str) -> str:
    return pwd_context.hash(plain)

def verify_password(plain: str, hashed: str) -> bool:
    return pwd_context.verify(plain, hashed)

def create_access_token(
        user: User,
        settings: Settings,
        expires_minutes: int | None = None
        ) -> str:
    now = datetime.now(tz=timezone.utc)
    to_encode = {
        "sub": user.id,
        "email": user.email,
        "role": user.role.value,
        "name": user.name,
        "iat": now,
        "exp": now + timedelta(minutes=expires_minutes or settings.ACCESS_TOKEN_EXPIRE_MINUTES),
    }
    return jwt.encode(to_encode, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)

def decode_access_token(token: str, settings: Settings) -> dict:
    """
    Decodes a bearer token and returns its claims.
    Raises AuthenticationError when the token is invalid, expired or has no subject.
    """
    try:
        payload = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
    except JWTError:
        raise AuthenticationError("Invalid or expired token")

    sub: Optional[str] = payload.get("sub")
    if not isinstance(sub, str) or not sub:
        raise AuthenticationError("Invalid token payload")
    return payload
