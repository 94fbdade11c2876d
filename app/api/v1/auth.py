import logging

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import Settings
from app.core.db import get_db
from app.core.errors import AuthenticationError, Conflict
from app.core.security import hash_password, verify_password, create_access_token
from app.models.user import User, RoleEnum
from app.schemas.auth import RegisterIn, LoginIn, AuthOut, UserOut
from app.api.deps import get_current_user, get_settings

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])

def _auth_out(user: User, settings: Settings) -> AuthOut:
    return AuthOut(token=create_access_token(user, settings), user=UserOut.model_validate(user))

@router.post("/register", response_model=AuthOut, status_code=201)
async def register(
    payload: RegisterIn,
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    email = payload.email.lower().strip()
    exists = await db.execute(select(User.id).where(User.email == email))
    if exists.scalar_one_or_none():
        raise Conflict("Email already registered")

    user = User(
        email=email,
        name=payload.name.strip(),
        role=RoleEnum(payload.role.value),
        phone=payload.phone.strip() if payload.phone else None,
        hashed_password=hash_password(payload.password),
    )
    db.add(user)
    try:
        await db.commit()
    except IntegrityError:
        # lost the race against another registration with the same email
        await db.rollback()
        raise Conflict("Email already registered")
    await db.refresh(user)
    logger.info("Registered %s user %s", user.role.value, user.id)
    return _auth_out(user, settings)

@router.post("/login", response_model=AuthOut)
async def login(
    payload: LoginIn,
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    result = await db.execute(select(User).where(User.email == payload.email.lower().strip()))
    user = result.scalar_one_or_none()
    if not user or not verify_password(payload.password, user.hashed_password):
        raise AuthenticationError("Invalid email or password")
    return _auth_out(user, settings)

@router.get("/me", response_model=UserOut)
async def me(current_user: User = Depends(get_current_user)):
    return current_user
