from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.db import get_db
from app.api.deps import get_current_user
from app.models.user import User
from app.schemas.common import CreatedOut
from app.schemas.followup import FollowupCreate, FollowupOut
from app.services.followups import create_followup, list_followups

router = APIRouter(prefix="/followups", tags=["followups"])

@router.get("", response_model=list[FollowupOut])
async def get_followups(current: User = Depends(get_current_user), db: AsyncSession = Depends(get_db)):
    return await list_followups(db, current)

@router.post("", response_model=CreatedOut, status_code=201)
async def post_followup(
    payload: FollowupCreate,
    current: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    fu = await create_followup(db, payload, current)
    return CreatedOut(id=fu.id, message="Follow-up scheduled successfully")
