import datetime as dt

from fastapi import APIRouter, Depends
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.db import get_db
from app.api.deps import get_current_user
from app.api.v1.appointment import scoped_appointments
from app.models.user import User
from app.models.appointment import Appointment, ApptStatus
from app.schemas.appointment import StatsOut
from app.services.followups import followups_query

router = APIRouter(prefix="/stats", tags=["stats"])

async def _count(db: AsyncSession, q) -> int:
    return (await db.execute(select(func.count()).select_from(q.subquery()))).scalar_one()

@router.get("", response_model=StatsOut)
async def get_stats(current: User = Depends(get_current_user), db: AsyncSession = Depends(get_db)):
    base = scoped_appointments(current)
    return StatsOut(
        total=await _count(db, base),
        today=await _count(db, base.where(Appointment.appointment_date == dt.date.today())),
        pending=await _count(db, base.where(Appointment.status == ApptStatus.scheduled)),
        followups=await _count(db, followups_query(current)),
    )
