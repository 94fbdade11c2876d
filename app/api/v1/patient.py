import logging

from fastapi import APIRouter, Depends
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.db import get_db
from app.api.deps import require_roles
from app.api.v1.appointment import scoped_appointments
from app.models.user import RoleEnum, User
from app.models.appointment import Appointment
from app.schemas.appointment import AppointmentOut

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/patient", tags=["patients"])

@router.get("/appointments", response_model=list[AppointmentOut])
async def my_appointments(
    current: User = Depends(require_roles(RoleEnum.patient)),
    db: AsyncSession = Depends(get_db),
):
    q = (
        scoped_appointments(current)
        .order_by(Appointment.appointment_date, Appointment.appointment_time)
        .limit(50)
    )
    try:
        res = await db.execute(q)
    except SQLAlchemyError:
        # dashboard listing: degrade to an empty list instead of failing
        logger.exception("Appointment listing failed for patient %s", current.id)
        return []
    return [AppointmentOut.from_model(a) for a in res.scalars().all()]
