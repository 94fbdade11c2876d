from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.db import get_db
from app.api.deps import require_roles
from app.api.v1.appointment import scoped_appointments
from app.models.user import RoleEnum, User
from app.models.appointment import Appointment
from app.models.clinic import Clinic
from app.schemas.appointment import AppointmentOut
from app.schemas.clinic import ClinicOut
from app.services.geo import clinic_view

router = APIRouter(prefix="/hospital", tags=["hospital"])

@router.get("/clinics", response_model=list[ClinicOut])
async def my_clinics(
    current: User = Depends(require_roles(RoleEnum.hospital)),
    db: AsyncSession = Depends(get_db),
):
    q = (
        select(Clinic)
        .options(selectinload(Clinic.hospital))
        .where(Clinic.hospital_id == current.id)
        .order_by(Clinic.name.asc())
    )
    return [clinic_view(c) for c in (await db.execute(q)).scalars().all()]

@router.get("/appointments", response_model=list[AppointmentOut])
async def my_clinic_appointments(
    current: User = Depends(require_roles(RoleEnum.hospital)),
    db: AsyncSession = Depends(get_db),
):
    q = scoped_appointments(current).order_by(Appointment.appointment_date, Appointment.appointment_time)
    res = await db.execute(q)
    return [AppointmentOut.from_model(a) for a in res.scalars().all()]
