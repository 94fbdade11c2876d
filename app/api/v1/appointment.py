import datetime as dt

from fastapi import APIRouter, Depends
from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.db import get_db
from app.api.deps import get_current_user, get_optional_user, get_settings
from app.core.config import Settings
from app.models.user import User, RoleEnum
from app.models.appointment import Appointment
from app.models.clinic import Clinic
from app.schemas.appointment import AppointmentCreate, AppointmentOut, StatusUpdate
from app.schemas.common import CreatedOut, MessageOut
from app.services.booking import book_appointment
from app.services.cancellation import delete_appointment, set_appointment_status
from app.services.followups import schedule_followup


router = APIRouter(prefix="/appointments", tags=["appointments"])

# ---------- helpers ----------
def scoped_appointments(user: User) -> Select:
    """Appointments visible to the user: own bookings for patients, own clinics for hospitals."""
    q = select(Appointment).options(selectinload(Appointment.clinic))
    if user.role == RoleEnum.patient:
        return q.where(Appointment.patient_id == user.id)
    own_clinics = select(Clinic.id).where(Clinic.hospital_id == user.id)
    return q.where(Appointment.clinic_id.in_(own_clinics))

# ---------- create ----------
@router.post("", response_model=CreatedOut, status_code=201)
async def create_appointment(
    payload: AppointmentCreate,
    current: User | None = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db),
):
    # anonymous booking is allowed (walk-ins); a patient token fills in the identity
    ap = await book_appointment(db, payload, current)
    return CreatedOut(id=ap.id, message="Appointment booked successfully")

# ---------- list ----------
@router.get("", response_model=list[AppointmentOut])
async def list_appointments(current: User = Depends(get_current_user), db: AsyncSession = Depends(get_db)):
    q = scoped_appointments(current).order_by(Appointment.appointment_date, Appointment.appointment_time)
    res = await db.execute(q)
    return [AppointmentOut.from_model(a) for a in res.scalars().all()]

@router.get("/today", response_model=list[AppointmentOut])
async def list_today(current: User = Depends(get_current_user), db: AsyncSession = Depends(get_db)):
    q = (
        scoped_appointments(current)
        .where(Appointment.appointment_date == dt.date.today())
        .order_by(Appointment.appointment_time)
    )
    res = await db.execute(q)
    return [AppointmentOut.from_model(a) for a in res.scalars().all()]

# ---------- update ----------
@router.patch("/{id}", response_model=MessageOut)
async def update_status(
    id: str,
    patch: StatusUpdate,
    current: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await set_appointment_status(db, id, patch.status, current)
    return MessageOut(message="Appointment updated successfully")

# ---------- delete ----------
@router.delete("/{id}", response_model=MessageOut)
async def remove_appointment(id: str, current: User = Depends(get_current_user), db: AsyncSession = Depends(get_db)):
    await delete_appointment(db, id, current)
    return MessageOut(message="Appointment deleted successfully")

# ---------- follow-up ----------
@router.post("/{id}/followup", response_model=CreatedOut, status_code=201)
async def create_followup_for_appointment(
    id: str,
    current: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    fu = await schedule_followup(db, id, current, offset_days=settings.FOLLOWUP_OFFSET_DAYS)
    return CreatedOut(id=fu.id, message="Follow-up scheduled successfully")
