import datetime as dt
import logging

from sqlalchemy import Select, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import ValidationError
from app.models.appointment import Appointment
from app.models.clinic import Clinic
from app.models.followup import Followup
from app.models.user import RoleEnum, User
from app.schemas.followup import FollowupCreate
from app.services.cancellation import get_modifiable_appointment

logger = logging.getLogger(__name__)

FOLLOWUP_OFFSET_DAYS = 30
FOLLOWUP_REASON = "Follow-up appointment"
DEFAULT_DOCTOR = "Dr. Smith"


def followup_slot_for(appointment_date: dt.date, appointment_time: str,
                      offset_days: int = FOLLOWUP_OFFSET_DAYS) -> tuple[dt.date, str]:
    """Date and time of the follow-up: same time, ``offset_days`` calendar days later."""
    hour, minute = (int(p) for p in appointment_time.split(":")[:2])
    start = dt.datetime.combine(appointment_date, dt.time(hour, minute))
    followup_at = start + dt.timedelta(days=offset_days)
    return followup_at.date(), appointment_time


async def schedule_followup(db: AsyncSession, appointment_id: str, user: User,
                            offset_days: int = FOLLOWUP_OFFSET_DAYS) -> Followup:
    # same rule as status changes: owning hospital or the booking patient
    ap = await get_modifiable_appointment(db, appointment_id, user)

    followup_date, followup_time = followup_slot_for(ap.appointment_date, ap.appointment_time, offset_days)
    fu = Followup(
        appointment_id=ap.id,
        created_by=user.id,
        patient_name=ap.patient_name,
        patient_phone=ap.patient_phone,
        followup_date=followup_date,
        followup_time=followup_time,
        reason=FOLLOWUP_REASON,
        doctor_name=ap.doctor_name or DEFAULT_DOCTOR,
    )
    db.add(fu)
    await db.commit()
    await db.refresh(fu)
    logger.info("Follow-up %s scheduled for appointment %s on %s %s", fu.id, ap.id, followup_date, followup_time)
    return fu


async def create_followup(db: AsyncSession, payload: FollowupCreate, user: User) -> Followup:
    missing = [f for f in ("patient_name", "patient_phone", "followup_date", "followup_time")
               if not getattr(payload, f)]
    if missing:
        raise ValidationError(f"Missing required fields: {', '.join(missing)}")

    if payload.appointment_id:
        await get_modifiable_appointment(db, payload.appointment_id, user)

    fu = Followup(
        appointment_id=payload.appointment_id or None,
        created_by=user.id,
        patient_name=payload.patient_name,
        patient_phone=payload.patient_phone,
        followup_date=payload.followup_date,
        followup_time=payload.followup_time,
        reason=payload.reason or "",
        doctor_name=payload.doctor_name or DEFAULT_DOCTOR,
    )
    db.add(fu)
    await db.commit()
    await db.refresh(fu)
    logger.info("Follow-up %s created by %s", fu.id, user.id)
    return fu


def followups_query(user: User) -> Select:
    """Hospitals see follow-ups of their clinics' appointments plus the ones they created;
    patients see follow-ups of their own appointments."""
    q = select(Followup).outerjoin(Appointment, Appointment.id == Followup.appointment_id)
    if user.role == RoleEnum.hospital:
        own_clinics = select(Clinic.id).where(Clinic.hospital_id == user.id)
        return q.where(or_(Appointment.clinic_id.in_(own_clinics), Followup.created_by == user.id))
    return q.where(Appointment.patient_id == user.id)


async def list_followups(db: AsyncSession, user: User) -> list[Followup]:
    q = followups_query(user).order_by(Followup.followup_date.asc(), Followup.followup_time.asc())
    return list((await db.execute(q)).scalars().all())
