"""Appointment booking.

Validation runs before any write. The appointment insert and the slot flag
update are committed together; the ``uq_appt_active_slot`` constraint is what
actually prevents two scheduled appointments on the same slot/date/time when
two requests race past the pre-check.
"""
import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import Conflict, InvalidSlot, NotFound, UpstreamUnavailable, ValidationError
from app.models.appointment import Appointment, ApptStatus
from app.models.clinic import Clinic
from app.models.slot import Slot
from app.models.user import RoleEnum, User
from app.schemas.appointment import AppointmentCreate

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("clinic_id", "appointment_date", "appointment_time", "patient_name", "patient_phone")


def _blank_to_none(v):
    if isinstance(v, str):
        v = v.strip()
        return v or None
    return v


def resolve_patient(payload: AppointmentCreate, user: User | None) -> dict:
    """Patient identity: the authenticated patient wins, the body fills the gaps."""
    name = _blank_to_none(payload.patient_name)
    phone = _blank_to_none(payload.patient_phone)
    email = _blank_to_none(payload.patient_email)
    if user is not None and user.role == RoleEnum.patient:
        return {
            "patient_id": user.id,
            "patient_name": user.name or name,
            "patient_phone": user.phone or phone,
            "patient_email": user.email or email,
        }
    # anonymous / walk-in, or a hospital booking on behalf of someone
    return {"patient_id": None, "patient_name": name, "patient_phone": phone, "patient_email": email}


async def slot_is_booked(db: AsyncSession, slot_id: str, appointment_date, appointment_time: str) -> bool:
    res = await db.execute(
        select(Appointment.id).where(
            Appointment.slot_id == slot_id,
            Appointment.appointment_date == appointment_date,
            Appointment.appointment_time == appointment_time,
            Appointment.status == ApptStatus.scheduled,
        ).limit(1)
    )
    return res.scalar_one_or_none() is not None


async def book_appointment(db: AsyncSession, payload: AppointmentCreate, user: User | None = None) -> Appointment:
    patient = resolve_patient(payload, user)
    values = {
        "clinic_id": _blank_to_none(payload.clinic_id),
        "appointment_date": payload.appointment_date,
        "appointment_time": payload.appointment_time,
        **patient,
    }
    missing = [f for f in REQUIRED_FIELDS if not values.get(f)]
    if missing:
        raise ValidationError(f"Missing required fields: {', '.join(missing)}")

    clinic = (await db.execute(select(Clinic.id).where(Clinic.id == values["clinic_id"]))).scalar_one_or_none()
    if not clinic:
        raise NotFound("Clinic not found")

    slot_id = _blank_to_none(payload.slot_id)
    slot: Slot | None = None
    if slot_id:
        slot = (await db.execute(select(Slot).where(Slot.id == slot_id))).scalar_one_or_none()
        if slot is None or slot.clinic_id != values["clinic_id"]:
            raise InvalidSlot()
        # advisory only; the unique constraint settles races at commit
        if await slot_is_booked(db, slot_id, values["appointment_date"], values["appointment_time"]):
            logger.warning("Slot %s already booked for %s %s", slot_id,
                           values["appointment_date"], values["appointment_time"])
            raise Conflict("Slot already booked")

    ap = Appointment(
        **values,
        slot_id=slot_id,
        active_slot_id=slot_id,
        reason=payload.reason or "",
        disease=payload.disease or "",
        doctor_name=_blank_to_none(payload.doctor_name),
        status=ApptStatus.scheduled,
    )
    db.add(ap)
    if slot is not None:
        slot.is_available = False

    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        logger.warning("Concurrent booking rejected for slot %s", slot_id)
        raise Conflict("Slot already booked")
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error("Booking failed for clinic %s: %s", values["clinic_id"], e)
        raise UpstreamUnavailable(str(getattr(e, "orig", None) or e))

    await db.refresh(ap)
    logger.info("Appointment %s booked (clinic=%s slot=%s)", ap.id, ap.clinic_id, slot_id)
    return ap
