import logging

from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.errors import AccessDenied, Conflict, NotFound, ValidationError
from app.models.appointment import Appointment, ApptStatus
from app.models.slot import Slot
from app.models.user import RoleEnum, User

logger = logging.getLogger(__name__)

VALID_STATUSES = {s.value for s in ApptStatus}


async def get_appointment_or_404(db: AsyncSession, id: str) -> Appointment:
    q = (
        select(Appointment)
        .options(selectinload(Appointment.clinic))
        .where(Appointment.id == id)
        .execution_options(populate_existing=True)
    )
    ap = (await db.execute(q)).scalar_one_or_none()
    if not ap:
        raise NotFound("Appointment not found")
    return ap


def can_modify(user: User, ap: Appointment) -> bool:
    # hospital owning the clinic, or the patient who booked it
    if user.role == RoleEnum.hospital:
        return ap.clinic is not None and ap.clinic.hospital_id == user.id
    if user.role == RoleEnum.patient:
        return ap.patient_id is not None and ap.patient_id == user.id
    return False


async def get_modifiable_appointment(db: AsyncSession, id: str, user: User) -> Appointment:
    ap = await get_appointment_or_404(db, id)
    if not can_modify(user, ap):
        logger.warning("User %s denied access to appointment %s", user.id, id)
        raise AccessDenied()
    return ap


async def _set_slot_available(db: AsyncSession, slot_id: str, available: bool) -> None:
    await db.execute(update(Slot).where(Slot.id == slot_id).values(is_available=available))


async def _release_slot(db: AsyncSession, slot_id: str) -> None:
    """Flag the slot free again unless a scheduled appointment still holds it."""
    held = select(Appointment.id).where(
        Appointment.slot_id == slot_id,
        Appointment.status == ApptStatus.scheduled,
    ).exists()
    await db.execute(
        update(Slot)
        .where(Slot.id == slot_id, ~held)
        .values(is_available=True)
        .execution_options(synchronize_session="fetch")
    )


async def set_appointment_status(db: AsyncSession, id: str, status: str | None, user: User) -> Appointment:
    """Change the status of an appointment.

    Any status may move to any other. The slot side is kept consistent:
    leaving ``scheduled`` frees the uniqueness key, ``cancelled`` also gives
    the slot back when no other scheduled appointment holds it, and returning
    to ``scheduled`` claims the slot again (failing with Conflict if someone
    else holds it).
    """
    if status not in VALID_STATUSES:
        raise ValidationError(f"Invalid status. Must be one of: {', '.join(sorted(VALID_STATUSES))}")

    ap = await get_modifiable_appointment(db, id, user)
    new_status = ApptStatus(status)
    old_status = ap.status

    ap.status = new_status
    try:
        # the UPDATE autoflushes the appointment first, so a taken slot fails here
        if ap.slot_id:
            if new_status == ApptStatus.scheduled:
                ap.active_slot_id = ap.slot_id
                await _set_slot_available(db, ap.slot_id, False)
            else:
                ap.active_slot_id = None
                if new_status == ApptStatus.cancelled:
                    await _release_slot(db, ap.slot_id)
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise Conflict("Slot already booked")

    logger.info("Appointment %s: %s -> %s by %s", id, old_status.value, new_status.value, user.id)
    return ap


async def delete_appointment(db: AsyncSession, id: str, user: User) -> None:
    """Delete an appointment, then give its slot back if nobody else holds it.

    The slot release runs after the delete is committed and is best-effort:
    if it fails the appointment stays deleted and the failure is logged.
    """
    ap = await get_modifiable_appointment(db, id, user)
    slot_id = ap.slot_id

    await db.execute(delete(Appointment).where(Appointment.id == id))
    await db.commit()
    logger.info("Appointment %s deleted by %s", id, user.id)

    if not slot_id:
        return
    try:
        await _release_slot(db, slot_id)
        await db.commit()
    except Exception:
        await db.rollback()
        logger.exception("Slot %s needs reconciliation: appointment %s deleted but slot not released", slot_id, id)
