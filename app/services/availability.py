"""Free/booked view of a clinic's slots.

A slot is reported available only when its stored ``is_available`` flag is
true *and* no scheduled appointment points at it. The stored flag stays the
authority: a slot flagged false is never turned back into a free one here,
even when no appointment references it any more.
"""
from __future__ import annotations

import datetime as dt
from collections.abc import Iterable, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.appointment import Appointment, ApptStatus
from app.models.slot import Slot

DEFAULT_WINDOW_DAYS = 7


def slot_to_dict(slot: Slot) -> dict:
    return {
        "id": slot.id,
        "clinic_id": slot.clinic_id,
        "date": slot.date,
        "time": slot.time,
        "doctor_name": slot.doctor_name,
        "duration_minutes": slot.duration_minutes,
        "is_available": slot.is_available,
    }


def annotate_slots(slots: Sequence[Slot], bookings: Iterable[tuple[str | None, str]]) -> list[dict]:
    """Augment each slot with ``is_available`` and ``booked_by``.

    ``bookings`` are ``(slot_id, patient_name)`` pairs taken from scheduled
    appointments. Built in two passes (index, then per-slot lookup) so the
    cost is linear in slots + bookings.
    """
    booked_by: dict[str, str] = {}
    for slot_id, patient_name in bookings:
        if slot_id:
            booked_by[slot_id] = patient_name

    views = []
    for slot in slots:
        view = slot_to_dict(slot)
        view["is_available"] = bool(slot.is_available) and slot.id not in booked_by
        view["booked_by"] = booked_by.get(slot.id)
        views.append(view)
    return views


def group_by_date(views: Iterable[dict]) -> dict[str, list[dict]]:
    """Partition slot views by date, keeping the incoming (date, time) order."""
    grouped: dict[str, list[dict]] = {}
    for view in views:
        key = view["date"].isoformat() if isinstance(view["date"], dt.date) else str(view["date"])
        grouped.setdefault(key, []).append(view)
    return grouped


async def list_slot_views(
    db: AsyncSession,
    clinic_id: str,
    on_date: dt.date | None = None,
    today: dt.date | None = None,
    window_days: int = DEFAULT_WINDOW_DAYS,
) -> list[dict]:
    q = select(Slot).where(Slot.clinic_id == clinic_id)
    if on_date is not None:
        q = q.where(Slot.date == on_date)
    else:
        start = today or dt.date.today()
        q = q.where(Slot.date >= start, Slot.date <= start + dt.timedelta(days=window_days))
    q = q.order_by(Slot.date.asc(), Slot.time.asc())

    slots = (await db.execute(q)).scalars().all()
    if not slots:
        return []

    res = await db.execute(
        select(Appointment.slot_id, Appointment.patient_name).where(
            Appointment.slot_id.in_([s.id for s in slots]),
            Appointment.status == ApptStatus.scheduled,
        )
    )
    return annotate_slots(slots, res.all())


async def grouped_slot_views(
    db: AsyncSession,
    clinic_id: str,
    on_date: dt.date | None = None,
    today: dt.date | None = None,
    window_days: int = DEFAULT_WINDOW_DAYS,
) -> dict[str, list[dict]]:
    views = await list_slot_views(db, clinic_id, on_date=on_date, today=today, window_days=window_days)
    return group_by_date(views)
