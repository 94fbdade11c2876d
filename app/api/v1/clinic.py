import datetime as dt
import logging

from fastapi import APIRouter, Depends, Query
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.api.deps import get_settings, require_roles
from app.core.config import Settings
from app.core.db import get_db
from app.core.errors import AccessDenied, Conflict, NotFound
from app.models.clinic import Clinic
from app.models.slot import Slot
from app.models.user import RoleEnum, User
from app.schemas.clinic import ClinicCreate, ClinicOut, ClinicSearchOut, ClinicSummary
from app.schemas.common import CreatedOut
from app.schemas.slot import SlotCreate, SlotView
from app.services.availability import grouped_slot_views, list_slot_views
from app.services.geo import clinic_filters, clinic_view, search_clinics

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/clinics", tags=["clinics"])


# ---------- helpers ----------
async def _get_clinic_or_404(id: str, db: AsyncSession) -> Clinic:
    q = select(Clinic).options(selectinload(Clinic.hospital)).where(Clinic.id == id)
    c = (await db.execute(q)).scalar_one_or_none()
    if not c:
        raise NotFound("Clinic not found")
    return c


# ---------- list ----------
@router.get("", response_model=list[ClinicSummary])
async def list_clinics(
    disease: str | None = Query(None),
    city: str | None = Query(None),
    search: str | None = Query(None),
    limit: int = Query(10, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
):
    # quick listing for the patient dashboard: name-only search, degrades to []
    q = select(Clinic).where(*clinic_filters(disease, city, search, search_fields=("name",)))
    try:
        rows = (await db.execute(q.order_by(Clinic.name).limit(limit))).scalars().all()
    except SQLAlchemyError:
        logger.exception("Clinic listing failed, returning empty list")
        return []
    return rows


@router.get("/search", response_model=list[ClinicSearchOut], response_model_exclude_unset=True)
async def search_nearby(
    disease: str | None = Query(None),
    city: str | None = Query(None),
    search: str | None = Query(None),
    latitude: float | None = Query(None, ge=-90, le=90),
    longitude: float | None = Query(None, ge=-180, le=180),
    max_distance: float | None = Query(None, alias="maxDistance", ge=0),
    db: AsyncSession = Depends(get_db),
):
    return await search_clinics(
        db,
        disease=disease,
        city=city,
        search=search,
        latitude=latitude,
        longitude=longitude,
        max_distance=max_distance,
    )


@router.get("/{id}", response_model=ClinicOut)
async def get_clinic(id: str, db: AsyncSession = Depends(get_db)):
    return clinic_view(await _get_clinic_or_404(id, db))


# ---------- slots ----------
@router.get("/{id}/slots", response_model=list[SlotView])
async def get_slots(
    id: str,
    date: dt.date | None = Query(None),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    return await list_slot_views(db, id, on_date=date, window_days=settings.SLOT_WINDOW_DAYS)


@router.get("/{id}/slots/grouped", response_model=dict[str, list[SlotView]])
async def get_slots_grouped(
    id: str,
    date: dt.date | None = Query(None),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    return await grouped_slot_views(db, id, on_date=date, window_days=settings.SLOT_WINDOW_DAYS)


# ---------- create ----------
@router.post("", response_model=CreatedOut, status_code=201)
async def create_clinic(
    payload: ClinicCreate,
    current: User = Depends(require_roles(RoleEnum.hospital)),
    db: AsyncSession = Depends(get_db),
):
    clinic = Clinic(hospital_id=current.id, **payload.model_dump())
    db.add(clinic)
    await db.commit()
    await db.refresh(clinic)
    logger.info("Clinic %s created by hospital %s", clinic.id, current.id)
    return CreatedOut(id=clinic.id, message="Clinic created successfully")


@router.post("/{id}/slots", response_model=CreatedOut, status_code=201)
async def create_slot(
    id: str,
    payload: SlotCreate,
    current: User = Depends(require_roles(RoleEnum.hospital)),
    db: AsyncSession = Depends(get_db),
):
    owner = (await db.execute(select(Clinic.hospital_id).where(Clinic.id == id))).scalar_one_or_none()
    if owner is None or owner != current.id:
        raise AccessDenied("Clinic not found or access denied")

    doctor_name = payload.doctor_name.strip() if payload.doctor_name and payload.doctor_name.strip() else None
    # NULL doctor_name never collides in a unique index, so check it here too
    dup = await db.execute(
        select(Slot.id).where(
            Slot.clinic_id == id,
            Slot.date == payload.date,
            Slot.time == payload.time,
            Slot.doctor_name.is_(None) if doctor_name is None else Slot.doctor_name == doctor_name,
        )
    )
    if dup.scalar_one_or_none():
        raise Conflict("Slot already exists")

    slot = Slot(
        clinic_id=id,
        date=payload.date,
        time=payload.time,
        doctor_name=doctor_name,
        duration_minutes=payload.duration_minutes,
        is_available=True,
    )
    db.add(slot)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise Conflict("Slot already exists")
    await db.refresh(slot)
    return CreatedOut(id=slot.id, message="Slot created successfully")
