import math
from collections.abc import Iterable

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.models.clinic import Clinic

EARTH_RADIUS_KM = 6371.0


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance in km between two (lat, lon) points given in degrees."""
    d_lat = math.radians(lat2 - lat1)
    d_lon = math.radians(lon2 - lon1)
    a = (math.sin(d_lat / 2) ** 2
         + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lon / 2) ** 2)
    return 2 * EARTH_RADIUS_KM * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def _distance_key(clinic: dict) -> float:
    d = clinic.get("distance")
    return math.inf if d is None else d


def rank_by_distance(
    clinics: Iterable[dict],
    latitude: float,
    longitude: float,
    max_distance: float | None = None,
) -> list[dict]:
    """Attach ``distance`` (km, 2 decimals) and sort nearest first.

    Clinics without coordinates get no ``distance`` key and sort last; with
    ``max_distance`` they are dropped, like anything farther than it.
    """
    ranked = []
    for clinic in clinics:
        lat, lon = clinic.get("latitude"), clinic.get("longitude")
        if lat is not None and lon is not None:
            clinic = {**clinic, "distance": round(haversine_km(latitude, longitude, lat, lon), 2)}
        ranked.append(clinic)

    ranked.sort(key=_distance_key)
    if max_distance is not None:
        ranked = [c for c in ranked if _distance_key(c) <= max_distance]
    return ranked


def clinic_filters(disease: str | None = None, city: str | None = None, search: str | None = None,
                   search_fields=("name", "address", "specialties")) -> list:
    """WHERE clauses for the clinic finders: ILIKE on disease/search, exact city."""
    clauses = []
    if disease and disease.strip():
        clauses.append(Clinic.diseases_handled.ilike(f"%{disease.strip()}%"))
    if city and city.strip():
        clauses.append(Clinic.city == city.strip())
    if search and search.strip():
        term = f"%{search.strip()}%"
        clauses.append(or_(*(getattr(Clinic, f).ilike(term) for f in search_fields)))
    return clauses


def clinic_view(clinic: Clinic) -> dict:
    return {
        "id": clinic.id,
        "hospital_id": clinic.hospital_id,
        "hospital_name": clinic.hospital.name if clinic.hospital else None,
        "name": clinic.name,
        "address": clinic.address,
        "city": clinic.city,
        "state": clinic.state,
        "zip_code": clinic.zip_code,
        "latitude": clinic.latitude,
        "longitude": clinic.longitude,
        "phone": clinic.phone,
        "email": clinic.email,
        "specialties": clinic.specialties,
        "diseases_handled": clinic.diseases_handled,
        "operating_hours": clinic.operating_hours,
    }


async def search_clinics(
    db: AsyncSession,
    disease: str | None = None,
    city: str | None = None,
    search: str | None = None,
    latitude: float | None = None,
    longitude: float | None = None,
    max_distance: float | None = None,
) -> list[dict]:
    q = select(Clinic).options(selectinload(Clinic.hospital)).where(*clinic_filters(disease, city, search))
    clinics = [clinic_view(c) for c in (await db.execute(q.order_by(Clinic.name))).scalars().all()]

    if latitude is not None and longitude is not None:
        clinics = rank_by_distance(clinics, latitude, longitude, max_distance)
    return clinics
