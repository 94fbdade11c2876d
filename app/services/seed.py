import datetime as dt
import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.security import hash_password
from app.models.clinic import Clinic
from app.models.slot import Slot
from app.models.user import RoleEnum, User

logger = logging.getLogger(__name__)

SAMPLE_HOSPITAL_EMAIL = "hospital@medcair.com"
SAMPLE_TIMES = ("09:00", "10:00", "11:00", "14:00", "15:00", "16:00")
SAMPLE_DOCTORS = ("Dr. Smith", "Dr. Johnson", "Dr. Williams")
SAMPLE_CLINICS = (
    {
        "name": "City General Hospital - Main Branch",
        "address": "123 Medical Plaza",
        "zip_code": "10001",
        "latitude": 40.7128,
        "longitude": -74.0060,
        "phone": "555-0101",
        "email": "main@cityhospital.com",
        "specialties": "General Medicine, Cardiology, Pediatrics",
        "diseases_handled": "Diabetes, Hypertension, Heart Disease, Asthma, Flu, COVID-19",
        "operating_hours": "Mon-Fri: 9AM-5PM, Sat: 9AM-1PM",
    },
    {
        "name": "City General Hospital - Downtown Clinic",
        "address": "456 Health Avenue",
        "zip_code": "10002",
        "latitude": 40.7589,
        "longitude": -73.9851,
        "phone": "555-0102",
        "email": "downtown@cityhospital.com",
        "specialties": "Orthopedics, Dermatology, ENT",
        "diseases_handled": "Arthritis, Skin Disorders, Sinusitis, Migraine, Allergies",
        "operating_hours": "Mon-Fri: 8AM-6PM",
    },
    {
        "name": "City General Hospital - Emergency Care",
        "address": "789 Emergency Way",
        "zip_code": "10003",
        "latitude": 40.7282,
        "longitude": -73.9942,
        "phone": "555-0103",
        "email": "emergency@cityhospital.com",
        "specialties": "Emergency Medicine, Trauma Care",
        "diseases_handled": "Emergency Cases, Trauma, Acute Illness, Injuries",
        "operating_hours": "24/7",
    },
)


async def seed_sample_data(db: AsyncSession, today: dt.date | None = None, days: int = 7) -> bool:
    """Create a demo hospital with three New York clinics and a week of slots.

    Does nothing when any clinic already exists. Returns True when data was created.
    """
    if (await db.execute(select(Clinic.id).limit(1))).scalar_one_or_none():
        return False

    hospital = (await db.execute(select(User).where(User.email == SAMPLE_HOSPITAL_EMAIL))).scalar_one_or_none()
    if hospital is None:
        hospital = User(
            email=SAMPLE_HOSPITAL_EMAIL,
            name="City General Hospital",
            role=RoleEnum.hospital,
            phone="555-0100",
            hashed_password=hash_password("hospital123"),
        )
        db.add(hospital)
        await db.flush()

    start = today or dt.date.today()
    for data in SAMPLE_CLINICS:
        clinic = Clinic(hospital_id=hospital.id, city="New York", state="NY", **data)
        db.add(clinic)
        await db.flush()
        for day in range(days):
            for doctor in SAMPLE_DOCTORS:
                for time in SAMPLE_TIMES:
                    db.add(Slot(
                        clinic_id=clinic.id,
                        date=start + dt.timedelta(days=day),
                        time=time,
                        doctor_name=doctor,
                        is_available=True,
                    ))

    await db.commit()
    logger.info("Sample data initialized: %d clinics", len(SAMPLE_CLINICS))
    return True
