import os

# must be set before app.main builds its module-level app
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("JWT_SECRET", "test-secret")

import datetime as dt

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from app.core.config import Settings
from app.core.db import Database
from app.core.security import create_access_token, hash_password
from app.main import create_app
from app.models.clinic import Clinic
from app.models.slot import Slot
from app.models.user import RoleEnum, User

SLOT_DAY = dt.date(2030, 3, 4)


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        DATABASE_URL=f"sqlite+aiosqlite:///{tmp_path / 'medcair-test.db'}",
        JWT_SECRET="test-secret",
        SEED_SAMPLE_DATA=False,
        LOG_LEVEL="WARNING",
    )


@pytest_asyncio.fixture
async def database(settings):
    db = Database(settings.database)
    await db.create_all()
    yield db
    await db.dispose()


@pytest_asyncio.fixture
async def session(database):
    async with database.sessionmaker() as s:
        yield s


@pytest_asyncio.fixture
async def client(settings, database):
    app = create_app(settings, database)
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c


@pytest.fixture
def auth_headers(settings):
    def _headers(user: User) -> dict:
        return {"Authorization": f"Bearer {create_access_token(user, settings)}"}
    return _headers


async def _add_user(session, email: str, name: str, role: RoleEnum, phone: str | None = None) -> User:
    user = User(email=email, name=name, role=role, phone=phone, hashed_password=hash_password("secret123"))
    session.add(user)
    await session.commit()
    return user


@pytest_asyncio.fixture
async def hospital(session) -> User:
    return await _add_user(session, "hospital@medcair.com", "City General Hospital", RoleEnum.hospital, "555-0100")


@pytest_asyncio.fixture
async def other_hospital(session) -> User:
    return await _add_user(session, "riverside@medcair.com", "Riverside Medical", RoleEnum.hospital)


@pytest_asyncio.fixture
async def patient(session) -> User:
    return await _add_user(session, "bob@medcair.com", "Bob Patient", RoleEnum.patient, "555-0200")


@pytest_asyncio.fixture
async def other_patient(session) -> User:
    return await _add_user(session, "carol@medcair.com", "Carol Patient", RoleEnum.patient, "555-0300")


@pytest_asyncio.fixture
async def clinic(session, hospital) -> Clinic:
    c = Clinic(
        hospital_id=hospital.id,
        name="City General Hospital - Main Branch",
        address="123 Medical Plaza",
        city="New York",
        state="NY",
        latitude=40.7128,
        longitude=-74.0060,
        specialties="General Medicine, Cardiology",
        diseases_handled="Diabetes, Hypertension, Flu",
        operating_hours="Mon-Fri: 9AM-5PM",
    )
    session.add(c)
    await session.commit()
    return c


@pytest_asyncio.fixture
async def slots(session, clinic) -> list[Slot]:
    rows = [
        Slot(clinic_id=clinic.id, date=SLOT_DAY, time="09:00", doctor_name="Dr. Smith"),
        Slot(clinic_id=clinic.id, date=SLOT_DAY, time="10:00", doctor_name="Dr. Smith"),
        Slot(clinic_id=clinic.id, date=SLOT_DAY + dt.timedelta(days=1), time="09:00", doctor_name="Dr. Johnson"),
    ]
    session.add_all(rows)
    await session.commit()
    return rows


@pytest.fixture
def booking_body(clinic, slots):
    def _body(slot: Slot | None = None, **overrides) -> dict:
        slot = slot or slots[0]
        body = {
            "clinic_id": clinic.id,
            "slot_id": slot.id,
            "appointment_date": slot.date.isoformat(),
            "appointment_time": slot.time,
            "patient_name": "Walk In",
            "patient_phone": "555-0999",
            "reason": "Checkup",
            "disease": "Flu",
        }
        body.update(overrides)
        return body
    return _body
