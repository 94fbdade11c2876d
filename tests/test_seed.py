import datetime as dt

from sqlalchemy import func, select

from app.models.clinic import Clinic
from app.models.slot import Slot
from app.services.seed import SAMPLE_DOCTORS, SAMPLE_TIMES, seed_sample_data
from app.services.geo import search_clinics


async def _count(session, model) -> int:
    return (await session.execute(select(func.count()).select_from(model))).scalar_one()


async def test_seed_creates_clinics_and_a_week_of_slots(session):
    today = dt.date(2030, 6, 1)
    assert await seed_sample_data(session, today=today) is True

    assert await _count(session, Clinic) == 3
    assert await _count(session, Slot) == 3 * 7 * len(SAMPLE_DOCTORS) * len(SAMPLE_TIMES)
    last = (await session.execute(select(func.max(Slot.date)))).scalar_one()
    assert last == today + dt.timedelta(days=6)


async def test_seed_runs_once(session):
    assert await seed_sample_data(session, days=1) is True
    assert await seed_sample_data(session, days=1) is False
    assert await _count(session, Clinic) == 3


async def test_seeded_clinics_rank_from_times_square(session):
    await seed_sample_data(session, days=1)
    ranked = await search_clinics(session, latitude=40.7589, longitude=-73.9851, max_distance=5)
    assert [c["name"] for c in ranked] == [
        "City General Hospital - Downtown Clinic",
        "City General Hospital - Emergency Care",
    ]
    assert ranked[0]["hospital_name"] == "City General Hospital"
