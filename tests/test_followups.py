import datetime as dt

import pytest

from app.core.errors import AccessDenied, NotFound, ValidationError
from app.models.appointment import Appointment
from app.schemas.followup import FollowupCreate
from app.services.followups import create_followup, followup_slot_for, list_followups, schedule_followup

from conftest import SLOT_DAY


def test_followup_is_thirty_days_later_same_time():
    assert followup_slot_for(dt.date(2024, 1, 1), "09:00") == (dt.date(2024, 1, 31), "09:00")


def test_followup_crosses_month_and_leap_day():
    assert followup_slot_for(dt.date(2024, 2, 15), "14:30") == (dt.date(2024, 3, 16), "14:30")


def test_followup_custom_offset():
    assert followup_slot_for(dt.date(2024, 12, 25), "16:00", offset_days=7) == (dt.date(2025, 1, 1), "16:00")


async def _appointment(session, clinic, patient=None, doctor_name=None) -> Appointment:
    ap = Appointment(
        clinic_id=clinic.id,
        patient_id=patient.id if patient else None,
        patient_name="Bob Patient",
        patient_phone="555-0200",
        appointment_date=SLOT_DAY,
        appointment_time="09:00",
        doctor_name=doctor_name,
    )
    session.add(ap)
    await session.commit()
    return ap


async def test_schedule_followup_copies_patient_and_time(session, clinic, hospital):
    ap = await _appointment(session, clinic, doctor_name="Dr. Johnson")
    fu = await schedule_followup(session, ap.id, hospital)
    assert fu.appointment_id == ap.id
    assert fu.followup_date == SLOT_DAY + dt.timedelta(days=30)
    assert fu.followup_time == "09:00"
    assert fu.patient_name == "Bob Patient"
    assert fu.reason == "Follow-up appointment"
    assert fu.doctor_name == "Dr. Johnson"
    assert fu.status == "scheduled"


async def test_schedule_followup_defaults_doctor(session, clinic, hospital):
    ap = await _appointment(session, clinic)
    fu = await schedule_followup(session, ap.id, hospital)
    assert fu.doctor_name == "Dr. Smith"


async def test_schedule_followup_twice_is_allowed(session, clinic, hospital):
    ap = await _appointment(session, clinic)
    first = await schedule_followup(session, ap.id, hospital)
    second = await schedule_followup(session, ap.id, hospital)
    assert first.id != second.id


async def test_schedule_followup_unknown_appointment(session, hospital):
    with pytest.raises(NotFound):
        await schedule_followup(session, "missing", hospital)


async def test_create_followup_requires_fields(session, hospital):
    with pytest.raises(ValidationError) as exc:
        await create_followup(session, FollowupCreate(patient_name="Bob"), hospital)
    assert "patient_phone" in exc.value.message
    assert "followup_date" in exc.value.message


async def test_create_followup_standalone_defaults(session, hospital):
    payload = FollowupCreate(
        patient_name="Dana", patient_phone="555-0400", followup_date=dt.date(2030, 5, 1), followup_time="11:00",
    )
    fu = await create_followup(session, payload, hospital)
    assert fu.appointment_id is None
    assert fu.reason == ""
    assert fu.doctor_name == "Dr. Smith"
    assert fu.created_by == hospital.id


async def test_list_followups_is_scoped(session, clinic, hospital, other_hospital, patient, other_patient):
    own = await _appointment(session, clinic, patient=patient)
    await schedule_followup(session, own.id, hospital)
    standalone = FollowupCreate(
        patient_name="Dana", patient_phone="555-0400", followup_date=dt.date(2030, 1, 1), followup_time="08:00",
    )
    await create_followup(session, standalone, hospital)

    hospital_view = await list_followups(session, hospital)
    assert [f.followup_date for f in hospital_view] == [dt.date(2030, 1, 1), SLOT_DAY + dt.timedelta(days=30)]

    assert len(await list_followups(session, patient)) == 1
    assert await list_followups(session, other_patient) == []
    assert await list_followups(session, other_hospital) == []


async def test_schedule_followup_requires_access_to_appointment(session, clinic, patient, other_hospital,
                                                                other_patient):
    ap = await _appointment(session, clinic, patient=patient)
    with pytest.raises(AccessDenied):
        await schedule_followup(session, ap.id, other_hospital)
    with pytest.raises(AccessDenied):
        await schedule_followup(session, ap.id, other_patient)

    fu = await schedule_followup(session, ap.id, patient)
    assert fu.created_by == patient.id
    assert await list_followups(session, other_hospital) == []


async def test_create_followup_for_foreign_appointment(session, clinic, other_hospital):
    ap = await _appointment(session, clinic)
    payload = FollowupCreate(
        appointment_id=ap.id, patient_name="Bob Patient", patient_phone="555-0200",
        followup_date=dt.date(2030, 5, 1), followup_time="11:00",
    )
    with pytest.raises(AccessDenied):
        await create_followup(session, payload, other_hospital)


async def test_create_followup_for_unknown_appointment(session, hospital):
    payload = FollowupCreate(
        appointment_id="missing", patient_name="Dana", patient_phone="555-0400",
        followup_date=dt.date(2030, 5, 1), followup_time="11:00",
    )
    with pytest.raises(NotFound):
        await create_followup(session, payload, hospital)
