import datetime as dt

from conftest import SLOT_DAY


async def _book(client, body, headers=None):
    resp = await client.post("/api/appointments", json=body, headers=headers or {})
    assert resp.status_code == 201, resp.text
    return resp.json()["id"]


async def test_patient_books_cancels_and_slot_is_free_again(client, clinic, slots):
    reg = await client.post("/api/auth/register", json={
        "email": "alice@medcair.com", "password": "alice123", "name": "Alice", "role": "patient",
        "phone": "555-0001",
    })
    headers = {"Authorization": f"Bearer {reg.json()['token']}"}

    found = (await client.get("/api/clinics/search", params={"city": "New York"})).json()
    clinic_id = found[0]["id"]

    day = SLOT_DAY.isoformat()
    free = [s for s in (await client.get(f"/api/clinics/{clinic_id}/slots", params={"date": day})).json()
            if s["is_available"]]
    slot = free[0]

    booked = await client.post("/api/appointments", headers=headers, json={
        "clinic_id": clinic_id,
        "slot_id": slot["id"],
        "appointment_date": slot["date"],
        "appointment_time": slot["time"],
        "reason": "Annual checkup",
    })
    assert booked.status_code == 201
    assert booked.json()["message"] == "Appointment booked successfully"
    appointment_id = booked.json()["id"]

    mine = (await client.get("/api/patient/appointments", headers=headers)).json()
    assert [(a["id"], a["status"], a["patient_name"]) for a in mine] == [(appointment_id, "scheduled", "Alice")]
    assert mine[0]["clinic_name"] == clinic.name

    after_booking = (await client.get(f"/api/clinics/{clinic_id}/slots", params={"date": day})).json()
    assert after_booking[0]["is_available"] is False
    assert after_booking[0]["booked_by"] == "Alice"

    cancelled = await client.patch(f"/api/appointments/{appointment_id}", json={"status": "cancelled"},
                                   headers=headers)
    assert cancelled.json() == {"message": "Appointment updated successfully"}

    after_cancel = (await client.get(f"/api/clinics/{clinic_id}/slots", params={"date": day})).json()
    assert after_cancel[0]["is_available"] is True
    assert after_cancel[0]["booked_by"] is None


async def test_double_booking_rejected(client, booking_body):
    await _book(client, booking_body())
    resp = await client.post("/api/appointments", json=booking_body(patient_name="Second"))
    assert resp.status_code == 400
    assert resp.json() == {"error": "Slot already booked", "kind": "conflict"}


async def test_booking_missing_fields(client, clinic):
    resp = await client.post("/api/appointments", json={"clinic_id": clinic.id})
    assert resp.status_code == 400
    assert resp.json()["kind"] == "validation"
    assert resp.json()["error"].startswith("Missing required fields:")


async def test_booking_bad_slot(client, booking_body):
    resp = await client.post("/api/appointments", json=booking_body(slot_id="missing"))
    assert resp.status_code == 400
    assert resp.json() == {"error": "Invalid slot", "kind": "invalid_slot"}


async def test_booking_with_invalid_token_is_anonymous(client, hospital, auth_headers, booking_body):
    ap_id = await _book(client, booking_body(), headers={"Authorization": "Bearer expired.or.forged"})
    listed = (await client.get("/api/appointments", headers=auth_headers(hospital))).json()
    assert [(a["id"], a["patient_id"], a["patient_name"]) for a in listed] == [(ap_id, None, "Walk In")]


async def test_listing_requires_token(client):
    resp = await client.get("/api/appointments")
    assert resp.status_code == 401
    assert resp.json()["kind"] == "unauthenticated"


async def test_listing_is_role_scoped(client, patient, other_patient, hospital, other_hospital, auth_headers,
                                      booking_body):
    ap_id = await _book(client, booking_body(), headers=auth_headers(patient))

    async def ids(user):
        return [a["id"] for a in (await client.get("/api/appointments", headers=auth_headers(user))).json()]

    assert await ids(patient) == [ap_id]
    assert await ids(hospital) == [ap_id]
    assert await ids(other_patient) == []
    assert await ids(other_hospital) == []

    resp = await client.get("/api/patient/appointments", headers=auth_headers(hospital))
    assert resp.status_code == 403
    resp = await client.get("/api/hospital/appointments", headers=auth_headers(patient))
    assert resp.status_code == 403


async def test_today_listing(client, clinic, hospital, auth_headers):
    today = dt.date.today().isoformat()
    body = {"clinic_id": clinic.id, "appointment_date": today, "appointment_time": "16:00",
            "patient_name": "Late", "patient_phone": "555-0500"}
    await _book(client, body)
    await _book(client, {**body, "appointment_time": "08:30", "patient_name": "Early"})
    await _book(client, {**body, "appointment_date": "2030-01-01", "patient_name": "Later"})

    resp = await client.get("/api/appointments/today", headers=auth_headers(hospital))
    assert [a["patient_name"] for a in resp.json()] == ["Early", "Late"]


async def test_status_update_errors(client, patient, other_patient, auth_headers, booking_body):
    ap_id = await _book(client, booking_body(), headers=auth_headers(patient))

    resp = await client.patch(f"/api/appointments/{ap_id}", json={"status": "done"}, headers=auth_headers(patient))
    assert resp.status_code == 400
    assert resp.json()["kind"] == "validation"

    resp = await client.patch(f"/api/appointments/{ap_id}", json={"status": "cancelled"},
                              headers=auth_headers(other_patient))
    assert resp.status_code == 403

    resp = await client.patch("/api/appointments/missing", json={"status": "cancelled"},
                              headers=auth_headers(patient))
    assert resp.status_code == 404


async def test_delete_restores_slot(client, clinic, slots, hospital, auth_headers, booking_body):
    ap_id = await _book(client, booking_body())
    resp = await client.delete(f"/api/appointments/{ap_id}", headers=auth_headers(hospital))
    assert resp.status_code == 200
    assert resp.json() == {"message": "Appointment deleted successfully"}

    listed = (await client.get(f"/api/clinics/{clinic.id}/slots", params={"date": SLOT_DAY.isoformat()})).json()
    assert listed[0]["is_available"] is True
    assert (await client.get("/api/appointments", headers=auth_headers(hospital))).json() == []


async def test_followups_and_stats(client, hospital, auth_headers, booking_body):
    ap_id = await _book(client, booking_body())
    headers = auth_headers(hospital)

    resp = await client.post(f"/api/appointments/{ap_id}/followup", headers=headers)
    assert resp.status_code == 201
    assert resp.json()["message"] == "Follow-up scheduled successfully"

    resp = await client.post("/api/followups", headers=headers, json={
        "patient_name": "Dana", "patient_phone": "555-0400", "followup_date": "2030-01-02",
        "followup_time": "11:00",
    })
    assert resp.status_code == 201

    followups = (await client.get("/api/followups", headers=headers)).json()
    assert [(f["followup_date"], f["followup_time"]) for f in followups] == [
        ("2030-01-02", "11:00"),
        ((SLOT_DAY + dt.timedelta(days=30)).isoformat(), "09:00"),
    ]

    stats = (await client.get("/api/stats", headers=headers)).json()
    assert stats == {"total": 1, "today": 0, "followups": 2, "pending": 1}


async def test_followup_for_missing_appointment(client, hospital, auth_headers):
    resp = await client.post("/api/appointments/missing/followup", headers=auth_headers(hospital))
    assert resp.status_code == 404


async def test_unknown_route_uses_error_shape(client):
    resp = await client.get("/api/nowhere")
    assert resp.status_code == 404
    assert resp.json() == {"error": "Not Found", "kind": "not_found"}


async def test_health(client):
    resp = await client.get("/api/health")
    assert resp.json() == {"status": "ok", "database": "ok"}


async def test_followup_for_foreign_appointment_denied(client, other_hospital, auth_headers, booking_body):
    ap_id = await _book(client, booking_body())
    headers = auth_headers(other_hospital)

    resp = await client.post(f"/api/appointments/{ap_id}/followup", headers=headers)
    assert resp.status_code == 403
    assert resp.json() == {"error": "Access denied", "kind": "access_denied"}
    assert (await client.get("/api/followups", headers=headers)).json() == []
