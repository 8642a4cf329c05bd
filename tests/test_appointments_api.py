from datetime import date, timedelta

import pytest

DAY = (date.today() + timedelta(days=7)).isoformat()


def booking(**overrides):
    body = {"doctorId": 1, "date": DAY, "time": "10:00", "type": "IN_PERSON"}
    body.update(overrides)
    return body


@pytest.fixture
def booked(client, auth):
    resp = client.post("/appointments", json=booking(), headers=auth(10, "PATIENT"))
    assert resp.status_code == 201, resp.text
    return resp.json()


def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


def test_book_appointment(client, booked):
    assert booked["status"] == "PENDING"
    assert booked["patientId"] == 10
    assert booked["doctorId"] == 1
    assert (booked["date"], booked["time"], booked["type"]) == (DAY, "10:00", "IN_PERSON")


def test_book_accepts_snake_case_fields(client, auth):
    body = {"doctor_id": 1, "appointment_date": DAY, "appointment_time": "9:30", "appointment_type": "telemedicine"}
    resp = client.post("/appointments", json=body, headers=auth(11, "PATIENT"))
    assert resp.status_code == 201
    assert resp.json()["time"] == "09:30"
    assert resp.json()["type"] == "TELEMEDICINE"


def test_double_booking_returns_conflict(client, auth, booked):
    resp = client.post("/appointments", json=booking(type="TELEMEDICINE"), headers=auth(11, "PATIENT"))
    assert resp.status_code == 409
    body = resp.json()
    assert body["success"] is False
    assert body["code"] == "SLOT_CONFLICT"
    assert body["context"]["available_slots_url"] == f"/appointments/available/1/{DAY}"


def test_invalid_type_and_missing_fields_are_bad_requests(client, auth):
    resp = client.post("/appointments", json=booking(type="HOME_VISIT"), headers=auth(10, "PATIENT"))
    assert resp.status_code == 400
    assert resp.json()["code"] == "INVALID_INPUT"

    resp = client.post("/appointments", json={"date": DAY, "time": "10:00"}, headers=auth(10, "PATIENT"))
    assert resp.status_code == 400
    assert resp.json()["code"] == "INVALID_INPUT"


def test_past_date_rejected(client, auth):
    yesterday = (date.today() - timedelta(days=1)).isoformat()
    resp = client.post("/appointments", json=booking(date=yesterday), headers=auth(10, "PATIENT"))
    assert resp.status_code == 400


def test_unknown_doctor(client, auth):
    resp = client.post("/appointments", json=booking(doctorId=404), headers=auth(10, "PATIENT"))
    assert resp.status_code == 404
    assert resp.json()["code"] == "NOT_FOUND"


def test_booking_requires_authentication(client):
    resp = client.post("/appointments", json=booking())
    assert resp.status_code == 401


def test_doctor_cannot_book(client, auth):
    resp = client.post("/appointments", json=booking(patientId=10), headers=auth(1, "DOCTOR"))
    assert resp.status_code == 403


def test_available_slots(client, booked):
    resp = client.get(f"/appointments/available/1/{DAY}")
    assert resp.status_code == 200
    assert resp.json() == ["09:00", "09:30", "10:30", "11:00", "11:30"]

    assert client.get("/appointments/available/99/2024-06-01").status_code == 404
    assert client.get("/appointments/available/1/not-a-date").status_code == 400


def test_doctor_confirms_then_confirming_again_conflicts(client, auth, booked):
    url = f"/appointments/{booked['id']}"
    resp = client.put(url, json={"status": "CONFIRMED"}, headers=auth(1, "DOCTOR"))
    assert resp.status_code == 200
    assert resp.json()["status"] == "CONFIRMED"

    resp = client.put(url, json={"status": "CONFIRMED"}, headers=auth(1, "DOCTOR"))
    assert resp.status_code == 409
    assert resp.json()["code"] == "INVALID_TRANSITION"
    assert resp.json()["context"] == {"current_status": "CONFIRMED", "requested_status": "CONFIRMED"}


def test_patient_cannot_update_status(client, auth, booked):
    resp = client.put(f"/appointments/{booked['id']}", json={"status": "CONFIRMED"}, headers=auth(10, "PATIENT"))
    assert resp.status_code == 403


def test_other_doctor_cannot_read_appointment(client, auth, booked):
    assert client.get(f"/appointments/{booked['id']}", headers=auth(2, "DOCTOR")).status_code == 403
    assert client.get(f"/appointments/{booked['id']}", headers=auth(1, "DOCTOR")).status_code == 200
    assert client.get("/appointments/999", headers=auth(1, "ADMIN")).status_code == 404


def test_cancel_twice(client, auth, booked):
    url = f"/appointments/{booked['id']}/cancel"
    resp = client.post(url, headers=auth(10, "PATIENT"))
    assert resp.status_code == 200
    assert resp.json()["status"] == "CANCELLED"

    resp = client.post(url, headers=auth(10, "PATIENT"))
    assert resp.status_code == 400
    assert resp.json()["code"] == "ALREADY_CANCELLED"


def test_reschedule(client, auth, booked):
    resp = client.post(f"/appointments/{booked['id']}/reschedule", json={"date": DAY, "time": "11:30"}, headers=auth(10, "PATIENT"))
    assert resp.status_code == 200
    assert resp.json()["time"] == "11:30"
    slots = client.get(f"/appointments/available/1/{DAY}").json()
    assert "10:00" in slots and "11:30" not in slots


def test_listings(client, auth, booked):
    assert len(client.get("/appointments/patient/10", headers=auth(10, "PATIENT")).json()) == 1
    assert len(client.get("/appointments/doctor/1", headers=auth(1, "DOCTOR")).json()) == 1
    assert client.get("/appointments/patient/10", headers=auth(11, "PATIENT")).status_code == 403
    assert client.get("/appointments", headers=auth(1, "DOCTOR")).status_code == 403
    assert len(client.get("/appointments", headers=auth(1, "ADMIN")).json()) == 1


def test_notifications_flow(client, auth, booked):
    client.put(f"/appointments/{booked['id']}", json={"status": "CONFIRMED"}, headers=auth(1, "DOCTOR"))
    patient = auth(10, "PATIENT")

    rows = client.get("/notifications", headers=patient).json()
    # newest first
    assert [n["title"] for n in rows] == ["Appointment confirmed", "Appointment requested"]
    assert all(n["referenceId"] == booked["id"] for n in rows)
    assert client.get("/notifications/unread-count", headers=patient).json() == {"count": 2}

    resp = client.put(f"/notifications/{rows[0]['id']}/read", headers=patient)
    assert resp.status_code == 200
    assert resp.json()["isRead"] is True
    assert client.get("/notifications/unread-count", headers=patient).json() == {"count": 1}

    resp = client.put("/notifications/read-all", headers=patient)
    assert resp.json()["updatedCount"] == 1
    assert client.get("/notifications?unread=true", headers=patient).json() == []

    # the doctor only sees the booking request
    doctor_rows = client.get("/notifications", headers=auth(1, "DOCTOR")).json()
    assert [n["title"] for n in doctor_rows] == ["New appointment request"]


def test_cannot_read_someone_elses_notification(client, auth, booked):
    rows = client.get("/notifications", headers=auth(10, "PATIENT")).json()
    resp = client.put(f"/notifications/{rows[0]['id']}/read", headers=auth(11, "PATIENT"))
    assert resp.status_code == 404


def test_admin_marks_a_patients_notification_read(client, auth, booked):
    patient = auth(10, "PATIENT")
    note_id = client.get("/notifications", headers=patient).json()[0]["id"]

    resp = client.put(f"/notifications/{note_id}/read", headers=auth(1, "ADMIN"))
    assert resp.status_code == 200
    assert resp.json()["isRead"] is True
    assert resp.json()["userId"] == 10
    assert client.get("/notifications/unread-count", headers=patient).json() == {"count": 0}


def test_doctor_schedule_date_range(client, auth, booked):
    later = (date.today() + timedelta(days=9)).isoformat()
    client.post("/appointments", json=booking(date=later), headers=auth(11, "PATIENT"))
    doctor = auth(1, "DOCTOR")

    everything = client.get("/appointments/doctor/1", headers=doctor).json()
    assert [a["date"] for a in everything] == [DAY, later]

    resp = client.get(f"/appointments/doctor/1?start={later}&end={later}", headers=doctor)
    assert resp.status_code == 200
    assert [a["date"] for a in resp.json()] == [later]
    assert client.get(f"/appointments/doctor/1?end={DAY}", headers=doctor).json()[0]["id"] == booked["id"]

    resp = client.get(f"/appointments/doctor/1?start={later}&end={DAY}", headers=doctor)
    assert resp.status_code == 400
    assert resp.json()["code"] == "INVALID_INPUT"
