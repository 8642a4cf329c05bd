from dataclasses import dataclass
from datetime import date, datetime

from carebook.application.ports.appointments_repo import AppointmentDto
from carebook.application.ports.directory_repo import DoctorDto
from carebook.application.ports.identity import Role
from carebook.application.services.notification_emitter import (
    FALLBACK_DOCTOR_NAME,
    NotificationEmitter,
    Participants,
    build_notifications,
    recipients_for,
)
from carebook.application.services.state_machine import AppointmentEvent


def make_appt(**overrides):
    fields = dict(
        id=7,
        patient_id=10,
        doctor_id=1,
        appointment_date=date(2024, 6, 1),
        appointment_time="10:00",
        appointment_type="IN_PERSON",
        status="PENDING",
        notes="",
        created_at=datetime(2024, 5, 1, 8, 0),
        updated_at=datetime(2024, 5, 1, 8, 0),
    )
    fields.update(overrides)
    return AppointmentDto(**fields)


def test_policy_recipients():
    assert set(recipients_for(AppointmentEvent.CREATED)) == {Role.PATIENT, Role.DOCTOR}
    assert recipients_for(AppointmentEvent.CONFIRMED) == [Role.PATIENT]
    assert set(recipients_for(AppointmentEvent.CANCELLED)) == {Role.PATIENT, Role.DOCTOR}
    assert recipients_for(AppointmentEvent.COMPLETED) == [Role.PATIENT]
    assert set(recipients_for(AppointmentEvent.RESCHEDULED)) == {Role.PATIENT, Role.DOCTOR}


def test_confirmation_goes_to_the_patient_only():
    drafts = build_notifications(AppointmentEvent.CONFIRMED, make_appt(status="CONFIRMED"), Participants("Asha", "Dr. Mehta"))
    assert len(drafts) == 1
    draft = drafts[0]
    assert (draft.user_id, draft.recipient_role) == (10, "PATIENT")
    assert draft.reference_id == 7
    assert draft.notification_type == "APPOINTMENT"
    assert draft.message == "Dr. Mehta confirmed your appointment on 2024-06-01 at 10:00."


def test_cancellation_names_who_cancelled():
    drafts = build_notifications(AppointmentEvent.CANCELLED, make_appt(), Participants("Asha", "Dr. Mehta"), cancelled_by=" by the patient")
    by_role = {d.recipient_role: d for d in drafts}
    assert by_role["DOCTOR"].user_id == 1
    assert by_role["DOCTOR"].message.endswith("was cancelled by the patient.")
    assert "Dr. Mehta" in by_role["PATIENT"].message


def test_missing_template_values_degrade_to_a_generic_message():
    # no previous_date/previous_time supplied
    drafts = build_notifications(AppointmentEvent.RESCHEDULED, make_appt())
    assert len(drafts) == 2
    for draft in drafts:
        assert draft.title == "Appointment rescheduled"
        assert draft.message == "Appointment #7 was updated: rescheduled."


class RecordingNotifications:
    def __init__(self):
        self.rows = []

    def add(self, draft):
        self.rows.append(draft)
        return draft


class BrokenDirectory:
    def get_patient(self, patient_id):
        return None

    def get_doctor(self, doctor_id):
        raise ConnectionError("profile service unavailable")


def test_emitter_falls_back_to_generic_names_when_lookup_fails():
    sink = RecordingNotifications()
    written = NotificationEmitter(sink, BrokenDirectory()).emit(AppointmentEvent.CREATED, make_appt(appointment_type="TELEMEDICINE"))
    assert len(written) == 2
    patient_msg = next(n.message for n in sink.rows if n.recipient_role == "PATIENT")
    doctor_msg = next(n.message for n in sink.rows if n.recipient_role == "DOCTOR")
    assert FALLBACK_DOCTOR_NAME in patient_msg
    assert "telemedicine" in patient_msg
    assert "your patient" in doctor_msg


@dataclass
class StaticDirectory:
    doctor: DoctorDto

    def get_doctor(self, doctor_id):
        return self.doctor

    def get_patient(self, patient_id):
        return None


def test_emitter_uses_directory_names():
    sink = RecordingNotifications()
    directory = StaticDirectory(DoctorDto(id=1, name="Dr. Mehta", specialization="Cardiology", working_hours=None))
    NotificationEmitter(sink, directory).emit(AppointmentEvent.COMPLETED, make_appt(status="COMPLETED"))
    assert len(sink.rows) == 1
    assert sink.rows[0].message.startswith("Your appointment with Dr. Mehta")
