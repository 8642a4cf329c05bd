"""
Appointment notifications

Which party hears about which event is declared once in NOTIFICATION_POLICY;
the emitter renders those templates and writes one row per recipient through
the caller's unit of work, so a notification exists exactly when the
appointment change that caused it was committed.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from ..ports.appointments_repo import AppointmentDto
from ..ports.directory_repo import DirectoryRepository
from ..ports.identity import Role
from ..ports.notifications_repo import NotificationDraft, NotificationDto, NotificationsRepository
from .state_machine import AppointmentEvent

logger = logging.getLogger(__name__)

NOTIFICATION_TYPE = "APPOINTMENT"
FALLBACK_DOCTOR_NAME = "your doctor"
FALLBACK_PATIENT_NAME = "your patient"

TYPE_LABELS = {
    "IN_PERSON": "in-person",
    "TELEMEDICINE": "telemedicine",
}


@dataclass(frozen=True)
class MessageTemplate:
    title: str
    body: str


@dataclass(frozen=True)
class Participants:
    patient_name: str = FALLBACK_PATIENT_NAME
    doctor_name: str = FALLBACK_DOCTOR_NAME


NOTIFICATION_POLICY: Dict[AppointmentEvent, Dict[Role, MessageTemplate]] = {
    AppointmentEvent.CREATED: {
        Role.DOCTOR: MessageTemplate(
            "New appointment request",
            "New {type_label} appointment request from {patient_name} on {date} at {time}.",
        ),
        Role.PATIENT: MessageTemplate(
            "Appointment requested",
            "Your {type_label} appointment with {doctor_name} on {date} at {time} is awaiting confirmation.",
        ),
    },
    AppointmentEvent.CONFIRMED: {
        Role.PATIENT: MessageTemplate(
            "Appointment confirmed",
            "{doctor_name} confirmed your appointment on {date} at {time}.",
        ),
    },
    AppointmentEvent.CANCELLED: {
        Role.PATIENT: MessageTemplate(
            "Appointment cancelled",
            "Your appointment with {doctor_name} on {date} at {time} was cancelled{cancelled_by}.",
        ),
        Role.DOCTOR: MessageTemplate(
            "Appointment cancelled",
            "The appointment with {patient_name} on {date} at {time} was cancelled{cancelled_by}.",
        ),
    },
    AppointmentEvent.COMPLETED: {
        Role.PATIENT: MessageTemplate(
            "Appointment completed",
            "Your appointment with {doctor_name} on {date} at {time} has been completed.",
        ),
    },
    AppointmentEvent.RESCHEDULED: {
        Role.PATIENT: MessageTemplate(
            "Appointment rescheduled",
            "Your appointment with {doctor_name} was moved from {previous_date} at {previous_time} to {date} at {time}.",
        ),
        Role.DOCTOR: MessageTemplate(
            "Appointment rescheduled",
            "The appointment with {patient_name} was moved from {previous_date} at {previous_time} to {date} at {time}.",
        ),
    },
}

GENERIC_TITLES = {
    AppointmentEvent.CREATED: "Appointment requested",
    AppointmentEvent.CONFIRMED: "Appointment confirmed",
    AppointmentEvent.CANCELLED: "Appointment cancelled",
    AppointmentEvent.COMPLETED: "Appointment completed",
    AppointmentEvent.RESCHEDULED: "Appointment rescheduled",
}


def cancelled_by_phrase(actor_role: Optional[str]) -> str:
    if not actor_role:
        return ""
    role = str(getattr(actor_role, "value", actor_role)).upper()
    if role == Role.PATIENT.value:
        return " by the patient"
    if role == Role.DOCTOR.value:
        return " by the doctor"
    if role == Role.ADMIN.value:
        return " by the clinic"
    return ""


def recipients_for(event: AppointmentEvent) -> List[Role]:
    return list(NOTIFICATION_POLICY.get(event, {}).keys())


def _recipient_id(appointment: AppointmentDto, role: Role) -> int:
    return appointment.patient_id if role == Role.PATIENT else appointment.doctor_id


def generic_message(event: AppointmentEvent, appointment: AppointmentDto) -> str:
    return f"Appointment #{appointment.id} was updated: {event.value.lower()}."


def render(template: MessageTemplate, event: AppointmentEvent, appointment: AppointmentDto, participants: Participants, context: Dict[str, Any]) -> MessageTemplate:
    values = {
        "patient_name": participants.patient_name,
        "doctor_name": participants.doctor_name,
        "date": appointment.appointment_date,
        "time": appointment.appointment_time,
        "type_label": TYPE_LABELS.get(appointment.appointment_type, "scheduled"),
        "cancelled_by": "",
    }
    values.update(context)
    try:
        return MessageTemplate(template.title.format(**values), template.body.format(**values))
    except (KeyError, IndexError, ValueError, AttributeError) as e:
        logger.warning(f"Falling back to generic {event.value} message for appointment {appointment.id}: {e}")
        return MessageTemplate(GENERIC_TITLES.get(event, "Appointment update"), generic_message(event, appointment))


def build_notifications(event: AppointmentEvent, appointment: AppointmentDto, participants: Optional[Participants] = None, **context: Any) -> List[NotificationDraft]:
    """Render the policy for ``event`` into unsaved notification rows."""
    participants = participants or Participants()
    drafts = []
    for role, template in NOTIFICATION_POLICY.get(event, {}).items():
        rendered = render(template, event, appointment, participants, context)
        drafts.append(NotificationDraft(
            user_id=_recipient_id(appointment, role),
            recipient_role=role.value,
            title=rendered.title,
            message=rendered.body,
            notification_type=NOTIFICATION_TYPE,
            reference_id=appointment.id,
        ))
    return drafts


class NotificationEmitter:
    def __init__(self, notifications: NotificationsRepository, directory: Optional[DirectoryRepository] = None):
        self.notifications = notifications
        self.directory = directory

    def resolve_participants(self, appointment: AppointmentDto) -> Participants:
        """Display names for both parties; lookups never block a transition."""
        if self.directory is None:
            return Participants()
        patient_name = FALLBACK_PATIENT_NAME
        doctor_name = FALLBACK_DOCTOR_NAME
        try:
            patient = self.directory.get_patient(appointment.patient_id)
            if patient and patient.name:
                patient_name = patient.name
        except Exception as e:
            logger.warning(f"Could not resolve patient {appointment.patient_id} name: {e}")
        try:
            doctor = self.directory.get_doctor(appointment.doctor_id)
            if doctor and doctor.name:
                doctor_name = doctor.name
        except Exception as e:
            logger.warning(f"Could not resolve doctor {appointment.doctor_id} name: {e}")
        return Participants(patient_name=patient_name, doctor_name=doctor_name)

    def emit(self, event: AppointmentEvent, appointment: AppointmentDto, participants: Optional[Participants] = None, **context: Any) -> List[NotificationDto]:
        if participants is None:
            participants = self.resolve_participants(appointment)
        written = [self.notifications.add(draft) for draft in build_notifications(event, appointment, participants, **context)]
        logger.info(f"Emitted {len(written)} {event.value} notification(s) for appointment {appointment.id}")
        return written
