import logging
from dataclasses import dataclass
from datetime import date
from typing import Callable, List, Optional, Union

from ...exceptions import AlreadyCancelled, Forbidden, InvalidInput, InvalidTransition, NotFound, SlotConflict
from ..ports.appointments_repo import AppointmentDto
from ..ports.audit_logger import AuditLogger
from ..ports.identity import Actor, Role
from ..ports.unit_of_work import UnitOfWork
from .availability import (
    DEFAULT_GRANULARITY_MINUTES,
    DEFAULT_WORKING_HOURS,
    TimeLike,
    compute_free_slots,
    normalize_time,
    parse_date,
    resolve_working_hours,
)
from .notification_emitter import NotificationEmitter, Participants, cancelled_by_phrase
from .state_machine import (
    ACTIVE_STATUSES,
    AppointmentEvent,
    AppointmentStatus,
    parse_status,
    parse_type,
    transition,
)

logger = logging.getLogger(__name__)

DateLike = Union[str, date]


@dataclass
class AppointmentsService:
    uow_factory: Callable[..., UnitOfWork]
    audit: Optional[AuditLogger] = None
    default_working_hours: str = DEFAULT_WORKING_HOURS
    slot_granularity_minutes: int = DEFAULT_GRANULARITY_MINUTES
    reject_past_dates: bool = True
    today: Callable[[], date] = date.today

    # ------------------------------------------------------------------
    # Booking
    # ------------------------------------------------------------------

    def create(self, patient_id: int, doctor_id: int, appointment_date: DateLike, appointment_time: TimeLike, appointment_type: str, notes: Optional[str] = "", actor: Optional[Actor] = None) -> AppointmentDto:
        appt_type = parse_type(appointment_type)
        slot_date = self._parse_booking_date(appointment_date)
        slot_time = normalize_time(appointment_time)

        if actor is not None and not actor.is_admin:
            if actor.role != Role.PATIENT or actor.user_id != patient_id:
                raise Forbidden("You can only create appointments for yourself")

        with self.uow_factory() as uow:
            doctor = uow.directory.get_doctor(doctor_id)
            if not doctor:
                raise NotFound("Doctor not found", doctor_id=doctor_id)
            patient = uow.directory.get_patient(patient_id)
            if not patient:
                raise NotFound("Patient not found", patient_id=patient_id)

            if uow.appointments.find_conflict(doctor_id, slot_date, slot_time) is not None:
                raise SlotConflict(doctor_id, slot_date, slot_time)

            appt = uow.appointments.add(patient_id, doctor_id, slot_date, slot_time, appt_type.value, notes or "")
            NotificationEmitter(uow.notifications, uow.directory).emit(
                AppointmentEvent.CREATED,
                appt,
                Participants(patient_name=patient.name, doctor_name=doctor.name),
            )
            uow.commit()

        logger.info(f"Appointment {appt.id} booked for doctor {doctor_id} on {slot_date} at {slot_time}")
        self._audit("appointment.created", appt, actor, {"date": str(slot_date), "time": slot_time})
        return appt

    def reschedule(self, appointment_id: int, new_date: DateLike, new_time: TimeLike, actor: Optional[Actor] = None) -> AppointmentDto:
        slot_date = self._parse_booking_date(new_date)
        slot_time = normalize_time(new_time)

        with self.uow_factory() as uow:
            appt = self._load_for_update(uow, appointment_id)
            self._authorize(appt, actor)
            if AppointmentStatus(appt.status) not in ACTIVE_STATUSES:
                raise InvalidTransition(
                    appt.status,
                    AppointmentEvent.RESCHEDULED.value,
                    detail=f"Only pending or confirmed appointments can be rescheduled (current status: {appt.status})",
                )

            # always re-check, even when only the time changes
            if uow.appointments.find_conflict(appt.doctor_id, slot_date, slot_time, exclude_id=appt.id) is not None:
                raise SlotConflict(appt.doctor_id, slot_date, slot_time)

            updated = uow.appointments.set_schedule(appt.id, slot_date, slot_time)
            NotificationEmitter(uow.notifications, uow.directory).emit(
                AppointmentEvent.RESCHEDULED,
                updated,
                previous_date=appt.appointment_date,
                previous_time=appt.appointment_time,
            )
            uow.commit()

        logger.info(f"Appointment {appointment_id} moved to {slot_date} at {slot_time}")
        self._audit("appointment.rescheduled", updated, actor, {
            "from": f"{appt.appointment_date} {appt.appointment_time}",
            "to": f"{slot_date} {slot_time}",
        })
        return updated

    # ------------------------------------------------------------------
    # Status changes
    # ------------------------------------------------------------------

    def update(self, appointment_id: int, status: Optional[str] = None, notes: Optional[str] = None, actor: Optional[Actor] = None) -> AppointmentDto:
        """Change status and/or notes in one transaction."""
        target = parse_status(status) if status is not None else None
        if target is None and notes is None:
            raise InvalidInput("Nothing to update: provide a status or notes")
        if actor is not None and actor.role == Role.PATIENT:
            raise Forbidden("Patients cannot update appointments; use cancel or reschedule")

        with self.uow_factory() as uow:
            appt = self._load_for_update(uow, appointment_id)
            self._authorize(appt, actor)
            previous_status = appt.status

            if notes is not None:
                appt = uow.appointments.set_notes(appt.id, notes)
            if target is not None:
                appt = self._apply_status(uow, appt, target, actor.role if actor else None)
            uow.commit()

        if target is not None:
            logger.info(f"Appointment {appointment_id} status {previous_status} -> {appt.status}")
            self._audit("appointment.status_changed", appt, actor, {"from": previous_status, "to": appt.status})
        return appt

    def update_status(self, appointment_id: int, new_status: str, actor: Optional[Actor] = None) -> AppointmentDto:
        return self.update(appointment_id, status=new_status, actor=actor)

    def cancel(self, appointment_id: int, actor_role: Optional[str] = None, actor: Optional[Actor] = None) -> AppointmentDto:
        if actor_role is None and actor is not None:
            actor_role = actor.role.value

        with self.uow_factory() as uow:
            appt = self._load_for_update(uow, appointment_id)
            self._authorize(appt, actor)
            if appt.status == AppointmentStatus.CANCELLED.value:
                raise AlreadyCancelled("Appointment is already cancelled", appointment_id=appointment_id)
            previous_status = appt.status
            appt = self._apply_status(uow, appt, AppointmentStatus.CANCELLED, actor_role)
            uow.commit()

        logger.info(f"Appointment {appointment_id} cancelled by {actor_role or 'system'}")
        self._audit("appointment.cancelled", appt, actor, {"from": previous_status, "actor_role": actor_role})
        return appt

    def _apply_status(self, uow: UnitOfWork, appt: AppointmentDto, target: AppointmentStatus, actor_role: Optional[str]) -> AppointmentDto:
        event = transition(appt.status, target)
        updated = uow.appointments.set_status(appt.id, target.value)
        context = {}
        if event == AppointmentEvent.CANCELLED:
            context["cancelled_by"] = cancelled_by_phrase(actor_role)
        NotificationEmitter(uow.notifications, uow.directory).emit(event, updated, **context)
        return updated

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_by_id(self, appointment_id: int, actor: Optional[Actor] = None) -> AppointmentDto:
        with self.uow_factory(read_only=True) as uow:
            appt = uow.appointments.get(appointment_id)
        if not appt:
            raise NotFound("Appointment not found", appointment_id=appointment_id)
        self._authorize(appt, actor)
        return appt

    def available_slots(self, doctor_id: int, slot_date: DateLike) -> List[str]:
        day = parse_date(slot_date)
        with self.uow_factory(read_only=True) as uow:
            doctor = uow.directory.get_doctor(doctor_id)
            if not doctor:
                raise NotFound("Doctor not found", doctor_id=doctor_id)
            booked = uow.appointments.booked_times(doctor_id, day)
        hours = resolve_working_hours(doctor.working_hours, default=self.default_working_hours)
        return compute_free_slots(hours, self.slot_granularity_minutes, booked)

    def list_for_patient(self, patient_id: int, actor: Optional[Actor] = None) -> List[AppointmentDto]:
        if actor is not None and not actor.is_admin and (actor.role != Role.PATIENT or actor.user_id != patient_id):
            raise Forbidden("Unauthorized to access these appointments")
        with self.uow_factory(read_only=True) as uow:
            return uow.appointments.list_for_patient(patient_id)

    def list_for_doctor(self, doctor_id: int, start: Optional[DateLike] = None, end: Optional[DateLike] = None, actor: Optional[Actor] = None) -> List[AppointmentDto]:
        """A doctor's schedule, optionally limited to ``start..end`` (both inclusive)."""
        if actor is not None and not actor.is_admin and (actor.role != Role.DOCTOR or actor.user_id != doctor_id):
            raise Forbidden("Unauthorized to access these appointments")
        start_date = parse_date(start) if start is not None else None
        end_date = parse_date(end) if end is not None else None
        if start_date and end_date and start_date > end_date:
            raise InvalidInput("start must not be after end", start=str(start_date), end=str(end_date))
        with self.uow_factory(read_only=True) as uow:
            return uow.appointments.list_for_doctor(doctor_id, start=start_date, end=end_date)

    def list_all(self, limit: int = 100, offset: int = 0, actor: Optional[Actor] = None) -> List[AppointmentDto]:
        if actor is not None and not actor.is_admin:
            raise Forbidden("Only administrators can list all appointments")
        with self.uow_factory(read_only=True) as uow:
            return uow.appointments.list_all(limit=limit, offset=offset)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _parse_booking_date(self, value: DateLike) -> date:
        slot_date = parse_date(value)
        if self.reject_past_dates and slot_date < self.today():
            raise InvalidInput("Appointment date cannot be in the past", date=str(slot_date))
        return slot_date

    def _load_for_update(self, uow: UnitOfWork, appointment_id: int) -> AppointmentDto:
        appt = uow.appointments.get(appointment_id, for_update=True)
        if not appt:
            raise NotFound("Appointment not found", appointment_id=appointment_id)
        return appt

    def _authorize(self, appt: AppointmentDto, actor: Optional[Actor]) -> None:
        if actor is None or actor.is_admin:
            return
        if actor.role == Role.PATIENT and actor.user_id == appt.patient_id:
            return
        if actor.role == Role.DOCTOR and actor.user_id == appt.doctor_id:
            return
        raise Forbidden("Unauthorized to access this appointment", appointment_id=appt.id)

    def _audit(self, action: str, appt: AppointmentDto, actor: Optional[Actor], details: dict) -> None:
        if self.audit is None:
            return
        self.audit.log(
            action,
            appt.id,
            actor_id=actor.user_id if actor else None,
            actor_role=actor.role.value if actor else None,
            details=details,
        )
